"""
Coaching Portal — FastAPI Application Entry Point

Aggregates all routers, configures middleware and error handlers,
and initializes the student store on startup.
"""
import logging
import time
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portal.config import get_settings
from portal.database import init_db
from portal.dependencies import get_gateway, get_identity_oracle, get_store
from portal.errors import StoreError
from portal.logging_config import configure_logging
from portal.routes import payment_router, teacher_router, user_router, student_router
from portal.services.student_store import StudentRecordStore

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger("portal.main")

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Authenticated settlement backend for the coaching-center portal. "
        "Covers bearer-token identity checks, teacher role gating, batch "
        "attendance marking, and Razorpay order creation with signature-verified settlement."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Initialize store tables and log boot info. Secrets are reported by presence only."""
    init_db()

    boot_msg = (
        f"\n{'='*60}\n"
        f"  {settings.APP_NAME} v{settings.APP_VERSION}\n"
        f"  TIME: {datetime.now().isoformat()}\n"
        f"  IDENTITY ORACLE: {settings.IDENTITY_ORACLE}\n"
        f"  GATEWAY SECRET: {'[OK] Loaded' if settings.RAZORPAY_KEY_SECRET else '[!] Missing'}\n"
        f"  DEBUG: {settings.DEBUG}\n"
        f"{'='*60}"
    )
    logger.info(boot_msg)


@app.on_event("shutdown")
def on_shutdown():
    """Close outbound HTTP clients that were actually created."""
    for factory in (get_identity_oracle, get_gateway):
        if factory.cache_info().currsize:
            close = getattr(factory(), "close", None)
            if close is not None:
                close()


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── Error Handlers ──────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def malformed_body(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Malformed request body", "errors": jsonable_errors(exc)},
    )


@app.exception_handler(StoreError)
async def store_failure(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(payment_router)
app.include_router(teacher_router)
app.include_router(user_router)
app.include_router(student_router)


@app.get("/health", tags=["Health"])
def deep_health(store: StudentRecordStore = Depends(get_store)):
    """Detailed health check including store connectivity."""
    db_ok = store.ping()

    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "identity_oracle": settings.IDENTITY_ORACLE,
        "gateway_configured": bool(settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET),
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
        "version": settings.APP_VERSION,
    }
