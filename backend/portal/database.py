"""
Database Engine & Session Management
SQLAlchemy setup backing the Student Record Store adapter.
"""
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from portal.config import get_settings

settings = get_settings()

Base = declarative_base()


def store_connect_args(url: str, timeout: float) -> dict:
    """Driver arguments bounding connects and lock waits by `timeout` seconds."""
    if url.startswith("sqlite"):
        # check_same_thread: required for SQLite under the FastAPI threadpool
        return {"check_same_thread": False, "timeout": timeout}

    connect_args = {"connect_timeout": max(1, int(timeout))}
    if url.startswith("postgresql"):
        ms = int(timeout * 1000)
        connect_args["options"] = f"-c lock_timeout={ms} -c statement_timeout={ms}"
    return connect_args


def create_store_engine(url: str, timeout: float, echo: bool = False, **kwargs) -> Engine:
    """Build an engine whose connects and lock waits are bounded by `timeout`."""
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_timeout", timeout)
    return create_engine(url, connect_args=store_connect_args(url, timeout), echo=echo, **kwargs)


if settings.DATABASE_URL.startswith("sqlite:///"):
    # Ensure data directory exists
    os.makedirs(os.path.dirname(settings.DATABASE_URL.replace("sqlite:///", "")) or ".", exist_ok=True)

engine = create_store_engine(
    settings.DATABASE_URL,
    settings.STORE_TIMEOUT_SECONDS,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine):
    """Create all tables. Called once at application startup."""
    from portal.models import student as _student_model  # noqa: F401
    from portal.models import user as _user_model        # noqa: F401

    Base.metadata.create_all(bind=bind)
