from portal.routes.payment import router as payment_router
from portal.routes.teacher import router as teacher_router
from portal.routes.user import router as user_router
from portal.routes.student import router as student_router

__all__ = ["payment_router", "teacher_router", "user_router", "student_router"]
