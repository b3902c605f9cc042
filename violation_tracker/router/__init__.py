from violation_tracker.router.api.auth import router as auth_router
from violation_tracker.router.api.students import router as students_router
from violation_tracker.router.api.violations import router as violations_router
from violation_tracker.router.api.whatsapp import router as whatsapp_router
from violation_tracker.router.api.photos import router as photos_router
__all__ = [
    "auth_router",
    "students_router",
    "violations_router",
    "whatsapp_router",
    "photos_router",
]
