# Import all routes
from .auth import router as auth_router
from .events import router as events_router
from .health import router as health_router

# All routers that should be included in main app
__all__ = [
    "auth_router",
    "events_router",
    "health_router",
]
