from floris.api.health import router as health_router
from floris.api.share import router as share_router
from floris.api.user import router as user_router

__all__ = [
    "health_router",
    "share_router",
    "user_router",
]
