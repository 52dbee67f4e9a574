"""Route modules."""

from .admin import router as admin_router
from .auth import router as auth_router
from .folktales import router as folktales_router

__all__ = ["admin_router", "auth_router", "folktales_router"]
