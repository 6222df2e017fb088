from .sessions import router as sessions_router
from .stats import router as stats_router
from .quick import router as quick_router
from .avatars import router as avatars_router

__all__ = ["sessions_router", "stats_router", "quick_router", "avatars_router"]
