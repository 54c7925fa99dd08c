from .health import router as health_router
from .loops import router as loops_router

__all__ = ["health_router", "loops_router"]
