from fastapi import APIRouter
from app.api.endpoints import health_router, loops_router

router = APIRouter(prefix="/api/v1")

router.include_router(health_router, prefix="/health", tags=["health"])
router.include_router(loops_router, prefix="/loops", tags=["loops"])
