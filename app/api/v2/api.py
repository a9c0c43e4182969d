from fastapi import APIRouter
from .endpoints import (
    ai_router,
    path_router,
    achievement_router,
    stats_router,
)

api_router = APIRouter()

api_router.include_router(ai_router.router, prefix="/ai", tags=["Generation"])
api_router.include_router(path_router.router, prefix="/paths", tags=["Paths"])
api_router.include_router(achievement_router.router, prefix="/achievements", tags=["Achievements"])
api_router.include_router(stats_router.router, prefix="/stats", tags=["Stats"])
