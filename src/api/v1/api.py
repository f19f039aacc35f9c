from fastapi import APIRouter

from .health import router as health_router
from .jargons import router as jargons_router
from .recognition import router as recognition_router


api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(recognition_router)
api_router.include_router(jargons_router)
