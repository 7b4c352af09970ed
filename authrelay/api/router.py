"""Main API routers."""

from fastapi import APIRouter

from authrelay.api.auth import router as auth_router
from authrelay.api.user import router as user_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(user_router, prefix="/api", tags=["user"])
