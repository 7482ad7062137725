"""API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import claims

api_router = APIRouter()

api_router.include_router(claims.router, prefix="/claims", tags=["claims"])
