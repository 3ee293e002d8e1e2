"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.identity import router as identity_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.site import router as site_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(site_router)
router.include_router(identity_router)
