from fastapi import APIRouter

from listing_hub.api.v1.endpoints.health import router as health_router
from listing_hub.api.v1.endpoints.listings import router as listings_router
from listing_hub.api.v1.endpoints.moderation import router as moderation_router
from listing_hub.api.v1.endpoints.me import router as me_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(listings_router, tags=["listings"])
router.include_router(moderation_router, tags=["moderation"])
router.include_router(me_router, tags=["me"])
