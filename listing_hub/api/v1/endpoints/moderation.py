from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.db import get_db
from listing_hub.schemas.common import ErrorResponse
from listing_hub.schemas.moderation import RejectIn, StatusUpdateIn, StatusUpdateOut
from listing_hub.services.identity import Principal, require_admin
from listing_hub.services.moderation import ModerationResult, ModerationService
from listing_hub.services.notifications import Notifier, get_notifier

router = APIRouter(prefix="/admin")

_ERRORS = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _out(result: ModerationResult) -> StatusUpdateOut:
    return StatusUpdateOut(
        listing_id=result.listing_id,
        status=result.status,
        previous_status=result.previous_status,
        changed=result.changed,
        message=result.message,
    )


def _service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> ModerationService:
    return ModerationService(db, notifier=notifier)


@router.put("/listings/{listing_id}/status", response_model=StatusUpdateOut, responses=_ERRORS)
async def update_status(
    listing_id: str,
    payload: StatusUpdateIn,
    admin: Principal = Depends(require_admin),
    service: ModerationService = Depends(_service),
) -> StatusUpdateOut:
    return _out(await service.update_status(admin, listing_id, payload.status, reason=payload.reason))


@router.post("/listings/{listing_id}/approve", response_model=StatusUpdateOut, responses=_ERRORS)
async def approve(
    listing_id: str,
    admin: Principal = Depends(require_admin),
    service: ModerationService = Depends(_service),
) -> StatusUpdateOut:
    return _out(await service.approve(admin, listing_id))


@router.post("/listings/{listing_id}/reject", response_model=StatusUpdateOut, responses=_ERRORS)
async def reject(
    listing_id: str,
    payload: RejectIn | None = None,
    admin: Principal = Depends(require_admin),
    service: ModerationService = Depends(_service),
) -> StatusUpdateOut:
    return _out(await service.reject(admin, listing_id, payload.reason if payload else None))


@router.delete("/listings/{listing_id}", responses=_ERRORS)
async def delete_listing(
    listing_id: str,
    admin: Principal = Depends(require_admin),
    service: ModerationService = Depends(_service),
) -> dict:
    await service.delete_listing(admin, listing_id)
    return {"status": "deleted", "listing_id": listing_id}
