from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.db import get_db
from listing_hub.schemas.common import ErrorResponse
from listing_hub.schemas.listing import ImageLinkage, ListingMediaOut, ListingOut, ListingSubmitOut
from listing_hub.services.identity import Principal, get_principal
from listing_hub.services.listings import get_visible_listing, list_owned
from listing_hub.services.notifications import Notifier, get_notifier
from listing_hub.services.storage import ObjectStore, get_object_store
from listing_hub.services.submission import SubmissionPipeline

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


@router.post(
    "/listings",
    response_model=ListingSubmitOut,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def submit_listing(
    request: Request,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    notifier: Notifier = Depends(get_notifier),
) -> ListingSubmitOut:
    pipeline = SubmissionPipeline(db, store=store, notifier=notifier)
    result = await pipeline.submit(principal, payload, client_ip=_client_ip(request))

    return ListingSubmitOut(
        listing_id=result.listing_id,
        status=result.status,
        message=result.message,
        owner_id=result.owner_id,
        created_by=result.created_by,
        delegated=result.delegated,
        tenant_id=result.tenant_id,
        images=ImageLinkage(attempted=result.attempted, linked=result.linked),
        degraded_fields=result.degraded_fields,
    )


@router.get("/listings", response_model=list[ListingOut])
async def my_listings(
    status: str | None = None,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> list[ListingOut]:
    rows = await list_owned(db, principal, status=status)
    return [ListingOut.model_validate(r) for r in rows]


@router.get("/listings/{listing_id}", response_model=ListingOut, responses={404: {"model": ErrorResponse}})
async def get_listing(
    listing_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing, media = await get_visible_listing(db, principal, listing_id)
    out = ListingOut.model_validate(listing)
    out.media = [ListingMediaOut.model_validate(m) for m in media]
    return out
