from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.errors import NotFoundError
from listing_hub.models.listing import Listing
from listing_hub.models.listing_media import ListingMedia
from listing_hub.services.identity import Principal
from listing_hub.services.listing_state import ListingStatus


def can_view(principal: Principal, listing: Listing) -> bool:
    if principal.account_id in (listing.owner_id, listing.created_by):
        return True
    if principal.is_super_admin:
        return True
    if listing.tenant_id != principal.tenant_id:
        return False
    return principal.is_admin or listing.status == ListingStatus.ACTIVE.value


async def get_visible_listing(db: AsyncSession, principal: Principal, listing_id: str) -> tuple[Listing, list[ListingMedia]]:
    listing = (await db.execute(select(Listing).where(Listing.id == listing_id))).scalar_one_or_none()
    # Invisible and missing look the same to the caller
    if listing is None or not can_view(principal, listing):
        raise NotFoundError("Listing not found", code="listing_not_found")

    media = (await db.execute(
        select(ListingMedia)
        .where(ListingMedia.listing_id == listing.id)
        .order_by(ListingMedia.display_order)
    )).scalars().all()
    return listing, list(media)


async def list_owned(db: AsyncSession, principal: Principal, *, status: str | None = None) -> list[Listing]:
    stmt = select(Listing).where(Listing.owner_id == principal.account_id)
    if status:
        stmt = stmt.where(Listing.status == status)
    stmt = stmt.order_by(Listing.created_at.desc(), Listing.id.desc())
    return list((await db.execute(stmt)).scalars().all())
