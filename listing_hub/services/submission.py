from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.services.commit import ListingCommitSaga
from listing_hub.services.delegation import DelegationContext, resolve_delegation
from listing_hub.services.identity import Principal
from listing_hub.services.listing_state import ListingStatus, can_attach_video, initial_status, listed_by_for
from listing_hub.services.media_ingest import MediaBatch, MediaIngestor
from listing_hub.services.normalizer import CanonicalListing, normalize_submission
from listing_hub.services.notifications import ListingNotification, Notifier, notify_best_effort
from listing_hub.services.quota import QuotaDecision, enforce_quota, lock_owner_quota
from listing_hub.services.storage import ObjectStore
from listing_hub.services.tenancy import route_site

log = logging.getLogger(__name__)

STATUS_MESSAGES = {
    ListingStatus.DRAFT: "Property saved as draft",
    ListingStatus.PENDING: "Property submitted for review",
    ListingStatus.ACTIVE: "Property published",
}


@dataclass(frozen=True)
class SubmissionResult:
    listing_id: str
    status: str
    message: str
    tenant_id: str
    owner_id: str
    created_by: str
    delegated: bool
    attempted: int
    linked: int
    degraded_fields: dict[str, str] = field(default_factory=dict)


def _listing_values(
    listing: CanonicalListing,
    *,
    ctx: DelegationContext,
    country_code: str | None,
    client_ip: str | None,
    now: datetime,
) -> dict[str, Any]:
    return {
        "owner_id": ctx.owner.account_id,
        "created_by": ctx.actor.account_id,
        "updated_by": ctx.actor.account_id,
        "country_code": country_code,
        # second consultation: stamp the stored record from the stored code
        "tenant_id": route_site(country_code),
        "listing_category": listing.listing_category,
        "listed_by_type": listed_by_for(ctx.owner.role),
        "property_type": listing.property_type,
        "title": listing.title,
        "description": listing.description,
        "price": listing.price,
        "currency": listing.currency,
        "rental_period": listing.rental_period,
        "bedrooms": listing.bedrooms,
        "bathrooms": listing.bathrooms,
        "house_size_value": listing.house_size_value,
        "house_size_unit": listing.house_size_unit,
        "land_size_value": listing.land_size_value,
        "land_size_unit": listing.land_size_unit,
        "year_built": listing.year_built,
        "region": listing.region,
        "city": listing.city,
        "neighborhood": listing.neighborhood,
        "address": listing.address,
        "amenities": list(listing.amenities),
        "contact_email": listing.contact_email,
        "contact_phone": listing.contact_phone,
        "video_url": listing.video_url,
        "ownership_attested": listing.ownership_attested,
        "attested_at": now if listing.ownership_attested else None,
        "attestation_ip": client_ip if listing.ownership_attested else None,
    }


class SubmissionPipeline:
    """
    identity -> delegation -> normalization -> quota -> approval policy ->
    media ingestion -> commit -> notification
    """

    def __init__(self, db: AsyncSession, *, store: ObjectStore, notifier: Notifier):
        self.db = db
        self.store = store
        self.notifier = notifier
        self.ingestor = MediaIngestor(store)

    async def submit(self, principal: Principal, raw: Mapping[str, Any], *, client_ip: str | None = None) -> SubmissionResult:
        listing = normalize_submission(raw)

        ctx = await resolve_delegation(self.db, actor=principal, target_account_id=listing.target_user_id)
        owner = ctx.owner

        if not can_attach_video(role=owner.role, admin_level=owner.admin_level, tier=owner.subscription_tier):
            listing = listing.without_video("tier_not_eligible")

        # the listing is stamped with the site of its own country, falling back
        # to the owner's country when the payload names none
        country_code = listing.country_code or owner.country_code

        decision = await enforce_quota(self.db, owner=owner, delegated=ctx.is_delegated)
        # release the read transaction before the (possibly slow) uploads
        await self.db.rollback()

        status = initial_status(role=owner.role, admin_level=owner.admin_level, wants_draft=listing.wants_draft)

        batch = self.ingestor.ingest(
            listing.images,
            category=listing.listing_category,
            owner_id=owner.account_id,
            is_draft=listing.wants_draft,
        )

        saga = ListingCommitSaga(
            db=self.db,
            values=_listing_values(
                listing, ctx=ctx, country_code=country_code, client_ip=client_ip, now=datetime.now(timezone.utc)
            ),
            media_urls=batch.urls,
            final_status=status,
            actor_account_id=principal.account_id,
            primary_index=listing.primary_image_index,
            audit_detail={"owner_id": owner.account_id, "delegated": ctx.is_delegated},
            before_insert=self._quota_guard(ctx, decision),
        )
        try:
            result = await saga.run()
        except Exception:
            self._discard(batch)
            raise

        log.info(
            "listing %s created: owner=%s author=%s status=%s images=%d",
            result.listing_id, owner.account_id, principal.account_id, result.status, result.linked,
        )

        notify_best_effort(self.notifier, ListingNotification(
            event="listing.submitted",
            listing_id=result.listing_id,
            title=listing.title or "",
            status=result.status,
            owner_email=owner.email,
        ))

        return SubmissionResult(
            listing_id=result.listing_id,
            status=result.status,
            message=STATUS_MESSAGES.get(status, "Property submitted"),
            tenant_id=saga.values["tenant_id"],
            owner_id=owner.account_id,
            created_by=principal.account_id,
            delegated=ctx.is_delegated,
            attempted=batch.attempted,
            linked=result.linked,
            degraded_fields=dict(listing.degraded_fields),
        )

    def _quota_guard(self, ctx: DelegationContext, decision: QuotaDecision):
        async def guard() -> None:
            if decision.exempt:
                return
            # Re-check under the per-owner lock when the backend supports one
            if await lock_owner_quota(self.db, ctx.owner.account_id):
                await enforce_quota(self.db, owner=ctx.owner, delegated=ctx.is_delegated)

        return guard

    def _discard(self, batch: MediaBatch) -> None:
        if batch.uploaded_keys:
            log.warning("discarding %d uploads after failed submission", len(batch.uploaded_keys))
            batch.discard_uploads(self.store)
