from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.errors import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from listing_hub.models.account import Account
from listing_hub.models.listing import Listing
from listing_hub.models.listing_media import ListingMedia
from listing_hub.services.audit import audit
from listing_hub.services.identity import Principal
from listing_hub.services.listing_state import ListingStatus, can_transition, parse_status
from listing_hub.services.notifications import ListingNotification, Notifier, notify_best_effort

log = logging.getLogger(__name__)

_EVENTS = {
    ListingStatus.ACTIVE: "listing.approved",
    ListingStatus.REJECTED: "listing.rejected",
}


@dataclass(frozen=True)
class ModerationResult:
    listing_id: str
    status: str
    previous_status: str
    changed: bool
    message: str


class ModerationService:
    def __init__(self, db: AsyncSession, *, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    async def _load_in_territory(self, admin: Principal, listing_id: str) -> Listing:
        if not admin.is_admin:
            raise AuthorizationError("Admin privileges required", code="admin_required")

        listing = (await self.db.execute(select(Listing).where(Listing.id == listing_id))).scalar_one_or_none()
        if listing is None:
            raise NotFoundError("Listing not found", code="listing_not_found")
        if not admin.is_super_admin and listing.tenant_id != admin.tenant_id:
            raise AuthorizationError(
                "No access to listings from this territory",
                code="territory_violation",
                details={"admin_tenant": admin.tenant_id, "listing_tenant": listing.tenant_id},
            )
        return listing

    async def approve(self, admin: Principal, listing_id: str) -> ModerationResult:
        return await self.update_status(admin, listing_id, ListingStatus.ACTIVE.value)

    async def reject(self, admin: Principal, listing_id: str, reason: str | None) -> ModerationResult:
        return await self.update_status(admin, listing_id, ListingStatus.REJECTED.value, reason=reason)

    async def update_status(
        self,
        admin: Principal,
        listing_id: str,
        target_status: str,
        *,
        reason: str | None = None,
    ) -> ModerationResult:
        target = parse_status(target_status)
        if target is None:
            raise ValidationError(invalid={"status": f"unknown status '{target_status}'"})

        listing = await self._load_in_territory(admin, listing_id)
        previous = parse_status(listing.status) or ListingStatus.DRAFT

        if previous == target:
            # Idempotent: repeating a moderation decision is a no-op success
            return ModerationResult(
                listing_id=listing.id,
                status=previous.value,
                previous_status=previous.value,
                changed=False,
                message=f"Property already {previous.value}",
            )

        if not can_transition(previous, target):
            raise InvalidTransitionError(current=previous.value, target=target.value)

        if target == ListingStatus.ACTIVE:
            media_count = (await self.db.execute(
                select(func.count()).select_from(ListingMedia).where(ListingMedia.listing_id == listing.id)
            )).scalar_one()
            if media_count == 0:
                raise ValidationError(missing=["images"])

        listing.status = target.value
        listing.updated_by = admin.account_id
        listing.reviewed_by = admin.account_id
        listing.reviewed_at = datetime.now(timezone.utc)
        if target == ListingStatus.REJECTED:
            listing.rejection_reason = (reason or "").strip() or None
        elif target == ListingStatus.ACTIVE:
            listing.rejection_reason = None

        audit(
            self.db,
            tenant_id=listing.tenant_id,
            actor_account_id=admin.account_id,
            action=_EVENTS.get(target, "listing.status_changed"),
            target_type="listing",
            target_id=listing.id,
            detail={"previous_status": previous.value, "new_status": target.value, "reason": listing.rejection_reason},
        )
        owner_email = (await self.db.execute(select(Account.email).where(Account.id == listing.owner_id))).scalar_one_or_none()
        title = listing.title
        rejection_reason = listing.rejection_reason
        await self.db.commit()

        log.info("listing %s moved %s -> %s by %s", listing.id, previous.value, target.value, admin.account_id)

        notify_best_effort(self.notifier, ListingNotification(
            event=_EVENTS.get(target, "listing.status_changed"),
            listing_id=listing_id,
            title=title,
            status=target.value,
            owner_email=owner_email,
            reason=rejection_reason,
        ))

        verb = {ListingStatus.ACTIVE: "approved", ListingStatus.REJECTED: "rejected"}.get(target, f"marked {target.value}")
        return ModerationResult(
            listing_id=listing_id,
            status=target.value,
            previous_status=previous.value,
            changed=True,
            message=f"Property {verb} successfully",
        )

    async def delete_listing(self, admin: Principal, listing_id: str) -> None:
        """Administrative deletion, allowed from any state."""
        listing = await self._load_in_territory(admin, listing_id)
        tenant_id = listing.tenant_id
        previous = listing.status

        await self.db.execute(delete(ListingMedia).where(ListingMedia.listing_id == listing_id))
        await self.db.execute(delete(Listing).where(Listing.id == listing_id))
        audit(
            self.db,
            tenant_id=tenant_id,
            actor_account_id=admin.account_id,
            action="listing.deleted",
            target_type="listing",
            target_id=listing_id,
            detail={"previous_status": previous},
        )
        await self.db.commit()
        log.info("listing %s deleted by %s", listing_id, admin.account_id)
