from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.config import settings
from listing_hub.core.errors import QuotaExceededError
from listing_hub.models.listing import Listing
from listing_hub.services.identity import Principal
from listing_hub.services.listing_state import OPEN_STATUSES

log = logging.getLogger(__name__)

UNLIMITED_LISTINGS = 999


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    current: int
    maximum: int
    tier: str
    exempt: bool = False

    @property
    def unlimited(self) -> bool:
        return self.maximum >= UNLIMITED_LISTINGS


def max_listings_for(role: str, tier: str | None) -> int:
    by_tier = settings.quota_table.get(role)
    if not by_tier:
        return settings.quota_default_max
    t = (tier or "basic").lower()
    if t in by_tier:
        return by_tier[t]
    if "*" in by_tier:
        return by_tier["*"]
    return settings.quota_default_max


async def count_open_listings(db: AsyncSession, owner_id: str) -> int:
    stmt = select(func.count()).select_from(Listing).where(
        Listing.owner_id == owner_id,
        Listing.status.in_(OPEN_STATUSES),
    )
    return int((await db.execute(stmt)).scalar_one())


async def lock_owner_quota(db: AsyncSession, owner_id: str) -> bool:
    """
    Serialize count-then-insert per owner for the rest of the current
    transaction. Only PostgreSQL has transaction-scoped advisory locks; on
    other backends the check stays best-effort.
    """
    if not settings.quota_serialize_per_account:
        return False
    if db.get_bind().dialect.name != "postgresql":
        return False
    await db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:owner_id))"), {"owner_id": owner_id})
    return True


async def enforce_quota(db: AsyncSession, *, owner: Principal, delegated: bool) -> QuotaDecision:
    tier = owner.subscription_tier or "basic"

    # Admins acting for themselves never count against a quota
    if owner.is_admin and not delegated:
        return QuotaDecision(allowed=True, current=0, maximum=UNLIMITED_LISTINGS, tier=tier, exempt=True)

    maximum = max_listings_for(owner.role, tier)
    current = await count_open_listings(db, owner.account_id)
    if maximum < UNLIMITED_LISTINGS and current >= maximum:
        log.info("quota exceeded: owner=%s role=%s tier=%s %d/%d", owner.account_id, owner.role, tier, current, maximum)
        raise QuotaExceededError(current=current, maximum=maximum, tier=tier, role=owner.role)

    return QuotaDecision(allowed=True, current=current, maximum=maximum, tier=tier)
