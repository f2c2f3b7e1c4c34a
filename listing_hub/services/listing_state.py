from __future__ import annotations

from enum import Enum

from listing_hub.core.config import settings


class ListingStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    SOLD = "sold"
    UNDER_CONTRACT = "under_contract"


# Statuses that count against an owner's listing quota
OPEN_STATUSES: frozenset[str] = frozenset({
    ListingStatus.ACTIVE.value,
    ListingStatus.PENDING.value,
    ListingStatus.DRAFT.value,
})

_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.DRAFT: frozenset({ListingStatus.PENDING, ListingStatus.ACTIVE}),
    ListingStatus.PENDING: frozenset({ListingStatus.ACTIVE, ListingStatus.REJECTED}),
    ListingStatus.ACTIVE: frozenset({ListingStatus.REJECTED, ListingStatus.SOLD, ListingStatus.UNDER_CONTRACT}),
    # reconsideration
    ListingStatus.REJECTED: frozenset({ListingStatus.ACTIVE}),
    ListingStatus.SOLD: frozenset(),
    ListingStatus.UNDER_CONTRACT: frozenset(),
}

_LISTED_BY: dict[str, str] = {
    "fsbo": "owner",
    "landlord": "landlord",
    "agent": "agent",
    "admin": "admin",
}


def parse_status(value: str) -> ListingStatus | None:
    try:
        return ListingStatus(str(value or "").lower().strip())
    except ValueError:
        return None


def can_transition(current: ListingStatus, target: ListingStatus) -> bool:
    return target in _TRANSITIONS[current]


def initial_status(*, role: str, admin_level: str | None, env: str | None = None, wants_draft: bool = False) -> ListingStatus:
    """
    Status a freshly submitted listing starts in, decided by the owner's role.
    Agents publish immediately; super admins too, except in restricted
    environments. Everyone else goes to review.
    """
    if wants_draft:
        return ListingStatus.DRAFT

    if role == "agent":
        return ListingStatus.ACTIVE

    if role == "admin" and admin_level == "super":
        current_env = (env if env is not None else settings.env).lower()
        if current_env not in {e.lower() for e in settings.restricted_envs}:
            return ListingStatus.ACTIVE

    return ListingStatus.PENDING


def listed_by_for(role: str) -> str:
    return _LISTED_BY.get(role, "owner")


def can_attach_video(*, role: str, admin_level: str | None, tier: str | None) -> bool:
    if role == "admin":
        return True

    t = (tier or "basic").lower()
    if role == "agent":
        return t in ("pro", "elite")
    if role == "landlord":
        return t in ("premium", "portfolio")
    if role == "fsbo":
        return t in ("premium", "portfolio")
    return False
