"""
Delegated ("create for user") submissions.

An administrator may submit a listing owned by another account. The listing
then counts against, displays under and is policy-checked as the target
account, while the administrator stays recorded as its author.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.errors import AuthorizationError, NotFoundError
from listing_hub.models.account import Account
from listing_hub.services.identity import Principal, principal_from_account

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DelegationContext:
    actor: Principal
    owner: Principal

    @property
    def is_delegated(self) -> bool:
        return self.actor.account_id != self.owner.account_id


def acting_as_self(actor: Principal) -> DelegationContext:
    return DelegationContext(actor=actor, owner=actor)


async def resolve_delegation(
    db: AsyncSession,
    *,
    actor: Principal,
    target_account_id: str | None,
) -> DelegationContext:
    # Non-privileged callers cannot delegate; the target is ignored.
    if not target_account_id or not actor.is_admin:
        return acting_as_self(actor)
    if target_account_id == actor.account_id:
        return acting_as_self(actor)

    try:
        stmt = select(Account).where(Account.id == target_account_id, Account.is_active.is_(True))
        target = (await db.execute(stmt)).scalar_one_or_none()
    except SQLAlchemyError:
        await db.rollback()
        log.warning(
            "delegation lookup failed for actor=%s target=%s; continuing without delegation",
            actor.account_id,
            target_account_id,
            exc_info=True,
        )
        return acting_as_self(actor)

    if target is None:
        raise NotFoundError("Target account not found", code="target_not_found", details={"target_user_id": target_account_id})

    owner = principal_from_account(target)
    if not actor.is_super_admin and owner.tenant_id != actor.tenant_id:
        raise AuthorizationError(
            "Administrators may only create listings for accounts in their own territory",
            code="territory_violation",
            details={"actor_tenant": actor.tenant_id, "target_tenant": owner.tenant_id},
        )

    log.info("delegated submission: actor=%s owner=%s", actor.account_id, owner.account_id)
    return DelegationContext(actor=actor, owner=owner)
