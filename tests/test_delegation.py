import pytest

from listing_hub.core.errors import AuthorizationError, NotFoundError
from listing_hub.services.delegation import resolve_delegation


async def test_no_target_means_acting_as_self(db_session, guyana_admin):
    ctx = await resolve_delegation(db_session, actor=guyana_admin.principal, target_account_id=None)
    assert not ctx.is_delegated
    assert ctx.owner == guyana_admin.principal


async def test_non_privileged_target_is_ignored(db_session, fsbo, agent):
    ctx = await resolve_delegation(db_session, actor=fsbo.principal, target_account_id=agent.account_id)
    assert not ctx.is_delegated
    assert ctx.owner.account_id == fsbo.account_id


async def test_admin_delegates_within_territory(db_session, guyana_admin, fsbo):
    ctx = await resolve_delegation(db_session, actor=guyana_admin.principal, target_account_id=fsbo.account_id)
    assert ctx.is_delegated
    assert ctx.actor.account_id == guyana_admin.account_id
    assert ctx.owner.account_id == fsbo.account_id
    assert ctx.owner.role == "fsbo"


async def test_cross_territory_delegation_is_refused(db_session, guyana_admin, ghana_fsbo):
    with pytest.raises(AuthorizationError) as exc:
        await resolve_delegation(db_session, actor=guyana_admin.principal, target_account_id=ghana_fsbo.account_id)
    assert exc.value.code == "territory_violation"


async def test_super_admin_delegates_anywhere(db_session, super_admin, ghana_fsbo):
    ctx = await resolve_delegation(db_session, actor=super_admin.principal, target_account_id=ghana_fsbo.account_id)
    assert ctx.owner.tenant_id == "ghana"


async def test_unknown_target(db_session, guyana_admin):
    with pytest.raises(NotFoundError) as exc:
        await resolve_delegation(db_session, actor=guyana_admin.principal, target_account_id="acc_missing")
    assert exc.value.code == "target_not_found"
