from sqlalchemy import func, select

from listing_hub.models.audit_log import AuditLog
from listing_hub.models.listing import Listing
from listing_hub.models.listing_media import ListingMedia

from tests.fixtures_seed import sale_payload, seed_listing


async def _submit(client, seeded, **overrides) -> str:
    r = await client.post("/v1/listings", json=sale_payload(**overrides), headers=seeded.headers)
    assert r.status_code == 201, r.text
    return r.json()["listing_id"]


async def test_approve_pending_listing(client, fsbo, guyana_admin, notifier, session_factory):
    listing_id = await _submit(client, fsbo)

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=guyana_admin.headers)
    assert r.status_code == 200, r.text
    assert r.json() == {
        "listing_id": listing_id,
        "status": "active",
        "previous_status": "pending",
        "changed": True,
        "message": "Property approved successfully",
    }
    assert notifier.events() == ["listing.submitted", "listing.approved"]

    async with session_factory() as s:
        row = (await s.execute(
            select(Listing.status, Listing.reviewed_by, Listing.reviewed_at).where(Listing.id == listing_id)
        )).one()
        actions = (await s.execute(
            select(AuditLog.action).where(AuditLog.target_id == listing_id).order_by(AuditLog.created_at)
        )).scalars().all()
    assert row.status == "active"
    assert row.reviewed_by == guyana_admin.account_id
    assert row.reviewed_at is not None
    assert set(actions) == {"listing.submitted", "listing.approved"}


async def test_repeated_approval_is_a_noop(client, fsbo, guyana_admin, notifier):
    listing_id = await _submit(client, fsbo)
    await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=guyana_admin.headers)

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=guyana_admin.headers)
    assert r.status_code == 200
    assert r.json()["changed"] is False
    assert notifier.events().count("listing.approved") == 1


async def test_reject_with_reason(client, fsbo, guyana_admin, notifier, session_factory):
    listing_id = await _submit(client, fsbo)

    r = await client.post(
        f"/v1/admin/listings/{listing_id}/reject",
        json={"reason": "Photos do not match the address"},
        headers=guyana_admin.headers,
    )
    assert r.status_code == 200
    assert r.json()["status"] == "rejected"
    assert notifier.sent[-1].event == "listing.rejected"
    assert notifier.sent[-1].reason == "Photos do not match the address"

    async with session_factory() as s:
        reason = (await s.execute(select(Listing.rejection_reason).where(Listing.id == listing_id))).scalar_one()
    assert reason == "Photos do not match the address"

    again = await client.post(f"/v1/admin/listings/{listing_id}/reject", json={"reason": "x"}, headers=guyana_admin.headers)
    assert again.json()["changed"] is False


async def test_rejected_listing_can_be_reconsidered(client, fsbo, guyana_admin):
    listing_id = await _submit(client, fsbo)
    await client.post(f"/v1/admin/listings/{listing_id}/reject", json={"reason": "blurry"}, headers=guyana_admin.headers)

    r = await client.put(
        f"/v1/admin/listings/{listing_id}/status",
        json={"status": "active"},
        headers=guyana_admin.headers,
    )
    assert r.status_code == 200
    assert r.json()["previous_status"] == "rejected"
    assert r.json()["status"] == "active"


async def test_transition_outside_state_machine(client, fsbo, guyana_admin):
    listing_id = await _submit(client, fsbo)

    r = await client.put(f"/v1/admin/listings/{listing_id}/status", json={"status": "sold"}, headers=guyana_admin.headers)
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_transition"
    assert r.json()["details"] == {"current": "pending", "target": "sold"}


async def test_unknown_status(client, fsbo, guyana_admin):
    listing_id = await _submit(client, fsbo)

    r = await client.put(f"/v1/admin/listings/{listing_id}/status", json={"status": "archived"}, headers=guyana_admin.headers)
    assert r.status_code == 400
    assert "status" in r.json()["details"]["invalid"]


async def test_approval_requires_media(client, guyana_admin, fsbo, db_session):
    listing_id = await seed_listing(db_session, owner_id=fsbo.account_id, status="draft")

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=guyana_admin.headers)
    assert r.status_code == 400
    assert r.json()["details"]["missing"] == ["images"]


async def test_moderation_requires_admin(client, fsbo, agent):
    listing_id = await _submit(client, fsbo)

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=agent.headers)
    assert r.status_code == 403
    assert r.json()["code"] == "admin_required"


async def test_admin_cannot_moderate_other_territory(client, fsbo, ghana_admin, super_admin):
    listing_id = await _submit(client, fsbo)

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=ghana_admin.headers)
    assert r.status_code == 403
    assert r.json()["code"] == "territory_violation"

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=super_admin.headers)
    assert r.status_code == 200


async def test_unknown_listing(client, guyana_admin):
    r = await client.post("/v1/admin/listings/lst_missing/approve", headers=guyana_admin.headers)
    assert r.status_code == 404
    assert r.json()["code"] == "listing_not_found"


async def test_admin_delete(client, fsbo, guyana_admin, session_factory):
    listing_id = await _submit(client, fsbo)

    r = await client.delete(f"/v1/admin/listings/{listing_id}", headers=guyana_admin.headers)
    assert r.status_code == 200
    assert r.json() == {"status": "deleted", "listing_id": listing_id}

    assert (await client.get(f"/v1/listings/{listing_id}", headers=fsbo.headers)).status_code == 404
    async with session_factory() as s:
        media = (await s.execute(
            select(func.count()).select_from(ListingMedia).where(ListingMedia.listing_id == listing_id)
        )).scalar_one()
        deleted = (await s.execute(
            select(func.count()).select_from(AuditLog).where(AuditLog.target_id == listing_id, AuditLog.action == "listing.deleted")
        )).scalar_one()
    assert media == 0
    assert deleted == 1


async def test_notification_failure_does_not_undo_moderation(client, fsbo, guyana_admin, notifier):
    listing_id = await _submit(client, fsbo)
    notifier.fail = True

    r = await client.post(f"/v1/admin/listings/{listing_id}/approve", headers=guyana_admin.headers)
    assert r.status_code == 200
    assert r.json()["status"] == "active"
