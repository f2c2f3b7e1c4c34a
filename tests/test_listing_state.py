import pytest

from listing_hub.services.listing_state import (
    ListingStatus,
    can_attach_video,
    can_transition,
    initial_status,
    listed_by_for,
    parse_status,
)


def test_agents_publish_immediately():
    assert initial_status(role="agent", admin_level=None) == ListingStatus.ACTIVE


@pytest.mark.parametrize("role", ["fsbo", "landlord"])
def test_owners_and_landlords_go_to_review(role):
    assert initial_status(role=role, admin_level=None) == ListingStatus.PENDING


def test_super_admin_publishes_outside_restricted_envs():
    assert initial_status(role="admin", admin_level="super", env="staging") == ListingStatus.ACTIVE
    assert initial_status(role="admin", admin_level="super", env="production") == ListingStatus.PENDING


def test_other_admin_levels_go_to_review():
    assert initial_status(role="admin", admin_level="basic", env="staging") == ListingStatus.PENDING


def test_draft_intent_wins_over_role():
    assert initial_status(role="agent", admin_level=None, wants_draft=True) == ListingStatus.DRAFT


def test_transitions():
    assert can_transition(ListingStatus.PENDING, ListingStatus.ACTIVE)
    assert can_transition(ListingStatus.PENDING, ListingStatus.REJECTED)
    assert can_transition(ListingStatus.REJECTED, ListingStatus.ACTIVE)
    assert can_transition(ListingStatus.ACTIVE, ListingStatus.SOLD)
    assert not can_transition(ListingStatus.PENDING, ListingStatus.SOLD)
    assert not can_transition(ListingStatus.SOLD, ListingStatus.ACTIVE)
    assert not can_transition(ListingStatus.REJECTED, ListingStatus.PENDING)


def test_parse_status_is_closed():
    assert parse_status(" Active ") == ListingStatus.ACTIVE
    assert parse_status("archived") is None


def test_listed_by_and_video_eligibility():
    assert listed_by_for("fsbo") == "owner"
    assert listed_by_for("agent") == "agent"
    assert can_attach_video(role="agent", admin_level=None, tier="pro")
    assert not can_attach_video(role="agent", admin_level=None, tier="basic")
    assert can_attach_video(role="admin", admin_level="basic", tier=None)
