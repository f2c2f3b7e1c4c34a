import pytest

from listing_hub.services.tenancy import country_code_for, route_site


@pytest.mark.parametrize(
    "code, site",
    [("GY", "guyana"), ("gh", "ghana"), ("JM", "jamaica"), ("CO", "colombia")],
)
def test_known_countries_route_to_their_site(code, site):
    assert route_site(code) == site


@pytest.mark.parametrize("code", [None, "", "FR", "ZZ", "not-a-country"])
def test_unknown_or_missing_countries_fall_back_to_portal(code):
    assert route_site(code) == "portal"


def test_country_names_resolve_to_codes():
    assert country_code_for("Guyana") == "GY"
    assert country_code_for("  ghana ") == "GH"
    assert country_code_for("Atlantis") is None
    assert route_site("Jamaica") == "jamaica"


def test_route_site_is_deterministic():
    assert {route_site("GY") for _ in range(5)} == {"guyana"}
