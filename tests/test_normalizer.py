import pytest

from listing_hub.core.errors import ValidationError
from listing_hub.services.normalizer import missing_fields, normalize_submission

from tests.fixtures_seed import sale_payload


def test_fsbo_wizard_shape_is_normalized():
    listing = normalize_submission(sale_payload(owner_email=" Owner@Example.com ", owner_whatsapp="592 600 1234"))

    assert listing.listing_category == "sale"
    assert listing.property_type == "House"
    assert listing.price == 250000.0
    assert listing.currency == "USD"
    assert listing.country_code == "GY"
    assert listing.site == "guyana"
    assert listing.contact_email == "owner@example.com"
    assert listing.contact_phone == "+5926001234"
    assert listing.images == ("https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg")


def test_landlord_rental_shape_is_normalized():
    listing = normalize_submission({
        "title": "Two bed apartment",
        "description": "Furnished, close to the sea wall.",
        "price": 900,
        "listingCategory": "rental",
        "propertyType": "Condo",
        "bedrooms": "2",
        "bathrooms": "1.5",
        "squareFootage": "1,100",
        "region": "Region 4",
        "country": "Guyana",
        "features": "Air Conditioning, AC; Swimming Pool|Parking",
        "rentalPeriod": "monthly",
        "ownershipAttested": "true",
    })

    assert listing.listing_category == "rent"
    assert listing.is_rental
    assert listing.property_type == "Apartment"
    assert listing.bedrooms == 2
    assert listing.bathrooms == 1.5
    assert listing.house_size_value == 1100.0
    assert listing.amenities == ("AC", "Pool", "Parking")
    assert listing.rental_period == "monthly"
    assert listing.site == "guyana"


def test_land_parcels_drop_structural_fields():
    listing = normalize_submission(sale_payload(
        property_type="Residential Farmland",
        bedrooms=4,
        bathrooms=2,
        house_size_value=2000,
        year_built=1999,
        land_size_value=5,
        land_size_unit="acres",
    ))

    assert listing.is_land
    assert listing.property_type == "Residential Land"
    assert listing.bedrooms is None
    assert listing.bathrooms is None
    assert listing.house_size_value is None
    assert listing.house_size_unit is None
    assert listing.year_built is None
    assert listing.land_size_value == 5.0


def test_all_missing_fields_are_reported_at_once():
    with pytest.raises(ValidationError) as exc:
        normalize_submission({"title": "Just a title", "listing_category": "sale"})

    err = exc.value
    assert err.code == "validation_error"
    for field in ("description", "price", "property_type", "bedrooms", "bathrooms", "house_size_value", "region", "city", "ownership_attested"):
        assert field in err.missing
    assert "title" not in err.missing


def test_non_numeric_values_are_invalid_not_missing():
    with pytest.raises(ValidationError) as exc:
        normalize_submission(sale_payload(price="call for price", bedrooms="two"))

    assert exc.value.invalid.keys() >= {"price", "bedrooms"}


def test_text_longer_than_its_column_is_invalid():
    with pytest.raises(ValidationError) as exc:
        normalize_submission(sale_payload(title="T" * 201, city="C" * 121))

    err = exc.value
    assert err.invalid["title"] == "too long (max 200 characters)"
    assert "city" in err.invalid
    assert "title" not in err.missing

    listing = normalize_submission(sale_payload(title="T" * 200))
    assert len(listing.title) == 200


def test_rental_accepts_address_in_place_of_region():
    listing = normalize_submission(sale_payload(listing_category="rent", region=None, city=None, address="12 Main St"))
    assert missing_fields(listing) == []


def test_draft_only_needs_a_title():
    listing = normalize_submission({"title": "Work in progress", "status": "draft"})
    assert listing.wants_draft
    assert listing.images == ()

    with pytest.raises(ValidationError) as exc:
        normalize_submission({"is_draft": True})
    assert exc.value.missing == ["title"]


def test_unknown_category_is_invalid():
    with pytest.raises(ValidationError) as exc:
        normalize_submission(sale_payload(listing_category="auction"))
    assert "listing_category" in exc.value.invalid


def test_bad_contact_fields_degrade_without_failing():
    listing = normalize_submission(sale_payload(contact_email="nope", contact_phone="123", video_url="ftp://x.example.com/v"))

    assert listing.contact_email is None
    assert listing.contact_phone is None
    assert listing.video_url is None
    assert set(listing.degraded_fields) == {"contact_email", "contact_phone", "video_url"}


def test_canonical_listing_is_immutable():
    listing = normalize_submission(sale_payload())
    with pytest.raises(Exception):
        listing.title = "changed"


def test_without_video_records_the_reason():
    listing = normalize_submission(sale_payload(video_url="https://youtu.be/abc"))
    stripped = listing.without_video("tier_not_eligible")

    assert listing.video_url == "https://youtu.be/abc"
    assert stripped.video_url is None
    assert stripped.degraded_fields["video_url"] == "tier_not_eligible"
