"""
Reconcile heterogeneous submission payloads into one canonical listing.

Clients in the field send several shapes: the FSBO sale wizard
(``property_type``, ``house_size_value``, ``owner_email``), the landlord
rental form (``propertyType``, ``squareFootage``, ``features``) and newer
clients using the canonical names. ``normalize_submission`` builds a single
immutable CanonicalListing from any of them and reports every missing field
at once.
"""
from __future__ import annotations

import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from listing_hub.core.errors import ValidationError
from listing_hub.services.sanitizers import FieldOutcome, sanitize_email, sanitize_phone, sanitize_video_url
from listing_hub.services.tenancy import country_code_for, route_site


# Longest accepted value per free-text field, matching the listing columns
TEXT_LIMITS: dict[str, int] = {
    "title": 200,
    "property_type": 80,
    "rental_period": 20,
    "house_size_unit": 10,
    "land_size_unit": 10,
    "region": 120,
    "city": 120,
    "neighborhood": 120,
    "address": 300,
}

# Legacy property type -> current
PROPERTY_TYPE_MAP: dict[str, str] = {
    "single family home": "House",
    "villa": "House",
    "bungalow": "House",
    "cottage": "House",
    "townhouse": "House",
    "duplex": "Multi-family",
    "condo": "Apartment",
    "residential farmland": "Residential Land",
    "farmland": "Land",
    "agricultural land": "Land",
    "industrial": "Warehouse",
    "medical": "Office",
}

# Legacy amenity label -> current
AMENITY_MAP: dict[str, str] = {
    "air conditioning": "AC",
    "swimming pool": "Pool",
    "security system": "Security",
    "backup generator": "Generator",
    "laundry room": "Laundry",
    "internet/wifi ready": "Internet",
    "fence/gated": "Gated",
    "solar panels": "Solar",
    "conference room": "Conference",
    "kitchen/break room": "Kitchen",
    "reception area": "Reception",
    "handicap accessible": "Handicap",
    "elevator access": "Elevator",
}

CATEGORY_ALIASES: dict[str, str] = {
    "sale": "sale",
    "for_sale": "sale",
    "fsbo": "sale",
    "rent": "rent",
    "rental": "rent",
    "for_rent": "rent",
    "lease": "lease",
    "short_term": "short_term",
    "short-term": "short_term",
    "shortterm": "short_term",
    "shortlet": "short_term",
}

RENTAL_CATEGORIES = frozenset({"rent", "lease", "short_term"})

_AMENITY_SPLIT = re.compile(r"[,;|\n]")
_NUMBER_NOISE = re.compile(r"[,\s$]")


class CanonicalListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    listing_category: str = "sale"
    property_type: str | None = None
    is_land: bool = False

    title: str | None = None
    description: str | None = None

    price: float | None = None
    currency: str | None = None
    rental_period: str | None = None

    bedrooms: int | None = None
    bathrooms: float | None = None
    house_size_value: float | None = None
    house_size_unit: str | None = None
    land_size_value: float | None = None
    land_size_unit: str | None = None
    year_built: int | None = None

    region: str | None = None
    city: str | None = None
    neighborhood: str | None = None
    address: str | None = None
    country_code: str | None = None
    site: str

    amenities: tuple[str, ...] = ()

    contact_email: str | None = None
    contact_phone: str | None = None
    video_url: str | None = None
    # field name -> reason, for contact fields rejected and stored as null
    degraded_fields: dict[str, str] = {}

    images: tuple[Any, ...] = ()
    primary_image_index: int | None = None

    wants_draft: bool = False
    ownership_attested: bool = False
    target_user_id: str | None = None

    @property
    def is_rental(self) -> bool:
        return self.listing_category in RENTAL_CATEGORIES

    def without_video(self, reason: str) -> "CanonicalListing":
        if self.video_url is None:
            return self
        return self.model_copy(update={
            "video_url": None,
            "degraded_fields": {**self.degraded_fields, "video_url": reason},
        })


def _pick(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return None


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip()) or (isinstance(v, (list, tuple)) and not v)


def _text(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _to_float(v: Any) -> float | None:
    if v is None:
        return None
    if isinstance(v, bool):
        raise ValueError("boolean is not a number")
    if isinstance(v, (int, float)):
        return float(v)
    s = _NUMBER_NOISE.sub("", str(v))
    if not s:
        return None
    return float(s)


def _to_int(v: Any) -> int | None:
    f = _to_float(v)
    if f is None:
        return None
    if not f.is_integer():
        raise ValueError("expected a whole number")
    return int(f)


def _to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on", "y")
    return False


def normalize_property_type(value: Any) -> str | None:
    v = _text(value)
    if v is None:
        return None
    return PROPERTY_TYPE_MAP.get(v.lower(), v)


def normalize_amenities(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = _AMENITY_SPLIT.split(value)
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        return ()

    out: list[str] = []
    seen: set[str] = set()
    for item in items:
        label = _text(item)
        if label is None:
            continue
        label = AMENITY_MAP.get(label.lower(), label)
        if label.lower() in seen:
            continue
        seen.add(label.lower())
        out.append(label)
    return tuple(out)


def _category(raw: Mapping[str, Any], invalid: dict[str, str]) -> str:
    v = _pick(raw, "listing_category", "listingCategory", "propertyCategory", "property_category", "listing_type")
    if _blank(v):
        return "sale"
    key = str(v).strip().lower().replace(" ", "_")
    cat = CATEGORY_ALIASES.get(key)
    if cat is None:
        invalid["listing_category"] = f"unsupported category '{v}'"
        return "sale"
    return cat


def _images(raw: Mapping[str, Any], invalid: dict[str, str]) -> tuple[Any, ...]:
    v = _pick(raw, "images", "image_urls", "imageUrls", "image_references", "imageReferences")
    if v is None:
        return ()
    if isinstance(v, (str, dict)):
        return (v,)
    if isinstance(v, (list, tuple)):
        return tuple(v)
    invalid["images"] = "expected a list"
    return ()


def _wants_draft(raw: Mapping[str, Any]) -> bool:
    if str(raw.get("status") or "").strip().lower() == "draft":
        return True
    return _to_bool(_pick(raw, "is_draft", "isDraft", "save_as_draft", "saveAsDraft"))


def normalize_submission(raw: Mapping[str, Any]) -> CanonicalListing:
    invalid: dict[str, str] = {}

    category = _category(raw, invalid)
    property_type = normalize_property_type(_pick(raw, "property_type", "propertyType"))
    is_land = bool(property_type and "land" in property_type.lower())

    numbers: dict[str, Any] = {}
    numeric_fields = {
        "price": (_to_float, ("price",)),
        "bedrooms": (_to_int, ("bedrooms", "beds")),
        "bathrooms": (_to_float, ("bathrooms", "baths")),
        "house_size_value": (_to_float, ("house_size_value", "squareFootage", "square_footage", "house_size")),
        "land_size_value": (_to_float, ("land_size_value", "landSize", "lot_size")),
        "year_built": (_to_int, ("year_built", "yearBuilt")),
    }
    for field, (conv, names) in numeric_fields.items():
        try:
            numbers[field] = conv(_pick(raw, *names))
        except (TypeError, ValueError):
            invalid[field] = "not a number"
            numbers[field] = None

    if is_land:
        # Structural fields do not apply to land parcels
        for field in ("bedrooms", "bathrooms", "house_size_value", "year_built"):
            numbers[field] = None
            invalid.pop(field, None)

    outcomes: dict[str, FieldOutcome] = {
        "contact_email": sanitize_email(_pick(raw, "contact_email", "owner_email", "contactEmail", "email")),
        "contact_phone": sanitize_phone(_pick(raw, "contact_phone", "owner_whatsapp", "contactPhone", "phone", "whatsapp")),
        "video_url": sanitize_video_url(_pick(raw, "video_url", "videoUrl", "youtube_url", "youtubeUrl")),
    }
    degraded = {name: o.reason or "rejected" for name, o in outcomes.items() if o.degraded}

    country_code = country_code_for(_pick(raw, "country_code", "countryCode", "country"))

    primary_index: int | None
    try:
        primary_index = _to_int(_pick(raw, "primary_image_index", "primaryImageIndex"))
    except (TypeError, ValueError):
        primary_index = None

    target = _text(_pick(raw, "target_user_id", "targetUserId", "create_for_user_id", "createForUserId"))
    currency = _text(_pick(raw, "currency"))

    canonical = CanonicalListing(
        listing_category=category,
        property_type=property_type,
        is_land=is_land,
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        price=numbers["price"],
        currency=currency.upper()[:3] if currency else None,
        rental_period=_text(_pick(raw, "rental_period", "rentalPeriod", "rentalType", "rental_type"))
        if category in RENTAL_CATEGORIES else None,
        bedrooms=numbers["bedrooms"],
        bathrooms=numbers["bathrooms"],
        house_size_value=numbers["house_size_value"],
        house_size_unit=None if is_land else _text(_pick(raw, "house_size_unit", "houseSizeUnit")) or "sqft",
        land_size_value=numbers["land_size_value"],
        land_size_unit=_text(_pick(raw, "land_size_unit", "landSizeUnit")),
        year_built=numbers["year_built"],
        region=_text(raw.get("region")),
        city=_text(raw.get("city")),
        neighborhood=_text(raw.get("neighborhood")),
        address=_text(_pick(raw, "address", "location")),
        country_code=country_code,
        site=route_site(country_code),
        amenities=normalize_amenities(_pick(raw, "amenities", "features")),
        contact_email=outcomes["contact_email"].value,
        contact_phone=outcomes["contact_phone"].value,
        video_url=outcomes["video_url"].value,
        degraded_fields=degraded,
        images=_images(raw, invalid),
        primary_image_index=primary_index,
        wants_draft=_wants_draft(raw),
        ownership_attested=_to_bool(_pick(raw, "ownership_attested", "ownershipAttested", "attestation", "ownershipAttestation")),
        target_user_id=target,
    )

    for name, limit in TEXT_LIMITS.items():
        value = getattr(canonical, name)
        if value is not None and len(value) > limit:
            invalid[name] = f"too long (max {limit} characters)"

    missing = missing_fields(canonical)
    if missing or invalid:
        raise ValidationError(missing=missing, invalid=invalid)
    return canonical


def missing_fields(listing: CanonicalListing) -> list[str]:
    """Every required field that is absent, in a stable order."""
    if listing.wants_draft:
        return ["title"] if listing.title is None else []

    required: list[str] = ["title", "description", "price", "property_type"]
    if not listing.is_land:
        required += ["bedrooms", "bathrooms", "house_size_value"]
    if listing.is_rental:
        if listing.region is None and listing.address is None:
            required.append("region")
    else:
        required += ["region", "city"]

    missing = [f for f in required if getattr(listing, f) is None]
    if not listing.ownership_attested:
        missing.append("ownership_attested")
    return missing
