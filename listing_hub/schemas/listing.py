from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ImageLinkage(BaseModel):
    attempted: int
    linked: int


class ListingSubmitOut(BaseModel):
    success: bool = True
    listing_id: str
    status: str
    message: str
    owner_id: str
    created_by: str
    delegated: bool
    tenant_id: str
    images: ImageLinkage
    # field -> reason, for contact fields that were dropped instead of rejected
    degraded_fields: dict[str, str] = Field(default_factory=dict)


class ListingMediaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    media_type: str
    is_primary: bool
    display_order: int


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    created_by: str | None
    tenant_id: str
    country_code: str | None
    listing_category: str
    listed_by_type: str
    property_type: str | None
    title: str
    description: str | None
    price: float | None
    currency: str | None
    rental_period: str | None
    bedrooms: int | None
    bathrooms: float | None
    house_size_value: float | None
    house_size_unit: str | None
    land_size_value: float | None
    land_size_unit: str | None
    year_built: int | None
    region: str | None
    city: str | None
    neighborhood: str | None
    address: str | None
    amenities: list[str]
    contact_email: str | None
    contact_phone: str | None
    video_url: str | None
    images: list[str]
    status: str
    rejection_reason: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    media: list[ListingMediaOut] = Field(default_factory=list)
