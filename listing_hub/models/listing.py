from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from listing_hub.core.ids import gen_id
from listing_hub.models.base import Base, AuditMixin


class Listing(AuditMixin, Base):
    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listings_owner_status", "owner_id", "status"),
        Index("ix_listings_tenant_status", "tenant_id", "status"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("lst"))

    # Business owner (quota, display). created_by (AuditMixin) is the author.
    owner_id: Mapped[str] = mapped_column(String, ForeignKey("accounts.id"), nullable=False)

    # Derived from country_code only, never from the client
    tenant_id: Mapped[str] = mapped_column(String(40), nullable=False)
    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)

    # "sale" | "rent" | "lease" | "short_term"
    listing_category: Mapped[str] = mapped_column(String(20), nullable=False, default="sale")
    # "owner" | "landlord" | "agent" | "admin"
    listed_by_type: Mapped[str] = mapped_column(String(20), nullable=False)
    property_type: Mapped[str | None] = mapped_column(String(80), nullable=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    price: Mapped[float | None] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    rental_period: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Structural fields: always null for land parcels
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[float | None] = mapped_column(Numeric(4, 1, asdecimal=False), nullable=True)
    house_size_value: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    house_size_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    land_size_value: Mapped[float | None] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=True)
    land_size_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)

    region: Mapped[str | None] = mapped_column(String(120), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    neighborhood: Mapped[str | None] = mapped_column(String(120), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)

    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Denormalized copy of listing_media urls, in display order
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # see services.listing_state.ListingStatus
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    ownership_attested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    attested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attestation_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
