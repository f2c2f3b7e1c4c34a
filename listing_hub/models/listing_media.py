from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from listing_hub.core.ids import gen_id
from listing_hub.models.base import Base


class ListingMedia(Base):
    __tablename__ = "listing_media"
    __table_args__ = (
        UniqueConstraint("listing_id", "display_order", name="uq_listing_media_order"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("med"))
    listing_id: Mapped[str] = mapped_column(String, ForeignKey("listings.id"), nullable=False, index=True)

    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    media_type: Mapped[str] = mapped_column(String(20), nullable=False, default="image")
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
