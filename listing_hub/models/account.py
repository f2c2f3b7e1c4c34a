from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from listing_hub.core.ids import gen_id
from listing_hub.models.base import Base, AuditMixin


class Account(AuditMixin, Base):
    """
    Submitting/owning user. Rows are created by the registration flow; this
    service only reads them.
    """
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("acc"))

    # Site the account belongs to (see services.tenancy.route_site)
    tenant_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    country_code: Mapped[str | None] = mapped_column(String(2), nullable=True)

    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    # "fsbo" | "landlord" | "agent" | "admin"
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    # only for role == "admin": "basic" | "owner" | "super"
    admin_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subscription_tier: Mapped[str] = mapped_column(String(30), nullable=False, default="basic")

    # set when an administrator registered the account on someone's behalf
    created_by_admin: Mapped[str | None] = mapped_column(String, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
