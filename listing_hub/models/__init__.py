from listing_hub.models.base import Base  # noqa: F401

from listing_hub.models.account import Account  # noqa: F401
from listing_hub.models.access_token import AccessToken  # noqa: F401
from listing_hub.models.listing import Listing  # noqa: F401
from listing_hub.models.listing_media import ListingMedia  # noqa: F401
from listing_hub.models.audit_log import AuditLog  # noqa: F401
