"""
Domain error taxonomy.

Every error carries a stable machine-checkable ``code`` and the HTTP status it
maps to; the API layer renders them through a single exception handler.
"""
from __future__ import annotations

from typing import Any


class ListingHubError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}


class AuthenticationError(ListingHubError):
    status_code = 401
    code = "unauthenticated"


class AuthorizationError(ListingHubError):
    status_code = 403
    code = "forbidden"


class NotFoundError(ListingHubError):
    status_code = 404
    code = "not_found"


class ValidationError(ListingHubError):
    status_code = 400
    code = "validation_error"

    def __init__(self, *, missing: list[str] | None = None, invalid: dict[str, str] | None = None):
        self.missing = list(missing or [])
        self.invalid = dict(invalid or {})
        parts = []
        if self.missing:
            parts.append("missing fields: " + ", ".join(self.missing))
        if self.invalid:
            parts.append("invalid fields: " + ", ".join(sorted(self.invalid)))
        super().__init__("; ".join(parts) or "invalid submission", details={"missing": self.missing, "invalid": self.invalid})


class QuotaExceededError(ListingHubError):
    status_code = 403
    code = "quota_exceeded"

    def __init__(self, *, current: int, maximum: int, tier: str, role: str):
        self.current = current
        self.maximum = maximum
        self.tier = tier
        super().__init__(
            f"Listing limit reached ({current}/{maximum}) for {role} tier '{tier}'",
            details={"current": current, "max": maximum, "tier": tier, "role": role},
        )


class MediaUploadFailedError(ListingHubError):
    status_code = 422
    code = "media_upload_failed"

    def __init__(self, *, index: int, name: str | None, reason: str):
        self.index = index
        self.name = name
        super().__init__(
            f"Image upload failed for file {index + 1}" + (f" ({name})" if name else "") + f": {reason}",
            details={"index": index, "name": name, "reason": reason},
        )


class InvalidTransitionError(ListingHubError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, *, current: str, target: str):
        super().__init__(
            f"Cannot move listing from '{current}' to '{target}'",
            details={"current": current, "target": target},
        )


class CommitFailedError(ListingHubError):
    status_code = 500
    code = "commit_failed"

    def __init__(self, *, step: str, rollback_succeeded: bool, listing_id: str | None, reason: str):
        self.step = step
        self.rollback_succeeded = rollback_succeeded
        self.listing_id = listing_id
        if rollback_succeeded:
            message = f"No listing was created: {step} failed and the partial write was rolled back"
        else:
            message = (
                f"No listing was created: {step} failed and the rollback also failed; "
                f"orphaned draft row {listing_id} requires cleanup"
            )
        super().__init__(
            message,
            details={
                "step": step,
                "listing_created": False,
                "rollback_succeeded": rollback_succeeded,
                # only exposed when something is actually left behind
                "orphan_listing_id": None if rollback_succeeded else listing_id,
                "reason": reason,
            },
        )
