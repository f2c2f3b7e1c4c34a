"""
Owner-facing listing emails, sent from the worker.

Only the subject and a plain-text body are built here; presentation belongs to
the email provider's templates.
"""
from __future__ import annotations

from dataclasses import dataclass

from listing_hub.core.config import settings
from listing_hub.services.http_client import HttpResult, HubHttpClient

_SUBJECTS = {
    "listing.submitted": "Your property listing was received",
    "listing.approved": "Your property listing is live",
    "listing.rejected": "Your property listing needs changes",
    "listing.status_changed": "Your property listing was updated",
}


@dataclass(frozen=True)
class ListingEmail:
    to_email: str
    subject: str
    text: str


def build_listing_email(
    *,
    event: str,
    listing_id: str,
    title: str,
    status: str,
    to_email: str,
    reason: str | None = None,
) -> ListingEmail:
    subject = _SUBJECTS.get(event, _SUBJECTS["listing.status_changed"])
    lines = [f'Listing "{title or listing_id}" ({listing_id}) is now {status}.']
    if reason:
        lines.append(f"Reason: {reason}")
    return ListingEmail(to_email=to_email, subject=subject, text="\n".join(lines))


async def send_listing_email(email: ListingEmail, *, client: HubHttpClient | None = None) -> HttpResult:
    own_client = client is None
    client = client or HubHttpClient(
        default_headers={"Authorization": f"Bearer {settings.email_api_key.get_secret_value()}"},
    )
    try:
        return await client.post_json(
            url=settings.email_api_url,
            json_body={
                "from": settings.email_from,
                "to": [email.to_email],
                "subject": email.subject,
                "text": email.text,
            },
        )
    finally:
        if own_client:
            await client.aclose()
