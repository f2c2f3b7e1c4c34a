import asyncio
import logging

from listing_hub.core.config import settings
from listing_hub.services.email import build_listing_email, send_listing_email
from listing_hub.services.http_client import HttpResult
from listing_hub.services.retry import compute_backoff_seconds
from worker.celery_app import celery

log = logging.getLogger(__name__)


def _deliver(
    *,
    event: str,
    listing_id: str,
    title: str,
    status: str,
    to_email: str,
    reason: str | None,
) -> HttpResult:
    email = build_listing_email(
        event=event, listing_id=listing_id, title=title, status=status, to_email=to_email, reason=reason,
    )
    return asyncio.run(send_listing_email(email))


@celery.task(name="worker.tasks.send_listing_notification", bind=True, max_retries=5)
def send_listing_notification(
    self,
    event: str,
    listing_id: str,
    title: str,
    status: str,
    to_email: str | None,
    reason: str | None = None,
) -> dict:
    if not to_email:
        return {"sent": False, "skipped": "no_recipient"}
    if not settings.email_api_url:
        log.info("email api not configured; dropping %s for %s", event, listing_id)
        return {"sent": False, "skipped": "email_api_not_configured"}

    result = _deliver(
        event=event, listing_id=listing_id, title=title, status=status, to_email=to_email, reason=reason,
    )
    if result.ok:
        log.info("sent %s email for %s", event, listing_id)
        return {"sent": True, "status_code": result.status_code}

    log.warning(
        "email for %s (%s) failed: %s %s retryable=%s",
        listing_id, event, result.error_code, result.error_message, result.retryable,
    )
    if result.retryable and self.request.retries < self.max_retries:
        countdown = compute_backoff_seconds(self.request.retries + 1, retry_after=result.retry_after)
        raise self.retry(countdown=countdown)
    return {"sent": False, "error": result.error_code}
