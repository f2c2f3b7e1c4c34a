"""
Owner notifications. Fire-and-forget: a failure here is logged and never
surfaces to the caller, since the primary write has already committed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

log = logging.getLogger(__name__)

NOTIFY_TASK = "worker.tasks.send_listing_notification"


@dataclass(frozen=True)
class ListingNotification:
    event: str  # "listing.submitted" | "listing.approved" | "listing.rejected" | "listing.status_changed"
    listing_id: str
    title: str
    status: str
    owner_email: str | None
    reason: str | None = None


class Notifier(Protocol):
    def send(self, notification: ListingNotification) -> None: ...


class CeleryNotifier:
    def send(self, notification: ListingNotification) -> None:
        from worker.celery_app import celery

        celery.send_task(
            NOTIFY_TASK,
            kwargs={
                "event": notification.event,
                "listing_id": notification.listing_id,
                "title": notification.title,
                "status": notification.status,
                "to_email": notification.owner_email,
                "reason": notification.reason,
            },
            queue="notifications",
            retry=False,
        )


def notify_best_effort(notifier: Notifier, notification: ListingNotification) -> bool:
    if not notification.owner_email:
        log.info("no owner email for %s, skipping %s", notification.listing_id, notification.event)
        return False
    try:
        notifier.send(notification)
        return True
    except Exception:
        log.exception("notification failed: event=%s listing=%s", notification.event, notification.listing_id)
        return False


@lru_cache
def get_notifier() -> Notifier:
    return CeleryNotifier()
