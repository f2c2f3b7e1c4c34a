"""
Listing commit coordinator.

The listing row and its media rows are written in two separate commits. The
sequence is modelled as a saga: each step may register a compensating action,
and when a later step fails the completed steps are compensated in reverse
order. The listing is first written in the ``draft`` staging state (which may
legitimately have zero media) and only switched to its real status in the same
commit that links the media, so no reader ever sees a non-draft listing
without images.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.errors import CommitFailedError, ListingHubError
from listing_hub.core.ids import gen_id
from listing_hub.models.listing import Listing
from listing_hub.models.listing_media import ListingMedia
from listing_hub.services.audit import audit
from listing_hub.services.listing_state import ListingStatus

log = logging.getLogger(__name__)

StepFn = Callable[[], Awaitable[None]]


@dataclass
class SagaStep:
    name: str
    action: StepFn
    compensation: StepFn | None = None


class SagaFailed(Exception):
    def __init__(self, step: str, compensated: bool, cause: BaseException):
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.compensated = compensated
        self.cause = cause


class Saga:
    def __init__(self, steps: list[SagaStep]):
        self.steps = steps

    async def run(self) -> None:
        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                await step.action()
            except Exception as e:
                log.exception("saga step %s failed", step.name)
                compensated = await self._compensate(completed)
                raise SagaFailed(step.name, compensated, e) from e
            completed.append(step)

    async def _compensate(self, completed: list[SagaStep]) -> bool:
        ok = True
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                await step.compensation()
            except Exception:
                ok = False
                log.exception("compensation for %s failed", step.name)
        return ok


@dataclass
class CommitResult:
    listing_id: str
    status: str
    linked: int


@dataclass
class ListingCommitSaga:
    db: AsyncSession
    values: dict[str, Any]
    media_urls: list[str]
    final_status: ListingStatus
    actor_account_id: str
    primary_index: int | None = None
    audit_detail: dict[str, Any] = field(default_factory=dict)
    # runs inside the insert transaction, before the row is added
    before_insert: StepFn | None = None

    listing_id: str = field(default_factory=lambda: gen_id("lst"))

    def primary_position(self) -> int:
        idx = self.primary_index
        if idx is None or idx < 0 or idx >= len(self.media_urls):
            return 0
        return idx

    async def _insert_listing(self) -> None:
        if self.before_insert is not None:
            await self.before_insert()
        self.db.add(Listing(
            id=self.listing_id,
            **self.values,
            status=ListingStatus.DRAFT.value,
            images=[],
        ))
        await self.db.commit()

    async def _delete_listing(self) -> None:
        await self.db.rollback()
        await self.db.execute(delete(ListingMedia).where(ListingMedia.listing_id == self.listing_id))
        await self.db.execute(delete(Listing).where(Listing.id == self.listing_id))
        await self.db.commit()
        log.info("compensating delete removed listing %s", self.listing_id)

    async def _link_media(self) -> None:
        primary = self.primary_position()
        self.db.add_all([
            ListingMedia(
                listing_id=self.listing_id,
                url=url,
                media_type="image",
                is_primary=(i == primary),
                display_order=i,
            )
            for i, url in enumerate(self.media_urls)
        ])
        await self.db.execute(
            update(Listing)
            .where(Listing.id == self.listing_id)
            .values(images=list(self.media_urls), status=self.final_status.value)
        )
        audit(
            self.db,
            tenant_id=self.values.get("tenant_id"),
            actor_account_id=self.actor_account_id,
            action="listing.submitted",
            target_type="listing",
            target_id=self.listing_id,
            detail={**self.audit_detail, "status": self.final_status.value, "images": len(self.media_urls)},
        )
        await self.db.commit()

    async def run(self) -> CommitResult:
        saga = Saga([
            SagaStep("insert_listing", self._insert_listing, self._delete_listing),
            SagaStep("link_media", self._link_media),
        ])
        try:
            await saga.run()
        except SagaFailed as e:
            if e.step == "insert_listing":
                # nothing was written, or the insert itself was rolled back
                await self.db.rollback()
                if isinstance(e.cause, ListingHubError):
                    # e.g. the quota re-check under lock
                    raise e.cause
            raise CommitFailedError(
                step=e.step,
                rollback_succeeded=e.compensated,
                listing_id=self.listing_id,
                reason=f"{type(e.cause).__name__}: {e.cause}",
            ) from e.cause

        return CommitResult(listing_id=self.listing_id, status=self.final_status.value, linked=len(self.media_urls))
