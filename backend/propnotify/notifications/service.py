"""Notification dispatcher: eligibility, fan-out to device endpoints, expiry feedback.

``send_to_user`` handles one recipient end to end. ``send_bulk`` walks the
recipient list in fixed-size batches: per-user database work stays on the
request session, while the endpoint deliveries of one batch run concurrently
on a thread pool no larger than the batch size. A batch is fully applied and
committed before the next one starts.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceError
from ..integrations.adapters import AdapterFactory
from ..integrations.delivery import DeliveryResult, FailureKind, PushConfig, PushTarget
from ..preferences.eligibility import evaluate, to_local_time
from ..preferences.service import get_preferences
from ..subscriptions.service import active_subscriptions_for, deactivate_by_id, touch
from .history import record_sent
from .schemas import OutboundMessage

logger = logging.getLogger(__name__)

NO_SUBSCRIPTIONS = "no_subscriptions"


@dataclass
class _Dispatch:
    """Per-recipient work item prepared on the request thread."""

    user_id: UUID
    blocked: str | None = None
    history_id: UUID | None = None
    targets: list[PushTarget] = field(default_factory=list)


def build_payload(message: OutboundMessage, history_id: UUID, default_icon: str = "") -> dict:
    """Push payload understood by the service worker; data.notification_id links clicks back."""
    return {
        "title": message.title,
        "body": message.body,
        "icon": message.icon or default_icon,
        "image": message.image,
        "tag": f"notification-{history_id}",
        "data": {
            **message.metadata,
            "notification_id": str(history_id),
            "type": message.category or "other",
            "url": message.action_url or "/",
            "related_entity_id": message.related_entity_id,
        },
    }


def _chunks(items: list, size: int) -> Iterator[list]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class NotificationDispatcher:
    def __init__(
        self,
        db: Session,
        config: PushConfig,
        adapters: AdapterFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.config = config
        self.adapters = adapters or AdapterFactory(config)
        self._clock = clock or (lambda: datetime.now(UTC))

    # --- Single recipient -------------------------------------------------------

    def send_to_user(self, user_id: UUID, message: OutboundMessage) -> dict:
        """Deliver *message* to every active endpoint of one user.

        Raises :class:`PersistenceError` if the history row or the delivery
        feedback cannot be written.
        """
        job = self._prepare(user_id, message)
        if job.blocked:
            return {"sent": 0, "failed": 0, "blocked": job.blocked}
        if not job.targets:
            return {"sent": 0, "failed": 0, "reason": NO_SUBSCRIPTIONS}

        results = self._deliver(job, message)
        sent, failed = self._settle(job, results)
        return {"sent": sent, "failed": failed}

    # --- Bulk -------------------------------------------------------------------

    def send_bulk(self, user_ids: Iterable[UUID], message: OutboundMessage) -> dict:
        unique_ids = list(dict.fromkeys(user_ids))
        totals = {"sent": 0, "blocked": 0, "failed": 0, "batches": 0}

        for batch in _chunks(unique_ids, self.config.batch_size):
            totals["batches"] += 1
            jobs = []
            for user_id in batch:
                try:
                    job = self._prepare(user_id, message)
                except PersistenceError:
                    totals["failed"] += 1
                    continue
                if job.blocked:
                    totals["blocked"] += 1
                elif job.targets:
                    jobs.append(job)

            with ThreadPoolExecutor(max_workers=self.config.batch_size) as pool:
                outcomes = list(pool.map(lambda j: self._deliver(j, message), jobs))

            for job, results in zip(jobs, outcomes, strict=True):
                try:
                    sent, failed = self._settle(job, results)
                except PersistenceError:
                    totals["failed"] += 1
                    continue
                totals["sent"] += sent
                totals["failed"] += failed

            logger.info(
                "Bulk batch %d done: %d users, %d delivering",
                totals["batches"], len(batch), len(jobs),
            )

        logger.info(
            "Bulk send finished: %d users, sent=%d blocked=%d failed=%d",
            len(unique_ids), totals["sent"], totals["blocked"], totals["failed"],
        )
        return totals

    # --- Steps ------------------------------------------------------------------

    def _prepare(self, user_id: UUID, message: OutboundMessage) -> _Dispatch:
        """Eligibility, endpoint snapshot and history write for one user."""
        now = self._clock()
        try:
            prefs = get_preferences(self.db, user_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"Failed to load preferences for user {user_id}") from exc

        decision = evaluate(
            prefs,
            message.category,
            to_local_time(now, self.config.quiet_hours_utc_offset_minutes),
        )
        if not decision.allowed:
            logger.debug("Push to user %s blocked: %s", user_id, decision.reason)
            return _Dispatch(user_id, blocked=str(decision.reason))

        try:
            targets = [PushTarget.from_subscription(s) for s in active_subscriptions_for(self.db, user_id)]
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"Failed to load subscriptions for user {user_id}") from exc
        if not targets:
            return _Dispatch(user_id)

        history_id = record_sent(self.db, user_id, message, now)
        return _Dispatch(user_id, history_id=history_id, targets=targets)

    def _deliver(self, job: _Dispatch, message: OutboundMessage) -> list[DeliveryResult]:
        """Send to every endpoint of one user. Runs on worker threads; no ORM access."""
        payload = build_payload(message, job.history_id, self.config.default_icon)
        results = []
        for target in job.targets:
            adapter = self.adapters.for_target(target)
            try:
                result = adapter.send(target, payload)
            except Exception as exc:
                logger.exception("Adapter %s crashed on subscription %s", adapter.name, target.subscription_id)
                result = DeliveryResult.failed(FailureKind.OTHER, detail=str(exc))
            if not result.success:
                logger.warning(
                    "Push via %s to subscription %s failed (%s, status=%s): %s",
                    adapter.name, target.subscription_id, result.failure, result.status_code, result.detail,
                )
            results.append(result)
        return results

    def _settle(self, job: _Dispatch, results: list[DeliveryResult]) -> tuple[int, int]:
        """Apply delivery feedback for one user and commit it.

        Raises :class:`PersistenceError` if the registry update cannot be
        stored; the deliveries themselves have already happened.
        """
        try:
            counts = self._apply(job, results)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Delivery feedback for user %s not stored: %s", job.user_id, exc)
            raise PersistenceError(f"Failed to store delivery feedback for user {job.user_id}") from exc
        return counts

    def _apply(self, job: _Dispatch, results: list[DeliveryResult]) -> tuple[int, int]:
        """Count outcomes and feed them back into the registry."""
        sent = failed = 0
        now = self._clock()
        for target, result in zip(job.targets, results, strict=True):
            if result.success:
                sent += 1
                touch(self.db, target.subscription_id, now)
                continue
            failed += 1
            if result.expired:
                logger.info("Subscription %s expired, deactivating", target.subscription_id)
                deactivate_by_id(self.db, target.subscription_id)
        return sent, failed
