from typing import Any, Callable, Dict, FrozenSet, Optional

from prwarden.models.base_model import utcnow
from prwarden.models.review_record import ReviewRecord, ReviewStatus, SNAPSHOT_FIELDS
from prwarden.models.review_store import ReviewStore
from prwarden.review.errors import InvalidStateError
from prwarden.utils.logger import logger


PENDING = ReviewStatus.PENDING
IN_PROGRESS = ReviewStatus.IN_PROGRESS
COMPLETED = ReviewStatus.COMPLETED
FAILED = ReviewStatus.FAILED
SKIPPED = ReviewStatus.SKIPPED

TRANSITIONS: Dict[ReviewStatus, FrozenSet[ReviewStatus]] = {
    PENDING: frozenset({IN_PROGRESS, PENDING, SKIPPED}),
    IN_PROGRESS: frozenset({COMPLETED, FAILED}),
    COMPLETED: frozenset({PENDING}),
    FAILED: frozenset({PENDING, SKIPPED}),
    SKIPPED: frozenset({PENDING}),
}


def can_transition(current: ReviewStatus, target: ReviewStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


class ReviewStateMachine:
    """
    Moves review records along the legal status graph.

    Every transition is written with a compare-and-set on the status the
    record had when it was read, so a writer that lost a race gets an
    InvalidStateError instead of silently overwriting the winner.
    """

    def __init__(
        self, store: ReviewStore, clock: Callable[[], Any] = utcnow
    ):
        self.store = store
        self.clock = clock

    def mark_in_progress(self, record: ReviewRecord) -> ReviewRecord:
        return self._transition(
            record,
            {PENDING},
            IN_PROGRESS,
            review_started_at=self.clock(),
        )

    def mark_completed(
        self, record: ReviewRecord, external_review_id: Optional[int] = None
    ) -> ReviewRecord:
        changes: Dict[str, Any] = {"review_completed_at": self.clock()}
        if external_review_id is not None:
            changes["external_review_id"] = external_review_id
        return self._transition(record, {IN_PROGRESS}, COMPLETED, **changes)

    def mark_failed(self, record: ReviewRecord, message: str) -> ReviewRecord:
        return self._transition(
            record,
            {IN_PROGRESS},
            FAILED,
            review_completed_at=self.clock(),
            error_message=message,
        )

    def increment_retry(self, record: ReviewRecord) -> ReviewRecord:
        return self._transition(
            record,
            {FAILED, PENDING, SKIPPED},
            PENDING,
            retry_count=record.retry_count + 1,
            error_message=None,
            review_completed_at=None,
        )

    def refresh(self, record: ReviewRecord, snapshot: Dict[str, Any]) -> ReviewRecord:
        """Re-arm a record for a new commit or a re-opened pull request."""
        changes: Dict[str, Any] = {
            name: value for name, value in snapshot.items() if name in SNAPSHOT_FIELDS
        }
        changes.update(error_message=None, review_completed_at=None)
        return self._transition(
            record, {PENDING, COMPLETED, FAILED, SKIPPED}, PENDING, **changes
        )

    def mark_skipped(self, record: ReviewRecord, reason: str) -> ReviewRecord:
        logger.info(f"Skipping review {record.key}: {reason}")
        return self._transition(
            record, {PENDING, FAILED}, SKIPPED, review_completed_at=self.clock()
        )

    def _transition(
        self,
        record: ReviewRecord,
        allowed_from: set,
        target: ReviewStatus,
        **changes: Any,
    ) -> ReviewRecord:
        current = record.status
        if current not in allowed_from or not can_transition(current, target):
            raise InvalidStateError(
                f"Cannot move review {record.key} from {current.value} to {target.value}"
            )

        if not self.store.compare_and_set(record, current, status=target, **changes):
            raise InvalidStateError(
                f"Review {record.key} changed status concurrently; expected {current.value}"
            )

        logger.info(f"Review {record.key}: {current.value} -> {target.value}")
        return record
