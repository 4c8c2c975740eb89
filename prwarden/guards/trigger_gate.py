from typing import Optional

from prwarden.config.settings import REVIEW_CRITERIA, REVIEW_DRAFT_PRS
from prwarden.guards.base import GateDecision, GateResult
from prwarden.models.pull_request_event import PullRequestEvent
from prwarden.models.review_record import ReviewRecord, ReviewStatus
from prwarden.models.review_store import ReviewStore
from prwarden.review.errors import InvalidStateError, NotFoundError
from prwarden.review.state_machine import ReviewStateMachine
from prwarden.utils.logger import logger

RELEVANT_ACTIONS = frozenset({"opened", "synchronize", "reopened"})


class TriggerGate:
    """
    Decides whether a webhook delivery or a retry request starts a review run.

    Admission persists the record before the run is handed off, so a second
    delivery for the same pull request sees the new status. The check and the
    write are not atomic; two simultaneous deliveries can both be admitted and
    the orchestrator's compare-and-set claim decides which run proceeds.
    """

    def __init__(
        self,
        store: ReviewStore,
        state_machine: ReviewStateMachine,
        review_draft_prs: bool = REVIEW_DRAFT_PRS,
    ):
        self.store = store
        self.state_machine = state_machine
        self.review_draft_prs = review_draft_prs

    def decide(
        self, event: PullRequestEvent, record: Optional[ReviewRecord]
    ) -> GateDecision:
        if event.action not in RELEVANT_ACTIONS:
            return GateDecision.SKIP_IRRELEVANT_ACTION

        if event.draft and not self.review_draft_prs:
            return GateDecision.SKIP_DRAFT

        if record is not None:
            if record.status == ReviewStatus.COMPLETED and event.action != "synchronize":
                return GateDecision.SKIP_ALREADY_REVIEWED
            if record.status == ReviewStatus.IN_PROGRESS:
                return GateDecision.SKIP_IN_PROGRESS

        return GateDecision.ADMIT

    def admit(self, event: PullRequestEvent) -> GateResult:
        record = self.store.find_by_key(event.owner, event.repo, event.number)
        decision = self.decide(event, record)

        if decision == GateDecision.SKIP_IRRELEVANT_ACTION:
            logger.debug(f"Skipping PR action '{event.action}' for {event.key}")
            return GateResult(decision, record, f"Action '{event.action}' not processed")

        if decision == GateDecision.SKIP_DRAFT:
            reason = f"Pull request {event.key} is a draft"
            if record is not None and record.status in (
                ReviewStatus.PENDING,
                ReviewStatus.FAILED,
            ):
                self.state_machine.mark_skipped(record, reason)
            logger.info(f"Skipping draft PR {event.key}")
            return GateResult(decision, record, reason)

        if decision == GateDecision.SKIP_ALREADY_REVIEWED:
            logger.info(f"PR {event.key} already reviewed, skipping")
            return GateResult(decision, record, "PR already reviewed")

        if decision == GateDecision.SKIP_IN_PROGRESS:
            logger.info(f"Review of {event.key} already in progress, skipping")
            return GateResult(decision, record, "Review already in progress")

        if record is None:
            record = self.store.create(
                ReviewRecord(
                    owner=event.owner,
                    repo=event.repo,
                    pull_request_number=event.number,
                    review_criteria=dict(REVIEW_CRITERIA),
                    **event.snapshot(),
                )
            )
            logger.info(f"Created review record {record.id} for {event.key}")
        else:
            self.state_machine.refresh(record, event.snapshot())
            logger.info(
                f"Refreshed review record {record.id} for {event.key} at {event.head_sha}"
            )

        return GateResult(GateDecision.ADMIT, record, "PR review started")

    def admit_retry(self, owner: str, repo: str, number: int) -> ReviewRecord:
        record = self.store.find_by_key(owner, repo, number)
        if record is None:
            raise NotFoundError(f"Review not found for {owner}/{repo}#{number}")

        if record.status == ReviewStatus.COMPLETED:
            raise InvalidStateError("Review already completed")

        if record.status == ReviewStatus.IN_PROGRESS:
            raise InvalidStateError("Review already in progress")

        self.state_machine.increment_retry(record)
        logger.info(f"Retry {record.retry_count} admitted for {record.key}")
        return record
