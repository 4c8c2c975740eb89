from functools import lru_cache
from typing import Any, Dict, List, Optional

from prwarden.config import settings
from prwarden.config.db import get_engine
from prwarden.guards.base import GateResult
from prwarden.guards.trigger_gate import TriggerGate
from prwarden.models.pull_request_event import PullRequestEvent
from prwarden.models.review_record import ReviewRecord
from prwarden.models.review_store import ReviewStore, SQLReviewStore
from prwarden.review.errors import NotFoundError
from prwarden.review.orchestrator import ReviewOrchestrator
from prwarden.review.retry import RetryController
from prwarden.review.state_machine import ReviewStateMachine


class ReviewService:
    """Entry points shared by the webhook route, the review API and the job runner."""

    def __init__(
        self,
        store: ReviewStore,
        github=None,
        generator=None,
        retry_controller: Optional[RetryController] = None,
        review_draft_prs: bool = settings.REVIEW_DRAFT_PRS,
    ):
        self.store = store
        self.state_machine = ReviewStateMachine(store)
        self.gate = TriggerGate(store, self.state_machine, review_draft_prs)
        self.retry_controller = retry_controller or RetryController(
            max_attempts=settings.AI_MAX_ATTEMPTS
        )
        self._github = github
        self._generator = generator

    @property
    def github(self):
        if self._github is None:
            from prwarden.integrations.github.github import GitHub

            self._github = GitHub()
        return self._github

    @property
    def generator(self):
        if self._generator is None:
            from prwarden.llms.llm_factory import llm

            self._generator = llm()
        return self._generator

    def admit_trigger(self, event: PullRequestEvent) -> GateResult:
        return self.gate.admit(event)

    def request_retry(self, owner: str, repo: str, number: int) -> ReviewRecord:
        return self.gate.admit_retry(owner, repo, number)

    def run_review(self, owner: str, repo: str, number: int, record_id: int) -> ReviewRecord:
        orchestrator = ReviewOrchestrator(
            self.store,
            self.github,
            self.generator,
            state_machine=self.state_machine,
            retry_controller=self.retry_controller,
        )
        return orchestrator.run(owner, repo, number, record_id)

    def get_review(self, owner: str, repo: str, number: int) -> ReviewRecord:
        record = self.store.find_by_key(owner, repo, number)
        if record is None:
            raise NotFoundError(f"Review not found for {owner}/{repo}#{number}")
        return record

    def review_stats(self, days: int = 30) -> List[Dict[str, Any]]:
        return self.store.status_counts(days)

    def pending_reviews(self, limit: int = 10) -> List[ReviewRecord]:
        return self.store.list_pending(limit)


@lru_cache(maxsize=None)
def review_service() -> ReviewService:
    """Process-wide service bound to the configured database."""
    return ReviewService(SQLReviewStore(get_engine()))
