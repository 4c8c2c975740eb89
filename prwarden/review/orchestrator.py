from typing import Dict, List, Optional

from prwarden.config import settings
from prwarden.integrations.github.types import PullRequestDiff
from prwarden.llms.llm_interface import LLMInterface
from prwarden.models.review_comment import ReviewComment, ReviewedFile
from prwarden.models.review_record import ReviewRecord
from prwarden.models.review_store import ReviewStore
from prwarden.prompts.prompts import build_review_prompt
from prwarden.review.errors import NotFoundError, RemoteRetryableExhaustedError
from prwarden.review.response_parser import ParseFailure, parse_review_response
from prwarden.review.retry import RetryController
from prwarden.review.state_machine import ReviewStateMachine
from prwarden.review.summary import build_summary
from prwarden.utils.file_filter import filter_reviewable_files
from prwarden.utils.logger import logger


class ReviewOrchestrator:
    """
    Drives one review record through fetch, generate, post and finalize.

    Every external side effect happens at most once per run. Only generation
    is retried (inside the RetryController); fetch and post failures fail the
    run and are retried only by a later trigger.
    """

    def __init__(
        self,
        store: ReviewStore,
        github,
        generator: LLMInterface,
        state_machine: Optional[ReviewStateMachine] = None,
        retry_controller: Optional[RetryController] = None,
        max_file_changes: int = settings.MAX_FILE_CHANGES,
        review_criteria: Optional[Dict[str, bool]] = None,
    ):
        self.store = store
        self.github = github
        self.generator = generator
        self.state_machine = state_machine or ReviewStateMachine(store)
        self.retry_controller = retry_controller or RetryController(
            max_attempts=settings.AI_MAX_ATTEMPTS
        )
        self.max_file_changes = max_file_changes
        self.review_criteria = review_criteria or dict(settings.REVIEW_CRITERIA)

    def run(self, owner: str, repo: str, number: int, record_id: int) -> ReviewRecord:
        record = self.store.get(record_id)
        if record is None:
            raise NotFoundError(f"Review record {record_id} not found")

        self.state_machine.mark_in_progress(record)
        logger.info(f"Starting code review process for {owner}/{repo}#{number} (record {record_id})")

        try:
            return self._review(owner, repo, number, record)
        except Exception as e:
            logger.error(
                f"Code review process failed for {owner}/{repo}#{number}: {e}",
                exc_info=True,
            )
            if isinstance(e, RemoteRetryableExhaustedError):
                self._post_fallback_notice(owner, repo, number)

            try:
                self.state_machine.mark_failed(record, str(e))
            except Exception as mark_error:
                logger.error(f"Could not mark review {record.key} as failed: {mark_error}")
            raise

    def _review(
        self, owner: str, repo: str, number: int, record: ReviewRecord
    ) -> ReviewRecord:
        if self.github.has_bot_already_reviewed(
            owner, repo, number, commit_sha=record.head_commit_sha
        ):
            logger.info(
                f"Bot has already reviewed {owner}/{repo}#{number} at {record.head_commit_sha}"
            )
            return self.state_machine.mark_completed(record)

        diff = self.github.get_pull_request_diff(owner, repo, number)
        reviewable = filter_reviewable_files(diff.files, self.max_file_changes)
        logger.info(
            f"{len(reviewable)} of {len(diff.files)} changed file(s) are reviewable "
            f"for {owner}/{repo}#{number}"
        )
        diff = diff.model_copy(update={"files": reviewable})
        self._record_fetch(record, diff)

        if not reviewable:
            logger.info(f"No reviewable files found for {owner}/{repo}#{number}")
            return self.state_machine.mark_completed(record)

        prompt = build_review_prompt(diff, self.review_criteria)
        raw = self.retry_controller.run(
            lambda: self.generator.generate(prompt),
            description="code review generation",
        )
        comments = self._parse(raw)
        summary = build_summary(comments)

        record.comments = [c.model_dump(mode="json") for c in comments]
        record.summary_comment = summary
        self.store.save(record)

        posted = self.github.post_review(owner, repo, number, comments, summary, diff=diff)
        self.state_machine.mark_completed(record, posted.external_review_id)

        logger.info(
            f"Code review completed for {owner}/{repo}#{number}: {len(comments)} comment(s), "
            f"review {posted.external_review_id}"
        )
        return record

    def _record_fetch(self, record: ReviewRecord, diff: PullRequestDiff) -> None:
        metadata = diff.metadata
        record.files_reviewed = [
            ReviewedFile(
                path=f.filename,
                status=f.status,
                additions=f.additions,
                deletions=f.deletions,
                changes=f.changes,
            ).model_dump()
            for f in diff.files
        ]
        record.title = metadata.title or record.title
        record.description = metadata.description or record.description
        record.author = metadata.author or record.author
        record.base_branch = metadata.base_branch or record.base_branch
        record.head_branch = metadata.head_branch or record.head_branch
        record.head_commit_sha = metadata.head_sha or record.head_commit_sha
        record.review_criteria = dict(self.review_criteria)
        self.store.save(record)

    @staticmethod
    def _parse(raw: str) -> List[ReviewComment]:
        result = parse_review_response(raw)
        if isinstance(result, ParseFailure):
            logger.warning(f"Model response could not be parsed, treating as no comments: {result.reason}")
            return []
        if result.dropped:
            logger.warning(f"Dropped {result.dropped} malformed comment(s) from the model response")
        return result.comments

    def _post_fallback_notice(self, owner: str, repo: str, number: int) -> None:
        try:
            self.github.post_fallback_notice(owner, repo, number)
            logger.info(f"Posted fallback comment due to AI overload on {owner}/{repo}#{number}")
        except Exception as e:
            logger.error(f"Failed to post fallback comment on {owner}/{repo}#{number}: {e}")
