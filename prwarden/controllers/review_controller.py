import traceback

from prwarden.controllers.base_controller import BaseController
from prwarden.events.dispatcher import EventDispatcher
from prwarden.events.review_event import ReviewJob, ReviewRequested
from prwarden.models.pull_request_event import PullRequestEvent
from prwarden.review.errors import ReviewError
from prwarden.review.service import review_service
from prwarden.utils.logger import logger

dispatcher = EventDispatcher()


def _dispatch(record) -> None:
    dispatcher.dispatch(
        ReviewRequested(
            ReviewJob(
                owner=record.owner,
                repo=record.repo,
                number=record.pull_request_number,
                record_id=record.id,
            )
        )
    )


class ReviewController(BaseController):
    @classmethod
    def handle_pull_request(cls, event: PullRequestEvent):
        """Webhook path: always answers 200 so GitHub does not redeliver."""
        try:
            result = review_service().admit_trigger(event)
            if not result.admitted:
                return cls().success(
                    {"decision": result.decision.value}, result.reason
                )

            _dispatch(result.record)
            return cls().success(
                {"decision": result.decision.value, "review_id": result.record.id},
                result.reason,
            )
        except Exception as e:
            logger.error(f"Error handling pull_request for {event.key}: {e}")
            logger.debug(traceback.format_exc())
            return cls().success({"decision": "error"}, f"Error processing PR: {e}")

    @classmethod
    def show(cls, owner: str, repo: str, number: int):
        try:
            record = review_service().get_review(owner, repo, number)
            return cls().success(
                {
                    "id": record.id,
                    "key": record.key,
                    "status": record.status.value,
                    "comments_count": len(record.comments or []),
                    "retry_count": record.retry_count,
                    "error_message": record.error_message,
                    "head_commit_sha": record.head_commit_sha,
                    "external_review_id": record.external_review_id,
                    "created_at": record.created_at.isoformat(),
                    "review_completed_at": (
                        record.review_completed_at.isoformat()
                        if record.review_completed_at
                        else None
                    ),
                }
            )
        except ReviewError as e:
            return cls().handle_error(e)

    @classmethod
    def retry(cls, owner: str, repo: str, number: int):
        try:
            record = review_service().request_retry(owner, repo, number)
            _dispatch(record)
            return cls().success(
                {"review_id": record.id, "retry_count": record.retry_count},
                "Review retry started",
                status_code=202,
            )
        except ReviewError as e:
            return cls().handle_error(e)

    @classmethod
    def stats(cls, days: int = 30):
        return cls().success(
            {"period_days": days, "statistics": review_service().review_stats(days)}
        )

    @classmethod
    def pending(cls, limit: int = 10):
        records = review_service().pending_reviews(limit)
        return cls().success(
            [
                {
                    "id": r.id,
                    "key": r.key,
                    "retry_count": r.retry_count,
                    "created_at": r.created_at.isoformat(),
                }
                for r in records
            ]
        )
