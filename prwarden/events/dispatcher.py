from contextvars import ContextVar
from typing import Optional

import redis
from fastapi import BackgroundTasks
from rq import Queue

from prwarden.config import settings
from prwarden.events.event import Event
from prwarden.events.review_event import ReviewJob, ReviewRequested
from prwarden.review.errors import ReviewError
from prwarden.utils.logger import logger

# Context variable to hold the BackgroundTasks object for the current request
bg_tasks_cv: ContextVar[Optional[BackgroundTasks]] = ContextVar(
    "bg_tasks", default=None
)

q: Optional[Queue] = None


def redis_connection():
    """Connection for the configured queue mode; redislite is an optional extra."""
    if settings.QUEUE_MODE == "redis":
        logger.info("Using Redis for event queue.")
        return redis.Redis(host=settings.REDIS_HOST, port=settings.REDIS_PORT, db=0)
    if settings.QUEUE_MODE == "redislite":
        from redislite import Redis as RedisLite

        logger.info("Using RedisLite for event queue.")
        return RedisLite(settings.REDISLITE_DB_PATH)
    raise ValueError(f"QUEUE_MODE '{settings.QUEUE_MODE}' does not use Redis")


def get_queue() -> Queue:
    global q

    if q is None:
        q = Queue(connection=redis_connection())
    return q


def process_review(owner: str, repo: str, number: int, record_id: int) -> None:
    """Job entry point. Failures are recorded on the review record and logged here."""
    from prwarden.review.service import review_service

    try:
        record = review_service().run_review(owner, repo, number, record_id)
        logger.info(f"Review job finished for {record.key} with status {record.status.value}")
    except ReviewError as e:
        logger.error(f"Review job for {owner}/{repo}#{number} ended with {e.kind.value}: {e}")
    except Exception as e:
        logger.exception(f"Review job for {owner}/{repo}#{number} crashed: {e}")


class EventDispatcher:
    """Dispatches events to the queue."""

    def dispatch(self, event: Event):
        """Dispatches an event to the configured queue or background task runner."""
        mode = settings.QUEUE_MODE
        logger.info(f"Dispatching event: {event} (mode: {mode})")

        if not isinstance(event, ReviewRequested):
            logger.error(f"Unhandled event type: {event}")
            return

        job: ReviewJob = event.data
        args = (job.owner, job.repo, job.number, job.record_id)

        if mode in ["redis", "redislite"]:
            get_queue().enqueue(process_review, *args)
        elif mode == "request":
            background_tasks = bg_tasks_cv.get()
            if not background_tasks:
                raise RuntimeError(
                    "FastAPI BackgroundTasks not found in context. Is the endpoint setting it?"
                )
            background_tasks.add_task(process_review, *args)
        else:
            raise ValueError(
                f"Unknown QUEUE_MODE: '{mode}'. Must be 'redis', 'redislite', or 'request'."
            )
