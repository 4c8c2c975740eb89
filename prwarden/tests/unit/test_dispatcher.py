import pytest
from unittest.mock import MagicMock, patch
from fastapi import BackgroundTasks

from prwarden.events.dispatcher import EventDispatcher, bg_tasks_cv, process_review
from prwarden.events.event import Event
from prwarden.events.review_event import ReviewJob, ReviewRequested
from prwarden.review.errors import RemoteFatalError


@pytest.fixture
def event():
    return ReviewRequested(ReviewJob(owner="octo", repo="widgets", number=7, record_id=1))


class TestDispatcher:
    def test_dispatch_request_mode(self, monkeypatch, event):
        monkeypatch.setattr("prwarden.config.settings.QUEUE_MODE", "request")
        background_tasks = BackgroundTasks()
        background_tasks.add_task = MagicMock()
        bg_tasks_cv.set(background_tasks)

        EventDispatcher().dispatch(event)

        background_tasks.add_task.assert_called_once_with(
            process_review, "octo", "widgets", 7, 1
        )

    def test_dispatch_request_mode_without_background_tasks(self, monkeypatch, event):
        monkeypatch.setattr("prwarden.config.settings.QUEUE_MODE", "request")
        bg_tasks_cv.set(None)

        with pytest.raises(RuntimeError):
            EventDispatcher().dispatch(event)

    def test_dispatch_uses_redis_when_mode_is_redis(self, monkeypatch, event):
        monkeypatch.setattr("prwarden.config.settings.QUEUE_MODE", "redis")

        with patch("prwarden.events.dispatcher.q") as mock_q:
            EventDispatcher().dispatch(event)

        mock_q.enqueue.assert_called_once_with(process_review, "octo", "widgets", 7, 1)

    def test_unknown_event_is_ignored(self, monkeypatch):
        monkeypatch.setattr("prwarden.config.settings.QUEUE_MODE", "request")
        background_tasks = BackgroundTasks()
        background_tasks.add_task = MagicMock()
        bg_tasks_cv.set(background_tasks)

        EventDispatcher().dispatch(Event({"anything": True}))

        background_tasks.add_task.assert_not_called()


class TestProcessReview:
    @patch("prwarden.review.service.review_service")
    def test_runs_the_review(self, mock_review_service):
        process_review("octo", "widgets", 7, 1)

        mock_review_service.return_value.run_review.assert_called_once_with(
            "octo", "widgets", 7, 1
        )

    @patch("prwarden.review.service.review_service")
    def test_failures_are_logged_not_raised(self, mock_review_service):
        mock_review_service.return_value.run_review.side_effect = RemoteFatalError(
            "bad key", attempts=1, cause=None
        )

        process_review("octo", "widgets", 7, 1)

    @patch("prwarden.review.service.review_service")
    def test_unexpected_errors_are_logged_not_raised(self, mock_review_service):
        mock_review_service.return_value.run_review.side_effect = RuntimeError("db gone")

        process_review("octo", "widgets", 7, 1)
