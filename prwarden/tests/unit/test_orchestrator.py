import json

import pytest
from unittest.mock import MagicMock

from prwarden.models.review_record import ReviewStatus
from prwarden.review.errors import (
    AIServiceError,
    GitHubError,
    InvalidStateError,
    NotFoundError,
    RemoteFatalError,
    RemoteRetryableExhaustedError,
)
from prwarden.review.orchestrator import ReviewOrchestrator
from prwarden.review.summary import NO_ISSUES_SUMMARY

MODEL_OUTPUT = json.dumps(
    [
        {
            "file": "app/main.py",
            "line": 2,
            "severity": "warning",
            "category": "readability",
            "comment": "Unused import",
        }
    ]
)


@pytest.fixture
def generator():
    gen = MagicMock()
    gen.generate.return_value = MODEL_OUTPUT
    return gen


@pytest.fixture
def orchestrator(store, state_machine, fake_github, generator, no_sleep_retry):
    return ReviewOrchestrator(
        store,
        fake_github,
        generator,
        state_machine=state_machine,
        retry_controller=no_sleep_retry,
    )


def test_successful_review(orchestrator, store, fake_github, generator, make_record):
    record = make_record()

    orchestrator.run("octo", "widgets", 7, record.id)

    stored = store.get(record.id)
    assert stored.status == ReviewStatus.COMPLETED
    assert stored.external_review_id == 991
    assert stored.head_commit_sha == "def456"
    assert stored.files_reviewed[0]["path"] == "app/main.py"
    assert stored.comments[0]["comment"] == "Unused import"
    assert stored.comments[0]["severity"] == "warning"
    assert "Found 1 item(s)" in stored.summary_comment

    generator.generate.assert_called_once()
    assert "app/main.py" in generator.generate.call_args[0][0]
    args, kwargs = fake_github.post_review.call_args
    assert args[:3] == ("octo", "widgets", 7)
    assert kwargs["diff"].files[0].filename == "app/main.py"


def test_missing_record(orchestrator):
    with pytest.raises(NotFoundError):
        orchestrator.run("octo", "widgets", 7, 12345)


def test_record_not_pending_is_rejected(orchestrator, state_machine, fake_github, make_record):
    record = make_record()
    state_machine.mark_in_progress(record)

    with pytest.raises(InvalidStateError):
        orchestrator.run("octo", "widgets", 7, record.id)

    fake_github.get_pull_request_diff.assert_not_called()


def test_already_reviewed_completes_without_posting(
    orchestrator, store, fake_github, generator, make_record
):
    fake_github.has_bot_already_reviewed.return_value = True
    record = make_record(head_commit_sha="abc123")

    orchestrator.run("octo", "widgets", 7, record.id)

    fake_github.has_bot_already_reviewed.assert_called_once_with(
        "octo", "widgets", 7, commit_sha="abc123"
    )

    assert store.get(record.id).status == ReviewStatus.COMPLETED
    generator.generate.assert_not_called()
    fake_github.post_review.assert_not_called()


def test_no_reviewable_files(orchestrator, store, fake_github, sample_diff, generator, make_record):
    sample_diff.files[0].filename = "logo.png"
    record = make_record()

    orchestrator.run("octo", "widgets", 7, record.id)

    assert store.get(record.id).status == ReviewStatus.COMPLETED
    generator.generate.assert_not_called()
    fake_github.post_review.assert_not_called()


def test_unparseable_output_posts_clean_review(
    orchestrator, store, fake_github, generator, make_record
):
    generator.generate.return_value = "I cannot review this."
    record = make_record()

    orchestrator.run("octo", "widgets", 7, record.id)

    stored = store.get(record.id)
    assert stored.status == ReviewStatus.COMPLETED
    assert stored.comments == []
    assert stored.summary_comment == NO_ISSUES_SUMMARY
    assert fake_github.post_review.call_args[0][3] == []


def test_overload_exhaustion_posts_fallback_and_fails(
    orchestrator, store, fake_github, generator, no_sleep_retry, make_record
):
    generator.generate.side_effect = AIServiceError("503", status_code=503, retryable=True)
    record = make_record()

    with pytest.raises(RemoteRetryableExhaustedError):
        orchestrator.run("octo", "widgets", 7, record.id)

    assert generator.generate.call_count == 5
    fake_github.post_fallback_notice.assert_called_once_with("octo", "widgets", 7)
    fake_github.post_review.assert_not_called()
    stored = store.get(record.id)
    assert stored.status == ReviewStatus.FAILED
    assert "after 5 attempts" in stored.error_message


def test_fallback_failure_does_not_mask_error(
    orchestrator, store, fake_github, generator, make_record
):
    generator.generate.side_effect = AIServiceError("503", status_code=503, retryable=True)
    fake_github.post_fallback_notice.side_effect = GitHubError("forbidden", status_code=403)
    record = make_record()

    with pytest.raises(RemoteRetryableExhaustedError):
        orchestrator.run("octo", "widgets", 7, record.id)

    assert store.get(record.id).status == ReviewStatus.FAILED


def test_fatal_generation_error_skips_fallback(
    orchestrator, store, fake_github, generator, make_record
):
    generator.generate.side_effect = AIServiceError("bad key", status_code=401)
    record = make_record()

    with pytest.raises(RemoteFatalError):
        orchestrator.run("octo", "widgets", 7, record.id)

    assert generator.generate.call_count == 1
    fake_github.post_fallback_notice.assert_not_called()
    assert store.get(record.id).status == ReviewStatus.FAILED


def test_post_failure_marks_failed_once(orchestrator, store, fake_github, make_record):
    fake_github.post_review.side_effect = GitHubError("422 Unprocessable", status_code=422)
    record = make_record()

    with pytest.raises(GitHubError):
        orchestrator.run("octo", "widgets", 7, record.id)

    fake_github.post_review.assert_called_once()
    stored = store.get(record.id)
    assert stored.status == ReviewStatus.FAILED
    assert "422" in stored.error_message
