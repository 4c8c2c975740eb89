import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from prwarden.integrations.github.types import (
    ChangedFile,
    PostedReview,
    PullRequestDiff,
    PullRequestMetadata,
)
from prwarden.models.pull_request_event import PullRequestEvent
from prwarden.models.review_record import ReviewRecord
from prwarden.models.review_store import SQLReviewStore
from prwarden.review.retry import RetryController
from prwarden.review.state_machine import ReviewStateMachine

SAMPLE_PATCH = "@@ -1,2 +1,3 @@\n import os\n+import sys\n print('hi')"


@pytest.fixture(autouse=True)
def mock_gemini_client(monkeypatch):
    """
    Runs for every test so no real Gemini client is ever built.

    Sets a dummy GEMINI_API_KEY and patches the Gemini class inside the
    factory module, clearing the factory cache on both sides.
    """
    monkeypatch.setenv("GEMINI_API_KEY", "dummy-key-for-testing")

    from prwarden.llms.llm_factory import llm

    llm.cache_clear()
    with patch("prwarden.llms.llm_factory.Gemini", autospec=True) as mock_gemini:
        mock_gemini.return_value.generate.return_value = "[]"
        yield mock_gemini
    llm.cache_clear()


@pytest.fixture
def engine():
    """In-memory SQLite shared across connections through a single pool slot."""
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(db_engine)
    yield db_engine
    SQLModel.metadata.drop_all(db_engine)


@pytest.fixture
def store(engine):
    return SQLReviewStore(engine)


@pytest.fixture
def state_machine(store):
    return ReviewStateMachine(store)


@pytest.fixture
def no_sleep_retry():
    sleeps = []
    controller = RetryController(max_attempts=5, sleep=sleeps.append, random=lambda: 0.5)
    controller.sleeps = sleeps
    return controller


@pytest.fixture
def make_record(store):
    def _make(owner="octo", repo="widgets", number=7, **fields):
        fields.setdefault("repository_full_name", f"{owner}/{repo}")
        return store.create(
            ReviewRecord(owner=owner, repo=repo, pull_request_number=number, **fields)
        )

    return _make


@pytest.fixture
def make_event():
    def _make(action="opened", draft=False, number=7, head_sha="abc123", **fields):
        values = dict(
            action=action,
            owner="octo",
            repo="widgets",
            repository_full_name="octo/widgets",
            number=number,
            title="Add sys import",
            description="Imports sys",
            author="alice",
            base_branch="main",
            head_branch="feature",
            head_sha=head_sha,
            draft=draft,
        )
        values.update(fields)
        return PullRequestEvent(**values)

    return _make


@pytest.fixture
def sample_diff():
    return PullRequestDiff(
        owner="octo",
        repo="widgets",
        number=7,
        metadata=PullRequestMetadata(
            title="Add sys import",
            description="Imports sys",
            author="alice",
            base_branch="main",
            head_branch="feature",
            head_sha="def456",
        ),
        files=[
            ChangedFile(
                filename="app/main.py",
                status="modified",
                additions=1,
                deletions=0,
                changes=1,
                patch=SAMPLE_PATCH,
            )
        ],
    )


@pytest.fixture
def fake_github(sample_diff):
    github = MagicMock()
    github.has_bot_already_reviewed.return_value = False
    github.get_pull_request_diff.return_value = sample_diff
    github.post_review.return_value = PostedReview(external_review_id=991, comments_posted=1)
    return github
