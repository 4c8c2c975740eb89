import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from prwarden.api.main import app
from prwarden.api.routes.pr import verify_signature
from prwarden.guards.base import GateDecision, GateResult

SECRET = "test_secret"

PAYLOAD = {
    "action": "opened",
    "number": 7,
    "pull_request": {
        "number": 7,
        "title": "Add sys import",
        "body": "Imports sys",
        "draft": False,
        "user": {"login": "alice"},
        "base": {"ref": "main"},
        "head": {"ref": "feature", "sha": "abc123"},
    },
    "repository": {"name": "widgets", "full_name": "octo/widgets", "owner": {"login": "octo"}},
    "sender": {"login": "alice"},
}


def sign(body: bytes) -> str:
    return "sha256=" + hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()


@pytest.fixture
def client():
    with patch("prwarden.config.settings.GITHUB_SECRET", SECRET):
        yield TestClient(app)


@pytest.fixture
def service():
    with patch("prwarden.controllers.review_controller.review_service") as mock:
        yield mock.return_value


@pytest.fixture
def dispatcher():
    with patch("prwarden.controllers.review_controller.dispatcher") as mock:
        yield mock


def post(client, event, payload, signature=None):
    body = json.dumps(payload).encode()
    return client.post(
        "/api/prs/github-webhook",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-GitHub-Event": event,
            "X-GitHub-Delivery": "delivery-1",
            "X-Hub-Signature-256": signature or sign(body),
        },
    )


def test_verify_signature():
    body = b'{"a": 1}'
    assert verify_signature(body, sign(body), SECRET)
    assert not verify_signature(body, "sha256=deadbeef", SECRET)
    assert not verify_signature(body, None, SECRET)
    assert verify_signature(body, None, None)


def test_bad_signature_is_rejected(client, service):
    response = post(client, "pull_request", PAYLOAD, signature="sha256=deadbeef")

    assert response.status_code == 400
    service.admit_trigger.assert_not_called()


def test_ping(client):
    response = post(client, "ping", {"zen": "Keep it logically awesome."})

    assert response.status_code == 200
    assert response.json()["data"]["zen"] == "Keep it logically awesome."


def test_admitted_pull_request_is_dispatched(client, service, dispatcher):
    record = MagicMock(id=11, owner="octo", repo="widgets", pull_request_number=7)
    service.admit_trigger.return_value = GateResult(GateDecision.ADMIT, record, "PR review started")

    response = post(client, "pull_request", PAYLOAD)

    assert response.status_code == 200
    assert response.json()["data"] == {"decision": "admit", "review_id": 11}
    event = service.admit_trigger.call_args[0][0]
    assert event.key == "octo/widgets#7"
    assert event.head_sha == "abc123"
    assert event.delivery_id == "delivery-1"
    job = dispatcher.dispatch.call_args[0][0].data
    assert (job.owner, job.repo, job.number, job.record_id) == ("octo", "widgets", 7, 11)


def test_skipped_pull_request_is_not_dispatched(client, service, dispatcher):
    service.admit_trigger.return_value = GateResult(
        GateDecision.SKIP_DRAFT, None, "Pull request octo/widgets#7 is a draft"
    )

    response = post(client, "pull_request", PAYLOAD)

    assert response.status_code == 200
    assert response.json()["data"]["decision"] == "skip_draft"
    dispatcher.dispatch.assert_not_called()


def test_handler_errors_still_acknowledge(client, service, dispatcher):
    service.admit_trigger.side_effect = RuntimeError("database is locked")

    response = post(client, "pull_request", PAYLOAD)

    assert response.status_code == 200
    assert "database is locked" in response.json()["message"]


def test_pull_request_review_is_acknowledged(client, service):
    payload = dict(PAYLOAD, action="submitted", review={"id": 5, "user": {"login": "bob"}})

    response = post(client, "pull_request_review", payload)

    assert response.status_code == 200
    service.admit_trigger.assert_not_called()


def test_other_events_are_not_processed(client, service):
    response = post(client, "issues", {"action": "opened", "repository": PAYLOAD["repository"]})

    assert response.status_code == 200
    assert "not processed" in response.json()["message"]
