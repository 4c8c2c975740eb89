from fastapi import (
    APIRouter,
    HTTPException,
    Request,
    Header,
    Depends,
    Body,
    BackgroundTasks,
)
from prwarden.controllers.base_controller import BaseController
from prwarden.controllers.review_controller import ReviewController
from prwarden.events.dispatcher import bg_tasks_cv
from prwarden.config import settings
from prwarden.models.pull_request_event import PullRequestEvent
from prwarden.utils.logger import logger
from typing import Optional
from pydantic import BaseModel, ConfigDict
import hmac
import hashlib


router = APIRouter()


class GitHubWebhookPayload(BaseModel):
    action: Optional[str] = None
    pull_request: Optional[dict] = None
    review: Optional[dict] = None
    repository: Optional[dict] = None
    sender: Optional[dict] = None
    zen: Optional[str] = None

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "action": "opened",
                "pull_request": {
                    "number": 1,
                    "title": "Example PR Title",
                    "draft": False,
                    "head": {"ref": "feature", "sha": "abc123"},
                    "base": {"ref": "main"},
                },
                "repository": {
                    "name": "repo",
                    "full_name": "octo/repo",
                    "owner": {"login": "octo"},
                },
                "sender": {"login": "octocat"},
            }
        },
    )


def verify_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """HMAC-SHA256 check of the raw body; unsigned setups accept everything."""
    if not secret:
        return True
    if not signature:
        return False
    digest = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={digest}", signature)


def get_event(event: str = Header(None, alias="X-GitHub-Event")):
    return event


@router.post("/github-webhook")
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    signature: str = Header(None, alias="X-Hub-Signature-256"),
    delivery_id: str = Header(None, alias="X-GitHub-Delivery"),
    event: str = Depends(get_event),
    payload: GitHubWebhookPayload = Body(...),
):
    payload_data = await request.body()
    if not verify_signature(payload_data, signature, settings.GITHUB_SECRET):
        raise HTTPException(status_code=400, detail="Invalid GitHub signature")

    logger.info(f"Received GitHub event '{event}' (delivery {delivery_id})")

    if event == "ping":
        return BaseController().success({"zen": payload.zen}, "pong")

    if event == "pull_request":
        if not payload.pull_request or not payload.repository:
            return BaseController().success(
                {"decision": "ignored"}, "Payload has no pull request"
            )
        bg_tasks_cv.set(background_tasks)
        pr_event = PullRequestEvent.from_payload(payload.model_dump(), delivery_id)
        return ReviewController.handle_pull_request(pr_event)

    if event == "pull_request_review":
        review = payload.review or {}
        logger.info(
            f"Review {review.get('id')} {payload.action} by "
            f"{(review.get('user') or {}).get('login')}"
        )
        return BaseController().success({"event": event}, "Review event received")

    return BaseController().success({"event": event}, f"Event '{event}' not processed")
