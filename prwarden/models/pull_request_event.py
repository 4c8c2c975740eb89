from pydantic import BaseModel
from typing import Any, Dict, Optional


class PullRequestEvent(BaseModel):
    """A `pull_request` webhook delivery, reduced to what the trigger gate needs."""

    action: Optional[str] = None
    owner: str
    repo: str
    repository_full_name: str
    number: int
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    base_branch: Optional[str] = None
    head_branch: Optional[str] = None
    head_sha: Optional[str] = None
    draft: bool = False
    delivery_id: Optional[str] = None

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], delivery_id: Optional[str] = None
    ) -> "PullRequestEvent":
        pull_request = payload.get("pull_request") or {}
        repository = payload.get("repository") or {}
        owner = (repository.get("owner") or {}).get("login")
        name = repository.get("name")
        full_name = repository.get("full_name") or f"{owner}/{name}"
        if not owner or not name:
            owner, _, name = full_name.partition("/")

        return cls(
            action=payload.get("action"),
            owner=owner,
            repo=name,
            repository_full_name=full_name,
            number=pull_request.get("number") or payload.get("number"),
            title=pull_request.get("title"),
            description=pull_request.get("body"),
            author=(pull_request.get("user") or {}).get("login"),
            base_branch=(pull_request.get("base") or {}).get("ref"),
            head_branch=(pull_request.get("head") or {}).get("ref"),
            head_sha=(pull_request.get("head") or {}).get("sha"),
            draft=bool(pull_request.get("draft", False)),
            delivery_id=delivery_id,
        )

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"

    def snapshot(self) -> Dict[str, Any]:
        """Review record fields taken from this event."""
        return {
            "repository_full_name": self.repository_full_name,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "base_branch": self.base_branch,
            "head_branch": self.head_branch,
            "head_commit_sha": self.head_sha,
        }
