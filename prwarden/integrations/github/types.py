from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class PullRequestMetadata(BaseModel):
    """The slice of a GitHub pull request the reviewer cares about."""

    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    base_branch: Optional[str] = None
    head_branch: Optional[str] = None
    head_sha: Optional[str] = None
    draft: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PullRequestMetadata":
        return cls(
            title=data.get("title"),
            description=data.get("body"),
            author=(data.get("user") or {}).get("login"),
            base_branch=(data.get("base") or {}).get("ref"),
            head_branch=(data.get("head") or {}).get("ref"),
            head_sha=(data.get("head") or {}).get("sha"),
            draft=bool(data.get("draft", False)),
        )


class ChangedFile(BaseModel):
    """One entry of the pull request's changed-file list."""

    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ChangedFile":
        return cls(
            filename=data["filename"],
            status=data.get("status", "modified"),
            additions=data.get("additions", 0),
            deletions=data.get("deletions", 0),
            changes=data.get("changes", 0),
            patch=data.get("patch"),
        )


class PullRequestDiff(BaseModel):
    owner: str
    repo: str
    number: int
    metadata: PullRequestMetadata
    files: List[ChangedFile] = Field(default_factory=list)

    @property
    def repository_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


class PostedReview(BaseModel):
    external_review_id: Optional[int] = None
    comments_posted: int = 0
