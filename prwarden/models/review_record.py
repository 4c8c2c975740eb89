import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field

from prwarden.models.base_model import BaseModel, UTCDateTime


class ReviewStatus(str, enum.Enum):
    """Lifecycle status of a review record."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


# PR snapshot fields copied from a webhook payload or a fresh fetch.
SNAPSHOT_FIELDS = (
    "repository_full_name",
    "title",
    "description",
    "author",
    "base_branch",
    "head_branch",
    "head_commit_sha",
)


class ReviewRecord(BaseModel, table=True):
    __tablename__ = "review_records"
    __table_args__ = (
        UniqueConstraint(
            "owner", "repo", "pull_request_number", name="uq_review_records_key"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    owner: str = Field(index=True)
    repo: str = Field(index=True)
    pull_request_number: int = Field(index=True)
    repository_full_name: str

    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    base_branch: Optional[str] = None
    head_branch: Optional[str] = None
    head_commit_sha: Optional[str] = None

    status: ReviewStatus = Field(default=ReviewStatus.PENDING, index=True)
    comments: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    summary_comment: Optional[str] = None
    files_reviewed: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    review_criteria: Dict[str, bool] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    external_review_id: Optional[int] = None

    review_started_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    review_completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    error_message: Optional[str] = None
    retry_count: int = Field(default=0)

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pull_request_number}"

    def snapshot(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in SNAPSHOT_FIELDS}

    def __repr__(self):
        return f"<ReviewRecord(key={self.key}, status={self.status.value}, retries={self.retry_count})>"
