"""Create review_records table

Revision ID: review_records_001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.sql import func

revision = "review_records_001"
down_revision = None
branch_labels = None
depends_on = None

REVIEW_STATUS = sa.Enum(
    "PENDING",
    "IN_PROGRESS",
    "COMPLETED",
    "FAILED",
    "SKIPPED",
    name="reviewstatus",
)


def upgrade() -> None:
    op.create_table(
        "review_records",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("owner", sa.String(255), nullable=False, index=True),
        sa.Column("repo", sa.String(255), nullable=False, index=True),
        sa.Column("pull_request_number", sa.Integer, nullable=False, index=True),
        sa.Column("repository_full_name", sa.String(511), nullable=False),
        sa.Column("title", sa.String, nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("author", sa.String(255), nullable=True),
        sa.Column("base_branch", sa.String(255), nullable=True),
        sa.Column("head_branch", sa.String(255), nullable=True),
        sa.Column("head_commit_sha", sa.String(64), nullable=True),
        sa.Column(
            "status", REVIEW_STATUS, nullable=False, server_default="PENDING", index=True
        ),
        sa.Column("comments", sa.JSON, nullable=False),
        sa.Column("summary_comment", sa.Text, nullable=True),
        sa.Column("files_reviewed", sa.JSON, nullable=False),
        sa.Column("review_criteria", sa.JSON, nullable=False),
        sa.Column("external_review_id", sa.BigInteger, nullable=True),
        sa.Column("review_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("retry_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "owner", "repo", "pull_request_number", name="uq_review_records_key"
        ),
    )


def downgrade() -> None:
    op.drop_table("review_records")
    REVIEW_STATUS.drop(op.get_bind(), checkfirst=True)
