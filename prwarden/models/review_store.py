from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from prwarden.models.base_model import utcnow
from prwarden.models.review_record import ReviewRecord, ReviewStatus
from prwarden.utils.logger import logger


class ReviewStore(ABC):
    """Durable storage for review records, unique on (owner, repo, number)."""

    @abstractmethod
    def find_by_key(
        self, owner: str, repo: str, pull_request_number: int
    ) -> Optional[ReviewRecord]:
        pass

    @abstractmethod
    def get(self, record_id: int) -> Optional[ReviewRecord]:
        pass

    @abstractmethod
    def create(self, record: ReviewRecord) -> ReviewRecord:
        """Insert a record, or update the existing one holding the same key."""
        pass

    @abstractmethod
    def save(self, record: ReviewRecord) -> ReviewRecord:
        pass

    @abstractmethod
    def compare_and_set(
        self, record: ReviewRecord, expected_status: ReviewStatus, **changes: Any
    ) -> bool:
        """Apply ``changes`` only if the stored status still equals ``expected_status``."""
        pass

    @abstractmethod
    def list_pending(self, limit: int = 10) -> List[ReviewRecord]:
        pass

    @abstractmethod
    def status_counts(self, days: int = 30) -> List[Dict[str, Any]]:
        pass


class SQLReviewStore(ReviewStore):
    """ReviewStore backed by SQLModel; works on any SQLAlchemy URL."""

    def __init__(self, engine):
        self._engine = engine

    def find_by_key(
        self, owner: str, repo: str, pull_request_number: int
    ) -> Optional[ReviewRecord]:
        with Session(self._engine) as session:
            statement = (
                select(ReviewRecord)
                .where(ReviewRecord.owner == owner)
                .where(ReviewRecord.repo == repo)
                .where(ReviewRecord.pull_request_number == pull_request_number)
            )
            return session.exec(statement).first()

    def get(self, record_id: int) -> Optional[ReviewRecord]:
        with Session(self._engine) as session:
            return session.get(ReviewRecord, record_id)

    def create(self, record: ReviewRecord) -> ReviewRecord:
        try:
            return self.save(record)
        except IntegrityError:
            existing = self.find_by_key(
                record.owner, record.repo, record.pull_request_number
            )
            if existing is None:
                raise
            logger.info(
                f"Review record for {existing.key} already exists, updating it instead"
            )
            for name, value in record.snapshot().items():
                setattr(existing, name, value)
            return self.save(existing)

    def save(self, record: ReviewRecord) -> ReviewRecord:
        record.updated_at = utcnow()
        with Session(self._engine) as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        return record

    def compare_and_set(
        self, record: ReviewRecord, expected_status: ReviewStatus, **changes: Any
    ) -> bool:
        changes["updated_at"] = utcnow()
        statement = (
            update(ReviewRecord)
            .where(col(ReviewRecord.id) == record.id)
            .where(col(ReviewRecord.status) == expected_status)
            .values(**changes)
        )
        with self._engine.begin() as connection:
            result = connection.execute(statement)

        if result.rowcount != 1:
            return False

        for name, value in changes.items():
            setattr(record, name, value)
        return True

    def list_pending(self, limit: int = 10) -> List[ReviewRecord]:
        with Session(self._engine) as session:
            statement = (
                select(ReviewRecord)
                .where(ReviewRecord.status == ReviewStatus.PENDING)
                .order_by(col(ReviewRecord.created_at).asc(), col(ReviewRecord.id).asc())
                .limit(limit)
            )
            return list(session.exec(statement).all())

    def status_counts(self, days: int = 30) -> List[Dict[str, Any]]:
        since = utcnow() - timedelta(days=days)
        with Session(self._engine) as session:
            statement = (
                select(
                    ReviewRecord.status,
                    func.count(col(ReviewRecord.id)),
                    func.avg(col(ReviewRecord.retry_count)),
                )
                .where(col(ReviewRecord.created_at) >= since)
                .group_by(ReviewRecord.status)
            )
            rows = session.exec(statement).all()

        return [
            {
                "status": ReviewStatus(status).value,
                "count": count,
                "avg_retries": float(avg_retries or 0),
            }
            for status, count, avg_retries in rows
        ]
