"""
Persistence for job status and extracted credit items.

Wraps a SQLAlchemy session factory. Every write opens its own short
session, so the repository can be shared between requests.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..models import CreditItem
from ..models_db import CreditItemRecord, JobStatus, ProcessingJob
from .exceptions import ItemPersistenceError

logger = logging.getLogger(__name__)


class JobRepository:
    """Reads and writes ProcessingJob and CreditItemRecord rows."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    def get_job(self, job_id: str) -> ProcessingJob | None:
        with self.session_factory() as session:
            job = session.get(ProcessingJob, job_id)
            if job is not None:
                session.expunge(job)
            return job

    def _update_job(self, job_id: str, **fields: Any) -> JobStatus | None:
        """Apply field updates to a job and return its previous status."""
        with self.session_factory() as session:
            job = session.get(ProcessingJob, job_id)
            if job is None:
                logger.warning("Job %s not found, status update skipped", job_id)
                return None
            previous = job.status
            for name, value in fields.items():
                setattr(job, name, value)
            session.commit()
            return previous

    async def mark_processing(self, job_id: str) -> JobStatus | None:
        """Move a job to processing. Returns the status it had before."""
        return await asyncio.to_thread(
            self._update_job,
            job_id,
            status=JobStatus.PROCESSING,
            started_at=datetime.utcnow(),
        )

    async def mark_completed(self, job_id: str, summary: dict[str, Any]) -> None:
        await asyncio.to_thread(
            self._update_job,
            job_id,
            status=JobStatus.COMPLETED,
            completed_at=datetime.utcnow(),
            result_json=summary,
            error_message=None,
        )

    async def mark_failed(self, job_id: str, error_message: str) -> None:
        await asyncio.to_thread(
            self._update_job,
            job_id,
            status=JobStatus.FAILED,
            completed_at=datetime.utcnow(),
            error_message=error_message,
        )

    # -------------------------------------------------------------------------
    # Credit items
    # -------------------------------------------------------------------------

    def _upsert_item(self, profile_id: str, item: CreditItem) -> None:
        values = {
            "amount_cents": item.amount,
            "opened_date": item.opened_date,
            "reported_date": item.reported_date,
            "account_last4": item.account_last4,
            "bureaus": [b.value for b in item.bureaus],
            "is_negative": item.is_negative,
            "notes": item.notes,
            "status": item.status.value,
            "confidence": item.confidence,
        }
        with self.session_factory() as session:
            try:
                record = session.scalars(
                    select(CreditItemRecord).where(
                        CreditItemRecord.profile_id == profile_id,
                        CreditItemRecord.creditor == item.creditor,
                        CreditItemRecord.type == item.type.value,
                    )
                ).first()
                if record is None:
                    session.add(
                        CreditItemRecord(
                            profile_id=profile_id,
                            creditor=item.creditor,
                            type=item.type.value,
                            **values,
                        )
                    )
                else:
                    for name, value in values.items():
                        setattr(record, name, value)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise ItemPersistenceError(
                    f"Error saving item {item.creditor} ({item.type.value}): {e}"
                ) from e

    async def save_item(self, profile_id: str, item: CreditItem) -> None:
        """
        Upsert one credit item keyed by profile, creditor and type.

        Raises:
            ItemPersistenceError: If the write fails.
        """
        await asyncio.to_thread(self._upsert_item, profile_id, item)

    def list_items(self, profile_id: str) -> list[CreditItemRecord]:
        with self.session_factory() as session:
            records = list(
                session.scalars(
                    select(CreditItemRecord)
                    .where(CreditItemRecord.profile_id == profile_id)
                    .order_by(CreditItemRecord.created_at)
                )
            )
            session.expunge_all()
            return records


# Singleton instance for convenience
_repository: JobRepository | None = None


def get_repository() -> JobRepository:
    """Get or create the repository bound to the application database."""
    global _repository
    if _repository is None:
        from ..database import get_session_factory

        _repository = JobRepository(get_session_factory())
    return _repository
