"""
SQLAlchemy database models for the credit report worker.

Defines the ORM models for the processing job record and the credit
items extracted from a report.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class JobStatus(enum.Enum):
    """Status of a processing job."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class ProcessingJob(Base):
    """
    A PDF processing job.

    Created externally in the ``queued`` state; the worker moves it to
    ``processing`` and then to exactly one terminal state.
    """

    __tablename__ = "pdf_processing_jobs"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    profile_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    file_path: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )
    file_name: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
    )
    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, values_callable=lambda e: [m.value for m in e]),
        default=JobStatus.QUEUED,
        nullable=False,
        index=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    result_json: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Job summary: totals and negative accounts",
    )

    def __repr__(self) -> str:
        return f"<ProcessingJob(id={self.id}, status={self.status.value})>"


class CreditItemRecord(Base):
    """
    A credit item (tradeline, collection, ...) extracted from a report.

    Upserted per profile by creditor and type.
    """

    __tablename__ = "credit_items"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    profile_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    creditor: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    amount_cents: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    opened_date: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )
    reported_date: Mapped[str | None] = mapped_column(
        String(10),
        nullable=True,
    )
    account_last4: Mapped[str | None] = mapped_column(
        String(4),
        nullable=True,
    )
    bureaus: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    is_negative: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        default="TO_SEND",
        nullable=False,
    )
    confidence: Mapped[float] = mapped_column(
        Float,
        default=0.8,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("profile_id", "creditor", "type", name="uq_credit_item_profile_creditor_type"),
    )

    def __repr__(self) -> str:
        return f"<CreditItemRecord(id={self.id}, creditor='{self.creditor}', type={self.type})>"
