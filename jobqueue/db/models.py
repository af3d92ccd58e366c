"""
SQLAlchemy database models.
Defines the job queue table.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, Index, Integer, Text, func, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from jobqueue.constants import JOB_TABLE, JobStatus


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Job(Base):
    """
    Job model representing a unit of work in the queue.

    This is the authoritative source of truth for job state. The only
    mutation after insert is the available -> claimed transition, which the
    claim protocol performs under a row lock.

    Key constraints:
    - id is store-assigned and increasing; it is the claim ordering
    - status is restricted to the job_status enum
    - payload and timestamp never change after insert
    """

    __tablename__ = JOB_TABLE

    # SQLite only autoincrements INTEGER PRIMARY KEY columns
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(
            JobStatus,
            name="job_status",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=JobStatus.AVAILABLE,
        server_default=JobStatus.AVAILABLE.value,
    )

    payload: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        # Claim scans walk available rows in id order
        Index(
            "ix_job_queue_available",
            "id",
            postgresql_where=text("status = 'available'"),
        ),
    )

    def __repr__(self) -> str:
        return f"Job(id={self.id}, status={self.status})"
