"""ETLRun model for ingestion run tracking."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, utcnow


class ETLRun(Base):
    """Ingestion run record.

    Attributes:
        pipeline_name: Name of the pipeline executed.
        source_name: Provider driving discovery.
        status: running, success, partial, cancelled or failed.
        records_extracted: Records fetched.
        records_loaded: Records upserted.
        records_failed: Records that failed.
        stats: Full run counters.
    """

    __tablename__ = "etl_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    pipeline_name: Mapped[str] = mapped_column(String(100), nullable=False)
    source_name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="running")

    records_extracted: Mapped[int] = mapped_column(Integer, default=0)
    records_loaded: Mapped[int] = mapped_column(Integer, default=0)
    records_failed: Mapped[int] = mapped_column(Integer, default=0)
    duration_seconds: Mapped[float | None] = mapped_column(Float)
    stats: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    error_message: Mapped[str | None] = mapped_column(Text)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        total = self.records_extracted
        if total == 0:
            return 0.0
        return (self.records_loaded / total) * 100

    @property
    def is_success(self) -> bool:
        """Check if the run completed successfully."""
        return self.status == "success"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ETLRun(id={self.id}, pipeline='{self.pipeline_name}', "
            f"status='{self.status}')>"
        )
