"""ETL run repository for ingestion tracking."""

from typing import Any

from sqlalchemy import select

from cinecatalog.database.models import ETLRun, utcnow
from cinecatalog.database.repositories.base import BaseRepository


class ETLRunRepository(BaseRepository[ETLRun]):
    """Repository for ETLRun entity operations."""

    model = ETLRun

    def get_latest(self) -> ETLRun | None:
        """Get most recent run."""
        stmt = select(ETLRun).order_by(ETLRun.started_at.desc(), ETLRun.id.desc()).limit(1)
        return self._session.scalars(stmt).first()

    def get_recent(self, limit: int = 10) -> list[ETLRun]:
        """Get recent runs ordered by start time."""
        stmt = select(ETLRun).order_by(ETLRun.started_at.desc(), ETLRun.id.desc()).limit(limit)
        return list(self._session.scalars(stmt).all())

    def record_run(
        self,
        pipeline_name: str,
        source_name: str,
        status: str,
        stats: dict[str, Any],
        error_message: str | None = None,
    ) -> ETLRun:
        """Persist a finished run from its statistics snapshot.

        Args:
            pipeline_name: Pipeline identifier.
            source_name: Discovery provider.
            status: Final status.
            stats: Serialized run statistics.
            error_message: Fatal error, if any.

        Returns:
            Created ETLRun.
        """
        run = ETLRun(
            pipeline_name=pipeline_name,
            source_name=source_name,
            status=status,
            records_extracted=stats.get("fetched", 0),
            records_loaded=stats.get("upserted", 0),
            records_failed=stats.get("errors", 0),
            duration_seconds=stats.get("duration_seconds"),
            stats=stats,
            error_message=error_message,
            completed_at=utcnow(),
        )
        return self.create(run)
