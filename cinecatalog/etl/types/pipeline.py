"""Ingestion run control structures: configuration, results, statistics."""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from cinecatalog.settings import settings

T = TypeVar("T")


class EnrichmentMode(str, Enum):
    """Which providers enrich a persisted record.

    ALL: trailer fallback, songs and external ratings.
    TMDB: partial-provider mode, only the movie database's own data.
    NONE: base records only.
    """

    ALL = "all"
    TMDB = "tmdb"
    NONE = "none"

    @property
    def uses_external_providers(self) -> bool:
        """Whether video and ratings providers are queried."""
        return self is EnrichmentMode.ALL

    @property
    def stores_provider_rating(self) -> bool:
        """Whether the movie database's vote average is stored."""
        return self is not EnrichmentMode.NONE


@dataclass(frozen=True)
class RunConfig:
    """Explicit configuration of one ingestion pass.

    Attributes:
        limit: Maximum number of discovered ids processed.
        days_past: Window for recently released titles.
        days_future: Window for upcoming titles.
        langs: Original-language codes to discover.
        enrich: Enrichment mode.
        dry_run: Discover, fetch and classify without writing.
        max_workers: Fetch worker pool size.
        resolve_identities: Run identity reconciliation at the end.
        today: Reference date (defaults to the current date).
    """

    limit: int = 80
    days_past: int = 45
    days_future: int = 180
    langs: tuple[str, ...] = ("hi", "kn", "te", "ta", "ml", "mr", "bn")
    enrich: EnrichmentMode = EnrichmentMode.ALL
    dry_run: bool = False
    max_workers: int = 4
    resolve_identities: bool = True
    today: date | None = None

    @classmethod
    def from_settings(cls, **overrides: Any) -> "RunConfig":
        """Build a config from application settings, applying overrides.

        Overrides whose value is None are ignored so CLI defaults can be
        passed straight through.
        """
        values: dict[str, Any] = {
            "limit": settings.ingestion.limit,
            "days_past": settings.ingestion.days_past,
            "days_future": settings.ingestion.days_future,
            "langs": tuple(settings.ingestion.langs),
            "enrich": EnrichmentMode(settings.ingestion.enrich),
            "max_workers": settings.etl.max_workers,
            "resolve_identities": settings.ingestion.resolve_identities,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if isinstance(values.get("enrich"), str):
            values["enrich"] = EnrichmentMode(values["enrich"])
        values["langs"] = tuple(values["langs"])
        return cls(**values)


@dataclass
class RunStats:
    """Counters of one ingestion pass.

    Serialized as the latest-run snapshot and mirrored in ``etl_runs``.
    """

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    dry_run: bool = False
    discovered: int = 0
    fetched: int = 0
    upserted: int = 0
    skipped_non_indian: int = 0
    trailer_updated: int = 0
    songs_upserted: int = 0
    ratings_upserted: int = 0
    aliases_created: int = 0
    merges_queued: int = 0
    errors: int = 0
    cancelled: bool = False
    fatal_error: str | None = None

    @property
    def duration_seconds(self) -> float:
        """Elapsed time of the run (up to now while running)."""
        end = self.finished_at or datetime.now()
        return round((end - self.started_at).total_seconds(), 2)

    def finish(self) -> None:
        """Stamp the end time."""
        self.finished_at = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON snapshot."""
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        data["duration_seconds"] = self.duration_seconds
        return data


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Outcome of an enrichment call.

    Distinguishes "the provider answered with nothing" from "the call
    failed", so a failure never wipes previously stored data.
    """

    status: str
    value: T | None = None
    error: str | None = None

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"

    @classmethod
    def ok(cls, value: T) -> "ProviderResult[T]":
        """Successful call; empty collections are reported as EMPTY."""
        if isinstance(value, (list, tuple, dict)) and not value:
            return cls(status=cls.EMPTY, value=value)
        return cls(status=cls.OK, value=value)

    @classmethod
    def empty(cls) -> "ProviderResult[T]":
        """Successful call with nothing to report."""
        return cls(status=cls.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "ProviderResult[T]":
        """Failed call."""
        return cls(status=cls.FAILED, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == self.OK

    @property
    def is_empty(self) -> bool:
        return self.status == self.EMPTY

    @property
    def is_failed(self) -> bool:
        return self.status == self.FAILED


@dataclass
class RunResult:
    """Return value of an ingestion pass."""

    stats: RunStats
    entity_ids: list[str] = field(default_factory=list)
