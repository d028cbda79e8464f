"""Ingestion pass orchestration.

One pass discovers recently released and upcoming titles, fetches and
classifies them on a worker pool, then writes accepted records and
their enrichment on the orchestrating thread, in discovery order, one
transaction per item. The run statistics snapshot is written whatever
the outcome.
"""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cinecatalog.database import DatabaseConnection, get_database
from cinecatalog.database.repositories import ETLRunRepository
from cinecatalog.etl.classifier import Classifier
from cinecatalog.etl.exceptions import (
    CatalogError,
    IngestionError,
    StorageUnavailableError,
)
from cinecatalog.etl.extractors import OMDbClient, SongFinder, TMDBClient, YouTubeClient
from cinecatalog.etl.extractors.youtube.matcher import MatchTarget
from cinecatalog.etl.loaders import ReconciliationStore
from cinecatalog.etl.reconciliation import IdentityResolver
from cinecatalog.etl.types import (
    FullRecord,
    ProviderResult,
    RatingRecord,
    RunConfig,
    RunResult,
    RunStats,
    SongRecord,
)
from cinecatalog.etl.utils import CheckpointManager, setup_logger
from cinecatalog.settings import settings

logger = setup_logger("etl.pipeline.orchestrator")

PIPELINE_NAME = "ingest"
SNAPSHOT_NAME = "last"

T = TypeVar("T")


# =============================================================================
# PROVIDER INTERFACES
# =============================================================================


class CatalogSource(Protocol):
    """Discovery and full-record provider."""

    def discover(self, start: date, end: date, languages: Any = ()) -> list[int]: ...

    def fetch_full(self, movie_id: int) -> FullRecord: ...


class MediaSource(Protocol):
    """Trailer and soundtrack lookup."""

    def find_songs(self, target: MatchTarget) -> ProviderResult[list[SongRecord]]: ...

    def find_trailer(self, title: str) -> ProviderResult[str]: ...


class RatingsSource(Protocol):
    """External ratings lookup."""

    def ratings_by_title(self, title: str, year: int | None = None) -> list[RatingRecord]: ...


# =============================================================================
# PER-ITEM RESULTS
# =============================================================================


@dataclass
class PreparedItem:
    """Worker-side result for one discovered id."""

    native_id: int
    record: FullRecord | None = None
    accepted: bool = False
    error: str | None = None
    trailer: ProviderResult[str] | None = None
    songs: ProviderResult[list[SongRecord]] | None = None
    ratings: ProviderResult[list[RatingRecord]] | None = None


@dataclass
class ItemWrites:
    """Counts committed for one item."""

    entity_id: str
    trailer_updated: bool = False
    songs: int = 0
    ratings: int = 0


def _guarded(lookup: Callable[[], ProviderResult[T]]) -> ProviderResult[T]:
    """Run an enrichment lookup, turning any exception into a FAILED result."""
    try:
        return lookup()
    except Exception as e:  # noqa: BLE001
        return ProviderResult.failed(str(e))


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class IngestionOrchestrator:
    """Runs one ingestion pass.

    Example:
        ```python
        with TMDBClient() as tmdb:
            result = IngestionOrchestrator(RunConfig.from_settings(), db, tmdb).run()
        ```
    """

    def __init__(
        self,
        config: RunConfig,
        database: DatabaseConnection,
        tmdb: CatalogSource,
        media: MediaSource | None = None,
        ratings: RatingsSource | None = None,
        classifier: Classifier | None = None,
        checkpoints: CheckpointManager | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            config: Run configuration.
            database: Catalog database.
            tmdb: Discovery and full-record provider.
            media: Trailer and song provider (enrichment mode ``all``).
            ratings: External ratings provider (enrichment mode ``all``).
            classifier: Indian-cinema classifier.
            checkpoints: Snapshot store for run statistics.
        """
        self.config = config
        self._database = database
        self._tmdb = tmdb
        self._media = media
        self._ratings = ratings
        self._classifier = classifier or Classifier(settings.ingestion.target_country)
        self._checkpoints = checkpoints or CheckpointManager(prefix="run")
        self._cancel_event = threading.Event()
        self._storage_ready = False

    @property
    def today(self) -> date:
        """Reference date of the run."""
        return self.config.today or date.today()

    def cancel(self) -> None:
        """Request cancellation; checked between items."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(self) -> RunResult:
        """Execute the pass.

        Returns:
            Statistics and the entity ids written, in discovery order.

        Raises:
            StorageUnavailableError: If the database is unreachable
                before any item is processed.
        """
        stats = RunStats(dry_run=self.config.dry_run)
        entity_ids: list[str] = []

        logger.info(
            f"Ingestion start: limit={self.config.limit}, langs={','.join(self.config.langs)}, "
            f"enrich={self.config.enrich.value}, dry_run={self.config.dry_run}"
        )

        try:
            if not self.config.dry_run:
                self._check_storage()

            native_ids = self.discover()
            stats.discovered = len(native_ids)
            logger.info(f"Discovered {len(native_ids)} titles")

            self._process(native_ids, stats, entity_ids)

            if self.config.resolve_identities and not self.config.dry_run and not stats.cancelled:
                self._reconcile(stats)

        except Exception as e:
            stats.fatal_error = str(e)
            logger.error(f"Ingestion aborted: {e}")
            raise

        finally:
            stats.finish()
            self._save_snapshot(stats)
            if self._storage_ready:
                self._record_run(stats)
            logger.info(
                f"Ingestion done in {stats.duration_seconds}s: upserted={stats.upserted}, "
                f"skipped={stats.skipped_non_indian}, errors={stats.errors}"
            )

        return RunResult(stats=stats, entity_ids=entity_ids)

    def _check_storage(self) -> None:
        if not self._database.check_connection():
            raise StorageUnavailableError(f"Catalog database unreachable: {self._database.url}")
        self._storage_ready = True

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def discover(self) -> list[int]:
        """Union of recent and upcoming ids, recent first, truncated to the limit."""
        today = self.today
        windows = [
            (today - timedelta(days=self.config.days_past), today),
            (today, today + timedelta(days=self.config.days_future)),
        ]
        seen: dict[int, None] = {}
        for start, end in windows:
            try:
                found = self._tmdb.discover(start, end, self.config.langs)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Discovery {start}..{end} failed, no candidates from it: {e}")
                continue
            for native_id in found:
                seen.setdefault(native_id, None)
        return list(seen)[: self.config.limit]

    # -------------------------------------------------------------------------
    # Worker Side
    # -------------------------------------------------------------------------

    def _prepare(self, native_id: int) -> PreparedItem:
        """Fetch, classify and prefetch enrichment for one id."""
        item = PreparedItem(native_id=native_id)
        if self.cancelled:
            item.error = "cancelled"
            return item

        try:
            item.record = self._tmdb.fetch_full(native_id)
            item.accepted = self._classifier.accept(item.record)
        except Exception as e:  # noqa: BLE001
            item.error = str(e)
            return item

        if item.accepted and not self.config.dry_run and self.config.enrich.uses_external_providers:
            self._prefetch_enrichment(item, item.record)
        return item

    def _prefetch_enrichment(self, item: PreparedItem, record: FullRecord) -> None:
        media, ratings = self._media, self._ratings
        if media is not None:
            if not record.trailer_url:
                item.trailer = _guarded(lambda: media.find_trailer(record.title))
            target = MatchTarget(title=record.title, year=record.year, language=record.language)
            item.songs = _guarded(lambda: media.find_songs(target))
        if ratings is not None:
            item.ratings = _guarded(
                lambda: ProviderResult.ok(ratings.ratings_by_title(record.title, record.year))
            )

    # -------------------------------------------------------------------------
    # Orchestrating Thread
    # -------------------------------------------------------------------------

    def _process(self, native_ids: list[int], stats: RunStats, entity_ids: list[str]) -> None:
        """Consume worker results in discovery order."""
        total = len(native_ids)
        if not total:
            return

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures: list[Future[PreparedItem]] = [
                pool.submit(self._prepare, native_id) for native_id in native_ids
            ]
            for index, future in enumerate(futures, start=1):
                if self.cancelled:
                    stats.cancelled = True
                    for pending in futures[index - 1 :]:
                        pending.cancel()
                    logger.warning(f"Cancelled after {index - 1}/{total} items")
                    break
                try:
                    item = future.result()
                except Exception as e:  # noqa: BLE001
                    item = PreparedItem(native_id=native_ids[index - 1], error=str(e))
                self._consume(index, total, item, stats, entity_ids)

    def _consume(
        self,
        index: int,
        total: int,
        item: PreparedItem,
        stats: RunStats,
        entity_ids: list[str],
    ) -> None:
        if item.error is not None or item.record is None:
            stats.errors += 1
            logger.warning(f"skip {item.native_id}: {item.error}")
            return

        stats.fetched += 1
        record = item.record
        if not item.accepted:
            stats.skipped_non_indian += 1
            logger.info(f"skip {item.native_id} (not Indian cinema)")
            return

        if self.config.dry_run:
            logger.info(f"dry-run {index}/{total}: {record.title}")
            return

        try:
            with self._database.session() as session:
                writes = self._persist(session, item, record)
        except Exception as e:  # noqa: BLE001
            stats.errors += 1
            logger.warning(f"skip {item.native_id}: {e}")
            return

        stats.upserted += 1
        stats.trailer_updated += int(writes.trailer_updated)
        stats.songs_upserted += writes.songs
        stats.ratings_upserted += writes.ratings
        entity_ids.append(writes.entity_id)
        logger.info(f"upserted {index}/{total}: {record.title}")

    def _persist(self, session: Session, item: PreparedItem, record: FullRecord) -> ItemWrites:
        """Upsert the base record, then apply enrichment to its canonical id."""
        store = ReconciliationStore(session, today=self.today)
        entity_id = store.upsert(
            record,
            store_provider_rating=self.config.enrich.stores_provider_rating,
        )
        writes = ItemWrites(entity_id=entity_id)
        canonical_id = IdentityResolver(session).resolve(entity_id)

        if item.trailer is not None:
            if item.trailer.is_ok and item.trailer.value:
                writes.trailer_updated = store.set_trailer(canonical_id, item.trailer.value)
            elif item.trailer.is_failed:
                logger.warning(f"Trailer lookup failed for {entity_id}: {item.trailer.error}")

        if item.songs is not None:
            if item.songs.is_failed:
                logger.warning(f"Song lookup failed for {entity_id}: {item.songs.error}")
            else:
                writes.songs = store.replace_media(canonical_id, item.songs.value or [])

        if item.ratings is not None:
            if item.ratings.is_failed:
                logger.warning(f"Ratings lookup failed for {entity_id}: {item.ratings.error}")
            else:
                writes.ratings = store.merge_ratings(canonical_id, item.ratings.value or [])

        return writes

    # -------------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------------

    def _reconcile(self, stats: RunStats) -> None:
        try:
            with self._database.session() as session:
                identity = IdentityResolver(session).reconcile()
        except (SQLAlchemyError, CatalogError) as e:
            stats.errors += 1
            logger.error(f"Identity reconciliation failed: {e}")
            return
        stats.aliases_created = identity.merged
        stats.merges_queued = identity.queued
        stats.errors += identity.errors

    def _save_snapshot(self, stats: RunStats) -> None:
        try:
            self._checkpoints.save(SNAPSHOT_NAME, stats.to_dict())
        except OSError as e:
            logger.error(f"Could not write run snapshot: {e}")

    def _record_run(self, stats: RunStats) -> None:
        if stats.fatal_error:
            status = "failed"
        elif stats.cancelled:
            status = "cancelled"
        elif stats.errors:
            status = "partial"
        else:
            status = "success"
        try:
            with self._database.session() as session:
                ETLRunRepository(session).record_run(
                    PIPELINE_NAME, "tmdb", status, stats.to_dict(), stats.fatal_error
                )
        except SQLAlchemyError as e:
            logger.error(f"Could not record run: {e}")


# =============================================================================
# ENTRY POINT
# =============================================================================


def run_ingestion(
    config: RunConfig,
    database: DatabaseConnection | None = None,
) -> RunResult:
    """Open the configured provider clients and run one pass.

    Args:
        config: Run configuration.
        database: Catalog database (defaults to the configured one).

    Returns:
        Run result.

    Raises:
        IngestionError: If the movie database credentials are missing.
        StorageUnavailableError: If the database is unreachable.
    """
    if not settings.tmdb.is_configured:
        raise IngestionError("TMDB_API_KEY or TMDB_BEARER_TOKEN is required")

    database = database or get_database()
    with ExitStack() as stack:
        tmdb = stack.enter_context(TMDBClient())
        media: SongFinder | None = None
        ratings: OMDbClient | None = None

        if config.enrich.uses_external_providers:
            if settings.youtube.is_configured:
                media = SongFinder(stack.enter_context(YouTubeClient()))
            else:
                logger.info("YOUTUBE_API_KEY not set, skipping trailers and songs")
            if settings.omdb.is_configured:
                ratings = stack.enter_context(OMDbClient())
            else:
                logger.info("OMDB_API_KEY not set, skipping external ratings")

        orchestrator = IngestionOrchestrator(config, database, tmdb, media=media, ratings=ratings)
        return orchestrator.run()


def run_identity_pass(database: DatabaseConnection | None = None) -> dict[str, int]:
    """Run identity reconciliation alone.

    Returns:
        Candidate, merge, queue and error counts.
    """
    database = database or get_database()
    with database.session() as session:
        stats = IdentityResolver(session).reconcile()
    return {
        "candidates": stats.candidates,
        "merged": stats.merged,
        "queued": stats.queued,
        "errors": stats.errors,
    }
