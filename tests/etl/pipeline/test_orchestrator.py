"""Unit tests for the ingestion orchestrator with in-memory providers."""

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from cinecatalog.database import DatabaseConnection
from cinecatalog.database.models import Movie
from cinecatalog.database.repositories import (
    ETLRunRepository,
    MovieRepository,
    RatingRepository,
    SongRepository,
)
from cinecatalog.etl.exceptions import ProviderError, StorageUnavailableError
from cinecatalog.etl.extractors.youtube.matcher import MatchTarget
from cinecatalog.etl.pipeline import IngestionOrchestrator
from cinecatalog.etl.pipeline.orchestrator import SNAPSHOT_NAME
from cinecatalog.etl.types import (
    EnrichmentMode,
    FullRecord,
    ProviderResult,
    RatingRecord,
    RunConfig,
    SongRecord,
)
from cinecatalog.etl.utils import CheckpointManager

TODAY = date(2024, 6, 1)


# =============================================================================
# FAKE PROVIDERS
# =============================================================================


class FakeCatalog:
    """Discovery provider returning fixed windows of ids; an exception window raises."""

    def __init__(
        self,
        make_record: Callable[..., FullRecord],
        windows: list[list[int] | Exception],
        failing: set[int] | None = None,
        foreign: set[int] | None = None,
    ) -> None:
        self._make_record = make_record
        self._windows = list(windows)
        self._failing = failing or set()
        self._foreign = foreign or set()
        self.discover_calls: list[tuple[date, date]] = []

    def discover(self, start: date, end: date, languages: Any = ()) -> list[int]:
        self.discover_calls.append((start, end))
        window = self._windows.pop(0) if self._windows else []
        if isinstance(window, Exception):
            raise window
        return window

    def fetch_full(self, movie_id: int) -> FullRecord:
        if movie_id in self._failing:
            raise ProviderError(f"HTTP 500 for movie {movie_id}", provider="tmdb")
        if movie_id in self._foreign:
            return self._make_record(
                native_id=str(movie_id),
                title=f"Foreign {movie_id}",
                language="English",
                language_code="en",
                production_countries=["US"],
            )
        return self._make_record(native_id=str(movie_id), title=f"Title {movie_id}")


class FakeMedia:
    def __init__(
        self,
        songs: ProviderResult[list[SongRecord]],
        trailer: ProviderResult[str],
    ) -> None:
        self._songs = songs
        self._trailer = trailer
        self.targets: list[MatchTarget] = []

    def find_songs(self, target: MatchTarget) -> ProviderResult[list[SongRecord]]:
        self.targets.append(target)
        return self._songs

    def find_trailer(self, title: str) -> ProviderResult[str]:
        return self._trailer


class FakeRatings:
    def __init__(
        self,
        ratings: list[RatingRecord] | None = None,
        fail: bool = False,
        crash_on: set[str] | None = None,
    ) -> None:
        self._ratings = ratings or []
        self._fail = fail
        self._crash_on = crash_on or set()

    def ratings_by_title(self, title: str, year: int | None = None) -> list[RatingRecord]:
        if self._fail:
            raise ProviderError("quota exhausted", provider="omdb")
        if title in self._crash_on:
            raise RuntimeError("unexpected payload shape")
        return self._ratings


class CrashingMedia:
    """Media provider whose song lookup breaks outside the provider error contract."""

    def find_songs(self, target: MatchTarget) -> ProviderResult[list[SongRecord]]:
        raise KeyError("items")

    def find_trailer(self, title: str) -> ProviderResult[str]:
        return ProviderResult.empty()


class UnreachableDatabase:
    url = "postgresql://catalog@nowhere/catalog"

    @staticmethod
    def check_connection() -> bool:
        return False


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def checkpoints(tmp_path: Path) -> CheckpointManager:
    return CheckpointManager(checkpoint_dir=tmp_path, prefix="run")


def _config(**overrides: Any) -> RunConfig:
    values: dict[str, Any] = {
        "limit": 10,
        "enrich": EnrichmentMode.NONE,
        "max_workers": 2,
        "resolve_identities": True,
        "today": TODAY,
    }
    values.update(overrides)
    return RunConfig(**values)


def _snapshot(checkpoints: CheckpointManager) -> dict[str, Any]:
    return checkpoints.load(SNAPSHOT_NAME)["data"]


# =============================================================================
# TESTS
# =============================================================================


class TestDiscovery:
    @staticmethod
    def test_windows_unioned_recent_first(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2], [2, 3]])
        orchestrator = IngestionOrchestrator(
            _config(days_past=45, days_future=180), database, catalog, checkpoints=checkpoints
        )

        assert orchestrator.discover() == [1, 2, 3]
        assert catalog.discover_calls == [
            (date(2024, 4, 17), TODAY),
            (TODAY, date(2024, 11, 28)),
        ]

    @staticmethod
    def test_truncated_to_limit(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2], [3, 4]])
        orchestrator = IngestionOrchestrator(
            _config(limit=3), database, catalog, checkpoints=checkpoints
        )
        assert orchestrator.discover() == [1, 2, 3]

    @staticmethod
    def test_failed_query_contributes_no_candidates(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[RuntimeError("read timed out"), [4, 5]])

        result = IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints).run()

        assert len(catalog.discover_calls) == 2
        assert result.stats.discovered == 2
        assert result.stats.upserted == 2
        assert result.entity_ids == ["tmdb-movie:4", "tmdb-movie:5"]


class TestRun:
    @staticmethod
    def test_failed_item_does_not_abort_pass(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2, 3], [4, 5]], failing={3})

        result = IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints).run()

        assert result.stats.discovered == 5
        assert result.stats.errors == 1
        assert result.stats.upserted == 4
        assert result.entity_ids == [
            "tmdb-movie:1",
            "tmdb-movie:2",
            "tmdb-movie:4",
            "tmdb-movie:5",
        ]
        with database.session() as session:
            assert MovieRepository(session).count() == 4
            assert ETLRunRepository(session).get_latest().status == "partial"

    @staticmethod
    def test_non_indian_titles_skipped(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2]], foreign={2})

        stats = IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints).run().stats

        assert stats.fetched == 2
        assert stats.skipped_non_indian == 1
        assert stats.upserted == 1
        with database.session() as session:
            assert session.get(Movie, "tmdb-movie:2") is None

    @staticmethod
    def test_successful_run_recorded(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[7]])

        IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints).run()

        with database.session() as session:
            run = ETLRunRepository(session).get_latest()
            assert run.status == "success"
            assert run.pipeline_name == "ingest"
            assert run.records_loaded == 1
        snapshot = _snapshot(checkpoints)
        assert snapshot["upserted"] == 1
        assert snapshot["finished_at"] is not None

    @staticmethod
    def test_rerun_is_idempotent(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        for _ in range(2):
            catalog = FakeCatalog(make_record, windows=[[1, 2]])
            IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints).run()

        with database.session() as session:
            assert MovieRepository(session).count() == 2

    @staticmethod
    def test_dry_run_writes_nothing(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2]], foreign={2})

        stats = IngestionOrchestrator(
            _config(dry_run=True), database, catalog, checkpoints=checkpoints
        ).run().stats

        assert stats.fetched == 2
        assert stats.skipped_non_indian == 1
        assert stats.upserted == 0
        with database.session() as session:
            assert MovieRepository(session).count() == 0
            assert ETLRunRepository(session).count() == 0
        assert _snapshot(checkpoints)["dry_run"] is True

    @staticmethod
    def test_cancel_before_run(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2, 3]])
        orchestrator = IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints)

        orchestrator.cancel()
        stats = orchestrator.run().stats

        assert orchestrator.cancelled
        assert stats.cancelled is True
        assert stats.upserted == 0
        with database.session() as session:
            assert ETLRunRepository(session).get_latest().status == "cancelled"

    @staticmethod
    def test_cancel_during_run(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2, 3]])
        orchestrator = IngestionOrchestrator(_config(), database, catalog, checkpoints=checkpoints)
        persist = orchestrator._persist

        def persist_then_cancel(*args: Any) -> Any:
            writes = persist(*args)
            orchestrator.cancel()
            return writes

        monkeypatch.setattr(orchestrator, "_persist", persist_then_cancel)

        result = orchestrator.run()

        assert result.stats.cancelled is True
        assert result.stats.upserted == 1
        assert result.entity_ids == ["tmdb-movie:1"]
        snapshot = _snapshot(checkpoints)
        assert snapshot["cancelled"] is True
        assert snapshot["upserted"] == 1
        with database.session() as session:
            assert MovieRepository(session).count() == 1
            assert ETLRunRepository(session).get_latest().status == "cancelled"

    @staticmethod
    def test_storage_unavailable(
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1]])
        orchestrator = IngestionOrchestrator(
            _config(), UnreachableDatabase(), catalog, checkpoints=checkpoints
        )

        with pytest.raises(StorageUnavailableError):
            orchestrator.run()

        assert catalog.discover_calls == []
        snapshot = _snapshot(checkpoints)
        assert "unreachable" in snapshot["fatal_error"]
        assert snapshot["upserted"] == 0


class TestEnrichment:
    @staticmethod
    def _run(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
        media: FakeMedia,
        ratings: FakeRatings,
    ) -> Any:
        catalog = FakeCatalog(make_record, windows=[[1]])
        return IngestionOrchestrator(
            _config(enrich=EnrichmentMode.ALL),
            database,
            catalog,
            media=media,
            ratings=ratings,
            checkpoints=checkpoints,
        ).run().stats

    def test_enrichment_written(
        self,
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        media = FakeMedia(
            songs=ProviderResult.ok([SongRecord(title="Zinda Banda", youtube_url="https://y/1")]),
            trailer=ProviderResult.ok("https://www.youtube.com/watch?v=trailer"),
        )
        ratings = FakeRatings([RatingRecord(source="Internet Movie Database", value=7.0)])

        stats = self._run(database, checkpoints, make_record, media, ratings)

        assert stats.trailer_updated == 1
        assert stats.songs_upserted == 1
        assert stats.ratings_upserted == 1
        assert media.targets[0] == MatchTarget(title="Title 1", year=2023, language="Hindi")
        with database.session() as session:
            movie = session.get(Movie, "tmdb-movie:1")
            assert movie.trailer_url == "https://www.youtube.com/watch?v=trailer"
            assert RatingRepository(session).get_for_source(movie.id, "imdb") is not None

    def test_failed_enrichment_keeps_stored_data(
        self,
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        songs = [SongRecord(title="Zinda Banda", youtube_url="https://y/1")]
        self._run(
            database,
            checkpoints,
            make_record,
            FakeMedia(ProviderResult.ok(songs), ProviderResult.empty()),
            FakeRatings([RatingRecord(source="IMDb", value=7.0)]),
        )

        stats = self._run(
            database,
            checkpoints,
            make_record,
            FakeMedia(ProviderResult.failed("quota"), ProviderResult.failed("quota")),
            FakeRatings(fail=True),
        )

        assert stats.errors == 0
        assert stats.upserted == 1
        with database.session() as session:
            assert len(SongRepository(session).list_for_movie("tmdb-movie:1")) == 1
            assert RatingRepository(session).get_for_source("tmdb-movie:1", "imdb") is not None

    def test_empty_song_result_clears_songs(
        self,
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        songs = [SongRecord(title="Zinda Banda", youtube_url="https://y/1")]
        self._run(
            database,
            checkpoints,
            make_record,
            FakeMedia(ProviderResult.ok(songs), ProviderResult.empty()),
            FakeRatings(),
        )
        self._run(
            database,
            checkpoints,
            make_record,
            FakeMedia(ProviderResult.ok([]), ProviderResult.empty()),
            FakeRatings(),
        )

        with database.session() as session:
            assert SongRepository(session).list_for_movie("tmdb-movie:1") == []

    @staticmethod
    def test_partial_provider_mode_skips_external_calls(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        media = FakeMedia(ProviderResult.empty(), ProviderResult.empty())
        catalog = FakeCatalog(make_record, windows=[[1]])

        stats = IngestionOrchestrator(
            _config(enrich=EnrichmentMode.TMDB),
            database,
            catalog,
            media=media,
            ratings=FakeRatings(fail=True),
            checkpoints=checkpoints,
        ).run().stats

        assert media.targets == []
        assert stats.errors == 0
        with database.session() as session:
            assert RatingRepository(session).get_for_source("tmdb-movie:1", "tmdb") is not None

    @staticmethod
    def test_unexpected_provider_exception_isolated(
        database: DatabaseConnection,
        checkpoints: CheckpointManager,
        make_record: Callable[..., FullRecord],
    ) -> None:
        catalog = FakeCatalog(make_record, windows=[[1, 2, 3]])
        ratings = FakeRatings([RatingRecord(source="IMDb", value=7.0)], crash_on={"Title 2"})

        result = IngestionOrchestrator(
            _config(enrich=EnrichmentMode.ALL),
            database,
            catalog,
            media=CrashingMedia(),
            ratings=ratings,
            checkpoints=checkpoints,
        ).run()

        assert result.stats.upserted == 3
        assert result.stats.errors == 0
        assert result.stats.ratings_upserted == 2
        assert result.stats.songs_upserted == 0
        with database.session() as session:
            assert RatingRepository(session).get_for_source("tmdb-movie:2", "imdb") is None
            assert RatingRepository(session).get_for_source("tmdb-movie:3", "imdb") is not None
