"""Shared pytest fixtures for the catalog ingestion tests."""

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest
from sqlalchemy.orm import Session

from cinecatalog.database import DatabaseConnection
from cinecatalog.etl.types import FullRecord
from cinecatalog.settings import OMDbSettings, TMDBSettings, YouTubeSettings


@pytest.fixture(autouse=True, scope="function")
def mock_env_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reproducible environment for settings built during a test."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    monkeypatch.setenv("TMDB_API_KEY", "test_tmdb_key")
    monkeypatch.setenv("TMDB_BEARER_TOKEN", "")
    monkeypatch.setenv("YOUTUBE_API_KEY", "test_youtube_key")
    monkeypatch.setenv("OMDB_API_KEY", "test_omdb_key")

    monkeypatch.setenv("AGENT_LIMIT", "80")
    monkeypatch.setenv("AGENT_LANGS", "hi,kn,te,ta,ml,mr,bn")
    monkeypatch.setenv("AGENT_ENRICH", "all")


# -------------------------------------------------------------------------
# Database
# -------------------------------------------------------------------------


@pytest.fixture
def database() -> Iterator[DatabaseConnection]:
    """Fresh in-memory catalog database."""
    db = DatabaseConnection("sqlite:///:memory:", echo=False)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def session(database: DatabaseConnection) -> Iterator[Session]:
    """Session committed at the end of the test."""
    with database.session() as s:
        yield s


# -------------------------------------------------------------------------
# Provider Settings
# -------------------------------------------------------------------------


@pytest.fixture
def tmdb_config() -> TMDBSettings:
    return TMDBSettings(TMDB_API_KEY="test_tmdb_key", TMDB_MIN_REQUEST_DELAY=0)


@pytest.fixture
def youtube_config() -> YouTubeSettings:
    return YouTubeSettings(YOUTUBE_API_KEY="test_youtube_key", YOUTUBE_REQUEST_DELAY=0)


@pytest.fixture
def omdb_config() -> OMDbSettings:
    return OMDbSettings(OMDB_API_KEY="test_omdb_key", OMDB_REQUEST_DELAY=0)


# -------------------------------------------------------------------------
# Sample Payloads
# -------------------------------------------------------------------------


@pytest.fixture
def sample_tmdb_details() -> dict[str, Any]:
    """TMDB details payload with credits and videos appended."""
    return {
        "id": 579974,
        "title": "RRR",
        "original_title": "రౌద్రం రణం రుధిరం",
        "original_language": "te",
        "overview": "A fictional history of two legendary revolutionaries.",
        "release_date": "2022-03-24",
        "poster_path": "/nEufeZlyAOLqO2brrs0yeF1lgXO.jpg",
        "backdrop_path": "/2WZ4pYfbDDCmNQrNMUNiMz8ncv2.jpg",
        "vote_average": 7.8,
        "vote_count": 1800,
        "imdb_id": "tt8178634",
        "genres": [{"id": 28, "name": "Action"}, {"id": 18, "name": "Drama"}],
        "production_countries": [{"iso_3166_1": "IN", "name": "India"}],
        "credits": {
            "cast": [
                {
                    "id": 2,
                    "name": "Ram Charan",
                    "character": "Raju",
                    "order": 1,
                    "profile_path": "/ram.jpg",
                },
                {
                    "id": 1,
                    "name": "N.T. Rama Rao Jr.",
                    "character": "Bheem",
                    "order": 0,
                    "profile_path": None,
                },
            ],
            "crew": [
                {"id": 10, "name": "S. S. Rajamouli", "job": "Director", "department": "Directing"},
                {"id": 10, "name": "S. S. Rajamouli", "job": "Screenplay", "department": "Writing"},
                {"id": 11, "name": "V. Vijayendra Prasad", "job": "Story", "department": "Writing"},
            ],
        },
        "videos": {
            "results": [
                {"key": "teaser01", "site": "YouTube", "type": "Teaser"},
                {"key": "trailer01", "site": "YouTube", "type": "Trailer"},
                {"key": "vimeo01", "site": "Vimeo", "type": "Trailer"},
            ]
        },
    }


@pytest.fixture
def make_record() -> Callable[..., FullRecord]:
    """Factory of FullRecord instances with sensible defaults."""

    def _make(**overrides: Any) -> FullRecord:
        values: dict[str, Any] = {
            "provider": "tmdb",
            "native_id": "100",
            "title": "Jawan",
            "language": "Hindi",
            "language_code": "hi",
            "release_date": date(2023, 9, 7),
            "synopsis": "A man driven by a personal vendetta.",
            "director": "Atlee",
            "genres": ["Action", "Thriller"],
            "production_countries": ["IN"],
            "vote_average": 7.1,
            "vote_count": 300,
            "source_url": "https://www.themoviedb.org/movie/100",
        }
        values.update(overrides)
        return FullRecord(**values)

    return _make
