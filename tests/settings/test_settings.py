"""Tests for the settings package.

Covers: IngestionSettings, LoggingSettings, ETLSettings, DatabaseSettings,
provider settings and the masking helper.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cinecatalog.settings import (
    DatabaseSettings,
    ETLSettings,
    IngestionSettings,
    LoggingSettings,
    OMDbSettings,
    PathsSettings,
    Settings,
    TMDBSettings,
    YouTubeSettings,
    get_masked_settings,
    print_sources_status,
)


class TestIngestionSettings:
    @staticmethod
    def test_langs_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_LANGS", " HI, ta ,,")
        assert IngestionSettings(_env_file=None).langs == ["hi", "ta"]

    @staticmethod
    def test_enrich_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_ENRICH", " TMDB ")
        assert IngestionSettings(_env_file=None).enrich == "tmdb"

    @staticmethod
    def test_invalid_enrich(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_ENRICH", "everything")
        with pytest.raises(ValidationError):
            IngestionSettings(_env_file=None)

    @staticmethod
    def test_negative_limit(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGENT_LIMIT", "-1")
        with pytest.raises(ValidationError):
            IngestionSettings(_env_file=None)

    @staticmethod
    def test_merge_thresholds(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MERGE_AUTO_THRESHOLD", "0.95")
        s = IngestionSettings(_env_file=None)
        assert s.auto_merge_threshold == pytest.approx(0.95)
        assert s.review_threshold == pytest.approx(0.6)


class TestBaseSettings:
    @staticmethod
    def test_log_level_upper_cased(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert LoggingSettings(_env_file=None).level == "DEBUG"

    @staticmethod
    def test_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")
        with pytest.raises(ValidationError):
            LoggingSettings(_env_file=None)

    @staticmethod
    def test_workers_at_least_one(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ETL_MAX_WORKERS", "0")
        with pytest.raises(ValidationError):
            ETLSettings(_env_file=None)

    @staticmethod
    def test_data_dir_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CATALOG_DATA_DIR", str(tmp_path))
        paths = PathsSettings(_env_file=None)
        assert paths.runs_dir == tmp_path / "runs"

    @staticmethod
    def test_invalid_environment(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestDatabaseSettings:
    @staticmethod
    def test_sqlite_default(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DB_PATH", "data/test.sqlite")
        s = DatabaseSettings(_env_file=None)
        assert s.sync_url == "sqlite:///data/test.sqlite"
        assert s.is_sqlite

    @staticmethod
    def test_url_override(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://u:p@db/catalog")
        s = DatabaseSettings(_env_file=None)
        assert s.sync_url == "postgresql+psycopg2://u:p@db/catalog"
        assert not s.is_sqlite


class TestSourcesSettings:
    @staticmethod
    def test_tmdb_bearer_only(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TMDB_API_KEY", "")
        monkeypatch.setenv("TMDB_BEARER_TOKEN", "token")
        assert TMDBSettings(_env_file=None).is_configured

    @staticmethod
    def test_tmdb_requests_per_second(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TMDB_REQUESTS_PER_PERIOD", "40")
        monkeypatch.setenv("TMDB_PERIOD_SECONDS", "10")
        assert TMDBSettings(_env_file=None).requests_per_second == pytest.approx(4.0)

    @staticmethod
    def test_missing_keys(monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YOUTUBE_API_KEY", "")
        monkeypatch.setenv("OMDB_API_KEY", "")
        assert not YouTubeSettings(_env_file=None).is_configured
        assert not OMDbSettings(_env_file=None).is_configured


class TestHelpers:
    @staticmethod
    def test_masked_settings_hide_keys() -> None:
        config = get_masked_settings()
        for section in ("tmdb", "youtube", "omdb"):
            assert config[section]["api_key"] in ("", "***MASKED***")
        assert "ingestion" in config

    @staticmethod
    def test_sources_status(capsys: pytest.CaptureFixture[str]) -> None:
        print_sources_status()
        out = capsys.readouterr().out
        assert "TMDB" in out
        assert "OMDb" in out
