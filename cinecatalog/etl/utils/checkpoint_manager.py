"""JSON snapshots of ingestion state (latest run statistics)."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from cinecatalog.etl.utils.logger import setup_logger
from cinecatalog.settings import settings


class CheckpointManager:
    """Persist named JSON snapshots, one file per name, latest wins.

    Each file wraps the payload as ``{"timestamp": ..., "data": ...}``.
    Writes go through a temporary file and an atomic rename so a reader
    never sees a half-written snapshot.
    """

    def __init__(
        self,
        checkpoint_dir: Path | None = None,
        prefix: str = "run",
    ) -> None:
        """Initialize checkpoint manager.

        Args:
            checkpoint_dir: Directory for snapshot files.
            prefix: Prefix for snapshot filenames.
        """
        self._checkpoint_dir = checkpoint_dir or settings.paths.runs_dir
        self._prefix = prefix
        self._checkpoint_dir.mkdir(parents=True, exist_ok=True)
        self._logger = setup_logger("etl.checkpoint")

    @property
    def checkpoint_dir(self) -> Path:
        """Return checkpoint directory path."""
        return self._checkpoint_dir

    def save(self, name: str, data: dict[str, Any]) -> Path:
        """Save snapshot data to JSON file.

        Args:
            name: Snapshot identifier.
            data: Data to persist.

        Returns:
            Path to saved snapshot file.
        """
        path = self._build_path(name)
        self._write_json(path, self._build_checkpoint_data(data))
        self._logger.debug(f"Snapshot saved: {path.name}")
        return path

    def load(self, name: str) -> dict[str, Any] | None:
        """Load snapshot data from JSON file.

        Args:
            name: Snapshot identifier.

        Returns:
            Wrapped snapshot or None if not found.
        """
        path = self._build_path(name)
        if not path.exists():
            return None
        return self._read_json(path)

    def delete(self, name: str) -> bool:
        """Delete snapshot file.

        Returns:
            True if deleted, False if not found.
        """
        path = self._build_path(name)
        if not path.exists():
            return False
        path.unlink()
        self._logger.debug(f"Snapshot deleted: {path.name}")
        return True

    def exists(self, name: str) -> bool:
        """Check if snapshot exists."""
        return self._build_path(name).exists()

    def list_checkpoints(self) -> list[str]:
        """List snapshot names stored under this prefix."""
        prefix = f"{self._prefix}_"
        return sorted(
            path.stem[len(prefix) :]
            for path in self._checkpoint_dir.glob(f"{prefix}*.json")
        )

    def _build_path(self, name: str) -> Path:
        safe_name = name.replace("/", "_").replace("\\", "_")
        return self._checkpoint_dir / f"{self._prefix}_{safe_name}.json"

    @staticmethod
    def _build_checkpoint_data(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": datetime.now().isoformat(),
            "data": data,
        }

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        tmp_path.replace(path)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
