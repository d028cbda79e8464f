"""Base class for catalog writers.

A writer is bound to one session, counts the rows it writes and leaves
the transaction to its caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from cinecatalog.etl.utils.logger import setup_logger


@dataclass
class LoaderStats:
    """Rows written by a catalog writer.

    Attributes:
        inserted: Movies created.
        updated: Existing movies refreshed.
        songs: Song rows stored by media replacement.
        ratings: Rating rows upserted.
        attributions: Provenance rows added.
        errors: Records that failed to store.
        error_messages: One line per failed record.
    """

    inserted: int = 0
    updated: int = 0
    songs: int = 0
    ratings: int = 0
    attributions: int = 0
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)

    @property
    def movies(self) -> int:
        """Movies written, new or refreshed."""
        return self.inserted + self.updated

    @property
    def success_rate(self) -> float:
        """Share of records stored, in percent (100.0 when nothing was attempted)."""
        attempted = self.movies + self.errors
        if attempted == 0:
            return 100.0
        return round(self.movies / attempted * 100, 2)


class BaseLoader(ABC):
    """Session-bound catalog writer.

    Attributes:
        name: Writer identifier, used as the logger suffix.
    """

    name: str = "base"

    def __init__(self, session: Session) -> None:
        self._session = session
        self._logger = setup_logger(f"etl.loader.{self.name}")
        self._stats = LoaderStats()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def stats(self) -> LoaderStats:
        """Counters since construction or the last reset."""
        return self._stats

    def reset_stats(self) -> None:
        self._stats = LoaderStats()

    @abstractmethod
    def load(self, data: Iterable[Any]) -> LoaderStats:
        """Write a batch, isolating failures per item.

        Args:
            data: Items to write.

        Returns:
            Counters of this batch.
        """

    def _count(self, counter: str, amount: int = 1) -> None:
        """Add ``amount`` to one of the LoaderStats counters."""
        setattr(self._stats, counter, getattr(self._stats, counter) + amount)

    def _record_error(self, message: str) -> None:
        self._stats.errors += 1
        self._stats.error_messages.append(message)
        self._logger.warning(message)

    def _log_summary(self) -> None:
        s = self._stats
        self._logger.info(
            f"{self.name}: movies={s.movies} (new={s.inserted}), songs={s.songs}, "
            f"ratings={s.ratings}, attributions={s.attributions}, errors={s.errors}"
        )
