"""Loaders writing normalized records into the catalog database."""

from cinecatalog.etl.loaders.base import BaseLoader, LoaderStats
from cinecatalog.etl.loaders.store import ReconciliationStore, derive_status

__all__ = [
    "BaseLoader",
    "LoaderStats",
    "ReconciliationStore",
    "derive_status",
]
