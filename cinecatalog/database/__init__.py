"""Catalog database package: models, connection and repositories."""

from cinecatalog.database.connection import (
    DatabaseConnection,
    close_database,
    get_database,
)

__all__ = [
    "DatabaseConnection",
    "close_database",
    "get_database",
]
