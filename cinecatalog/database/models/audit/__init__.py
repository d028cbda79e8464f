"""Audit models."""

from cinecatalog.database.models.audit.etl_run import ETLRun

__all__ = ["ETLRun"]
