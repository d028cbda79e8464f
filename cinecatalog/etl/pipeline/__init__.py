"""Ingestion pipeline: orchestration and command line interface.

Public API:
    - IngestionOrchestrator: One ingestion pass over injected providers
    - run_ingestion: Open configured clients and run a pass
    - run_identity_pass: Identity reconciliation alone
    - main: CLI entry point
"""

from cinecatalog.etl.pipeline.cli import main
from cinecatalog.etl.pipeline.orchestrator import (
    IngestionOrchestrator,
    run_identity_pass,
    run_ingestion,
)

__all__ = [
    "IngestionOrchestrator",
    "run_identity_pass",
    "run_ingestion",
    "main",
]
