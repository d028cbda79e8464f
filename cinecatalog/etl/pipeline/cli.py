"""Command line interface for catalog ingestion.

Commands:
    ingest          Run one ingestion pass
    resolve         Run identity reconciliation only
    status          Print the latest run snapshot
    confirm-merge   Apply a queued merge
    reject-merge    Close a queued merge
"""

import argparse
import json
import sys
import traceback

from cinecatalog.database import get_database
from cinecatalog.etl.pipeline.orchestrator import (
    SNAPSHOT_NAME,
    run_identity_pass,
    run_ingestion,
)
from cinecatalog.etl.reconciliation import IdentityResolver
from cinecatalog.etl.types import EnrichmentMode, RunConfig
from cinecatalog.etl.utils import CheckpointManager, setup_logger
from cinecatalog.settings import print_sources_status, settings

logger = setup_logger("etl.pipeline.cli")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================


def _split_langs(value: str) -> list[str]:
    langs = [part.strip().lower() for part in value.split(",") if part.strip()]
    if not langs:
        raise argparse.ArgumentTypeError("at least one language code is required")
    return langs


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cinecatalog",
        description="Indian-cinema catalog ingestion and identity reconciliation",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Run one ingestion pass")
    ingest.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help=f"Titles to process (default: {settings.ingestion.limit})",
    )
    ingest.add_argument(
        "--days-past",
        type=int,
        default=None,
        help=f"Recent-release window in days (default: {settings.ingestion.days_past})",
    )
    ingest.add_argument(
        "--days-future",
        type=int,
        default=None,
        help=f"Upcoming window in days (default: {settings.ingestion.days_future})",
    )
    ingest.add_argument(
        "--langs",
        type=_split_langs,
        default=None,
        help=f"Comma-separated language codes (default: {settings.ingestion.langs_raw})",
    )
    ingest.add_argument(
        "--enrich",
        choices=[mode.value for mode in EnrichmentMode],
        default=None,
        help=f"Enrichment mode (default: {settings.ingestion.enrich})",
    )
    ingest.add_argument(
        "--dry-run",
        action="store_true",
        help="Discover, fetch and classify without writing",
    )
    ingest.add_argument(
        "--no-resolve",
        action="store_true",
        help="Skip identity reconciliation at the end of the pass",
    )
    ingest.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help=f"Fetch worker threads (default: {settings.etl.max_workers})",
    )

    commands.add_parser("resolve", help="Run identity reconciliation only")
    commands.add_parser("status", help="Print the latest run snapshot")

    confirm = commands.add_parser("confirm-merge", help="Apply a queued merge")
    confirm.add_argument("candidate_id", type=int)

    reject = commands.add_parser("reject-merge", help="Close a queued merge")
    reject.add_argument("candidate_id", type=int)

    return parser


def _parse_cli_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    return _build_parser().parse_args(argv)


def build_run_config(args: argparse.Namespace) -> RunConfig:
    """Build the run configuration from settings and ``ingest`` flags."""
    return RunConfig.from_settings(
        limit=args.limit,
        days_past=args.days_past,
        days_future=args.days_future,
        langs=args.langs,
        enrich=args.enrich,
        dry_run=args.dry_run or None,
        max_workers=args.workers,
        resolve_identities=False if args.no_resolve else None,
    )


# =============================================================================
# COMMAND HANDLERS
# =============================================================================


def _handle_ingest(args: argparse.Namespace) -> None:
    print_sources_status()
    result = run_ingestion(build_run_config(args))
    stats = result.stats
    logger.info(
        f"Pass finished: discovered={stats.discovered}, upserted={stats.upserted}, "
        f"skipped={stats.skipped_non_indian}, songs={stats.songs_upserted}, "
        f"ratings={stats.ratings_upserted}, errors={stats.errors}"
    )


def _handle_resolve() -> None:
    counts = run_identity_pass()
    logger.info(
        f"Identity pass: merged={counts['merged']}, queued={counts['queued']}, "
        f"errors={counts['errors']}"
    )


def _handle_status() -> None:
    snapshot = CheckpointManager(prefix="run").load(SNAPSHOT_NAME)
    if snapshot is None:
        print("No run recorded yet.")
        return
    print(json.dumps(snapshot, indent=2, ensure_ascii=False))


def _handle_merge_decision(candidate_id: int, confirm: bool) -> None:
    with get_database().session() as session:
        resolver = IdentityResolver(session)
        if confirm:
            outcome = resolver.confirm(candidate_id)
            logger.info(f"Merged {outcome.from_id} into {outcome.canonical_id}")
        else:
            resolver.reject(candidate_id)
            logger.info(f"Rejected merge candidate {candidate_id}")


def _handle_fatal_error(error: Exception) -> None:
    """Report a fatal error and exit with status 1."""
    print(f"\nFATAL: {error}", file=sys.stderr)
    if settings.debug:
        traceback.print_exc()
    logger.error(f"Command failed: {error}")
    sys.exit(1)


# =============================================================================
# COMMAND DISPATCH
# =============================================================================


def _execute_cli_command(args: argparse.Namespace) -> None:
    if args.command == "ingest":
        _handle_ingest(args)
    elif args.command == "resolve":
        _handle_resolve()
    elif args.command == "status":
        _handle_status()
    elif args.command == "confirm-merge":
        _handle_merge_decision(args.candidate_id, confirm=True)
    elif args.command == "reject-merge":
        _handle_merge_decision(args.candidate_id, confirm=False)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_cli_arguments(argv)
    try:
        _execute_cli_command(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        _handle_fatal_error(e)


if __name__ == "__main__":
    main()
