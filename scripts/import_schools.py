"""
Import the fixed school records from CLI.

Safe to re-run: schools that already exist are skipped.
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import threading

from sqlalchemy.exc import SQLAlchemyError

from app.data.schools import SCHOOL_RECORDS, SCHOOLS_TARGET
from app.domain.bulk_import import ImportRunResult
from app.logging_utils import configure_logging
from app.services.bulk_import_service import IdempotentImporter, run_import
from app.services.run_reporter import build_report, render_report
from db.config import get_database_settings
from db.inspector import SchemaInspector
from db.repositories.errors import (
    DatabaseConnectionError,
    ImportRunError,
    PreconditionError,
    RecordSourceError,
)
from db.session import ConnectionProvider

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONNECTION = 1
EXIT_PRECONDITION = 2
EXIT_CANCELLED = 130

TROUBLESHOOTING_TIPS = (
    "Make sure the database server is running",
    "Check that the database exists (DB_NAME)",
    "Verify username/password (DB_USER, DB_PASSWORD)",
    "Check host and port (DB_HOST, DB_PORT) are reachable",
    "Ensure the schools table exists (start the application once to create it)",
)


def _print_troubleshooting() -> None:
    print("\nTroubleshooting tips:", file=sys.stderr)
    for number, tip in enumerate(TROUBLESHOOTING_TIPS, start=1):
        print(f"  {number}. {tip}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import school records (idempotent).")
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the run report as JSON instead of text.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Omit per-record lines from the text report.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    settings = get_database_settings()
    logger.info("Importing school data target=%s", settings.masked_url())

    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda *_: cancel_event.set())

    provider = ConnectionProvider(settings)
    importer = IdempotentImporter(
        target=SCHOOLS_TARGET,
        inspector=SchemaInspector(),
        cancel_event=cancel_event,
    )

    try:
        result = run_import(provider=provider, importer=importer, records=SCHOOL_RECORDS)
    except RecordSourceError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return EXIT_PRECONDITION
    except PreconditionError as exc:
        print(f"Import aborted: {exc}", file=sys.stderr)
        return EXIT_PRECONDITION
    except ImportRunError as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
        partial = ImportRunResult(summary=exc.summary, outcomes=exc.outcomes)
        print(render_report(partial, table_name=importer.target.table_name), file=sys.stderr)
        _print_troubleshooting()
        return EXIT_CONNECTION
    except DatabaseConnectionError as exc:
        print(f"Import failed: {exc}", file=sys.stderr)
        print(f"Connection: {json.dumps(settings.describe())}", file=sys.stderr)
        _print_troubleshooting()
        return EXIT_CONNECTION
    except SQLAlchemyError as exc:
        logger.exception("Import failed with an unexpected database error")
        print(f"Import failed: {exc}", file=sys.stderr)
        _print_troubleshooting()
        return EXIT_CONNECTION
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        provider.dispose()

    if args.as_json:
        print(build_report(result).model_dump_json(indent=2))
    else:
        print(
            render_report(
                result,
                table_name=importer.target.table_name,
                include_outcomes=not args.quiet,
            )
        )

    if result.summary.cancelled:
        return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
