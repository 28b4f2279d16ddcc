"""
app/services/bulk_import_service.py

Idempotent bulk import of a fixed record source into one target table.

Records are processed strictly in source order on a single session. Each
record is committed on success and rolled back on failure, so a failed
record never affects its neighbours and a re-run only inserts what is
still missing. Only a missing target table, an invalid record source, or
a lost connection stop the run.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.bulk_import import (
    ImportOutcome,
    ImportRecord,
    ImportRunResult,
    ImportTarget,
    OutcomeStatus,
    RunTally,
)
from app.logging_utils import log_event
from app.repositories.import_target_repository import (
    ImportTargetRepository,
    describe_error,
    is_connection_loss,
)
from app.validators.record_source_validator import RecordSourceValidator
from db.inspector import BaseSchemaInspector, SchemaInspector
from db.repositories.errors import (
    DatabaseConnectionError,
    ImportRunError,
    PreconditionError,
    RecordWriteError,
)
from db.session import BaseConnectionProvider

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[Session, ImportTarget], ImportTargetRepository]


class IdempotentImporter:
    """
    Ensures every record exists in the target table exactly once.
    """

    def __init__(
        self,
        *,
        target: ImportTarget | None = None,
        inspector: BaseSchemaInspector | None = None,
        cancel_event: threading.Event | None = None,
        repository_factory: RepositoryFactory = ImportTargetRepository,
    ) -> None:
        self._target = target or ImportTarget()
        self._inspector = inspector or SchemaInspector()
        self._cancel_event = cancel_event
        self._repository_factory = repository_factory
        self._validator = RecordSourceValidator(target=self._target)

    @property
    def target(self) -> ImportTarget:
        return self._target

    def validate(self, records: Sequence[ImportRecord]) -> None:
        """
        Raise RecordSourceError if the record source is unusable.
        """

        self._validator.validate(records)

    def run(self, session: Session, records: Sequence[ImportRecord]) -> ImportRunResult:
        """
        Import `records` through `session` and return the run result.

        Raises:
            RecordSourceError: before any database access.
            PreconditionError: target table missing; nothing is written.
            DatabaseConnectionError: connection lost during preflight.
            ImportRunError: connection lost mid-run; carries a partial summary.
        """

        records = tuple(records)
        self.validate(records)
        self._preflight(session)

        repository = self._repository_factory(session, self._target)
        tally = RunTally(total_records=len(records))
        cancelled = False

        try:
            tally.pre_count = repository.count_rows()
            logger.info(
                "Import started table=%s records=%d pre_count=%d",
                self._target.table_name,
                len(records),
                tally.pre_count,
            )

            for record in records:
                if self._cancel_requested():
                    cancelled = True
                    logger.warning(
                        "Import cancelled table=%s processed=%d remaining=%d",
                        self._target.table_name,
                        len(tally.outcomes),
                        len(records) - len(tally.outcomes),
                    )
                    break

                outcome = self._import_one(session, repository, record)
                tally.record(outcome)
                self._log_outcome(outcome)

            post_count = repository.count_rows()
        except SQLAlchemyError as exc:
            if not is_connection_loss(exc):
                raise
            summary = tally.finalize(post_count=None, complete=False)
            logger.error(
                "Connection lost during import table=%s processed=%d error=%s",
                self._target.table_name,
                summary.processed_count,
                exc,
            )
            raise ImportRunError(
                f"Connection lost while importing into '{self._target.table_name}': {describe_error(exc)}",
                summary=summary,
                outcomes=tally.outcomes,
            ) from exc

        summary = tally.finalize(
            post_count=post_count,
            complete=not cancelled,
            cancelled=cancelled,
        )
        if summary.counts_consistent is False:
            logger.warning(
                "Row count delta does not match inserted rows table=%s pre=%d post=%d inserted=%d",
                self._target.table_name,
                summary.pre_count,
                post_count,
                summary.inserted_count,
            )
        logger.info(
            "Import finished table=%s inserted=%d skipped=%d failed=%d post_count=%d",
            self._target.table_name,
            summary.inserted_count,
            summary.skipped_count,
            summary.failed_count,
            post_count,
        )
        return ImportRunResult(summary=summary, outcomes=tuple(tally.outcomes))

    def _preflight(self, session: Session) -> None:
        table_name = self._target.table_name
        try:
            exists = self._inspector.table_exists(session, table_name)
        except SQLAlchemyError as exc:
            if is_connection_loss(exc):
                raise DatabaseConnectionError(
                    f"Connection lost while checking table '{table_name}': {describe_error(exc)}"
                ) from exc
            raise

        if not exists:
            logger.error("Target table missing table=%s", table_name)
            raise PreconditionError(
                f"Table '{table_name}' does not exist. Create it before importing.",
                table_name=table_name,
            )
        logger.info("Target table present table=%s", table_name)

    def _import_one(
        self,
        session: Session,
        repository: ImportTargetRepository,
        record: ImportRecord,
    ) -> ImportOutcome:
        key = record.natural_key
        try:
            inserted = repository.insert_if_absent(record)
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            # A raised unique violation on the key is still a duplicate.
            try:
                exists = repository.key_exists(key)
            except SQLAlchemyError as lookup_exc:
                if is_connection_loss(lookup_exc):
                    raise
                session.rollback()
                logger.warning("Duplicate re-check failed key=%s error=%s", key, lookup_exc)
                exists = False
            if exists:
                return ImportOutcome.skipped(key)
            return ImportOutcome.failed(key, describe_error(exc))
        except RecordWriteError as exc:
            session.rollback()
            return ImportOutcome.failed(key, str(exc))
        except SQLAlchemyError as exc:
            if is_connection_loss(exc):
                raise
            session.rollback()
            return ImportOutcome.failed(key, describe_error(exc))
        except Exception as exc:
            session.rollback()
            logger.exception("Unexpected failure importing record key=%s", key)
            return ImportOutcome.failed(key, describe_error(exc))

        if inserted > 0:
            return ImportOutcome.inserted(key)
        return ImportOutcome.skipped(key)

    def _cancel_requested(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def _log_outcome(self, outcome: ImportOutcome) -> None:
        level = logging.WARNING if outcome.status is OutcomeStatus.FAILED else logging.INFO
        log_event(
            logger,
            level,
            "record_import",
            table=self._target.table_name,
            natural_key=outcome.natural_key,
            status=outcome.status.value,
            reason=outcome.reason,
        )


def run_import(
    *,
    provider: BaseConnectionProvider,
    importer: IdempotentImporter,
    records: Sequence[ImportRecord],
) -> ImportRunResult:
    """
    Acquire a session, run the importer, and release the session on every path.
    """

    importer.validate(records)
    session = provider.acquire()
    try:
        return importer.run(session, records)
    finally:
        provider.release(session)
