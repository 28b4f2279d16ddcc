from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import OperationalError

import scripts.import_schools as cli
from app.data.schools import SCHOOL_RECORDS
from app.domain.bulk_import import ImportRecord
from app.repositories.import_target_repository import ImportTargetRepository
from app.services.bulk_import_service import IdempotentImporter
from db.repositories.errors import DatabaseConnectionError
from db.session import ConnectionProvider


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda: None)


def _use_engine(monkeypatch, engine) -> None:
    class SharedEngineProvider(ConnectionProvider):
        def __init__(self, settings) -> None:
            super().__init__(settings, engine=engine)

        def dispose(self) -> None:
            # The fixture owns the in-memory engine.
            pass

    monkeypatch.setattr(cli, "ConnectionProvider", SharedEngineProvider)


def test_json_report_on_first_and_second_run(monkeypatch, capsys, engine) -> None:
    _use_engine(monkeypatch, engine)

    assert cli.main(["--json"]) == cli.EXIT_OK
    first = json.loads(capsys.readouterr().out)

    assert cli.main(["--json"]) == cli.EXIT_OK
    second = json.loads(capsys.readouterr().out)

    assert first["inserted_count"] == 18
    assert second["inserted_count"] == 0
    assert second["skipped_count"] == 18
    assert second["post_count"] == 18


def test_text_report(monkeypatch, capsys, engine) -> None:
    _use_engine(monkeypatch, engine)

    assert cli.main(["--quiet"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    assert "Import summary (schools)" in out
    assert "Inserted:        18" in out
    assert "mesala_enate" not in out


def test_missing_table_exits_with_precondition_code(monkeypatch, capsys, empty_engine) -> None:
    _use_engine(monkeypatch, empty_engine)

    assert cli.main([]) == cli.EXIT_PRECONDITION
    assert "Table 'schools' does not exist" in capsys.readouterr().err


def test_connection_failure_prints_troubleshooting(monkeypatch, capsys) -> None:
    class RefusingProvider(ConnectionProvider):
        def acquire(self):
            raise DatabaseConnectionError("Database connection failed: connection refused")

    monkeypatch.setattr(cli, "ConnectionProvider", RefusingProvider)

    assert cli.main([]) == cli.EXIT_CONNECTION

    err = capsys.readouterr().err
    assert "connection refused" in err
    assert "Troubleshooting tips:" in err
    assert "Make sure the database server is running" in err


def test_connection_lost_mid_run_prints_partial_report(monkeypatch, capsys, engine) -> None:
    _use_engine(monkeypatch, engine)
    dropped_key = SCHOOL_RECORDS[1].natural_key

    class DroppingRepository(ImportTargetRepository):
        def insert_if_absent(self, record: ImportRecord) -> int:
            if record.natural_key == dropped_key:
                raise OperationalError(
                    "INSERT", {}, Exception("server has gone away"), connection_invalidated=True
                )
            return super().insert_if_absent(record)

    class DroppingImporter(IdempotentImporter):
        def __init__(self, **kwargs) -> None:
            super().__init__(repository_factory=DroppingRepository, **kwargs)

    monkeypatch.setattr(cli, "IdempotentImporter", DroppingImporter)

    assert cli.main([]) == cli.EXIT_CONNECTION

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Connection lost while importing into 'schools'" in captured.err
    assert "PARTIAL RUN: counts are informational only" in captured.err
    assert "Rows after:      unknown" in captured.err
    assert "Inserted:        1" in captured.err
    assert "Troubleshooting tips:" in captured.err


def test_cancelled_run_exits_with_cancel_code(monkeypatch, capsys, engine) -> None:
    _use_engine(monkeypatch, engine)

    class PreCancelledImporter(IdempotentImporter):
        def __init__(self, **kwargs) -> None:
            super().__init__(**kwargs)
            kwargs["cancel_event"].set()

    monkeypatch.setattr(cli, "IdempotentImporter", PreCancelledImporter)

    assert cli.main(["--json"]) == cli.EXIT_CANCELLED

    report = json.loads(capsys.readouterr().out)
    assert report["cancelled"] is True
    assert report["complete"] is False
    assert report["processed_count"] == 0
    assert report["post_count"] == 0
