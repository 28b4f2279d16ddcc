from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import DisconnectionError, IntegrityError, InterfaceError, OperationalError

from app.data.schools import SCHOOLS_TARGET
from app.domain.bulk_import import ImportRecord
from app.repositories.import_target_repository import (
    ImportTargetRepository,
    describe_error,
    is_connection_loss,
)
from db.repositories.errors import RecordWriteError
from tests.factories import make_record


@pytest.fixture()
def repository(session) -> ImportTargetRepository:
    return ImportTargetRepository(session, SCHOOLS_TARGET)


def test_count_rows_on_empty_table(repository) -> None:
    assert repository.count_rows() == 0


def test_insert_if_absent_inserts_then_no_ops(repository, session) -> None:
    record = make_record("goro")

    assert repository.insert_if_absent(record) == 1
    session.commit()
    assert repository.insert_if_absent(record) == 0
    session.commit()

    assert repository.count_rows() == 1
    assert repository.key_exists("goro") is True
    assert repository.key_exists("kezira") is False


def test_sqlite_uses_conflict_insert(repository) -> None:
    assert repository.dialect_name == "sqlite"


class MySQLDialectRepository(ImportTargetRepository):
    @property
    def dialect_name(self) -> str:
        return "mysql"


def test_check_then_insert_skips_existing_key(session) -> None:
    repository = MySQLDialectRepository(session, SCHOOLS_TARGET)
    record = make_record("goro")

    assert repository.insert_if_absent(record) == 1
    session.commit()
    assert repository.insert_if_absent(record) == 0
    session.commit()

    assert repository.count_rows() == 1


def test_check_then_insert_propagates_integrity_error(session) -> None:
    repository = MySQLDialectRepository(session, SCHOOLS_TARGET)
    with pytest.raises(IntegrityError):
        repository.insert_if_absent(make_record("goro", name=None))


def test_build_payload_includes_key_and_timestamp_override(repository) -> None:
    stamp = datetime(2025, 4, 11, 21, 29, 18)
    record = ImportRecord(natural_key="goro", fields={"name": "goro"}, created_at=stamp)

    payload = repository.build_payload(record)

    assert payload == {"school_id": "goro", "name": "goro", "created_at": stamp}


def test_build_payload_omits_timestamp_when_not_overridden(repository) -> None:
    payload = repository.build_payload(make_record("goro"))
    assert "created_at" not in payload
    assert list(payload)[0] == "school_id"


def test_not_null_violation_propagates_as_integrity_error(repository) -> None:
    with pytest.raises(IntegrityError):
        repository.insert_if_absent(make_record("goro", name=None))


def test_unknown_column_raises_record_write_error(repository) -> None:
    with pytest.raises(RecordWriteError) as ctx:
        repository.insert_if_absent(make_record("goro", capacity=12))

    assert ctx.value.natural_key == "goro"


def test_invalidated_connection_is_connection_loss() -> None:
    exc = OperationalError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
    assert is_connection_loss(exc) is True


def test_interface_error_is_connection_loss() -> None:
    assert is_connection_loss(InterfaceError("SELECT 1", {}, Exception("closed"))) is True


def test_disconnection_error_is_connection_loss() -> None:
    assert is_connection_loss(DisconnectionError("pool")) is True


def test_plain_operational_error_is_not_connection_loss() -> None:
    assert is_connection_loss(OperationalError("INSERT", {}, Exception("no such column"))) is False
    assert is_connection_loss(ValueError("bad")) is False


def test_describe_error_uses_driver_error() -> None:
    exc = IntegrityError("INSERT", {}, ValueError("NOT NULL constraint\n failed: schools.name"))
    assert describe_error(exc) == "ValueError: NOT NULL constraint failed: schools.name"
