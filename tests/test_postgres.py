import psycopg2
import pytest

from voter_vault.config import DBConfig
from voter_vault.exceptions import ConfigurationError, DataPersistenceError
from voter_vault.models import PollingStation, VoterRecord
from voter_vault.persistence import create_repository
from voter_vault.persistence import postgres
from voter_vault.persistence.postgres import COLUMNS, PostgresVoterRepository


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 0

    def execute(self, query, params=None):
        self.conn.executed.append(params)
        if self.conn.error:
            raise self.conn.error
        self.rowcount = self.conn.rowcount

    def fetchall(self):
        return self.conn.rows

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeConnection:
    def __init__(self, rows=None, rowcount=0, error=None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, cursor_factory=None):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


def make_repo(monkeypatch, conn):
    monkeypatch.setattr(postgres.psycopg2, "connect", lambda **kwargs: conn)
    return PostgresVoterRepository(DBConfig(host="db", name="vault", user="u"))


def test_create_repository_requires_db_settings(config):
    config.store_backend = "postgres"
    config.db = DBConfig(host="", name="", user="")

    with pytest.raises(ConfigurationError):
        create_repository(config)


def test_create_repository_postgres(config):
    config.store_backend = "postgres"
    config.db = DBConfig(host="db", name="vault", user="u")

    assert isinstance(create_repository(config), PostgresVoterRepository)


def test_row_values_match_columns():
    record = VoterRecord(epic_no="ABC1234567", name="Asha", polling_station=PollingStation("ZP", "Pune"))
    values = PostgresVoterRepository._row_values(record)

    assert len(values) == len(COLUMNS)
    assert values[0] == "ABC1234567"
    assert values[COLUMNS.index("pollingStation")].adapted == {"name": "ZP", "address": "Pune"}


def test_delete_reports_rowcount(monkeypatch):
    conn = FakeConnection(rowcount=1)
    repo = make_repo(monkeypatch, conn)

    assert repo.delete("ABC1234567") is True
    assert conn.executed == [("ABC1234567",)]
    assert conn.commits == 1


def test_search_builds_pattern(monkeypatch):
    row = {"epicNo": "ABC1234567", "name": "Asha Patil", "age": 34, "gender": "F"}
    conn = FakeConnection(rows=[row])
    repo = make_repo(monkeypatch, conn)

    [found] = repo.search("patil", limit=5)

    assert found.epic_no == "ABC1234567"
    assert conn.executed == [("%patil%", "%patil%", 5)]
    assert repo.search("") == []


def test_failed_statement_rolls_back(monkeypatch):
    conn = FakeConnection(error=psycopg2.OperationalError("server closed the connection"))
    repo = make_repo(monkeypatch, conn)

    with pytest.raises(DataPersistenceError) as exc_info:
        repo.delete_all()

    assert exc_info.value.operation == "delete_all"
    assert conn.rollbacks == 1


def test_connect_failure(monkeypatch):
    def refuse(**kwargs):
        raise psycopg2.OperationalError("connection refused")

    monkeypatch.setattr(postgres.psycopg2, "connect", refuse)
    repo = PostgresVoterRepository(DBConfig(host="db", name="vault", user="u"))

    ok, message = repo.test_connection()

    assert not ok
    assert "connection refused" in message


def test_empty_upsert_skips_database(monkeypatch):
    conn = FakeConnection()
    repo = make_repo(monkeypatch, conn)

    assert repo.upsert([]) == 0
    assert conn.executed == []
