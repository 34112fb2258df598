import json

import pytest

from voter_vault.exceptions import DataPersistenceError
from voter_vault.models import PollingStation, VoterRecord
from voter_vault.persistence import JSONVoterRepository


@pytest.fixture
def repo(tmp_path):
    return JSONVoterRepository(tmp_path / "vault" / "voters.json")


def record(epic, name, updated="2024-01-01T00:00:00.000Z", **kwargs):
    return VoterRecord(epic_no=epic, name=name, age=40, last_updated=updated, **kwargs)


def test_upsert_creates_file(repo):
    assert repo.upsert([record("ABC1234567", "Asha Patil")]) == 1
    assert repo.path.exists()
    assert json.loads(repo.path.read_text(encoding="utf-8"))[0]["epicNo"] == "ABC1234567"


def test_upsert_is_idempotent(repo):
    batch = [record("ABC1234567", "Asha Patil"), record("XYZ7654321", "Ravi Kumar")]
    repo.upsert(batch)
    repo.upsert(batch)

    assert repo.count() == 2


def test_last_write_wins(repo):
    repo.upsert([record("ABC1234567", "Asha Patil")])
    repo.upsert([record("ABC1234567", "Asha R. Patil", polling_station=PollingStation(name="ZP School"))])

    [stored] = repo.list_all()
    assert stored.name == "Asha R. Patil"
    assert stored.polling_station.name == "ZP School"


def test_list_all_most_recent_first(repo):
    repo.upsert([
        record("AAA1111111", "Old", updated="2024-01-01T00:00:00.000Z"),
        record("BBB2222222", "New", updated="2024-06-01T00:00:00.000Z"),
    ])

    assert [v.name for v in repo.list_all()] == ["New", "Old"]


def test_search_name_and_epic(repo):
    repo.upsert([record("ABC1234567", "Asha Patil"), record("XYZ7654321", "Ravi Kumar")])

    assert [v.epic_no for v in repo.search("patil")] == ["ABC1234567"]
    assert [v.name for v in repo.search("xyz76")] == ["Ravi Kumar"]
    assert repo.search("") == []
    assert repo.search("nobody") == []


def test_search_limit(repo):
    repo.upsert([record(f"AAA{i:07d}", f"Voter {i}") for i in range(5)])
    assert len(repo.search("voter", limit=3)) == 3


def test_delete(repo):
    repo.upsert([record("ABC1234567", "Asha Patil")])

    assert repo.delete("ABC1234567") is True
    assert repo.delete("ABC1234567") is False
    assert repo.count() == 0


def test_delete_all(repo):
    repo.upsert([record("AAA1111111", "A"), record("BBB2222222", "B")])

    assert repo.delete_all() == 2
    assert repo.list_all() == []


def test_corrupt_store_raises(repo):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DataPersistenceError) as exc_info:
        repo.list_all()
    assert exc_info.value.operation == "load"


def test_test_connection(repo):
    ok, message = repo.test_connection()
    assert ok
    assert "0 records" in message


def test_unicode_preserved(repo):
    repo.upsert([record("ABC1234567", "आशा पाटील")])
    assert "आशा पाटील" in repo.path.read_text(encoding="utf-8")
