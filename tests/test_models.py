from datetime import datetime, timezone

from voter_vault.models import IngestionStats, OperatorLog, PollingStation, VoterRecord
from voter_vault.utils.ai_parser import parse_json_object


def test_validate_epic():
    assert VoterRecord.validate_epic("ABC1234567")
    assert VoterRecord.validate_epic("abc1234567")
    assert not VoterRecord.validate_epic("AB1234567")
    assert not VoterRecord.validate_epic("")


def test_dict_round_keys():
    v = VoterRecord(epic_no="ABC1234567", name="Asha", polling_station=PollingStation("ZP School", "Pune"))
    data = v.to_dict()

    assert data["epicNo"] == "ABC1234567"
    assert data["pollingStation"] == {"name": "ZP School", "address": "Pune"}
    assert VoterRecord.from_dict(data) == v


def test_from_dict_accepts_datetime():
    ts = datetime(2024, 5, 1, tzinfo=timezone.utc)
    v = VoterRecord.from_dict({"epicNo": "ABC1234567", "name": "A", "lastUpdated": ts})
    assert v.last_updated.startswith("2024-05-01")


def test_stats_filtered():
    stats = IngestionStats(total_extracted=10, total_saved=7)
    assert stats.total_filtered == 3


def test_operator_log_capacity():
    log = OperatorLog(capacity=3)
    for i in range(5):
        log.add(f"event {i}")

    assert len(log) == 3
    assert [e.split("] ", 1)[1] for e in log.entries] == ["event 4", "event 3", "event 2"]


def test_parse_json_object():
    assert parse_json_object('{"voters": []}') == {"voters": []}
    assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_object('Here you go: {"a": 1} done') == {"a": 1}
    assert parse_json_object('[{"name": "A"}]') == {"voters": [{"name": "A"}]}
    assert parse_json_object("no json here") == {}
    assert parse_json_object("") == {}
    assert parse_json_object("42") == {}
