"""
Voter data models.

Canonical voter record produced by every extraction path and stored by
the voter repository. Dictionary keys use the store's camelCase column names.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


GENDERS = ("M", "F", "O")

UNKNOWN_NAME = "Unknown"
PENDING_PREFIX = "PENDING"

EPIC_PATTERN = re.compile(r"[A-Z]{3}[0-9]{7}")


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return int(time.time() * 1000)


@dataclass
class PollingStation:
    """Polling station block; both parts are independently optional."""
    name: str = ""
    address: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "address": self.address}

    @classmethod
    def from_dict(cls, data: Any) -> "PollingStation":
        if not isinstance(data, dict):
            return cls()
        return cls(
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
        )


@dataclass
class VoterRecord:
    """
    One elector from an electoral roll.

    `epic_no` is the natural key. It holds a genuine EPIC number
    (3 letters + 7 digits) or a synthesized placeholder.
    """

    epic_no: str
    name: str = UNKNOWN_NAME
    age: int = 0
    gender: str = "M"  # M, F or O
    parent_spouse_name: str = ""

    assembly_constituency: str = ""
    parliamentary_constituency: str = ""
    district: str = ""
    state: str = ""
    part_no: str = ""
    part_name: str = ""
    serial_no: str = ""

    polling_station: PollingStation = field(default_factory=PollingStation)

    # Stamped at normalization, not at storage
    last_updated: str = field(default_factory=utc_timestamp)

    @staticmethod
    def validate_epic(epic: str) -> bool:
        """Indian EPIC format: 3 letters followed by 7 digits (e.g., ABC1234567)."""
        if not epic:
            return False
        return bool(EPIC_PATTERN.fullmatch(epic.upper()))

    @property
    def is_placeholder(self) -> bool:
        return self.epic_no.startswith(PENDING_PREFIX)

    @property
    def is_persistable(self) -> bool:
        """Placeholder keys and unnamed records are kept out of the store."""
        return not self.is_placeholder and self.name != UNKNOWN_NAME

    def to_dict(self) -> dict[str, Any]:
        """Convert to the store's row shape."""
        return {
            "epicNo": self.epic_no,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "parentSpouseName": self.parent_spouse_name,
            "assemblyConstituency": self.assembly_constituency,
            "parliamentaryConstituency": self.parliamentary_constituency,
            "district": self.district,
            "state": self.state,
            "partNo": self.part_no,
            "partName": self.part_name,
            "serialNo": self.serial_no,
            "pollingStation": self.polling_station.to_dict(),
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoterRecord":
        """
        Build a record from a store row or backup entry.

        Values are taken as-is; only missing keys fall back to defaults.
        """
        last_updated = data.get("lastUpdated")
        if isinstance(last_updated, datetime):
            last_updated = last_updated.isoformat()

        return cls(
            epic_no=str(data.get("epicNo") or ""),
            name=str(data.get("name") if data.get("name") is not None else UNKNOWN_NAME),
            age=int(data.get("age") or 0),
            gender=data.get("gender") if data.get("gender") in GENDERS else "O",
            parent_spouse_name=str(data.get("parentSpouseName") or ""),
            assembly_constituency=str(data.get("assemblyConstituency") or ""),
            parliamentary_constituency=str(data.get("parliamentaryConstituency") or ""),
            district=str(data.get("district") or ""),
            state=str(data.get("state") or ""),
            part_no=str(data.get("partNo") or ""),
            part_name=str(data.get("partName") or ""),
            serial_no=str(data.get("serialNo") or ""),
            polling_station=PollingStation.from_dict(data.get("pollingStation")),
            last_updated=str(last_updated or utc_timestamp()),
        )
