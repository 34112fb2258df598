"""
Spreadsheet row normalizer.

Maps raw spreadsheet rows (header -> cell) to canonical voter records.
One record per input row, in input order; nothing is dropped here.
Rows that look invalid still get fallback values and are filtered
later at the persistence boundary.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence

from ..models import (
    PENDING_PREFIX,
    UNKNOWN_NAME,
    PollingStation,
    VoterRecord,
    epoch_millis,
    utc_timestamp,
)
from ..utils.field_resolver import resolve


DEFAULT_AGE = 25

# Marathi header first where the roll exports use one, then English variants
EPIC_ALIASES = ["ओळखपत्र", "EPIC", "ID CARD", "VOTER ID", "CARD NO"]
NAME_ALIASES = ["नाव", "NAME", "VOTER NAME", "FULL NAME"]
AGE_ALIASES = ["वय", "AGE", "VOTER AGE"]
GENDER_ALIASES = ["लिंग", "GENDER", "SEX"]
PARENT_ALIASES = ["नातेवाईक", "FATHER", "SPOUSE", "GUARDIAN", "PARENT"]
SERIAL_ALIASES = ["अनुक्रमांक", "SR NO", "SERIAL", "PART SR"]
PART_ALIASES = ["बूथ नं.", "भाग/अनुभ", "PART", "BOOTH"]
STATION_NAME_ALIASES = ["केंद्र", "STATION", "POLLING STATION"]
STATION_ADDRESS_ALIASES = ["पत्ता", "ADDRESS", "STATION ADDRESS"]

FEMININE_TOKEN = "स्त्री"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_age(text: str, default: int = DEFAULT_AGE) -> int:
    """
    Leading integer of `text` ("34", "34.0", "34 yrs" -> 34).

    Missing, unparseable, zero or negative values give `default`.
    """
    match = _LEADING_INT.match(text or "")
    if not match:
        return default
    age = int(match.group(1))
    return age if age > 0 else default


def parse_gender(text: str) -> str:
    """F for feminine tokens (Marathi or English), M for everything else."""
    raw = (text or "").strip().lower()
    if FEMININE_TOKEN in raw or "female" in raw or raw == "f":
        return "F"
    return "M"


def pending_key(position: int, timestamp_ms: Optional[int] = None) -> str:
    """Placeholder key for a row whose EPIC number is missing."""
    if timestamp_ms is None:
        timestamp_ms = epoch_millis()
    return f"{PENDING_PREFIX}-{position}-{timestamp_ms}"


def normalize_row(row: Mapping[str, Any], position: int) -> VoterRecord:
    """
    Normalize one row.

    Args:
        row: Column header -> cell value
        position: Zero-based position of the row across the whole ingestion run
    """
    epic = resolve(row, EPIC_ALIASES)
    name = resolve(row, NAME_ALIASES)
    age = parse_age(resolve(row, AGE_ALIASES))
    gender = parse_gender(resolve(row, GENDER_ALIASES))
    parent = resolve(row, PARENT_ALIASES)
    serial = resolve(row, SERIAL_ALIASES) or str(position + 1)
    part = resolve(row, PART_ALIASES)

    return VoterRecord(
        epic_no=epic or pending_key(position),
        name=name or UNKNOWN_NAME,
        age=age,
        gender=gender,
        parent_spouse_name=parent or UNKNOWN_NAME,
        # Constituency fields only come from AI document metadata
        assembly_constituency="",
        parliamentary_constituency="",
        district="",
        state="",
        # Sheets rarely tell part number and part name apart
        part_no=part,
        part_name=part,
        serial_no=serial,
        polling_station=PollingStation(
            name=resolve(row, STATION_NAME_ALIASES),
            address=resolve(row, STATION_ADDRESS_ALIASES),
        ),
        last_updated=utc_timestamp(),
    )


def normalize_rows(rows: Sequence[Mapping[str, Any]], offset: int = 0) -> List[VoterRecord]:
    """
    Normalize a sheet of rows.

    Args:
        rows: Sheet rows in order
        offset: Number of records already extracted earlier in the run;
            keeps fallback serials and placeholder keys unique across sheets

    Returns:
        One record per row, order preserved
    """
    return [normalize_row(row or {}, offset + index) for index, row in enumerate(rows)]
