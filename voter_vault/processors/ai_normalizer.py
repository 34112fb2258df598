"""
Normalizer for generative extraction responses.

Repairs the model's `{voters: [...], meta: {...}}` JSON into canonical
voter records. Every field access has a default, so a partial or
malformed response still yields structurally complete records.
"""

from __future__ import annotations

import math
import secrets
import string
from typing import Any, List, Mapping, Optional

from ..models import (
    UNKNOWN_NAME,
    ExtractionResponse,
    PollingStation,
    VoterRecord,
    utc_timestamp,
)


EXTRACTED_KEY_PREFIX = "EXT"
MASCULINE_TOKEN = "प"

_KEY_ALPHABET = string.ascii_uppercase + string.digits


def synthesized_key(length: int = 9) -> str:
    """Key for an AI record that came back without an EPIC number."""
    token = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(length))
    return f"{EXTRACTED_KEY_PREFIX}-{token}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first(*values: Any) -> str:
    """First non-empty value as text, or ""."""
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def _age(value: Any) -> int:
    """Numeric age as given by the model, 0 when absent or not a number."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        number = value if isinstance(value, float) else float(str(value).strip())
    except (TypeError, ValueError):
        return 0
    # NaN and Infinity (json.loads accepts both) have no integer age
    return int(number) if math.isfinite(number) else 0


def _gender(value: Any) -> str:
    token = _text(value)
    if token in (MASCULINE_TOKEN, "M"):
        return "M"
    if token == "F":
        return "F"
    return "M"


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def normalize_voter(entry: Any, meta: Optional[Mapping[str, Any]] = None) -> VoterRecord:
    """
    Normalize one voter entry.

    Constituency and part fields fall back to document-level `meta`;
    district and state do not.
    """
    v = _mapping(entry)
    meta = _mapping(meta)
    station = _mapping(v.get("pollingStation"))

    return VoterRecord(
        epic_no=_text(v.get("epicNo")) or synthesized_key(),
        name=_text(v.get("name")) or UNKNOWN_NAME,
        age=_age(v.get("age")),
        gender=_gender(v.get("gender")),
        parent_spouse_name=_text(v.get("parentSpouseName")) or UNKNOWN_NAME,
        assembly_constituency=_first(v.get("assemblyConstituency"), meta.get("assemblyConstituency")),
        parliamentary_constituency=_first(
            v.get("parliamentaryConstituency"), meta.get("parliamentaryConstituency")
        ),
        district=_text(v.get("district")),
        state=_text(v.get("state")),
        part_no=_first(v.get("partNo"), meta.get("partNo")),
        part_name=_first(v.get("partName"), meta.get("partName")),
        serial_no=_text(v.get("serialNo")),
        polling_station=PollingStation(
            name=_text(station.get("name")),
            address=_text(station.get("address")),
        ),
        last_updated=utc_timestamp(),
    )


def normalize_response(raw: Any) -> ExtractionResponse:
    """
    Normalize a full extraction response.

    Args:
        raw: Parsed JSON object from the model

    Returns:
        Records in the order the model listed them, plus the untouched meta block
    """
    data = _mapping(raw)
    meta = data.get("meta")
    entries = data.get("voters")
    if not isinstance(entries, list):
        entries = []

    voters: List[VoterRecord] = [normalize_voter(entry, _mapping(meta)) for entry in entries]
    return ExtractionResponse(voters=voters, meta=meta)
