"""
Header alias resolution for semi-structured spreadsheet rows.

Source sheets mix English and Marathi headers with inconsistent spacing
and casing, so a logical field is looked up through an ordered alias list:
exact header first, then case-insensitive substring containment
("Voter ID Card No." matches alias "ID CARD").
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def resolve(row: Mapping[str, Any], aliases: Sequence[str]) -> str:
    """
    Resolve one logical field from a row.

    Args:
        row: Column header -> cell value
        aliases: Candidate headers in priority order

    Returns:
        Trimmed cell text, or "" when nothing matches
    """
    # Exact pass: alias order is priority, first non-null cell wins
    for alias in aliases:
        if alias in row and row[alias] is not None:
            return _cell_text(row[alias])

    # Fuzzy pass: row order first, then alias order
    lowered = [alias.lower() for alias in aliases]
    for actual_key in row.keys():
        clean_key = str(actual_key).strip().lower()
        for alias in lowered:
            if alias in clean_key:
                return _cell_text(row[actual_key])

    return ""
