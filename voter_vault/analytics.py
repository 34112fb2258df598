"""
Database insights.

Summary statistics over stored voters plus a short AI-written narrative.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from .config import AIConfig
from .logger import get_logger
from .models import VoterRecord
from .processors.ai_extractor import VoterExtractor, is_authorization_error

logger = get_logger(__name__)

INSIGHTS_UNAVAILABLE = "AI Analysis unavailable at the moment."

INSIGHTS_PROMPT = (
    "Analyze this voter database summary and provide a brief strategic "
    "3-bullet point executive insight. Focus on: gender balance, age "
    "demographics and regional coverage."
)


def summarize(records: Sequence[VoterRecord]) -> Optional[Dict[str, Any]]:
    """
    Aggregate counts for a set of records.

    Returns:
        None for an empty set, else total, gender split, mean age and the
        distinct assembly constituencies in first-seen order
    """
    if not records:
        return None

    constituencies: List[str] = []
    for r in records:
        if r.assembly_constituency and r.assembly_constituency not in constituencies:
            constituencies.append(r.assembly_constituency)

    return {
        "total": len(records),
        "genderSplit": {
            "M": sum(1 for r in records if r.gender == "M"),
            "F": sum(1 for r in records if r.gender == "F"),
        },
        "avgAge": sum(r.age for r in records) / len(records),
        "constituencies": constituencies,
    }


def generate_insights(
    records: Sequence[VoterRecord],
    ai_config: AIConfig,
    extractor: Optional[VoterExtractor] = None,
) -> Optional[Dict[str, Any]]:
    """
    Summary plus AI narrative.

    A rejected credential propagates; any other AI failure yields the
    summary with a fixed "unavailable" text.
    """
    stats = summarize(records)
    if stats is None:
        return None

    extractor = extractor or VoterExtractor(ai_config)
    try:
        text = extractor.complete(
            INSIGHTS_PROMPT,
            f"Data: {json.dumps(stats, ensure_ascii=False)}",
            json_output=False,
        )
    except Exception as e:
        if is_authorization_error(e):
            raise
        logger.warning(f"Insights unavailable: {e}")
        text = INSIGHTS_UNAVAILABLE

    return {"stats": stats, "aiInsights": text}
