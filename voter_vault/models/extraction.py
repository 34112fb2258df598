"""
Extraction result models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .voter import VoterRecord


@dataclass
class ExtractionResponse:
    """
    Normalized output of one generative extraction call.

    `meta` is the document-level block exactly as the model returned it,
    kept for callers that display document-wide constituency details.
    """

    voters: List[VoterRecord] = field(default_factory=list)
    meta: Optional[Any] = None

    def __len__(self) -> int:
        return len(self.voters)
