"""
Ingestion run tracking models.

Counters, per-file status and the bounded operator log of one batch run.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, List, Optional

from .voter import VoterRecord


FILE_PROCESSING = "processing"
FILE_COMPLETED = "completed"
FILE_ERROR = "error"


@dataclass
class IngestionStats:
    """Running counters: records extracted (pre-filter) vs persisted."""
    total_extracted: int = 0
    total_saved: int = 0

    @property
    def total_filtered(self) -> int:
        return max(self.total_extracted - self.total_saved, 0)

    def to_dict(self) -> dict[str, int]:
        return {
            "totalExtracted": self.total_extracted,
            "totalSaved": self.total_saved,
        }


@dataclass
class ProcessedFile:
    """Status of one source file in a batch."""
    name: str
    count: int = 0
    status: str = FILE_PROCESSING
    error: str = ""
    processing_time_sec: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "count": self.count,
            "status": self.status,
            "error": self.error,
            "processing_time_sec": round(self.processing_time_sec, 3),
        }


class OperatorLog:
    """
    Bounded, timestamped, newest-first event log for the operator.

    Every entry is mirrored to the given logger at the requested level.
    """

    def __init__(self, capacity: int = 8, logger: Optional[logging.Logger] = None):
        self.capacity = max(capacity, 1)
        self._entries: Deque[str] = deque(maxlen=self.capacity)
        self._logger = logger

    def add(self, message: str, level: int = logging.INFO) -> str:
        entry = f"[{datetime.now():%H:%M:%S}] {message}"
        self._entries.appendleft(entry)
        if self._logger:
            self._logger.log(level, message)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class IngestionReport:
    """Everything a caller needs to render progress after a batch."""
    stats: IngestionStats = field(default_factory=IngestionStats)
    files: List[ProcessedFile] = field(default_factory=list)
    preview: List[VoterRecord] = field(default_factory=list)
    log: List[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "files": [f.to_dict() for f in self.files],
            "preview": [v.to_dict() for v in self.preview],
            "log": list(self.log),
        }
