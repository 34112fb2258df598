"""
Wall-clock timing for ingestion steps.
"""

from __future__ import annotations

import logging
import time
from typing import Optional


def format_duration(seconds: float) -> str:
    """1.2ms / 3.45s / 2m 5.0s"""
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    return f"{int(seconds // 60)}m {seconds % 60:.1f}s"


class timed_operation:
    """
    Measure a block and log how long it took.

    Usage:
        with timed_operation("Ingest roll.pdf", logger) as timing:
            ...
        timing.duration_sec

    A failing block is logged with its error and the exception propagates.
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None, log_level: int = logging.DEBUG):
        self.name = name
        self.logger = logger
        self.log_level = log_level
        self.duration_sec = 0.0
        self.error: Optional[str] = None
        self._start = 0.0

    @property
    def success(self) -> bool:
        return self.error is None

    def __enter__(self) -> "timed_operation":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.duration_sec = time.perf_counter() - self._start
        if exc is not None:
            self.error = str(exc)
        if self.logger:
            suffix = f" (failed: {self.error})" if self.error is not None else ""
            self.logger.log(self.log_level, f"{self.name}: {format_duration(self.duration_sec)}{suffix}")
        return False

    def __str__(self) -> str:
        return f"{self.name}: {format_duration(self.duration_sec)}"
