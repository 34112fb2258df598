"""
Data models for the voter ingestion pipeline.

These models represent the core data structures and serialize to the
row shape used by the voter store and backup files.
"""

from .voter import (
    VoterRecord,
    PollingStation,
    GENDERS,
    UNKNOWN_NAME,
    PENDING_PREFIX,
    EPIC_PATTERN,
    utc_timestamp,
    epoch_millis,
)
from .extraction import ExtractionResponse
from .ingestion import (
    IngestionStats,
    IngestionReport,
    ProcessedFile,
    OperatorLog,
    FILE_PROCESSING,
    FILE_COMPLETED,
    FILE_ERROR,
)

__all__ = [
    # Voter models
    "VoterRecord",
    "PollingStation",
    "GENDERS",
    "UNKNOWN_NAME",
    "PENDING_PREFIX",
    "EPIC_PATTERN",
    "utc_timestamp",
    "epoch_millis",

    # Extraction
    "ExtractionResponse",

    # Ingestion tracking
    "IngestionStats",
    "IngestionReport",
    "ProcessedFile",
    "OperatorLog",
    "FILE_PROCESSING",
    "FILE_COMPLETED",
    "FILE_ERROR",
]
