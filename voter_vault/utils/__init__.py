"""
Utility functions for the voter ingestion pipeline.
"""

from .field_resolver import resolve

from .ai_parser import parse_json_object

from .file_utils import (
    detect_source_kind,
    guess_mime_type,
    iter_source_files,
    SOURCE_SPREADSHEET,
    SOURCE_DOCUMENT,
    SOURCE_IMAGE,
    SOURCE_UNKNOWN,
)

from .timing import (
    timed_operation,
    format_duration,
)

__all__ = [
    # Header alias resolution
    "resolve",

    # AI response parsing
    "parse_json_object",

    # File utilities
    "detect_source_kind",
    "guess_mime_type",
    "iter_source_files",
    "SOURCE_SPREADSHEET",
    "SOURCE_DOCUMENT",
    "SOURCE_IMAGE",
    "SOURCE_UNKNOWN",

    # Timing utilities
    "timed_operation",
    "format_duration",
]
