"""
Voter extraction processors.

Contains every path from a source unit to canonical voter records:
- row_normalizer: spreadsheet rows with bilingual, inconsistent headers
- text_extractor: pattern-based extraction from raw OCR text (legacy)
- ai_normalizer / ai_extractor: generative extraction from page text or images
- readers: spreadsheet and PDF page readers
- orchestrator: sequential multi-file ingestion with per-unit persistence
"""

from .row_normalizer import normalize_row, normalize_rows
from .text_extractor import extract_from_text, extract_from_image, run_ocr
from .ai_normalizer import normalize_response, normalize_voter
from .ai_extractor import VoterExtractor, is_authorization_error, is_quota_error
from .readers import DocumentPages, read_spreadsheet
from .orchestrator import IngestionOrchestrator, SourceFile, filter_persistable

__all__ = [
    "normalize_row",
    "normalize_rows",
    "extract_from_text",
    "extract_from_image",
    "run_ocr",
    "normalize_response",
    "normalize_voter",
    "VoterExtractor",
    "is_authorization_error",
    "is_quota_error",
    "DocumentPages",
    "read_spreadsheet",
    "IngestionOrchestrator",
    "SourceFile",
    "filter_persistable",
]
