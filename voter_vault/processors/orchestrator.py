"""
Batch ingestion orchestrator.

Drives source files through the extraction paths and pushes every
completed unit (sheet, page or image) to the voter store immediately, so a
crash mid-file never loses what was already extracted.

Processing is strictly sequential: one file at a time, one unit at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from ..config import Config, get_config
from ..exceptions import ConfigurationError, QuotaExceededError, UnsupportedFileError, VoterVaultError
from ..logger import get_logger
from ..models import (
    FILE_COMPLETED,
    FILE_ERROR,
    ExtractionResponse,
    IngestionReport,
    IngestionStats,
    OperatorLog,
    ProcessedFile,
    VoterRecord,
)
from ..persistence.repository import VoterRepository
from ..utils.file_utils import (
    SOURCE_DOCUMENT,
    SOURCE_IMAGE,
    SOURCE_SPREADSHEET,
    detect_source_kind,
    guess_mime_type,
)
from ..utils.image_utils import encode_base64
from ..utils.timing import timed_operation
from .ai_extractor import VoterExtractor, is_authorization_error
from .readers import DocumentPages, read_spreadsheet
from .row_normalizer import normalize_rows
from .text_extractor import extract_from_image


@dataclass
class SourceFile:
    """One uploaded source file."""
    name: str
    data: bytes
    content_type: str = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes(), content_type=guess_mime_type(path.name))

    @property
    def kind(self) -> str:
        return detect_source_kind(self.name, self.content_type)


def filter_persistable(records: Iterable[VoterRecord]) -> List[VoterRecord]:
    """Drop placeholder keys and records named "Unknown"."""
    return [r for r in records if r.is_persistable]


class IngestionOrchestrator:
    """
    Ingest spreadsheets, PDFs and page images into the voter store.

    Per file:
    - Spreadsheet: every sheet normalized and pushed before the next sheet
    - PDF: first `max_document_pages` pages, each page's text extracted by AI
      and pushed on its own
    - Image: one AI image extraction, or legacy OCR when AI is unavailable

    A failed page or image is logged and skipped. An unreadable file, or a
    document with no AI extractor configured, is logged and the batch moves
    to the next file. A rejected AI credential aborts the batch and
    propagates to the caller.
    """

    name = "IngestionOrchestrator"

    def __init__(
        self,
        repository: VoterRepository,
        extractor: Optional[VoterExtractor] = None,
        config: Optional[Config] = None,
        spreadsheet_reader: Callable[[bytes, str], Dict[str, List[dict]]] = read_spreadsheet,
        document_opener: Callable[[bytes, str], DocumentPages] = DocumentPages.open,
        image_ocr: Callable[..., List[VoterRecord]] = extract_from_image,
        on_progress: Optional[Callable[[IngestionStats], None]] = None,
    ):
        self.config = config or get_config()
        self.repository = repository
        self.extractor = extractor
        self.spreadsheet_reader = spreadsheet_reader
        self.document_opener = document_opener
        self.image_ocr = image_ocr
        self.on_progress = on_progress

        self.logger = get_logger(self.name)
        self.log = OperatorLog(self.config.ingest.log_capacity, logger=self.logger)
        self.stats = IngestionStats()
        self.files: List[ProcessedFile] = []
        self.preview: List[VoterRecord] = []

    def reset(self) -> None:
        """Start a fresh run: counters, file list, log and preview cleared."""
        self.stats = IngestionStats()
        self.files = []
        self.preview = []
        self.log.clear()

    def report(self) -> IngestionReport:
        return IngestionReport(
            stats=IngestionStats(self.stats.total_extracted, self.stats.total_saved),
            files=list(self.files),
            preview=list(self.preview),
            log=self.log.entries,
        )

    def ingest(self, files: Iterable[SourceFile]) -> IngestionReport:
        """
        Ingest files in the given order.

        Returns:
            Report with counters, per-file status, preview and operator log
        """
        self.reset()

        for source in files:
            processed = ProcessedFile(name=source.name)
            self.files.append(processed)
            self.log.add(f"FILE: Starting ingestion for {source.name}")

            try:
                with timed_operation(f"Ingest {source.name}", self.logger) as timing:
                    file_voters = self._ingest_file(source)
            except VoterVaultError as e:
                processed.status, processed.error = FILE_ERROR, e.message
                processed.processing_time_sec = timing.duration_sec
                self.log.add(f"FILE ERROR: {source.name}: {e.message}", logging.ERROR)
                continue
            except Exception as e:
                processed.status, processed.error = FILE_ERROR, str(e)
                raise

            processed.count = len(file_voters)
            processed.status = FILE_COMPLETED
            processed.processing_time_sec = timing.duration_sec
            self.preview = file_voters[: self.config.ingest.preview_size]
            self.log.add(f"FILE: Completed {source.name}.")

        self.log.add("INGESTION: All files processed. Database is synced.")
        return self.report()

    def _ingest_file(self, source: SourceFile) -> List[VoterRecord]:
        kind = source.kind
        if kind == SOURCE_SPREADSHEET:
            return self._ingest_spreadsheet(source)
        if kind == SOURCE_DOCUMENT:
            return self._ingest_document(source)
        if kind == SOURCE_IMAGE:
            return self._ingest_image(source)
        raise UnsupportedFileError(source.name)

    def _ingest_spreadsheet(self, source: SourceFile) -> List[VoterRecord]:
        sheets = self.spreadsheet_reader(source.data, source.name)
        file_voters: List[VoterRecord] = []

        for sheet_name, rows in sheets.items():
            if not rows:
                continue
            # Offset keeps fallback serials unique across sheets and files
            mapped = normalize_rows(rows, offset=self.stats.total_extracted)
            self.log.add(f"SHEET: {sheet_name} mapped {len(mapped)} rows.")
            self._record_unit(mapped)
            file_voters.extend(mapped)

        return file_voters

    def _ingest_document(self, source: SourceFile) -> List[VoterRecord]:
        file_voters: List[VoterRecord] = []
        self.log.add(f"PDF: Loading engine for {source.name}...")

        with self.document_opener(source.data, source.name) as doc:
            pages = min(doc.page_count, self.config.ingest.max_document_pages)
            self.log.add(f"PDF: Analyzing {pages} pages with AI...")

            for index in range(pages):
                page_no = index + 1
                self.log.add(f"AI: Extracting from Page {page_no}...")
                voters = self._extract_unit(
                    f"Page {page_no}",
                    lambda: self._require_extractor().extract_text(doc.page_text(index)),
                )
                if voters:
                    self.log.add(f"AI: Page {page_no} found {len(voters)} records.")
                    self._record_unit(voters)
                    file_voters.extend(voters)

        return file_voters

    def _ingest_image(self, source: SourceFile) -> List[VoterRecord]:
        if self._use_ocr():
            self.log.add(f"OCR: Recognizing {source.name}...")
            voters = self.image_ocr(source.data, config=self.config.ocr)
            self.log.add(f"OCR: {source.name} found {len(voters)} records.")
        else:
            mime_type = source.content_type or guess_mime_type(source.name)
            image_b64 = encode_base64(source.data)
            self.log.add(f"AI: Extracting from image {source.name}...")
            voters = self._extract_unit(
                source.name, lambda: self._require_extractor().extract_image(image_b64, mime_type)
            )

        if voters:
            self._record_unit(voters)
        return voters

    def _use_ocr(self) -> bool:
        if self.config.ingest.use_legacy_ocr or self.extractor is None:
            return True
        return not self.extractor.ai_config.has_credentials

    def _require_extractor(self) -> VoterExtractor:
        if self.extractor is None:
            raise ConfigurationError("No AI extractor configured", config_key="AI_API_KEY")
        return self.extractor

    def _extract_unit(self, label: str, call: Callable[[], ExtractionResponse]) -> List[VoterRecord]:
        """Run one AI extraction; failures other than credential problems only skip this unit."""
        try:
            return list(call().voters)
        except ConfigurationError:
            raise
        except QuotaExceededError as e:
            self.log.add(f"AI WARNING: {label} failed: {e}", logging.WARNING)
            return []
        except Exception as e:
            if is_authorization_error(e):
                self.log.add(f"AI ERROR: credential rejected on {label}: {e}", logging.ERROR)
                raise
            self.log.add(f"AI WARNING: {label} failed: {e}", logging.WARNING)
            return []

    def _record_unit(self, voters: List[VoterRecord]) -> None:
        self.stats.total_extracted += len(voters)
        self.save_batch(voters)
        if self.on_progress:
            self.on_progress(self.stats)

    def save_batch(self, voters: Iterable[VoterRecord]) -> int:
        """
        Push the persistable part of a batch to the store.

        Returns:
            Number of records written (0 when nothing qualifies or the write fails)
        """
        valid = filter_persistable(voters)
        if not valid:
            return 0

        self.log.add(f"VAULT: Initiating upsert for {len(valid)} records...")
        try:
            written = self.repository.upsert(valid)
        except VoterVaultError as e:
            operation = e.details.get("operation", "upsert")
            self.log.add(f"VAULT ERROR: {operation}: {e.message}", logging.ERROR)
            return 0

        self.stats.total_saved += written
        self.log.add("VAULT: Successfully committed.")
        return written
