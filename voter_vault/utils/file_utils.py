"""
File and path utility functions.

Source-kind detection and directory iteration for ingestion inputs.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Iterator, Union

SPREADSHEET_EXTENSIONS = {".xlsx", ".xls", ".xlsm", ".csv"}
DOCUMENT_EXTENSIONS = {".pdf"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp", ".webp"}

SOURCE_SPREADSHEET = "spreadsheet"
SOURCE_DOCUMENT = "document"
SOURCE_IMAGE = "image"
SOURCE_UNKNOWN = "unknown"


def detect_source_kind(file_name: str, content_type: str = "") -> str:
    """
    Classify a source file by MIME type, then by extension.

    Returns:
        One of SOURCE_SPREADSHEET, SOURCE_DOCUMENT, SOURCE_IMAGE, SOURCE_UNKNOWN
    """
    if content_type == "application/pdf":
        return SOURCE_DOCUMENT
    if content_type.startswith("image/"):
        return SOURCE_IMAGE

    ext = Path(file_name).suffix.lower()
    if ext in DOCUMENT_EXTENSIONS:
        return SOURCE_DOCUMENT
    if ext in SPREADSHEET_EXTENSIONS:
        return SOURCE_SPREADSHEET
    if ext in IMAGE_EXTENSIONS:
        return SOURCE_IMAGE
    return SOURCE_UNKNOWN


def guess_mime_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    if mime:
        return mime
    if Path(file_name).suffix.lower() == ".webp":
        return "image/webp"
    return "application/octet-stream"


def iter_source_files(path: Union[str, Path]) -> Iterator[Path]:
    """
    Iterate over supported source files.

    A file path yields itself; a directory yields its supported files
    sorted by name (non-recursive).
    """
    path = Path(path)
    if path.is_file():
        yield path
        return
    if not path.is_dir():
        return

    for p in sorted(path.iterdir(), key=lambda p: p.name.lower()):
        if p.is_file() and detect_source_kind(p.name) != SOURCE_UNKNOWN:
            yield p
