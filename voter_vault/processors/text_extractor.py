"""
Pattern-based voter extraction from raw OCR text (legacy path).

Used when no structured sheet or AI extraction is available. Every line
holding an EPIC number starts a record; the next line is taken as the
name and the one after as the parent/spouse name. Positional and
heuristic: expect noise.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Union

import numpy as np
import pytesseract
from PIL import Image

from ..config import OCRConfig
from ..exceptions import OCRError, TesseractNotFoundError
from ..logger import get_logger
from ..models import EPIC_PATTERN, PollingStation, VoterRecord, utc_timestamp
from ..utils.image_utils import decode_image, preprocess_for_ocr
from .row_normalizer import DEFAULT_AGE


logger = get_logger(__name__)

EXTRACTED_NAME = "Extracted Name"
UNKNOWN_PARENT = "Unknown Parent"

_DIGITS = re.compile(r"\d+")
_AGE = re.compile(r"Age:\s*(\d+)", re.IGNORECASE)

ProgressCallback = Callable[[float], None]


def _line_at(lines: List[str], index: int) -> str:
    return lines[index] if index < len(lines) else ""


def extract_from_text(raw_text: str) -> List[VoterRecord]:
    """
    Extract voter records from line-oriented OCR text.

    Args:
        raw_text: Raw text as returned by the OCR engine

    Returns:
        One record per line containing an EPIC number, in line order
    """
    lines = (raw_text or "").split("\n")
    voters: List[VoterRecord] = []

    for index, line in enumerate(lines):
        epic_match = EPIC_PATTERN.search(line)
        if not epic_match:
            continue

        serial_match = _DIGITS.search(line)
        name_line = _line_at(lines, index + 1)
        parent_line = _line_at(lines, index + 2)

        age_match = _AGE.search(line)
        age = int(age_match.group(1)) if age_match else 0

        voters.append(VoterRecord(
            epic_no=epic_match.group(0),
            name=_DIGITS.sub("", name_line).strip() or EXTRACTED_NAME,
            age=age or DEFAULT_AGE,
            gender="F" if "female" in line.lower() else "M",
            parent_spouse_name=parent_line.strip() or UNKNOWN_PARENT,
            serial_no=serial_match.group(0) if serial_match else "0",
            polling_station=PollingStation(),
            last_updated=utc_timestamp(),
        ))

    logger.debug(f"Pattern extraction found {len(voters)} records in {len(lines)} lines")
    return voters


def run_ocr(
    image: Union[bytes, np.ndarray, Image.Image],
    config: Optional[OCRConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """
    Recognize text in an image with Tesseract.

    Args:
        image: Encoded image bytes, an OpenCV array or a PIL image
        config: OCR configuration (languages, tesseract binary)
        on_progress: Receives fractional progress, 0.0 at start and 1.0 when done

    Returns:
        Raw recognized text
    """
    config = config or OCRConfig()

    if config.tesseract_path:
        pytesseract.pytesseract.tesseract_cmd = config.tesseract_path

    if on_progress:
        on_progress(0.0)

    if isinstance(image, bytes):
        decoded = decode_image(image)
        if decoded is None:
            raise OCRError("Image bytes could not be decoded", languages=config.languages)
        image = decoded
    if isinstance(image, np.ndarray):
        image = Image.fromarray(preprocess_for_ocr(image))

    try:
        text = pytesseract.image_to_string(image, lang=config.languages)
    except pytesseract.TesseractNotFoundError as e:
        raise TesseractNotFoundError(config.tesseract_path or None) from e
    except pytesseract.TesseractError as e:
        raise OCRError(f"Tesseract failed: {e}", languages=config.languages) from e

    if on_progress:
        on_progress(1.0)

    return text


def extract_from_image(
    image: Union[bytes, np.ndarray, Image.Image],
    config: Optional[OCRConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[VoterRecord]:
    """OCR an image and run pattern extraction over the final text."""
    return extract_from_text(run_ocr(image, config=config, on_progress=on_progress))
