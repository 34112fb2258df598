"""
Image processing utility functions.

Decoding, OCR preprocessing and base64 encoding of scanned roll pages.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np


def decode_image(data: bytes, flags: int = cv2.IMREAD_COLOR) -> Optional[np.ndarray]:
    """
    Decode image bytes.

    Returns:
        Image as numpy array, or None if the bytes are not an image
    """
    if not data:
        return None
    buf = np.frombuffer(data, dtype=np.uint8)
    return cv2.imdecode(buf, flags)


def preprocess_for_ocr(image: np.ndarray) -> np.ndarray:
    """
    Grayscale and Otsu-binarise an image for Tesseract.
    """
    if image.ndim == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    else:
        gray = image
    _, bw = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return bw


def encode_base64(source: Union[bytes, Path]) -> str:
    """Base64 text of raw image bytes or of a file's contents."""
    data = Path(source).read_bytes() if isinstance(source, Path) else source
    return base64.b64encode(data).decode("ascii")


def to_data_url(image_b64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{image_b64}"
