"""
Source readers.

- Spreadsheets (xlsx/xls/csv) via pandas: sheet name -> ordered row dicts
- PDF documents via PyMuPDF: page count and per-page flattened text
"""

from __future__ import annotations

import io
import math
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List

import fitz  # PyMuPDF
import pandas as pd

from ..exceptions import SourceReadError


Row = Dict[str, Any]

BLANK_HEADER = "__EMPTY"

# pandas' placeholder for a blank header cell; "Unnamed" would match the NAME alias
_UNNAMED = re.compile(r"^Unnamed: \d+$")

EXCEL_ENGINES = {".xls": "xlrd"}


def clean_cell(value: Any) -> Any:
    """
    Normalize a cell read by pandas.

    NaN/NaT -> None, integral floats -> int (so serials stay "12", not "12.0").
    """
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def header_names(columns: Iterable[Any]) -> List[str]:
    """
    Column headers as row keys.

    Blank headers become __EMPTY, __EMPTY_1, ... so they can never satisfy
    a field alias.
    """
    names: List[str] = []
    blanks = 0
    for column in columns:
        name = str(column)
        if _UNNAMED.match(name):
            name = BLANK_HEADER if blanks == 0 else f"{BLANK_HEADER}_{blanks}"
            blanks += 1
        names.append(name)
    return names


def _frame_to_rows(frame: pd.DataFrame) -> List[Row]:
    frame = frame.dropna(how="all")
    frame.columns = header_names(frame.columns)
    rows: List[Row] = []
    for record in frame.to_dict(orient="records"):
        rows.append({str(k): clean_cell(v) for k, v in record.items()})
    return rows


def read_spreadsheet(data: bytes, file_name: str) -> Dict[str, List[Row]]:
    """
    Read every sheet of a spreadsheet.

    Args:
        data: File contents
        file_name: Used to pick the parser; CSV files become one sheet named after the stem

    Returns:
        Sheet name -> rows (header -> cell), in workbook order
    """
    ext = Path(file_name).suffix.lower()
    try:
        if ext == ".csv":
            frame = pd.read_csv(io.BytesIO(data), dtype=object)
            return {Path(file_name).stem: _frame_to_rows(frame)}

        sheets = pd.read_excel(
            io.BytesIO(data),
            sheet_name=None,
            dtype=object,
            engine=EXCEL_ENGINES.get(ext, "openpyxl"),
        )
    except Exception as e:
        raise SourceReadError(f"Failed to read spreadsheet: {e}", file_name=file_name) from e

    return {str(name): _frame_to_rows(frame) for name, frame in sheets.items()}


class DocumentPages:
    """
    Text access to the pages of a PDF.

    Usage:
        with DocumentPages.open(data, "roll.pdf") as doc:
            for i in range(doc.page_count):
                text = doc.page_text(i)
    """

    def __init__(self, doc: "fitz.Document", file_name: str = ""):
        self._doc = doc
        self.file_name = file_name

    @classmethod
    def open(cls, data: bytes, file_name: str = "") -> "DocumentPages":
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise SourceReadError(f"Failed to open PDF: {e}", file_name=file_name) from e
        return cls(doc, file_name)

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def page_text(self, index: int) -> str:
        """Words of one page (0-based) joined by single spaces."""
        try:
            page = self._doc.load_page(index)
            words = page.get_text("words") or []
        except Exception as e:
            raise SourceReadError(
                f"Failed to read page text: {e}", file_name=self.file_name, page_number=index + 1
            ) from e
        return " ".join(str(w[4]) for w in words)

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "DocumentPages":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
