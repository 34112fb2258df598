import io

import fitz
import pandas as pd
import pytest

from voter_vault.exceptions import SourceReadError
from voter_vault.processors.readers import (
    DocumentPages,
    clean_cell,
    header_names,
    read_spreadsheet,
)
from voter_vault.processors.row_normalizer import normalize_rows


def make_workbook(sheets):
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()


def make_pdf(pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def test_workbook_sheets_in_order():
    data = make_workbook({
        "Part 1": [{"EPIC": "ABC1234567", "NAME": "Asha", "AGE": 34}],
        "Part 2": [{"EPIC": "XYZ7654321", "NAME": "Ravi", "AGE": 41}],
    })

    sheets = read_spreadsheet(data, "roll.xlsx")

    assert list(sheets) == ["Part 1", "Part 2"]
    assert sheets["Part 1"] == [{"EPIC": "ABC1234567", "NAME": "Asha", "AGE": 34}]


def test_missing_cells_become_none():
    data = make_workbook({"S": [{"EPIC": "ABC1234567", "NAME": "Asha"}, {"NAME": "Ravi"}]})

    rows = read_spreadsheet(data, "roll.xlsx")["S"]

    assert rows[1]["EPIC"] is None
    assert rows[1]["NAME"] == "Ravi"


def test_csv_is_one_sheet():
    data = "नाव,वय\nआशा,34\nरवी,41\n".encode("utf-8")

    sheets = read_spreadsheet(data, "ward-12.csv")

    assert list(sheets) == ["ward-12"]
    assert sheets["ward-12"] == [{"नाव": "आशा", "वय": "34"}, {"नाव": "रवी", "वय": "41"}]


def test_unreadable_workbook():
    with pytest.raises(SourceReadError):
        read_spreadsheet(b"not a workbook", "roll.xlsx")


def test_blank_header_never_resolves_as_name():
    # Index column written by to_excel comes back with a blank header
    buf = io.BytesIO()
    frame = pd.DataFrame([{"EPIC": "ABC1234567", "Voter Name": "Asha Patil", "Age": 34}])
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Part 1", index=True)

    rows = read_spreadsheet(buf.getvalue(), "roll.xlsx")["Part 1"]

    assert list(rows[0]) == ["__EMPTY", "EPIC", "Voter Name", "Age"]
    record = normalize_rows(rows)[0]
    assert record.name == "Asha Patil"
    assert record.epic_no == "ABC1234567"
    assert record.age == 34


def test_header_names_numbers_blank_columns():
    assert header_names(["Unnamed: 0", "NAME", "Unnamed: 3"]) == ["__EMPTY", "NAME", "__EMPTY_1"]
    assert header_names(["Unnamed column"]) == ["Unnamed column"]


@pytest.mark.parametrize("file_name, engine", [("roll.xls", "xlrd"), ("roll.xlsx", "openpyxl")])
def test_excel_engine_follows_extension(monkeypatch, file_name, engine):
    seen = {}

    def fake_read_excel(buffer, **kwargs):
        seen.update(kwargs)
        return {"Sheet1": pd.DataFrame([{"NAME": "Asha"}])}

    monkeypatch.setattr(pd, "read_excel", fake_read_excel)

    assert read_spreadsheet(b"", file_name) == {"Sheet1": [{"NAME": "Asha"}]}
    assert seen["engine"] == engine


def test_clean_cell():
    assert clean_cell(float("nan")) is None
    assert clean_cell(12.0) == 12
    assert clean_cell(12.5) == 12.5
    assert clean_cell("x") == "x"
    assert clean_cell(None) is None


def test_document_pages():
    data = make_pdf(["ABC1234567 Asha Patil", "XYZ7654321 Ravi Kumar"])

    with DocumentPages.open(data, "roll.pdf") as doc:
        assert doc.page_count == 2
        assert doc.page_text(0) == "ABC1234567 Asha Patil"
        assert doc.page_text(1) == "XYZ7654321 Ravi Kumar"


def test_unreadable_pdf():
    with pytest.raises(SourceReadError):
        DocumentPages.open(b"not a pdf", "roll.pdf")
