from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from core.errors import SpreadsheetError
from services import workbook_io


def _sheet_bytes(rows, title="Sheet1", extra_sheet=None):
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    if extra_sheet:
        workbook.create_sheet(extra_sheet)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_read_table_stringifies_and_keeps_rows_ragged() -> None:
    workbook = workbook_io.load_workbook_bytes(
        _sheet_bytes([["id", "url", None], [1, "x", None], [2.5, None, None]])
    )
    table = workbook_io.read_table(workbook_io.select_sheet(workbook, "Sheet1"))
    assert table == [["id", "url"], ["1", "x"], ["2.5"]]


def test_select_sheet_prefers_named_sheet_then_active() -> None:
    workbook = workbook_io.load_workbook_bytes(_sheet_bytes([["a"]], title="Data", extra_sheet="Sheet1"))
    assert workbook_io.select_sheet(workbook, "Sheet1").title == "Sheet1"
    assert workbook_io.select_sheet(workbook, "Missing").title == "Data"


def test_write_column_only_touches_annotated_cells() -> None:
    workbook = workbook_io.load_workbook_bytes(_sheet_bytes([["url"], ["a"], ["b"]]))
    sheet = workbook.active
    table = [["url", "Status"], ["a", "Changed: Archive → Cool"], ["b"]]

    workbook_io.write_column(sheet, table, 1)
    reloaded = load_workbook(BytesIO(workbook_io.workbook_to_bytes(workbook))).active

    assert reloaded["B1"].value == "Status"
    assert reloaded["B2"].value == "Changed: Archive → Cool"
    assert reloaded["B3"].value is None
    assert reloaded["A3"].value == "b"


def test_unreadable_bytes_raise_spreadsheet_error() -> None:
    with pytest.raises(SpreadsheetError):
        workbook_io.load_workbook_bytes(b"not a zip archive")
