# services/workbook_io.py
"""
openpyxl adapter: workbook bytes <-> SpreadsheetTable.

Only the annotated column is written back into the original sheet, so
formatting and the other sheets of the source workbook survive the round trip.
"""
from __future__ import annotations

from io import BytesIO
from typing import Any, List, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from core.errors import SpreadsheetError
from schemas.remediation_models import SpreadsheetTable


def load_workbook_bytes(data: bytes) -> Workbook:
    try:
        return load_workbook(BytesIO(data))
    except Exception as e:
        raise SpreadsheetError(f"failed to open excel file: {e}") from e


def select_sheet(workbook: Workbook, name: Optional[str]) -> Worksheet:
    """Named sheet when present, otherwise the active sheet."""
    if name and name in workbook.sheetnames:
        return workbook[name]
    sheet = workbook.active
    if sheet is None:
        raise SpreadsheetError("workbook has no worksheet")
    return sheet


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_table(sheet: Worksheet) -> SpreadsheetTable:
    """Rows of cell text; trailing empty cells are dropped so rows are ragged."""
    table: SpreadsheetTable = []
    for values in sheet.iter_rows(values_only=True):
        row: List[str] = [_cell_text(v) for v in values]
        while row and row[-1] == "":
            row.pop()
        table.append(row)

    while table and not table[-1]:
        table.pop()
    return table


def write_column(sheet: Worksheet, table: SpreadsheetTable, column_index: int) -> None:
    """Copy one table column into the sheet (0-based index, rows without a value skipped)."""
    for row_index, row in enumerate(table):
        if column_index < len(row) and row[column_index] != "":
            sheet.cell(row=row_index + 1, column=column_index + 1, value=row[column_index])


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    try:
        workbook.save(buffer)
    except Exception as e:
        raise SpreadsheetError(f"failed to write excel to buffer: {e}") from e
    return buffer.getvalue()


def table_to_workbook(table: SpreadsheetTable, sheet_name: str = "Sheet1") -> Workbook:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    for row in table:
        sheet.append(list(row))
    return workbook
