# services/status_annotator.py
from typing import Mapping

from schemas.remediation_models import RemediationOutcome, SpreadsheetTable

STATUS_HEADER = "Status"


def annotate_status(table: SpreadsheetTable, outcomes: Mapping[int, RemediationOutcome]) -> int:
    """
    Append a trailing "Status" column and write each outcome's display text.

    The column goes after the widest row so no existing value is overwritten.
    Rows without an outcome are left untouched. Running this twice appends a
    second "Status" column; already-annotated tables are not detected.

    Returns the index of the new column.
    """
    status_index = max((len(row) for row in table), default=0)

    _set_cell(table, 0, status_index, STATUS_HEADER)
    for row_index, outcome in sorted(outcomes.items()):
        if row_index <= 0 or row_index >= len(table):
            continue
        _set_cell(table, row_index, status_index, outcome.display())
    return status_index


def _set_cell(table: SpreadsheetTable, row_index: int, column_index: int, value: str) -> None:
    if not table:
        table.append([])
    row = table[row_index]
    if len(row) <= column_index:
        row.extend([""] * (column_index + 1 - len(row)))
    row[column_index] = value
