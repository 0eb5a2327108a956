# services/remediation_pipeline.py
from __future__ import annotations

from typing import Optional, Protocol, Tuple

from core.config import require_setting, settings
from core.logger import logger
from schemas.remediation_models import (
    RemediationReport,
    SpreadsheetTable,
    TableRemediation,
)
from services.column_locator import ColumnLocator
from services.output_publisher import OutputPublisher, PublishStore
from services.reference_extractor import parse_blob_reference
from services.status_annotator import annotate_status
from services.tier_remediator import TierRemediator, TierStore
from services import workbook_io


class RemediationStore(TierStore, PublishStore, Protocol):
    def download_url(self, blob_url: str) -> bytes:
        ...


class RemediationPipeline:
    """
    One best-effort pass over a spreadsheet of blob references.

    Flow:
    1. Resolve the output location (fails before any work when unset)
    2. Download and decode the workbook
    3. Locate the reference column, remediate each row, annotate
    4. Encode and publish the annotated workbook

    Rows and events are processed sequentially; per-reference failures end up
    in the Status column, per-event failures propagate to the caller.
    """

    def __init__(
        self,
        store: RemediationStore,
        locator: Optional[ColumnLocator] = None,
        remediator: Optional[TierRemediator] = None,
        publisher: Optional[OutputPublisher] = None,
    ):
        self.store = store
        self.locator = locator or ColumnLocator()
        self.remediator = remediator or TierRemediator(store)
        self.publisher = publisher or OutputPublisher(store)

    def remediate_table(self, table: SpreadsheetTable) -> TableRemediation:
        """Remediate every referenced row and annotate the table in place."""
        result = TableRemediation()
        if not table:
            return result

        match = self.locator.locate(table)
        if match is None:
            return result
        column = match.index
        result.reference_column = column

        for row_index in range(1, len(table)):
            row = table[row_index]
            if column >= len(row):
                continue
            ref = parse_blob_reference(row[column])
            if ref is None:
                continue

            outcome = self.remediator.remediate(ref)
            result.stats.record(outcome)
            result.outcomes[row_index] = outcome

        result.status_column = annotate_status(table, result.outcomes)
        return result

    def process_workbook(self, data: bytes) -> Tuple[bytes, TableRemediation]:
        workbook = workbook_io.load_workbook_bytes(data)
        sheet = workbook_io.select_sheet(workbook, settings.SOURCE_SHEET_NAME)
        table = workbook_io.read_table(sheet)

        result = self.remediate_table(table)
        if result.status_column is not None:
            workbook_io.write_column(sheet, table, result.status_column)
        return workbook_io.workbook_to_bytes(workbook), result

    def process_blob(self, blob_url: str) -> RemediationReport:
        output_account = require_setting("OUTPUT_STORAGE_ACCOUNT")
        output_container = require_setting("OUTPUT_STORAGE_CONTAINER")

        logger.info(f"New blob uploaded: {blob_url}")
        data = self.store.download_url(blob_url)
        annotated, result = self.process_workbook(data)

        published = self.publisher.publish(annotated, blob_url, output_account, output_container)

        logger.info(f"Processing completed. Status updates: {result.stats.as_dict()}")
        return RemediationReport(
            source_url=blob_url,
            output_name=published.name,
            output_url=published.url,
            stats=result.stats,
        )
