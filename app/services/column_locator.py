# services/column_locator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional, Protocol, Sequence

from core.config import settings
from core.logger import logger
from schemas.remediation_models import SpreadsheetTable
from services.reference_extractor import is_blob_reference

# Header names that identify the reference column (compared case-insensitively)
REFERENCE_HEADER_NAMES: FrozenSet[str] = frozenset({
    "url",
    "uri",
    "link",
    "blob",
    "blob_url",
    "blob_uri",
    "blob_link",
    "blob_path",
    "blob_location",
    "azure_blob_url",
    "azure_blob_location",
    "file_url",
    "file_path",
    "file_location",
    "storage_url",
    "storage_location",
})


@dataclass(frozen=True)
class ColumnMatch:
    index: int
    confidence: float
    matcher: str


class ColumnMatcher(Protocol):
    name: str

    def match(self, table: SpreadsheetTable) -> Optional[ColumnMatch]:
        ...


class HeaderNameMatcher:
    """Leftmost header cell whose text is in the accepted vocabulary."""

    name = "header"

    def __init__(self, header_names: FrozenSet[str] = REFERENCE_HEADER_NAMES):
        self.header_names = frozenset(h.casefold() for h in header_names)

    def match(self, table: SpreadsheetTable) -> Optional[ColumnMatch]:
        if not table:
            return None
        for index, header in enumerate(table[0]):
            if (header or "").strip().casefold() in self.header_names:
                return ColumnMatch(index=index, confidence=1.0, matcher=self.name)
        return None


class ContentFrequencyMatcher:
    """
    Column with the strictly highest number of reference-shaped cells
    among the first `max_rows` data rows. Ties go to the leftmost column.
    """

    name = "content"

    def __init__(
        self,
        max_rows: int = 10,
        predicate: Callable[[Optional[str]], bool] = is_blob_reference,
    ):
        self.max_rows = max_rows
        self.predicate = predicate

    def match(self, table: SpreadsheetTable) -> Optional[ColumnMatch]:
        sample = table[1:1 + self.max_rows]
        if not sample:
            return None

        counts: Dict[int, int] = {}
        for row in sample:
            for index, cell in enumerate(row):
                if self.predicate(cell):
                    counts[index] = counts.get(index, 0) + 1

        best_index, best_count = None, 0
        for index in sorted(counts):
            if counts[index] > best_count:
                best_index, best_count = index, counts[index]

        if best_index is None:
            return None
        return ColumnMatch(
            index=best_index,
            confidence=best_count / len(sample),
            matcher=self.name,
        )


def default_matchers() -> Sequence[ColumnMatcher]:
    return (
        HeaderNameMatcher(),
        ContentFrequencyMatcher(max_rows=settings.CONTENT_SCAN_ROWS),
    )


class ColumnLocator:
    """Runs matchers in priority order; the first non-empty result wins."""

    def __init__(self, matchers: Optional[Sequence[ColumnMatcher]] = None):
        self.matchers = tuple(matchers) if matchers is not None else tuple(default_matchers())

    def locate(self, table: SpreadsheetTable) -> Optional[ColumnMatch]:
        if not table:
            return None
        for matcher in self.matchers:
            found = matcher.match(table)
            if found is not None:
                logger.info(
                    f"Reference column located: index={found.index}, "
                    f"matcher={found.matcher}, confidence={found.confidence:.2f}"
                )
                return found
        logger.warning("No reference column could be determined")
        return None


def locate_reference_column(table: SpreadsheetTable) -> Optional[int]:
    found = ColumnLocator().locate(table)
    return found.index if found else None
