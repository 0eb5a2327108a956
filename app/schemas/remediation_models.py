# schemas/remediation_models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

# Row 0 is the header row; rows may be ragged.
SpreadsheetTable = List[List[str]]

ARCHIVE_TIER = "Archive"
COOL_TIER = "Cool"


def encode_blob_path(path: str) -> str:
    """Percent-encode each `/`-separated segment independently."""
    return "/".join(quote(segment, safe="") for segment in path.split("/"))


def decode_blob_path(encoded: str) -> str:
    return "/".join(unquote(segment) for segment in encoded.split("/"))


@dataclass(frozen=True)
class BlobReference:
    """(account, container, path) triple parsed from a blob URL."""

    account: str
    container: str
    path: str

    @property
    def encoded_path(self) -> str:
        return encode_blob_path(self.path)

    def url(self, endpoint_suffix: str = "blob.core.windows.net") -> str:
        return f"https://{self.account}.{endpoint_suffix}/{self.container}/{self.encoded_path}"


class OutcomeKind(str, Enum):
    CHANGED = "Changed"
    SKIPPED = "Skipped"
    ERROR = "Error"


@dataclass(frozen=True)
class RemediationOutcome:
    """
    Result of remediating one reference.

    Closed set of three cases; `Skipped` and `Error` carry a free-form reason,
    `Changed` carries the tier transition. Only `display()` turns it into text.
    """

    kind: OutcomeKind
    reason: Optional[str] = None
    from_tier: Optional[str] = None
    to_tier: Optional[str] = None

    @classmethod
    def changed(cls, from_tier: str, to_tier: str) -> "RemediationOutcome":
        return cls(OutcomeKind.CHANGED, from_tier=from_tier, to_tier=to_tier)

    @classmethod
    def skipped(cls, reason: str) -> "RemediationOutcome":
        return cls(OutcomeKind.SKIPPED, reason=reason)

    @classmethod
    def error(cls, reason: str) -> "RemediationOutcome":
        return cls(OutcomeKind.ERROR, reason=reason)

    def display(self) -> str:
        if self.kind is OutcomeKind.CHANGED:
            return f"Changed: {self.from_tier} → {self.to_tier}"
        return f"{self.kind.value}: {self.reason}"


@dataclass
class RemediationStats:
    processed: int = 0
    changed: int = 0
    skipped: int = 0
    errors: int = 0

    def record(self, outcome: RemediationOutcome) -> None:
        self.processed += 1
        if outcome.kind is OutcomeKind.CHANGED:
            self.changed += 1
        elif outcome.kind is OutcomeKind.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    def as_dict(self) -> Dict[str, int]:
        return {
            "processed": self.processed,
            "changed": self.changed,
            "skipped": self.skipped,
            "errors": self.errors,
        }


@dataclass
class TableRemediation:
    """Result of remediating one table in memory."""

    stats: RemediationStats = field(default_factory=RemediationStats)
    outcomes: Dict[int, RemediationOutcome] = field(default_factory=dict)
    reference_column: Optional[int] = None
    status_column: Optional[int] = None


@dataclass(frozen=True)
class RemediationReport:
    source_url: str
    output_name: str
    output_url: str
    stats: RemediationStats
