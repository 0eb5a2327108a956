# services/tier_remediator.py
from typing import Optional, Protocol

from core.errors import AccessError
from core.logger import logger
from schemas.remediation_models import (
    ARCHIVE_TIER,
    COOL_TIER,
    BlobReference,
    RemediationOutcome,
)


class TierStore(Protocol):
    def get_access_tier(self, ref: BlobReference) -> Optional[str]:
        ...

    def set_access_tier(self, ref: BlobReference, tier: str) -> None:
        ...


class TierRemediator:
    """
    Inspect one blob's access tier and demote Archive to Cool.

    Linear and terminal after one transition:
      Inspect -> (not accessible) Error
              -> (no tier)        Skipped
              -> (not Archive)    Skipped "already <tier>"
              -> Demote -> (fails) Error | Changed

    No retries. Errors become outcomes so the caller can continue with the
    next row.
    """

    def __init__(self, store: TierStore, source_tier: str = ARCHIVE_TIER, target_tier: str = COOL_TIER):
        self.store = store
        self.source_tier = source_tier
        self.target_tier = target_tier

    def remediate(self, ref: BlobReference) -> RemediationOutcome:
        logger.info(
            f"Processing blob: account={ref.account}, container={ref.container}, path={ref.path}"
        )

        try:
            current_tier = self.store.get_access_tier(ref)
        except AccessError as e:
            logger.warning(f"Blob not accessible: {ref.path}: {e}")
            return RemediationOutcome.error("not accessible")

        if not current_tier:
            logger.info(f"AccessTier not set for blob: {ref.path}")
            return RemediationOutcome.skipped("no access tier set")

        if current_tier.casefold() != self.source_tier.casefold():
            logger.debug(f"No change needed for {ref.path} (current: {current_tier})")
            return RemediationOutcome.skipped(f"already {current_tier}")

        try:
            self.store.set_access_tier(ref, self.target_tier)
        except AccessError as e:
            logger.error(f"Failed to set tier for {ref.path}: {e}")
            return RemediationOutcome.error("failed to set tier")

        logger.info(f"Tier changed {self.source_tier} -> {self.target_tier}: {ref.path}")
        return RemediationOutcome.changed(self.source_tier, self.target_tier)
