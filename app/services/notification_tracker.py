# services/notification_tracker.py
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from core.config import settings
from core.logger import logger
from schemas.event_models import LatestPublishedFile
from services.output_publisher import file_name_from_url


class LatestFileTracker:
    """
    Last-value cache for the most recently published output workbook.

    Shared by the notification writer and the query reader. Concurrent
    writers resolve last-write-wins; nothing is persisted or kept as history.
    """

    def __init__(
        self,
        marker: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.marker = marker or f"{settings.PROCESSED_SUFFIX}{settings.SPREADSHEET_EXTENSION}"
        self._clock = clock
        self._lock = threading.Lock()
        self._latest: Optional[LatestPublishedFile] = None

    def is_published_output(self, blob_url: str) -> bool:
        return self.marker in blob_url

    def record(self, blob_url: str) -> Optional[LatestPublishedFile]:
        """Overwrite the cached value when the URL names a processed output."""
        if not self.is_published_output(blob_url):
            logger.debug(f"Ignoring non-output blob: {blob_url}")
            return None

        latest = LatestPublishedFile(
            file_name=file_name_from_url(blob_url),
            url=blob_url,
            processed_at=self._clock(),
        )
        with self._lock:
            self._latest = latest
        logger.info(f"Updated latest processed file to: {latest.file_name}")
        return latest

    def latest(self) -> Optional[LatestPublishedFile]:
        with self._lock:
            return self._latest
