# app/integrations/blob_store.py
"""
Azure Blob Storage capability used by the remediation pipeline.

SDK exceptions are translated into the service error taxonomy here;
callers above this module never see azure.core exception types.
"""
from typing import Iterator, Optional

from azure.core.exceptions import (
    AzureError,
    ResourceExistsError,
    ResourceNotFoundError,
)
from azure.storage.blob import ContentSettings, StandardBlobTier

from core.azure_client import get_blob_client_from_url, get_blob_service_client
from core.config import settings
from core.errors import AccessError, BlobNotFoundError, UploadError
from core.logger import logger
from schemas.remediation_models import BlobReference

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class AzureBlobStore:
    """Thin wrapper over azure-storage-blob exposing only what the pipeline needs."""

    def __init__(self, endpoint_suffix: Optional[str] = None):
        self.endpoint_suffix = endpoint_suffix or settings.BLOB_ENDPOINT_SUFFIX

    def _blob_client(self, ref: BlobReference):
        # Shares the per-account service client, and its transport, across references
        return get_blob_service_client(ref.account).get_blob_client(ref.container, ref.path)

    # ------------------------------------------------------------
    # Tier inspection / transition
    # ------------------------------------------------------------

    def get_access_tier(self, ref: BlobReference) -> Optional[str]:
        """Current access tier, or None when the blob reports no tier."""
        try:
            props = self._blob_client(ref).get_blob_properties()
        except AzureError as e:
            raise AccessError(f"blob not accessible: {ref.url(self.endpoint_suffix)}: {e}") from e
        tier = props.blob_tier
        return str(getattr(tier, "value", tier)) if tier else None

    def set_access_tier(self, ref: BlobReference, tier: str) -> None:
        try:
            self._blob_client(ref).set_standard_blob_tier(StandardBlobTier(tier))
        except AzureError as e:
            raise AccessError(f"failed to set tier: {ref.url(self.endpoint_suffix)}: {e}") from e

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def download_url(self, blob_url: str) -> bytes:
        try:
            return get_blob_client_from_url(blob_url).download_blob().readall()
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(f"blob not found: {blob_url}") from e
        except AzureError as e:
            raise AccessError(f"failed to download blob: {e}") from e

    def stream_blob(self, account: str, container: str, name: str) -> Iterator[bytes]:
        """
        Open the download eagerly so a missing blob fails here rather than
        after the response has started streaming.
        """
        blob = get_blob_service_client(account).get_blob_client(container, name)
        try:
            downloader = blob.download_blob()
        except ResourceNotFoundError as e:
            raise BlobNotFoundError(f"file not found: {name}") from e
        except AzureError as e:
            raise AccessError(f"failed to download file: {e}") from e
        return downloader.chunks()

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def ensure_container(self, account: str, container: str) -> None:
        container_client = get_blob_service_client(account).get_container_client(container)
        try:
            container_client.get_container_properties()
            return
        except ResourceNotFoundError:
            pass
        except AzureError as e:
            raise UploadError(f"failed to access output container: {e}") from e

        try:
            container_client.create_container()
            logger.info(f"Created output container: {container} in storage account: {account}")
        except ResourceExistsError:
            # Another writer created it between the check and the create
            logger.info(f"Output container {container} already created concurrently")
        except AzureError as e:
            raise UploadError(f"failed to create output container: {e}") from e

    def upload(
        self,
        account: str,
        container: str,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload (overwriting) and return the blob URL."""
        blob = get_blob_service_client(account).get_blob_client(container, name)
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        try:
            blob.upload_blob(data, overwrite=True, content_settings=content_settings)
        except AzureError as e:
            raise UploadError(f"failed to upload {name}: {e}") from e
        return blob.url


_blob_store: Optional[AzureBlobStore] = None


def get_blob_store() -> AzureBlobStore:
    """FastAPI dependency; the store is created on first use."""
    global _blob_store
    if _blob_store is None:
        _blob_store = AzureBlobStore()
    return _blob_store
