# core/azure_client.py
"""
Centralized Azure client factory to ensure proper credential handling.
This module creates Blob Storage clients with explicit credential configuration.
"""
from typing import Dict, Optional

from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential
from azure.storage.blob import BlobClient, BlobServiceClient

from core.config import settings
from core.logger import logger

_credential: Optional[TokenCredential] = None
_service_clients: Dict[str, BlobServiceClient] = {}


def get_credential() -> TokenCredential:
    """Get the process-wide Azure credential, created on first use."""
    global _credential
    if _credential is not None:
        return _credential
    try:
        if settings.AZURE_USE_MANAGED_IDENTITY:
            _credential = ManagedIdentityCredential(
                client_id=settings.AZURE_MANAGED_IDENTITY_CLIENT_ID
            )
            logger.info("Managed identity credential initialized")
        else:
            _credential = DefaultAzureCredential()
            logger.info("Default Azure credential chain initialized")
        return _credential
    except Exception as e:
        logger.error(f"Failed to initialize Azure credential: {str(e)}")
        raise


def account_url(account: str) -> str:
    return f"https://{account}.{settings.BLOB_ENDPOINT_SUFFIX}/"


def get_blob_service_client(account: str) -> BlobServiceClient:
    """Get a Blob service client for a storage account, cached per account."""
    client = _service_clients.get(account)
    if client is not None:
        return client
    try:
        client = BlobServiceClient(account_url=account_url(account), credential=get_credential())
        _service_clients[account] = client
        logger.info(f"Blob service client initialized for account {account}")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Blob service client for {account}: {str(e)}")
        raise


def get_blob_client_from_url(blob_url: str) -> BlobClient:
    """
    Get a Blob client for a full blob URL.

    The SDK unquotes the URL path into the blob name, so the URL must carry
    the percent-encoded path.
    """
    return BlobClient.from_blob_url(blob_url, credential=get_credential())
