# core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

from core.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Centralized application configuration.
    Grouped logically for readability.
    """

    # ------------------------------------------------------------
    # Project / Runtime
    # ------------------------------------------------------------
    PROJECT_NAME: str = "Blob Tier Remediation Service"
    DEBUG: bool = False
    ENABLE_CORS: bool = False

    # HTTP / API
    FRONTEND_ENDPOINT: str = ""
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MIN: str = "30"
    STATIC_DIR: str = "./static"

    # ------------------------------------------------------------
    # Azure identity
    # ------------------------------------------------------------
    AZURE_USE_MANAGED_IDENTITY: bool = Field(
        default=False,
        description="Use the managed identity credential instead of the default credential chain"
    )
    AZURE_MANAGED_IDENTITY_CLIENT_ID: Optional[str] = Field(
        default=None,
        description="Client ID of a user-assigned managed identity (optional)"
    )
    BLOB_ENDPOINT_SUFFIX: str = "blob.core.windows.net"

    # ------------------------------------------------------------
    # Storage locations
    # ------------------------------------------------------------

    """
    Upload destination. The processor webhook is subscribed to this container.
    """
    STORAGE_ACCOUNT: Optional[str] = None
    STORAGE_CONTAINER: Optional[str] = None

    """
    Publish destination for annotated workbooks. Usually a different account.
    """
    OUTPUT_STORAGE_ACCOUNT: Optional[str] = None
    OUTPUT_STORAGE_CONTAINER: Optional[str] = None
    DEFAULT_OUTPUT_CONTAINER: str = "processed-files"

    # ------------------------------------------------------------
    # Spreadsheet processing
    # ------------------------------------------------------------
    SOURCE_SHEET_NAME: str = "Sheet1"
    SPREADSHEET_EXTENSION: str = ".xlsx"
    PROCESSED_SUFFIX: str = "_processed"
    CONTENT_SCAN_ROWS: int = Field(
        default=10,
        description="Data rows sampled when no header names the reference column"
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=50 * 1024 * 1024,
        description="Largest accepted upload (50 MiB)"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def require_setting(name: str) -> str:
    """
    Read a required setting at the point of use.

    Raises:
        ConfigurationError: If the value is unset or blank
    """
    value = getattr(settings, name, None)
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{name} environment variable not set")
    return str(value).strip()


settings = Settings()
