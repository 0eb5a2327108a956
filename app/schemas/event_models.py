# schemas/event_models.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SUBSCRIPTION_VALIDATION_EVENT = "Microsoft.EventGrid.SubscriptionValidationEvent"
BLOB_CREATED_EVENT = "Microsoft.Storage.BlobCreated"


# ============================================================================
# EVENT GRID ENVELOPES
# ============================================================================

class ValidationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    validation_code: str = Field("", alias="validationCode")


class SubscriptionValidationEvent(BaseModel):
    """
    One-time handshake Event Grid sends before delivering real events.
    The validation code must be echoed back verbatim.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    event_type: str = Field("", alias="eventType")
    data: ValidationData = Field(default_factory=ValidationData)


class BlobEventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = ""


class EventGridEvent(BaseModel):
    """Generic Event Grid event; only `data.url` is consumed."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    event_type: str = Field("", alias="eventType")
    data: BlobEventData = Field(default_factory=BlobEventData)


class ValidationResponse(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"validationResponse": "512d38b6-c7b8-40c8-89fe-f46f9e9622b6"}
        },
    )

    validation_response: str = Field(..., alias="validationResponse")


# ============================================================================
# FRONTEND RESPONSES
# ============================================================================

class LatestPublishedFile(BaseModel):
    """Identity of the most recently published output workbook."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_name: str = Field(..., alias="fileName")
    url: str
    processed_at: datetime = Field(..., alias="processedAt")


class LatestProcessedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available: bool
    message: Optional[str] = None
    file: Optional[LatestPublishedFile] = None


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "success"
    message: str
    original_file: str = Field(..., alias="originalFile")


class HealthResponse(BaseModel):
    status: str = "healthy"
    message: str = "Service is healthy"
