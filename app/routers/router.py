# routers/router.py
"""
FastAPI routers for the remediation webhook and the upload/download frontend
"""

import os
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Request,
    UploadFile,
    status
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from core.config import require_setting, settings
from core.errors import ConfigurationError, InvalidUploadError
from core.logger import logger
from core.rate_limiter import limit_param, limiter
from integrations.blob_store import XLSX_CONTENT_TYPE, AzureBlobStore, get_blob_store
from schemas.event_models import (
    HealthResponse,
    LatestProcessedResponse,
    UploadResponse,
)
from services.event_gateway import (
    blob_created_events,
    build_validation_response,
    dispatch_blob_events,
    parse_events,
    parse_validation_handshake,
)
from services.notification_tracker import LatestFileTracker
from services.remediation_pipeline import RemediationPipeline

_LOGGED_BODY_CHARS = 2000


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_remediation_pipeline(store: AzureBlobStore = Depends(get_blob_store)) -> RemediationPipeline:
    return RemediationPipeline(store)


def get_latest_file_tracker(request: Request) -> LatestFileTracker:
    return request.app.state.latest_file_tracker


def _content_disposition(file_name: str) -> str:
    """
    Attachment header safe for any object name.

    Header values go out as Latin-1, so the plain `filename` carries an ASCII
    fallback and `filename*` carries the exact UTF-8 name.
    """
    fallback = "".join(
        ch if " " <= ch <= "~" and ch not in '"\\' else "_" for ch in file_name
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


def _validation_response(body: bytes):
    """JSON echo of the validation code, or None when the body is not a handshake."""
    handshake = parse_validation_handshake(body)
    if handshake is None:
        return None
    response = build_validation_response(handshake)
    logger.info("Validation handshake completed")
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(by_alias=True),
    )


# ============================================================================
# ROUTER CONFIGURATION
# ============================================================================

router = APIRouter(
    tags=["Remediation"],
    responses={
        400: {"description": "Bad Request - Malformed event body"},
        500: {"description": "Internal Server Error"}
    }
)

frontend_router = APIRouter(
    tags=["Frontend"],
    responses={
        400: {"description": "Bad Request"},
        429: {"description": "Too Many Requests"},
        500: {"description": "Internal Server Error"}
    }
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Service Health Check"
)
async def check_health() -> HealthResponse:
    return HealthResponse()


# ============================================================================
# PROCESSOR WEBHOOK
# ============================================================================

@router.post(
    "/process",
    status_code=status.HTTP_200_OK,
    summary="Event Grid Webhook",
    description="Validation handshake or BlobCreated events pointing at uploaded workbooks"
)
async def process_events(
    request: Request,
    pipeline: RemediationPipeline = Depends(get_remediation_pipeline)
):
    """
    Remediate every workbook referenced by a BlobCreated event.

    Process:
    1. Echo the validation code when the batch is a subscription handshake
    2. Parse the batch as generic events (400 on failure)
    3. Run the pipeline on each BlobCreated event in order

    The first failing event ends the request with a 500. Events processed
    before it keep their side effects.
    """
    body = await request.body()
    logger.info(f"Received request: {body[:_LOGGED_BODY_CHARS].decode('utf-8', 'replace')}")

    validation = _validation_response(body)
    if validation is not None:
        return validation

    events = parse_events(body)

    try:
        reports = await run_in_threadpool(dispatch_blob_events, events, pipeline.process_blob)
    except Exception as e:
        logger.exception(f"Failed to process blob: {e}")
        return PlainTextResponse(
            f"failed to process blob: {e}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    for report in reports:
        logger.info(
            f"Blob processed: source={report.source_url}, "
            f"output={report.output_name}, stats={report.stats.as_dict()}"
        )
    return PlainTextResponse("Event processed", status_code=status.HTTP_200_OK)


# ============================================================================
# FRONTEND ENDPOINTS
# ============================================================================

@frontend_router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Upload Workbook",
    description="Store an .xlsx workbook in the monitored container"
)
@limiter.limit(limit_param)
async def upload_workbook(
    request: Request,
    file: UploadFile = File(...),
    store: AzureBlobStore = Depends(get_blob_store)
) -> UploadResponse:
    file_name = os.path.basename(file.filename or "")
    extension = os.path.splitext(file_name)[1].lower()
    if extension != settings.SPREADSHEET_EXTENSION:
        logger.warning(f"Invalid file type attempted: {file_name}")
        raise InvalidUploadError(
            f"Only {settings.SPREADSHEET_EXTENSION} files are allowed. "
            f"Please upload an Excel file with {settings.SPREADSHEET_EXTENSION} extension."
        )

    data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise InvalidUploadError(
            f"File exceeds the maximum upload size of {settings.MAX_UPLOAD_BYTES} bytes"
        )

    account = require_setting("STORAGE_ACCOUNT")
    container = require_setting("STORAGE_CONTAINER")

    await run_in_threadpool(
        store.upload, account, container, file_name, data, XLSX_CONTENT_TYPE
    )
    logger.info(f"Upload successful: {file_name}")

    return UploadResponse(
        status="success",
        message=f"Upload successful: {file_name}. File is being processed...",
        original_file=file_name,
    )


@frontend_router.get(
    "/api/latest-processed",
    response_model=LatestProcessedResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="Latest Processed Workbook"
)
async def latest_processed(
    tracker: LatestFileTracker = Depends(get_latest_file_tracker)
) -> LatestProcessedResponse:
    latest = tracker.latest()
    if latest is None:
        return LatestProcessedResponse(
            available=False,
            message="No processed files available yet"
        )
    return LatestProcessedResponse(available=True, file=latest)


@frontend_router.get(
    "/api/download/{file_name:path}",
    summary="Download Processed Workbook",
    description="Stream a workbook from the output container"
)
@limiter.limit(limit_param)
async def download_processed(
    request: Request,
    file_name: str,
    store: AzureBlobStore = Depends(get_blob_store)
) -> StreamingResponse:
    logger.info(f"Download request for: {file_name}")

    account = settings.OUTPUT_STORAGE_ACCOUNT or settings.STORAGE_ACCOUNT
    if not account:
        raise ConfigurationError("Storage account not configured")
    container = settings.OUTPUT_STORAGE_CONTAINER or settings.DEFAULT_OUTPUT_CONTAINER

    chunks = await run_in_threadpool(store.stream_blob, account, container, file_name)

    download_name = os.path.basename(file_name)
    return StreamingResponse(
        chunks,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": _content_disposition(download_name)}
    )


@frontend_router.post(
    "/api/processed-notification",
    status_code=status.HTTP_200_OK,
    summary="Processed Output Notification",
    description="Event Grid webhook for workbooks published to the output container"
)
async def processed_notification(
    request: Request,
    tracker: LatestFileTracker = Depends(get_latest_file_tracker)
):
    body = await request.body()
    logger.info(f"Received Event Grid notification: {body[:_LOGGED_BODY_CHARS].decode('utf-8', 'replace')}")

    validation = _validation_response(body)
    if validation is not None:
        return validation

    for event in blob_created_events(parse_events(body)):
        if tracker.record(event.data.url) is not None:
            logger.info(f"New processed file detected: {event.data.url}")

    return PlainTextResponse("Notification processed", status_code=status.HTTP_200_OK)
