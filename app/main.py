import os
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from routers.router import router, frontend_router
from core.errors import AutotierError, handle_autotier_error
from core.lifespan import lifespan
from core.config import settings
from core.logger import logger
from core.rate_limiter import limiter
from services.notification_tracker import LatestFileTracker

# CORS configuration
if settings.ENABLE_CORS and settings.FRONTEND_ENDPOINT:
    origins = [settings.FRONTEND_ENDPOINT]
else:
    origins = ["*"]

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Demotes archived blobs referenced from uploaded workbooks to the Cool tier.

    ## Webhooks (Event Grid)

    **POST /process** - BlobCreated events for uploaded workbooks. Each workbook is
    scanned for blob URLs, archived blobs are moved to Cool, and an annotated copy
    with a `Status` column is published as `<name>_processed.xlsx`.

    **POST /api/processed-notification** - BlobCreated events for published
    outputs; tracks the latest one.

    Both answer the subscription validation handshake with
    `{"validationResponse": <code>}`.

    ## Frontend

    - **POST /upload** - multipart field `file`, `.xlsx` only
    - **GET /api/latest-processed** - latest published output, if any
    - **GET /api/download/{name}** - stream a published output
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Shared between the notification webhook (writer) and the query endpoint (reader)
app.state.latest_file_tracker = LatestFileTracker()

# Configure rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AutotierError, handle_autotier_error)

# Request/Response logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    log_data = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": int(duration * 1000),
        "client": request.client.host if request.client else "unknown"
    }

    # Only log non-health-check requests
    if request.url.path != "/health":
        logger.info(f"Request: {log_data}")

    return response

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router)
app.include_router(frontend_router)

# Static frontend when bundled; routes above take precedence over the mount
if os.path.isdir(settings.STATIC_DIR):
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
else:
    @app.get("/", tags=["Root"])
    async def root():
        return {
            "service": settings.PROJECT_NAME,
            "version": "1.0.0",
            "status": "running",
            "documentation": "/docs"
        }
