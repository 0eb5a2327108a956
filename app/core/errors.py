# core/errors.py
"""
Error taxonomy for the remediation service.

Every error carries the HTTP status it maps to, so routers and the global
exception handler never branch on message text.
"""

from fastapi import Request, status
from fastapi.responses import PlainTextResponse


class AutotierError(Exception):
    """Base class for all service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(AutotierError):
    """Malformed inbound body."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidUploadError(AutotierError):
    """Upload rejected before reaching the store."""

    status_code = status.HTTP_400_BAD_REQUEST


class AccessError(AutotierError):
    """Object not reachable or credential failure."""


class BlobNotFoundError(AccessError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(AutotierError):
    """Missing required setting."""


class SpreadsheetError(AutotierError):
    """Workbook could not be decoded or encoded."""


class UploadError(AutotierError):
    """Output publish failure."""


async def handle_autotier_error(request: Request, exc: AutotierError) -> PlainTextResponse:
    return PlainTextResponse(exc.message, status_code=exc.status_code)
