# services/event_gateway.py
"""
Event Grid webhook contract: validation handshake detection and event parsing.
"""
import json
from typing import Any, Callable, List, Optional, TypeVar

from pydantic import ValidationError

from core.errors import ParseError
from core.logger import logger
from schemas.event_models import (
    BLOB_CREATED_EVENT,
    SUBSCRIPTION_VALIDATION_EVENT,
    EventGridEvent,
    SubscriptionValidationEvent,
    ValidationResponse,
)

T = TypeVar("T")


def _load_array(body: bytes) -> Optional[List[Any]]:
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, list) else None


def parse_validation_handshake(body: bytes) -> Optional[SubscriptionValidationEvent]:
    """
    Return the handshake when the first element of the batch is a
    subscription validation event. A validation body never carries real events.
    """
    items = _load_array(body)
    if not items or not isinstance(items[0], dict):
        return None
    try:
        first = SubscriptionValidationEvent.model_validate(items[0])
    except ValidationError:
        return None
    if first.event_type != SUBSCRIPTION_VALIDATION_EVENT:
        return None
    return first


def build_validation_response(handshake: SubscriptionValidationEvent) -> ValidationResponse:
    logger.info(f"Handling validation request: {handshake.data.validation_code}")
    return ValidationResponse(validation_response=handshake.data.validation_code)


def parse_events(body: bytes) -> List[EventGridEvent]:
    items = _load_array(body)
    if items is None:
        raise ParseError("bad request: body is not a JSON array of events")
    try:
        return [EventGridEvent.model_validate(item) for item in items]
    except ValidationError as e:
        raise ParseError(f"bad request: {e.error_count()} invalid event(s)") from e


def blob_created_events(events: List[EventGridEvent]) -> List[EventGridEvent]:
    """Keep only BlobCreated events; everything else is skipped with a log line."""
    selected: List[EventGridEvent] = []
    for event in events:
        if event.event_type == SUBSCRIPTION_VALIDATION_EVENT:
            logger.warning("Unexpected validation event in main flow")
            continue
        if event.event_type != BLOB_CREATED_EVENT:
            logger.info(f"Skipping event type: {event.event_type}")
            continue
        selected.append(event)
    return selected


def dispatch_blob_events(events: List[EventGridEvent], handler: Callable[[str], T]) -> List[T]:
    """
    Run `handler` on each BlobCreated event URL, in order.

    The first failure propagates; side effects of earlier events are kept.
    """
    return [handler(event.data.url) for event in blob_created_events(events)]
