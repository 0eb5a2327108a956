# services/reference_extractor.py
import re
from typing import Optional, Pattern

from core.config import settings
from schemas.remediation_models import BlobReference


def build_reference_pattern(endpoint_suffix: str) -> Pattern[str]:
    """
    https://<account>.<suffix>/<container>/<path>

    The path is everything after the container and may contain `/`.
    """
    return re.compile(
        r"https://([^./]+)\." + re.escape(endpoint_suffix) + r"/([^/]+)/(.+)"
    )


BLOB_URL_PATTERN = build_reference_pattern(settings.BLOB_ENDPOINT_SUFFIX)


def parse_blob_reference(value: Optional[str]) -> Optional[BlobReference]:
    """
    Decompose a cell value into (account, container, path).

    Returns None when the cell holds no reference, which is the common case.
    """
    if not value:
        return None
    match = BLOB_URL_PATTERN.search(value.strip())
    if match is None:
        return None
    account, container, path = match.groups()
    return BlobReference(account=account, container=container, path=path)


def is_blob_reference(value: Optional[str]) -> bool:
    return parse_blob_reference(value) is not None
