from __future__ import annotations

import json
from typing import Dict, List, Optional, Set, Tuple

import pytest
from fastapi.testclient import TestClient

from core.config import settings
from core.errors import AccessError, BlobNotFoundError, UploadError
from core.rate_limiter import limiter
from integrations.blob_store import get_blob_store
from main import app
from schemas.event_models import BLOB_CREATED_EVENT
from schemas.remediation_models import BlobReference, SpreadsheetTable
from services.notification_tracker import LatestFileTracker
from services.workbook_io import table_to_workbook, workbook_to_bytes

BlobKey = Tuple[str, str, str]


class FakeBlobStore:
    """In-memory stand-in for AzureBlobStore that records every call."""

    def __init__(self) -> None:
        self.tiers: Dict[BlobKey, Optional[str]] = {}
        self.fail_set_tier: Set[BlobKey] = set()
        self.sources: Dict[str, bytes] = {}
        self.objects: Dict[BlobKey, bytes] = {}
        self.content_types: Dict[BlobKey, Optional[str]] = {}
        self.containers: Set[Tuple[str, str]] = set()
        self.fail_upload = False
        self.calls: List[Tuple[str, object]] = []

    @staticmethod
    def _key(ref: BlobReference) -> BlobKey:
        return (ref.account, ref.container, ref.path)

    def get_access_tier(self, ref: BlobReference) -> Optional[str]:
        self.calls.append(("get_access_tier", ref))
        if self._key(ref) not in self.tiers:
            raise AccessError(f"blob not accessible: {ref.path}")
        return self.tiers[self._key(ref)]

    def set_access_tier(self, ref: BlobReference, tier: str) -> None:
        self.calls.append(("set_access_tier", (ref, tier)))
        if self._key(ref) in self.fail_set_tier:
            raise AccessError("failed to set tier: forbidden")
        self.tiers[self._key(ref)] = tier

    def download_url(self, blob_url: str) -> bytes:
        self.calls.append(("download_url", blob_url))
        if blob_url not in self.sources:
            raise BlobNotFoundError(f"blob not found: {blob_url}")
        return self.sources[blob_url]

    def stream_blob(self, account: str, container: str, name: str):
        self.calls.append(("stream_blob", (account, container, name)))
        key = (account, container, name)
        if key not in self.objects:
            raise BlobNotFoundError(f"file not found: {name}")
        data = self.objects[key]
        return iter([data[:4], data[4:]])

    def ensure_container(self, account: str, container: str) -> None:
        self.calls.append(("ensure_container", (account, container)))
        self.containers.add((account, container))

    def upload(self, account, container, name, data, content_type=None) -> str:
        self.calls.append(("upload", (account, container, name)))
        if self.fail_upload:
            raise UploadError(f"failed to upload {name}: service unavailable")
        key = (account, container, name)
        self.objects[key] = data
        self.content_types[key] = content_type
        return f"https://{account}.blob.core.windows.net/{container}/{name}"

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


def workbook_bytes(table: SpreadsheetTable, sheet_name: str = "Sheet1") -> bytes:
    return workbook_to_bytes(table_to_workbook(table, sheet_name))


def blob_created_body(*urls: str, event_type: str = BLOB_CREATED_EVENT) -> bytes:
    return json.dumps([
        {"id": str(i), "eventType": event_type, "data": {"url": url}}
        for i, url in enumerate(urls, start=1)
    ]).encode("utf-8")


@pytest.fixture
def fake_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def output_settings(monkeypatch):
    monkeypatch.setattr(settings, "OUTPUT_STORAGE_ACCOUNT", "outacct")
    monkeypatch.setattr(settings, "OUTPUT_STORAGE_CONTAINER", "outcont")
    monkeypatch.setattr(settings, "STORAGE_ACCOUNT", "inacct")
    monkeypatch.setattr(settings, "STORAGE_CONTAINER", "incont")


@pytest.fixture
def client(fake_store, monkeypatch):
    monkeypatch.setattr(limiter, "enabled", False)
    monkeypatch.setattr(app.state, "latest_file_tracker", LatestFileTracker())
    app.dependency_overrides[get_blob_store] = lambda: fake_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
