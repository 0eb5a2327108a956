# services/output_publisher.py
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import unquote, urlparse

from core.config import settings
from core.errors import ParseError
from core.logger import logger
from integrations.blob_store import XLSX_CONTENT_TYPE


class PublishStore(Protocol):
    def ensure_container(self, account: str, container: str) -> None:
        ...

    def upload(
        self,
        account: str,
        container: str,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        ...


@dataclass(frozen=True)
class PublishedOutput:
    account: str
    container: str
    name: str
    url: str


def file_name_from_url(blob_url: str) -> str:
    """Last path segment of a blob URL, percent-decoded."""
    path = urlparse(blob_url).path
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    if not name:
        raise ParseError(f"invalid URL path: {blob_url}")
    return name


def derive_output_name(
    source: str,
    suffix: Optional[str] = None,
    extension: Optional[str] = None,
) -> str:
    """
    report.xlsx -> report_processed.xlsx

    `source` may be a bare file name or a full blob URL.
    """
    suffix = settings.PROCESSED_SUFFIX if suffix is None else suffix
    extension = settings.SPREADSHEET_EXTENSION if extension is None else extension

    name = file_name_from_url(source) if "://" in source else source.rsplit("/", 1)[-1]
    if name.lower().endswith(extension.lower()):
        name = name[: -len(extension)]
    return f"{name}{suffix}{extension}"


class OutputPublisher:
    """
    Upload an annotated workbook to the output location.

    Upload failures propagate as UploadError; nothing is retried.
    """

    def __init__(self, store: PublishStore):
        self.store = store

    def publish(self, data: bytes, source_url: str, account: str, container: str) -> PublishedOutput:
        output_name = derive_output_name(source_url)

        self.store.ensure_container(account, container)
        url = self.store.upload(
            account,
            container,
            output_name,
            data,
            content_type=XLSX_CONTENT_TYPE,
        )

        logger.info(
            f"Processed file uploaded to: {container}/{output_name} in storage account: {account}"
        )
        return PublishedOutput(account=account, container=container, name=output_name, url=url)
