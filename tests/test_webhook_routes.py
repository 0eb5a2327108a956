from io import BytesIO

from openpyxl import load_workbook

from conftest import blob_created_body, workbook_bytes
from core.config import settings
from services import workbook_io

SOURCE_URL = "https://inacct.blob.core.windows.net/incont/input.xlsx"
A_URL = "https://acct.blob.core.windows.net/cont/a.txt"

VALIDATION_BODY = [
    {
        "id": "1",
        "eventType": "Microsoft.EventGrid.SubscriptionValidationEvent",
        "data": {"validationCode": "abc123"},
    }
]


def test_validation_handshake_echoes_code_without_store_calls(client, fake_store) -> None:
    response = client.post("/process", json=VALIDATION_BODY)

    assert response.status_code == 200
    assert response.json() == {"validationResponse": "abc123"}
    assert fake_store.calls == []


def test_validation_handshake_ignores_rest_of_batch(client, fake_store) -> None:
    body = VALIDATION_BODY + [
        {"id": "2", "eventType": "Microsoft.Storage.BlobCreated", "data": {"url": SOURCE_URL}}
    ]
    response = client.post("/process", json=body)

    assert response.json() == {"validationResponse": "abc123"}
    assert fake_store.calls == []


def test_blob_created_event_publishes_annotated_workbook(client, fake_store, output_settings) -> None:
    fake_store.sources[SOURCE_URL] = workbook_bytes([["url"], [A_URL]])
    fake_store.tiers[("acct", "cont", "a.txt")] = "Archive"

    response = client.post("/process", content=blob_created_body(SOURCE_URL))

    assert response.status_code == 200
    assert response.text == "Event processed"
    data = fake_store.objects[("outacct", "outcont", "input_processed.xlsx")]
    table = workbook_io.read_table(load_workbook(BytesIO(data)).active)
    assert table == [["url", "Status"], [A_URL, "Changed: Archive → Cool"]]


def test_other_event_types_are_skipped(client, fake_store, output_settings) -> None:
    body = blob_created_body(SOURCE_URL, event_type="Microsoft.Storage.BlobDeleted")

    response = client.post("/process", content=body)

    assert response.status_code == 200
    assert fake_store.calls == []


def test_malformed_body_is_a_client_error(client, fake_store) -> None:
    response = client.post("/process", content=b"{not json")

    assert response.status_code == 400
    assert response.text.startswith("bad request")
    assert response.headers["content-type"].startswith("text/plain")


def test_non_array_body_is_a_client_error(client) -> None:
    response = client.post("/process", json={"eventType": "Microsoft.Storage.BlobCreated"})
    assert response.status_code == 400


def test_failing_event_aborts_batch_but_keeps_earlier_side_effects(client, fake_store, output_settings) -> None:
    first_url = "https://inacct.blob.core.windows.net/incont/first.xlsx"
    missing_url = "https://inacct.blob.core.windows.net/incont/missing.xlsx"
    last_url = "https://inacct.blob.core.windows.net/incont/last.xlsx"
    fake_store.sources[first_url] = workbook_bytes([["url"], [A_URL]])
    fake_store.sources[last_url] = workbook_bytes([["url"], [A_URL]])
    fake_store.tiers[("acct", "cont", "a.txt")] = "Archive"

    response = client.post("/process", content=blob_created_body(first_url, missing_url, last_url))

    assert response.status_code == 500
    assert response.text.startswith("failed to process blob:")
    assert "missing.xlsx" in response.text
    assert ("outacct", "outcont", "first_processed.xlsx") in fake_store.objects
    assert ("outacct", "outcont", "last_processed.xlsx") not in fake_store.objects


def test_missing_output_configuration_is_a_server_error(client, fake_store, monkeypatch) -> None:
    monkeypatch.setattr(settings, "OUTPUT_STORAGE_ACCOUNT", None)
    monkeypatch.setattr(settings, "OUTPUT_STORAGE_CONTAINER", None)

    response = client.post("/process", content=blob_created_body(SOURCE_URL))

    assert response.status_code == 500
    assert "OUTPUT_STORAGE_ACCOUNT" in response.text
    assert fake_store.calls == []


def test_upload_failure_is_a_server_error(client, fake_store, output_settings) -> None:
    fake_store.sources[SOURCE_URL] = workbook_bytes([["url"], [A_URL]])
    fake_store.tiers[("acct", "cont", "a.txt")] = "Cool"
    fake_store.fail_upload = True

    response = client.post("/process", content=blob_created_body(SOURCE_URL))

    assert response.status_code == 500
    assert "failed to upload" in response.text


def test_process_rejects_get(client) -> None:
    assert client.get("/process").status_code == 405
