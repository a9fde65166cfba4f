"""End-to-end tests through the FastAPI app with in-memory stores."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from ssfs.daemon.app import create_app
from ssfs.daemon.storage import InMemoryArtifactStore, InMemoryDocumentStore
from ssfs.daemon.utils.config_loader import Settings

CALLBACK_URL = "http://processor.test/submitAsyncActionService"


def _body(objects=3):
    return {
        "token": "tok",
        "apiCallBackKey": "cb",
        "campaignId": 7,
        "callbackUrl": "https://example.invalid/cb",
        "context": {"subscription": {"munchkinId": "M1"}},
        "objectData": [{"leadData": {"id": i}} for i in range(objects)],
    }


class Harness:
    def __init__(self, downstream_status=200, downstream_error=None, callback_url=CALLBACK_URL):
        self.documents = InMemoryDocumentStore(
            {"subscriptions": {"M1": {"quota": 10, "ssfs_account_api_key": "k-1"}}}
        )
        self.artifacts = InMemoryArtifactStore("ssfs-bucket")
        self.sent: list[httpx.Request] = []

        def _downstream(request: httpx.Request) -> httpx.Response:
            self.sent.append(request)
            if downstream_error is not None:
                raise downstream_error
            return httpx.Response(downstream_status)

        settings = Settings(
            backend="memory",
            service_name="ssfs-svc",
            bucket_name="ssfs-bucket",
            callback_url=callback_url,
        )
        self.app = create_app(
            settings,
            documents=self.documents,
            artifacts=self.artifacts,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(_downstream)),
        )

    def quota(self):
        return self.documents.get("subscriptions", "M1")["quota"]


def test_accepted_then_denied_scenario():
    harness = Harness()
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(3), headers={"x-api-key": "k-1"})

        assert resp.status_code == 201
        assert resp.text == "Request accepted successfully"
        assert harness.quota() == 4
        assert len(harness.artifacts.objects) == 1
        key = next(iter(harness.artifacts.objects))
        assert key.startswith("ssfs-svc/M1/data-") and key.endswith(".json")

        assert len(harness.sent) == 1
        sent = harness.sent[0]
        assert str(sent.url) == CALLBACK_URL
        assert sent.headers["internal-routing"] == "ssfs-internal"
        assert json.loads(sent.content) == {
            "filename": key,
            "bucketName": "ssfs-bucket",
            "path": f"gs://ssfs-bucket/{key}",
        }

        resp = client.post("/submitAsyncAction", json=_body(3), headers={"x-api-key": "k-1"})

        assert resp.status_code == 403
        assert "only 2 leads can be processed" in resp.json()["error"]
        assert harness.quota() == 4
        assert len(harness.artifacts.objects) == 1
        assert len(harness.sent) == 1


@pytest.mark.parametrize(
    "headers, error",
    [
        ({}, "Authorization header missing"),
        ({"x-api-key": "wrong"}, "Invalid credentials"),
    ],
)
def test_rejected_credentials_have_no_side_effects(headers, error):
    harness = Harness()
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(), headers=headers)

    assert resp.status_code == 401
    assert resp.json() == {"error": error}
    assert harness.quota() == 10
    assert harness.artifacts.objects == {}
    assert harness.sent == []


def test_empty_batch_rejected():
    harness = Harness()
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(0), headers={"x-api-key": "k-1"})

    assert resp.status_code == 403
    assert resp.json() == {"error": "At least one object is required"}
    assert harness.sent == []


def test_downstream_failure_does_not_change_ack():
    harness = Harness(downstream_status=503)
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(), headers={"x-api-key": "k-1"})

    assert resp.status_code == 201
    assert len(harness.sent) == 1
    assert len(harness.artifacts.objects) == 1


def test_downstream_connection_error_is_logged_only():
    harness = Harness(downstream_error=httpx.ConnectError("refused"))
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(), headers={"x-api-key": "k-1"})

    assert resp.status_code == 201
    assert harness.quota() == 4


def test_missing_callback_url_still_acknowledges():
    harness = Harness(callback_url=None)
    with TestClient(harness.app) as client:
        resp = client.post("/submitAsyncAction", json=_body(), headers={"x-api-key": "k-1"})

    assert resp.status_code == 201
    assert harness.sent == []


def test_invalid_json_is_400():
    harness = Harness()
    with TestClient(harness.app) as client:
        resp = client.post(
            "/submitAsyncAction",
            content=b"{not json",
            headers={"x-api-key": "k-1", "content-type": "application/json"},
        )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Malformed request body"


def test_health():
    harness = Harness()
    with TestClient(harness.app) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
