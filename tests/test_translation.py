import base64

import pytest
import requests

from core.errors import InternalError, TranslationServiceError
from services.translation_service import (
    TranslationClient,
    generate_object_key,
    get_translation_client,
    object_urn,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeHTTP:
    """Stands in for the requests module; replays queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def _token_response():
    return FakeResponse(200, {"access_token": "remote-token", "token_type": "Bearer", "expires_in": 3599})


def test_request_access_token(settings):
    http = FakeHTTP(_token_response())
    client = TranslationClient(settings, http=http)

    assert client.request_access_token(scope="viewables:read") == "remote-token"
    method, url, kwargs = http.calls[0]
    assert method == "POST"
    assert url == "https://forge.test/authentication/v2/token"
    assert kwargs["data"]["grant_type"] == "client_credentials"
    assert kwargs["data"]["scope"] == "viewables:read"


def test_default_http_layer_is_the_requests_module(settings):
    assert TranslationClient(settings).http is requests


def test_missing_credentials(settings):
    client = TranslationClient(settings.model_copy(update={"FORGE_CLIENT_ID": None}), http=FakeHTTP())
    with pytest.raises(InternalError):
        client.request_access_token()


def test_token_failure_embeds_remote_status_and_body(settings):
    client = TranslationClient(settings, http=FakeHTTP(FakeResponse(401, text='{"errorCode":"AUTH-001"}')))
    with pytest.raises(TranslationServiceError) as excinfo:
        client.request_access_token()
    assert excinfo.value.remote_status == 401
    assert "401" in excinfo.value.message
    assert "AUTH-001" in excinfo.value.message


def test_ensure_bucket_treats_conflict_as_success(settings):
    http = FakeHTTP(FakeResponse(409, text="Bucket already exists"), FakeResponse(200, {}))
    client = TranslationClient(settings, http=http)

    client.ensure_bucket("t", "test-bucket")
    client.ensure_bucket("t", "test-bucket")
    assert http.calls[0][2]["json"] == {"bucketKey": "test-bucket", "policyKey": "transient"}
    assert http.calls[0][2]["headers"]["Authorization"] == "Bearer t"


def test_ensure_bucket_failure(settings):
    client = TranslationClient(settings, http=FakeHTTP(FakeResponse(403, text="forbidden")))
    with pytest.raises(TranslationServiceError):
        client.ensure_bucket("t", "test-bucket")


def test_put_object_uses_long_timeout(settings):
    http = FakeHTTP(FakeResponse(200, {}))
    TranslationClient(settings, http=http).put_object("t", "test-bucket", "tower.rvt", b"bytes")

    method, url, kwargs = http.calls[0]
    assert method == "PUT"
    assert url == "https://forge.test/oss/v2/buckets/test-bucket/objects/tower.rvt"
    assert kwargs["data"] == b"bytes"
    assert kwargs["timeout"] == 30 * 60
    assert kwargs["headers"]["Content-Type"] == "application/octet-stream"


def test_submit_translation_accepts_created(settings):
    http = FakeHTTP(FakeResponse(201, {"result": "created"}))
    TranslationClient(settings, http=http).submit_translation("t", "abc")
    job = http.calls[0][2]["json"]
    assert job["input"] == {"urn": "abc"}
    assert job["output"]["formats"][0]["type"] == "svf2"


def test_transport_error_is_wrapped(settings):
    http = FakeHTTP(requests.ConnectionError("connection refused"))
    with pytest.raises(TranslationServiceError) as excinfo:
        TranslationClient(settings, http=http).get_manifest("t", "abc")
    assert "connection refused" in excinfo.value.message


def test_object_key_and_urn():
    key = generate_object_key("Tower A (v2).IFC", now=1700000000)
    assert key == "Tower_A_v2_1700000000.ifc"

    urn = object_urn("test-bucket", key)
    assert "=" not in urn
    padded = urn + "=" * (-len(urn) % 4)
    assert base64.urlsafe_b64decode(padded).decode() == f"urn:adsk.objects:os.object:test-bucket/{key}"


@pytest.fixture
def fake_http(app, settings):
    http = FakeHTTP()
    app.dependency_overrides[get_translation_client] = lambda: TranslationClient(settings, http=http)
    yield http
    app.dependency_overrides.clear()


def test_upload_route_runs_the_whole_chain(client, alice, fake_http):
    fake_http.responses = [
        _token_response(),
        FakeResponse(409, text="exists"),
        FakeResponse(200, {"objectKey": "k"}),
        FakeResponse(200, {"result": "success"}),
    ]
    resp = client.post(
        "/api/forge/upload",
        files={"file": ("Tower A.ifc", b"ISO-10303-21;", "application/octet-stream")},
        headers=alice["headers"],
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["bucketKey"] == "test-bucket"
    assert data["objectKey"].startswith("Tower_A_")
    assert data["objectKey"].endswith(".ifc")
    assert data["urn"] == object_urn("test-bucket", data["objectKey"])
    assert data["status"] == "processing"
    assert [c[0] for c in fake_http.calls] == ["POST", "POST", "PUT", "POST"]


def test_upload_route_surfaces_remote_failure(client, alice, fake_http):
    fake_http.responses = [
        _token_response(),
        FakeResponse(200, {}),
        FakeResponse(500, text="storage unavailable"),
    ]
    resp = client.post(
        "/api/forge/upload",
        files={"file": ("a.rvt", b"data", "application/octet-stream")},
        headers=alice["headers"],
    )
    assert resp.status_code == 500
    assert "storage unavailable" in resp.json()["detail"]
    # No translation job after a failed upload
    assert len(fake_http.calls) == 3


def test_upload_route_requires_a_file(client, alice, fake_http):
    resp = client.post("/api/forge/upload", headers=alice["headers"])
    assert resp.status_code == 400


def test_status_route_returns_manifest(client, alice, fake_http):
    manifest = {"urn": "abc", "status": "inprogress", "progress": "25% complete", "derivatives": []}
    fake_http.responses = [_token_response(), FakeResponse(200, manifest)]

    resp = client.get("/api/forge/status/abc", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == manifest
    assert fake_http.calls[1][1] == "https://forge.test/modelderivative/v2/designdata/abc/manifest"


def test_viewer_token_route(client, alice, fake_http):
    fake_http.responses = [_token_response()]
    resp = client.post("/api/forge/token", json={}, headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == {"access_token": "remote-token"}
    assert fake_http.calls[0][2]["data"]["scope"] == "viewables:read"


def test_translation_routes_require_authentication(client):
    assert client.get("/api/forge/status/abc").status_code == 401
    assert client.post("/api/forge/token", json={}).status_code == 401
