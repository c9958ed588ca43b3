"""
Tests for infra/ocr/google_drive.py

The Drive service is built from the discovery document bundled with
google-api-python-client and served by an in-process Http; no network access.
"""

import json
import threading

import google_auth_httplib2
import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from infra.errors import PermanentBackendError, TransientBackendError
from infra.ocr import GoogleDriveBackend, StaticCredentials, classify_http_error
from infra.ocr.google_drive import GOOGLE_DOC_MIME_TYPE


class RecordingHttp:
    """Answers requests from a script of (status, body) pairs or exceptions."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, uri, method="GET", body=None, headers=None, **kwargs):
        self.requests.append({"uri": uri, "method": method, "body": body, "headers": headers or {}})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        status, content = response
        if not isinstance(content, bytes):
            content = json.dumps(content).encode("utf-8")
        return httplib2.Response({"status": str(status)}), content


def http_error(status, body=b"", uri="https://www.googleapis.com/drive/v3/files/x"):
    content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return HttpError(httplib2.Response({"status": str(status)}), content, uri=uri)


def error_body(reason, code=403):
    return {"error": {"code": code, "message": "denied", "errors": [{"domain": "usageLimits", "reason": reason}]}}


def backend_with(responses):
    http = RecordingHttp(responses)
    backend = GoogleDriveBackend(
        StaticCredentials("secret-token"),
        service_factory=lambda: build("drive", "v3", http=http, cache_discovery=False, static_discovery=True),
    )
    return backend, http


def body_text(request):
    body = request["body"]
    return body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body


class TestClassifyHttpError:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient_statuses(self, status):
        assert isinstance(classify_http_error(http_error(status)), TransientBackendError)

    @pytest.mark.parametrize("reason", ["rateLimitExceeded", "userRateLimitExceeded"])
    def test_403_rate_limit_is_transient(self, reason):
        error = classify_http_error(http_error(403, error_body(reason)))
        assert isinstance(error, TransientBackendError)
        assert reason in str(error)

    @pytest.mark.parametrize("status", [400, 401, 404, 409])
    def test_permanent_statuses(self, status):
        error = classify_http_error(http_error(status))
        assert isinstance(error, PermanentBackendError)
        assert error.status_code == status

    def test_403_other_reason_is_permanent(self):
        error = classify_http_error(http_error(403, error_body("insufficientPermissions")))
        assert isinstance(error, PermanentBackendError)

    def test_403_without_body_is_permanent(self):
        assert isinstance(classify_http_error(http_error(403, b"not json")), PermanentBackendError)

    def test_reason_found_next_to_rpc_details(self):
        body = error_body("rateLimitExceeded")
        body["error"]["details"] = [{"@type": "type.googleapis.com/google.rpc.ErrorInfo", "domain": "googleapis.com"}]
        assert isinstance(classify_http_error(http_error(403, body)), TransientBackendError)


class TestGoogleDriveBackend:
    def test_upload_creates_google_doc(self, tmp_path):
        image = tmp_path / "page-00001.png"
        image.write_bytes(b"fake png bytes")
        backend, http = backend_with([(200, {"id": "abc123"})])

        assert backend.upload(image) == "abc123"

        sent = http.requests[0]
        assert sent["method"] == "POST"
        assert "/upload/drive/v3/files" in sent["uri"]
        assert "uploadType=multipart" in sent["uri"]
        assert GOOGLE_DOC_MIME_TYPE in body_text(sent)
        assert "image/png" in body_text(sent)
        assert "fake png bytes" in body_text(sent)

    def test_upload_without_id_is_permanent(self, tmp_path):
        image = tmp_path / "a.png"
        image.write_bytes(b"x")
        backend, _ = backend_with([(200, {"kind": "drive#file"})])

        with pytest.raises(PermanentBackendError):
            backend.upload(image)

    def test_read_back_exports_plain_text(self):
        backend, http = backend_with([(200, "\ufeffhällo".encode("utf-8"))])

        assert backend.read_back("abc") == "\ufeffhällo"
        sent = http.requests[0]
        assert "/files/abc/export" in sent["uri"]
        assert "mimeType=text%2Fplain" in sent["uri"]

    def test_delete(self):
        backend, http = backend_with([(204, b"")])
        backend.delete("abc")
        assert http.requests[0]["method"] == "DELETE"
        assert http.requests[0]["uri"].split("?")[0].endswith("/files/abc")

    def test_http_errors_classified(self):
        backend, http = backend_with([(503, b""), (404, b""), (403, error_body("userRateLimitExceeded"))])
        with pytest.raises(TransientBackendError):
            backend.read_back("abc")
        with pytest.raises(PermanentBackendError):
            backend.read_back("abc")
        with pytest.raises(TransientBackendError):
            backend.read_back("abc")
        assert len(http.requests) == 3

    @pytest.mark.parametrize("exc", [
        ConnectionResetError("reset"),
        TimeoutError("slow"),
        httplib2.ServerNotFoundError("no dns"),
    ])
    def test_transport_errors_are_transient(self, exc):
        backend, _ = backend_with([exc])
        with pytest.raises(TransientBackendError):
            backend.delete("abc")

    def test_unrefreshable_credentials_are_permanent(self):
        backend, _ = backend_with([RefreshError("token expired and no refresh_token")])
        with pytest.raises(PermanentBackendError, match="refreshed"):
            backend.delete("abc")

    def test_one_service_per_thread(self):
        built = []

        def factory():
            built.append(threading.current_thread().name)
            return object()

        backend = GoogleDriveBackend(StaticCredentials("t"), service_factory=factory)
        assert backend.service is backend.service

        worker = threading.Thread(target=lambda: backend.service)
        worker.start()
        worker.join()

        assert len(built) == 2

    def test_default_service_uses_authorized_http(self):
        backend = GoogleDriveBackend(StaticCredentials("secret-token"), timeout=5)

        http = backend.service._http

        assert isinstance(http, google_auth_httplib2.AuthorizedHttp)
        assert http.credentials.token == "secret-token"
        assert http.http.timeout == 5
