#!/usr/bin/env python3
"""
Google Drive OCR backend.

Uploading an image with the Google Docs mime type makes Drive run OCR on it;
exporting the resulting document as text/plain reads the text back. The
document is deleted afterwards by the caller (ExtractionClient).

Requests go through google-api-python-client with num_retries=0, so every
retry decision stays with RetryPolicy. Credentials come from google-auth and
are refreshed by the authorized transport when the access token expires.

Error classification:
- 429, 403 rateLimitExceeded/userRateLimitExceeded, 5xx -> TransientBackendError
- connection errors and timeouts                        -> TransientBackendError
- any other 4xx (400, 401, 403, 404, ...)               -> PermanentBackendError
- credentials that cannot be refreshed                  -> PermanentBackendError
"""

import json
import mimetypes
import socket
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, List, Optional

import google_auth_httplib2
import httplib2
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from infra.errors import BackendError, PermanentBackendError, TransientBackendError
from infra.logger import PipelineLogger, create_logger
from .provider import CredentialProvider, ExtractionBackend

GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"
EXPORT_MIME_TYPE = "text/plain"
RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded"}
TRANSPORT_ERRORS = (
    httplib2.HttpLib2Error,
    TransportError,
    ConnectionError,
    socket.timeout,
    TimeoutError,
)


def error_reasons(error: HttpError) -> List[str]:
    """`reason` fields of the error. Falls back to the body's error.errors list
    when error_details holds something else (such as google.rpc details)."""
    details = getattr(error, "error_details", None)
    if not isinstance(details, list) or not any(isinstance(d, dict) and d.get("reason") for d in details):
        try:
            details = json.loads(error.content.decode("utf-8"))["error"]["errors"]
        except (ValueError, KeyError, TypeError, AttributeError):
            return []
    if not isinstance(details, list):
        return []
    return [d["reason"] for d in details if isinstance(d, dict) and d.get("reason")]


def classify_http_error(error: HttpError) -> BackendError:
    status = int(error.resp.status)
    reasons = error_reasons(error)
    message = f"Drive API returned HTTP {status}"
    if reasons:
        message += f" ({', '.join(reasons)})"
    if error.uri:
        message += f" for {error.uri}"

    if status == 429 or status >= 500:
        return TransientBackendError(message, status_code=status)
    if status == 403 and RATE_LIMIT_REASONS.intersection(reasons):
        return TransientBackendError(message, status_code=status)
    return PermanentBackendError(message, status_code=status)


class GoogleDriveBackend(ExtractionBackend):
    """Drive v3 files API backend.

    `service_factory` builds a Drive service; it is called once per thread
    because httplib2 connections must not be shared between threads.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        timeout: float = 120.0,
        service_factory: Optional[Callable[[], Any]] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.credentials = credentials
        self.timeout = timeout
        self.service_factory = service_factory or self._build_service
        self.logger = logger or create_logger("google_drive", "extract")
        self._local = threading.local()

    @property
    def name(self) -> str:
        return "google_drive"

    def _build_service(self):
        http = google_auth_httplib2.AuthorizedHttp(
            self.credentials.credentials(),
            http=httplib2.Http(timeout=self.timeout),
        )
        return build("drive", "v3", http=http, cache_discovery=False)

    @property
    def service(self):
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._local.service = self.service_factory()
        return service

    def upload(self, path: Path) -> str:
        path = Path(path)
        media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        media = MediaFileUpload(str(path), mimetype=media_type, resumable=False)
        metadata = {"name": uuid.uuid4().hex, "mimeType": GOOGLE_DOC_MIME_TYPE}

        try:
            response = self._execute(
                self.service.files().create(body=metadata, media_body=media, fields="id"),
                "upload",
            )
        finally:
            media.stream().close()

        file_id = response.get("id") if isinstance(response, dict) else None
        if not file_id:
            raise PermanentBackendError(f"Upload response has no file id: {str(response)[:200]}")

        self.logger.debug(f"Uploaded {path.name} as {file_id}", operation="upload")
        return file_id

    def read_back(self, remote_id: str) -> str:
        content = self._execute(
            self.service.files().export_media(fileId=remote_id, mimeType=EXPORT_MIME_TYPE),
            "read_back",
        )
        if isinstance(content, bytes):
            return content.decode("utf-8", errors="replace")
        return content or ""

    def delete(self, remote_id: str) -> None:
        self._execute(self.service.files().delete(fileId=remote_id), "delete")
        self.logger.debug(f"Deleted {remote_id}", operation="delete")

    def _execute(self, request, operation: str):
        try:
            return request.execute(num_retries=0)
        except HttpError as e:
            raise classify_http_error(e) from e
        except RefreshError as e:
            raise PermanentBackendError(f"Drive {operation} failed, credentials could not be refreshed: {e}") from e
        except TRANSPORT_ERRORS as e:
            raise TransientBackendError(f"Drive {operation} failed: {e}") from e
