"""
Credential providers for the extraction backend.

The OAuth consent flow is run by an external tool; these providers only
load what it produced. An authorized-user token file (the JSON written by
google-auth's `Credentials.to_json()`, with refresh_token, client_id and
client_secret) gives credentials that google-auth refreshes whenever the
access token expires, so long unattended runs keep working. A bare access
token cannot be refreshed and stops working when it expires.
"""

import json
import threading
from pathlib import Path
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from infra.config import DriveConfig
from infra.errors import CredentialsUnavailable
from .provider import CredentialProvider

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]


class StaticCredentials(CredentialProvider):
    def __init__(self, token: str):
        self._token = (token or "").strip()

    def credentials(self) -> Credentials:
        if not self._token:
            raise CredentialsUnavailable(
                "No access token configured. Set INKWELL_DRIVE_TOKEN or drive.token_file."
            )
        return Credentials(token=self._token)


class TokenFileCredentials(CredentialProvider):
    """Loads a token file once and shares the credentials across threads.

    Refreshable files are refreshed on load when the stored access token is
    missing or expired. A file holding only {"access_token": "..."} (or
    "token") is used as a static token.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._credentials: Optional[Credentials] = None
        self._lock = threading.Lock()

    def credentials(self) -> Credentials:
        with self._lock:
            if self._credentials is None:
                self._credentials = self._load()
            return self._credentials

    def _load(self) -> Credentials:
        if not self.path.exists():
            raise CredentialsUnavailable(f"Token file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialsUnavailable(f"Unreadable token file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise CredentialsUnavailable(f"Token file {self.path} is not a JSON object")

        if data.get("refresh_token"):
            return self._refreshable(data)

        token = data.get("access_token") or data.get("token")
        if not token:
            raise CredentialsUnavailable(f"Token file {self.path} has no access_token or refresh_token")
        return Credentials(token=token)

    def _refreshable(self, data: dict) -> Credentials:
        try:
            credentials = Credentials.from_authorized_user_info(data, scopes=data.get("scopes") or DRIVE_SCOPES)
        except ValueError as e:
            raise CredentialsUnavailable(f"Token file {self.path} is incomplete: {e}") from e

        if not credentials.valid:
            try:
                credentials.refresh(Request())
            except GoogleAuthError as e:
                raise CredentialsUnavailable(f"Could not refresh the token from {self.path}: {e}") from e
        return credentials


def credentials_from_config(
    drive: DriveConfig,
    token_file: Optional[Path] = None,
) -> CredentialProvider:
    """Token file (argument, then config) wins over the configured token string."""
    path = token_file or drive.token_file
    if path is not None:
        return TokenFileCredentials(path)
    return StaticCredentials(drive.resolved_access_token())
