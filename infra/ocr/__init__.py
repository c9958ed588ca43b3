from .provider import ExtractionBackend, CredentialProvider
from .client import ExtractionClient, normalize_text, EXPORT_ARTIFACT_MARKER
from .credentials import StaticCredentials, TokenFileCredentials, credentials_from_config, DRIVE_SCOPES
from .google_drive import GoogleDriveBackend, classify_http_error
from .registry import create_backend, list_backends, register_backend

__all__ = [
    "ExtractionBackend",
    "CredentialProvider",
    "ExtractionClient",
    "normalize_text",
    "EXPORT_ARTIFACT_MARKER",
    "StaticCredentials",
    "TokenFileCredentials",
    "credentials_from_config",
    "DRIVE_SCOPES",
    "GoogleDriveBackend",
    "classify_http_error",
    "list_backends",
    "register_backend",
    "create_backend",
]
