from abc import ABC, abstractmethod
from pathlib import Path

from google.auth.credentials import Credentials


class ExtractionBackend(ABC):
    """Remote store that converts an uploaded image into text.

    Implementations classify every failure as TransientBackendError (worth
    retrying) or PermanentBackendError (not). They do no retrying themselves.
    """

    @abstractmethod
    def upload(self, path: Path) -> str:
        """Upload the image and return the remote artifact id."""
        pass

    @abstractmethod
    def read_back(self, remote_id: str) -> str:
        """Return the raw converted text of a remote artifact."""
        pass

    @abstractmethod
    def delete(self, remote_id: str) -> None:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, as accepted by `inkwell convert --processor`."""
        pass


class CredentialProvider(ABC):
    @abstractmethod
    def credentials(self) -> Credentials:
        """Return google-auth credentials or raise CredentialsUnavailable."""
        pass
