from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Optional

from .errors import RemoteAuthError, RemoteNotReadyError
from .models import DriveConfig
from .settings import Settings


@dataclass(frozen=True)
class RemoteDocument:
    """Content of the remote backup file and the revision it was read at."""

    data: Dict[str, Any]
    revision: Optional[str]


# PUBLIC_INTERFACE
class RemoteFile(ABC):
    """
    A single named JSON file in a cloud drive.

    Lifecycle: configure() with the user's credentials makes the adapter
    ready; sign_in() with an OAuth access token opens a session. Reads and
    writes require both and replace or return the whole file.
    """

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name

    @property
    @abstractmethod
    def ready(self) -> bool:
        """True once credentials are configured."""

    @property
    @abstractmethod
    def signed_in(self) -> bool:
        """True while an authenticated session is active."""

    @abstractmethod
    def configure(self, config: DriveConfig) -> None:
        """Apply credentials. Drops any active session."""

    @abstractmethod
    def sign_in(self, access_token: str) -> None:
        """Open a session with an OAuth access token."""

    @abstractmethod
    def sign_out(self) -> None:
        """Close the session, revoking the token where supported."""

    @abstractmethod
    async def revision(self) -> Optional[str]:
        """Current revision of the remote file, or None if it does not exist."""

    @abstractmethod
    async def read(self) -> Optional[RemoteDocument]:
        """Return the remote file, or None if it does not exist."""

    @abstractmethod
    async def write(self, document: Dict[str, Any]) -> str:
        """Create or overwrite the remote file. Returns the new revision."""

    def _require_session(self) -> None:
        if not self.ready:
            raise RemoteNotReadyError("Drive credentials are not configured")
        if not self.signed_in:
            raise RemoteAuthError("Not signed in to the drive")


class InMemoryRemoteFile(RemoteFile):
    """
    Remote file kept in process memory. Used for tests and offline runs; any
    non-empty access token opens a session.
    """

    def __init__(self, file_name: str = "workflow_data.json") -> None:
        super().__init__(file_name)
        self._lock = RLock()
        self._config = DriveConfig()
        self._token: Optional[str] = None
        self._content: Optional[str] = None
        self._version = 0
        self.writes = 0

    @property
    def ready(self) -> bool:
        return self._config.complete

    @property
    def signed_in(self) -> bool:
        return self._token is not None

    def configure(self, config: DriveConfig) -> None:
        self._config = config
        self._token = None

    def sign_in(self, access_token: str) -> None:
        if not self.ready:
            raise RemoteNotReadyError("Drive credentials are not configured")
        if not access_token:
            raise RemoteAuthError("Empty access token")
        self._token = access_token

    def sign_out(self) -> None:
        self._token = None

    async def revision(self) -> Optional[str]:
        self._require_session()
        with self._lock:
            return None if self._content is None else str(self._version)

    async def read(self) -> Optional[RemoteDocument]:
        self._require_session()
        with self._lock:
            if self._content is None:
                return None
            return RemoteDocument(data=json.loads(self._content), revision=str(self._version))

    async def write(self, document: Dict[str, Any]) -> str:
        self._require_session()
        with self._lock:
            self._content = json.dumps(document)
            self._version += 1
            self.writes += 1
            return str(self._version)


# PUBLIC_INTERFACE
def get_remote(settings: Settings) -> RemoteFile:
    """
    Factory returning the configured remote file adapter.
    - drive: GoogleDriveFile (Drive v3 API)
    - memory: InMemoryRemoteFile
    """
    if settings.remote_backend == "drive":
        from .drive import GoogleDriveFile

        return GoogleDriveFile(settings.remote_file_name)
    return InMemoryRemoteFile(settings.remote_file_name)
