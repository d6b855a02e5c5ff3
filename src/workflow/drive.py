"""
Google Drive implementation of the remote backup file.

The browser performs the OAuth consent flow with the configured client id
and hands the resulting access token to sign_in(); this adapter only uses
the token against the Drive v3 API.
"""
from __future__ import annotations

import asyncio
import io
import json
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from httplib2 import HttpLib2Error

from .errors import RemoteAuthError, RemoteError, RemoteNotReadyError
from .models import DriveConfig
from .remote import RemoteDocument, RemoteFile

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive.file"]
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
MIME_JSON = "application/json"

T = TypeVar("T")


def build_drive_service(credentials: Credentials, api_key: str) -> Any:
    return build("drive", "v3", credentials=credentials, developerKey=api_key, cache_discovery=False)


class GoogleDriveFile(RemoteFile):
    """
    Backup file stored in the user's Drive, looked up by exact name among
    non-trashed files. The first match wins; the file is created on the
    first write. The file's modifiedTime serves as its revision.
    """

    def __init__(
        self,
        file_name: str,
        build_service: Callable[[Credentials, str], Any] = build_drive_service,
        http: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(file_name)
        self._build_service = build_service
        self._http = http or requests.Session()
        self._config = DriveConfig()
        self._credentials: Optional[Credentials] = None
        self._service: Any = None

    @property
    def ready(self) -> bool:
        return self._config.complete

    @property
    def signed_in(self) -> bool:
        return self._service is not None

    def configure(self, config: DriveConfig) -> None:
        self._config = config
        self._credentials = None
        self._service = None

    def sign_in(self, access_token: str) -> None:
        if not self.ready:
            raise RemoteNotReadyError("Drive credentials are not configured")
        if not access_token:
            raise RemoteAuthError("Empty access token")
        credentials = Credentials(token=access_token, client_id=self._config.client_id, scopes=SCOPES)
        try:
            self._service = self._build_service(credentials, self._config.api_key)
        except (HttpError, GoogleAuthError, HttpLib2Error, OSError) as exc:
            raise RemoteError(f"Could not connect to Google Drive: {exc}") from exc
        self._credentials = credentials
        logger.info("Signed in to Google Drive")

    def sign_out(self) -> None:
        credentials = self._credentials
        self._credentials = None
        self._service = None
        if credentials is None or not credentials.token:
            return
        try:
            self._http.post(
                REVOKE_URL,
                params={"token": credentials.token},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=10,
            )
        except requests.RequestException as exc:
            logger.warning("Token revocation failed: %s", exc)

    async def revision(self) -> Optional[str]:
        self._require_session()
        found = await self._call(self._find_file)
        return found.get("modifiedTime") if found else None

    async def read(self) -> Optional[RemoteDocument]:
        self._require_session()
        found = await self._call(self._find_file)
        if not found:
            return None
        content = await self._call(lambda: self._service.files().get_media(fileId=found["id"]).execute())
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        try:
            data = json.loads(content)
        except ValueError as exc:
            raise RemoteError("Remote backup is not valid JSON") from exc
        if not isinstance(data, dict):
            raise RemoteError("Remote backup is not a JSON object")
        return RemoteDocument(data=data, revision=found.get("modifiedTime"))

    async def write(self, document: Dict[str, Any]) -> str:
        self._require_session()
        body = json.dumps(document).encode("utf-8")

        def upload() -> Dict[str, Any]:
            found = self._find_file()
            media = MediaIoBaseUpload(io.BytesIO(body), mimetype=MIME_JSON, resumable=False)
            files = self._service.files()
            if found:
                return files.update(fileId=found["id"], media_body=media, fields="id, modifiedTime").execute()
            metadata = {"name": self.file_name, "mimeType": MIME_JSON}
            return files.create(body=metadata, media_body=media, fields="id, modifiedTime").execute()

        result = await self._call(upload)
        logger.info("Wrote %s (%d bytes) to Google Drive", self.file_name, len(body))
        return result.get("modifiedTime") or result["id"]

    def _find_file(self) -> Optional[Dict[str, Any]]:
        name = self.file_name.replace("\\", "\\\\").replace("'", "\\'")
        response = self._service.files().list(
            q=f"name = '{name}' and trashed = false",
            fields="files(id, name, modifiedTime)",
            spaces="drive",
        ).execute()
        files = response.get("files", [])
        return files[0] if files else None

    async def _call(self, fn: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(fn)
        except HttpError as exc:
            status = exc.resp.status
            logger.error("Drive request failed with HTTP %s", status)
            if status in (401, 403):
                raise RemoteAuthError("Google Drive rejected the session; sign in again") from exc
            raise RemoteError(f"Drive request failed with HTTP {status}") from exc
        except GoogleAuthError as exc:
            raise RemoteAuthError(f"Google authentication failed: {exc}") from exc
        except (HttpLib2Error, OSError) as exc:
            logger.error("Drive request failed: %s", exc)
            raise RemoteError(f"Drive request failed: {exc}") from exc
