import asyncio
import json
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from src.workflow.drive import REVOKE_URL, GoogleDriveFile
from src.workflow.errors import RemoteAuthError, RemoteError, RemoteNotReadyError
from src.workflow.models import DriveConfig


def http_error(status):
    return HttpError(httplib2.Response({"status": status}), b"")


def make_drive(existing=None):
    service = MagicMock()
    files = service.files.return_value
    files.list.return_value.execute.return_value = {"files": existing or []}
    built = []

    def build_service(credentials, api_key):
        built.append((credentials, api_key))
        return service

    http = MagicMock()
    drive = GoogleDriveFile("workflow_data.json", build_service=build_service, http=http)
    drive.configure(DriveConfig(api_key="key", client_id="client"))
    drive.sign_in("token")
    return drive, files, built, http


class TestSession:
    def test_sign_in_requires_credentials(self):
        drive = GoogleDriveFile("workflow_data.json", build_service=MagicMock())
        assert drive.ready is False
        with pytest.raises(RemoteNotReadyError):
            drive.sign_in("token")

    def test_sign_in_builds_service(self):
        drive, _, built, _ = make_drive()
        assert drive.signed_in is True
        credentials, api_key = built[0]
        assert credentials.token == "token"
        assert api_key == "key"

    def test_sign_out_revokes_token(self):
        drive, _, _, http = make_drive()
        drive.sign_out()
        assert drive.signed_in is False
        args, kwargs = http.post.call_args
        assert args[0] == REVOKE_URL
        assert kwargs["params"] == {"token": "token"}

    def test_reconfigure_drops_session(self):
        drive, _, _, _ = make_drive()
        drive.configure(DriveConfig(api_key="other", client_id="client"))
        assert drive.signed_in is False

    def test_requests_need_session(self):
        drive = GoogleDriveFile("workflow_data.json", build_service=MagicMock())
        drive.configure(DriveConfig(api_key="key", client_id="client"))
        with pytest.raises(RemoteAuthError):
            asyncio.run(drive.read())


class TestFiles:
    def test_read_missing_file(self):
        drive, files, _, _ = make_drive()
        assert asyncio.run(drive.read()) is None
        assert asyncio.run(drive.revision()) is None
        query = files.list.call_args.kwargs["q"]
        assert query == "name = 'workflow_data.json' and trashed = false"

    def test_read_existing_file(self):
        drive, files, _, _ = make_drive([{"id": "f1", "name": "workflow_data.json", "modifiedTime": "t1"}])
        files.get_media.return_value.execute.return_value = json.dumps({"tasks": []}).encode("utf-8")

        document = asyncio.run(drive.read())
        assert document.data == {"tasks": []}
        assert document.revision == "t1"
        files.get_media.assert_called_with(fileId="f1")

    def test_read_invalid_json(self):
        drive, files, _, _ = make_drive([{"id": "f1", "modifiedTime": "t1"}])
        files.get_media.return_value.execute.return_value = b"not json"
        with pytest.raises(RemoteError):
            asyncio.run(drive.read())

    def test_first_write_creates_file(self):
        drive, files, _, _ = make_drive()
        files.create.return_value.execute.return_value = {"id": "f1", "modifiedTime": "t1"}

        assert asyncio.run(drive.write({"notes": []})) == "t1"
        kwargs = files.create.call_args.kwargs
        assert kwargs["body"] == {"name": "workflow_data.json", "mimeType": "application/json"}
        files.update.assert_not_called()

    def test_write_overwrites_existing_file(self):
        drive, files, _, _ = make_drive([{"id": "f1", "modifiedTime": "t1"}])
        files.update.return_value.execute.return_value = {"id": "f1", "modifiedTime": "t2"}

        assert asyncio.run(drive.write({"notes": []})) == "t2"
        assert files.update.call_args.kwargs["fileId"] == "f1"
        files.create.assert_not_called()


class TestErrors:
    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_session(self, status):
        drive, files, _, _ = make_drive()
        files.list.return_value.execute.side_effect = http_error(status)
        with pytest.raises(RemoteAuthError):
            asyncio.run(drive.read())

    def test_server_error(self):
        drive, files, _, _ = make_drive()
        files.list.return_value.execute.side_effect = http_error(500)
        with pytest.raises(RemoteError) as info:
            asyncio.run(drive.revision())
        assert not isinstance(info.value, RemoteAuthError)

    def test_network_error(self):
        drive, files, _, _ = make_drive()
        files.list.return_value.execute.side_effect = httplib2.HttpLib2Error("unreachable")
        with pytest.raises(RemoteError):
            asyncio.run(drive.write({}))
