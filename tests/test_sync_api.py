import asyncio
import dataclasses
import time

from fastapi.testclient import TestClient

from src.workflow.main import create_app


class TestSettings:
    def test_fresh_settings(self, client):
        data = client.get("/api/v1/settings/").json()
        assert data == {
            "clientId": "",
            "hasApiKey": False,
            "autosaveEnabled": False,
            "driveReady": False,
            "signedIn": False,
            "fileName": "workflow_data.json",
        }

    def test_configure_drive_hides_api_key(self, client, workspace):
        res = client.put("/api/v1/settings/drive", json={"apiKey": " key ", "clientId": " client "})
        assert res.status_code == 200
        data = res.json()
        assert data["clientId"] == "client"
        assert data["hasApiKey"] is True
        assert data["driveReady"] is True
        assert "apiKey" not in data
        assert workspace.state.drive_config.api_key == "key"

    def test_sign_in_requires_credentials(self, client):
        res = client.post("/api/v1/settings/drive/session", json={"accessToken": "token"})
        assert res.status_code == 503
        assert res.json()["error"] == "RemoteNotReady"
        assert client.get("/api/v1/sync/status").json()["message"]["kind"] == "error"

    def test_sign_in_and_out(self, connected):
        status = connected.get("/api/v1/sync/status").json()
        assert status["signedIn"] is True
        assert status["message"]["kind"] == "success"

        assert connected.delete("/api/v1/settings/drive/session").status_code == 204
        assert connected.get("/api/v1/settings/").json()["signedIn"] is False

    def test_sign_out_runs_off_the_event_loop(self, connected, workspace, monkeypatch):
        threads = []

        def blocking_sign_out():
            try:
                asyncio.get_running_loop()
                threads.append("event loop")
            except RuntimeError:
                threads.append("worker")

        monkeypatch.setattr(workspace.remote, "sign_out", blocking_sign_out)
        assert connected.delete("/api/v1/settings/drive/session").status_code == 204
        assert threads == ["worker"]

    def test_reconfiguring_drops_session(self, connected):
        connected.put("/api/v1/settings/drive", json={"apiKey": "other", "clientId": "client"})
        assert connected.get("/api/v1/settings/").json()["signedIn"] is False

    def test_toggle_autosave(self, client, workspace):
        res = client.put("/api/v1/settings/autosave", json={"enabled": True})
        assert res.json()["autosaveEnabled"] is True
        assert workspace.state.autosave_enabled is True


class TestManualSync:
    def test_save_requires_session(self, client):
        client.put("/api/v1/settings/drive", json={"apiKey": "key", "clientId": "client"})
        res = client.post("/api/v1/sync/save")
        assert res.status_code == 401
        assert res.json()["error"] == "RemoteAuthError"
        status = client.get("/api/v1/sync/status").json()
        assert status["status"] == "error"
        assert status["lastError"]

    def test_save(self, connected, workspace):
        res = connected.post("/api/v1/sync/save")
        assert res.status_code == 200
        assert res.json()["revision"] == "1"

        status = connected.get("/api/v1/sync/status").json()
        assert status["status"] == "success"
        assert status["revision"] == "1"
        assert status["lastSavedAt"] is not None
        assert "workflow_data.json" in status["message"]["text"]

        document = asyncio.run(workspace.remote.read()).data
        assert {"projects", "entries", "notes", "tasks", "lastUpdated"} <= set(document)
        assert [t["id"] for t in document["tasks"]] == ["1", "2"]

    def test_load_without_backup(self, connected):
        res = connected.post("/api/v1/sync/load")
        assert res.status_code == 200
        assert res.json() == {"found": False, "collections": [], "lastUpdated": None}
        assert connected.get("/api/v1/sync/status").json()["message"]["kind"] == "info"

    def test_load_restores_saved_data(self, connected, workspace):
        project = connected.post("/api/v1/timesheet/projects", json={"name": "Website"}).json()
        connected.post("/api/v1/sync/save")
        connected.delete("/api/v1/timesheet/projects")
        connected.delete("/api/v1/kanban/tasks/1")

        res = connected.post("/api/v1/sync/load")
        assert res.status_code == 200
        body = res.json()
        assert body["found"] is True
        assert body["collections"] == ["projects", "entries", "notes", "tasks"]
        assert [p.id for p in workspace.state.projects] == [project["id"]]
        assert [e.project_id for e in workspace.state.entries] == [project["id"]]
        assert [t.id for t in workspace.state.tasks] == ["1", "2"]

    def test_partial_backup_leaves_other_collections(self, connected, workspace):
        note = connected.post("/api/v1/notes/").json()
        asyncio.run(workspace.remote.write({"tasks": [{"id": "9", "content": "Remote task", "status": "doing"}]}))
        # Remote moved on; the local revision is stale.
        assert connected.post("/api/v1/sync/save").status_code == 409

        body = connected.post("/api/v1/sync/load").json()
        assert body["collections"] == ["tasks"]
        assert [n.id for n in workspace.state.notes] == [note["id"]]
        assert [(t.id, t.status.value) for t in workspace.state.tasks] == [("9", "doing")]
        assert connected.post("/api/v1/sync/save").status_code == 200

    def test_conflicting_save_can_be_forced(self, connected, workspace):
        connected.post("/api/v1/sync/save")
        asyncio.run(workspace.remote.write({"notes": []}))

        res = connected.post("/api/v1/sync/save")
        assert res.status_code == 409
        assert res.json()["error"] == "SyncConflict"

        res = connected.post("/api/v1/sync/save", params={"force": "true"})
        assert res.status_code == 200
        assert res.json()["revision"] == "3"

    def test_export(self, client):
        res = client.get("/api/v1/sync/export")
        assert res.status_code == 200
        disposition = res.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="workflow-backup-')
        assert disposition.endswith('.json"')
        assert [t["id"] for t in res.json()["tasks"]] == ["1", "2"]


class TestAutoSave:
    def test_change_is_saved_after_quiet_period(self, settings):
        app = create_app(dataclasses.replace(settings, autosave_debounce_seconds=0.05))
        with TestClient(app) as client:
            ws = client.app.state.workspace
            client.put("/api/v1/settings/drive", json={"apiKey": "key", "clientId": "client"})
            client.post("/api/v1/settings/drive/session", json={"accessToken": "token"})
            client.put("/api/v1/settings/autosave", json={"enabled": True})
            client.post("/api/v1/timesheet/projects", json={"name": "Website"})

            names = []
            deadline = time.monotonic() + 5
            while time.monotonic() < deadline:
                document = asyncio.run(ws.remote.read())
                if document is not None:
                    names = [p["name"] for p in document.data["projects"]]
                    if names:
                        break
                time.sleep(0.05)
            assert names == ["Website"]
            assert ws.remote.writes >= 1

    def test_nothing_saved_while_disabled(self, settings):
        app = create_app(dataclasses.replace(settings, autosave_debounce_seconds=0.05))
        with TestClient(app) as client:
            ws = client.app.state.workspace
            client.put("/api/v1/settings/drive", json={"apiKey": "key", "clientId": "client"})
            client.post("/api/v1/settings/drive/session", json={"accessToken": "token"})
            client.post("/api/v1/timesheet/projects", json={"name": "Website"})
            time.sleep(0.3)
            assert ws.remote.writes == 0


class TestBasicAuth:
    def test_routers_are_guarded(self, settings):
        app = create_app(
            dataclasses.replace(
                settings,
                enable_basic_auth=True,
                basic_auth_username="alice",
                basic_auth_password="secret",
            )
        )
        with TestClient(app) as client:
            assert client.get("/").status_code == 200
            res = client.get("/api/v1/view/")
            assert res.status_code == 401
            assert res.headers["www-authenticate"] == "Basic"
            assert client.get("/api/v1/view/", auth=("alice", "wrong")).status_code == 401
            assert client.get("/api/v1/view/", auth=("alice", "secret")).status_code == 200
