import dataclasses
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from src.workflow.assist import AssistError, TextAssistant
from src.workflow.main import create_app
from src.workflow.settings import Settings, get_settings
from src.workflow.workspace import Workspace


class FakeGemini:
    """Stands in for GeminiClient: replays canned answers and records prompts."""

    def __init__(self, answers: List[str] = (), error: str = None):
        self.answers = list(answers)
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise AssistError(self.error)
        return self.answers.pop(0)


@pytest.fixture
def settings() -> Settings:
    return dataclasses.replace(
        get_settings(),
        persistence_backend="memory",
        remote_backend="memory",
        remote_file_name="workflow_data.json",
        cors_allow_origins=["*"],
        enable_basic_auth=False,
        basic_auth_username=None,
        basic_auth_password=None,
        autosave_debounce_seconds=60.0,
        sync_success_display_seconds=60.0,
        status_message_seconds=60.0,
        gemini_api_key=None,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def workspace(client: TestClient) -> Workspace:
    return client.app.state.workspace


@pytest.fixture
def fake_ai(workspace: Workspace):
    """Install a FakeGemini behind the workspace's text assistant."""

    def install(*answers: str, error: str = None) -> FakeGemini:
        fake = FakeGemini(answers, error=error)
        assistant = TextAssistant(fake)
        workspace.kanban.assistant = assistant
        workspace.notepad.assistant = assistant
        return fake

    return install


@pytest.fixture
def connected(client: TestClient) -> TestClient:
    """Client whose workspace has drive credentials and an open session."""
    res = client.put("/api/v1/settings/drive", json={"apiKey": "key", "clientId": "client"})
    assert res.status_code == 200
    res = client.post("/api/v1/settings/drive/session", json={"accessToken": "token"})
    assert res.status_code == 200
    return client
