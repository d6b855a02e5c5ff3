from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, status

from ..deps import get_workspace
from ..errors import RemoteError
from ..messages import MessageKind
from ..models import DriveConfig
from ..schemas import AutosaveIn, DriveConfigIn, SessionIn, SettingsOut
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/settings",
    tags=["settings"],
)


def _settings_out(ws: Workspace) -> SettingsOut:
    config = ws.state.drive_config
    return SettingsOut(
        client_id=config.client_id,
        has_api_key=bool(config.api_key),
        autosave_enabled=ws.state.autosave_enabled,
        drive_ready=ws.remote.ready,
        signed_in=ws.remote.signed_in,
        file_name=ws.remote.file_name,
    )


# PUBLIC_INTERFACE
@router.get("/", response_model=SettingsOut, summary="Current settings", description="The API key itself is never returned.")
async def get_settings_view(ws: Workspace = Depends(get_workspace)) -> SettingsOut:
    return _settings_out(ws)


# PUBLIC_INTERFACE
@router.put(
    "/drive",
    response_model=SettingsOut,
    summary="Set Google Drive credentials",
    description="Store the API key and OAuth client id of the user's Google Cloud project. Drops any open session.",
)
async def configure_drive(payload: DriveConfigIn, ws: Workspace = Depends(get_workspace)) -> SettingsOut:
    ws.configure_drive(DriveConfig(api_key=payload.api_key.strip(), client_id=payload.client_id.strip()))
    return _settings_out(ws)


# PUBLIC_INTERFACE
@router.put("/autosave", response_model=SettingsOut, summary="Enable or disable auto-save")
async def set_autosave(payload: AutosaveIn, ws: Workspace = Depends(get_workspace)) -> SettingsOut:
    ws.set_autosave(payload.enabled)
    return _settings_out(ws)


# PUBLIC_INTERFACE
@router.post(
    "/drive/session",
    response_model=SettingsOut,
    summary="Sign in to Google Drive",
    description="Open a drive session with the OAuth access token obtained by the browser.",
    responses={401: {"description": "Token rejected"}, 503: {"description": "Credentials not configured"}},
)
async def sign_in(payload: SessionIn, ws: Workspace = Depends(get_workspace)) -> SettingsOut:
    try:
        ws.remote.sign_in(payload.access_token)
    except RemoteError:
        ws.messages.post(MessageKind.ERROR, "Error while signing in.")
        raise
    ws.messages.post(MessageKind.SUCCESS, "Connected to Google Drive")
    return _settings_out(ws)


# PUBLIC_INTERFACE
@router.delete(
    "/drive/session",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out of Google Drive",
    description="Close the session and revoke the access token.",
)
async def sign_out(ws: Workspace = Depends(get_workspace)) -> None:
    await asyncio.to_thread(ws.remote.sign_out)
    ws.messages.post(MessageKind.INFO, "Disconnected from Google Drive")
    return None
