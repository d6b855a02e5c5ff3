from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..deps import get_workspace
from ..errors import RemoteError
from ..messages import MessageKind
from ..schemas import LoadOut, MessageOut, SaveOut, SyncStatusOut
from ..workspace import Workspace

router = APIRouter(
    prefix="/api/v1/sync",
    tags=["sync"],
)


# PUBLIC_INTERFACE
@router.get(
    "/status",
    response_model=SyncStatusOut,
    summary="Sync status",
    description="Auto-save status (idle, saving, success, error) and the current transient message, if any.",
)
async def get_status(ws: Workspace = Depends(get_workspace)) -> SyncStatusOut:
    message = ws.messages.current
    return SyncStatusOut(
        status=ws.sync.status,
        pending=ws.sync.pending,
        autosave_enabled=ws.state.autosave_enabled,
        drive_ready=ws.remote.ready,
        signed_in=ws.remote.signed_in,
        revision=ws.state.sync_revision,
        last_error=ws.sync.last_error,
        last_saved_at=ws.sync.last_saved_at,
        message=MessageOut(kind=message.kind, text=message.text, posted_at=message.posted_at) if message else None,
    )


# PUBLIC_INTERFACE
@router.post(
    "/save",
    response_model=SaveOut,
    summary="Save now",
    description=(
        "Write all collections to the backup file in the drive. Fails with 409 when the file was "
        "changed by another writer since the last save or load, unless force=true."
    ),
    responses={401: {"description": "Not signed in"}, 409: {"description": "Remote file changed"}},
)
async def save_now(
    force: bool = Query(False, description="Overwrite the remote file even if it changed"),
    ws: Workspace = Depends(get_workspace),
) -> SaveOut:
    try:
        snapshot = await ws.sync.save(force=force)
    except RemoteError:
        ws.messages.post(MessageKind.ERROR, "Error while saving.")
        raise
    ws.messages.post(MessageKind.SUCCESS, f"Data saved to Google Drive ({ws.remote.file_name})")
    return SaveOut(saved_at=snapshot.last_updated, revision=ws.state.sync_revision)


# PUBLIC_INTERFACE
@router.post(
    "/load",
    response_model=LoadOut,
    summary="Load now",
    description=(
        "Replace local collections with those found in the backup file. Collections missing from "
        "the file are left untouched."
    ),
    responses={401: {"description": "Not signed in"}},
)
async def load_now(ws: Workspace = Depends(get_workspace)) -> LoadOut:
    try:
        snapshot = await ws.sync.load()
    except RemoteError:
        ws.messages.post(MessageKind.ERROR, "Error while loading.")
        raise
    if snapshot is None:
        ws.messages.post(MessageKind.INFO, "No backup file found on the drive.")
        return LoadOut(found=False)
    ws.timesheet.reconcile()
    ws.messages.post(MessageKind.SUCCESS, "Data loaded and synchronized!")
    collections = [name for name in ("projects", "entries", "notes", "tasks") if getattr(snapshot, name) is not None]
    return LoadOut(found=True, collections=collections, last_updated=snapshot.last_updated)


# PUBLIC_INTERFACE
@router.get(
    "/export",
    summary="Download local backup",
    description="The current snapshot as a JSON file attachment.",
)
async def export_backup(ws: Workspace = Depends(get_workspace)) -> JSONResponse:
    snapshot = ws.state.snapshot()
    filename = f"workflow-backup-{date.today().isoformat()}.json"
    return JSONResponse(
        content=snapshot.to_document(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
