# app/api_routes.py
import logging
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import JSONResponse

from .config import settings
from .schemas import SessionResponse
from .store import SessionEntry, SessionStore, get_store
from .utils import DropRejected, accept_drop
from .workflow import UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter()


def get_entry(session_id: str, store: SessionStore = Depends(get_store)) -> SessionEntry:
    entry = store.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="session not found")
    return entry


def part_size(f: UploadFile) -> int:
    if f.size is not None:
        return f.size
    # measure the spooled part without pulling it into memory
    f.file.seek(0, os.SEEK_END)
    size = f.file.tell()
    f.file.seek(0)
    return size


def describe_uploads(files: List[UploadFile]) -> List[UploadedFile]:
    """Name, type and size of each part; no bytes are read here."""
    return [
        UploadedFile(
            filename=f.filename or "",
            content_type=f.content_type or "",
            size=part_size(f),
        )
        for f in files
    ]


async def drop_files(entry: SessionEntry, files: List[UploadFile]) -> bool:
    """Pass a drop through the drop zone into the session.

    Returns False when the drop zone refused it (the session is then failed
    with the rejection message).
    """
    # browsers post an empty, unnamed part when nothing was selected
    files = [f for f in files if f.filename]
    if not files:
        raise HTTPException(status_code=400, detail="no file uploaded")
    try:
        accepted = accept_drop(describe_uploads(files))
    except DropRejected as e:
        logger.info("session %s: drop rejected (%s)", entry.controller.session_id, e.code)
        entry.controller.reject(e.message)
        return False

    # bounded read: submit re-checks the size if the part under-reported it
    data = await files[0].read(settings.max_upload_bytes + 1)
    entry.controller.submit(
        UploadedFile(
            filename=accepted.filename,
            content_type=accepted.content_type,
            data=data,
        )
    )
    return True


# --- Session endpoints ---


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(store: SessionStore = Depends(get_store)):
    return store.create().response()


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(entry: SessionEntry = Depends(get_entry)):
    return entry.response()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_store)):
    if not store.discard(session_id):
        raise HTTPException(status_code=404, detail="session not found")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/upload", response_model=SessionResponse)
async def upload_image(
    file: List[UploadFile] = File(...),
    entry: SessionEntry = Depends(get_entry),
):
    if not await drop_files(entry, file):
        return JSONResponse(
            status_code=422, content=entry.response().model_dump(mode="json")
        )
    state = entry.response()
    if state.is_processing:
        return JSONResponse(status_code=202, content=state.model_dump(mode="json"))
    return state


@router.post("/sessions/{session_id}/dismiss-error", response_model=SessionResponse)
async def dismiss_error(entry: SessionEntry = Depends(get_entry)):
    entry.controller.dismiss_error()
    return entry.response()


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(entry: SessionEntry = Depends(get_entry)):
    entry.controller.reset()
    return entry.response()


@router.get("/sessions/{session_id}/image")
async def session_image(h: Optional[str] = None, entry: SessionEntry = Depends(get_entry)):
    image = entry.controller.image
    # a handle id from a superseded upload behaves like a revoked blob url
    if image is None or image.released or (h is not None and h != image.handle_id):
        raise HTTPException(status_code=404, detail="no image for this session")
    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={"Cache-Control": "no-store"},
    )
