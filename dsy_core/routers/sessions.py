"""
Sessions Router - DSY session IDs and cloud sync.

    POST /sessions             new DSY-XXXXXX session ID
    POST /sessions/{id}/sync   push a snapshot to the session backend
    GET  /sessions/{id}        restore a snapshot
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from dsy_core.deps import get_session_client
from dsy_core.services.project_store import generate_session_id
from dsy_core.services.session_service import CloudSessionClient, SessionSnapshot

logger = logging.getLogger("dsy.routers.sessions")

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionCreated(BaseModel):
    session_id: str


class SnapshotIn(BaseModel):
    project: Dict[str, Any] = Field(default_factory=dict)
    assets: List[Dict[str, Any]] = Field(default_factory=list)
    chat_history: List[Dict[str, Any]] = Field(default_factory=list)


class SyncResponse(BaseModel):
    success: bool
    message: str = ""


class SnapshotOut(BaseModel):
    session_id: str
    project: Dict[str, Any]
    assets: List[Dict[str, Any]]
    chat_history: List[Dict[str, Any]]
    last_active: str = ""


@router.post("", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
async def create_session():
    return SessionCreated(session_id=generate_session_id())


@router.post("/{session_id}/sync", response_model=SyncResponse)
async def sync_session(
    session_id: str,
    request: SnapshotIn,
    client: CloudSessionClient = Depends(get_session_client),
):
    snapshot = SessionSnapshot(
        project=request.project,
        assets=request.assets,
        chat_history=request.chat_history,
    )
    result = await client.sync_session(session_id, snapshot)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)
    return SyncResponse(success=True, message=result.message)


@router.get("/{session_id}", response_model=SnapshotOut)
async def get_session(
    session_id: str,
    client: CloudSessionClient = Depends(get_session_client),
):
    result = await client.retrieve_session(session_id)
    if result.not_found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)

    snapshot = result.snapshot
    return SnapshotOut(
        session_id=session_id,
        project=snapshot.project,
        assets=snapshot.assets,
        chat_history=snapshot.chat_history,
        last_active=snapshot.last_active.isoformat() if snapshot.last_active else "",
    )
