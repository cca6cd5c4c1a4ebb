"""
Cloud session client - sync and retrieve DSY sessions over HTTP.

The session backend is a thin CRUD endpoint; its storage format is opaque
here beyond the snapshot shape:

    POST {SESSION_API_BASE}/sync               {id, project, assets, chatHistory, lastActive}
    GET  {SESSION_API_BASE}/get-session?id=... -> {"success": true, "session": {...}}
                                                  404 when the ID is unknown

Both calls return result values; nothing is raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from dsy_core.core.config import settings

logger = logging.getLogger("dsy.services.session")


@dataclass
class SessionSnapshot:
    """Everything the UI needs to restore a session."""
    project: Dict[str, Any] = field(default_factory=dict)
    assets: List[Dict[str, Any]] = field(default_factory=list)
    chat_history: List[Dict[str, Any]] = field(default_factory=list)
    last_active: Optional[datetime] = None

    def to_payload(self, session_id: str) -> Dict[str, Any]:
        last_active = self.last_active or datetime.now(timezone.utc)
        return {
            "id": session_id,
            "project": self.project,
            "assets": self.assets,
            "chatHistory": self.chat_history,
            "lastActive": last_active.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionSnapshot":
        last_active = payload.get("lastActive")
        parsed = None
        if isinstance(last_active, str):
            try:
                parsed = datetime.fromisoformat(last_active.replace("Z", "+00:00"))
            except ValueError:
                parsed = None
        return cls(
            project=payload.get("project") or {},
            assets=payload.get("assets") or [],
            chat_history=payload.get("chatHistory") or [],
            last_active=parsed,
        )


@dataclass
class SyncResult:
    success: bool
    message: str = ""
    error: Optional[str] = None


@dataclass
class RetrieveResult:
    success: bool
    snapshot: Optional[SessionSnapshot] = None
    not_found: bool = False
    error: Optional[str] = None


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or default
    return default


class CloudSessionClient:
    """
    Client for the session sync backend.

    Usage:
        client = CloudSessionClient()
        await client.sync_session("DSY-AB12CD", SessionSnapshot(project={...}))
        result = await client.retrieve_session("DSY-AB12CD")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.SESSION_API_BASE).rstrip("/")
        self.timeout = timeout or settings.SESSION_TIMEOUT
        self._transport = transport

    async def sync_session(self, session_id: str, snapshot: SessionSnapshot) -> SyncResult:
        if not session_id:
            return SyncResult(success=False, error="Missing Session ID")

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/sync",
                    json=snapshot.to_payload(session_id),
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error syncing session {session_id}: {e}")
                return SyncResult(success=False, error=f"Network error: {e}")

        if response.status_code != 200:
            error = _error_message(response, "Failed to sync session")
            logger.error(f"Session sync failed ({response.status_code}): {error}")
            return SyncResult(success=False, error=error)

        logger.info(f"Session {session_id} synced")
        return SyncResult(success=True, message=_error_message(response, "Session synced"))

    async def retrieve_session(self, session_id: str) -> RetrieveResult:
        if not session_id:
            return RetrieveResult(success=False, error="Missing Session ID")

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/get-session",
                    params={"id": session_id},
                    timeout=self.timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error retrieving session {session_id}: {e}")
                return RetrieveResult(success=False, error=f"Network error: {e}")

        if response.status_code == 404:
            return RetrieveResult(
                success=False,
                not_found=True,
                error="Session not found. Please check the ID.",
            )
        if response.status_code != 200:
            error = _error_message(response, "Failed to retrieve session")
            logger.error(f"Session retrieve failed ({response.status_code}): {error}")
            return RetrieveResult(success=False, error=error)

        try:
            session = response.json().get("session")
        except (ValueError, AttributeError):
            session = None
        if not isinstance(session, dict):
            return RetrieveResult(success=False, error="Malformed session response")

        return RetrieveResult(success=True, snapshot=SessionSnapshot.from_payload(session))
