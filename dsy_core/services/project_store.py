"""
Project store - the key-value persistence seam.

The orchestration layer never owns storage; it talks to whatever the host
provides through the ProjectStore protocol (put/get/delete/list).
InMemoryProjectStore backs the API process and the tests.
"""

import asyncio
import copy
import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger("dsy.services.store")

SESSION_ID_PREFIX = "DSY-"
SESSION_ID_ALPHABET = string.ascii_uppercase + string.digits
SESSION_ID_LENGTH = 6


def generate_session_id() -> str:
    """Session ID in the DSY-XXXXXX format."""
    suffix = "".join(secrets.choice(SESSION_ID_ALPHABET) for _ in range(SESSION_ID_LENGTH))
    return f"{SESSION_ID_PREFIX}{suffix}"


@runtime_checkable
class ProjectStore(Protocol):
    async def put(self, key: str, value: Dict[str, Any]) -> None: ...

    async def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    async def delete(self, key: str) -> bool: ...

    async def list(self, prefix: str = "") -> List[str]: ...


class InMemoryProjectStore:
    """
    Process-local ProjectStore.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store; every write stamps `updatedAt`.
    """

    def __init__(self):
        self._items: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        record = copy.deepcopy(value)
        record["updatedAt"] = datetime.now(timezone.utc).isoformat()
        async with self._lock:
            self._items[key] = record
        logger.debug(f"Stored '{key}'")

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            record = self._items.get(key)
        return copy.deepcopy(record) if record is not None else None

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._items.pop(key, None) is not None

    async def list(self, prefix: str = "") -> List[str]:
        async with self._lock:
            return sorted(k for k in self._items if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._items)
