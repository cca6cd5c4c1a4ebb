"""
Credential Pool - rotating API keys with temporary failure tracking.

Each provider account group owns one pool. Selection is uniform over the
healthy keys; a key marked failed (rate limited) is skipped until the pool
resets, either explicitly or automatically when nothing else is left.

Usage:
    pool = CredentialPool(["key-a", "key-b", "key-c"], name="gemini")

    key = pool.select()
    ...
    pool.mark_failed(key)           # after a 429
    retry_key = pool.select(exclude=key)
"""

import logging
import random
from threading import Lock
from typing import Iterable, Optional

logger = logging.getLogger("dsy.ai.credentials")


def mask_credential(credential: Optional[str]) -> str:
    """Render a key safely for logs."""
    if not credential:
        return "<none>"
    if len(credential) <= 12:
        return credential[:2] + "..."
    return f"{credential[:8]}...{credential[-4:]}"


class CredentialPool:
    """
    Thread-safe pool of API credentials for one provider.

    The failed set is the only mutable state shared across requests, so
    every read and write of it happens under a single lock.
    """

    def __init__(
        self,
        credentials: Iterable[str],
        name: str = "default",
        rng: Optional[random.Random] = None,
    ):
        # dict.fromkeys keeps configuration order while dropping duplicates
        self._credentials = tuple(
            dict.fromkeys(c.strip() for c in credentials if c and c.strip())
        )
        self._failed: set = set()
        self._lock = Lock()
        self._rng = rng or random.Random()
        self.name = name

    # -----------------------------------------------------------------------
    # SELECTION
    # -----------------------------------------------------------------------

    def select(self, exclude: Optional[str] = None) -> Optional[str]:
        """
        Pick a healthy credential, never returning `exclude`.

        Returns None when the pool is empty or only holds `exclude`.
        When every other credential is marked failed, the failed set is
        cleared and selection runs once more against the full pool.
        """
        with self._lock:
            candidates = [
                c for c in self._credentials
                if c not in self._failed and c != exclude
            ]
            if candidates:
                return self._rng.choice(candidates)

            remaining = [c for c in self._credentials if c != exclude]
            if not remaining:
                return None

            logger.warning(
                f"All credentials in pool '{self.name}' exhausted, resetting failed set"
            )
            self._failed.clear()
            return self._rng.choice(remaining)

    def mark_failed(self, credential: Optional[str]) -> None:
        """Exclude a credential until the next reset. Idempotent."""
        if credential is None:
            return
        with self._lock:
            if credential not in self._credentials:
                return
            self._failed.add(credential)
            remaining = len(self._credentials) - len(self._failed)
        logger.info(
            f"Credential {mask_credential(credential)} marked failed in pool "
            f"'{self.name}', {remaining} remaining"
        )

    def has_alternative(self, credential: Optional[str]) -> bool:
        """Whether any credential other than `credential` is configured."""
        return any(c != credential for c in self._credentials)

    def reset_all(self) -> None:
        """Clear every temporary failure."""
        with self._lock:
            self._failed.clear()
        logger.info(f"Credential pool '{self.name}' reset")

    # -----------------------------------------------------------------------
    # STATUS
    # -----------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._credentials)

    @property
    def failed_count(self) -> int:
        with self._lock:
            return len(self._failed)

    @property
    def available_count(self) -> int:
        with self._lock:
            return len(self._credentials) - len(self._failed)

    def is_failed(self, credential: str) -> bool:
        with self._lock:
            return credential in self._failed

    def to_dict(self) -> dict:
        """Status snapshot for the API (no secrets)."""
        with self._lock:
            failed = len(self._failed)
        return {
            "name": self.name,
            "configured": len(self._credentials),
            "failed": failed,
            "available": len(self._credentials) - failed,
        }

    def __len__(self) -> int:
        return len(self._credentials)

    def __contains__(self, credential: object) -> bool:
        return credential in self._credentials

    def __repr__(self) -> str:
        return f"CredentialPool(name={self.name!r}, size={self.size})"
