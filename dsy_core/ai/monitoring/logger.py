"""
AI Logger - Structured logging for orchestration attempts.

Every provider attempt made by a retry loop is logged as one JSON payload,
so a single request can be traced across credential rotations:

    AI Attempt: {"event": "ai_attempt", "operation": "generate", "attempt": 2, ...}
    AI Outcome: {"event": "ai_outcome", "operation": "generate", "success": true, ...}

Credentials only ever appear masked.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dsy_core.ai.credentials import mask_credential

# Configure the root orchestration logger once
logger = logging.getLogger("dsy.ai")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class AILogger:
    """
    Structured logger for retry-loop attempts.

    Usage:
        ai_logger.log_attempt(
            operation="optimize",
            attempt=1,
            max_attempts=3,
            provider="gemini",
            credential=key,
        )
        ai_logger.log_outcome(operation="optimize", success=True, attempts=1)
    """

    def __init__(self):
        self._logger = logger

    def log_attempt(
        self,
        operation: str,
        attempt: int,
        max_attempts: int,
        provider: str,
        credential: Optional[str] = None,
        error: Optional[str] = None,
        latency_ms: float = 0.0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log one provider attempt.

        Args:
            operation: "optimize", "generate", "chat"
            attempt: 1-based attempt number
            max_attempts: Attempt bound of the loop
            provider: Provider name
            credential: Credential used (masked before logging)
            error: Why the attempt failed, None on success
            latency_ms: Provider latency
            metadata: Additional fields
        """
        log_data = {
            "event": "ai_attempt",
            "operation": operation,
            "attempt": attempt,
            "max_attempts": max_attempts,
            "provider": provider,
            "credential": mask_credential(credential),
            "success": error is None,
            "latency_ms": round(latency_ms, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if error:
            log_data["error"] = error
        if metadata:
            log_data["metadata"] = metadata

        level = logging.INFO if error is None else logging.WARNING
        self._logger.log(level, f"AI Attempt: {json.dumps(log_data, default=str)}")

    def log_outcome(
        self,
        operation: str,
        success: bool,
        attempts: int,
        pipeline: Optional[str] = None,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log how a whole retry loop ended."""
        log_data = {
            "event": "ai_outcome",
            "operation": operation,
            "success": success,
            "attempts": attempts,
            "pipeline": pipeline,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if error:
            log_data["error"] = error
        if metadata:
            log_data["metadata"] = metadata

        level = logging.INFO if success else logging.ERROR
        self._logger.log(level, f"AI Outcome: {json.dumps(log_data, default=str)}")


# Singleton instance
ai_logger = AILogger()
