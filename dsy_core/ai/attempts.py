"""
Attempt accumulator for the bounded retry loops.

Each retry loop threads one immutable AttemptState through its iterations
instead of mutating outer "last error / last text" variables.
"""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class AttemptState:
    attempt: int = 0
    last_error: Optional[str] = None
    last_partial_text: str = ""
    last_raw_output: str = ""
    last_credential: Optional[str] = None

    def next(self) -> "AttemptState":
        return replace(self, attempt=self.attempt + 1)

    def failed(
        self,
        error: str,
        credential: Optional[str] = None,
        raw_output: Optional[str] = None,
        partial_text: Optional[str] = None,
    ) -> "AttemptState":
        """Record a failed attempt, keeping earlier salvage when nothing new arrived."""
        return replace(
            self,
            last_error=error,
            last_credential=credential or self.last_credential,
            last_raw_output=raw_output or self.last_raw_output,
            last_partial_text=partial_text or self.last_partial_text,
        )
