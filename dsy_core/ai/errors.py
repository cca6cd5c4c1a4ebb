"""
Generation errors - exception taxonomy for the orchestration layer.

Provider clients raise these; the retry loops in the prompt optimizer and
the generation router catch them. Only ConfigurationError is fatal, every
other class is absorbed up to the attempt bound and then reported as a
failed result value.
"""

from typing import Any, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class GenerationError(Exception):
    """Base exception for all orchestration errors."""
    pass


class ConfigurationError(GenerationError):
    """Raised when a provider has no credentials configured. Never retried."""
    pass


class ProviderError(GenerationError):
    """Base class for failures reported by a provider call."""

    def __init__(self, message: str, credential: Optional[str] = None):
        super().__init__(message)
        self.credential = credential


class RateLimited(ProviderError):
    """Raised on HTTP 429. The credential has already been marked failed."""

    def __init__(self, credential: Optional[str] = None, message: str = "Rate limited"):
        super().__init__(message, credential=credential)


class RemoteError(ProviderError):
    """Raised when the provider answers with a non-2xx status."""

    def __init__(self, status_code: Optional[int], message: str, credential: Optional[str] = None):
        super().__init__(f"Provider error {status_code}: {message}", credential=credential)
        self.status_code = status_code
        self.remote_message = message


class NetworkFailure(ProviderError):
    """Raised when the request never produced an HTTP response."""

    def __init__(self, cause: Any, credential: Optional[str] = None):
        super().__init__(f"Network failure: {cause}", credential=credential)
        self.cause = cause


class ParseValidationFailure(GenerationError):
    """Raised when model output does not meet the structural thresholds."""
    pass


class PreprocessFailure(GenerationError):
    """Raised by the design-feature pre-processor. Callers fall back to defaults."""
    pass
