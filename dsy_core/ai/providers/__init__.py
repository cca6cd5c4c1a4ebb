"""
AI Providers Module - interchangeable generation backends.

- GeminiProvider: vision-capable, used when reference images are attached
- SambaNovaProvider: fast text-only, used otherwise
"""

from dsy_core.ai.providers.base import (
    AIProvider,
    AIResponse,
    ChatTask,
    InlineImage,
    ProviderType,
    TokenUsage,
)
from dsy_core.ai.providers.gemini import GeminiProvider
from dsy_core.ai.providers.sambanova import SambaNovaProvider

__all__ = [
    "AIProvider",
    "AIResponse",
    "ChatTask",
    "InlineImage",
    "ProviderType",
    "TokenUsage",
    "GeminiProvider",
    "SambaNovaProvider",
]
