"""
Base AI Provider - Abstract interface for the generation backends.

Design Pattern: Strategy Pattern
================================
The base class owns everything the backends share: credential selection,
rate-limit bookkeeping, latency measurement, page and chat request building.
Each backend only implements `_send`, the single remote call.

Failure contract:
================
Providers RAISE (see dsy_core.ai.errors) instead of returning error values.
Exactly one credential is consumed per call and nothing is retried here;
on a rate limit the credential is marked failed before RateLimited
propagates, so the caller's retry picks a different one.

Example:
    provider = GeminiProvider(pool=CredentialPool(keys, name="gemini"))
    response = await provider.generate_page("dark portfolio hero section")
    print(response.content)
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dsy_core.ai.credentials import CredentialPool, mask_credential
from dsy_core.ai.errors import ConfigurationError, RateLimited
from dsy_core.ai.prompts.generation_prompts import (
    build_chat_request,
    build_page_prompt,
    page_system_prompt,
)
from dsy_core.ai.schemas.assets import Asset, decode_data_uri, image_assets, link_assets
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.ai.schemas.output import ChatTask, OutputMode

logger = logging.getLogger("dsy.ai")

# (role, text) pairs; role is "user" or "assistant"
History = Sequence[Tuple[str, str]]


class ProviderType(str, Enum):
    """Enum of supported AI providers."""
    GEMINI = "gemini"
    SAMBANOVA = "sambanova"


@dataclass
class TokenUsage:
    """Token usage statistics for one request."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Successful response from a provider.

    Attributes:
        content: Raw generated text
        provider: Which provider generated it
        model: The specific model used
        credential: The credential that served the call (never logged unmasked)
        usage: Token usage statistics
        latency_ms: How long the request took
        metadata: Provider-specific extras
        created_at: Timestamp of the response
    """
    content: str
    provider: ProviderType
    model: str
    credential: Optional[str] = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "credential": mask_credential(self.credential),
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class InlineImage:
    """A decoded image ready to be embedded as a multimodal part."""
    mime_type: str
    data: bytes
    name: str = ""


class AIProvider(ABC):
    """
    Abstract base class for generation backends.

    Subclasses set `provider_type`, `supports_images` and the page sampling
    policy, and implement `_send`.
    """

    provider_type: ProviderType
    supports_images: bool = False
    page_temperature: float = 0.4
    page_max_tokens: int = 8192

    def __init__(self, pool: CredentialPool, model: str, max_inline_images: int = 5):
        self.pool = pool
        self.model = model
        self.max_inline_images = max_inline_images

    @property
    def name(self) -> str:
        return self.provider_type.value

    @property
    def is_configured(self) -> bool:
        return self.pool.size > 0

    # -----------------------------------------------------------------------
    # PUBLIC CAPABILITIES
    # -----------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        images: Optional[Sequence[Asset]] = None,
        history: Optional[History] = None,
        exclude: Optional[str] = None,
        model: Optional[str] = None,
    ) -> AIResponse:
        """
        Send one request with one freshly selected credential.

        Raises:
            ConfigurationError: the pool holds no usable credential
            RateLimited: HTTP 429 (credential already marked failed)
            RemoteError: non-2xx answer
            NetworkFailure: no HTTP answer at all
        """
        credential = self.pool.select(exclude=exclude)
        if credential is None:
            raise ConfigurationError(
                f"No {self.name} API credentials configured"
                + (" besides the excluded one" if exclude and self.pool.size else "")
            )

        inline = self._inline_images(images) if self.supports_images else []
        if images and not self.supports_images:
            logger.warning(f"{self.name} is text-only, ignoring {len(images)} image(s)")

        target_model = model or self.model
        start_time = time.time()
        try:
            content, usage = await self._send(
                credential=credential,
                model=target_model,
                prompt=prompt,
                system_prompt=system_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                images=inline,
                history=history or (),
            )
        except RateLimited:
            self.pool.mark_failed(credential)
            raise

        return AIResponse(
            content=content or "",
            provider=self.provider_type,
            model=target_model,
            credential=credential,
            usage=usage,
            latency_ms=self._measure_latency(start_time),
            metadata={"images": len(inline)},
        )

    async def generate_page(
        self,
        prompt: str,
        assets: Optional[Sequence[Asset]] = None,
        design_spec: Optional[DesignSpec] = None,
        mode: OutputMode = OutputMode.FLAT,
        exclude: Optional[str] = None,
    ) -> AIResponse:
        """Generate a page (flat HTML/CSS or multi-file) and return the raw text."""
        images = image_assets(assets) if self.supports_images else []
        text = build_page_prompt(
            prompt,
            design_spec=design_spec,
            mode=mode,
            links=link_assets(assets),
            image_count=min(len(images), self.max_inline_images),
        )
        return await self.generate(
            text,
            system_prompt=page_system_prompt(mode),
            temperature=self.page_temperature,
            max_tokens=self.page_max_tokens,
            images=images,
            exclude=exclude,
            model=self._page_model(),
        )

    async def chat(
        self,
        prompt: str,
        task_type: ChatTask = ChatTask.EXPLANATION,
        context: Optional[Dict[str, str]] = None,
        exclude: Optional[str] = None,
    ) -> AIResponse:
        """Answer a tutoring task (explanation, code, syllabus, box model, review)."""
        request = build_chat_request(task_type, prompt, context)
        return await self.generate(
            request["prompt"],
            system_prompt=request["system_prompt"],
            temperature=request["temperature"],
            max_tokens=request["max_tokens"],
            exclude=exclude,
            model=self._chat_model(task_type),
        )

    # -----------------------------------------------------------------------
    # HOOKS
    # -----------------------------------------------------------------------

    @abstractmethod
    async def _send(
        self,
        credential: str,
        model: str,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        images: List[InlineImage],
        history: History,
    ) -> Tuple[str, TokenUsage]:
        """Perform the remote call. Must map SDK errors to dsy_core.ai.errors."""
        pass

    def rotation_exclude(self, previous: Optional[str]) -> Optional[str]:
        """
        Credential a retry should avoid.

        A pool with a single credential retries on that same credential.
        """
        if previous is not None and self.pool.has_alternative(previous):
            return previous
        return None

    def _page_model(self) -> str:
        return self.model

    def _chat_model(self, task_type: ChatTask) -> str:
        return self.model

    # -----------------------------------------------------------------------
    # HELPERS
    # -----------------------------------------------------------------------

    def _inline_images(self, images: Optional[Sequence[Asset]]) -> List[InlineImage]:
        """Decode image data URIs, capped at max_inline_images."""
        decoded = []
        for asset in image_assets(images)[: self.max_inline_images]:
            parsed = decode_data_uri(asset.payload)
            if parsed is None:
                logger.warning(f"Skipping image '{asset.name}': not a base64 data URI")
                continue
            mime_type, data = parsed
            decoded.append(InlineImage(mime_type=mime_type, data=data, name=asset.name))
        return decoded

    def _measure_latency(self, start_time: float) -> float:
        """Calculate latency in milliseconds."""
        return (time.time() - start_time) * 1000

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, pool={self.pool!r})"
