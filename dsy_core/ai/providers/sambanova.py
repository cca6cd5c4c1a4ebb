"""
SambaNova Provider - fast text-only backend.

SambaNova Cloud exposes an OpenAI-compatible chat completions API, so the
official `openai` async client is pointed at its base URL.

Role in DSY Core:
================
Serves every generation request without reference images, where latency
matters more than vision. Two models are used:
- Code model (Qwen3-32B): page generation and code tasks
- Explanation model (Llama 3.3 70B): tutoring tasks
"""

import logging
from typing import Dict, List, Optional, Tuple

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from dsy_core.ai.credentials import CredentialPool, mask_credential
from dsy_core.ai.errors import NetworkFailure, RateLimited, RemoteError
from dsy_core.ai.providers.base import (
    AIProvider,
    History,
    InlineImage,
    ProviderType,
    TokenUsage,
)
from dsy_core.ai.schemas.output import ChatTask
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.sambanova")


class SambaNovaProvider(AIProvider):
    """
    SambaNova provider implementation.

    Usage:
        provider = SambaNovaProvider(pool=CredentialPool(keys, name="sambanova"))
        response = await provider.chat("What is flexbox?", ChatTask.EXPLANATION)
    """

    provider_type = ProviderType.SAMBANOVA
    supports_images = False
    page_temperature = 0.4
    page_max_tokens = 8192

    def __init__(
        self,
        pool: CredentialPool,
        model: Optional[str] = None,
        explanation_model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ):
        super().__init__(pool=pool, model=model or settings.SAMBANOVA_CODE_MODEL)
        self.explanation_model = explanation_model or settings.SAMBANOVA_EXPLANATION_MODEL
        self.base_url = base_url or settings.SAMBANOVA_BASE_URL
        self.timeout_seconds = timeout_seconds or settings.AI_REQUEST_TIMEOUT
        self._clients: Dict[str, AsyncOpenAI] = {}

        if self.is_configured:
            logger.info(
                f"SambaNova provider initialized with models: {self.model}, "
                f"{self.explanation_model}"
            )
        else:
            logger.warning("SambaNova API credentials not configured - provider unavailable")

    def _client_for(self, credential: str) -> AsyncOpenAI:
        client = self._clients.get(credential)
        if client is None:
            # Retries belong to the router, not the SDK
            client = AsyncOpenAI(
                api_key=credential,
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
            self._clients[credential] = client
        return client

    def _chat_model(self, task_type: ChatTask) -> str:
        if task_type in (ChatTask.CODE, ChatTask.CODE_REVIEW):
            return self.model
        return self.explanation_model

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
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        for role, text in history:
            messages.append({"role": "assistant" if role == "assistant" else "user", "content": text})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._client_for(credential).chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                top_p=0.9,
            )
        except RateLimitError as e:
            logger.warning(f"SambaNova rate limit on {mask_credential(credential)}")
            raise RateLimited(credential=credential) from e
        except APIStatusError as e:
            logger.error(f"SambaNova API error {e.status_code}: {e.message}")
            raise RemoteError(e.status_code, e.message, credential=credential) from e
        except APIConnectionError as e:
            logger.error(f"SambaNova request failed before a response: {e}")
            raise NetworkFailure(e, credential=credential) from e

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = TokenUsage()
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return content, usage
