"""
Gemini Provider - vision-capable backend on Google's GenAI SDK.

Used by the prompt optimizer and the vision pipeline: reference images are
embedded as inline parts ahead of the text part.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from dsy_core.ai.credentials import CredentialPool, mask_credential
from dsy_core.ai.errors import NetworkFailure, RateLimited, RemoteError
from dsy_core.ai.providers.base import (
    AIProvider,
    History,
    InlineImage,
    ProviderType,
    TokenUsage,
)
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.gemini")


class GeminiProvider(AIProvider):
    """
    Google Gemini provider.

    One SDK client is created lazily per credential and reused, since the
    API key is bound at client construction.

    Usage:
        provider = GeminiProvider(pool=CredentialPool(keys, name="gemini"))
        response = await provider.generate(
            "Describe this layout",
            images=[Asset(kind=AssetKind.IMAGE, payload="data:image/png;base64,...")],
        )
    """

    provider_type = ProviderType.GEMINI
    supports_images = True
    page_temperature = 0.2
    page_max_tokens = 16384

    def __init__(
        self,
        pool: CredentialPool,
        model: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        max_inline_images: Optional[int] = None,
    ):
        super().__init__(
            pool=pool,
            model=model or settings.GEMINI_MODEL,
            max_inline_images=max_inline_images or settings.MAX_INLINE_IMAGES,
        )
        self.timeout_seconds = timeout_seconds or settings.AI_REQUEST_TIMEOUT
        self._clients: Dict[str, genai.Client] = {}

        if self.is_configured:
            logger.info(
                f"Gemini provider initialized with model: {self.model} "
                f"({pool.size} credential(s) in pool '{pool.name}')"
            )
        else:
            logger.warning(f"Gemini credentials not configured for pool '{pool.name}'")

    def _client_for(self, credential: str) -> genai.Client:
        client = self._clients.get(credential)
        if client is None:
            client = genai.Client(
                api_key=credential,
                http_options=types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
            self._clients[credential] = client
        return client

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
        contents = [
            types.Content(
                role="model" if role == "assistant" else "user",
                parts=[types.Part.from_text(text=text)],
            )
            for role, text in history
        ]

        # Images first, then the text prompt
        parts = [
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type)
            for image in images
        ]
        parts.append(types.Part.from_text(text=prompt))
        contents.append(types.Content(role="user", parts=parts))

        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

        try:
            response = await self._client_for(credential).aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code == 429:
                logger.warning(f"Gemini rate limit on {mask_credential(credential)}")
                raise RateLimited(credential=credential) from e
            logger.error(f"Gemini API error {e.code}: {e.message}")
            raise RemoteError(e.code, e.message or str(e), credential=credential) from e
        except (httpx.HTTPError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"Gemini request failed before a response: {e}")
            raise NetworkFailure(e, credential=credential) from e

        return response.text or "", self._extract_usage(response)

    def _extract_usage(self, response) -> TokenUsage:
        metadata = response.usage_metadata
        if not metadata:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=metadata.prompt_token_count or 0,
            completion_tokens=metadata.candidates_token_count or 0,
        )
