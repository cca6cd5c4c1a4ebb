"""
Dependencies module - shared service instances for route handlers.

Every factory is cached, so a process holds exactly one credential pool per
provider account group and the failed-key state is shared across requests.
Tests swap any of these out through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Dict

from dsy_core.ai.chat.assistant import CodeAssistant
from dsy_core.ai.credentials import CredentialPool
from dsy_core.ai.optimizer.prompt_optimizer import PromptOptimizer
from dsy_core.ai.pipeline import PageBuilder
from dsy_core.ai.preprocess.design_features import DesignFeatureExtractor
from dsy_core.ai.providers.gemini import GeminiProvider
from dsy_core.ai.providers.sambanova import SambaNovaProvider
from dsy_core.ai.router.generation_router import GenerationRouter
from dsy_core.core.config import settings
from dsy_core.services.project_store import InMemoryProjectStore
from dsy_core.services.session_service import CloudSessionClient


# ---------------------------------------------------------------------------
# CREDENTIAL POOLS
# ---------------------------------------------------------------------------

@lru_cache
def get_gemini_pool() -> CredentialPool:
    return CredentialPool(settings.split_keys(settings.GEMINI_API_KEYS), name="gemini")


@lru_cache
def get_chatbot_pool() -> CredentialPool:
    return CredentialPool(settings.split_keys(settings.CHATBOT_API_KEYS), name="chatbot")


@lru_cache
def get_sambanova_pool() -> CredentialPool:
    return CredentialPool(settings.split_keys(settings.SAMBANOVA_API_KEYS), name="sambanova")


def get_credential_pools() -> Dict[str, CredentialPool]:
    return {
        "gemini": get_gemini_pool(),
        "chatbot": get_chatbot_pool(),
        "sambanova": get_sambanova_pool(),
    }


# ---------------------------------------------------------------------------
# PROVIDERS
# ---------------------------------------------------------------------------

@lru_cache
def get_vision_provider() -> GeminiProvider:
    return GeminiProvider(pool=get_gemini_pool())


@lru_cache
def get_text_provider() -> SambaNovaProvider:
    return SambaNovaProvider(pool=get_sambanova_pool())


@lru_cache
def get_chat_provider() -> GeminiProvider:
    return GeminiProvider(pool=get_chatbot_pool())


# ---------------------------------------------------------------------------
# ORCHESTRATION
# ---------------------------------------------------------------------------

@lru_cache
def get_preprocessor() -> DesignFeatureExtractor:
    return DesignFeatureExtractor()


@lru_cache
def get_optimizer() -> PromptOptimizer:
    return PromptOptimizer(provider=get_vision_provider())


@lru_cache
def get_router() -> GenerationRouter:
    return GenerationRouter(
        vision_provider=get_vision_provider(),
        text_provider=get_text_provider(),
        preprocessor=get_preprocessor(),
    )


@lru_cache
def get_project_store() -> InMemoryProjectStore:
    return InMemoryProjectStore()


@lru_cache
def get_page_builder() -> PageBuilder:
    return PageBuilder(optimizer=get_optimizer(), router=get_router(), store=get_project_store())


@lru_cache
def get_code_assistant() -> CodeAssistant:
    return CodeAssistant(provider=get_chat_provider())


@lru_cache
def get_session_client() -> CloudSessionClient:
    return CloudSessionClient()
