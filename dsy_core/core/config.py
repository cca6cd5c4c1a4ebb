"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    API keys are configured as comma-separated lists so a single deployment
    can rotate through several provider accounts:
        export GEMINI_API_KEYS=key-one,key-two,key-three
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    APP_NAME: str = "DSY Core"
    DEBUG: bool = False

    # ---------------------------------------------------------------------------
    # VISION PROVIDER (Gemini)
    # ---------------------------------------------------------------------------
    # GEMINI_API_KEYS: pool used by the prompt optimizer and the vision pipeline
    GEMINI_API_KEYS: str = ""

    # CHATBOT_API_KEYS: separate pool for the code assistant so chat traffic
    # never exhausts the generation keys
    CHATBOT_API_KEYS: str = ""

    GEMINI_MODEL: str = "gemini-2.5-flash"

    # ---------------------------------------------------------------------------
    # FAST TEXT PROVIDER (SambaNova, OpenAI-compatible)
    # ---------------------------------------------------------------------------
    SAMBANOVA_API_KEYS: str = ""
    SAMBANOVA_BASE_URL: str = "https://api.sambanova.ai/v1"
    SAMBANOVA_CODE_MODEL: str = "Qwen3-32B"
    SAMBANOVA_EXPLANATION_MODEL: str = "Meta-Llama-3.3-70B-Instruct"

    # AI request timeout in seconds
    AI_REQUEST_TIMEOUT: int = 90

    # ---------------------------------------------------------------------------
    # ORCHESTRATION POLICY
    # ---------------------------------------------------------------------------
    MAX_GENERATION_ATTEMPTS: int = 3
    MAX_OPTIMIZATION_ATTEMPTS: int = 3
    MAX_INLINE_IMAGES: int = 5

    # ---------------------------------------------------------------------------
    # DESIGN-FEATURE PRE-PROCESSOR (Hugging Face Space)
    # ---------------------------------------------------------------------------
    PREPROCESSOR_ENABLED: bool = True
    PREPROCESSOR_URL: str = "https://souhardyo-dsy-core.hf.space"
    PREPROCESSOR_TIMEOUT: int = 30

    # ---------------------------------------------------------------------------
    # CLOUD SESSION SERVICE
    # ---------------------------------------------------------------------------
    SESSION_API_BASE: str = "http://localhost:3000/api"
    SESSION_TIMEOUT: int = 15

    @staticmethod
    def split_keys(raw: str) -> Tuple[str, ...]:
        """Split a comma-separated key list, dropping blanks."""
        return tuple(k.strip() for k in (raw or "").split(",") if k.strip())


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from dsy_core.core.config import settings
settings = Settings()
