"""
Prompts Module - system instructions and request builders.
"""

from dsy_core.ai.prompts.generation_prompts import (
    ACADEMIC_MENTOR_SYSTEM_PROMPT,
    CODE_ASSISTANT_SYSTEM_PROMPT,
    END_MARKER,
    FILE_MARKER_TEMPLATE,
    FLAT_PAGE_SYSTEM_PROMPT,
    JSON_MARKER,
    MULTI_FILE_SYSTEM_PROMPT,
    PROMPT_OPTIMIZER_SYSTEM_PROMPT,
    TEXT_MARKER,
    build_chat_request,
    build_optimizer_prompt,
    build_page_prompt,
    page_system_prompt,
)

__all__ = [
    "ACADEMIC_MENTOR_SYSTEM_PROMPT",
    "CODE_ASSISTANT_SYSTEM_PROMPT",
    "END_MARKER",
    "FILE_MARKER_TEMPLATE",
    "FLAT_PAGE_SYSTEM_PROMPT",
    "JSON_MARKER",
    "MULTI_FILE_SYSTEM_PROMPT",
    "PROMPT_OPTIMIZER_SYSTEM_PROMPT",
    "TEXT_MARKER",
    "build_chat_request",
    "build_optimizer_prompt",
    "build_page_prompt",
    "page_system_prompt",
]
