"""
Chat Router - the code assistant over HTTP.

The client owns the conversation: it sends the recent turns and the current
project files with every message, and decides itself whether to apply a
proposed modification. `/chat/tasks` runs a single tutoring task
(explanation, code, syllabus, box model, review) with no conversation.
"""

import logging
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from dsy_core.ai.chat.assistant import (
    CodeAssistant,
    Conversation,
    ConversationTurn,
    ProjectFiles,
    TurnRole,
)
from dsy_core.ai.errors import ConfigurationError, ProviderError
from dsy_core.ai.providers.base import AIProvider
from dsy_core.ai.schemas import ChatTask
from dsy_core.deps import get_chat_provider, get_code_assistant

logger = logging.getLogger("dsy.routers.chat")

router = APIRouter(prefix="/chat", tags=["chat"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class ChatTurnIn(BaseModel):
    role: Literal["user", "assistant", "model"]
    content: str


class ChatRequest(BaseModel):
    """
    Request schema for /chat.

    Example:
    {
        "message": "Why is my navbar not sticky?",
        "html": "<!DOCTYPE html>...",
        "css": "nav { ... }",
        "history": [{"role": "user", "content": "..."}]
    }
    """
    message: str = Field(..., min_length=1)
    html: str = ""
    css: str = ""
    history: List[ChatTurnIn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    success: bool
    message: str = ""
    has_code_changes: bool = False
    modified_html: Optional[str] = None
    modified_css: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0


class ChatTaskRequest(BaseModel):
    """Request schema for /chat/tasks. `css` feeds the box-model task, `language` the code task."""
    task: ChatTask = ChatTask.EXPLANATION
    prompt: str = ""
    css: str = ""
    language: Optional[str] = None


class ChatTaskResponse(BaseModel):
    success: bool
    task: ChatTask
    content: str = ""
    model: Optional[str] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("", response_model=ChatResponse)
async def send_chat_message(
    request: ChatRequest,
    assistant: CodeAssistant = Depends(get_code_assistant),
):
    """Ask the code assistant; proposed edits are returned, never applied."""
    conversation = Conversation(
        [
            ConversationTurn(
                role=TurnRole.USER if turn.role == "user" else TurnRole.ASSISTANT,
                content=turn.content,
            )
            for turn in request.history
        ]
    )
    reply = await assistant.send_message(
        request.message,
        files=ProjectFiles(html=request.html, css=request.css),
        conversation=conversation,
    )
    if not reply.success:
        logger.warning(f"Chat failed after {reply.attempts} attempt(s): {reply.error}")
    return ChatResponse(**reply.to_dict())


@router.post("/tasks", response_model=ChatTaskResponse)
async def run_chat_task(
    request: ChatTaskRequest,
    provider: AIProvider = Depends(get_chat_provider),
):
    """One-shot tutoring task on the chatbot credentials."""
    if not request.prompt.strip() and not (request.task == ChatTask.BOX_MODEL and request.css.strip()):
        return ChatTaskResponse(success=False, task=request.task, error="Prompt is empty")

    context: Dict[str, str] = {}
    if request.css:
        context["css"] = request.css
    if request.language:
        context["language"] = request.language

    try:
        response = await provider.chat(request.prompt, request.task, context=context)
    except (ConfigurationError, ProviderError) as e:
        logger.warning(f"Chat task {request.task.value} failed: {e}")
        return ChatTaskResponse(success=False, task=request.task, error=str(e))

    return ChatTaskResponse(
        success=True,
        task=request.task,
        content=response.content,
        model=response.model,
    )
