"""
Code Assistant - conversational explanation and editing of the project files.

Runs on its own credential pool so chat traffic never exhausts the
generation keys. Replies may carry a whole-file modification; it is held as
pending on the Conversation until the caller applies or discards it.
Nothing is ever applied automatically.

Usage:
    assistant = CodeAssistant(provider=chat_provider)
    conversation = Conversation()
    reply = await assistant.send_message(
        "Make the hero background darker",
        files=ProjectFiles(html=html, css=css),
        conversation=conversation,
    )
    if conversation.pending:
        files = conversation.apply(files)
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from dsy_core.ai.attempts import AttemptState
from dsy_core.ai.errors import ConfigurationError, ProviderError
from dsy_core.ai.monitoring import ai_logger
from dsy_core.ai.parsing.output_parser import CodeModification, parse_code_modifications
from dsy_core.ai.prompts.generation_prompts import CODE_ASSISTANT_SYSTEM_PROMPT
from dsy_core.ai.providers.base import AIProvider
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.chat")

HISTORY_LIMIT = 10
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 8192


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ProjectFiles:
    html: str = ""
    css: str = ""


@dataclass(frozen=True)
class ConversationTurn:
    role: TurnRole
    content: str
    modification: Optional[CodeModification] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.modification is not None:
            data["modification"] = {"html": self.modification.html, "css": self.modification.css}
        return data


class Conversation:
    """
    Append-only chat history with at most one pending modification.

    A new assistant reply with changes replaces any earlier pending one.
    """

    def __init__(self, turns: Optional[List[ConversationTurn]] = None):
        self._turns: List[ConversationTurn] = list(turns or [])
        self._pending: Optional[CodeModification] = None

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    @property
    def pending(self) -> Optional[CodeModification]:
        return self._pending

    def append(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)
        if turn.role == TurnRole.ASSISTANT and turn.modification and turn.modification.has_changes:
            self._pending = turn.modification

    def history(self, limit: int = HISTORY_LIMIT) -> List[Tuple[str, str]]:
        """The last `limit` turns as (role, text) pairs for a provider call."""
        return [(t.role.value, t.content) for t in self._turns[-limit:]] if limit > 0 else []

    def apply(self, files: ProjectFiles) -> ProjectFiles:
        """
        Apply the pending modification to `files` and clear it.

        Raises:
            ValueError: nothing is pending
        """
        if self._pending is None:
            raise ValueError("No pending code modification to apply")
        modification, self._pending = self._pending, None
        return replace(
            files,
            html=modification.html if modification.html is not None else files.html,
            css=modification.css if modification.css is not None else files.css,
        )

    def discard(self) -> Optional[CodeModification]:
        modification, self._pending = self._pending, None
        return modification

    def to_list(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in self._turns]

    def __len__(self) -> int:
        return len(self._turns)


@dataclass
class ChatReply:
    success: bool
    message: str = ""
    modification: CodeModification = field(default_factory=CodeModification)
    error: Optional[str] = None
    attempts: int = 0

    @property
    def has_code_changes(self) -> bool:
        return self.modification.has_changes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "has_code_changes": self.has_code_changes,
            "modified_html": self.modification.html,
            "modified_css": self.modification.css,
            "error": self.error,
            "attempts": self.attempts,
        }


def build_project_context(files: Optional[ProjectFiles]) -> str:
    files = files or ProjectFiles()
    context = "=== CURRENT PROJECT FILES ===\n\n"
    if files.html:
        context += f"index.html:\n```html\n{files.html}\n```\n\n"
    if files.css:
        context += f"styles.css:\n```css\n{files.css}\n```\n\n"
    if not files.html and not files.css:
        context += "(No files generated yet - the user can ask general HTML/CSS questions)\n\n"
    context += "=== END PROJECT FILES ===\n\n"
    return context


class CodeAssistant:
    """Chat over the current project files with rotated retries."""

    def __init__(self, provider: AIProvider, max_attempts: Optional[int] = None):
        self.provider = provider
        self.max_attempts = max_attempts or settings.MAX_GENERATION_ATTEMPTS

    async def send_message(
        self,
        message: str,
        files: Optional[ProjectFiles] = None,
        conversation: Optional[Conversation] = None,
    ) -> ChatReply:
        """
        Ask the assistant. Never raises.

        On success the user turn and the assistant turn are appended to
        `conversation`; a failed exchange leaves it untouched.
        """
        try:
            return await self._send(message, files, conversation)
        except Exception as e:
            logger.exception(f"Code assistant failed: {e}")
            return ChatReply(success=False, error=f"Chat failed: {e}")

    async def _send(
        self,
        message: str,
        files: Optional[ProjectFiles],
        conversation: Optional[Conversation],
    ) -> ChatReply:
        history = conversation.history() if conversation is not None else []
        prompt = build_project_context(files) + "User question: " + message

        state = AttemptState()
        while state.attempt < self.max_attempts:
            state = state.next()
            try:
                response = await self.provider.generate(
                    prompt,
                    system_prompt=CODE_ASSISTANT_SYSTEM_PROMPT,
                    temperature=CHAT_TEMPERATURE,
                    max_tokens=CHAT_MAX_TOKENS,
                    history=history,
                    exclude=self.provider.rotation_exclude(state.last_credential),
                )
            except ConfigurationError as e:
                return ChatReply(success=False, error=str(e), attempts=state.attempt)
            except ProviderError as e:
                ai_logger.log_attempt(
                    operation="chat",
                    attempt=state.attempt,
                    max_attempts=self.max_attempts,
                    provider=self.provider.name,
                    credential=e.credential,
                    error=str(e),
                )
                state = state.failed(str(e), credential=e.credential)
                continue

            modification = parse_code_modifications(response.content)
            if conversation is not None:
                conversation.append(ConversationTurn(role=TurnRole.USER, content=message))
                conversation.append(
                    ConversationTurn(
                        role=TurnRole.ASSISTANT,
                        content=response.content,
                        modification=modification if modification.has_changes else None,
                    )
                )
            logger.info(
                f"Assistant replied ({len(response.content)} chars, "
                f"changes={modification.has_changes}) after {state.attempt} attempt(s)"
            )
            return ChatReply(
                success=True,
                message=response.content,
                modification=modification,
                attempts=state.attempt,
            )

        ai_logger.log_outcome(operation="chat", success=False, attempts=state.attempt, error=state.last_error)
        return ChatReply(
            success=False,
            error=state.last_error or "All chatbot API keys exhausted",
            attempts=state.attempt,
        )
