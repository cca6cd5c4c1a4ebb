"""
Tests for the Code Assistant.

This module tests:
- Project context block
- History window and conversation bookkeeping
- Pending modifications (apply / discard, never automatic)
- Rotated retries and never-raise behavior
"""

import pytest

from dsy_core.ai.chat import (
    CodeAssistant,
    CodeModification,
    Conversation,
    ConversationTurn,
    ProjectFiles,
    TurnRole,
    build_project_context,
)
from dsy_core.ai.chat.assistant import CHAT_MAX_TOKENS, CHAT_TEMPERATURE
from dsy_core.ai.errors import RateLimited
from dsy_core.ai.prompts import CODE_ASSISTANT_SYSTEM_PROMPT

from support import StubProvider


FILES = ProjectFiles(html="<!DOCTYPE html><html><body><nav>Menu</nav></body></html>", css="nav { top: 0; }")

EDIT_REPLY = (
    "I made the navbar sticky.\n\n"
    "```css:styles.css\nnav { position: sticky; top: 0; }\n```"
)


class TestProjectContext:
    """Tests for build_project_context."""

    def test_with_files(self):
        context = build_project_context(FILES)

        assert context.startswith("=== CURRENT PROJECT FILES ===")
        assert f"index.html:\n```html\n{FILES.html}\n```" in context
        assert f"styles.css:\n```css\n{FILES.css}\n```" in context
        assert context.rstrip().endswith("=== END PROJECT FILES ===")

    def test_without_files(self):
        context = build_project_context(None)

        assert "No files generated yet" in context
        assert "```" not in context


class TestConversation:
    """Tests for Conversation bookkeeping."""

    def test_history_window(self):
        conversation = Conversation(
            [ConversationTurn(role=TurnRole.USER, content=f"message {i}") for i in range(14)]
        )

        history = conversation.history()

        assert len(history) == 10
        assert history[0] == ("user", "message 4")
        assert conversation.history(limit=0) == []

    def test_pending_modification_apply(self):
        conversation = Conversation()
        conversation.append(
            ConversationTurn(
                role=TurnRole.ASSISTANT,
                content="done",
                modification=CodeModification(css="nav { position: sticky; }"),
            )
        )

        updated = conversation.apply(FILES)

        assert updated.css == "nav { position: sticky; }"
        assert updated.html == FILES.html
        assert conversation.pending is None

    def test_apply_without_pending_raises(self):
        with pytest.raises(ValueError):
            Conversation().apply(FILES)

    def test_discard(self):
        modification = CodeModification(html="<!DOCTYPE html><html></html>")
        conversation = Conversation()
        conversation.append(ConversationTurn(role=TurnRole.ASSISTANT, content="x", modification=modification))

        assert conversation.discard() == modification
        assert conversation.pending is None
        assert len(conversation) == 1

    def test_to_list(self):
        conversation = Conversation([ConversationTurn(role=TurnRole.USER, content="hi")])

        assert conversation.to_list() == [{"role": "user", "content": "hi"}]


class TestCodeAssistant:
    """Tests for CodeAssistant.send_message."""

    @pytest.mark.asyncio
    async def test_reply_with_modification_is_pending_not_applied(self):
        provider = StubProvider([EDIT_REPLY], pool_name="chatbot")
        conversation = Conversation()

        reply = await CodeAssistant(provider).send_message(
            "Make the navbar sticky", files=FILES, conversation=conversation
        )

        assert reply.success is True
        assert reply.has_code_changes is True
        assert reply.modification.css == "nav { position: sticky; top: 0; }"
        assert conversation.pending == reply.modification
        assert [t.role for t in conversation.turns] == [TurnRole.USER, TurnRole.ASSISTANT]
        # the caller's files are untouched until apply()
        assert FILES.css == "nav { top: 0; }"

    @pytest.mark.asyncio
    async def test_request_shape(self):
        provider = StubProvider(["Flexbox lays out items in one dimension."])
        conversation = Conversation(
            [
                ConversationTurn(role=TurnRole.USER, content="hi"),
                ConversationTurn(role=TurnRole.ASSISTANT, content="hello"),
            ]
        )

        reply = await CodeAssistant(provider).send_message(
            "What is flexbox?", files=FILES, conversation=conversation
        )

        call = provider.calls[0]
        assert reply.has_code_changes is False
        assert call["system_prompt"] == CODE_ASSISTANT_SYSTEM_PROMPT
        assert call["temperature"] == CHAT_TEMPERATURE
        assert call["max_tokens"] == CHAT_MAX_TOKENS
        assert call["history"] == [("user", "hi"), ("assistant", "hello")]
        assert call["prompt"].endswith("User question: What is flexbox?")
        assert "=== CURRENT PROJECT FILES ===" in call["prompt"]
        assert conversation.pending is None

    @pytest.mark.asyncio
    async def test_rate_limit_rotates(self):
        provider = StubProvider([lambda c: RateLimited(credential=c), "answer"])

        reply = await CodeAssistant(provider, max_attempts=3).send_message("hi")

        limited, served = provider.credentials_used
        assert reply.success is True
        assert reply.attempts == 2
        assert limited != served
        assert provider.pool.is_failed(limited)

    @pytest.mark.asyncio
    async def test_exhaustion_leaves_conversation_untouched(self):
        provider = StubProvider([lambda c: RateLimited(credential=c)] * 3)
        conversation = Conversation()

        reply = await CodeAssistant(provider, max_attempts=3).send_message(
            "hi", conversation=conversation
        )

        assert reply.success is False
        assert reply.attempts == 3
        assert reply.error == "Rate limited"
        assert len(conversation) == 0

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        provider = StubProvider(keys=[])

        reply = await CodeAssistant(provider).send_message("hi")

        assert reply.success is False
        assert "No gemini API credentials configured" in reply.error

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self):
        provider = StubProvider([RuntimeError("socket closed")])

        reply = await CodeAssistant(provider).send_message("hi")

        assert reply.success is False
        assert reply.error == "Chat failed: socket closed"
