"""
Chat Module - code assistant over the current project files.
"""

from dsy_core.ai.chat.assistant import (
    ChatReply,
    CodeAssistant,
    Conversation,
    ConversationTurn,
    ProjectFiles,
    TurnRole,
    build_project_context,
)
from dsy_core.ai.parsing.output_parser import CodeModification

__all__ = [
    "ChatReply",
    "CodeAssistant",
    "CodeModification",
    "Conversation",
    "ConversationTurn",
    "ProjectFiles",
    "TurnRole",
    "build_project_context",
]
