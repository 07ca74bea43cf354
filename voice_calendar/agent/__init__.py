"""Tool session orchestration."""

from .conversation import ChatMessage, ConversationLog
from .orchestrator import SessionResult, ToolSessionOrchestrator, parse_args_or_empty, to_function_tools
from .tool_peer import ToolCatalogEntry, ToolPeer

__all__ = [
    "ChatMessage",
    "ConversationLog",
    "SessionResult",
    "ToolSessionOrchestrator",
    "ToolCatalogEntry",
    "ToolPeer",
    "parse_args_or_empty",
    "to_function_tools",
]
