"""Entry-level types for decoded JSONL transcript lines."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ctxmap.types.turns import Usage


class EntryType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    SUMMARY = "summary"
    FILE_HISTORY = "file-history-snapshot"
    QUEUE_OP = "queue-operation"


@dataclass(frozen=True)
class ToolUseBlock:
    """A ``tool_use`` content item from an assistant message."""
    id: str
    name: str
    input: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResultBlock:
    """A ``tool_result`` content item from a user message."""
    tool_use_id: str
    content: Any = ""  # str or list of blocks
    is_error: bool = False

    @property
    def text(self) -> str:
        """The result flattened to plain text."""
        if isinstance(self.content, str):
            return self.content
        if isinstance(self.content, list):
            parts = []
            for item in self.content:
                if isinstance(item, dict) and item.get("type") == "text":
                    parts.append(str(item.get("text", "")))
                elif isinstance(item, str):
                    parts.append(item)
            return "\n".join(parts)
        return ""


@dataclass(frozen=True)
class LogEntry:
    type: EntryType
    timestamp: str = ""
    session_id: str = ""
    is_sidechain: bool = False
    role: str = ""
    content: Any = ""
    usage: Optional[Usage] = None
    tool_uses: tuple[ToolUseBlock, ...] = ()
    tool_results: tuple[ToolResultBlock, ...] = ()


@dataclass(frozen=True)
class SessionMetadata:
    session_id: str = ""
    start_timestamp: str = ""
    end_timestamp: str = ""
