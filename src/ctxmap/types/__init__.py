"""Type definitions for ctxmap."""

from ctxmap.types.turns import (
    CompactEvent,
    SessionSegment,
    ToolCall,
    Turn,
    Usage,
)
from ctxmap.types.entries import (
    EntryType,
    LogEntry,
    SessionMetadata,
    ToolResultBlock,
    ToolUseBlock,
)
from ctxmap.types.stats import (
    FileSize,
    FileStats,
    ToolSizeStats,
    ToolStats,
    TopConsumer,
    UserRequestStats,
)
from ctxmap.types.report import SessionInfo, SessionReport

__all__ = [
    "Usage",
    "ToolCall",
    "Turn",
    "CompactEvent",
    "SessionSegment",
    "EntryType",
    "LogEntry",
    "SessionMetadata",
    "ToolUseBlock",
    "ToolResultBlock",
    "FileSize",
    "FileStats",
    "ToolSizeStats",
    "ToolStats",
    "TopConsumer",
    "UserRequestStats",
    "SessionInfo",
    "SessionReport",
]
