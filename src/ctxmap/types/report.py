"""Session report and discovered-session types."""

from dataclasses import dataclass

from ctxmap.types.stats import (
    FileStats,
    ToolSizeStats,
    ToolStats,
    TopConsumer,
    UserRequestStats,
)
from ctxmap.types.turns import CompactEvent, SessionSegment


@dataclass(frozen=True)
class SessionReport:
    session_id: str
    project_path: str
    start_timestamp: str
    end_timestamp: str
    duration: str
    total_turns: int
    total_input_tokens: int
    total_output_tokens: int
    total_cache_creation: int
    total_cache_read: int
    total_context_tokens: int
    peak_context: int
    peak_context_percent: float
    model_window: int
    estimated_cost: float
    segments: tuple[SessionSegment, ...] = ()
    compact_events: tuple[CompactEvent, ...] = ()
    top_consumers: tuple[TopConsumer, ...] = ()
    user_request_stats: tuple[UserRequestStats, ...] = ()
    tool_stats: tuple[ToolStats, ...] = ()
    file_stats: tuple[FileStats, ...] = ()
    tool_size_stats: tuple[ToolSizeStats, ...] = ()


@dataclass(frozen=True)
class SessionInfo:
    id: str
    project_path: str  # Encoded directory name
    file_path: str
    modified_at: float
