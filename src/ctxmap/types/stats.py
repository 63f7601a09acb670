"""Aggregation views derived from a turn sequence."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToolStats:
    tool_name: str
    count: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_creation: int = 0
    total_cache_read: int = 0
    total_context_tokens: int = 0
    percent_of_session: float = 0.0


@dataclass(frozen=True)
class FileStats:
    file_path: str
    tool_name: str
    count: int = 0
    total_tokens: int = 0
    avg_tokens: int = 0


@dataclass(frozen=True)
class FileSize:
    path: str
    size_bytes: int = 0
    count: int = 0


@dataclass(frozen=True)
class ToolSizeStats:
    tool_name: str
    count: int = 0
    total_size_bytes: int = 0
    avg_size_bytes: int = 0
    files: tuple[FileSize, ...] = ()


@dataclass(frozen=True)
class TopConsumer:
    description: str
    tokens: int
    cumulative: int
    tool_name: str
    turn_index: int


@dataclass(frozen=True)
class UserRequestStats:
    user_prompt: str
    turn_count: int = 0
    total_tokens: int = 0
    tool_count: int = 0
    start_turn: int = 0
    end_turn: int = 0
