"""Turn-level types produced by the attribution engine."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0

    @property
    def context_tokens(self) -> int:
        """Approximate context-window occupancy for the response."""
        return self.input_tokens + self.cache_creation_tokens + self.cache_read_tokens


@dataclass(frozen=True)
class ToolCall:
    tool_id: str
    tool_name: str
    input: dict = field(default_factory=dict)
    result: Optional[str] = None
    # Never set from the transcript's tool_result flag yet.
    is_error: bool = False


@dataclass(frozen=True)
class Turn:
    """One model response carrying usage data."""
    turn_index: int
    timestamp: str
    tool_call: Optional[ToolCall]
    usage: Usage
    context_tokens: int
    token_delta: int
    output_tokens: int
    user_prompt: Optional[str] = None
    result_size: Optional[int] = None


@dataclass(frozen=True)
class CompactEvent:
    turn_index: int
    timestamp: str
    before_tokens: int
    after_tokens: int
    tokens_saved: int


@dataclass(frozen=True)
class SessionSegment:
    """A contiguous run of turns between compaction boundaries."""
    index: int
    label: str
    start_turn: int
    end_turn: int
    turns: tuple[Turn, ...]
    peak_context: int
    peak_context_percent: float
    total_tokens: int
    duration: str
    start_timestamp: str
    end_timestamp: str

    @property
    def turn_count(self) -> int:
        return len(self.turns)
