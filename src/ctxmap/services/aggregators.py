"""Statistical views over a turn sequence.

Each aggregator is an independent pure reducer. Tool-based views charge a
turn's delta through get_attributed_tool_call, so a tool's result cost lands
on the tool rather than on the response that read it.
"""

import math
from typing import Sequence

from ctxmap.services.attribution import get_attributed_tool_call
from ctxmap.types.stats import (
    FileSize,
    FileStats,
    ToolSizeStats,
    ToolStats,
    TopConsumer,
    UserRequestStats,
)
from ctxmap.types.turns import Turn
from ctxmap.utils.tool_format import (
    extract_file_path,
    format_tool_description,
    input_file_path,
)

INITIAL_CONTEXT = "initial_context"
INITIAL_CONTEXT_PROMPT = "(initial context)"
DEFAULT_TOP_N = 10


def aggregate_tool_stats(turns: Sequence[Turn]) -> list[ToolStats]:
    """Group turns by attributed tool; unattributed turns go to initial_context."""
    groups: dict[str, dict[str, int]] = {}
    total_context = 0

    for i, turn in enumerate(turns):
        tool = get_attributed_tool_call(turns, i)
        tool_name = (tool.tool_name if tool is not None else "") or INITIAL_CONTEXT
        g = groups.setdefault(tool_name, {
            "count": 0, "input": 0, "output": 0,
            "cache_creation": 0, "cache_read": 0, "context": 0,
        })
        g["count"] += 1
        g["input"] += turn.usage.input_tokens
        g["output"] += turn.usage.output_tokens
        g["cache_creation"] += turn.usage.cache_creation_tokens
        g["cache_read"] += turn.usage.cache_read_tokens
        g["context"] += turn.token_delta
        total_context += turn.token_delta

    results = [
        ToolStats(
            tool_name=name,
            count=g["count"],
            total_input_tokens=g["input"],
            total_output_tokens=g["output"],
            total_cache_creation=g["cache_creation"],
            total_cache_read=g["cache_read"],
            total_context_tokens=g["context"],
            percent_of_session=g["context"] / total_context * 100 if total_context > 0 else 0.0,
        )
        for name, g in groups.items()
    ]
    results.sort(key=lambda s: s.total_context_tokens, reverse=True)
    return results


def aggregate_file_stats(turns: Sequence[Turn]) -> list[FileStats]:
    """Token deltas per (tool, path) for tools that target a file or pattern.

    Uses each turn's own tool call; turns whose tool takes no path are left out.
    """
    groups: dict[tuple[str, str], list[int]] = {}

    for turn in turns:
        if turn.tool_call is None:
            continue
        file_path = extract_file_path(turn.tool_call)
        if not file_path:
            continue
        g = groups.setdefault((turn.tool_call.tool_name, file_path), [0, 0])
        g[0] += 1
        g[1] += turn.token_delta

    results = [
        FileStats(
            file_path=file_path,
            tool_name=tool_name,
            count=count,
            total_tokens=tokens,
            avg_tokens=_round_half_up(tokens / count),
        )
        for (tool_name, file_path), (count, tokens) in groups.items()
    ]
    results.sort(key=lambda s: s.total_tokens, reverse=True)
    return results


def aggregate_tool_size_stats(turns: Sequence[Turn]) -> list[ToolSizeStats]:
    """Raw tool-result bytes per tool, with a per-file breakdown.

    Unlike aggregate_tool_stats there is no initial_context bucket: turns
    without a tool call are dropped.
    """
    groups: dict[str, dict] = {}

    for turn in turns:
        if turn.tool_call is None:
            continue
        size = turn.result_size or 0
        g = groups.setdefault(turn.tool_call.tool_name, {"count": 0, "size": 0, "files": {}})
        g["count"] += 1
        g["size"] += size

        path = input_file_path(turn.tool_call)
        if path:
            f = g["files"].setdefault(path, [0, 0])
            f[0] += size
            f[1] += 1

    results = [
        ToolSizeStats(
            tool_name=name,
            count=g["count"],
            total_size_bytes=g["size"],
            avg_size_bytes=_round_half_up(g["size"] / g["count"]),
            files=tuple(
                FileSize(path=path, size_bytes=size, count=count)
                for path, (size, count) in g["files"].items()
            ),
        )
        for name, g in groups.items()
    ]
    results.sort(key=lambda s: s.total_size_bytes, reverse=True)
    return results


def get_top_consumers(turns: Sequence[Turn], limit: int = DEFAULT_TOP_N) -> list[TopConsumer]:
    """The largest positive, attributed deltas with a running cumulative sum."""
    attributed = []
    for i, turn in enumerate(turns):
        tool = get_attributed_tool_call(turns, i)
        if turn.token_delta > 0 and tool is not None:
            attributed.append((turn, tool))

    attributed.sort(key=lambda pair: pair[0].token_delta, reverse=True)

    consumers: list[TopConsumer] = []
    cumulative = 0
    for turn, tool in attributed[:limit]:
        cumulative += turn.token_delta
        consumers.append(TopConsumer(
            description=format_tool_description(tool),
            tokens=turn.token_delta,
            cumulative=cumulative,
            tool_name=tool.tool_name or "unknown",
            turn_index=turn.turn_index,
        ))
    return consumers


def aggregate_by_user_request(turns: Sequence[Turn]) -> list[UserRequestStats]:
    """Group consecutive turns that share a user prompt.

    A recurring prompt starts a new group each time it comes back after a
    different one; groups are never merged.
    """
    groups: list[dict] = []

    for turn in turns:
        prompt = turn.user_prompt or INITIAL_CONTEXT_PROMPT
        if not groups or groups[-1]["prompt"] != prompt:
            groups.append({
                "prompt": prompt, "turns": 0, "tokens": 0, "tools": 0,
                "start": turn.turn_index, "end": turn.turn_index,
            })
        g = groups[-1]
        g["turns"] += 1
        g["tokens"] += turn.token_delta
        if turn.tool_call is not None:
            g["tools"] += 1
        g["end"] = turn.turn_index

    results = [
        UserRequestStats(
            user_prompt=g["prompt"],
            turn_count=g["turns"],
            total_tokens=g["tokens"],
            tool_count=g["tools"],
            start_turn=g["start"],
            end_turn=g["end"],
        )
        for g in groups
    ]
    results.sort(key=lambda s: s.total_tokens, reverse=True)
    return results


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
