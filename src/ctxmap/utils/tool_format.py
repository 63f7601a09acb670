"""Per-tool display labels and file-path extraction.

Both concerns are table driven: each maps a tool name to a small function and
falls back to a default for tool names it does not know. Adding a tool means
adding a table entry.
"""

import re
from typing import Callable, Optional

import orjson

from ctxmap.types.turns import ToolCall

_PATH_SPLIT_RE = re.compile(r"[/\\]")


def truncate(value, max_length: int) -> str:
    """Truncate to max_length characters, ending in "..." when cut."""
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def format_path(file_path) -> str:
    """Keep the last two segments of a path: /a/b/c/d.py -> c/d.py."""
    if not file_path or not isinstance(file_path, str):
        return "(unknown)"
    parts = _PATH_SPLIT_RE.split(file_path)
    if len(parts) <= 2:
        return file_path
    return "/".join(parts[-2:])


def compact_json(value) -> str:
    """Compact JSON text for arbitrary tool input."""
    try:
        return orjson.dumps(value, default=str).decode("utf-8")
    except TypeError:
        return str(value)


def _text(value) -> str:
    return value if isinstance(value, str) else ("" if value is None else str(value))


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

Describer = Callable[[str, dict], str]

TOOL_DESCRIBERS: dict[str, Describer] = {
    "Read": lambda name, inp: f"Read {format_path(inp.get('file_path'))}",
    "Edit": lambda name, inp: f"Edit {format_path(inp.get('file_path'))}",
    "Write": lambda name, inp: f"Write {format_path(inp.get('file_path'))}",
    "Bash": lambda name, inp: f"Bash {truncate(inp.get('command'), 30)}",
    "Glob": lambda name, inp: f"Glob {_text(inp.get('pattern'))}",
    "Grep": lambda name, inp: f'Grep "{truncate(inp.get("pattern"), 20)}"',
    "Task": lambda name, inp: f"Task ({_text(inp.get('subagent_type'))})",
    "WebFetch": lambda name, inp: f"WebFetch {truncate(inp.get('url'), 30)}",
    "WebSearch": lambda name, inp: f'WebSearch "{truncate(inp.get("query"), 25)}"',
}


def _describe_generic(name: str, inp: dict) -> str:
    return f"{name} {truncate(compact_json(inp)[:30], 30)}"


def format_tool_description(tool_call: ToolCall) -> str:
    """Render a short human label for a tool call."""
    describer = TOOL_DESCRIBERS.get(tool_call.tool_name, _describe_generic)
    inp = tool_call.input if isinstance(tool_call.input, dict) else {}
    return describer(tool_call.tool_name, inp)


# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------

PathExtractor = Callable[[dict], Optional[str]]


def _input_key(key: str, prefix: str = "") -> PathExtractor:
    def extract(inp: dict) -> Optional[str]:
        value = inp.get(key)
        if not isinstance(value, str) or not value:
            return None
        return prefix + value
    return extract


# Glob/Grep patterns are namespaced so they never collide with real paths.
FILE_PATH_EXTRACTORS: dict[str, PathExtractor] = {
    "Read": _input_key("file_path"),
    "Edit": _input_key("file_path"),
    "Write": _input_key("file_path"),
    "NotebookEdit": _input_key("file_path"),
    "Glob": _input_key("pattern", prefix="pattern:"),
    "Grep": _input_key("pattern", prefix="pattern:"),
}


def extract_file_path(tool_call: ToolCall) -> Optional[str]:
    """Return the path a tool call targets, or None for tools that take no path."""
    extractor = FILE_PATH_EXTRACTORS.get(tool_call.tool_name)
    if extractor is None or not isinstance(tool_call.input, dict):
        return None
    return extractor(tool_call.input)


def input_file_path(tool_call: ToolCall) -> Optional[str]:
    """The raw ``file_path`` input of any tool, when present."""
    if not isinstance(tool_call.input, dict):
        return None
    return _input_key("file_path")(tool_call.input)


# ---------------------------------------------------------------------------
# Turn-by-turn action text
# ---------------------------------------------------------------------------

def _tail_path(inp: dict) -> str:
    return "/".join(_PATH_SPLIT_RE.split(_text(inp.get("file_path")))[-2:])


ACTION_SUMMARIZERS: dict[str, Callable[[dict], str]] = {
    "Read": _tail_path,
    "Edit": _tail_path,
    "Write": _tail_path,
    "NotebookEdit": _tail_path,
    "Bash": lambda inp: _text(inp.get("command")),
    "Task": lambda inp: _text(inp.get("description") or inp.get("subagent_type")),
    "TaskOutput": lambda inp: f"task: {_text(inp.get('task_id'))[:8]}",
    "Grep": lambda inp: f'"{_text(inp.get("pattern"))[:25]}"',
    "Glob": lambda inp: _text(inp.get("pattern")),
}


def action_summary(tool_call: Optional[ToolCall], max_length: int = 50) -> str:
    """Longer per-tool action text used by the turn-by-turn view."""
    if tool_call is None:
        return "(model response)"
    inp = tool_call.input if isinstance(tool_call.input, dict) else {}
    summarize = ACTION_SUMMARIZERS.get(tool_call.tool_name, compact_json)
    return summarize(inp)[:max_length]
