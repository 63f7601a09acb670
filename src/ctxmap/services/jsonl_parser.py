"""Streaming JSONL parser for Claude Code transcript files."""

import logging
from pathlib import Path
from typing import Iterable, Iterator

import orjson

from ctxmap.types.entries import (
    EntryType,
    LogEntry,
    SessionMetadata,
    ToolResultBlock,
    ToolUseBlock,
)
from ctxmap.types.turns import Usage

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024


def parse_session_file(file_path: str | Path) -> list[LogEntry]:
    """Parse an entire JSONL transcript into a list of LogEntry objects."""
    return list(stream_session_file(file_path))


def stream_session_file(file_path: str | Path) -> Iterator[LogEntry]:
    """Stream-parse a JSONL transcript, yielding LogEntry objects.

    Malformed lines are logged and skipped, so one corrupt line never
    invalidates the rest of the session.
    Lines exceeding MAX_LINE_SIZE are skipped with a warning.
    """
    path = Path(file_path)
    if not path.exists():
        logger.warning("Session file not found: %s", path)
        return
    if not path.is_file():
        logger.warning("Session path is not a file: %s", path)
        return

    line_num = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line_num += 1
            line = line.strip()
            if not line:
                continue

            if len(line) > MAX_LINE_SIZE:
                logger.warning(
                    "Line %d in %s exceeds %dMB, skipping",
                    line_num, path.name, MAX_LINE_SIZE // (1024 * 1024),
                )
                continue

            try:
                raw = orjson.loads(line)
            except orjson.JSONDecodeError as e:
                logger.warning(
                    "Skipping malformed JSONL line %d in %s: %s", line_num, path.name, e,
                )
                continue

            if not isinstance(raw, dict):
                logger.warning("Skipping non-object JSONL line %d in %s", line_num, path.name)
                continue

            yield parse_raw_entry(raw)


def parse_raw_entry(raw: dict) -> LogEntry:
    """Parse a raw JSON dict into a LogEntry."""
    type_str = raw.get("type", "")
    try:
        entry_type = EntryType(type_str)
    except ValueError:
        entry_type = EntryType.SYSTEM

    message = raw.get("message", {})
    if not isinstance(message, dict):
        message = {}

    content = message.get("content", "")

    # Extract tool uses and results from content blocks, in order
    tool_uses = []
    tool_results = []
    if isinstance(content, list):
        for block in content:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "tool_use":
                tool_input = block.get("input", {})
                tool_uses.append(ToolUseBlock(
                    id=str(block.get("id", "")),
                    name=str(block.get("name", "")),
                    input=tool_input if isinstance(tool_input, dict) else {},
                ))
            elif block.get("type") == "tool_result":
                tool_results.append(ToolResultBlock(
                    tool_use_id=str(block.get("tool_use_id", "")),
                    content=block.get("content", ""),
                    is_error=bool(block.get("is_error", False)),
                ))

    return LogEntry(
        type=entry_type,
        timestamp=_text(raw.get("timestamp")),
        session_id=_text(raw.get("sessionId")),
        is_sidechain=bool(raw.get("isSidechain", False)),
        role=_text(message.get("role")),
        content=content,
        usage=_parse_usage(message.get("usage")),
        tool_uses=tuple(tool_uses),
        tool_results=tuple(tool_results),
    )


def get_session_metadata(entries: Iterable[LogEntry]) -> SessionMetadata:
    """Session id and first/last timestamps from a decoded transcript.

    Not every entry kind carries a session id or timestamp, so the first and
    last entries that do are used.
    """
    entries = list(entries)
    session_id = next((e.session_id for e in entries if e.session_id), "")
    start = next((e.timestamp for e in entries if e.timestamp), "")
    end = next((e.timestamp for e in reversed(entries) if e.timestamp), "")
    return SessionMetadata(session_id=session_id, start_timestamp=start, end_timestamp=end)


def _parse_usage(raw_usage) -> Usage | None:
    """Decode a usage block. Empty or missing blocks yield None."""
    if not isinstance(raw_usage, dict) or not raw_usage:
        return None
    return Usage(
        input_tokens=_count(raw_usage, "input_tokens"),
        output_tokens=_count(raw_usage, "output_tokens"),
        cache_creation_tokens=_count(raw_usage, "cache_creation_input_tokens"),
        cache_read_tokens=_count(raw_usage, "cache_read_input_tokens"),
    )


def _count(raw_usage: dict, key: str) -> int:
    """A token counter as int. Negative values are kept; non-numbers become 0."""
    value = raw_usage.get(key)
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric %s in usage block: %r", key, value)
        return 0


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
