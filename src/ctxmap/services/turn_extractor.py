"""Turn extraction: raw transcript entries to attributed turns.

A turn is one main-thread assistant response that carries usage data. Each
turn records its context size, the change from the previous turn, the first
tool it invoked (with that tool's result, found by scanning forward), and the
user prompt that started its exchange (found by scanning backward).
"""

import logging
from typing import Optional, Sequence

from ctxmap.types.entries import EntryType, LogEntry, ToolResultBlock
from ctxmap.types.turns import ToolCall, Turn

logger = logging.getLogger(__name__)

# Synthetic user content that is not a prompt the user typed
_COMMAND_PREFIXES = ("<local-command-", "<command-name>")
_INTERRUPT_MARKER = "[Request interrupted by user]"


def extract_turns(entries: Sequence[LogEntry]) -> list[Turn]:
    """Convert an ordered entry sequence into an ordered turn sequence.

    Non-assistant entries, sidechain entries and assistant entries without
    usage are skipped; turn indices stay dense among the emitted turns.
    """
    turns: list[Turn] = []
    previous_context = 0

    for i, entry in enumerate(entries):
        if not _is_main_assistant_turn(entry):
            continue

        usage = entry.usage
        context_tokens = usage.context_tokens
        # previous_context is 0 before the first turn, so turn 0's delta is its context
        token_delta = context_tokens - previous_context

        tool_call = None
        result_size = None
        if entry.tool_uses:
            block = entry.tool_uses[0]
            result = find_tool_result(entries, block.id, i + 1)
            result_text = result.text if result is not None else None
            if result_text is not None:
                result_size = len(result_text.encode("utf-8"))
            tool_call = ToolCall(
                tool_id=block.id,
                tool_name=block.name,
                input=block.input,
                result=result_text,
            )

        turns.append(Turn(
            turn_index=len(turns),
            timestamp=entry.timestamp,
            tool_call=tool_call,
            usage=usage,
            context_tokens=context_tokens,
            token_delta=token_delta,
            output_tokens=usage.output_tokens,
            user_prompt=find_user_prompt(entries, i),
            result_size=result_size,
        ))
        previous_context = context_tokens

    logger.debug("Extracted %d turns from %d entries", len(turns), len(entries))
    return turns


def find_tool_result(
    entries: Sequence[LogEntry],
    tool_use_id: str,
    start_index: int,
) -> Optional[ToolResultBlock]:
    """Find the first tool_result for tool_use_id at or after start_index."""
    for i in range(start_index, len(entries)):
        entry = entries[i]
        if entry.type != EntryType.USER or entry.role != "user":
            continue
        for result in entry.tool_results:
            if result.tool_use_id == tool_use_id:
                return result
    return None


def find_user_prompt(entries: Sequence[LogEntry], index: int) -> Optional[str]:
    """Walk backwards from index to the prompt that started this exchange.

    Stops at the first earlier main-thread assistant entry: a turn only
    inherits the prompt of its own exchange.
    """
    for i in range(index - 1, -1, -1):
        entry = entries[i]
        if entry.is_sidechain:
            continue

        text = extract_user_text(entry)
        if text:
            return text

        if entry.type == EntryType.ASSISTANT:
            break
    return None


def extract_user_text(entry: LogEntry) -> Optional[str]:
    """Genuine user-authored text of an entry, or None.

    Handles both plain-string and content-array messages and filters out
    slash-command echoes and interruption notices.
    """
    if entry.type != EntryType.USER or entry.role != "user":
        return None

    content = entry.content
    if isinstance(content, str):
        if content.startswith(_COMMAND_PREFIXES) or _INTERRUPT_MARKER in content:
            return None
        return content

    if isinstance(content, list):
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                text = item.get("text", "")
                if not isinstance(text, str) or _INTERRUPT_MARKER in text:
                    return None
                return text
    return None


def _is_main_assistant_turn(entry: LogEntry) -> bool:
    return (
        entry.type == EntryType.ASSISTANT
        and entry.role == "assistant"
        and not entry.is_sidechain
        and entry.usage is not None
    )
