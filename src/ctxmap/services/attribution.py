"""Resolve which tool call owns a turn's token delta."""

from typing import Optional, Sequence

from ctxmap.types.turns import ToolCall, Turn


def get_attributed_tool_call(turns: Sequence[Turn], turn_index: int) -> Optional[ToolCall]:
    """Return the tool call responsible for turns[turn_index]'s token delta.

    A tool's result usually reaches the model in the next response, so a
    tool-less turn with a positive delta is charged to the previous turn's
    tool call.
    """
    turn = turns[turn_index]
    if turn.tool_call is not None:
        return turn.tool_call
    if turn.token_delta > 0 and turn_index > 0:
        return turns[turn_index - 1].tool_call
    return None
