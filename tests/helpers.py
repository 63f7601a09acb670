"""Shared test helpers."""

from ctxmap.types.turns import ToolCall, Turn, Usage


def make_turn(
    index: int,
    context: int,
    delta: int | None = None,
    tool: str | None = None,
    tool_input: dict | None = None,
    prompt: str | None = None,
    result_size: int | None = None,
    timestamp: str = "",
    output: int = 0,
) -> Turn:
    """Build a Turn whose usage is all plain input tokens."""
    tool_call = None
    if tool is not None:
        tool_call = ToolCall(tool_id=f"toolu_{index:02d}", tool_name=tool, input=tool_input or {})
    return Turn(
        turn_index=index,
        timestamp=timestamp,
        tool_call=tool_call,
        usage=Usage(input_tokens=context, output_tokens=output),
        context_tokens=context,
        token_delta=context if delta is None else delta,
        output_tokens=output,
        user_prompt=prompt,
        result_size=result_size,
    )


def make_turns(contexts: list[int], **kwargs) -> list[Turn]:
    """Chain contexts into turns with deltas computed from the previous turn."""
    turns = []
    previous = 0
    for i, context in enumerate(contexts):
        turns.append(make_turn(i, context, delta=context - previous, **kwargs))
        previous = context
    return turns
