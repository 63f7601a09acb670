"""Compaction detection and session segmentation.

Claude Code summarizes the conversation when the context window fills up.
The transcript does not mark this directly, so a compaction is inferred from
a large drop in context tokens between two consecutive turns.
"""

from typing import Sequence

from ctxmap.types.turns import CompactEvent, SessionSegment, Turn
from ctxmap.utils.durations import format_duration

MODEL_WINDOW = 200_000  # Opus, Sonnet and Haiku all have a 200K context
COMPACT_THRESHOLD = 0.5  # A drop below half of the previous context


def detect_compacts(turns: Sequence[Turn]) -> list[CompactEvent]:
    """Find every turn whose context fell below half of the previous turn's."""
    compacts: list[CompactEvent] = []

    for i in range(1, len(turns)):
        prev = turns[i - 1].context_tokens
        curr = turns[i].context_tokens
        if prev > 0 and curr < prev * COMPACT_THRESHOLD:
            compacts.append(CompactEvent(
                turn_index=i,
                timestamp=turns[i].timestamp,
                before_tokens=prev,
                after_tokens=curr,
                tokens_saved=prev - curr,
            ))

    return compacts


def segment_session(
    turns: Sequence[Turn],
    compacts: Sequence[CompactEvent],
) -> list[SessionSegment]:
    """Split turns into contiguous segments at each compaction.

    compacts must be ordered by turn_index. Empty slices (a boundary at turn
    0, or a repeated boundary) produce no segment and consume no label.
    """
    segments: list[SessionSegment] = []
    segment_start = 0

    # Implicit boundary at the end of the session
    boundaries = [c.turn_index for c in compacts] + [len(turns)]

    for boundary in boundaries:
        segment_turns = tuple(turns[segment_start:boundary])

        if segment_turns:
            index = len(segments)
            peak_context = max(t.context_tokens for t in segment_turns)
            start_ts = segment_turns[0].timestamp
            end_ts = segment_turns[-1].timestamp

            segments.append(SessionSegment(
                index=index,
                label="Pre-compact" if index == 0 else f"Post-compact #{index}",
                start_turn=segment_start,
                end_turn=boundary - 1,
                turns=segment_turns,
                peak_context=peak_context,
                peak_context_percent=peak_context / MODEL_WINDOW * 100,
                total_tokens=sum(t.token_delta for t in segment_turns),
                duration=format_duration(start_ts, end_ts),
                start_timestamp=start_ts,
                end_timestamp=end_ts,
            ))

        segment_start = boundary

    return segments
