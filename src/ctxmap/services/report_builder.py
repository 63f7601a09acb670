"""Assemble a SessionReport from a turn sequence."""

import logging
from typing import Sequence

from ctxmap.services.aggregators import (
    DEFAULT_TOP_N,
    aggregate_by_user_request,
    aggregate_file_stats,
    aggregate_tool_size_stats,
    aggregate_tool_stats,
    get_top_consumers,
)
from ctxmap.services.compaction import MODEL_WINDOW, detect_compacts, segment_session
from ctxmap.types.report import SessionReport
from ctxmap.types.turns import Turn, Usage
from ctxmap.utils.durations import format_duration
from ctxmap.utils.pricing import DEFAULT_PRICING, PricingRates, calculate_cost

logger = logging.getLogger(__name__)


def generate_report(
    session_id: str,
    project_path: str,
    turns: Sequence[Turn],
    *,
    top_n: int = DEFAULT_TOP_N,
    pricing: PricingRates = DEFAULT_PRICING,
) -> SessionReport:
    """Run every analysis over turns and collect the results in one report."""
    compacts = detect_compacts(turns)
    segments = segment_session(turns, compacts)

    totals = Usage(
        input_tokens=sum(t.usage.input_tokens for t in turns),
        output_tokens=sum(t.usage.output_tokens for t in turns),
        cache_creation_tokens=sum(t.usage.cache_creation_tokens for t in turns),
        cache_read_tokens=sum(t.usage.cache_read_tokens for t in turns),
    )
    peak_context = max((t.context_tokens for t in turns), default=0)

    start_timestamp = turns[0].timestamp if turns else ""
    end_timestamp = turns[-1].timestamp if turns else ""

    logger.debug(
        "Report for %s: %d turns, %d compacts, peak %d",
        session_id, len(turns), len(compacts), peak_context,
    )

    return SessionReport(
        session_id=session_id,
        project_path=project_path,
        start_timestamp=start_timestamp,
        end_timestamp=end_timestamp,
        duration=format_duration(start_timestamp, end_timestamp),
        total_turns=len(turns),
        total_input_tokens=totals.input_tokens,
        total_output_tokens=totals.output_tokens,
        total_cache_creation=totals.cache_creation_tokens,
        total_cache_read=totals.cache_read_tokens,
        total_context_tokens=sum(t.token_delta for t in turns),
        peak_context=peak_context,
        peak_context_percent=peak_context / MODEL_WINDOW * 100,
        model_window=MODEL_WINDOW,
        estimated_cost=calculate_cost(totals, pricing),
        segments=tuple(segments),
        compact_events=tuple(compacts),
        top_consumers=tuple(get_top_consumers(turns, top_n)),
        user_request_stats=tuple(aggregate_by_user_request(turns)),
        tool_stats=tuple(aggregate_tool_stats(turns)),
        file_stats=tuple(aggregate_file_stats(turns)),
        tool_size_stats=tuple(aggregate_tool_size_stats(turns)),
    )
