"""Services for ctxmap."""

from ctxmap.services.jsonl_parser import parse_session_file, stream_session_file, get_session_metadata
from ctxmap.services.turn_extractor import extract_turns
from ctxmap.services.compaction import detect_compacts, segment_session
from ctxmap.services.attribution import get_attributed_tool_call
from ctxmap.services.aggregators import (
    aggregate_by_user_request,
    aggregate_file_stats,
    aggregate_tool_size_stats,
    aggregate_tool_stats,
    get_top_consumers,
)
from ctxmap.services.report_builder import generate_report
from ctxmap.services.session_finder import find_latest_session, find_session, list_sessions

__all__ = [
    "parse_session_file",
    "stream_session_file",
    "get_session_metadata",
    "extract_turns",
    "detect_compacts",
    "segment_session",
    "get_attributed_tool_call",
    "aggregate_by_user_request",
    "aggregate_file_stats",
    "aggregate_tool_size_stats",
    "aggregate_tool_stats",
    "get_top_consumers",
    "generate_report",
    "find_latest_session",
    "find_session",
    "list_sessions",
]
