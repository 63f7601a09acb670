"""Wall-clock duration formatting for ISO-8601 timestamps."""

from datetime import datetime


def parse_timestamp(ts_value: str) -> datetime | None:
    """Parse an ISO 8601 timestamp ("2026-02-13T12:00:00.000Z"), or None."""
    if not isinstance(ts_value, str) or not ts_value:
        return None
    try:
        return datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_duration(start: str, end: str) -> str:
    """Format the span between two timestamps as "12m 5s" (or "42s").

    Unparseable or negative spans yield "0m".
    """
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return "0m"

    try:
        diff_ms = int((end_dt - start_dt).total_seconds() * 1000)
    except TypeError:
        # Mixed naive/aware timestamps
        return "0m"

    if diff_ms < 0:
        return "0m"

    minutes = diff_ms // 60000
    seconds = (diff_ms % 60000) // 1000
    if minutes == 0:
        return f"{seconds}s"
    return f"{minutes}m {seconds}s"
