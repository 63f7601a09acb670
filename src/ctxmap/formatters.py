"""Terminal, JSON and markdown rendering of session reports."""

from dataclasses import asdict
from datetime import datetime
from typing import Sequence

import orjson
from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ctxmap.types.report import SessionInfo, SessionReport
from ctxmap.types.turns import SessionSegment
from ctxmap.utils.tool_format import action_summary

# Upper bounds (context tokens) of each performance zone
PERFORMANCE_ZONES = {
    "optimal": 10_000,
    "moderate": 50_000,
    "degraded": 100_000,
    "significant degradation": 150_000,
}

SESSION_LIST_LIMIT = 20


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------

def format_tokens(n: int) -> str:
    """1234 -> 1.2K, 2500000 -> 2.5M, -30000 -> -30.0K."""
    if abs(n) >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if abs(n) >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(n)


def format_currency(n: float) -> str:
    if n < 0.01:
        return f"${n:.4f}"
    if n < 1:
        return f"${n:.3f}"
    return f"${n:.2f}"


def format_percent(n: float) -> str:
    return f"{n:.1f}%"


def format_kb(size: int | None) -> str:
    """Byte count as KB/MB, "-" for nothing."""
    if not size:
        return "-"
    kb = size / 1024
    if kb >= 1024:
        return f"{kb / 1024:.1f}MB"
    return f"{kb:.1f}KB"


def performance_zone(context_tokens: int) -> str:
    for zone, limit in PERFORMANCE_ZONES.items():
        if context_tokens <= limit:
            return zone
    return "critical"


_ZONE_STYLES = {
    "optimal": "green",
    "moderate": "yellow",
    "degraded": "dark_orange",
    "significant degradation": "red",
    "critical": "bold red",
}


def _zone_text(context_tokens: int, percent: float) -> Text:
    zone = performance_zone(context_tokens)
    return Text(
        f"{format_tokens(context_tokens)} ({format_percent(percent)}) {zone}",
        style=_ZONE_STYLES[zone],
    )


def _delta_text(delta: int) -> Text:
    label = ("+" if delta >= 0 else "") + format_tokens(delta)
    if delta > 5000:
        return Text(label, style="bold red")
    if delta > 1000:
        return Text(label, style="yellow")
    return Text(label)


def _size_text(size: int | None) -> Text:
    label = format_kb(size)
    if size and size > 50 * 1024:
        return Text(label, style="bold red")
    if size and size > 10 * 1024:
        return Text(label, style="yellow")
    return Text(label)


def _short_id(session_id: str, length: int = 8) -> str:
    return f"{session_id[:length]}..." if len(session_id) > length else session_id


# ---------------------------------------------------------------------------
# Terminal (rich)
# ---------------------------------------------------------------------------

def render_report(report: SessionReport, console: Console) -> None:
    """Segment overview, top consumers, per-tool totals and summary."""
    header = (
        f"Session: {_short_id(report.session_id)} | Duration: {report.duration} | "
        f"Peak: {format_tokens(report.peak_context)} tokens"
    )
    console.print(Panel(header, title="CtxMap - Session Token Analysis", box=box.ROUNDED))

    compacts = {c.turn_index: c for c in report.compact_events}
    for number, segment in enumerate(report.segments, start=1):
        console.print(_segment_text(segment, number))
        compact = compacts.get(segment.end_turn + 1)
        if compact is not None:
            console.print(Text(
                f"  COMPACT at turn {compact.turn_index + 1} (context dropped from "
                f"{format_tokens(compact.before_tokens)} → {format_tokens(compact.after_tokens)})",
                style="bold magenta",
            ))
    console.print()

    if report.top_consumers:
        table = Table(title="Top Token Consumers", box=box.SIMPLE_HEAD)
        table.add_column("Action", max_width=40, no_wrap=True)
        table.add_column("Tokens", justify="right")
        table.add_column("Cumulative", justify="right")
        for consumer in report.top_consumers[:8]:
            table.add_row(
                Text(consumer.description),
                f"+{format_tokens(consumer.tokens)}",
                format_tokens(consumer.cumulative),
            )
        console.print(table)

    if report.tool_stats:
        table = Table(title="By Tool Type (Full Session)", box=box.SIMPLE_HEAD)
        table.add_column("Tool")
        table.add_column("Count", justify="right")
        table.add_column("Tokens", justify="right")
        table.add_column("% Total", justify="right")
        for stat in report.tool_stats:
            table.add_row(
                stat.tool_name,
                f"{stat.count:,}",
                format_tokens(stat.total_context_tokens),
                format_percent(stat.percent_of_session),
            )
        console.print(table)

    console.print(Panel(_summary_group(report), title="Session Summary", box=box.ROUNDED))


def _segment_text(segment: SessionSegment, number: int) -> Text:
    text = Text(
        f"SEGMENT {number}: {segment.label} "
        f"(Turns {segment.start_turn + 1}-{segment.end_turn + 1}) | Duration: {segment.duration}\n",
        style="bold",
    )
    text.append("  Peak context: ")
    text.append_text(_zone_text(segment.peak_context, segment.peak_context_percent))
    return text


def _summary_group(report: SessionReport) -> Group:
    lines = []
    peak = Text("Peak Context: ")
    peak.append_text(_zone_text(report.peak_context, report.peak_context_percent))
    lines.append(peak)
    lines.append(Text(
        f"Total Input: {format_tokens(report.total_input_tokens)} | "
        f"Output: {format_tokens(report.total_output_tokens)}"
    ))
    if report.total_cache_creation > 0 or report.total_cache_read > 0:
        lines.append(Text(
            f"Cache: {format_tokens(report.total_cache_creation)} created | "
            f"{format_tokens(report.total_cache_read)} read"
        ))
    lines.append(Text(f"ESTIMATED COST: {format_currency(report.estimated_cost)}", style="bold"))
    return Group(*lines)


def render_size_report(report: SessionReport, console: Console) -> None:
    """Tool-result bytes by tool, with each tool's files underneath."""
    console.print(Panel(
        f"Session: {_short_id(report.session_id)} | Duration: {report.duration}",
        title="CtxMap - Tool Result Size Analysis",
        box=box.ROUNDED,
    ))

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Tool / File")
    table.add_column("Count", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Avg", justify="right")
    total_bytes = 0
    for stat in report.tool_size_stats:
        total_bytes += stat.total_size_bytes
        table.add_row(
            Text(stat.tool_name, style="bold"),
            f"{stat.count:,}",
            format_kb(stat.total_size_bytes),
            format_kb(stat.avg_size_bytes),
        )
        for f in stat.files:
            table.add_row(Text(f"  {f.path}"), f"{f.count:,}", format_kb(f.size_bytes), "")
    console.print(table)
    console.print(f"Total result size: {format_kb(total_bytes)}")


def render_turns(report: SessionReport, console: Console) -> None:
    """Turn-by-turn timeline with prompt and compaction rows."""
    console.print(Panel(
        f"Session: {_short_id(report.session_id, 12)} | {report.total_turns} turns | {report.duration}",
        title="CtxMap - Turn-by-Turn Breakdown",
        box=box.ROUNDED,
    ))

    compacts = {c.turn_index: c for c in report.compact_events}
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Turn", justify="right")
    table.add_column("Context", justify="right")
    table.add_column("Delta", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Tool", max_width=16, no_wrap=True)
    table.add_column("Action", max_width=50, no_wrap=True)

    last_prompt = None
    total_size = 0
    for segment in report.segments:
        segment_size = sum(t.result_size or 0 for t in segment.turns)
        total_size += segment_size
        table.add_section()
        table.add_row("", "", "", "", "", Text(
            f"─── {segment.label} (Turns {segment.start_turn + 1}-{segment.end_turn + 1}) "
            f"─── Peak: {format_tokens(segment.peak_context)} ─── Size: {format_kb(segment_size)}",
            style="bold cyan",
        ))
        for turn in segment.turns:
            compact = compacts.get(turn.turn_index)
            if compact is not None:
                table.add_row("", "", "", "", "", Text(
                    f"COMPACT: {format_tokens(compact.before_tokens)} → "
                    f"{format_tokens(compact.after_tokens)} (saved {format_tokens(compact.tokens_saved)})",
                    style="bold magenta",
                ))
            if turn.user_prompt and turn.user_prompt != last_prompt:
                table.add_row("", "", "", "", "", Text(f'"{turn.user_prompt}"', style="italic green"))
                last_prompt = turn.user_prompt
            table.add_row(
                str(turn.turn_index + 1),
                format_tokens(turn.context_tokens),
                _delta_text(turn.token_delta),
                _size_text(turn.result_size),
                turn.tool_call.tool_name if turn.tool_call else "(text)",
                Text(action_summary(turn.tool_call)),
            )
    console.print(table)
    console.print(
        f"SUMMARY: Peak {format_tokens(report.peak_context)} ({format_percent(report.peak_context_percent)}) | "
        f"Total Size: {format_kb(total_size)} | Cost: {format_currency(report.estimated_cost)}"
    )


def render_session_list(sessions: Sequence[SessionInfo], console: Console) -> None:
    table = Table(title="Available Sessions", box=box.SIMPLE_HEAD)
    table.add_column("Session ID")
    table.add_column("Project", max_width=40, no_wrap=True)
    table.add_column("Last Modified")
    for session in sessions[:SESSION_LIST_LIMIT]:
        table.add_row(
            session.id[:8],
            session.project_path,
            datetime.fromtimestamp(session.modified_at).strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)
    if len(sessions) > SESSION_LIST_LIMIT:
        console.print(f"... and {len(sessions) - SESSION_LIST_LIMIT} more sessions")


def render_comparison(reports: Sequence[SessionReport], console: Console) -> None:
    table = Table(title="CtxMap - Session Comparison", box=box.ROUNDED)
    table.add_column("Session")
    table.add_column("Turns", justify="right")
    table.add_column("Peak Ctx", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Compacts", justify="right")
    for report in reports:
        table.add_row(
            _short_id(report.session_id),
            f"{report.total_turns:,}",
            format_tokens(report.peak_context),
            format_currency(report.estimated_cost),
            str(len(report.compact_events)),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Plain text formats
# ---------------------------------------------------------------------------

def report_to_dict(report: SessionReport) -> dict:
    """The report as plain data with camelCase keys."""
    return _camelize(asdict(report))


def format_json(report: SessionReport) -> str:
    return orjson.dumps(report_to_dict(report), option=orjson.OPT_INDENT_2).decode("utf-8")


def format_markdown(report: SessionReport) -> str:
    lines = [
        "# CtxMap Session Analysis",
        "",
        f"**Session:** `{_short_id(report.session_id)}`",
        f"**Duration:** {report.duration}",
        f"**Total Turns:** {report.total_turns}",
        "",
        "## Summary",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Peak Context | {format_tokens(report.peak_context)} ({format_percent(report.peak_context_percent)}) |",
        f"| Total Input | {format_tokens(report.total_input_tokens)} |",
        f"| Total Output | {format_tokens(report.total_output_tokens)} |",
        f"| Compactions | {len(report.compact_events)} |",
        f"| Estimated Cost | {format_currency(report.estimated_cost)} |",
        "",
    ]

    if report.top_consumers:
        lines += [
            "## Top Token Consumers",
            "",
            "| Action | Tokens | Cumulative |",
            "|--------|--------|------------|",
        ]
        for consumer in report.top_consumers[:10]:
            lines.append(
                f"| {_md_escape(consumer.description)} | +{format_tokens(consumer.tokens)} "
                f"| {format_tokens(consumer.cumulative)} |"
            )
        lines.append("")

    lines += [
        "## By Tool Type",
        "",
        "| Tool | Count | Tokens | % of Session |",
        "|------|-------|--------|--------------|",
    ]
    for stat in report.tool_stats:
        lines.append(
            f"| {stat.tool_name} | {stat.count} | {format_tokens(stat.total_context_tokens)} "
            f"| {format_percent(stat.percent_of_session)} |"
        )
    return "\n".join(lines)


def _md_escape(text: str) -> str:
    return text.replace("|", "\\|")


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.title() for part in rest)


def _camelize(value):
    """Recursively camelCase dataclass-derived dict keys.

    Tool inputs are copied verbatim; their keys belong to the transcript.
    """
    if isinstance(value, dict):
        return {
            _camel(k): (v if k == "input" else _camelize(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_camelize(v) for v in value]
    return value
