"""Command-line entry point: analyze, turns, sessions, compare."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.text import Text

from ctxmap import __version__
from ctxmap.formatters import (
    format_json,
    format_markdown,
    render_comparison,
    render_report,
    render_session_list,
    render_size_report,
    render_turns,
)
from ctxmap.services.config_manager import ConfigManager
from ctxmap.services.jsonl_parser import get_session_metadata, parse_session_file
from ctxmap.services.report_builder import generate_report
from ctxmap.services.session_finder import (
    filter_by_project,
    find_latest_session,
    find_session,
    list_sessions,
    project_from_path,
)
from ctxmap.services.turn_extractor import extract_turns
from ctxmap.types.report import SessionInfo, SessionReport
from ctxmap.utils.pricing import PRICING, get_pricing

logger = logging.getLogger(__name__)

FORMATS = ("table", "json", "markdown", "turns")


class CliError(Exception):
    """An expected failure reported to the user without a traceback."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctxmap",
        description="Claude Code token usage analysis and visualization",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--projects-dir", help="Claude projects directory (default: from settings)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze token usage for a session")
    _add_session_args(analyze)
    analyze.add_argument("-l", "--latest", action="store_true", help="Analyze the latest session")
    analyze.add_argument("-f", "--format", choices=FORMATS, help="Output format")
    analyze.add_argument("-t", "--top", type=int, help="Number of top consumers to show")
    analyze.add_argument("--by-size", action="store_true",
                         help="Show size-based aggregation instead of token deltas")
    analyze.add_argument("--tier", choices=sorted(PRICING), help="Pricing tier for the cost estimate")

    turns = sub.add_parser("turns", help="Show a turn-by-turn breakdown of a session")
    _add_session_args(turns)

    sessions = sub.add_parser("sessions", help="List all available sessions")
    sessions.add_argument("-p", "--project", help="Filter by project path")

    compare = sub.add_parser("compare", help="Compare token usage across sessions")
    compare.add_argument("-s", "--sessions", help="Comma-separated session IDs to compare")
    compare.add_argument("-l", "--latest", type=int, default=3, help="Compare the latest N sessions")

    return parser


def _add_session_args(parser: argparse.ArgumentParser):
    parser.add_argument("-s", "--session", help="Session ID (or prefix) to analyze")
    parser.add_argument("-p", "--project", help="Project path to search for sessions")
    parser.add_argument("file", nargs="?", help="Path to a transcript .jsonl file")


def run(argv: list[str] | None = None, config: ConfigManager | None = None) -> int:
    """Parse arguments, run the command, and return the exit status."""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)
    args = parser.parse_args(argv)
    if args.command is None:
        # Bare invocation analyzes the latest session
        args = parser.parse_args([*argv, "analyze"])

    config = config or ConfigManager()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or config.debug_logging() else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    projects_dir = Path(args.projects_dir).expanduser() if args.projects_dir else config.projects_dir()

    out = Console()
    err = Console(stderr=True)
    try:
        if args.command == "analyze":
            return _cmd_analyze(args, config, projects_dir, out, err)
        if args.command == "turns":
            return _cmd_turns(args, projects_dir, out, err)
        if args.command == "sessions":
            return _cmd_sessions(args, projects_dir, out)
        return _cmd_compare(args, config, projects_dir, out, err)
    except CliError as e:
        err.print(Text(str(e), style="red"))
        return 1


def _cmd_analyze(args, config, projects_dir, out: Console, err: Console) -> int:
    try:
        pricing = get_pricing(args.tier or config.pricing_tier())
    except ValueError as e:
        raise CliError(str(e)) from e
    top_n = args.top if args.top and args.top > 0 else config.top_n()

    session = _resolve_session(args, projects_dir)
    err.print(f"Analyzing: {session.file_path}", markup=False)
    report = analyze_session(session, top_n=top_n, pricing=pricing)
    if report is None:
        err.print("No turns with usage data found in this session.")
        return 0

    fmt = args.format or config.get_string("output/format")
    if fmt not in FORMATS:
        logger.warning("Unknown output format %r in settings, using table", fmt)
        fmt = "table"
    if fmt == "json":
        out.print(format_json(report), markup=False, highlight=False, emoji=False, soft_wrap=True)
    elif fmt == "markdown":
        out.print(format_markdown(report), markup=False, highlight=False, emoji=False, soft_wrap=True)
    elif fmt == "turns":
        render_turns(report, out)
    elif args.by_size:
        render_size_report(report, out)
    else:
        render_report(report, out)
    return 0


def _cmd_turns(args, projects_dir, out: Console, err: Console) -> int:
    session = _resolve_session(args, projects_dir)
    err.print(f"Analyzing: {session.file_path}", markup=False)
    report = analyze_session(session)
    if report is None:
        err.print("No turns with usage data found.")
        return 0
    render_turns(report, out)
    return 0


def _cmd_sessions(args, projects_dir, out: Console) -> int:
    sessions = filter_by_project(list_sessions(projects_dir), args.project)
    if not sessions:
        out.print("No sessions found.")
        return 0
    render_session_list(sessions, out)
    return 0


def _cmd_compare(args, config, projects_dir, out: Console, err: Console) -> int:
    if args.sessions:
        session_ids = [s.strip() for s in args.sessions.split(",") if s.strip()]
    else:
        n = args.latest if args.latest > 0 else 3
        session_ids = [s.id for s in list_sessions(projects_dir)[:n]]
    if not session_ids:
        raise CliError("No sessions to compare")

    pricing = get_pricing(config.pricing_tier())
    reports: list[SessionReport] = []
    for session_id in session_ids:
        session = find_session(session_id, projects_dir)
        if session is None:
            err.print(f"Session not found: {session_id}")
            continue
        report = analyze_session(session, pricing=pricing)
        if report is not None:
            reports.append(report)

    if not reports:
        raise CliError("No valid sessions to compare")
    render_comparison(reports, out)
    return 0


def _resolve_session(args, projects_dir: Path) -> SessionInfo:
    """Pick the transcript named by a file argument, a session id, or the latest one."""
    if args.file:
        path = Path(args.file).expanduser()
        if not path.is_file():
            raise CliError(f"File not found: {path}")
        return SessionInfo(
            id=path.stem,
            project_path=project_from_path(path),
            file_path=str(path),
            modified_at=path.stat().st_mtime,
        )
    if args.session and not getattr(args, "latest", False):
        session = find_session(args.session, projects_dir)
        if session is None:
            raise CliError(f"Session not found: {args.session}")
        return session
    session = find_latest_session(projects_dir, args.project)
    if session is None:
        raise CliError("No sessions found. Run some Claude Code sessions first.")
    return session


def analyze_session(session: SessionInfo, **report_options) -> SessionReport | None:
    """Parse a transcript and build its report; None when it has no turns."""
    try:
        entries = parse_session_file(session.file_path)
    except OSError as e:
        raise CliError(f"Cannot read {session.file_path}: {e.strerror or e}") from e
    turns = extract_turns(entries)
    if not turns:
        return None
    metadata = get_session_metadata(entries)
    return generate_report(
        metadata.session_id or session.id,
        session.project_path,
        turns,
        **report_options,
    )
