"""Locate Claude Code transcript files under the projects root."""

import logging
from pathlib import Path

from ctxmap.types.report import SessionInfo
from ctxmap.utils.path_codec import matches_project

logger = logging.getLogger(__name__)

CLAUDE_PROJECTS_DIR = Path.home() / ".claude" / "projects"


def list_sessions(projects_root: str | Path | None = None) -> list[SessionInfo]:
    """All sessions across all projects, most recently modified first."""
    root = Path(projects_root) if projects_root else CLAUDE_PROJECTS_DIR
    if not root.exists():
        logger.warning("Projects root does not exist: %s", root)
        return []

    sessions: list[SessionInfo] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        # Only .jsonl files directly in the project dir (not subagent dirs)
        for jsonl_file in sorted(entry.glob("*.jsonl")):
            if not jsonl_file.is_file():
                continue
            try:
                mtime = jsonl_file.stat().st_mtime
            except OSError:
                logger.debug("Cannot stat %s", jsonl_file, exc_info=True)
                continue
            sessions.append(SessionInfo(
                id=jsonl_file.stem,
                project_path=entry.name,
                file_path=str(jsonl_file),
                modified_at=mtime,
            ))

    sessions.sort(key=lambda s: s.modified_at, reverse=True)
    return sessions


def filter_by_project(sessions: list[SessionInfo], project: str | None) -> list[SessionInfo]:
    if not project:
        return sessions
    return [s for s in sessions if matches_project(s.project_path, project)]


def find_latest_session(
    projects_root: str | Path | None = None,
    project: str | None = None,
) -> SessionInfo | None:
    """Most recently modified session, optionally within one project."""
    sessions = filter_by_project(list_sessions(projects_root), project)
    return sessions[0] if sessions else None


def find_session(
    session_id: str,
    projects_root: str | Path | None = None,
) -> SessionInfo | None:
    """Find a session by exact id or id prefix."""
    for session in list_sessions(projects_root):
        if session.id == session_id or session.id.startswith(session_id):
            return session
    return None


def project_from_path(file_path: str | Path) -> str:
    """The project directory name following "projects" in a transcript path."""
    parts = Path(file_path).parts
    for i, part in enumerate(parts[:-1]):
        if part == "projects":
            return parts[i + 1]
    return ""
