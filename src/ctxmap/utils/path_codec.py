"""Map filesystem paths to Claude Code project directory names."""

import re

_SEPARATOR_RE = re.compile(r"[\\/:]")


def encode_path(path: str) -> str:
    """Encode a filesystem path to a Claude project directory name.

    /home/wiz/AI/LLM → -home-wiz-AI-LLM
    C:\\work\\app → C--work-app
    """
    if not path:
        return ""
    return _SEPARATOR_RE.sub("-", path)


def matches_project(project_id: str, project: str) -> bool:
    """True when project (encoded name or real path) names project_id."""
    return project_id == project or project_id == encode_path(project)
