"""Shared test fixtures for ctxmap."""

import shutil
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PROJECT_DIR_NAME = "-home-wiz-projects-myapp"

@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR

@pytest.fixture
def simple_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "simple_session.jsonl"

@pytest.fixture
def tools_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_tools.jsonl"

@pytest.fixture
def compaction_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_compaction.jsonl"

@pytest.fixture
def malformed_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "malformed_session.jsonl"

@pytest.fixture
def tmp_session_dir(tmp_path) -> Path:
    """Create a temporary Claude projects directory structure."""
    projects_dir = tmp_path / ".claude" / "projects"
    project_dir = projects_dir / PROJECT_DIR_NAME
    project_dir.mkdir(parents=True)
    return projects_dir

@pytest.fixture
def tmp_session_file(tmp_session_dir, simple_session_path) -> Path:
    """Create a temporary session file in a mock Claude directory."""
    dest = tmp_session_dir / PROJECT_DIR_NAME / "test-session.jsonl"
    shutil.copy(simple_session_path, dest)
    return dest

@pytest.fixture
def settings_file(tmp_path) -> Path:
    """An isolated INI file for ConfigManager."""
    return tmp_path / "ctxmap.ini"
