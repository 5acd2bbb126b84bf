"""
Pytest configuration and fixtures for linc tests.
"""

import sys
from pathlib import Path

# Ensure project root is in sys.path for 'linc' imports
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from linc.config import Config, Workspace
from linc.linear_client import LinearClient
from linc.models import Issue, State, Team, User, Viewer


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "tui: marks TUI tests")


@pytest.fixture
def temp_state_dir(tmp_path_factory, monkeypatch) -> Path:
    """Create and return a temporary state directory.

    Sets LINC_STATE and resets the debug logger so it picks up the new path.
    """
    state_dir = tmp_path_factory.mktemp("state") / ".local" / "state" / "linc"
    state_dir.mkdir(parents=True)
    monkeypatch.setenv("LINC_STATE", str(state_dir))
    monkeypatch.delenv("LINC_DEBUG", raising=False)

    from linc.debug_logger import reset_logger
    reset_logger()

    return state_dir


@pytest.fixture
def temp_config_dir(tmp_path: Path, monkeypatch) -> Path:
    config_dir = tmp_path / "config"
    monkeypatch.setenv("LINC_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture(autouse=True)
def isolate_dirs(temp_state_dir: Path, temp_config_dir: Path):
    """Keep every test away from the real ~/.linc and ~/.local/state/linc."""
    yield temp_state_dir

    from linc.debug_logger import reset_logger
    reset_logger()


# --- Builders ---


TEAM = Team(id="team-1", name="Engineering", key="ENG")

STATES = [
    State(id="s-backlog", name="Backlog", type="backlog", position=0),
    State(id="s-todo", name="Todo", type="unstarted", position=1),
    State(id="s-progress", name="In Progress", type="started", position=2),
    State(id="s-done", name="Done", type="completed", position=3),
]


def make_issue(
    n: int,
    title: str = "",
    state: Optional[State] = None,
    priority: int = 0,
    description: str = "",
    branch_name: str = "",
) -> Issue:
    return Issue(
        id=f"issue-{n}",
        identifier=f"ENG-{n}",
        title=title or f"Issue number {n}",
        description=description,
        priority=priority,
        branch_name=branch_name,
        url=f"https://linear.app/acme/issue/ENG-{n}",
        created_at="2026-01-02T10:00:00.000Z",
        state=state or STATES[1],
        assignee=User(id="u-1", name="Ada Lovelace"),
        team=TEAM,
    )


@pytest.fixture
def states() -> List[State]:
    return list(STATES)


@pytest.fixture
def issue_factory():
    return make_issue


@pytest.fixture
def workspace() -> Workspace:
    return Workspace(id="org-1", name="Acme", api_key="lin_api_test")


@pytest.fixture
def config(tmp_path: Path, workspace: Workspace) -> Config:
    return Config(workspaces=[workspace], path=tmp_path / "config" / "config.json")


@pytest.fixture
def viewer() -> Viewer:
    return Viewer(id="u-1", name="Ada Lovelace", teams=[TEAM])


@pytest.fixture
def mock_client(viewer: Viewer) -> MagicMock:
    """LinearClient double returning one team, the standard states and two issues."""
    client = MagicMock(spec=LinearClient)
    client.get_viewer.return_value = viewer
    client.get_team_states.return_value = list(STATES)
    client.get_assigned_issues.return_value = [make_issue(1), make_issue(2, priority=1)]
    client.get_all_team_issues.return_value = [make_issue(1), make_issue(2, priority=1), make_issue(3)]
    client.create_comment.return_value = None
    return client
