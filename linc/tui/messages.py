# SPDX-License-Identifier: MIT
"""Events flowing through the session controller.

Views emit events in response to keys, effects emit them on completion, and
the controller consumes them one at a time. Issue updates use a single shape
for both phases: ``completed=False`` asks for the change, ``completed=True``
reports the outcome (with ``error`` set on failure).
"""
from dataclasses import dataclass, field
from typing import List, Optional

from linc.config import Workspace
from linc.models import Comment, Issue, State, Team, Viewer
from linc.tui.app_state import LaunchRequest


@dataclass
class KeyPressed:
    """A key press, normalized to the textual key name or the typed character."""
    key: str
    character: Optional[str] = None

    def __post_init__(self) -> None:
        if self.character is None:
            if len(self.key) == 1:
                self.character = self.key
            elif self.key == "space":
                self.character = " "


# --- View switching --------------------------------------------------------


@dataclass
class SwitchToList:
    pass


@dataclass
class SwitchToDetail:
    issue: Issue


@dataclass
class SwitchToStartWork:
    issue: Issue


@dataclass
class SwitchToTeamSelect:
    pass


@dataclass
class SwitchToSettings:
    pass


@dataclass
class SwitchToWorkspaceSelect:
    pass


@dataclass
class NextIssue:
    pass


@dataclass
class PrevIssue:
    pass


# --- Data loading ----------------------------------------------------------
# generation identifies the team/workspace selection the load was issued for


@dataclass
class ViewerLoaded:
    viewer: Optional[Viewer] = None
    error: Optional[Exception] = None
    generation: int = 0


@dataclass
class StatesLoaded:
    states: List[State] = field(default_factory=list)
    error: Optional[Exception] = None
    generation: int = 0


@dataclass
class IssuesLoaded:
    """The viewer's own issues for the selected team."""
    issues: List[Issue] = field(default_factory=list)
    error: Optional[Exception] = None
    generation: int = 0


@dataclass
class AllIssuesLoaded:
    issues: List[Issue] = field(default_factory=list)
    error: Optional[Exception] = None
    generation: int = 0


# --- Actions ---------------------------------------------------------------


@dataclass
class TeamSelected:
    team: Team
    set_as_default: bool = False


@dataclass
class WorkspaceSelected:
    workspace: Optional[Workspace] = None
    add_new: bool = False


@dataclass
class IssueTitleUpdated:
    issue_id: str
    new_title: str
    error: Optional[Exception] = None
    completed: bool = False


@dataclass
class IssuePriorityUpdated:
    issue_id: str
    new_priority: int
    error: Optional[Exception] = None
    completed: bool = False


@dataclass
class IssueStateUpdated:
    """State change for an issue.

    A completed event with an empty new_state_id and no error means the
    requested resolution (cancel/duplicate) found no matching state.
    """
    issue_id: str
    new_state_id: str = ""
    error: Optional[Exception] = None
    completed: bool = False


@dataclass
class CancelIssue:
    issue_id: str
    team_id: str


@dataclass
class MarkDuplicate:
    issue_id: str
    team_id: str


@dataclass
class CommentCreated:
    comment: Optional[Comment] = None
    error: Optional[Exception] = None


@dataclass
class StartAgent:
    request: LaunchRequest


@dataclass
class OpenBrowser:
    url: str


@dataclass
class ProviderSelected:
    provider: str


@dataclass
class SettingsSaved:
    error: Optional[Exception] = None
