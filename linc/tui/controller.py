# SPDX-License-Identifier: MIT
"""
Session controller: the state machine behind the TUI.

The controller owns every view and the active ViewKind. dispatch() consumes
one event (plus whatever events the views emit in response) and returns the
effects to run. It performs no I/O itself, so it can be driven directly in
tests without a terminal.
"""

import logging
from collections import deque
from typing import Callable, Deque, List, Optional

from rich.markup import escape

from linc.config import Config, Workspace
from linc.linear_client import LinearClient, LinearError
from linc.models import Team, Viewer
from linc.tui.app_state import LaunchRequest, OutcomeKind, SessionOutcome, ViewKind
from linc.tui.effects import (
    CancelIssueEffect,
    CreateComment,
    Effect,
    LoadAllIssues,
    LoadMyIssues,
    LoadStates,
    LoadViewer,
    MarkDuplicateEffect,
    OpenUrl,
    SaveDefaultTeam,
    SaveProvider,
    UpdatePriority,
    UpdateState,
    UpdateTitle,
)
from linc.tui.list_view import ListView
from linc.tui.messages import (
    AllIssuesLoaded,
    CancelIssue,
    CommentCreated,
    IssuePriorityUpdated,
    IssuesLoaded,
    IssueStateUpdated,
    IssueTitleUpdated,
    KeyPressed,
    MarkDuplicate,
    NextIssue,
    OpenBrowser,
    PrevIssue,
    ProviderSelected,
    SettingsSaved,
    StartAgent,
    StatesLoaded,
    SwitchToDetail,
    SwitchToList,
    SwitchToSettings,
    SwitchToStartWork,
    SwitchToTeamSelect,
    SwitchToWorkspaceSelect,
    TeamSelected,
    ViewerLoaded,
    WorkspaceSelected,
)
from linc.tui.views import (
    DetailView,
    SettingsView,
    StartWorkView,
    TeamSelectView,
    WorkspaceSelectView,
)

logger = logging.getLogger(__name__)

# Views in which a bare "q" is ordinary input rather than quit
_Q_IS_INPUT = (ViewKind.START_WORK, ViewKind.SETTINGS)


class SessionController:
    """Routes events to views and turns intents into effects.

    Args:
        client: Tracker client for the active workspace
        config: Loaded configuration (workspaces, provider)
        workspace: The active workspace
        working_dir: Directory shown in the list header
        providers: Provider ids offered in settings
        client_factory: Builds a client from an API key on workspace switch
        branch: Current git branch, used to highlight its issue
        version: Version string shown in the list header
    """

    def __init__(
        self,
        client: LinearClient,
        config: Config,
        workspace: Optional[Workspace],
        working_dir: str = "",
        providers: Optional[List[str]] = None,
        client_factory: Callable[[str], LinearClient] = LinearClient,
        branch: str = "",
        version: str = "dev",
    ) -> None:
        self.client = client
        self.config = config
        self.workspace = workspace
        self.working_dir = working_dir
        self.providers = list(providers or [])
        self.client_factory = client_factory
        self.branch = branch
        self.version = version

        self.view: Optional[ViewKind] = None
        self.error: Optional[Exception] = None
        self.outcome: Optional[SessionOutcome] = None
        self.generation = 0

        self.viewer: Optional[Viewer] = None
        self.teams: List[Team] = []
        self.selected_team: Optional[Team] = None

        self.list_view = self._new_list_view()
        self.team_select = TeamSelectView()
        self.workspace_select = WorkspaceSelectView(config.workspaces, self._workspace_id())
        self.detail: Optional[DetailView] = None
        self.start_work: Optional[StartWorkView] = None
        self.settings: Optional[SettingsView] = None

        self._pending_launch: Optional[LaunchRequest] = None
        self._queue: Deque[object] = deque()

    def _new_list_view(self) -> ListView:
        return ListView(version=self.version, working_dir=self.working_dir, branch=self.branch)

    def _workspace_id(self) -> str:
        return self.workspace.id if self.workspace else ""

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def start(self) -> List[Effect]:
        return [LoadViewer(self.client, generation=self.generation)]

    def dispatch(self, event: object) -> List[Effect]:
        """Process an event and any events it triggers; return effects to run."""
        effects: List[Effect] = []
        self._queue.append(event)
        while self._queue and not self.finished:
            effects.extend(self._handle(self._queue.popleft()))
        self._queue.clear()
        return effects

    # -------------------------------------------------------------------------
    # Event handling
    # -------------------------------------------------------------------------

    def _handle(self, event: object) -> List[Effect]:
        if isinstance(event, KeyPressed):
            return self._handle_key(event)

        # loads
        if isinstance(event, (ViewerLoaded, StatesLoaded, IssuesLoaded, AllIssuesLoaded)):
            if event.generation != self.generation:
                logger.debug("dropping stale %s", type(event).__name__)
                return []
        if isinstance(event, ViewerLoaded):
            return self._on_viewer_loaded(event)
        if isinstance(event, StatesLoaded):
            if event.error is not None:
                self.list_view.set_states_error(event.error)
            else:
                self.list_view.set_states(event.states)
            return []
        if isinstance(event, IssuesLoaded):
            if event.error is not None:
                self.list_view.set_my_issues_error(event.error)
            else:
                self.list_view.set_my_issues(event.issues)
            return []
        if isinstance(event, AllIssuesLoaded):
            if event.error is not None:
                self.list_view.set_all_issues_error(event.error)
            else:
                self.list_view.set_all_issues(event.issues)
            return []

        # navigation
        if isinstance(event, TeamSelected):
            return self._on_team_selected(event)
        if isinstance(event, SwitchToList):
            self.view = ViewKind.LIST
            return []
        if isinstance(event, SwitchToTeamSelect):
            self.team_select.set_teams(self.teams)
            self.view = ViewKind.TEAM_SELECT
            return []
        if isinstance(event, SwitchToWorkspaceSelect):
            self.workspace_select.set_workspaces(self.config.workspaces, self._workspace_id())
            self.view = ViewKind.WORKSPACE_SELECT
            return []
        if isinstance(event, WorkspaceSelected):
            return self._on_workspace_selected(event)
        if isinstance(event, SwitchToDetail):
            self.detail = DetailView(event.issue)
            self.view = ViewKind.DETAIL
            return []
        if isinstance(event, (NextIssue, PrevIssue)):
            self._step_detail(isinstance(event, NextIssue))
            return []
        if isinstance(event, SwitchToStartWork):
            self.start_work = StartWorkView(event.issue)
            self.view = ViewKind.START_WORK
            return []
        if isinstance(event, SwitchToSettings):
            self.settings = SettingsView(self.config, self.workspace, self.providers)
            self.view = ViewKind.SETTINGS
            return []

        # issue updates
        if isinstance(event, IssueTitleUpdated):
            if not event.completed:
                return [UpdateTitle(self.client, event.issue_id, event.new_title)]
            self.list_view.apply_title_update(event)
            return []
        if isinstance(event, IssuePriorityUpdated):
            if not event.completed:
                return [UpdatePriority(self.client, event.issue_id, event.new_priority)]
            self.list_view.apply_priority_update(event)
            return []
        if isinstance(event, IssueStateUpdated):
            if not event.completed:
                return [UpdateState(self.client, event.issue_id, event.new_state_id)]
            self.list_view.apply_state_update(event)
            return []
        if isinstance(event, CancelIssue):
            return [CancelIssueEffect(self.client, event.issue_id, event.team_id)]
        if isinstance(event, MarkDuplicate):
            return [MarkDuplicateEffect(self.client, event.issue_id, event.team_id)]

        # launch
        if isinstance(event, StartAgent):
            return self._on_start_agent(event.request)
        if isinstance(event, CommentCreated):
            return self._on_comment_created(event)

        # misc
        if isinstance(event, OpenBrowser):
            if not event.url:
                return []
            return [OpenUrl(event.url)]
        if isinstance(event, ProviderSelected):
            return [SaveProvider(self.config, event.provider)]
        if isinstance(event, SettingsSaved):
            if self.settings is not None:
                self.settings.set_saved(event.error)
            return []

        logger.debug("unhandled event %r", event)
        return []

    def _handle_key(self, event: KeyPressed) -> List[Effect]:
        if event.key == "ctrl+c":
            return self._finish(SessionOutcome(OutcomeKind.QUIT))
        if event.key == "q" and self._q_quits():
            return self._finish(SessionOutcome(OutcomeKind.QUIT))

        view = self.active_view()
        if view is None:
            return []
        self._queue.extend(view.handle_key(event))
        return []

    def _q_quits(self) -> bool:
        if self.view in _Q_IS_INPUT:
            return False
        if self.view == ViewKind.LIST and self.list_view.is_capturing_text():
            return False
        return True

    def _finish(self, outcome: SessionOutcome) -> List[Effect]:
        logger.info("session finished: %s", outcome.kind.value)
        self.outcome = outcome
        return []

    def active_view(self):
        """The view object receiving keys, or None while loading or on error."""
        if self.error is not None or self.view is None:
            return None
        return {
            ViewKind.LIST: self.list_view,
            ViewKind.TEAM_SELECT: self.team_select,
            ViewKind.WORKSPACE_SELECT: self.workspace_select,
            ViewKind.DETAIL: self.detail,
            ViewKind.START_WORK: self.start_work,
            ViewKind.SETTINGS: self.settings,
        }[self.view]

    def _on_viewer_loaded(self, event: ViewerLoaded) -> List[Effect]:
        if event.error is not None or event.viewer is None:
            self.error = event.error or LinearError("no viewer returned")
            return []
        self.viewer = event.viewer
        self.teams = list(event.viewer.teams)

        default_id = self.workspace.default_team_id if self.workspace else ""
        if default_id:
            for team in self.teams:
                if team.id == default_id:
                    return self._select_team(team)
        if len(self.teams) == 1:
            return self._select_team(self.teams[0])

        self.team_select.set_teams(self.teams)
        self.view = ViewKind.TEAM_SELECT
        return []

    def _select_team(self, team: Team) -> List[Effect]:
        logger.info("selected team %s (%s)", team.name, team.key)
        self.selected_team = team
        self.generation += 1
        self.list_view = self._new_list_view()
        self.view = ViewKind.LIST
        return [
            LoadStates(self.client, team.id, generation=self.generation),
            LoadMyIssues(self.client, team.id, generation=self.generation),
            LoadAllIssues(self.client, team.id, generation=self.generation),
        ]

    def _on_team_selected(self, event: TeamSelected) -> List[Effect]:
        effects = self._select_team(event.team)
        if event.set_as_default and self.workspace is not None:
            self.workspace.default_team_id = event.team.id
            effects.append(SaveDefaultTeam(self.config, self.workspace.id, event.team.id))
        return effects

    def _on_workspace_selected(self, event: WorkspaceSelected) -> List[Effect]:
        if event.add_new:
            return self._finish(SessionOutcome(OutcomeKind.ADD_WORKSPACE))
        ws = event.workspace
        if ws is None:
            return []
        if ws.id == self._workspace_id():
            self.team_select.set_teams(self.teams)
            self.view = ViewKind.TEAM_SELECT
            return []

        logger.info("switching to workspace %s", ws.name)
        self.workspace = ws
        self.client = self.client_factory(ws.api_key)
        self.generation += 1
        self.view = None
        self.error = None
        self.viewer = None
        self.teams = []
        self.selected_team = None
        self.list_view = self._new_list_view()
        self.team_select = TeamSelectView()
        self.detail = None
        self.start_work = None
        self.settings = None
        self._pending_launch = None
        return [LoadViewer(self.client, generation=self.generation)]

    def _step_detail(self, forward: bool) -> None:
        if self.detail is None:
            return
        if forward:
            issue = self.list_view.get_next_issue()
        else:
            issue = self.list_view.get_prev_issue()
        if issue is None:
            return
        if forward:
            self.list_view.move_cursor_next()
        else:
            self.list_view.move_cursor_prev()
        self.detail.set_issue(issue)

    def _on_start_agent(self, request: LaunchRequest) -> List[Effect]:
        if request.comment:
            if self._pending_launch is not None:
                return []
            self._pending_launch = request
            return [CreateComment(self.client, request.issue.id, request.comment)]
        return self._finish(SessionOutcome(OutcomeKind.LAUNCH, launch=request))

    def _on_comment_created(self, event: CommentCreated) -> List[Effect]:
        request = self._pending_launch
        if request is None:
            return []
        self._pending_launch = None
        request.comment_synced = True
        if event.error is not None:
            request.comment_error = str(event.error)
        return self._finish(SessionOutcome(OutcomeKind.LAUNCH, launch=request))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> str:
        if self.error is not None:
            return (
                f"[bold red]Error: {escape(str(self.error))}[/]\n\n"
                "[dim]Press q to quit.[/]"
            )
        view = self.active_view()
        if view is None:
            return "[dim]Loading workspace...[/]"
        return view.render()
