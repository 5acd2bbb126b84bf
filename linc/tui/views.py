# SPDX-License-Identifier: MIT
"""
Secondary views: issue detail, start-work form, team and workspace pickers,
settings.

Views own their own cursor and form state, turn key presses into events and
render themselves as Rich markup. They never perform side effects.
"""

from typing import List, Optional

from rich.markup import escape

from linc.config import Config, Workspace
from linc.models import Issue, Team
from linc.paths import PathResolver
from linc.tui.app_state import LaunchRequest, TextInput
from linc.tui.formatting import (
    ACCENT,
    help_line,
    initials,
    long_date,
    priority_text,
    state_icon,
)
from linc.tui.messages import (
    KeyPressed,
    NextIssue,
    OpenBrowser,
    PrevIssue,
    ProviderSelected,
    StartAgent,
    SwitchToDetail,
    SwitchToList,
    SwitchToStartWork,
    SwitchToWorkspaceSelect,
    TeamSelected,
    WorkspaceSelected,
)

BUTTON_OPEN = 0
BUTTON_START = 1
BUTTON_LABELS = ("Open in Browser", "Start Working")


def _button(label: str, active: bool) -> str:
    if active:
        return f"[reverse bold] {escape(label)} [/]"
    return f"[dim][ {escape(label)} ][/]"


def _checkbox(label: str, checked: bool, focused: bool) -> str:
    mark = "x" if checked else " "
    pointer = "▸" if focused else " "
    text = f"{pointer} \\[{mark}] {escape(label)}"
    return f"[bold]{text}[/]" if focused else text


# =============================================================================
# Detail
# =============================================================================


class DetailView:
    """Full view of one issue with Open / Start Working buttons."""

    def __init__(self, issue: Issue) -> None:
        self.issue = issue
        self.active_button = BUTTON_START

    def set_issue(self, issue: Issue) -> None:
        self.issue = issue
        self.active_button = BUTTON_START

    def handle_key(self, event: KeyPressed) -> list:
        key = event.key
        if key in ("down", "j"):
            return [NextIssue()]
        if key in ("up", "k"):
            return [PrevIssue()]
        if key in ("left", "h"):
            self.active_button = max(BUTTON_OPEN, self.active_button - 1)
        elif key in ("right", "l"):
            self.active_button = min(BUTTON_START, self.active_button + 1)
        elif key == "tab":
            self.active_button = BUTTON_START if self.active_button == BUTTON_OPEN else BUTTON_OPEN
        elif key == "o":
            return [OpenBrowser(self.issue.url)]
        elif key in ("s", "enter"):
            if key == "enter" and self.active_button == BUTTON_OPEN:
                return [OpenBrowser(self.issue.url)]
            return [SwitchToStartWork(self.issue)]
        elif key == "escape":
            return [SwitchToList()]
        return []

    def render(self) -> str:
        issue = self.issue
        lines = [
            f"[bold {ACCENT}]{escape(issue.identifier)}[/]  [bold]{escape(issue.title)}[/]",
            "",
            f"{state_icon(issue.state.type, issue.state.color)} {escape(issue.state.name)}"
            f"   {priority_text(issue.priority)}"
            f"   [dim]assignee[/] {escape(issue.assignee.name) if issue.assignee else 'Unassigned'}"
            f" ({initials(issue.assignee)})",
        ]
        meta = []
        if issue.labels:
            meta.append("[dim]labels[/] " + escape(", ".join(label.name for label in issue.labels)))
        if issue.estimate is not None:
            meta.append(f"[dim]estimate[/] {issue.estimate:g}")
        if issue.cycle is not None:
            meta.append(f"[dim]cycle[/] {escape(issue.cycle.name or str(issue.cycle.number))}")
        if issue.created_at:
            meta.append(f"[dim]created[/] {escape(long_date(issue.created_at))}")
        if meta:
            lines.append("   ".join(meta))
        if issue.branch_name:
            lines.append(f"[dim]branch[/] {escape(issue.branch_name)}")
        lines.append("")
        lines.append(escape(issue.description) if issue.description else "[dim]No description[/]")
        lines.append("")
        lines.append(
            "  ".join(_button(label, i == self.active_button) for i, label in enumerate(BUTTON_LABELS))
        )
        lines.append("")
        lines.append(
            help_line("j/k", "next/prev", "h/l", "buttons", "o", "open", "s", "start", "esc", "back")
        )
        return "\n".join(lines)


# =============================================================================
# Start work
# =============================================================================


FOCUS_COMMENT = 0
FOCUS_USE_BRANCH = 1
FOCUS_PLAN_MODE = 2
FOCUS_START = 3
FOCUS_CHECKOUT = 4


class StartWorkView:
    """Form gathering the launch options for an issue."""

    def __init__(self, issue: Issue) -> None:
        self.issue = issue
        self.comment_input = TextInput(placeholder="Add a comment (optional)...", char_limit=1000, focused=True)
        self.use_branch = True
        self.plan_mode = True
        self.focus = FOCUS_COMMENT

    def _set_focus(self, focus: int) -> None:
        self.focus = focus % (FOCUS_CHECKOUT + 1)
        self.comment_input.focused = self.focus == FOCUS_COMMENT

    def launch_request(self, checkout_only: bool = False) -> LaunchRequest:
        return LaunchRequest(
            issue=self.issue,
            comment=self.comment_input.value.strip(),
            use_branch=self.use_branch,
            plan_mode=self.plan_mode,
            checkout_only=checkout_only,
        )

    def handle_key(self, event: KeyPressed) -> list:
        key = event.key
        if key == "escape":
            return [SwitchToDetail(self.issue)]
        if key in ("tab", "down"):
            self._set_focus(self.focus + 1)
            return []
        if key in ("shift+tab", "up"):
            self._set_focus(self.focus - 1)
            return []

        if self.focus == FOCUS_COMMENT:
            if key == "enter":
                self._set_focus(FOCUS_USE_BRANCH)
            else:
                self.comment_input.handle_key(key, event.character)
            return []

        if key not in ("enter", "space"):
            return []
        if self.focus == FOCUS_USE_BRANCH:
            self.use_branch = not self.use_branch
        elif self.focus == FOCUS_PLAN_MODE:
            self.plan_mode = not self.plan_mode
        elif self.focus == FOCUS_START:
            return [StartAgent(self.launch_request())]
        elif self.focus == FOCUS_CHECKOUT:
            return [StartAgent(self.launch_request(checkout_only=True))]
        return []

    def render(self) -> str:
        issue = self.issue
        value = escape(self.comment_input.value)
        if not value:
            value = f"[dim]{escape(self.comment_input.placeholder)}[/]"
        caret = "█" if self.focus == FOCUS_COMMENT else ""
        comment_pointer = "▸" if self.focus == FOCUS_COMMENT else " "
        lines = [
            f"[bold]Start working on[/] [bold {ACCENT}]{escape(issue.identifier)}[/] {escape(issue.title)}",
            "",
            f"{comment_pointer} Comment: {value}{caret}",
            "",
        ]
        branch_label = "Use branch"
        if issue.branch_name:
            branch_label += f" ({issue.branch_name})"
        lines.append(_checkbox(branch_label, self.use_branch, self.focus == FOCUS_USE_BRANCH))
        lines.append(_checkbox("Plan mode", self.plan_mode, self.focus == FOCUS_PLAN_MODE))
        lines.append("")
        lines.append(
            _button("Start", self.focus == FOCUS_START)
            + "  "
            + _button("Checkout Only", self.focus == FOCUS_CHECKOUT)
        )
        lines.append("")
        lines.append(help_line("tab", "next", "enter/space", "toggle/select", "esc", "back"))
        return "\n".join(lines)


# =============================================================================
# Team select
# =============================================================================


class TeamSelectView:
    """Team picker with an optional "set as default" toggle."""

    def __init__(self, teams: Optional[List[Team]] = None) -> None:
        self.teams: List[Team] = list(teams or [])
        self.cursor = 0
        self.set_as_default = False

    def set_teams(self, teams: List[Team]) -> None:
        self.teams = list(teams)
        if self.cursor >= len(self.teams):
            self.cursor = max(0, len(self.teams) - 1)

    def handle_key(self, event: KeyPressed) -> list:
        key = event.key
        if key == "escape":
            return [SwitchToWorkspaceSelect()]
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < len(self.teams) - 1:
                self.cursor += 1
        elif key == "d":
            self.set_as_default = not self.set_as_default
        elif key == "enter" and self.teams:
            return [TeamSelected(self.teams[self.cursor], set_as_default=self.set_as_default)]
        return []

    def render(self) -> str:
        lines = ["[bold]Select a team[/]", ""]
        if not self.teams:
            lines.append("[dim]No teams available[/]")
        for i, team in enumerate(self.teams):
            pointer = "▸" if i == self.cursor else " "
            row = f"{pointer} {escape(team.name)} [dim]({escape(team.key)})[/]"
            lines.append(f"[bold]{row}[/]" if i == self.cursor else row)
        lines.append("")
        lines.append(_checkbox("Set as default", self.set_as_default, False))
        lines.append("")
        lines.append(help_line("j/k", "move", "d", "toggle default", "enter", "select", "esc", "workspaces"))
        return "\n".join(lines)


# =============================================================================
# Workspace select
# =============================================================================


ADD_WORKSPACE_LABEL = "+ Add new workspace"


class WorkspaceSelectView:
    """Workspace picker; the last entry adds a new workspace."""

    def __init__(self, workspaces: Optional[List[Workspace]] = None, current_id: str = "") -> None:
        self.workspaces: List[Workspace] = list(workspaces or [])
        self.current_id = current_id
        self.cursor = 0

    def set_workspaces(self, workspaces: List[Workspace], current_id: str = "") -> None:
        self.workspaces = list(workspaces)
        self.current_id = current_id
        self.cursor = next((i for i, w in enumerate(self.workspaces) if w.id == current_id), 0)

    def handle_key(self, event: KeyPressed) -> list:
        key = event.key
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < len(self.workspaces):
                self.cursor += 1
        elif key == "enter":
            if self.cursor == len(self.workspaces):
                return [WorkspaceSelected(add_new=True)]
            return [WorkspaceSelected(workspace=self.workspaces[self.cursor])]
        return []

    def render(self) -> str:
        lines = ["[bold]Select a workspace[/]", ""]
        for i, ws in enumerate(self.workspaces):
            pointer = "▸" if i == self.cursor else " "
            current = " [dim](current)[/]" if ws.id == self.current_id else ""
            row = f"{pointer} {escape(ws.name)}{current}"
            lines.append(f"[bold]{row}[/]" if i == self.cursor else row)
        pointer = "▸" if self.cursor == len(self.workspaces) else " "
        lines.append(f"{pointer} [{ACCENT}]{escape(ADD_WORKSPACE_LABEL)}[/]")
        lines.append("")
        lines.append(help_line("j/k", "move", "enter", "select", "q", "quit"))
        return "\n".join(lines)


# =============================================================================
# Settings
# =============================================================================


class SettingsView:
    """Shows the active workspace and config file; lets the user pick a provider."""

    def __init__(self, config: Config, workspace: Optional[Workspace], providers: List[str]) -> None:
        self.config = config
        self.workspace = workspace
        self.providers = list(providers)
        self.current_provider = config.get_provider()
        self.editing_provider = False
        self.provider_cursor = 0
        self.saved = False
        self.error: Optional[Exception] = None

    def handle_key(self, event: KeyPressed) -> list:
        key = event.key
        if self.editing_provider:
            if key == "escape":
                self.editing_provider = False
            elif key in ("up", "k"):
                if self.provider_cursor > 0:
                    self.provider_cursor -= 1
            elif key in ("down", "j"):
                if self.provider_cursor < len(self.providers) - 1:
                    self.provider_cursor += 1
            elif key == "enter" and self.providers:
                self.editing_provider = False
                self.current_provider = self.providers[self.provider_cursor]
                self.saved = False
                return [ProviderSelected(self.current_provider)]
            return []

        if key in ("escape", "q"):
            return [SwitchToList()]
        if key == "p":
            self.editing_provider = True
            self.saved = False
            self.error = None
            if self.current_provider in self.providers:
                self.provider_cursor = self.providers.index(self.current_provider)
        elif key == "w":
            return [SwitchToWorkspaceSelect()]
        return []

    def set_saved(self, error: Optional[Exception]) -> None:
        self.error = error
        self.saved = error is None

    def render(self) -> str:
        config_path = self.config.path or PathResolver.config_path()
        lines = [
            "[bold]Settings[/]",
            "",
            f"[dim]Workspace[/]  {escape(self.workspace.name) if self.workspace else '-'}",
            f"[dim]Provider[/]   {escape(self.current_provider)}",
            f"[dim]Config[/]     {escape(PathResolver.display_path(str(config_path)))}",
            "",
        ]
        if self.editing_provider:
            lines.append("[bold]Select provider[/]")
            for i, provider in enumerate(self.providers):
                pointer = "▸" if i == self.provider_cursor else " "
                lines.append(f"{pointer} {escape(provider)}")
            lines.append("")
            lines.append(help_line("j/k", "move", "enter", "save", "esc", "cancel"))
            return "\n".join(lines)

        if self.error is not None:
            lines.append(f"[bold red]Error: {escape(str(self.error))}[/]")
        elif self.saved:
            lines.append("[green]Saved[/]")
        lines.append("")
        lines.append(help_line("p", "provider", "w", "workspaces", "esc", "back"))
        return "\n".join(lines)
