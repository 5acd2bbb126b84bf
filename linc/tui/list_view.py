# SPDX-License-Identifier: MIT
"""
Issue list view: the main screen of a session.

Issues are kept once in a store keyed by id; "my issues" and "all issues"
are id lists into that store, so an update applied by id shows up in both
collections and in the displayed list at once. The displayed list is the
active collection grouped by state, narrowed to the active tab and then
filtered.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from rich.markup import escape

from linc.models import (
    CANCELED_STATE_NAME,
    DUPLICATE_STATE_NAME,
    PRIORITY_LABELS,
    Issue,
    State,
    priority_rank,
)
from linc.tui.app_state import EditMode, TextInput
from linc.tui.formatting import (
    ACCENT,
    help_line,
    initials,
    priority_glyph,
    render_logo,
    short_date,
    state_icon,
    truncate,
)
from linc.tui.messages import (
    CancelIssue,
    IssuePriorityUpdated,
    IssueStateUpdated,
    IssueTitleUpdated,
    KeyPressed,
    MarkDuplicate,
    SwitchToDetail,
    SwitchToSettings,
    SwitchToTeamSelect,
)

logger = logging.getLogger(__name__)

MAX_VISIBLE_ROWS = 10
LOAD_STATES = "states"
LOAD_MY_ISSUES = "my issues"
LOAD_ALL_ISSUES = "all issues"
_LOAD_ORDER = (LOAD_STATES, LOAD_MY_ISSUES, LOAD_ALL_ISSUES)
DEFAULT_TAB_NAME = "todo"
PRIORITY_CHOICES = sorted(PRIORITY_LABELS)


def group_by_state(issues: List[Issue]) -> Dict[str, List[Issue]]:
    """Bucket issues by state id, each bucket sorted by priority (unset last).

    The sort is stable, so equal priorities keep their load order.
    """
    buckets: Dict[str, List[Issue]] = {}
    for issue in issues:
        buckets.setdefault(issue.state.id, []).append(issue)
    for state_id, bucket in buckets.items():
        buckets[state_id] = sorted(bucket, key=lambda i: priority_rank(i.priority))
    return buckets


def matches_filter(issue: Issue, query: str) -> bool:
    """Case-insensitive substring match on title, identifier and description."""
    if not query:
        return True
    q = query.lower()
    return q in issue.title.lower() or q in issue.identifier.lower() or q in issue.description.lower()


def find_branch_issue(branch: str, candidates: List[Issue]) -> Optional[Issue]:
    """First issue whose identifier appears in the branch name, or whose branch name equals it."""
    if not branch:
        return None
    lowered = branch.lower()
    for issue in candidates:
        if issue.identifier and issue.identifier.lower() in lowered:
            return issue
        if issue.branch_name and issue.branch_name == branch:
            return issue
    return None


class ListView:
    """Grouped, filterable issue list with in-place editing."""

    def __init__(self, version: str = "dev", working_dir: str = "", branch: str = "") -> None:
        self.version = version
        self.working_dir = working_dir
        self.current_branch = branch

        self.states: List[State] = []
        self._store: Dict[str, Issue] = {}
        self._my_ids: List[str] = []
        self._all_ids: List[str] = []
        self.show_all = False

        self.issues_by_state: Dict[str, List[Issue]] = {}
        self.filtered: List[Issue] = []
        self.cursor = 0
        self.active_state = 0

        self.filtering = False
        self.filter_input = TextInput(placeholder="Filter issues...", char_limit=100)

        self.loading = True
        self.load_errors: Dict[str, Exception] = {}
        self.update_error: Optional[Exception] = None
        self.current_issue: Optional[Issue] = None

        self.edit_mode = EditMode.NONE
        self.edit_input = TextInput(placeholder="New title...", char_limit=200)
        self.edit_cursor = 0
        self.edit_issue_id: Optional[str] = None
        self.awaiting_update = False

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    @property
    def my_issues(self) -> List[Issue]:
        return [self._store[i] for i in self._my_ids if i in self._store]

    @property
    def all_issues(self) -> List[Issue]:
        return [self._store[i] for i in self._all_ids if i in self._store]

    @property
    def active_issues(self) -> List[Issue]:
        return self.all_issues if self.show_all else self.my_issues

    @property
    def edit_issue(self) -> Optional[Issue]:
        if self.edit_issue_id is None:
            return None
        return self._store.get(self.edit_issue_id)

    @property
    def filter_text(self) -> str:
        return self.filter_input.value

    @property
    def errors(self) -> List[Exception]:
        """Outstanding errors: failed loads in a fixed order, then the last failed update."""
        errors = [self.load_errors[source] for source in _LOAD_ORDER if source in self.load_errors]
        if self.update_error is not None:
            errors.append(self.update_error)
        return errors

    @property
    def error(self) -> Optional[Exception]:
        errors = self.errors
        return errors[0] if errors else None

    def is_capturing_text(self) -> bool:
        """True while a text field owns the keyboard (filter entry or rename)."""
        return self.filtering or self.edit_mode == EditMode.RENAME

    def _prune_store(self) -> None:
        keep = set(self._my_ids) | set(self._all_ids)
        for issue_id in list(self._store):
            if issue_id not in keep:
                del self._store[issue_id]

    def _refresh(self) -> None:
        self.issues_by_state = group_by_state(self.active_issues)
        self.apply_filter()
        self._find_current_issue()

    def set_my_issues(self, issues: List[Issue]) -> None:
        for issue in issues:
            self._store[issue.id] = issue
        self._my_ids = [i.id for i in issues]
        self._prune_store()
        self.loading = False
        self.load_errors.pop(LOAD_MY_ISSUES, None)
        self._refresh()

    def set_all_issues(self, issues: List[Issue]) -> None:
        for issue in issues:
            self._store[issue.id] = issue
        self._all_ids = [i.id for i in issues]
        self._prune_store()
        self.load_errors.pop(LOAD_ALL_ISSUES, None)
        self._refresh()

    def set_my_issues_error(self, error: Exception) -> None:
        self.loading = False
        self.load_errors[LOAD_MY_ISSUES] = error

    def set_all_issues_error(self, error: Exception) -> None:
        self.load_errors[LOAD_ALL_ISSUES] = error

    def set_states_error(self, error: Exception) -> None:
        self.load_errors[LOAD_STATES] = error

    def set_states(self, states: List[State]) -> None:
        self.states = list(states)
        self.active_state = 0
        for i, state in enumerate(self.states):
            if state.name.lower() == DEFAULT_TAB_NAME:
                self.active_state = i
                break
        self.load_errors.pop(LOAD_STATES, None)
        self.apply_filter()

    def set_branch(self, branch: str) -> None:
        self.current_branch = branch
        self._find_current_issue()

    def _find_current_issue(self) -> None:
        self.current_issue = find_branch_issue(self.current_branch, self.my_issues + self.all_issues)

    def toggle_show_all(self) -> None:
        self.show_all = not self.show_all
        self.cursor = 0
        self._refresh()

    # -------------------------------------------------------------------------
    # Tabs, filter and cursor
    # -------------------------------------------------------------------------

    def current_state_issues(self) -> List[Issue]:
        if not self.states or self.active_state >= len(self.states):
            return []
        return self.issues_by_state.get(self.states[self.active_state].id, [])

    def apply_filter(self) -> None:
        self.filtered = [i for i in self.current_state_issues() if matches_filter(i, self.filter_text)]
        if self.cursor >= len(self.filtered):
            self.cursor = max(0, len(self.filtered) - 1)

    def _switch_tab(self, delta: int) -> None:
        target = self.active_state + delta
        if not 0 <= target < len(self.states):
            return
        self.active_state = target
        self.cursor = 0
        self.filter_input.set_value("")
        self.apply_filter()

    def selected_issue(self) -> Optional[Issue]:
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    def get_next_issue(self) -> Optional[Issue]:
        if self.cursor + 1 < len(self.filtered):
            return self.filtered[self.cursor + 1]
        return None

    def get_prev_issue(self) -> Optional[Issue]:
        if self.cursor > 0 and self.cursor - 1 < len(self.filtered):
            return self.filtered[self.cursor - 1]
        return None

    def move_cursor_next(self) -> None:
        if self.cursor + 1 < len(self.filtered):
            self.cursor += 1

    def move_cursor_prev(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    # -------------------------------------------------------------------------
    # Two-phase completions
    # -------------------------------------------------------------------------

    def _clear_edit(self) -> None:
        self.edit_mode = EditMode.NONE
        self.edit_issue_id = None
        self.edit_cursor = 0
        self.edit_input.set_value("")
        self.edit_input.focused = False
        self.awaiting_update = False

    def _replace_issue(self, issue_id: str, **changes) -> None:
        issue = self._store.get(issue_id)
        if issue is None:
            return
        self._store[issue_id] = replace(issue, **changes)
        self._refresh()

    def remove_issue(self, issue_id: str) -> None:
        """Drop an issue from every collection; the cursor is clamped by apply_filter."""
        self._store.pop(issue_id, None)
        self._my_ids = [i for i in self._my_ids if i != issue_id]
        self._all_ids = [i for i in self._all_ids if i != issue_id]
        self._refresh()

    def apply_title_update(self, event: IssueTitleUpdated) -> None:
        if event.error is not None:
            self.update_error = event.error
        else:
            self.update_error = None
            self._replace_issue(event.issue_id, title=event.new_title)
        self._clear_edit()

    def apply_priority_update(self, event: IssuePriorityUpdated) -> None:
        if event.error is not None:
            self.update_error = event.error
        else:
            self.update_error = None
            self._replace_issue(event.issue_id, priority=event.new_priority)
        self._clear_edit()

    def apply_state_update(self, event: IssueStateUpdated) -> None:
        if event.error is not None:
            self.update_error = event.error
        elif event.new_state_id:
            self.update_error = None
            state = next((s for s in self.states if s.id == event.new_state_id), None)
            if state is None:
                # moved to a state without a tab (canceled, duplicate)
                self.remove_issue(event.issue_id)
            else:
                self._replace_issue(event.issue_id, state=state)
        self._clear_edit()

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def handle_key(self, event: KeyPressed) -> list:
        """Handle a key press; returns the events it produces."""
        if self.edit_mode == EditMode.RENAME:
            return self._handle_rename_key(event)
        if self.edit_mode == EditMode.PRIORITY:
            return self._handle_priority_key(event)
        if self.edit_mode == EditMode.STATUS:
            return self._handle_status_key(event)

        if self.filtering:
            if event.key in ("enter", "escape"):
                self.filtering = False
                self.filter_input.focused = False
            elif self.filter_input.handle_key(event.key, event.character):
                self.apply_filter()
            return []

        key = event.key
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < len(self.filtered) - 1:
                self.cursor += 1
        elif key in ("left", "h"):
            self._switch_tab(-1)
        elif key in ("right", "l"):
            self._switch_tab(1)
        elif key == "/":
            self.filtering = True
            self.filter_input.focused = True
        elif key == "escape":
            if self.filter_text:
                self.filter_input.set_value("")
                self.apply_filter()
            else:
                return [SwitchToTeamSelect()]
        elif key == "enter":
            issue = self.selected_issue()
            if issue is not None:
                return [SwitchToDetail(replace(issue))]
        elif key == "a":
            self.toggle_show_all()
        elif key == ",":
            return [SwitchToSettings()]
        elif key in ("R", "p", "s"):
            self._start_edit(key)
        return []

    def _start_edit(self, key: str) -> None:
        issue = self.selected_issue()
        if issue is None:
            return
        self.edit_issue_id = issue.id
        self.awaiting_update = False
        if key == "R":
            self.edit_mode = EditMode.RENAME
            self.edit_input.set_value(issue.title)
            self.edit_input.focused = True
        elif key == "p":
            self.edit_mode = EditMode.PRIORITY
            self.edit_cursor = issue.priority if issue.priority in PRIORITY_CHOICES else 0
        else:
            self.edit_mode = EditMode.STATUS
            self.edit_cursor = next(
                (i for i, s in enumerate(self.states) if s.id == issue.state.id), 0
            )

    def _handle_rename_key(self, event: KeyPressed) -> list:
        if event.key == "escape":
            self._clear_edit()
            return []
        if self.awaiting_update:
            return []
        if event.key == "enter":
            title = self.edit_input.value.strip()
            issue = self.edit_issue
            if not title or issue is None:
                self._clear_edit()
                return []
            self.awaiting_update = True
            self.edit_input.focused = False
            return [IssueTitleUpdated(issue.id, title)]
        self.edit_input.handle_key(event.key, event.character)
        return []

    def _handle_priority_key(self, event: KeyPressed) -> list:
        key = event.key
        if key == "escape":
            self._clear_edit()
            return []
        if self.awaiting_update:
            return []
        if key in ("up", "k"):
            if self.edit_cursor > 0:
                self.edit_cursor -= 1
        elif key in ("down", "j"):
            if self.edit_cursor < len(PRIORITY_CHOICES) - 1:
                self.edit_cursor += 1
        elif key == "enter":
            return self._confirm_priority(PRIORITY_CHOICES[self.edit_cursor])
        elif key in ("0", "1", "2", "3", "4"):
            self.edit_cursor = int(key)
            return self._confirm_priority(int(key))
        return []

    def _confirm_priority(self, priority: int) -> list:
        issue = self.edit_issue
        if issue is None:
            self._clear_edit()
            return []
        self.awaiting_update = True
        return [IssuePriorityUpdated(issue.id, priority)]

    def status_options(self) -> List[str]:
        return [s.name for s in self.states] + [CANCELED_STATE_NAME, DUPLICATE_STATE_NAME]

    def _handle_status_key(self, event: KeyPressed) -> list:
        key = event.key
        if key == "escape":
            self._clear_edit()
            return []
        if self.awaiting_update:
            return []
        last = len(self.states) + 1
        if key in ("up", "k"):
            if self.edit_cursor > 0:
                self.edit_cursor -= 1
        elif key in ("down", "j"):
            if self.edit_cursor < last:
                self.edit_cursor += 1
        elif key == "enter":
            issue = self.edit_issue
            if issue is None:
                self._clear_edit()
                return []
            self.awaiting_update = True
            if self.edit_cursor < len(self.states):
                return [IssueStateUpdated(issue.id, self.states[self.edit_cursor].id)]
            if self.edit_cursor == len(self.states):
                return [CancelIssue(issue.id, issue.team.id)]
            return [MarkDuplicate(issue.id, issue.team.id)]
        return []

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> str:
        if self.edit_mode == EditMode.RENAME:
            return self._render_rename()
        if self.edit_mode == EditMode.PRIORITY:
            return self._render_priority()
        if self.edit_mode == EditMode.STATUS:
            return self._render_status()

        lines = render_logo(self.version, self.working_dir)
        lines.append("")
        lines.extend(self._render_branch_box())

        mode = "All issues" if self.show_all else "My issues"
        lines.append(f"[bold]{mode}[/]  [dim](a to toggle)[/]")
        lines.append(self._render_tabs())

        if self.filtering or self.filter_text:
            cursor = "█" if self.filtering else ""
            text = escape(self.filter_text) or f"[dim]{escape(self.filter_input.placeholder)}[/]"
            lines.append(f"/ {text}{cursor}")
        lines.append("")

        if self.errors:
            for error in self.errors:
                lines.append(f"[bold red]Error: {escape(str(error))}[/]")
            lines.append("")

        if self.loading:
            lines.append("[dim]Loading issues...[/]")
        elif not self.filtered:
            lines.append("[dim]No issues[/]")
        else:
            lines.extend(self._render_rows())

        lines.append("")
        lines.append(
            help_line(
                "j/k", "move", "h/l", "tabs", "enter", "open", "/", "filter",
                "R", "rename", "p", "priority", "s", "status", ",", "settings", "q", "quit",
            )
        )
        return "\n".join(lines)

    def _render_branch_box(self) -> List[str]:
        if not self.current_branch:
            return []
        branch = f"[{ACCENT}]⎇ {escape(self.current_branch)}[/]"
        if self.current_issue is not None:
            issue = self.current_issue
            branch += f"  [bold]{escape(issue.identifier)}[/] {escape(truncate(issue.title, 50))}"
        return [branch, ""]

    def _render_tabs(self) -> str:
        tabs = []
        for i, state in enumerate(self.states):
            count = len(self.issues_by_state.get(state.id, []))
            label = f"{escape(state.name)} ({count})"
            if i == self.active_state:
                tabs.append(f"[reverse bold]{state_icon(state.type)} {label}[/]")
            else:
                tabs.append(f"[dim]{state_icon(state.type)} {label}[/]")
        return " ".join(tabs)

    def _visible_window(self) -> range:
        total = len(self.filtered)
        if total <= MAX_VISIBLE_ROWS:
            return range(total)
        start = max(0, self.cursor - MAX_VISIBLE_ROWS // 2)
        start = min(start, total - MAX_VISIBLE_ROWS)
        return range(start, start + MAX_VISIBLE_ROWS)

    def _render_rows(self) -> List[str]:
        window = self._visible_window()
        lines = []
        if window.start > 0:
            lines.append(f"[dim]  ↑ {window.start} more above[/]")
        for i in window:
            issue = self.filtered[i]
            pointer = "▸" if i == self.cursor else " "
            title = escape(truncate(issue.title, 60))
            row = (
                f"{pointer} {priority_glyph(issue.priority)} "
                f"[dim]{escape(issue.identifier):<8}[/] {title}  "
                f"[dim]{initials(issue.assignee)} {short_date(issue.created_at)}[/]"
            )
            if i == self.cursor:
                row = f"[bold]{row}[/]"
            lines.append(row)
        below = len(self.filtered) - window.stop
        if below > 0:
            lines.append(f"[dim]  ↓ {below} more below[/]")
        return lines

    def _edit_header(self, action: str) -> List[str]:
        issue = self.edit_issue
        if issue is None:
            return [f"[bold]{action}[/]"]
        return [
            f"[bold]{action}[/] [dim]{escape(issue.identifier)}[/] {escape(issue.title)}",
            "",
        ]

    def _render_rename(self) -> str:
        lines = self._edit_header("Rename")
        value = escape(self.edit_input.value) or f"[dim]{escape(self.edit_input.placeholder)}[/]"
        lines.append(f"> {value}{'█' if self.edit_input.focused else ''}")
        lines.append("")
        if self.awaiting_update:
            lines.append("[dim]Saving...[/]")
        lines.append(help_line("enter", "save", "esc", "cancel"))
        return "\n".join(lines)

    def _render_priority(self) -> str:
        lines = self._edit_header("Set priority")
        for i, priority in enumerate(PRIORITY_CHOICES):
            pointer = "▸" if i == self.edit_cursor else " "
            lines.append(f"{pointer} {i} {priority_glyph(priority)} {escape(PRIORITY_LABELS[priority])}")
        lines.append("")
        if self.awaiting_update:
            lines.append("[dim]Saving...[/]")
        lines.append(help_line("j/k", "move", "0-4", "pick", "enter", "save", "esc", "cancel"))
        return "\n".join(lines)

    def _render_status(self) -> str:
        lines = self._edit_header("Set status")
        for i, name in enumerate(self.status_options()):
            pointer = "▸" if i == self.edit_cursor else " "
            if i < len(self.states):
                state = self.states[i]
                icon = state_icon(state.type, state.color)
            else:
                icon = state_icon("canceled")
            lines.append(f"{pointer} {icon} {escape(name)}")
        lines.append("")
        if self.awaiting_update:
            lines.append("[dim]Saving...[/]")
        lines.append(help_line("j/k", "move", "enter", "save", "esc", "cancel"))
        return "\n".join(lines)
