# SPDX-License-Identifier: MIT
"""State containers for the TUI session.

- ViewKind: which view is active (exactly one at a time)
- EditMode: in-place edit sub-mode of the issue list
- TextInput: single-line text entry used by filter, rename and comment fields
- LaunchRequest: what the session hands to the agent launcher on exit
- SessionOutcome: how the session ended
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from linc.models import Issue


class ViewKind(str, Enum):
    """The mutually exclusive views of a session."""
    WORKSPACE_SELECT = "workspace_select"
    TEAM_SELECT = "team_select"
    LIST = "list"
    DETAIL = "detail"
    START_WORK = "start_work"
    SETTINGS = "settings"


class EditMode(str, Enum):
    """Edit sub-modes of the issue list; at most one issue is edited at a time."""
    NONE = "none"
    RENAME = "rename"
    PRIORITY = "priority"
    STATUS = "status"


class OutcomeKind(str, Enum):
    QUIT = "quit"
    LAUNCH = "launch"
    ADD_WORKSPACE = "add_workspace"


@dataclass
class TextInput:
    """Single-line text entry.

    Printable characters are appended, backspace deletes the last
    character and ctrl+u clears the line.
    """

    value: str = ""
    placeholder: str = ""
    char_limit: int = 0
    focused: bool = False

    def set_value(self, value: str) -> None:
        self.value = value[: self.char_limit] if self.char_limit else value

    def handle_key(self, key: str, character: Optional[str] = None) -> bool:
        """Apply a key press; returns True when the value changed."""
        if key == "backspace":
            if not self.value:
                return False
            self.value = self.value[:-1]
            return True
        if key == "ctrl+u":
            changed = bool(self.value)
            self.value = ""
            return changed
        if character and len(character) == 1 and character.isprintable():
            if self.char_limit and len(self.value) >= self.char_limit:
                return False
            self.value += character
            return True
        return False


@dataclass
class LaunchRequest:
    """Everything the agent hand-off needs once the session ends.

    comment_synced is set once the session itself has attempted to post
    the comment, so the hand-off does not post it a second time.
    """

    issue: Issue
    comment: str = ""
    use_branch: bool = True
    plan_mode: bool = True
    checkout_only: bool = False
    comment_synced: bool = False
    comment_error: Optional[str] = None


@dataclass
class SessionOutcome:
    kind: OutcomeKind = OutcomeKind.QUIT
    launch: Optional[LaunchRequest] = field(default=None)
