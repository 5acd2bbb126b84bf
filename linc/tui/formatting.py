# SPDX-License-Identifier: MIT
"""
Shared formatting utilities for the TUI views.

Priority glyphs, state icons, dates and the header logo, expressed as Rich
markup. User-supplied text must go through rich.markup.escape before it is
embedded.
"""

from datetime import datetime
from typing import List, Optional

from rich.markup import escape

from linc.models import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_NONE,
    PRIORITY_URGENT,
    STATE_TYPE_BACKLOG,
    STATE_TYPE_CANCELED,
    STATE_TYPE_COMPLETED,
    STATE_TYPE_STARTED,
    STATE_TYPE_TRIAGE,
    STATE_TYPE_UNSTARTED,
    User,
    priority_label,
)

# Semantic color mapping for Rich markup (color names, not ANSI codes)
PRIORITY_COLORS = {
    PRIORITY_URGENT: "bold red",
    PRIORITY_HIGH: "dark_orange",
    PRIORITY_MEDIUM: "yellow",
    PRIORITY_LOW: "blue",
    PRIORITY_NONE: "dim",
}

PRIORITY_GLYPHS = {
    PRIORITY_URGENT: "!!!",
    PRIORITY_HIGH: "▮▮▮",
    PRIORITY_MEDIUM: "▮▮▯",
    PRIORITY_LOW: "▮▯▯",
    PRIORITY_NONE: "---",
}

STATE_ICONS = {
    STATE_TYPE_TRIAGE: "◇",
    STATE_TYPE_BACKLOG: "◌",
    STATE_TYPE_UNSTARTED: "○",
    STATE_TYPE_STARTED: "◐",
    STATE_TYPE_COMPLETED: "●",
    STATE_TYPE_CANCELED: "⊘",
}

ACCENT = "#5E6AD2"

LOGO_LINES = [
    "█   █ █▄ █ █▀▀",
    "█▄▄ █ █ ▀█ █▄▄",
]


def priority_glyph(priority: int) -> str:
    """Colored three-character priority indicator."""
    color = PRIORITY_COLORS.get(priority, "dim")
    glyph = PRIORITY_GLYPHS.get(priority, "---")
    return f"[{color}]{glyph}[/]"


def priority_text(priority: int) -> str:
    color = PRIORITY_COLORS.get(priority, "dim")
    return f"[{color}]{escape(priority_label(priority))}[/]"


def state_icon(state_type: str, color: str = "") -> str:
    icon = STATE_ICONS.get(state_type, "○")
    if color:
        return f"[{color}]{icon}[/]"
    return icon


def initials(user: Optional[User]) -> str:
    """Two-letter initials of a user's name, "--" when unassigned."""
    if user is None or not user.name.strip():
        return "--"
    parts = user.name.split()
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def _parse_timestamp(timestamp: str) -> Optional[datetime]:
    if not timestamp:
        return None
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None


def short_date(timestamp: str) -> str:
    """Month and day ("Jan 02"), or "" for an unparseable timestamp."""
    dt = _parse_timestamp(timestamp)
    return dt.strftime("%b %d") if dt else ""


def long_date(timestamp: str) -> str:
    dt = _parse_timestamp(timestamp)
    return dt.strftime("%b %d, %Y") if dt else timestamp


def truncate(text: str, width: int) -> str:
    """Cut text to width characters, ending with an ellipsis when shortened."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return "…"
    return text[: width - 1] + "…"


def render_logo(version: str, working_dir: str) -> List[str]:
    """Header lines: logo with version on the first line, working dir on the second."""
    lines = [f"[bold {ACCENT}]{LOGO_LINES[0]}[/]  [dim]v{escape(version)}[/]"]
    second = f"[bold {ACCENT}]{LOGO_LINES[1]}[/]"
    if working_dir:
        second += f"  [dim]{escape(working_dir)}[/]"
    lines.append(second)
    return lines


def help_line(*pairs: str) -> str:
    """Join "key", "action" pairs into a dimmed help footer."""
    items = []
    for key, action in zip(pairs[::2], pairs[1::2]):
        items.append(f"[bold]{escape(key)}[/] [dim]{escape(action)}[/]")
    return "  ".join(items)
