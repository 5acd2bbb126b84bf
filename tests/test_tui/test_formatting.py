#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Tests for shared TUI formatting utilities."""

import pytest

from linc.models import User
from linc.tui.formatting import (
    help_line,
    initials,
    long_date,
    priority_glyph,
    priority_text,
    render_logo,
    short_date,
    state_icon,
    truncate,
)


class TestPriority:
    def test_glyph_colors(self):
        assert priority_glyph(1) == "[bold red]!!![/]"
        assert priority_glyph(0) == "[dim]---[/]"

    def test_unknown_priority(self):
        assert priority_glyph(9) == "[dim]---[/]"

    def test_text(self):
        assert "High" in priority_text(2)


class TestStateIcon:
    def test_known_type(self):
        assert state_icon("started") == "◐"

    def test_with_color(self):
        assert state_icon("completed", "#00ff00") == "[#00ff00]●[/]"

    def test_unknown_type(self):
        assert state_icon("weird") == "○"


class TestInitials:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Ada Lovelace", "AL"),
            ("Grace Brewster Hopper", "GH"),
            ("linus", "LI"),
        ],
    )
    def test_names(self, name, expected):
        assert initials(User(id="u", name=name)) == expected

    def test_unassigned(self):
        assert initials(None) == "--"
        assert initials(User(id="u", name="  ")) == "--"


class TestDates:
    def test_short_date(self):
        assert short_date("2024-01-02T10:00:00.000Z") == "Jan 02"

    def test_long_date(self):
        assert long_date("2024-01-02T10:00:00Z") == "Jan 02, 2024"

    def test_unparseable(self):
        assert short_date("yesterday") == ""
        assert long_date("yesterday") == "yesterday"
        assert short_date("") == ""


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("abc", 5) == "abc"

    def test_truncated_with_ellipsis(self):
        assert truncate("abcdef", 4) == "abc…"

    def test_tiny_widths(self):
        assert truncate("abc", 0) == ""
        assert truncate("abc", 1) == "…"


class TestHeader:
    def test_logo_lines(self):
        lines = render_logo("1.2.3", "~/src/app")
        assert len(lines) == 2
        assert "v1.2.3" in lines[0]
        assert "~/src/app" in lines[1]

    def test_logo_without_dir(self):
        assert "[dim]" not in render_logo("1.0", "")[1]

    def test_help_line_escapes(self):
        text = help_line("[x]", "act")
        assert "\\[x]" in text
        assert "act" in text
