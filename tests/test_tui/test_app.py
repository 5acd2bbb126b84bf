#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Tests for LincApp: keys reach the controller, effects run on workers and
their completions come back, and the session outcome is the app's return value.
"""

import pytest

pytest.importorskip("textual")

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

from textual.widgets import Static

from linc.tui.app import LincApp, normalize_key
from linc.tui.app_state import OutcomeKind, ViewKind
from linc.tui.controller import SessionController


# --- Fixtures ---


@pytest.fixture
def app(mock_client, config, workspace):
    controller = SessionController(mock_client, config, workspace, working_dir="~/src/app", providers=["claude"])
    return LincApp(controller)


async def settle(app, pilot, rounds: int = 3):
    """Let effect workers finish and their completion events be handled."""
    for _ in range(rounds):
        await app.workers.wait_for_complete()
        await pilot.pause()


# --- Key normalization ---


class TestNormalizeKey:
    def test_printable_character_wins(self):
        assert normalize_key("R", "R") == "R"
        assert normalize_key("slash", "/") == "/"
        assert normalize_key("comma", ",") == ","

    def test_named_keys(self):
        assert normalize_key("enter", "\r") == "enter"
        assert normalize_key("space", " ") == "space"
        assert normalize_key("up", None) == "up"


# --- Session flow ---


@pytest.mark.asyncio
async def test_mount_loads_issue_list(app, mock_client):
    async with app.run_test() as pilot:
        await settle(app, pilot)

        controller = app.controller
        assert controller.view == ViewKind.LIST
        assert [i.identifier for i in controller.list_view.filtered] == ["ENG-2", "ENG-1"]
        mock_client.get_team_states.assert_called_once_with("team-1")
        assert app.query_one("#view", Static) is not None


@pytest.mark.asyncio
async def test_q_quits(app):
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("q")
        await pilot.pause()

    assert app.return_value.kind == OutcomeKind.QUIT


@pytest.mark.asyncio
async def test_ctrl_c_quits_while_loading(app, mock_client):
    mock_client.get_viewer.side_effect = lambda: None
    async with app.run_test() as pilot:
        await pilot.press("ctrl+c")
        await pilot.pause()

    assert app.return_value.kind == OutcomeKind.QUIT


@pytest.mark.asyncio
async def test_detail_navigation(app):
    async with app.run_test() as pilot:
        await settle(app, pilot)

        await pilot.press("enter")
        assert app.controller.view == ViewKind.DETAIL
        assert app.controller.detail.issue.identifier == "ENG-2"

        await pilot.press("j")
        assert app.controller.detail.issue.identifier == "ENG-1"

        await pilot.press("escape")
        assert app.controller.view == ViewKind.LIST


@pytest.mark.asyncio
async def test_start_work_with_comment_launches(app, mock_client):
    async with app.run_test() as pilot:
        await settle(app, pilot)

        await pilot.press("enter", "s")
        assert app.controller.view == ViewKind.START_WORK

        # q is text here, not quit
        await pilot.press("q", "tab", "tab", "tab", "enter")
        await settle(app, pilot)

    outcome = app.return_value
    assert outcome.kind == OutcomeKind.LAUNCH
    assert outcome.launch.issue.identifier == "ENG-2"
    assert outcome.launch.comment == "q"
    assert outcome.launch.comment_synced
    assert outcome.launch.comment_error == "comment was not created"
    mock_client.create_comment.assert_called_once_with("issue-2", "q")


@pytest.mark.asyncio
async def test_rename_flows_through_worker(app, mock_client):
    async with app.run_test() as pilot:
        await settle(app, pilot)

        await pilot.press("R", "ctrl+u", "N", "e", "w", "enter")
        await settle(app, pilot)

        mock_client.update_issue_title.assert_called_once_with("issue-2", "New")
        assert app.controller.list_view.selected_issue().title == "New"
