# SPDX-License-Identifier: MIT
"""
Textual application hosting a linc session.

The app is a thin shell around SessionController: it turns key presses into
events, runs the effects the controller returns on worker threads, and feeds
their completion events back on the UI thread. The session's outcome is the
app's return value.
"""

import logging
from typing import Iterable, Optional

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Static

from linc.tui.app_state import OutcomeKind, SessionOutcome
from linc.tui.controller import SessionController
from linc.tui.effects import Effect
from linc.tui.messages import KeyPressed

logger = logging.getLogger(__name__)


def normalize_key(key: str, character: Optional[str]) -> str:
    """Use the typed character for printable keys ("R", "/", ","), else textual's key name."""
    if character and len(character) == 1 and character.isprintable() and character != " ":
        return character
    return key


class LincApp(App):
    """Main Textual application for a linc session."""

    TITLE = "linc"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("ctrl+c", "quit_session", "Quit", priority=True, show=False),
    ]

    def __init__(self, controller: SessionController) -> None:
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="main"):
            yield Static(self.controller.render(), id="view")

    def on_mount(self) -> None:
        self._schedule(self.controller.start())
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        if event.key == "ctrl+c":
            return
        event.stop()
        event.prevent_default()
        self.handle_event(KeyPressed(normalize_key(event.key, event.character), event.character))

    def action_quit_session(self) -> None:
        self.handle_event(KeyPressed("ctrl+c"))

    def handle_event(self, event: object) -> None:
        """Feed one event to the controller and act on the result. UI thread only."""
        if self.controller.finished:
            return
        effects = self.controller.dispatch(event)
        self._schedule(effects)
        self._refresh_view()
        if self.controller.finished:
            self.exit(self.controller.outcome)

    def _schedule(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            logger.debug("running %s", type(effect).__name__)
            self._run_effect(effect)

    @work(thread=True)
    def _run_effect(self, effect: Effect) -> None:
        """Run a blocking effect off the UI thread and post its completion back."""
        result = effect.run()
        if result is None:
            return
        try:
            self.call_from_thread(self.handle_event, result)
        except RuntimeError:
            # app already exited; nothing left to update
            logger.debug("dropped %s after exit", type(result).__name__)

    def _refresh_view(self) -> None:
        self.query_one("#view", Static).update(self.controller.render())


def run_session(controller: SessionController) -> SessionOutcome:
    """Run the app until the session ends; closing the app counts as quit."""
    outcome = LincApp(controller).run()
    if outcome is None:
        return SessionOutcome(OutcomeKind.QUIT)
    return outcome
