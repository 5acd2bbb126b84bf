# SPDX-License-Identifier: MIT
"""
Side effects requested by the session controller.

Each effect performs one blocking operation (a tracker call, a config write,
opening a browser) and returns at most one completion event. The app runs
them on worker threads; nothing here touches view state.
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from linc.config import Config, ConfigError
from linc.linear_client import LinearClient, LinearError
from linc.tui.messages import (
    AllIssuesLoaded,
    CommentCreated,
    IssuePriorityUpdated,
    IssuesLoaded,
    IssueStateUpdated,
    IssueTitleUpdated,
    SettingsSaved,
    StatesLoaded,
    ViewerLoaded,
)

logger = logging.getLogger(__name__)


class Effect(ABC):
    """Base class; run() is called off the UI thread."""

    @abstractmethod
    def run(self) -> Optional[object]:
        """Perform the operation and return its completion event, if any."""
        pass


# =============================================================================
# Loads
# =============================================================================


@dataclass
class LoadViewer(Effect):
    client: LinearClient = field(repr=False, compare=False)
    generation: int = 0

    def run(self) -> ViewerLoaded:
        try:
            return ViewerLoaded(viewer=self.client.get_viewer(), generation=self.generation)
        except LinearError as e:
            logger.warning("loading viewer failed: %s", e)
            return ViewerLoaded(error=e, generation=self.generation)


@dataclass
class LoadStates(Effect):
    client: LinearClient = field(repr=False, compare=False)
    team_id: str = ""
    generation: int = 0

    def run(self) -> StatesLoaded:
        try:
            states = self.client.get_team_states(self.team_id)
        except LinearError as e:
            logger.warning("loading states for team %s failed: %s", self.team_id, e)
            return StatesLoaded(error=e, generation=self.generation)
        return StatesLoaded(states=states, generation=self.generation)


@dataclass
class LoadMyIssues(Effect):
    client: LinearClient = field(repr=False, compare=False)
    team_id: str = ""
    generation: int = 0

    def run(self) -> IssuesLoaded:
        try:
            issues = self.client.get_assigned_issues(self.team_id)
        except LinearError as e:
            logger.warning("loading assigned issues failed: %s", e)
            return IssuesLoaded(error=e, generation=self.generation)
        logger.debug("loaded %d assigned issues", len(issues))
        return IssuesLoaded(issues=issues, generation=self.generation)


@dataclass
class LoadAllIssues(Effect):
    client: LinearClient = field(repr=False, compare=False)
    team_id: str = ""
    generation: int = 0

    def run(self) -> AllIssuesLoaded:
        try:
            issues = self.client.get_all_team_issues(self.team_id)
        except LinearError as e:
            logger.warning("loading team issues failed: %s", e)
            return AllIssuesLoaded(error=e, generation=self.generation)
        logger.debug("loaded %d team issues", len(issues))
        return AllIssuesLoaded(issues=issues, generation=self.generation)


# =============================================================================
# Mutations
# =============================================================================


@dataclass
class CreateComment(Effect):
    client: LinearClient = field(repr=False, compare=False)
    issue_id: str = ""
    body: str = ""

    def run(self) -> CommentCreated:
        try:
            comment = self.client.create_comment(self.issue_id, self.body)
        except LinearError as e:
            logger.warning("creating comment on %s failed: %s", self.issue_id, e)
            return CommentCreated(error=e)
        if comment is None:
            return CommentCreated(error=LinearError("comment was not created"))
        return CommentCreated(comment=comment)


@dataclass
class UpdateTitle(Effect):
    client: LinearClient = field(repr=False, compare=False)
    issue_id: str = ""
    title: str = ""

    def run(self) -> IssueTitleUpdated:
        error = None
        try:
            self.client.update_issue_title(self.issue_id, self.title)
        except LinearError as e:
            logger.warning("renaming %s failed: %s", self.issue_id, e)
            error = e
        return IssueTitleUpdated(self.issue_id, self.title, error=error, completed=True)


@dataclass
class UpdatePriority(Effect):
    client: LinearClient = field(repr=False, compare=False)
    issue_id: str = ""
    priority: int = 0

    def run(self) -> IssuePriorityUpdated:
        error = None
        try:
            self.client.update_issue_priority(self.issue_id, self.priority)
        except LinearError as e:
            logger.warning("setting priority of %s failed: %s", self.issue_id, e)
            error = e
        return IssuePriorityUpdated(self.issue_id, self.priority, error=error, completed=True)


@dataclass
class UpdateState(Effect):
    client: LinearClient = field(repr=False, compare=False)
    issue_id: str = ""
    state_id: str = ""

    def run(self) -> IssueStateUpdated:
        error = None
        try:
            self.client.update_issue_state(self.issue_id, self.state_id)
        except LinearError as e:
            logger.warning("moving %s to state %s failed: %s", self.issue_id, self.state_id, e)
            error = e
        return IssueStateUpdated(self.issue_id, self.state_id, error=error, completed=True)


@dataclass
class CancelIssueEffect(Effect):
    """Resolve the team's canceled state, then move the issue there."""

    client: LinearClient = field(repr=False, compare=False)
    issue_id: str = ""
    team_id: str = ""

    def resolve(self) -> str:
        return self.client.get_canceled_state_id(self.team_id)

    def run(self) -> IssueStateUpdated:
        try:
            state_id = self.resolve()
        except LinearError as e:
            logger.warning("resolving target state for %s failed: %s", self.issue_id, e)
            return IssueStateUpdated(self.issue_id, error=e, completed=True)
        if not state_id:
            logger.info("team %s has no matching state; %s left unchanged", self.team_id, self.issue_id)
            return IssueStateUpdated(self.issue_id, completed=True)
        return UpdateState(self.client, self.issue_id, state_id).run()


@dataclass
class MarkDuplicateEffect(CancelIssueEffect):
    """Resolve the team's duplicate state (falling back to canceled), then move the issue."""

    def resolve(self) -> str:
        return self.client.get_duplicate_state_id(self.team_id)


# =============================================================================
# Local effects
# =============================================================================


@dataclass
class SaveDefaultTeam(Effect):
    config: Config = field(repr=False, compare=False)
    workspace_id: str = ""
    team_id: str = ""

    def run(self) -> None:
        try:
            self.config.set_default_team(self.workspace_id, self.team_id)
        except ConfigError as e:
            logger.warning("saving default team failed: %s", e)
        return None


@dataclass
class SaveProvider(Effect):
    config: Config = field(repr=False, compare=False)
    provider: str = ""

    def run(self) -> SettingsSaved:
        try:
            self.config.set_provider(self.provider)
        except ConfigError as e:
            logger.warning("saving provider failed: %s", e)
            return SettingsSaved(error=e)
        return SettingsSaved()


@dataclass
class OpenUrl(Effect):
    url: str = ""

    def run(self) -> None:
        try:
            webbrowser.open(self.url)
        except webbrowser.Error as e:
            logger.warning("opening %s failed: %s", self.url, e)
        return None
