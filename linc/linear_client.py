# SPDX-License-Identifier: MIT
"""Linear GraphQL API client."""

import logging
from typing import Any, Dict, List, Optional

import requests

from linc.models import (
    Comment,
    Issue,
    OrganizationContext,
    State,
    Viewer,
    order_states,
    resolve_canceled_state_id,
    resolve_duplicate_state_id,
    resolve_in_progress_state_id,
)

logger = logging.getLogger(__name__)

API_URL = "https://api.linear.app/graphql"

_ISSUE_FIELDS = """
      id
      identifier
      title
      description
      priority
      estimate
      branchName
      url
      createdAt
      state { id name color type }
      assignee { id name email }
      labels { nodes { id name color } }
      cycle { id number name }
      team { id name key }
"""

VIEWER_QUERY = """
query Viewer {
  viewer {
    id
    name
    email
    organization { id name }
    teams { nodes { id name key } }
  }
}
"""

TEAM_STATES_QUERY = """
query TeamStates($teamId: String!) {
  team(id: $teamId) {
    states { nodes { id name color type position } }
  }
}
"""

ASSIGNED_ISSUES_QUERY = """
query AssignedIssues($teamId: ID!) {
  issues(
    filter: {
      team: { id: { eq: $teamId } }
      assignee: { isMe: { eq: true } }
      state: { type: { nin: ["completed"] } }
    }
    orderBy: updatedAt
    first: 50
  ) {
    nodes {%s}
  }
}
""" % _ISSUE_FIELDS

ALL_TEAM_ISSUES_QUERY = """
query AllTeamIssues($teamId: ID!) {
  issues(
    filter: {
      team: { id: { eq: $teamId } }
      state: { type: { nin: ["completed"] } }
    }
    orderBy: updatedAt
    first: 100
  ) {
    nodes {%s}
  }
}
""" % _ISSUE_FIELDS

ISSUE_WITH_CONTEXT_QUERY = """
query IssueWithContext($issueId: String!) {
  issue(id: $issueId) {
    id
    identifier
    title
    description
    priority
    branchName
    url
    createdAt
    state { id name color type }
    assignee { id name email }
    labels { nodes { id name color } }
    team { id name key }
    comments(first: 20) {
      nodes { id body createdAt user { id name email } }
    }
    attachments(first: 20) {
      nodes { id title url sourceType subtitle metadata createdAt }
    }
  }
}
"""

CREATE_COMMENT_MUTATION = """
mutation CreateComment($issueId: String!, $body: String!) {
  commentCreate(input: { issueId: $issueId, body: $body }) {
    success
    comment { id body createdAt user { id name email } }
  }
}
"""

UPDATE_ISSUE_STATE_MUTATION = """
mutation UpdateIssueState($issueId: String!, $stateId: String!) {
  issueUpdate(id: $issueId, input: { stateId: $stateId }) {
    success
    issue { id state { id name } }
  }
}
"""

UPDATE_ISSUE_TITLE_MUTATION = """
mutation UpdateIssueTitle($issueId: String!, $title: String!) {
  issueUpdate(id: $issueId, input: { title: $title }) {
    success
    issue { id title }
  }
}
"""

UPDATE_ISSUE_PRIORITY_MUTATION = """
mutation UpdateIssuePriority($issueId: String!, $priority: Int!) {
  issueUpdate(id: $issueId, input: { priority: $priority }) {
    success
    issue { id priority }
  }
}
"""


class LinearError(Exception):
    """Raised when a Linear API call fails (transport, HTTP status or GraphQL error)."""

    pass


class LinearClient:
    """Executes queries and mutations against the Linear GraphQL API.

    Each call either returns parsed data or raises LinearError; nothing is
    retried.
    """

    def __init__(self, api_key: str, api_url: str = API_URL, timeout: float = 30) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "Authorization": api_key,
            }
        )

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL document and return its ``data`` object.

        Raises:
            LinearError: On transport failure, non-200 status, malformed JSON
                or a GraphQL ``errors`` entry.
        """
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            resp = self._session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise LinearError(f"failed to execute request: {e}") from e

        if resp.status_code != 200:
            raise LinearError(f"API request failed with status {resp.status_code}: {resp.text}")

        try:
            body = resp.json()
        except ValueError as e:
            raise LinearError(f"failed to decode response: {e}") from e

        errors = body.get("errors") or []
        if errors:
            message = errors[0].get("message", "unknown error")
            logger.warning("GraphQL error: %s", message)
            raise LinearError(f"GraphQL error: {message}")

        return body.get("data") or {}

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_viewer(self) -> Viewer:
        data = self.execute(VIEWER_QUERY)
        return Viewer.from_api(data.get("viewer") or {})

    def get_workspace_info(self) -> OrganizationContext:
        """Return the organization of the API key's workspace."""
        viewer = self.get_viewer()
        if viewer.organization is None:
            raise LinearError("viewer has no organization")
        return viewer.organization

    def get_all_team_states(self, team_id: str) -> List[State]:
        """All workflow states of a team, in API order."""
        data = self.execute(TEAM_STATES_QUERY, {"teamId": team_id})
        team = data.get("team") or {}
        nodes = (team.get("states") or {}).get("nodes") or []
        return [State.from_api(n) for n in nodes]

    def get_team_states(self, team_id: str) -> List[State]:
        """All workflow states of a team in display order (active, completed, canceled)."""
        return order_states(self.get_all_team_states(team_id))

    def get_assigned_issues(self, team_id: str) -> List[Issue]:
        data = self.execute(ASSIGNED_ISSUES_QUERY, {"teamId": team_id})
        nodes = (data.get("issues") or {}).get("nodes") or []
        return [Issue.from_api(n) for n in nodes]

    def get_all_team_issues(self, team_id: str) -> List[Issue]:
        data = self.execute(ALL_TEAM_ISSUES_QUERY, {"teamId": team_id})
        nodes = (data.get("issues") or {}).get("nodes") or []
        return [Issue.from_api(n) for n in nodes]

    def get_issue_with_context(self, issue_id: str) -> Issue:
        """Fetch an issue together with its comments and attachments."""
        data = self.execute(ISSUE_WITH_CONTEXT_QUERY, {"issueId": issue_id})
        node = data.get("issue")
        if not node:
            raise LinearError(f"issue not found: {issue_id}")
        return Issue.from_api(node)

    def get_in_progress_state_id(self, team_id: str) -> str:
        return resolve_in_progress_state_id(self.get_team_states(team_id))

    def get_canceled_state_id(self, team_id: str) -> str:
        return resolve_canceled_state_id(self.get_all_team_states(team_id))

    def get_duplicate_state_id(self, team_id: str) -> str:
        """Duplicate state id, falling back to the canceled state; "" when neither exists."""
        return resolve_duplicate_state_id(self.get_all_team_states(team_id))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_comment(self, issue_id: str, body: str) -> Optional[Comment]:
        """Post a comment; returns None when the API reports no success."""
        data = self.execute(CREATE_COMMENT_MUTATION, {"issueId": issue_id, "body": body})
        result = data.get("commentCreate") or {}
        if not result.get("success"):
            return None
        return Comment.from_api(result.get("comment") or {})

    def update_issue_state(self, issue_id: str, state_id: str) -> None:
        self.execute(UPDATE_ISSUE_STATE_MUTATION, {"issueId": issue_id, "stateId": state_id})

    def update_issue_title(self, issue_id: str, title: str) -> None:
        self.execute(UPDATE_ISSUE_TITLE_MUTATION, {"issueId": issue_id, "title": title})

    def update_issue_priority(self, issue_id: str, priority: int) -> None:
        self.execute(UPDATE_ISSUE_PRIORITY_MUTATION, {"issueId": issue_id, "priority": priority})


def fetch_workspace_info(api_key: str) -> OrganizationContext:
    """Validate an API key by fetching its organization."""
    return LinearClient(api_key).get_workspace_info()
