# SPDX-License-Identifier: MIT
"""
Data models for Linear issues and workflow states.

Contains the dataclasses built from tracker responses, priority constants,
and the pure state-resolution rules shared by the client and the TUI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# =============================================================================
# Constants
# =============================================================================

PRIORITY_NONE = 0
PRIORITY_URGENT = 1
PRIORITY_HIGH = 2
PRIORITY_MEDIUM = 3
PRIORITY_LOW = 4

PRIORITY_LABELS = {
    PRIORITY_NONE: "No priority",
    PRIORITY_URGENT: "Urgent",
    PRIORITY_HIGH: "High",
    PRIORITY_MEDIUM: "Medium",
    PRIORITY_LOW: "Low",
}

# "No priority" sorts after every explicit priority
UNSET_PRIORITY_RANK = 99

STATE_TYPE_TRIAGE = "triage"
STATE_TYPE_BACKLOG = "backlog"
STATE_TYPE_UNSTARTED = "unstarted"
STATE_TYPE_STARTED = "started"
STATE_TYPE_COMPLETED = "completed"
STATE_TYPE_CANCELED = "canceled"

CANCELED_STATE_NAME = "Canceled"
DUPLICATE_STATE_NAME = "Duplicate"
IN_PROGRESS_STATE_NAME = "In Progress"


def priority_rank(priority: int) -> int:
    """Sort key for a priority value; unset priority ranks last."""
    return UNSET_PRIORITY_RANK if priority == PRIORITY_NONE else priority


def priority_label(priority: int) -> str:
    return PRIORITY_LABELS.get(priority, f"Priority {priority}")


def _nodes(value: Any) -> List[dict]:
    """Unwrap a GraphQL connection ({"nodes": [...]}) or a plain list."""
    if isinstance(value, dict):
        return value.get("nodes") or []
    return value or []


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class User:
    """A tracker user (assignee or comment author)."""
    id: str = ""
    name: str = ""
    email: str = ""

    @classmethod
    def from_api(cls, data: Optional[dict]) -> Optional["User"]:
        if not data:
            return None
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            email=data.get("email", "") or "",
        )


@dataclass
class Team:
    """A team owning issues and workflow states."""
    id: str = ""
    name: str = ""
    key: str = ""

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "Team":
        data = data or {}
        return cls(id=data.get("id", ""), name=data.get("name", ""), key=data.get("key", ""))


@dataclass
class State:
    """A workflow state belonging to a team."""
    id: str = ""
    name: str = ""
    color: str = ""
    type: str = ""
    position: float = 0.0

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "State":
        data = data or {}
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            color=data.get("color", "") or "",
            type=data.get("type", "") or "",
            position=float(data.get("position") or 0.0),
        )


@dataclass
class Label:
    id: str = ""
    name: str = ""
    color: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Label":
        return cls(id=data.get("id", ""), name=data.get("name", ""), color=data.get("color", "") or "")


@dataclass
class Cycle:
    id: str = ""
    number: int = 0
    name: str = ""

    @classmethod
    def from_api(cls, data: Optional[dict]) -> Optional["Cycle"]:
        if not data:
            return None
        return cls(id=data.get("id", ""), number=int(data.get("number") or 0), name=data.get("name", "") or "")


@dataclass
class Comment:
    """A comment on an issue."""
    id: str = ""
    body: str = ""
    created_at: str = ""
    user: User = field(default_factory=User)

    @classmethod
    def from_api(cls, data: dict) -> "Comment":
        return cls(
            id=data.get("id", ""),
            body=data.get("body", "") or "",
            created_at=data.get("createdAt", "") or "",
            user=User.from_api(data.get("user")) or User(),
        )


@dataclass
class Attachment:
    """A link attached to an issue (Slack thread, PR, document...)."""
    id: str = ""
    title: str = ""
    url: str = ""
    source_type: str = ""
    subtitle: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Attachment":
        metadata = data.get("metadata")
        return cls(
            id=data.get("id", ""),
            title=data.get("title", "") or "",
            url=data.get("url", "") or "",
            source_type=data.get("sourceType", "") or "",
            subtitle=data.get("subtitle", "") or "",
            metadata=metadata if isinstance(metadata, dict) else {},
            created_at=data.get("createdAt", "") or "",
        )


@dataclass
class Issue:
    """A single Linear issue.

    Comments and attachments are only populated by the full-context fetch
    used right before handing the issue to an agent.
    """
    id: str
    identifier: str
    title: str
    description: str = ""
    priority: int = PRIORITY_NONE
    estimate: Optional[float] = None
    branch_name: str = ""
    url: str = ""
    created_at: str = ""
    state: State = field(default_factory=State)
    assignee: Optional[User] = None
    labels: List[Label] = field(default_factory=list)
    cycle: Optional[Cycle] = None
    team: Team = field(default_factory=Team)
    comments: List[Comment] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Issue":
        estimate = data.get("estimate")
        return cls(
            id=data.get("id", ""),
            identifier=data.get("identifier", ""),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            priority=int(data.get("priority") or 0),
            estimate=float(estimate) if estimate is not None else None,
            branch_name=data.get("branchName", "") or "",
            url=data.get("url", "") or "",
            created_at=data.get("createdAt", "") or "",
            state=State.from_api(data.get("state")),
            assignee=User.from_api(data.get("assignee")),
            labels=[Label.from_api(n) for n in _nodes(data.get("labels"))],
            cycle=Cycle.from_api(data.get("cycle")),
            team=Team.from_api(data.get("team")),
            comments=[Comment.from_api(n) for n in _nodes(data.get("comments"))],
            attachments=[Attachment.from_api(n) for n in _nodes(data.get("attachments"))],
        )


@dataclass
class OrganizationContext:
    """Organization identifiers exposed to the agent prompt."""
    organization_id: str
    organization_name: str


@dataclass
class Viewer:
    """The authenticated user with their organization and teams."""
    id: str = ""
    name: str = ""
    email: str = ""
    organization: Optional[OrganizationContext] = None
    teams: List[Team] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "Viewer":
        org = data.get("organization")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            email=data.get("email", "") or "",
            organization=(
                OrganizationContext(org.get("id", ""), org.get("name", "")) if org else None
            ),
            teams=[Team.from_api(n) for n in _nodes(data.get("teams"))],
        )


# =============================================================================
# State ordering and resolution
# =============================================================================


def order_states(states: List[State]) -> List[State]:
    """Order states into display bands: active, completed, then canceled.

    Each band keeps its states sorted by position; states with equal
    positions keep their original order.
    """
    active = [s for s in states if s.type not in (STATE_TYPE_COMPLETED, STATE_TYPE_CANCELED)]
    completed = [s for s in states if s.type == STATE_TYPE_COMPLETED]
    canceled = [s for s in states if s.type == STATE_TYPE_CANCELED]

    def by_position(band: List[State]) -> List[State]:
        return sorted(band, key=lambda s: s.position)

    return by_position(active) + by_position(completed) + by_position(canceled)


def resolve_canceled_state_id(states: List[State]) -> str:
    """Pick the state an issue moves to when canceled.

    Prefers a canceled-type state named exactly "Canceled", then any
    canceled-type state. Returns "" when the team has none.
    """
    for state in states:
        if state.type == STATE_TYPE_CANCELED and state.name == CANCELED_STATE_NAME:
            return state.id
    for state in states:
        if state.type == STATE_TYPE_CANCELED:
            return state.id
    return ""


def resolve_duplicate_state_id(states: List[State]) -> str:
    """Pick the state for a duplicate: a state named "Duplicate", else canceled."""
    for state in states:
        if state.name == DUPLICATE_STATE_NAME:
            return state.id
    return resolve_canceled_state_id(states)


def resolve_in_progress_state_id(states: List[State]) -> str:
    """First started-type state, else one named "In Progress", else ""."""
    for state in states:
        if state.type == STATE_TYPE_STARTED:
            return state.id
    for state in states:
        if state.name == IN_PROGRESS_STATE_NAME:
            return state.id
    return ""
