# SPDX-License-Identifier: MIT
"""
Agent prompt generation.

Turns an issue (with its comments and attachments) into the text block a
coding agent starts from. The output is deterministic; agents rely on the
closing ``Fixes <identifier>`` hint.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from linc.models import Attachment, Issue, OrganizationContext

SLACK_SOURCE_TYPE = "slack"
SLACK_CONTENT_KEYS = ("text", "message", "content")


def split_attachments(attachments: List[Attachment]) -> Tuple[List[Attachment], List[Attachment]]:
    """Split attachments into (slack, other) preserving order."""
    slack = [a for a in attachments if a.source_type.lower() == SLACK_SOURCE_TYPE]
    other = [a for a in attachments if a.source_type.lower() != SLACK_SOURCE_TYPE]
    return slack, other


def extract_slack_content(metadata: Optional[dict]) -> str:
    """First non-empty string among the text/message/content metadata keys."""
    if not metadata:
        return ""
    for key in SLACK_CONTENT_KEYS:
        value = metadata.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def format_comment_date(timestamp: str) -> str:
    """Reduce an ISO-8601 timestamp to YYYY-MM-DD; unparseable input is returned as is."""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return timestamp


def build_prompt(issue: Issue, comment: str = "", context: Optional[OrganizationContext] = None) -> str:
    """Build the agent prompt for an issue.

    Args:
        issue: The issue, ideally fetched with comments and attachments
        comment: Free-text note from the user (optional)
        context: Organization identifiers (optional)

    Returns:
        The prompt text.
    """
    parts: List[str] = []
    out = parts.append

    out(f"I'm starting work on Linear ticket {issue.identifier}.\n\n")
    out(f"## {issue.identifier}: {issue.title}\n\n")

    if issue.description:
        out("### Description\n")
        out(issue.description)
        out("\n\n")

    out("### Metadata\n")
    out(f"- **Status**: {issue.state.name} (moved to In Progress)\n")
    out(f"- **Team**: {issue.team.name}\n")
    if issue.assignee is not None:
        out(f"- **Assignee**: {issue.assignee.name}\n")
    if issue.labels:
        out(f"- **Labels**: {', '.join(label.name for label in issue.labels)}\n")
    if issue.branch_name:
        out(f"- **Suggested branch**: `{issue.branch_name}`\n")
    out(f"- **Linear URL**: {issue.url}\n")

    slack, other = split_attachments(issue.attachments)
    if slack:
        out("\n### Slack Conversations\n")
        for att in slack:
            out(f"**{att.title}**\n")
            content = extract_slack_content(att.metadata)
            if content:
                out(f"> {content}\n")
            if att.subtitle:
                out(f"_{att.subtitle}_\n")
            out(f"- [View in Slack]({att.url})\n\n")

    if other:
        out("\n### Attachments\n")
        for att in other:
            out(f"- [{att.title}]({att.url}) ({att.source_type or 'link'})\n")
        out("\n")

    if issue.comments:
        out("\n### Discussion Thread\n")
        out(f"*{len(issue.comments)} comment(s) on this issue:*\n\n")
        for c in issue.comments:
            out(f"**{c.user.name}** ({format_comment_date(c.created_at)}):\n")
            for line in c.body.split("\n"):
                out(f"> {line}\n")
            out("\n")

    if comment:
        out(f"\n### My Notes\n{comment}\n")

    out("\n### Linear API Context\n")
    out("If you have access to the Linear MCP server, you can use these identifiers:\n")
    out(f"- **Issue ID (UUID)**: `{issue.id}`\n")
    out(f"- **Issue Identifier**: `{issue.identifier}`\n")
    out(f"- **Team ID**: `{issue.team.id}`\n")
    out(f"- **Team Key**: `{issue.team.key}`\n")
    if context is not None:
        out(f"- **Organization ID**: `{context.organization_id}`\n")
        out(f"- **Organization Name**: {context.organization_name}\n")
    out("\nWith Linear MCP, you can: update issue status, add comments, create sub-issues, query related issues, and more.\n")

    out("\n---\n")
    out("Please help me implement this ticket. Start by understanding the requirements and exploring the codebase if needed.\n\n")
    out(
        f"**Important**: When you make the commit that resolves this issue, include `Fixes {issue.identifier}` "
        "in the commit message so Linear automatically marks it as done."
    )

    return "".join(parts)
