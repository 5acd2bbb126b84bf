"""Tests for agent prompt generation."""
import pytest

from linc.models import (
    Attachment,
    Comment,
    Issue,
    Label,
    OrganizationContext,
    State,
    Team,
    User,
)
from linc.prompt import build_prompt, extract_slack_content, format_comment_date, split_attachments


@pytest.fixture
def issue():
    return Issue(
        id="uuid-1",
        identifier="ENG-1",
        title="Fix bug",
        description="It breaks.",
        branch_name="eng-1-fix-bug",
        url="https://linear.app/acme/issue/ENG-1",
        state=State(id="s1", name="Todo", type="unstarted"),
        team=Team(id="team-1", name="Engineering", key="ENG"),
    )


class TestBuildPrompt:
    def test_minimal_issue(self, issue):
        prompt = build_prompt(issue)

        assert prompt.startswith("I'm starting work on Linear ticket ENG-1.\n\n## ENG-1: Fix bug\n\n")
        assert "### Description\nIt breaks.\n\n" in prompt
        assert "- **Status**: Todo (moved to In Progress)\n" in prompt
        assert "- **Team**: Engineering\n" in prompt
        assert "- **Suggested branch**: `eng-1-fix-bug`\n" in prompt
        assert "- **Linear URL**: https://linear.app/acme/issue/ENG-1\n" in prompt
        assert "- **Issue ID (UUID)**: `uuid-1`" in prompt
        assert "- **Team Key**: `ENG`" in prompt
        assert "Organization ID" not in prompt
        assert "### Discussion Thread" not in prompt
        assert "### My Notes" not in prompt
        assert "\n---\n" in prompt
        assert prompt.endswith(
            "include `Fixes ENG-1` in the commit message so Linear automatically marks it as done."
        )

    def test_empty_description_omitted(self, issue):
        issue.description = ""
        assert "### Description" not in build_prompt(issue)

    def test_assignee_and_labels(self, issue):
        issue.assignee = User(name="Ada")
        issue.labels = [Label(name="bug"), Label(name="ui")]

        prompt = build_prompt(issue)
        assert "- **Assignee**: Ada\n" in prompt
        assert "- **Labels**: bug, ui\n" in prompt

    def test_comments_and_notes(self, issue):
        issue.comments = [
            Comment(body="first line\nsecond line", created_at="2026-01-03T09:00:00.000Z", user=User(name="Bob")),
            Comment(body="later", created_at="yesterday", user=User(name="Cy")),
        ]

        prompt = build_prompt(issue, comment="Focus on the API")

        assert "*2 comment(s) on this issue:*" in prompt
        assert "**Bob** (2026-01-03):\n> first line\n> second line\n" in prompt
        assert "**Cy** (yesterday):" in prompt
        assert "### My Notes\nFocus on the API\n" in prompt
        assert prompt.index("### Discussion Thread") < prompt.index("### My Notes")

    def test_attachments(self, issue):
        issue.attachments = [
            Attachment(title="Thread", url="https://slack/1", source_type="Slack",
                       subtitle="#eng", metadata={"message": "it broke"}),
            Attachment(title="PR", url="https://github/1", source_type="github"),
            Attachment(title="Doc", url="https://docs/1"),
        ]

        prompt = build_prompt(issue)

        assert "### Slack Conversations\n**Thread**\n> it broke\n_#eng_\n- [View in Slack](https://slack/1)" in prompt
        assert "- [PR](https://github/1) (github)\n" in prompt
        assert "- [Doc](https://docs/1) (link)\n" in prompt
        assert prompt.index("### Slack Conversations") < prompt.index("### Attachments")

    def test_organization_context(self, issue):
        prompt = build_prompt(issue, context=OrganizationContext("org-1", "Acme"))

        assert "- **Organization ID**: `org-1`\n" in prompt
        assert "- **Organization Name**: Acme\n" in prompt

    def test_deterministic(self, issue):
        assert build_prompt(issue, "x") == build_prompt(issue, "x")


class TestHelpers:
    def test_split_attachments_keeps_order(self):
        a = Attachment(id="a", source_type="slack")
        b = Attachment(id="b", source_type="github")
        c = Attachment(id="c", source_type="SLACK")

        slack, other = split_attachments([a, b, c])
        assert [x.id for x in slack] == ["a", "c"]
        assert [x.id for x in other] == ["b"]

    @pytest.mark.parametrize(
        "metadata,expected",
        [
            ({"text": "t", "message": "m"}, "t"),
            ({"text": "", "message": "m"}, "m"),
            ({"content": "c"}, "c"),
            ({"text": 5}, ""),
            (None, ""),
        ],
    )
    def test_extract_slack_content(self, metadata, expected):
        assert extract_slack_content(metadata) == expected

    def test_format_comment_date(self):
        assert format_comment_date("2026-01-03T23:59:59Z") == "2026-01-03"
        assert format_comment_date("not a date") == "not a date"
