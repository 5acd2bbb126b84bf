"""Tests for the Linear GraphQL client (HTTP layer mocked)."""
from unittest.mock import MagicMock

import pytest
import requests

from linc.linear_client import API_URL, LinearClient, LinearError, fetch_workspace_info
from linc.models import Viewer


def _response(status=200, body=None, json_error=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


@pytest.fixture
def client():
    c = LinearClient("lin_api_test")
    c._session = MagicMock()
    return c


def _payload(client):
    return client._session.post.call_args.kwargs["json"]


class TestExecute:
    def test_sends_authorization_header(self):
        c = LinearClient("lin_api_secret")
        assert c._session.headers["Authorization"] == "lin_api_secret"
        assert c._session.headers["Content-Type"] == "application/json"

    def test_returns_data(self, client):
        client._session.post.return_value = _response(body={"data": {"ok": True}})

        assert client.execute("query { ok }", {"a": 1}) == {"ok": True}
        args, kwargs = client._session.post.call_args
        assert args[0] == API_URL
        assert kwargs["json"] == {"query": "query { ok }", "variables": {"a": 1}}

    def test_non_200_raises(self, client):
        client._session.post.return_value = _response(status=401, text="unauthorized")

        with pytest.raises(LinearError, match="401"):
            client.execute("query { ok }")

    def test_graphql_errors_raise(self, client):
        client._session.post.return_value = _response(body={"errors": [{"message": "bad field"}]})

        with pytest.raises(LinearError, match="bad field"):
            client.execute("query { ok }")

    def test_malformed_json_raises(self, client):
        client._session.post.return_value = _response(json_error=ValueError("nope"))

        with pytest.raises(LinearError):
            client.execute("query { ok }")

    def test_transport_error_raises(self, client):
        client._session.post.side_effect = requests.ConnectionError("down")

        with pytest.raises(LinearError, match="down"):
            client.execute("query { ok }")


class TestQueries:
    def test_get_viewer(self, client):
        client._session.post.return_value = _response(body={"data": {"viewer": {
            "id": "u1", "name": "Ada",
            "organization": {"id": "org-1", "name": "Acme"},
            "teams": {"nodes": [{"id": "t1", "name": "Eng", "key": "ENG"}]},
        }}})

        viewer = client.get_viewer()
        assert viewer.name == "Ada"
        assert viewer.teams[0].id == "t1"

    def test_get_workspace_info_without_org_raises(self, client):
        client._session.post.return_value = _response(body={"data": {"viewer": {"id": "u1"}}})

        with pytest.raises(LinearError):
            client.get_workspace_info()

    def test_get_team_states_is_band_ordered(self, client):
        client._session.post.return_value = _response(body={"data": {"team": {"states": {"nodes": [
            {"id": "done", "name": "Done", "type": "completed", "position": 0},
            {"id": "todo", "name": "Todo", "type": "unstarted", "position": 1},
        ]}}}})

        assert [s.id for s in client.get_team_states("t1")] == ["todo", "done"]
        assert _payload(client)["variables"] == {"teamId": "t1"}

    def test_get_assigned_issues(self, client):
        client._session.post.return_value = _response(body={"data": {"issues": {"nodes": [
            {"id": "i1", "identifier": "ENG-1", "title": "One"},
        ]}}})

        issues = client.get_assigned_issues("t1")
        assert [i.identifier for i in issues] == ["ENG-1"]

    def test_get_issue_with_context_not_found(self, client):
        client._session.post.return_value = _response(body={"data": {"issue": None}})

        with pytest.raises(LinearError, match="not found"):
            client.get_issue_with_context("missing")

    def test_get_duplicate_state_id_falls_back(self, client):
        client._session.post.return_value = _response(body={"data": {"team": {"states": {"nodes": [
            {"id": "c", "name": "Canceled", "type": "canceled"},
        ]}}}})

        assert client.get_duplicate_state_id("t1") == "c"


class TestMutations:
    def test_create_comment(self, client):
        client._session.post.return_value = _response(body={"data": {"commentCreate": {
            "success": True, "comment": {"id": "c1", "body": "hello"},
        }}})

        comment = client.create_comment("i1", "hello")
        assert comment.id == "c1"
        assert _payload(client)["variables"] == {"issueId": "i1", "body": "hello"}

    def test_create_comment_unsuccessful(self, client):
        client._session.post.return_value = _response(body={"data": {"commentCreate": {"success": False}}})
        assert client.create_comment("i1", "hello") is None

    def test_update_priority_variables(self, client):
        client._session.post.return_value = _response(body={"data": {"issueUpdate": {"success": True}}})

        client.update_issue_priority("i1", 2)
        assert _payload(client)["variables"] == {"issueId": "i1", "priority": 2}

    def test_update_title_propagates_errors(self, client):
        client._session.post.return_value = _response(status=500, text="boom")

        with pytest.raises(LinearError):
            client.update_issue_title("i1", "New")


def test_fetch_workspace_info(monkeypatch):
    viewer = Viewer.from_api({"id": "u1", "organization": {"id": "org-1", "name": "Acme"}})
    monkeypatch.setattr(LinearClient, "get_viewer", lambda self: viewer)

    info = fetch_workspace_info("lin_api_x")
    assert (info.organization_id, info.organization_name) == ("org-1", "Acme")
