"""Tests for terminal workspace onboarding."""
import io

import pytest

from linc.auth import (
    LINEAR_API_KEYS_URL,
    WorkspaceError,
    prompt_for_new_workspace,
    resolve_workspace,
    select_or_add_workspace,
)
from linc.config import Config, Workspace
from linc.linear_client import LinearError
from linc.models import OrganizationContext


def scripted(*answers):
    """input() replacement returning answers in order, then EOF."""
    queue = list(answers)

    def _input(prompt=""):
        if not queue:
            raise EOFError
        return queue.pop(0)

    return _input


def fetch_acme(key):
    return OrganizationContext("org-1", "Acme")


@pytest.fixture
def empty_config(tmp_path):
    return Config(path=tmp_path / "config.json")


class TestPromptForNewWorkspace:
    def test_adds_and_maps_workspace(self, empty_config, tmp_path):
        opened = []
        ws = prompt_for_new_workspace(
            empty_config, str(tmp_path), fetch_info=fetch_acme,
            input_fn=scripted("", "lin_api_abc"), out=io.StringIO(), open_url=opened.append,
        )

        assert opened == [LINEAR_API_KEYS_URL]
        assert (ws.id, ws.name, ws.api_key) == ("org-1", "Acme", "lin_api_abc")
        assert empty_config.get_workspace_for_directory(str(tmp_path)).id == "org-1"
        assert Config.load(empty_config.path).get_workspace_by_id("org-1") is not None

    def test_known_workspace_gets_new_key(self, empty_config, tmp_path):
        empty_config.add_workspace(Workspace(id="org-1", name="Acme", api_key="old"))

        ws = prompt_for_new_workspace(
            empty_config, str(tmp_path), fetch_info=fetch_acme,
            input_fn=scripted("", "lin_api_new"), out=io.StringIO(), open_url=lambda url: None,
        )

        assert ws.api_key == "lin_api_new"
        assert len(empty_config.workspaces) == 1

    def test_empty_key(self, empty_config, tmp_path):
        with pytest.raises(WorkspaceError, match="no API key"):
            prompt_for_new_workspace(
                empty_config, str(tmp_path), fetch_info=fetch_acme,
                input_fn=scripted("", "   "), out=io.StringIO(), open_url=lambda url: None,
            )

    def test_unusual_prefix_requires_confirmation(self, empty_config, tmp_path):
        with pytest.raises(WorkspaceError, match="cancelled"):
            prompt_for_new_workspace(
                empty_config, str(tmp_path), fetch_info=fetch_acme,
                input_fn=scripted("", "sk-123", "n"), out=io.StringIO(), open_url=lambda url: None,
            )

    def test_unusual_prefix_confirmed(self, empty_config, tmp_path):
        ws = prompt_for_new_workspace(
            empty_config, str(tmp_path), fetch_info=fetch_acme,
            input_fn=scripted("", "sk-123", "yes"), out=io.StringIO(), open_url=lambda url: None,
        )
        assert ws.api_key == "sk-123"

    def test_validation_failure(self, empty_config, tmp_path):
        def reject(key):
            raise LinearError("API request failed with status 401")

        with pytest.raises(WorkspaceError, match="failed to validate"):
            prompt_for_new_workspace(
                empty_config, str(tmp_path), fetch_info=reject,
                input_fn=scripted("", "lin_api_bad"), out=io.StringIO(), open_url=lambda url: None,
            )
        assert empty_config.workspaces == []

    def test_eof(self, empty_config, tmp_path):
        with pytest.raises(WorkspaceError):
            prompt_for_new_workspace(
                empty_config, str(tmp_path), fetch_info=fetch_acme,
                input_fn=scripted(), out=io.StringIO(), open_url=lambda url: None,
            )


class TestSelectOrAddWorkspace:
    def test_picks_existing(self, empty_config, tmp_path):
        empty_config.add_workspace(Workspace(id="a", name="Alpha", api_key="k1"))
        empty_config.add_workspace(Workspace(id="b", name="Beta", api_key="k2"))
        out = io.StringIO()

        ws = select_or_add_workspace(empty_config, str(tmp_path), input_fn=scripted("x", "9", "2"), out=out)

        assert ws.id == "b"
        assert empty_config.directories == {str(tmp_path): "b"}
        assert "3. + Add new workspace" in out.getvalue()
        assert out.getvalue().count("Please enter a number") == 2

    def test_add_new(self, empty_config, tmp_path):
        empty_config.add_workspace(Workspace(id="a", name="Alpha", api_key="k1"))

        ws = select_or_add_workspace(
            empty_config, str(tmp_path), fetch_info=fetch_acme,
            input_fn=scripted("2", "", "lin_api_x"), out=io.StringIO(), open_url=lambda url: None,
        )
        assert ws.id == "org-1"

    def test_no_workspaces_goes_straight_to_prompt(self, empty_config, tmp_path):
        ws = select_or_add_workspace(
            empty_config, str(tmp_path), fetch_info=fetch_acme,
            input_fn=scripted("", "lin_api_x"), out=io.StringIO(), open_url=lambda url: None,
        )
        assert ws.id == "org-1"


class TestResolveWorkspace:
    def test_uses_parent_mapping(self, empty_config, tmp_path):
        empty_config.add_workspace(Workspace(id="a", name="Alpha", api_key="k1"))
        empty_config.set_directory_workspace(str(tmp_path), "a")
        out = io.StringIO()

        ws = resolve_workspace(empty_config, str(tmp_path / "sub"), input_fn=scripted(), out=out)

        assert ws.id == "a"
        assert f"Using workspace 'Alpha' (from {tmp_path})" in out.getvalue()

    def test_exact_mapping_is_silent(self, empty_config, tmp_path):
        empty_config.add_workspace(Workspace(id="a", name="Alpha", api_key="k1"))
        empty_config.set_directory_workspace(str(tmp_path), "a")
        out = io.StringIO()

        resolve_workspace(empty_config, str(tmp_path), input_fn=scripted(), out=out)
        assert out.getvalue() == ""
