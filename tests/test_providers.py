"""Tests for agent providers and the provider registry."""
import io
from unittest.mock import patch

import pytest

from linc.providers import (
    ClaudeProvider,
    EchoProvider,
    ProviderError,
    ProviderRegistry,
    default_registry,
)


class TestRegistry:
    def test_default_registry(self):
        registry = default_registry()

        assert registry.list() == ["claude", "echo"]
        assert isinstance(registry.get_default(), ClaudeProvider)

    def test_unknown_provider_raises(self):
        with pytest.raises(ProviderError, match="provider not found: nope"):
            default_registry().get("nope")

    def test_set_default(self):
        registry = ProviderRegistry()
        registry.register("echo", EchoProvider())

        assert registry.get_default() is None
        registry.set_default("echo")
        assert registry.get_default() is registry.get("echo")

        with pytest.raises(ProviderError):
            registry.set_default("claude")


class TestEchoProvider:
    def test_prints_prompt(self, issue_factory):
        out = io.StringIO()

        EchoProvider(stream=out).execute(issue_factory(1), "note", None, True)

        text = out.getvalue()
        assert text.startswith("=== Echo Provider Output ===\nPlan Mode: True\n=== Prompt Start ===\n")
        assert "I'm starting work on Linear ticket ENG-1." in text
        assert "### My Notes\nnote" in text
        assert text.endswith("=== Prompt End ===\n")


class TestClaudeProvider:
    def test_build_args(self):
        provider = ClaudeProvider()

        assert provider.build_args("p", plan_mode=False) == ["claude", "p"]
        assert provider.build_args("p", plan_mode=True) == ["claude", "p", "--permission-mode", "plan"]

    def test_missing_binary(self, issue_factory):
        with patch("linc.providers.shutil.which", return_value=None):
            with pytest.raises(ProviderError, match="not found in PATH"):
                ClaudeProvider().execute(issue_factory(1), "", None, False)

    def test_replaces_process(self, issue_factory):
        with patch("linc.providers.shutil.which", return_value="/usr/bin/claude"), \
                patch("linc.providers.os.execv") as execv:
            ClaudeProvider().execute(issue_factory(1), "", None, True)

        path, args = execv.call_args.args
        assert path == "/usr/bin/claude"
        assert args[0] == "claude"
        assert args[1].startswith("I'm starting work on Linear ticket ENG-1.")
        assert args[2:] == ["--permission-mode", "plan"]

    def test_exec_failure(self, issue_factory):
        with patch("linc.providers.shutil.which", return_value="/usr/bin/claude"), \
                patch("linc.providers.os.execv", side_effect=OSError("denied")):
            with pytest.raises(ProviderError, match="denied"):
                ClaudeProvider().execute(issue_factory(1), "", None, False)
