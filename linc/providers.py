# SPDX-License-Identifier: MIT
"""
Coding-agent providers.

A provider receives the issue and launches an agent on it. The claude
provider replaces the current process; the echo provider prints the prompt
and returns, which is handy for trying linc without an agent installed.
"""

import os
import shutil
import sys
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, TextIO

from linc.models import Issue, OrganizationContext
from linc.prompt import build_prompt

DEFAULT_PROVIDER_ID = "claude"


class ProviderError(Exception):
    """Raised when a provider cannot be found or launched."""

    pass


class Provider(ABC):
    """Base class for agent providers."""

    name: str = ""

    @abstractmethod
    def execute(
        self,
        issue: Issue,
        comment: str,
        context: Optional[OrganizationContext],
        plan_mode: bool,
    ) -> None:
        """Launch the agent. May never return if the process is replaced.

        Raises:
            ProviderError: If the agent cannot be started.
        """
        pass


class ClaudeProvider(Provider):
    """Replaces the current process with ``claude <prompt>``."""

    name = "Claude Code"
    executable = "claude"

    def build_args(self, prompt: str, plan_mode: bool) -> List[str]:
        args = [self.executable, prompt]
        if plan_mode:
            args += ["--permission-mode", "plan"]
        return args

    def execute(self, issue, comment, context, plan_mode) -> None:
        path = shutil.which(self.executable)
        if path is None:
            raise ProviderError(f"{self.executable} not found in PATH")
        args = self.build_args(build_prompt(issue, comment, context), plan_mode)
        try:
            os.execv(path, args)
        except OSError as e:
            raise ProviderError(f"failed to exec {path}: {e}") from e


class EchoProvider(Provider):
    """Prints the prompt to stdout instead of launching an agent."""

    name = "Echo (test)"

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def execute(self, issue, comment, context, plan_mode) -> None:
        stream = self.stream or sys.stdout
        prompt = build_prompt(issue, comment, context)
        print("=== Echo Provider Output ===", file=stream)
        print(f"Plan Mode: {plan_mode}", file=stream)
        print("=== Prompt Start ===", file=stream)
        print(prompt, file=stream)
        print("=== Prompt End ===", file=stream)


class ProviderRegistry:
    """Providers by id, with a default id."""

    def __init__(self, default_id: str = DEFAULT_PROVIDER_ID) -> None:
        self._providers: Dict[str, Provider] = {}
        self.default_id = default_id

    def register(self, provider_id: str, provider: Provider) -> None:
        self._providers[provider_id] = provider

    def get(self, provider_id: str) -> Provider:
        try:
            return self._providers[provider_id]
        except KeyError:
            raise ProviderError(f"provider not found: {provider_id}") from None

    def get_default(self) -> Optional[Provider]:
        return self._providers.get(self.default_id)

    def set_default(self, provider_id: str) -> None:
        if provider_id not in self._providers:
            raise ProviderError(f"provider not found: {provider_id}")
        self.default_id = provider_id

    def list(self) -> List[str]:
        return sorted(self._providers)


def default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register("claude", ClaudeProvider())
    registry.register("echo", EchoProvider())
    return registry
