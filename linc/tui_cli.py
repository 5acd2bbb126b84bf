#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command-line entry point for linc.

Usage:
    linc              # browse issues for the workspace mapped to this directory
    linc --version    # print the version and exit
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from linc._version import __version__
from linc.auth import WorkspaceError, prompt_for_new_workspace, resolve_workspace
from linc.config import Config, ConfigError
from linc.debug_logger import get_logger
from linc.git import get_current_branch
from linc.handoff import run_handoff
from linc.linear_client import LinearClient
from linc.paths import PathResolver
from linc.providers import ProviderError, default_registry
from linc.tui.app import run_session
from linc.tui.app_state import OutcomeKind
from linc.tui.controller import SessionController

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = argparse.ArgumentParser(
        prog="linc",
        description="linc - pick a Linear issue and start a coding agent on it",
    )
    parser.add_argument(
        "--version", "-v", action="version", version=f"linc {__version__}"
    )
    parser.parse_args(argv)

    get_logger()
    registry = default_registry()

    try:
        config = Config.load()
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    current_dir = os.getcwd()
    try:
        workspace = resolve_workspace(config, current_dir)
    except WorkspaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = LinearClient(workspace.api_key)
    branch = get_current_branch()

    while True:
        controller = SessionController(
            client,
            config,
            workspace,
            working_dir=PathResolver.display_path(current_dir),
            providers=registry.list(),
            branch=branch,
            version=__version__,
        )
        outcome = run_session(controller)
        if outcome.kind != OutcomeKind.ADD_WORKSPACE:
            break
        try:
            workspace = prompt_for_new_workspace(config, current_dir)
        except WorkspaceError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        client = LinearClient(workspace.api_key)

    if outcome.kind != OutcomeKind.LAUNCH or outcome.launch is None:
        return 0

    request = outcome.launch
    provider = None
    if not request.checkout_only:
        try:
            provider = registry.get(config.get_provider())
        except ProviderError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        # the session may have switched workspaces; use its client
        run_handoff(controller.client, request, provider)
    except ProviderError as e:
        name = provider.name if provider else config.get_provider()
        print(f"Error starting {name}: {e}", file=sys.stderr)
        logger.error("agent launch failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
