# SPDX-License-Identifier: MIT
"""
Workspace onboarding on the plain terminal (before the TUI starts).

Resolves which Linear workspace a directory uses: an existing mapping, a
pick from the known workspaces, or a freshly added API key.
"""

import logging
import sys
import webbrowser
from typing import Callable, Optional, TextIO

from linc.config import Config, ConfigError, Workspace
from linc.linear_client import LinearError, fetch_workspace_info
from linc.models import OrganizationContext

logger = logging.getLogger(__name__)

LINEAR_API_KEYS_URL = "https://linear.app/settings/account/security"
API_KEY_PREFIX = "lin_api_"

InfoFetcher = Callable[[str], OrganizationContext]
InputFn = Callable[[str], str]


class WorkspaceError(Exception):
    """Raised when no workspace can be resolved for the current directory."""

    pass


def _ask(input_fn: InputFn, prompt: str) -> str:
    try:
        return input_fn(prompt)
    except EOFError as e:
        raise WorkspaceError("failed to read input") from e


def prompt_for_new_workspace(
    config: Config,
    current_dir: str,
    fetch_info: InfoFetcher = fetch_workspace_info,
    input_fn: InputFn = input,
    out: TextIO = sys.stdout,
    open_url: Callable[[str], object] = webbrowser.open,
) -> Workspace:
    """Ask for an API key, validate it and map its workspace to current_dir.

    A key for an already known workspace replaces that workspace's key.

    Raises:
        WorkspaceError: On empty input, declined confirmation, a key that
            fails validation, or a config write failure.
    """
    print("", file=out)
    print("To create an API key:", file=out)
    print("  1. Under 'API keys', click 'Create key'", file=out)
    print("  2. Give it a label (e.g., 'linc')", file=out)
    print("  3. Copy the key and paste it below", file=out)
    print("", file=out)
    print("Note: This will open your current workspace's settings.", file=out)
    print("      Switch workspaces in Linear first if needed.", file=out)
    print("", file=out)
    _ask(input_fn, "Press Enter to open Linear settings in your browser...")
    try:
        open_url(LINEAR_API_KEYS_URL)
    except webbrowser.Error as e:
        logger.warning("could not open browser: %s", e)

    print("", file=out)
    key = _ask(input_fn, "Paste your API key: ").strip()
    if not key:
        raise WorkspaceError("no API key provided")

    if not key.startswith(API_KEY_PREFIX):
        print("", file=out)
        print(
            f"Warning: Key doesn't start with '{API_KEY_PREFIX}' - this may not be a valid Linear API key.",
            file=out,
        )
        confirm = _ask(input_fn, "Continue anyway? [y/N]: ").strip().lower()
        if confirm not in ("y", "yes"):
            raise WorkspaceError("authentication cancelled")

    print("", file=out)
    print("Validating API key...", file=out)
    try:
        info = fetch_info(key)
    except LinearError as e:
        raise WorkspaceError(f"failed to validate API key: {e}") from e

    try:
        existing = config.get_workspace_by_id(info.organization_id)
        if existing is not None:
            existing.api_key = key
            config.add_workspace(existing)
            config.set_directory_workspace(current_dir, existing.id)
            print(f"Updated API key for workspace '{existing.name}'.\n", file=out)
            return existing

        ws = Workspace(id=info.organization_id, name=info.organization_name, api_key=key)
        config.add_workspace(ws)
        config.set_directory_workspace(current_dir, ws.id)
    except ConfigError as e:
        raise WorkspaceError(f"failed to save workspace: {e}") from e

    logger.info("added workspace %s", ws.name)
    print(f"Added workspace '{ws.name}' for this directory.\n", file=out)
    return ws


def use_existing_workspace(config: Config, workspace: Workspace, current_dir: str, out: TextIO = sys.stdout) -> None:
    """Map current_dir to an already known workspace."""
    try:
        config.set_directory_workspace(current_dir, workspace.id)
    except ConfigError as e:
        raise WorkspaceError(f"failed to save directory mapping: {e}") from e
    print(f"\nUsing workspace '{workspace.name}' for this directory.\n", file=out)


def select_or_add_workspace(
    config: Config,
    current_dir: str,
    fetch_info: InfoFetcher = fetch_workspace_info,
    input_fn: InputFn = input,
    out: TextIO = sys.stdout,
    open_url: Callable[[str], object] = webbrowser.open,
) -> Workspace:
    """Numbered stdin picker over known workspaces plus "add new"."""
    if not config.has_workspaces():
        print("No Linear workspace configured yet.", file=out)
        return prompt_for_new_workspace(config, current_dir, fetch_info, input_fn, out, open_url)

    print("Select a workspace for this directory:", file=out)
    print("", file=out)
    for i, ws in enumerate(config.workspaces, start=1):
        print(f"  {i}. {ws.name}", file=out)
    add_choice = len(config.workspaces) + 1
    print(f"  {add_choice}. + Add new workspace", file=out)
    print("", file=out)

    while True:
        answer = _ask(input_fn, f"Choice [1-{add_choice}]: ").strip()
        try:
            choice = int(answer)
        except ValueError:
            choice = 0
        if 1 <= choice <= add_choice:
            break
        print(f"Please enter a number between 1 and {add_choice}.", file=out)

    if choice == add_choice:
        return prompt_for_new_workspace(config, current_dir, fetch_info, input_fn, out, open_url)
    ws = config.workspaces[choice - 1]
    use_existing_workspace(config, ws, current_dir, out)
    return ws


def resolve_workspace(
    config: Config,
    current_dir: str,
    input_fn: InputFn = input,
    out: TextIO = sys.stdout,
) -> Workspace:
    """Workspace for current_dir, asking the user when none is mapped."""
    ws = config.get_workspace_for_directory(current_dir)
    if ws is None:
        return select_or_add_workspace(config, current_dir, input_fn=input_fn, out=out)
    mapped = config.get_mapped_directory(current_dir)
    if mapped != current_dir:
        print(f"Using workspace '{ws.name}' (from {mapped})\n", file=out)
    return ws
