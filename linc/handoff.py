# SPDX-License-Identifier: MIT
"""
Agent hand-off: what happens after the TUI exits with a launch request.

Runs the preparation steps in a fixed order, printing a progress line for
each, then calls the provider. Only the provider call can fail the hand-off;
every earlier step degrades gracefully.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from linc.git import CHECKOUT_CREATED, CHECKOUT_EXISTING, GitError, checkout_branch
from linc.linear_client import LinearClient, LinearError
from linc.models import Issue, OrganizationContext
from linc.providers import Provider
from linc.tui.app_state import LaunchRequest

logger = logging.getLogger(__name__)

NO_BRANCH_MESSAGE = "No branch name available for this issue"


def _checkout(branch: str, out: TextIO, cwd: Optional[Path]) -> None:
    print(f"Checking out branch {branch}...", end=" ", file=out, flush=True)
    try:
        how = checkout_branch(branch, cwd=cwd)
    except GitError as e:
        print("failed", file=out)
        print(f"  {e}", file=out)
        return
    if how == CHECKOUT_EXISTING:
        print("done", file=out)
    elif how == CHECKOUT_CREATED:
        print("done (new branch)", file=out)
    else:
        print("done (tracking origin)", file=out)
    logger.info("checked out %s (%s)", branch, how)


def run_handoff(
    client: LinearClient,
    request: LaunchRequest,
    provider: Optional[Provider],
    out: TextIO = sys.stdout,
    cwd: Optional[Path] = None,
) -> None:
    """Prepare the issue and launch the agent.

    Args:
        client: Tracker client for the issue's workspace
        request: Launch options gathered by the session
        provider: Agent provider; unused for checkout-only requests
        out: Stream receiving progress lines
        cwd: Repository directory for git operations (default: process cwd)

    Raises:
        ProviderError: If the provider fails to launch the agent.
    """
    issue = request.issue

    if request.checkout_only:
        if issue.branch_name:
            _checkout(issue.branch_name, out, cwd)
        else:
            print(NO_BRANCH_MESSAGE, file=out)
        return

    # 1. full context
    print("Fetching issue context...", end=" ", file=out, flush=True)
    full_issue: Issue = issue
    try:
        full_issue = client.get_issue_with_context(issue.id)
        print("done", file=out)
    except LinearError as e:
        logger.warning("fetching context for %s failed: %s", issue.identifier, e)
        print("failed (using basic info)", file=out)

    # 2. organization
    print("Fetching workspace info...", end=" ", file=out, flush=True)
    context: Optional[OrganizationContext] = None
    try:
        context = client.get_workspace_info()
        print("done", file=out)
    except LinearError as e:
        logger.warning("fetching workspace info failed: %s", e)
        print("failed", file=out)

    # 3. in progress
    print("Moving issue to In Progress...", end=" ", file=out, flush=True)
    try:
        state_id = client.get_in_progress_state_id(full_issue.team.id)
        if not state_id:
            print("skipped (no in-progress state)", file=out)
        else:
            client.update_issue_state(full_issue.id, state_id)
            print("done", file=out)
    except LinearError as e:
        logger.warning("moving %s to in progress failed: %s", issue.identifier, e)
        print("failed", file=out)
        print(f"  {e}", file=out)

    # 4. comment
    if request.comment:
        if request.comment_synced:
            if request.comment_error:
                print(f"Adding comment... failed ({request.comment_error})", file=out)
        else:
            print("Adding comment...", end=" ", file=out, flush=True)
            try:
                client.create_comment(full_issue.id, request.comment)
                print("done", file=out)
            except LinearError as e:
                logger.warning("commenting on %s failed: %s", issue.identifier, e)
                print("failed", file=out)

    # 5. branch
    if request.use_branch and full_issue.branch_name:
        _checkout(full_issue.branch_name, out, cwd)

    # 6. agent
    if provider is None:
        return
    print(f"Starting {provider.name}...", file=out, flush=True)
    logger.info("launching %s for %s (plan mode %s)", provider.name, issue.identifier, request.plan_mode)
    provider.execute(full_issue, request.comment, context, request.plan_mode)
