# SPDX-License-Identifier: MIT
"""Git helpers: current branch lookup and issue branch checkout."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

CHECKOUT_EXISTING = "existing"
CHECKOUT_REMOTE = "remote"
CHECKOUT_CREATED = "created"


class GitError(Exception):
    """Raised when a git command fails."""

    pass


def _run_git(args: List[str], cwd: Optional[Path] = None) -> str:
    """Run git; return stdout or raise GitError on non-zero exit."""
    cmd = ["git"] + args
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=60)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        logger.warning("git %s failed: %s", args, err)
        raise GitError(f"git {' '.join(args)}: {err}") from e
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise GitError(f"git {' '.join(args)}: {e}") from e
    return result.stdout


def _ref_exists(ref: str, cwd: Optional[Path] = None) -> bool:
    """True when the fully qualified ref (refs/heads/..., refs/remotes/...) exists."""
    try:
        _run_git(["show-ref", "--verify", "--quiet", ref], cwd=cwd)
    except GitError:
        return False
    return True


def get_current_branch(cwd: Optional[Path] = None) -> str:
    """Current branch name, or "" outside a git repository."""
    try:
        return _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd).strip()
    except GitError:
        return ""


def checkout_branch(branch_name: str, cwd: Optional[Path] = None) -> str:
    """Check out branch_name, creating or tracking it as needed.

    An existing local branch is checked out as is; otherwise a branch on
    ``origin`` is checked out with tracking; otherwise a new local branch
    is created from HEAD.

    Returns:
        One of CHECKOUT_EXISTING, CHECKOUT_REMOTE, CHECKOUT_CREATED.

    Raises:
        GitError: If the checkout fails.
    """
    if _ref_exists(f"refs/heads/{branch_name}", cwd=cwd):
        _run_git(["checkout", branch_name], cwd=cwd)
        return CHECKOUT_EXISTING

    remote_ref = f"origin/{branch_name}"
    if _ref_exists(f"refs/remotes/{remote_ref}", cwd=cwd):
        _run_git(["checkout", "-b", branch_name, "--track", remote_ref], cwd=cwd)
        return CHECKOUT_REMOTE

    _run_git(["checkout", "-b", branch_name], cwd=cwd)
    return CHECKOUT_CREATED
