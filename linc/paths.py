# SPDX-License-Identifier: MIT
"""Centralized path resolution for linc.

All path resolution should go through this module to ensure consistency.
"""
import os
from pathlib import Path


class PathResolver:
    """Resolves paths for linc components."""

    @staticmethod
    def config_dir() -> Path:
        """Get the directory holding config.json.

        Resolution order:
        1. LINC_CONFIG_DIR env var
        2. ~/.linc
        """
        custom = os.environ.get("LINC_CONFIG_DIR")
        if custom:
            return Path(custom)
        return Path.home() / ".linc"

    @staticmethod
    def config_path() -> Path:
        return PathResolver.config_dir() / "config.json"

    @staticmethod
    def state_dir() -> Path:
        """Get the state directory for mutable data (debug log).

        Resolution order:
        1. LINC_STATE env var
        2. XDG_STATE_HOME/linc
        3. ~/.local/state/linc
        """
        state = os.environ.get("LINC_STATE")
        if state:
            return Path(state)
        xdg_state = os.environ.get("XDG_STATE_HOME")
        if xdg_state:
            return Path(xdg_state) / "linc"
        return Path.home() / ".local" / "state" / "linc"

    @staticmethod
    def display_path(path: str) -> str:
        """Shorten a path under the home directory to ~/..."""
        home = str(Path.home())
        if home and (path == home or path.startswith(home + os.sep)):
            return "~" + path[len(home):]
        return path
