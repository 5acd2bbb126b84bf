# SPDX-License-Identifier: MIT
"""Configuration file for linc.

Holds the known Linear workspaces, the directory -> workspace mapping and the
selected agent provider. The file is JSON and is rewritten whole on every
change via a temporary file and an atomic rename.
"""
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from linc.paths import PathResolver

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "claude"


class ConfigError(Exception):
    """Raised when the config file cannot be read or written."""

    pass


@dataclass
class Workspace:
    """A Linear workspace and the API key used to access it."""
    id: str
    name: str
    api_key: str
    default_team_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Workspace":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            api_key=data.get("apiKey", ""),
            default_team_id=data.get("defaultTeamId", "") or "",
        )

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name, "apiKey": self.api_key}
        if self.default_team_id:
            data["defaultTeamId"] = self.default_team_id
        return data


@dataclass
class Config:
    """In-memory view of config.json."""
    workspaces: List[Workspace] = field(default_factory=list)
    directories: Dict[str, str] = field(default_factory=dict)  # abs path -> workspace id
    provider: str = ""
    path: Optional[Path] = field(default=None, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load config from disk; a missing file yields an empty config.

        Raises:
            ConfigError: If the file exists but cannot be read or parsed.
        """
        path = path or PathResolver.config_path()
        if not path.exists():
            return cls(path=path)

        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"cannot read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"cannot read {path}: expected a JSON object")

        return cls(
            workspaces=[Workspace.from_dict(w) for w in data.get("workspaces") or []],
            directories=dict(data.get("directories") or {}),
            provider=data.get("provider", "") or "",
            path=path,
        )

    def to_dict(self) -> dict:
        data: dict = {}
        if self.workspaces:
            data["workspaces"] = [w.to_dict() for w in self.workspaces]
        if self.directories:
            data["directories"] = dict(self.directories)
        if self.provider:
            data["provider"] = self.provider
        return data

    def save(self) -> None:
        """Write the whole file atomically (temp file + rename, mode 0600).

        Raises:
            ConfigError: If the directory or file cannot be written.
        """
        path = self.path or PathResolver.config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".json")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(self.to_dict(), f, indent=2)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise ConfigError(f"cannot write {path}: {e}") from e
        logger.debug("saved config to %s", path)

    # -------------------------------------------------------------------------
    # Workspaces and directory mapping
    # -------------------------------------------------------------------------

    def has_workspaces(self) -> bool:
        return bool(self.workspaces)

    def get_workspace_by_id(self, workspace_id: str) -> Optional[Workspace]:
        for ws in self.workspaces:
            if ws.id == workspace_id:
                return ws
        return None

    def get_mapped_directory(self, directory: str) -> str:
        """Nearest directory (itself or an ancestor) with a workspace mapping, or "".

        The longest mapped prefix wins, so a nested project can map to a
        different workspace than its parent.
        """
        candidates = [d for d in self.directories if is_subdirectory(d, directory)]
        return max(candidates, key=lambda d: len(os.path.abspath(d)), default="")

    def get_workspace_for_directory(self, directory: str) -> Optional[Workspace]:
        """Workspace mapped to directory, walking up through its parents."""
        mapped = self.get_mapped_directory(directory)
        if not mapped:
            return None
        return self.get_workspace_by_id(self.directories[mapped])

    def add_workspace(self, workspace: Workspace) -> None:
        """Add a workspace, replacing one with the same id, and save."""
        for i, existing in enumerate(self.workspaces):
            if existing.id == workspace.id:
                self.workspaces[i] = workspace
                break
        else:
            self.workspaces.append(workspace)
        self.save()

    def set_directory_workspace(self, directory: str, workspace_id: str) -> None:
        self.directories[os.path.abspath(directory)] = workspace_id
        self.save()

    def set_default_team(self, workspace_id: str, team_id: str) -> None:
        ws = self.get_workspace_by_id(workspace_id)
        if ws is None:
            return
        ws.default_team_id = team_id
        self.save()

    # -------------------------------------------------------------------------
    # Provider
    # -------------------------------------------------------------------------

    def get_provider(self) -> str:
        return self.provider or DEFAULT_PROVIDER

    def set_provider(self, provider: str) -> None:
        self.provider = provider
        self.save()


def is_subdirectory(parent: str, child: str) -> bool:
    """True when child is parent or lies below it."""
    parent = os.path.abspath(parent)
    child = os.path.abspath(child)
    if parent == child:
        return True
    return child.startswith(parent.rstrip(os.sep) + os.sep)
