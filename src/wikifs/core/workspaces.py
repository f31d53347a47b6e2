"""Workspaces file - the list of workspace folders wikis live in.

Hosts that are not an editor (the CLI, scripts) describe their workspace
folders in a YAML file:

    root_subdir: .vscode/.wiki
    workspaces:
      - name: notes
        path: ./notes
      - name: work
        path: ~/work

Relative paths are resolved against the directory of the file. The order
of the list is the selection priority of the folders.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wikifs.core.config import WIKI_ROOT_SUBDIR
from wikifs.core.types import WorkspaceFolder

logger = logging.getLogger(__name__)


class WorkspaceEntry(BaseModel):
    """One workspace folder as written in the file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    path: str
    scheme: str = "file"


class WorkspacesConfig(BaseModel):
    """Typed content of the workspaces file.

    Frozen to prevent accidental mutation.
    Extra fields are forbidden to catch typos in config.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    root_subdir: str = WIKI_ROOT_SUBDIR
    workspaces: list[WorkspaceEntry] = Field(default_factory=list)


class WorkspaceConfigError(Exception):
    """Raised when the workspaces file is invalid."""

    pass


def _resolve_path(path_str: str, base: Path) -> str:
    """Resolve a relative path against ``base``.

    Handles ~ expansion and absolute path preservation.
    """
    p = Path(path_str).expanduser()
    if p.is_absolute():
        return str(p)
    return str((base / p).resolve())


class WorkspacesFile:
    """Loads the workspaces file and provides workspace folders.

    Example:
        config = WorkspacesFile("wikifs.yaml")
        fs = WikiFileSystem(config.folders, root_subdir=config.load().root_subdir)
    """

    # Empty config singleton (frozen, so safe to share)
    _EMPTY_CONFIG = WorkspacesConfig()

    def __init__(self, path: Path | str):
        """Initialize with the path of the YAML file.

        Args:
            path: Path to the workspaces file (e.g., ./wikifs.yaml)
        """
        self.path = Path(path).expanduser().resolve()
        self._config: WorkspacesConfig | None = None

    def load(self) -> WorkspacesConfig:
        """Load the file.

        Returns:
            WorkspacesConfig. Empty config if the file does not exist.

        Raises:
            WorkspaceConfigError: If the file is not valid YAML or does not
                describe a workspace list.
        """
        if self._config is not None:
            return self._config

        if not self.path.exists():
            logger.debug(f"No workspaces file at {self.path}")
            self._config = self._EMPTY_CONFIG
            return self._config

        logger.debug(f"Loading workspaces from {self.path}")

        try:
            with open(self.path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in {self.path}: {e}")
            raise WorkspaceConfigError(f"Invalid YAML in {self.path}: {e}") from e

        if raw is None:
            self._config = self._EMPTY_CONFIG
            return self._config

        if not isinstance(raw, dict):
            raise WorkspaceConfigError(
                f"{self.path.name} must be a mapping, got {type(raw).__name__}"
            )

        try:
            self._config = WorkspacesConfig.model_validate(raw)
        except ValidationError as e:
            raise WorkspaceConfigError(f"Invalid workspaces file {self.path}: {e}") from e

        logger.debug(
            f"Workspaces loaded: {[w.name for w in self._config.workspaces]}"
        )
        return self._config

    def reload(self) -> WorkspacesConfig:
        """Force reload from disk."""
        self._config = None
        return self.load()

    def folders(self) -> list[WorkspaceFolder]:
        """Get the workspace folders, in file order."""
        base = self.path.parent
        return [
            WorkspaceFolder(
                name=entry.name,
                path=_resolve_path(entry.path, base),
                index=index,
                scheme=entry.scheme,
            )
            for index, entry in enumerate(self.load().workspaces)
        ]

    @property
    def exists(self) -> bool:
        """Check if the workspaces file exists."""
        return self.path.exists()

    def __repr__(self) -> str:
        return f"WorkspacesFile({self.path})"
