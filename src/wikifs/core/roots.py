"""Workspace selection and wiki root provisioning."""

import logging
import os
from collections.abc import Iterable

from wikifs.core.config import WIKI_ROOT_SUBDIR
from wikifs.core.errors import (
    NoRootAvailableError,
    RootNotADirectoryError,
    RootNotFoundError,
)
from wikifs.core.types import Root, VirtualUri, WorkspaceFolder

logger = logging.getLogger(__name__)

LOCAL_SCHEMES = ("", "file")


def normalize_name(value: str | None) -> str:
    """Normalize a name for case-insensitive comparison."""
    return (value or "").strip().lower()


def local_workspaces(folders: Iterable[WorkspaceFolder]) -> list[WorkspaceFolder]:
    """Return the folders living on the local disk, in selection order."""
    local = [f for f in folders if normalize_name(f.scheme) in LOCAL_SCHEMES]
    return sorted(local, key=lambda f: (f.index, normalize_name(f.name)))


def select_workspace(
    authority: str,
    folders: Iterable[WorkspaceFolder],
    uri: VirtualUri | None = None,
) -> WorkspaceFolder:
    """Pick the workspace folder a URI authority refers to.

    An empty authority selects the first folder by ``index`` (then name).
    Otherwise the authority must match exactly one folder name,
    case-insensitively.

    Raises:
        NoRootAvailableError: No local workspace folder is available.
        RootNotFoundError: No folder, or more than one, matches the authority.
    """
    candidates = local_workspaces(folders)
    if not candidates:
        raise NoRootAvailableError("No local workspace folder available", uri=uri)

    wanted = normalize_name(authority)
    if not wanted:
        return candidates[0]

    matches = [f for f in candidates if normalize_name(f.name) == wanted]
    if len(matches) > 1:
        logger.warning(
            f"Workspace name {authority!r} is ambiguous: "
            f"{[f.path for f in matches]}"
        )
        raise RootNotFoundError(f"Ambiguous workspace: {authority}", uri=uri)
    if not matches:
        raise RootNotFoundError(f"No matching workspace found: {authority}", uri=uri)
    return matches[0]


def wiki_root_for(folder: WorkspaceFolder, subdir: str = WIKI_ROOT_SUBDIR) -> Root:
    """Derive the wiki root of a workspace folder."""
    real_directory = os.path.abspath(os.path.join(folder.path, subdir))
    return Root(id=real_directory, real_directory=real_directory)


def ensure_root_directory(root: Root) -> None:
    """Create the root directory if missing.

    Raises:
        RootNotADirectoryError: If the root exists but is not a directory.
    """
    if not os.path.exists(root.real_directory):
        logger.debug(f"Creating wiki root {root.real_directory}")
        os.makedirs(root.real_directory, exist_ok=True)
    elif not os.path.isdir(root.real_directory):
        raise RootNotADirectoryError(f"'{root.real_directory}' is no directory")
