"""wikifs core library - path mapping, root selection and routing."""

from typing import TYPE_CHECKING

from wikifs.core.errors import WikiFsError
from wikifs.core.types import (
    DirectoryEntry,
    EntryKind,
    FileStat,
    VirtualUri,
    WorkspaceFolder,
)

if TYPE_CHECKING:
    from wikifs.core.router import WikiFileSystem
    from wikifs.core.workspaces import WorkspacesFile

__all__ = [
    # Filesystem
    "WikiFileSystem",
    "WorkspacesFile",
    # Types
    "DirectoryEntry",
    "EntryKind",
    "FileStat",
    "VirtualUri",
    "WorkspaceFolder",
    # Errors
    "WikiFsError",
]


def __getattr__(name: str):
    if name == "WikiFileSystem":
        from wikifs.core.router import WikiFileSystem

        return WikiFileSystem
    if name == "WorkspacesFile":
        from wikifs.core.workspaces import WorkspacesFile

        return WorkspacesFile
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
