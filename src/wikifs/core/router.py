"""Entry point for hosts: routes filesystem calls to the right wiki source.

The ``source`` query parameter of a URI picks the kind of store backing
it. A store is opened for exactly one call and disposed afterwards, on
every exit path.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator, Callable, Sequence
from enum import StrEnum
from typing import Any

from wikifs.core.config import WIKI_ROOT_SUBDIR
from wikifs.core.errors import UnsupportedSourceError
from wikifs.core.queue import QueueRegistry
from wikifs.core.types import (
    DeleteOptions,
    DirectoryEntry,
    FileStat,
    RenameOptions,
    VirtualUri,
    WorkspaceFolder,
    WriteFileOptions,
)
from wikifs.sources.base import WikiSource
from wikifs.sources.workspace import WorkspaceWikiSource

logger = logging.getLogger(__name__)

Workspaces = Sequence[WorkspaceFolder] | Callable[[], Sequence[WorkspaceFolder]]


class SourceKind(StrEnum):
    """Kinds of store a URI can be backed by."""

    WORKSPACE = "workspace"


# Normalized ``source`` values and the store kind they select
SOURCE_ALIASES: dict[str, SourceKind] = {
    "": SourceKind.WORKSPACE,
    "p": SourceKind.WORKSPACE,
    "project": SourceKind.WORKSPACE,
    "workspace": SourceKind.WORKSPACE,
    "ws": SourceKind.WORKSPACE,
}

VERBS = (
    "create_directory",
    "delete",
    "read_directory",
    "read_file",
    "rename",
    "stat",
    "write_file",
)


def source_kind_of(uri: VirtualUri) -> SourceKind:
    """Get the store kind selected by a URI.

    Raises:
        UnsupportedSourceError: If ``source`` names no known kind.
    """
    source = (uri.params.get("source") or "").strip().lower()
    kind = SOURCE_ALIASES.get(source)
    if kind is None:
        raise UnsupportedSourceError(f"Wiki source not supported: {source}", uri=uri)
    return kind


def try_dispose(source: WikiSource) -> None:
    """Dispose a source, logging instead of raising on failure."""
    try:
        source.dispose()
    except Exception as e:
        logger.warning(f"Failed to dispose {source!r}: {e}")


class Watch:
    """Handle returned by ``watch()``. No change events are ever reported."""

    def close(self) -> None:
        pass


class WikiFileSystem:
    """Virtual filesystem over the wiki sources.

    Example:
        fs = WikiFileSystem([WorkspaceFolder("notes", "/home/me/notes")])
        await fs.write_file(VirtualUri.parse("wiki://notes/todo"), b"# Todo")
        entries = await fs.read_directory(VirtualUri.parse("wiki://notes/"))
    """

    def __init__(
        self,
        workspaces: Workspaces,
        root_subdir: str = WIKI_ROOT_SUBDIR,
        registry: QueueRegistry | None = None,
    ):
        """
        Initialize the filesystem.

        Args:
            workspaces: Workspace folders, or a callable returning the
                current ones (evaluated for every call)
            root_subdir: Wiki root relative to each workspace folder
            registry: Operation queues to share (defaults to a new registry)
        """
        self._workspaces = workspaces
        self.root_subdir = root_subdir
        self.registry = registry if registry is not None else QueueRegistry()

    def workspaces(self) -> list[WorkspaceFolder]:
        """Get the workspace folders currently offered."""
        if callable(self._workspaces):
            return list(self._workspaces())
        return list(self._workspaces)

    def _create_source(self, uri: VirtualUri) -> WikiSource:
        kind = source_kind_of(uri)
        match kind:
            case SourceKind.WORKSPACE:
                return WorkspaceWikiSource(
                    uri, self.workspaces(), self.registry, self.root_subdir
                )
        raise UnsupportedSourceError(f"Wiki source not supported: {kind}", uri=uri)

    @contextlib.asynccontextmanager
    async def open_source(self, uri: VirtualUri) -> AsyncIterator[WikiSource]:
        """Open the source backing ``uri`` for the duration of the block."""
        source = self._create_source(uri)
        try:
            yield source
        finally:
            try_dispose(source)

    async def dispatch(self, uri: VirtualUri, verb: str, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke a filesystem verb on the source backing ``uri``.

        Args:
            uri: URI selecting the source (for ``rename``, the old URI)
            verb: One of ``VERBS``
            *args: Verb arguments following the URI
            **kwargs: Verb keyword arguments

        Returns:
            The verb's result
        """
        if verb not in VERBS:
            raise ValueError(f"Unknown filesystem verb: {verb}")

        logger.debug(f"{verb} {uri}")
        async with self.open_source(uri) as source:
            return await getattr(source, verb)(uri, *args, **kwargs)

    async def create_directory(self, uri: VirtualUri) -> None:
        await self.dispatch(uri, "create_directory")

    async def delete(self, uri: VirtualUri, recursive: bool = False) -> None:
        await self.dispatch(uri, "delete", DeleteOptions(recursive=recursive))

    async def read_directory(self, uri: VirtualUri) -> list[DirectoryEntry]:
        return await self.dispatch(uri, "read_directory")

    async def read_file(self, uri: VirtualUri) -> bytes:
        return await self.dispatch(uri, "read_file")

    async def rename(
        self, old_uri: VirtualUri, new_uri: VirtualUri, overwrite: bool = False
    ) -> None:
        await self.dispatch(old_uri, "rename", new_uri, RenameOptions(overwrite=overwrite))

    async def stat(self, uri: VirtualUri) -> FileStat:
        return await self.dispatch(uri, "stat")

    async def write_file(
        self,
        uri: VirtualUri,
        content: bytes,
        create: bool = True,
        overwrite: bool = True,
    ) -> None:
        await self.dispatch(
            uri,
            "write_file",
            content,
            WriteFileOptions(create=create, overwrite=overwrite),
        )

    def watch(
        self,
        uri: VirtualUri,
        recursive: bool = False,
        excludes: Sequence[str] = (),
    ) -> Watch:
        """Subscribe to changes below ``uri``. Never reports anything."""
        return Watch()
