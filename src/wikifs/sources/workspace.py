"""Wiki source backed by a hidden directory inside a workspace folder.

Each workspace folder gets its own wiki root (``<folder>/.vscode/.wiki`` by
default), created on first access. Documents are stored as ``.md`` files;
virtual paths never show the suffix.
"""

import asyncio
import contextlib
import logging
import os
import shutil
import stat as stat_module
import uuid
from collections.abc import Callable, Sequence
from typing import TypeVar

from wikifs.core.config import WIKI_ROOT_SUBDIR
from wikifs.core.errors import (
    EntryExists,
    EntryIsADirectory,
    EntryNotADirectory,
    EntryNotFound,
    NoPermissions,
    StoreDisposedError,
)
from wikifs.core.paths import (
    is_contained,
    is_document_name,
    join_virtual_path,
    resolve_path,
    to_real_file_name,
    to_virtual_name,
)
from wikifs.core.queue import QueueRegistry
from wikifs.core.roots import ensure_root_directory, select_workspace, wiki_root_for
from wikifs.core.types import (
    DeleteOptions,
    DirectoryEntry,
    EntryKind,
    FileStat,
    RenameOptions,
    Root,
    VirtualUri,
    WorkspaceFolder,
    WriteFileOptions,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ROOT_STAT = FileStat(ctime=0, mtime=0, size=0, kind=EntryKind.DIRECTORY)


def _kind_of(mode: int) -> EntryKind:
    if stat_module.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat_module.S_ISREG(mode):
        return EntryKind.FILE
    if stat_module.S_ISLNK(mode):
        return EntryKind.SYMBOLIC_LINK
    return EntryKind.UNKNOWN


def _sort_key(entry: DirectoryEntry) -> tuple[int, str]:
    return (
        0 if entry.kind == EntryKind.DIRECTORY else 1,
        entry.name.strip().lower(),
    )


def _addressed_entry(real_path: str) -> tuple[str, bool] | None:
    """Find what a virtual path points at on disk.

    Returns ``(path, is_document)``: a directory at ``real_path`` wins over
    a ``.md`` document next to it. ``None`` if neither exists.
    """
    if os.path.isdir(real_path):
        return real_path, False
    document = to_real_file_name(real_path)
    if os.path.lexists(document):
        return document, True
    return None


class WorkspaceWikiSource:
    """Wiki stored inside a local workspace folder."""

    def __init__(
        self,
        uri: VirtualUri,
        workspaces: Sequence[WorkspaceFolder],
        registry: QueueRegistry,
        root_subdir: str = WIKI_ROOT_SUBDIR,
    ):
        """
        Initialize the source.

        Args:
            uri: URI the source was opened for; its authority picks the folder
            workspaces: Workspace folders currently offered by the host
            registry: Queues shared by all sources of the same filesystem
            root_subdir: Wiki root relative to the workspace folder
        """
        self.uri = uri
        self.workspaces = list(workspaces)
        self.registry = registry
        self.root_subdir = root_subdir
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Release the source. Further calls fail."""
        self._disposed = True

    def root(self) -> Root:
        """Select the wiki root this source works on."""
        folder = select_workspace(self.uri.authority, self.workspaces, self.uri)
        return wiki_root_for(folder, self.root_subdir)

    async def _with_workspace(
        self, uri: VirtualUri, action: Callable[[str, Root], T]
    ) -> T:
        """Run ``action(real_path, root)`` on the root's queue.

        The root directory is provisioned and the path resolved inside the
        queued job, so they are ordered with all other operations on it.
        """
        if self._disposed:
            raise StoreDisposedError("Wiki source already disposed", uri=uri)

        root = self.root()

        def _job() -> T:
            ensure_root_directory(root)
            resolved = resolve_path(root, uri.path, uri)
            return action(resolved.real_path, root)

        async def _run() -> T:
            return await asyncio.to_thread(_job)

        return await self.registry.get(root.id).run(_run)

    async def create_directory(self, uri: VirtualUri) -> None:
        def _create(path: str, root: Root) -> None:
            if os.path.lexists(path):
                raise EntryExists(uri=uri)
            logger.debug(f"Creating directory {path}")
            os.makedirs(path)

        await self._with_workspace(uri, _create)

    async def delete(
        self, uri: VirtualUri, options: DeleteOptions = DeleteOptions()
    ) -> None:
        def _delete(path: str, root: Root) -> None:
            if path == root.real_directory:
                raise NoPermissions("Cannot delete the wiki root", uri=uri)

            addressed = _addressed_entry(path)
            if addressed is None:
                raise EntryNotFound(uri=uri)

            target, _ = addressed
            if os.path.isdir(target) and not os.path.islink(target):
                if not options.recursive and os.listdir(target):
                    raise NoPermissions(
                        f"Directory not empty: {uri.path}", uri=uri
                    )
                logger.debug(f"Removing directory tree {target}")
                shutil.rmtree(target)
            else:
                logger.debug(f"Removing {target}")
                os.remove(target)

        await self._with_workspace(uri, _delete)

    async def read_directory(self, uri: VirtualUri) -> list[DirectoryEntry]:
        def _read_directory(path: str, root: Root) -> list[DirectoryEntry]:
            if not os.path.isdir(path):
                if os.path.lexists(path):
                    raise EntryNotADirectory(uri=uri)
                raise EntryNotFound(uri=uri)

            entries: list[DirectoryEntry] = []
            with os.scandir(path) as it:
                for item in it:
                    kind = _kind_of(item.stat(follow_symlinks=False).st_mode)
                    name = item.name
                    if kind == EntryKind.FILE:
                        if not is_document_name(name):
                            continue
                        name = to_virtual_name(name)
                    entries.append(DirectoryEntry(name, kind))

            return sorted(entries, key=_sort_key)

        return await self._with_workspace(uri, _read_directory)

    async def read_file(self, uri: VirtualUri) -> bytes:
        def _read_file(path: str, root: Root) -> bytes:
            if path == root.real_directory:
                raise EntryIsADirectory(uri=uri)

            file = to_real_file_name(path)
            if not os.path.exists(file):
                raise EntryNotFound(uri=uri)
            if not os.path.isfile(file):
                raise EntryIsADirectory(uri=uri)

            with open(file, "rb") as f:
                return f.read()

        return await self._with_workspace(uri, _read_file)

    async def rename(
        self,
        old_uri: VirtualUri,
        new_uri: VirtualUri,
        options: RenameOptions = RenameOptions(),
    ) -> None:
        # options.overwrite is not checked here; os.rename decides.
        def _rename(path: str, root: Root) -> None:
            if path == root.real_directory:
                raise NoPermissions("Cannot rename the wiki root", uri=old_uri)

            addressed = _addressed_entry(path)
            if addressed is None:
                raise EntryNotFound(uri=old_uri)

            source, is_document = addressed
            destination = join_virtual_path(root.real_directory, new_uri.path)
            if is_document:
                destination = to_real_file_name(destination)

            if not is_contained(destination, root.real_directory):
                raise EntryNotFound(uri=new_uri)

            logger.debug(f"Renaming {source} -> {destination}")
            os.rename(source, destination)

        await self._with_workspace(old_uri, _rename)

    async def stat(self, uri: VirtualUri) -> FileStat:
        def _stat(path: str, root: Root) -> FileStat:
            if path == root.real_directory:
                return ROOT_STAT

            addressed = _addressed_entry(path)
            if addressed is None:
                raise EntryNotFound(uri=uri)

            st = os.lstat(addressed[0])
            kind = _kind_of(st.st_mode)
            size = st.st_size if kind in (EntryKind.FILE, EntryKind.SYMBOLIC_LINK) else 0
            return FileStat(
                ctime=int(st.st_ctime),
                mtime=int(st.st_mtime),
                size=size,
                kind=kind,
            )

        return await self._with_workspace(uri, _stat)

    async def write_file(
        self,
        uri: VirtualUri,
        content: bytes,
        options: WriteFileOptions = WriteFileOptions(),
    ) -> None:
        def _write_file(path: str, root: Root) -> None:
            if path == root.real_directory:
                raise EntryIsADirectory(uri=uri)

            file = to_real_file_name(path)
            if os.path.isdir(file):
                raise EntryIsADirectory(uri=uri)
            if os.path.lexists(file):
                if not options.overwrite:
                    raise EntryExists(uri=uri)
            elif not options.create:
                raise EntryNotFound(uri=uri)

            os.makedirs(os.path.dirname(file), exist_ok=True)

            # Write next to the target, then swap it in
            tmp = f"{file}.{uuid.uuid4().hex}.tmp"
            try:
                with open(tmp, "xb") as f:
                    f.write(content)
                os.replace(tmp, file)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.remove(tmp)
                raise
            logger.debug(f"Wrote {len(content)} bytes to {file}")

        await self._with_workspace(uri, _write_file)

    def __repr__(self) -> str:
        return f"WorkspaceWikiSource({self.uri})"
