"""Interface every wiki source implements."""

from __future__ import annotations

from typing import Protocol

from wikifs.core.types import (
    DeleteOptions,
    DirectoryEntry,
    FileStat,
    RenameOptions,
    VirtualUri,
    WriteFileOptions,
)


class WikiSource(Protocol):
    """The seven filesystem verbs, plus release of the source."""

    async def create_directory(self, uri: VirtualUri) -> None:
        ...

    async def delete(self, uri: VirtualUri, options: DeleteOptions) -> None:
        ...

    async def read_directory(self, uri: VirtualUri) -> list[DirectoryEntry]:
        ...

    async def read_file(self, uri: VirtualUri) -> bytes:
        ...

    async def rename(
        self, old_uri: VirtualUri, new_uri: VirtualUri, options: RenameOptions
    ) -> None:
        ...

    async def stat(self, uri: VirtualUri) -> FileStat:
        ...

    async def write_file(
        self, uri: VirtualUri, content: bytes, options: WriteFileOptions
    ) -> None:
        ...

    def dispose(self) -> None:
        ...
