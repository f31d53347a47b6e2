"""Shared types and data structures for wikifs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple
from urllib.parse import parse_qsl, quote, unquote, urlsplit

from wikifs.core.config import WIKI_SCHEME


class EntryKind(IntEnum):
    """Kind of a filesystem entry.

    Values match the editor's file type flags so they can be handed over
    unchanged.
    """

    UNKNOWN = 0
    FILE = 1
    DIRECTORY = 2
    SYMBOLIC_LINK = 64


class DirectoryEntry(NamedTuple):
    """One child of a listed directory, by virtual name."""

    name: str
    kind: EntryKind


@dataclass(frozen=True)
class FileStat:
    """Metadata of an entry. Times are UTC epoch seconds."""

    ctime: int
    mtime: int
    size: int
    kind: EntryKind


@dataclass(frozen=True)
class DeleteOptions:
    """Options for ``delete()``."""

    recursive: bool = False


@dataclass(frozen=True)
class RenameOptions:
    """Options for ``rename()``."""

    overwrite: bool = False


@dataclass(frozen=True)
class WriteFileOptions:
    """Options for ``write_file()``."""

    create: bool = True
    overwrite: bool = True


@dataclass(frozen=True)
class VirtualUri:
    """A parsed ``scheme://authority/path?query`` address.

    ``authority`` names a workspace folder, ``path`` is always absolute and
    extension-less, ``query`` is kept raw; use ``params`` for its values.
    """

    scheme: str = WIKI_SCHEME
    authority: str = ""
    path: str = "/"
    query: str = ""

    def __post_init__(self) -> None:
        path = self.path or "/"
        if not path.startswith("/"):
            path = "/" + path
        object.__setattr__(self, "path", path)

    @classmethod
    def parse(cls, text: str) -> VirtualUri:
        """Parse a URI string.

        A bare path (``/notes/today``) gets the default scheme and an empty
        authority.
        """
        if "://" not in text:
            path, _, query = text.partition("?")
            return cls(path=path, query=query)

        parts = urlsplit(text)
        return cls(
            scheme=parts.scheme or WIKI_SCHEME,
            authority=unquote(parts.netloc),
            path=unquote(parts.path),
            query=parts.query,
        )

    @property
    def params(self) -> dict[str, str]:
        """Query parameters with lowercased keys; the last value wins."""
        return {
            key.strip().lower(): value
            for key, value in parse_qsl(self.query, keep_blank_values=True)
        }

    def with_path(self, path: str) -> VirtualUri:
        """Return a copy addressing another path."""
        return VirtualUri(self.scheme, self.authority, path, self.query)

    def __str__(self) -> str:
        uri = f"{self.scheme}://{self.authority}{quote(self.path)}"
        if self.query:
            uri += f"?{self.query}"
        return uri


@dataclass(frozen=True)
class WorkspaceFolder:
    """A workspace folder offered by the host.

    ``index`` is the folder's position in the host's list and doubles as its
    selection priority: lower wins.
    """

    name: str
    path: str
    index: int = 0
    scheme: str = "file"


@dataclass(frozen=True)
class Root:
    """Real directory backing one workspace's wiki."""

    id: str
    real_directory: str


@dataclass(frozen=True)
class ResolvedPath:
    """A virtual path mapped onto a root; always inside ``root``."""

    real_path: str
    root: Root = field(repr=False)

    @property
    def is_root(self) -> bool:
        return self.real_path == self.root.real_directory


__all__ = [
    "DeleteOptions",
    "DirectoryEntry",
    "EntryKind",
    "FileStat",
    "RenameOptions",
    "ResolvedPath",
    "Root",
    "VirtualUri",
    "WorkspaceFolder",
    "WriteFileOptions",
]
