"""Typed errors raised by the wiki filesystem.

Every failure surfaced to a host carries a stable ``code`` naming its kind,
so callers can branch on it without matching message text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wikifs.core.types import VirtualUri


class WikiFsError(Exception):
    """Base class for all wiki filesystem errors."""

    code = "Unknown"

    def __init__(self, message: str = "", uri: VirtualUri | None = None):
        self.uri = uri
        if not message:
            message = self.code if uri is None else f"{self.code}: {uri}"
        super().__init__(message)


class EntryNotFound(WikiFsError):
    """No backing entry exists for the addressed path."""

    code = "NotFound"


class EntryExists(WikiFsError):
    """A create or write conflicts with an existing entry."""

    code = "AlreadyExists"


class EntryNotADirectory(WikiFsError):
    """A directory was expected but something else was found."""

    code = "NotADirectory"


class EntryIsADirectory(WikiFsError):
    """A file was expected but a directory was found."""

    code = "IsADirectory"


class NoPermissions(WikiFsError):
    """Refused, e.g. deleting a non-empty directory without ``recursive``."""

    code = "PermissionDenied"


class PathEscapeError(WikiFsError):
    """A virtual path resolved outside of its root directory."""

    code = "PathEscape"


class RootNotFoundError(WikiFsError):
    """No workspace folder matches the URI authority."""

    code = "RootNotFound"


class NoRootAvailableError(WikiFsError):
    """The host has no local workspace folder open."""

    code = "NoRootAvailable"


class RootNotADirectoryError(WikiFsError):
    """The wiki root exists on disk but is not a directory."""

    code = "RootNotADirectory"


class UnsupportedSourceError(WikiFsError):
    """The ``source`` query parameter names no known store kind."""

    code = "UnsupportedSource"


class StoreDisposedError(WikiFsError):
    """A store was used after it had been disposed."""

    code = "StoreDisposed"


__all__ = [
    "EntryExists",
    "EntryIsADirectory",
    "EntryNotADirectory",
    "EntryNotFound",
    "NoPermissions",
    "NoRootAvailableError",
    "PathEscapeError",
    "RootNotADirectoryError",
    "RootNotFoundError",
    "StoreDisposedError",
    "UnsupportedSourceError",
    "WikiFsError",
]
