"""Mapping between virtual paths and real paths inside a wiki root.

Virtual paths are ``/``-separated and carry no file extension. On disk, each
document is a ``.md`` file; directories keep their literal names.
"""

import logging
import os

from wikifs.core.config import WIKI_FILE_EXTENSION
from wikifs.core.errors import PathEscapeError
from wikifs.core.types import ResolvedPath, Root, VirtualUri

logger = logging.getLogger(__name__)


def to_real_file_name(virtual_name: str) -> str:
    """Append the document suffix to a virtual file name."""
    return virtual_name + WIKI_FILE_EXTENSION


def is_document_name(real_file_name: str) -> bool:
    """Check whether a real file name carries the document suffix."""
    return real_file_name.endswith(WIKI_FILE_EXTENSION)


def to_virtual_name(real_file_name: str) -> str:
    """Strip the document suffix from a real file name, if present."""
    if is_document_name(real_file_name):
        return real_file_name[: -len(WIKI_FILE_EXTENSION)]
    return real_file_name


def is_contained(real_path: str, root_directory: str) -> bool:
    """Check that ``real_path`` is ``root_directory`` or lies below it."""
    return real_path == root_directory or real_path.startswith(
        root_directory + os.sep
    )


def join_virtual_path(root_directory: str, virtual_path: str) -> str:
    """Join a virtual path onto a real directory and normalize the result.

    Leading separators are dropped so the virtual path is always taken
    relative to the directory. ``..`` segments are collapsed, which may
    take the result outside of ``root_directory``; callers must check
    containment.
    """
    segments = [s for s in virtual_path.split("/") if s]
    return os.path.normpath(os.path.join(root_directory, *segments))


def resolve_path(
    root: Root, virtual_path: str, uri: VirtualUri | None = None
) -> ResolvedPath:
    """Resolve a virtual path onto ``root``.

    Raises:
        PathEscapeError: If the normalized path leaves the root directory.
    """
    real_path = join_virtual_path(root.real_directory, virtual_path)
    if not is_contained(real_path, root.real_directory):
        logger.warning(
            f"Rejected path escape: {virtual_path!r} resolves to {real_path!r} "
            f"outside of {root.real_directory!r}"
        )
        raise PathEscapeError(
            f"Path escapes wiki root: {virtual_path}", uri=uri
        )
    return ResolvedPath(real_path=real_path, root=root)
