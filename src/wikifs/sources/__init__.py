"""Wiki sources - stores implementing the filesystem verbs."""

from wikifs.sources.base import WikiSource
from wikifs.sources.workspace import WorkspaceWikiSource

__all__ = ["WikiSource", "WorkspaceWikiSource"]
