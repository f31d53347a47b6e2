"""Shared test fixtures and configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from wikifs.core.router import WikiFileSystem
from wikifs.core.types import Root, VirtualUri, WorkspaceFolder


@pytest.fixture
def workspace_dir(tmp_path) -> Path:
    """A workspace folder on disk (its wiki root does not exist yet)."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def wiki_root(workspace_dir) -> Path:
    """Where the wiki of ``workspace_dir`` lives."""
    return workspace_dir / ".vscode" / ".wiki"


@pytest.fixture
def workspace(workspace_dir) -> WorkspaceFolder:
    """The workspace folder offered by the host."""
    return WorkspaceFolder(name="Project", path=str(workspace_dir), index=0)


@pytest.fixture
def fs(workspace) -> WikiFileSystem:
    """A filesystem over a single workspace."""
    return WikiFileSystem([workspace])


@pytest.fixture
def root(tmp_path) -> Root:
    """A root for path resolution tests (not created on disk)."""
    real_directory = str(tmp_path / "ws" / ".wiki")
    return Root(id=real_directory, real_directory=real_directory)


@pytest.fixture
def make_uri():
    """Factory for wiki URIs addressing the default workspace."""

    def _make_uri(path: str, authority: str = "", query: str = "") -> VirtualUri:
        return VirtualUri(authority=authority, path=path, query=query)

    return _make_uri
