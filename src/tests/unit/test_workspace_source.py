"""Tests for wikifs.sources.workspace module."""

import asyncio
import os

import pytest

from wikifs.core.errors import (
    EntryExists,
    EntryIsADirectory,
    EntryNotADirectory,
    EntryNotFound,
    NoPermissions,
    PathEscapeError,
    RootNotADirectoryError,
    StoreDisposedError,
)
from wikifs.core.queue import QueueRegistry
from wikifs.core.types import EntryKind, FileStat, VirtualUri, WorkspaceFolder
from wikifs.sources.workspace import WorkspaceWikiSource


@pytest.fixture
def populated(wiki_root):
    """A wiki with documents, a directory and a stray non-document file."""
    (wiki_root / "guides").mkdir(parents=True)
    (wiki_root / "guides" / "setup.md").write_text("# Setup")
    (wiki_root / "todo.md").write_text("- [ ] write tests")
    (wiki_root / "image.png").write_bytes(b"\x89PNG")
    return wiki_root


class TestRootProvisioning:
    """The wiki root is created on first access."""

    @pytest.mark.asyncio
    async def test_first_call_creates_root(self, fs, make_uri, wiki_root):
        assert not wiki_root.exists()

        await fs.read_directory(make_uri("/"))

        assert wiki_root.is_dir()

    @pytest.mark.asyncio
    async def test_second_call_accepts_existing_root(self, fs, make_uri, wiki_root):
        await fs.stat(make_uri("/"))
        await fs.stat(make_uri("/"))

        assert wiki_root.is_dir()

    @pytest.mark.asyncio
    async def test_write_into_fresh_workspace(self, fs, make_uri, wiki_root):
        await fs.write_file(make_uri("/first"), b"hello")

        assert (wiki_root / "first.md").read_bytes() == b"hello"

    @pytest.mark.asyncio
    async def test_root_that_is_a_file_fails(self, fs, make_uri, wiki_root):
        wiki_root.parent.mkdir()
        wiki_root.write_text("oops")

        with pytest.raises(RootNotADirectoryError):
            await fs.stat(make_uri("/"))


class TestCreateDirectory:
    """Tests for create_directory()."""

    @pytest.mark.asyncio
    async def test_creates_with_parents(self, fs, make_uri, wiki_root):
        await fs.create_directory(make_uri("/a/b/c"))

        assert (wiki_root / "a" / "b" / "c").is_dir()

    @pytest.mark.asyncio
    async def test_existing_directory_fails(self, fs, make_uri, populated):
        with pytest.raises(EntryExists):
            await fs.create_directory(make_uri("/guides"))

    @pytest.mark.asyncio
    async def test_existing_file_fails(self, fs, make_uri, populated):
        with pytest.raises(EntryExists):
            await fs.create_directory(make_uri("/image.png"))

    @pytest.mark.asyncio
    async def test_root_already_exists(self, fs, make_uri):
        with pytest.raises(EntryExists):
            await fs.create_directory(make_uri("/"))

    @pytest.mark.asyncio
    async def test_escape_fails(self, fs, make_uri, workspace_dir):
        with pytest.raises(PathEscapeError):
            await fs.create_directory(make_uri("/../../outside"))

        assert not (workspace_dir / "outside").exists()


class TestDelete:
    """Tests for delete()."""

    @pytest.mark.asyncio
    async def test_deletes_document(self, fs, make_uri, populated):
        await fs.delete(make_uri("/todo"))

        assert not (populated / "todo.md").exists()

    @pytest.mark.asyncio
    async def test_deletes_empty_directory(self, fs, make_uri, wiki_root):
        (wiki_root / "empty").mkdir(parents=True)

        await fs.delete(make_uri("/empty"))

        assert not (wiki_root / "empty").exists()

    @pytest.mark.asyncio
    async def test_non_empty_directory_needs_recursive(self, fs, make_uri, populated):
        with pytest.raises(NoPermissions):
            await fs.delete(make_uri("/guides"), recursive=False)

        assert (populated / "guides" / "setup.md").exists()

    @pytest.mark.asyncio
    async def test_recursive_removes_subtree(self, fs, make_uri, populated):
        await fs.delete(make_uri("/guides"), recursive=True)

        assert not (populated / "guides").exists()

    @pytest.mark.asyncio
    async def test_missing_fails(self, fs, make_uri):
        with pytest.raises(EntryNotFound):
            await fs.delete(make_uri("/nothing"))

    @pytest.mark.asyncio
    async def test_non_document_file_is_invisible(self, fs, make_uri, populated):
        (populated / "notes").write_text("plain")

        with pytest.raises(EntryNotFound):
            await fs.delete(make_uri("/notes"))

        assert (populated / "notes").exists()

    @pytest.mark.asyncio
    async def test_root_is_never_deleted(self, fs, make_uri, populated):
        with pytest.raises(NoPermissions):
            await fs.delete(make_uri("/"), recursive=True)

        assert populated.is_dir()

    @pytest.mark.asyncio
    async def test_symlink_is_removed_not_followed(
        self, fs, make_uri, populated, tmp_path
    ):
        target = tmp_path / "elsewhere"
        target.mkdir()
        (target / "keep.md").write_text("keep")
        os.symlink(target, populated / "linked")

        await fs.delete(make_uri("/linked"), recursive=True)

        assert not os.path.lexists(populated / "linked")
        assert (target / "keep.md").exists()


class TestReadDirectory:
    """Tests for read_directory()."""

    @pytest.mark.asyncio
    async def test_lists_documents_without_suffix(self, fs, make_uri, populated):
        entries = await fs.read_directory(make_uri("/"))

        assert entries == [("guides", EntryKind.DIRECTORY), ("todo", EntryKind.FILE)]

    @pytest.mark.asyncio
    async def test_directories_first_then_case_insensitive(
        self, fs, make_uri, wiki_root
    ):
        wiki_root.mkdir(parents=True)
        (wiki_root / "b.md").write_text("b")
        (wiki_root / "A").mkdir()
        (wiki_root / "a.md").write_text("a")

        entries = await fs.read_directory(make_uri("/"))

        assert [e.name for e in entries] == ["A", "a", "b"]
        assert [e.kind for e in entries] == [
            EntryKind.DIRECTORY,
            EntryKind.FILE,
            EntryKind.FILE,
        ]

    @pytest.mark.asyncio
    async def test_directory_names_keep_suffix(self, fs, make_uri, wiki_root):
        (wiki_root / "notes.md").mkdir(parents=True)

        entries = await fs.read_directory(make_uri("/"))

        assert entries == [("notes.md", EntryKind.DIRECTORY)]

    @pytest.mark.asyncio
    async def test_symlinks_keep_literal_name(self, fs, make_uri, populated):
        os.symlink(populated / "todo.md", populated / "shortcut.md")

        entries = await fs.read_directory(make_uri("/"))

        assert ("shortcut.md", EntryKind.SYMBOLIC_LINK) in entries

    @pytest.mark.asyncio
    async def test_nested_directory(self, fs, make_uri, populated):
        entries = await fs.read_directory(make_uri("/guides"))

        assert entries == [("setup", EntryKind.FILE)]

    @pytest.mark.asyncio
    async def test_document_is_not_a_directory(self, fs, make_uri, populated):
        with pytest.raises(EntryNotFound):
            await fs.read_directory(make_uri("/todo"))

    @pytest.mark.asyncio
    async def test_file_is_not_a_directory(self, fs, make_uri, populated):
        with pytest.raises(EntryNotADirectory):
            await fs.read_directory(make_uri("/image.png"))

    @pytest.mark.asyncio
    async def test_missing_fails(self, fs, make_uri):
        with pytest.raises(EntryNotFound):
            await fs.read_directory(make_uri("/nowhere"))


class TestReadFile:
    """Tests for read_file()."""

    @pytest.mark.asyncio
    async def test_reads_document(self, fs, make_uri, populated):
        assert await fs.read_file(make_uri("/guides/setup")) == b"# Setup"

    @pytest.mark.asyncio
    async def test_missing_fails(self, fs, make_uri, populated):
        with pytest.raises(EntryNotFound):
            await fs.read_file(make_uri("/missing"))

    @pytest.mark.asyncio
    async def test_suffixed_name_is_not_doubled(self, fs, make_uri, populated):
        with pytest.raises(EntryNotFound):
            await fs.read_file(make_uri("/todo.md"))

    @pytest.mark.asyncio
    async def test_directory_with_suffix_fails(self, fs, make_uri, wiki_root):
        (wiki_root / "folder.md").mkdir(parents=True)

        with pytest.raises(EntryIsADirectory):
            await fs.read_file(make_uri("/folder"))

    @pytest.mark.asyncio
    async def test_root_is_a_directory(self, fs, make_uri, workspace_dir):
        (workspace_dir / ".vscode").mkdir()
        (workspace_dir / ".vscode" / ".wiki.md").write_text("outside")

        with pytest.raises(EntryIsADirectory):
            await fs.read_file(make_uri("/"))


class TestRename:
    """Tests for rename()."""

    @pytest.mark.asyncio
    async def test_renames_document(self, fs, make_uri, populated):
        await fs.rename(make_uri("/todo"), make_uri("/done"))

        assert not (populated / "todo.md").exists()
        assert (populated / "done.md").read_text() == "- [ ] write tests"

    @pytest.mark.asyncio
    async def test_moves_document_into_directory(self, fs, make_uri, populated):
        await fs.rename(make_uri("/todo"), make_uri("/guides/todo"))

        assert (populated / "guides" / "todo.md").exists()

    @pytest.mark.asyncio
    async def test_renames_directory_without_suffix(self, fs, make_uri, populated):
        await fs.rename(make_uri("/guides"), make_uri("/howto"))

        assert (populated / "howto" / "setup.md").exists()
        assert not (populated / "howto.md").exists()

    @pytest.mark.asyncio
    async def test_destination_authority_is_ignored(
        self, fs, make_uri, populated
    ):
        await fs.rename(make_uri("/todo"), make_uri("/moved", authority="elsewhere"))

        assert (populated / "moved.md").exists()

    @pytest.mark.asyncio
    async def test_destination_escape_is_not_found(
        self, fs, make_uri, populated, workspace_dir
    ):
        new_uri = make_uri("/../../stolen")

        with pytest.raises(EntryNotFound) as exc_info:
            await fs.rename(make_uri("/todo"), new_uri)

        assert exc_info.value.uri == new_uri
        assert (populated / "todo.md").exists()
        assert not (workspace_dir / "stolen.md").exists()

    @pytest.mark.asyncio
    async def test_source_escape_is_rejected(self, fs, make_uri, populated):
        with pytest.raises(PathEscapeError):
            await fs.rename(make_uri("/../../x"), make_uri("/y"))

    @pytest.mark.asyncio
    async def test_missing_source_fails(self, fs, make_uri, populated):
        with pytest.raises(EntryNotFound):
            await fs.rename(make_uri("/ghost"), make_uri("/spirit"))


class TestStat:
    """Tests for stat()."""

    @pytest.mark.asyncio
    async def test_root_is_synthetic_directory(self, fs, make_uri):
        assert await fs.stat(make_uri("/")) == FileStat(
            ctime=0, mtime=0, size=0, kind=EntryKind.DIRECTORY
        )

    @pytest.mark.asyncio
    async def test_document(self, fs, make_uri, populated):
        result = await fs.stat(make_uri("/todo"))
        st = os.stat(populated / "todo.md")

        assert result.kind == EntryKind.FILE
        assert result.size == len("- [ ] write tests")
        assert result.mtime == int(st.st_mtime)
        assert result.ctime == int(st.st_ctime)
        assert isinstance(result.mtime, int)

    @pytest.mark.asyncio
    async def test_directory_has_zero_size(self, fs, make_uri, populated):
        result = await fs.stat(make_uri("/guides"))

        assert result.kind == EntryKind.DIRECTORY
        assert result.size == 0

    @pytest.mark.asyncio
    async def test_directory_wins_over_document(self, fs, make_uri, populated):
        (populated / "guides.md").write_text("shadowed")

        result = await fs.stat(make_uri("/guides"))

        assert result.kind == EntryKind.DIRECTORY

    @pytest.mark.asyncio
    async def test_non_document_file_is_invisible(self, fs, make_uri, wiki_root):
        wiki_root.mkdir(parents=True)
        (wiki_root / "x").write_text("plain")

        with pytest.raises(EntryNotFound):
            await fs.stat(make_uri("/x"))
        assert await fs.read_directory(make_uri("/")) == []

    @pytest.mark.asyncio
    async def test_missing_fails(self, fs, make_uri):
        with pytest.raises(EntryNotFound):
            await fs.stat(make_uri("/missing"))

    @pytest.mark.asyncio
    async def test_symlinked_document(self, fs, make_uri, populated):
        os.symlink(populated / "todo.md", populated / "alias.md")

        result = await fs.stat(make_uri("/alias"))

        assert result.kind == EntryKind.SYMBOLIC_LINK
        assert result.size > 0


class TestWriteFile:
    """Tests for write_file()."""

    @pytest.mark.asyncio
    async def test_round_trip(self, fs, make_uri):
        content = "Ünïcødé notes\n".encode()

        await fs.write_file(make_uri("/journal"), content)

        assert await fs.read_file(make_uri("/journal")) == content
        assert await fs.read_directory(make_uri("/")) == [
            ("journal", EntryKind.FILE)
        ]

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, fs, make_uri, wiki_root):
        await fs.write_file(make_uri("/2024/01/28"), b"day")

        assert (wiki_root / "2024" / "01" / "28.md").read_bytes() == b"day"

    @pytest.mark.asyncio
    async def test_replaces_content(self, fs, make_uri, populated):
        await fs.write_file(make_uri("/todo"), b"short")

        assert (populated / "todo.md").read_bytes() == b"short"

    @pytest.mark.asyncio
    async def test_no_overwrite_fails_on_existing(self, fs, make_uri, populated):
        with pytest.raises(EntryExists):
            await fs.write_file(make_uri("/todo"), b"x", overwrite=False)

        assert (populated / "todo.md").read_text() == "- [ ] write tests"

    @pytest.mark.asyncio
    async def test_no_create_fails_on_missing(self, fs, make_uri, wiki_root):
        with pytest.raises(EntryNotFound):
            await fs.write_file(make_uri("/new"), b"x", create=False)

        assert not (wiki_root / "new.md").exists()

    @pytest.mark.asyncio
    async def test_no_create_allows_existing(self, fs, make_uri, populated):
        await fs.write_file(make_uri("/todo"), b"updated", create=False)

        assert (populated / "todo.md").read_bytes() == b"updated"

    @pytest.mark.asyncio
    async def test_directory_target_fails(self, fs, make_uri, wiki_root):
        (wiki_root / "dir.md").mkdir(parents=True)

        with pytest.raises(EntryIsADirectory):
            await fs.write_file(make_uri("/dir"), b"x")

    @pytest.mark.asyncio
    async def test_root_fails(self, fs, make_uri, workspace_dir):
        with pytest.raises(EntryIsADirectory):
            await fs.write_file(make_uri("/"), b"x")

        assert not (workspace_dir / ".vscode" / ".wiki.md").exists()

    @pytest.mark.asyncio
    async def test_leaves_no_temporary_files(self, fs, make_uri, wiki_root):
        await fs.write_file(make_uri("/a"), b"1")
        await fs.write_file(make_uri("/a"), b"2")

        assert sorted(os.listdir(wiki_root)) == ["a.md"]

    @pytest.mark.asyncio
    async def test_concurrent_writes_do_not_mix(self, fs, make_uri, wiki_root):
        first = b"a" * 1_000_000
        second = b"b" * 1_000_000

        await asyncio.gather(
            fs.write_file(make_uri("/race"), first),
            fs.write_file(make_uri("/race"), second),
        )

        content = (wiki_root / "race.md").read_bytes()
        assert content == second

    @pytest.mark.asyncio
    async def test_escape_fails(self, fs, make_uri, workspace_dir):
        with pytest.raises(PathEscapeError):
            await fs.write_file(make_uri("/../../evil"), b"x")

        assert not (workspace_dir / "evil.md").exists()


class TestSourceLifecycle:
    """Tests for using WorkspaceWikiSource directly."""

    @pytest.mark.asyncio
    async def test_disposed_source_refuses_calls(self, workspace):
        uri = VirtualUri(path="/")
        source = WorkspaceWikiSource(uri, [workspace], QueueRegistry())

        source.dispose()

        assert source.disposed
        with pytest.raises(StoreDisposedError):
            await source.stat(uri)

    @pytest.mark.asyncio
    async def test_authority_of_source_uri_selects_folder(self, tmp_path):
        folders = [
            WorkspaceFolder(name="one", path=str(tmp_path / "one"), index=0),
            WorkspaceFolder(name="two", path=str(tmp_path / "two"), index=1),
        ]
        uri = VirtualUri(authority="TWO", path="/note")
        source = WorkspaceWikiSource(uri, folders, QueueRegistry())

        await source.write_file(uri, b"2")

        assert (tmp_path / "two" / ".vscode" / ".wiki" / "note.md").exists()
        assert not (tmp_path / "one").exists()
