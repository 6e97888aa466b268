"""
Tests for filesystem operations.
"""

import os
from unittest.mock import patch

import pytest

from shellgate.file_ops import FileOperations
from shellgate.models import DirectoryChange, DirectoryListing


@pytest.fixture
def files():
    """Lenient file operations."""
    return FileOperations()


class TestListDirectory:
    """Test directory listing."""

    def test_lists_home(self, files, session):
        """Home contains the standard subdirectories, sorted."""
        listing = files.list_directory(session)

        assert isinstance(listing, DirectoryListing)
        assert listing.path == session.cwd
        names = [f.name for f in listing.files]
        assert names == sorted(names)
        assert {".config", "bin", "downloads", "tmp"} <= set(names)

    def test_entry_fields(self, files, session):
        """Entries carry type, size and permission flags."""
        with open(os.path.join(session.home, "note.txt"), "w") as f:
            f.write("hello")

        data = files.list_directory(session, "~").to_dict()
        entry = next(e for e in data["files"] if e["name"] == "note.txt")

        assert entry["isFile"] is True
        assert entry["isDirectory"] is False
        assert entry["size"] == 5
        assert entry["readable"] is True
        assert data["count"] == len(data["files"])

    def test_missing_directory(self, files, session):
        """A missing directory is reported in the listing."""
        listing = files.list_directory(session, "nope")
        assert listing.error.startswith("Directory not found: ")
        assert listing.files == []

    def test_not_a_directory(self, files, session):
        """Listing a file is an error."""
        open(os.path.join(session.home, "f"), "w").close()
        assert files.list_directory(session, "f").error.startswith("Not a directory: ")


class TestReadWrite:
    """Test reading and writing files."""

    def test_write_then_read(self, files, session):
        """Written content reads back with its size."""
        written = files.write_file(session, "docs/readme.txt", "line one\n")
        assert written.success
        assert written.size == len("line one\n")
        assert os.path.isfile(os.path.join(session.home, "docs", "readme.txt"))

        read = files.read_file(session, "docs/readme.txt")
        assert read.success
        assert read.content == "line one\n"

    def test_append(self, files, session):
        """append=True adds to the end of the file."""
        files.write_file(session, "log.txt", "a\n")
        files.write_file(session, "log.txt", "b\n", append=True)
        assert files.read_file(session, "log.txt").content == "a\nb\n"

    def test_overwrite(self, files, session):
        """Without append the file is replaced."""
        files.write_file(session, "x.txt", "first")
        files.write_file(session, "x.txt", "second")
        assert files.read_file(session, "x.txt").content == "second"

    def test_write_traversal_blocked(self, files, session):
        """Writes with '..' are refused before touching disk."""
        result = files.write_file(session, "../../etc/passwd", "pwned")
        assert not result.success
        assert result.error == "Invalid path: path traversal not allowed"

    def test_read_missing(self, files, session):
        """Reading a missing file fails with its resolved path."""
        result = files.read_file(session, "ghost.txt")
        assert not result.success
        assert result.error == f"File not found: {os.path.realpath(os.path.join(session.cwd, 'ghost.txt'))}"

    def test_read_size_limit(self, session):
        """Files above the limit are refused."""
        small = FileOperations(max_read_size=4)
        small.write_file(session, "big.txt", "12345")
        result = small.read_file(session, "big.txt")
        assert not result.success
        assert result.error == "File too large (max 4 bytes)"

    def test_read_size_limit_below_one_megabyte(self, session):
        """Limits smaller than a megabyte are reported exactly."""
        limited = FileOperations(max_read_size=512 * 1024)
        limited.write_file(session, "big.txt", "x" * (512 * 1024 + 1))
        result = limited.read_file(session, "big.txt")
        assert result.error == "File too large (max 524288 bytes)"

    def test_read_absolute_path(self, files, session, tmp_path):
        """Absolute paths are used as given."""
        target = tmp_path / "outside.txt"
        target.write_text("abs")
        assert files.read_file(session, str(target)).content == "abs"


class TestDeleteAndCreate:
    """Test deletion and directory creation."""

    def test_delete_file(self, files, session):
        """Files are removed."""
        files.write_file(session, "gone.txt", "x")
        assert files.delete(session, "gone.txt").success
        assert not os.path.exists(os.path.join(session.home, "gone.txt"))

    def test_delete_non_empty_directory_requires_recursive(self, files, session):
        """A populated directory needs recursive=True."""
        files.write_file(session, "dir/inner.txt", "x")

        result = files.delete(session, "dir")
        assert not result.success
        assert result.error.startswith("Failed to delete: ")

        assert files.delete(session, "dir", recursive=True).success
        assert not os.path.exists(os.path.join(session.home, "dir"))

    def test_delete_missing(self, files, session):
        """Deleting nothing is an error."""
        assert files.delete(session, "ghost").error.startswith("File not found: ")

    def test_delete_traversal_blocked(self, files, session):
        """Deletes with '..' never reach the resolver."""
        with patch('shellgate.paths.resolve_path') as mock_resolve:
            result = files.delete(session, "../../etc/passwd")
        assert not result.success
        mock_resolve.assert_not_called()

    def test_create_directory(self, files, session):
        """Nested directories are created by default."""
        result = files.create_directory(session, "a/b/c")
        assert result.success
        assert os.path.isdir(os.path.join(session.home, "a", "b", "c"))

    def test_create_directory_non_recursive(self, files, session):
        """Without recursive the parent must exist."""
        result = files.create_directory(session, "x/y", recursive=False)
        assert not result.success

    def test_create_existing_directory(self, files, session):
        """Creating an existing directory succeeds."""
        assert files.create_directory(session, "bin").success
        assert files.create_directory(session, "bin", recursive=False).success


class TestCopyMove:
    """Test copying and moving."""

    def test_copy(self, files, session):
        """Copies keep the source and create destination parents."""
        files.write_file(session, "src.txt", "data")
        result = files.copy_file(session, "src.txt", "backup/dst.txt")

        assert result.success
        assert result.to_dict()["destination"].endswith("backup/dst.txt")
        assert files.read_file(session, "backup/dst.txt").content == "data"
        assert files.read_file(session, "src.txt").success

    def test_move(self, files, session):
        """Moves remove the source."""
        files.write_file(session, "old.txt", "data")
        assert files.move_file(session, "old.txt", "new.txt").success
        assert not os.path.exists(os.path.join(session.home, "old.txt"))
        assert files.read_file(session, "new.txt").content == "data"

    def test_missing_source(self, files, session):
        """A missing source is reported."""
        result = files.copy_file(session, "ghost", "dst")
        assert result.error.startswith("Source file not found: ")

    @pytest.mark.parametrize("source,destination", [
        ("../secret", "copy.txt"),
        ("src.txt", "../../tmp/out"),
    ])
    def test_traversal_in_either_path(self, files, session, source, destination):
        """Both source and destination are traversal-checked."""
        files.write_file(session, "src.txt", "data")
        assert files.copy_file(session, source, destination).error == "Invalid path: path traversal not allowed"
        assert files.move_file(session, source, destination).error == "Invalid path: path traversal not allowed"


class TestChangeDirectory:
    """Test directory changes."""

    def test_change_into_subdirectory(self, files, session):
        """A new session is returned and the old one is unchanged."""
        result = files.change_directory(session, "downloads")

        assert isinstance(result, DirectoryChange)
        assert result.path == os.path.realpath(os.path.join(session.home, "downloads"))
        assert result.session.cwd == result.path
        assert result.session.home == session.home
        assert session.cwd == session.home

    def test_change_with_dot_dot_is_allowed(self, files, session):
        """Navigation is read-only, so '..' is resolved rather than refused."""
        inner = files.change_directory(session, "bin").session
        back = files.change_directory(inner, "..")
        assert back.path == os.path.realpath(session.home)

    def test_change_to_missing(self, files, session):
        """Missing targets fail."""
        result = files.change_directory(session, "nowhere")
        assert not result.success
        assert result.error.startswith("Directory not found: ")

    def test_change_to_file(self, files, session):
        """Files are not directories."""
        files.write_file(session, "f.txt", "")
        assert files.change_directory(session, "f.txt").error.startswith("Not a directory: ")
