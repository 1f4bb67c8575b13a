"""Tests for locked compare-and-write."""
from pathlib import Path

from integrity_toolkit.core.utils.file_locking import locked_file, write_if_changed


class TestWriteIfChanged:
    """Tests for write_if_changed function."""

    def test_missing_file_is_created(self, tmp_path: Path) -> None:
        """A missing file counts as changed and is written."""
        target = tmp_path / "sub" / "package.json"

        assert write_if_changed(target, "{}\n") is True
        assert target.read_text(encoding="utf-8") == "{}\n"

    def test_same_contents_not_rewritten(self, tmp_path: Path) -> None:
        target = tmp_path / "package.json"
        target.write_text("{}\n", encoding="utf-8")

        assert write_if_changed(target, "{}\n") is False

    def test_shorter_contents_replace_longer(self, tmp_path: Path) -> None:
        """Old contents are truncated, not partially overwritten."""
        target = tmp_path / "package.json"
        target.write_text('{"name": "long-name"}\n', encoding="utf-8")

        assert write_if_changed(target, "{}\n") is True
        assert target.read_text(encoding="utf-8") == "{}\n"

    def test_line_endings_are_significant(self, tmp_path: Path) -> None:
        """CRLF on disk differs from LF text."""
        target = tmp_path / "index.ts"
        target.write_bytes(b"a\r\n")

        assert write_if_changed(target, "a\n") is True
        assert target.read_bytes() == b"a\n"

    def test_dry_run_reports_without_writing(self, tmp_path: Path) -> None:
        target = tmp_path / "package.json"
        target.write_text("old\n", encoding="utf-8")

        assert write_if_changed(target, "new\n", dry_run=True) is True
        assert target.read_text(encoding="utf-8") == "old\n"

    def test_dry_run_missing_file_not_created(self, tmp_path: Path) -> None:
        target = tmp_path / "package.json"

        assert write_if_changed(target, "new\n", dry_run=True) is True
        assert not target.exists()


class TestLockedFile:
    """Tests for locked_file context manager."""

    def test_read_mode_creates_missing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "file.txt"

        with locked_file(target, 'r') as f:
            assert f.read() == ""

        assert target.exists()
