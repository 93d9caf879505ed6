"""Tests for the work-list based recursive copy."""

import os

import pytest

from explorer_gui.core.errors import TransferStepFailedError
from explorer_gui.services.copier import RecursiveCopier
from explorer_gui.services.files_local import LocalFilesBackend
from explorer_gui.services.files_mock import MockFilesBackend


class TestRecursiveCopierMock:
    def test_single_file(self, files):
        n = RecursiveCopier(files).copy("/home/bob/a.txt", "/home/bob/dest/a.txt")
        assert n == 1
        assert files.read_text("/home/bob/dest/a.txt") == "A"
        assert files.read_text("/home/bob/a.txt") == "A"

    def test_nested_tree(self, files):
        n = RecursiveCopier(files).copy("/home/bob/docs", "/home/bob/dest/docs")
        assert n == 2
        assert files.read_text("/home/bob/dest/docs/readme.md") == "hello"
        assert files.read_text("/home/bob/dest/docs/sub/deep.txt") == "deep"

    def test_empty_directory(self, files):
        assert RecursiveCopier(files).copy("/home/bob/empty", "/home/bob/dest/empty") == 0
        assert files.is_dir("/home/bob/dest/empty")

    def test_deep_tree_does_not_recurse(self):
        depth = 1100
        path = "/r" + "/d" * depth
        files = MockFilesBackend(files={path + "/leaf.txt": "x"}, dirs=["/out"])
        assert RecursiveCopier(files).copy("/r", "/out/r") == 1
        assert files.read_text("/out/r" + "/d" * depth + "/leaf.txt") == "x"

    def test_failure_aborts_and_keeps_partial_output(self):
        files = MockFilesBackend(
            files={"/src/1.txt": "1", "/src/2.txt": "2", "/src/3.txt": "3"},
            dirs=["/out"],
        )
        files.fail_on["/src/2.txt"] = PermissionError("locked")
        with pytest.raises(TransferStepFailedError) as exc_info:
            RecursiveCopier(files).copy("/src", "/out/src")

        assert exc_info.value.path == "/src/2.txt"
        assert isinstance(exc_info.value.cause, PermissionError)
        assert files.exists("/out/src/1.txt")
        assert not files.exists("/out/src/2.txt")
        assert not files.exists("/out/src/3.txt")

    def test_links_copied_as_links(self, files):
        files.add_symlink("/home/bob/docs/up", "/home/bob/docs")
        n = RecursiveCopier(files).copy("/home/bob/docs", "/home/bob/dest/docs")

        assert n == 3
        assert files.read_link("/home/bob/dest/docs/up") == "/home/bob/docs"
        assert not files.is_dir("/home/bob/dest/docs/up")

    def test_existing_destination_is_not_overwritten(self, files):
        files.write_text("/home/bob/dest/a.txt", "keep me")
        with pytest.raises(TransferStepFailedError):
            RecursiveCopier(files).copy("/home/bob/a.txt", "/home/bob/dest/a.txt")
        assert files.read_text("/home/bob/dest/a.txt") == "keep me"


class TestRecursiveCopierLocal:
    def test_copies_tree_from_disk(self, tmp_path):
        src = tmp_path / "src"
        (src / "nested" / "deeper").mkdir(parents=True)
        (src / "top.txt").write_text("top")
        (src / "nested" / "deeper" / "bottom.bin").write_bytes(b"\x00\x01")
        dst = tmp_path / "dst"

        n = RecursiveCopier(LocalFilesBackend()).copy(str(src), str(dst))

        assert n == 2
        assert (dst / "top.txt").read_text() == "top"
        assert (dst / "nested" / "deeper" / "bottom.bin").read_bytes() == b"\x00\x01"

    def test_missing_source(self, tmp_path):
        with pytest.raises(TransferStepFailedError):
            RecursiveCopier(LocalFilesBackend()).copy(str(tmp_path / "nope"), str(tmp_path / "out"))

    def test_link_loop_is_not_followed(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "f.txt").write_text("f")
        try:
            os.symlink(str(src), str(src / "loop"), target_is_directory=True)
        except (OSError, NotImplementedError) as e:
            pytest.skip(f"symlinks unavailable: {e}")
        dst = tmp_path / "dst"

        n = RecursiveCopier(LocalFilesBackend()).copy(str(src), str(dst))

        assert n == 2
        assert (dst / "f.txt").read_text() == "f"
        assert os.path.islink(dst / "loop")
        assert os.readlink(dst / "loop") == str(src)
        assert [p.name for p in dst.iterdir() if p.is_dir() and not p.is_symlink()] == []

    def test_dangling_link_is_copied(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        try:
            os.symlink(str(tmp_path / "missing"), str(src / "dangling"))
        except (OSError, NotImplementedError) as e:
            pytest.skip(f"symlinks unavailable: {e}")
        dst = tmp_path / "dst"

        assert RecursiveCopier(LocalFilesBackend()).copy(str(src), str(dst)) == 1
        assert os.readlink(dst / "dangling") == str(tmp_path / "missing")
