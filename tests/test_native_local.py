"""Tests for the local native bridge: zip codec and name index."""

import zipfile

import pytest

from explorer_gui.core.events import COMPRESS_PROGRESS, EXTRACT_PROGRESS, FILE_CHANGES, INDEX_READY
from explorer_gui.services.native import FILE_EXISTS, NativeCommandError
from explorer_gui.services.native_local import LocalNativeBridge


@pytest.fixture
def tree(tmp_path):
    src = tmp_path / "src"
    (src / "photos").mkdir(parents=True)
    (src / "photos" / "cat.jpg").write_bytes(b"meow")
    (src / "notes.txt").write_text("notes")
    return src


class TestLocalNativeBridge:
    def test_compress_and_list(self, tree, tmp_path):
        bridge = LocalNativeBridge()
        progress = []
        bridge.channels[COMPRESS_PROGRESS].subscribe(progress.append)
        zip_path = tmp_path / "out.zip"

        bridge.compress_files([str(tree / "photos"), str(tree / "notes.txt")], str(zip_path), "deflated", None)

        names = {e.name for e in bridge.list_zip_contents(str(zip_path))}
        assert "photos/cat.jpg" in names
        assert "notes.txt" in names
        assert progress[-1].is_terminal

    def test_compress_refuses_existing_archive(self, tree, tmp_path):
        zip_path = tmp_path / "out.zip"
        zip_path.write_bytes(b"")
        with pytest.raises(FileExistsError):
            LocalNativeBridge().compress_files([str(tree / "notes.txt")], str(zip_path), "stored", None)

    def test_password_archive_round_trip(self, tree, tmp_path):
        bridge = LocalNativeBridge()
        zip_path = str(tmp_path / "secret.zip")
        bridge.compress_files([str(tree / "notes.txt")], zip_path, "deflated", "s3cret")

        assert all(e.is_encrypted for e in bridge.list_zip_contents(zip_path))
        with zipfile.ZipFile(zip_path) as zf:
            # 99 marks a WinZip AES entry
            assert zf.getinfo("notes.txt").compress_type == 99

        out = tmp_path / "out"
        out.mkdir()
        with pytest.raises(NativeCommandError) as missing:
            bridge.extract_zip_files(zip_path, None, str(out), False, None)
        assert missing.value.is_password_error
        with pytest.raises(NativeCommandError) as wrong:
            bridge.extract_zip_files(zip_path, None, str(out), True, "nope")
        assert wrong.value.is_password_error

        bridge.extract_zip_files(zip_path, None, str(out), True, "s3cret")
        assert (out / "notes.txt").read_text() == "notes"

    def test_empty_extract_still_finishes(self, tmp_path):
        zip_path = tmp_path / "pack.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr("a.txt", "a")
        bridge = LocalNativeBridge()
        progress = []
        bridge.channels[EXTRACT_PROGRESS].subscribe(progress.append)

        bridge.extract_zip_files(str(zip_path), ["missing.txt"], str(tmp_path), False, None)

        assert len(progress) == 1 and progress[0].is_terminal

    def test_not_a_zip(self, tmp_path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_text("plain text")
        with pytest.raises(NativeCommandError):
            LocalNativeBridge().list_zip_contents(str(bogus))

    def test_extract(self, tree, tmp_path):
        zip_path = tmp_path / "pack.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr("dir/a.txt", "a")
            zf.writestr("b.txt", "b")
        bridge = LocalNativeBridge()
        progress = []
        bridge.channels[EXTRACT_PROGRESS].subscribe(progress.append)
        out = tmp_path / "out"
        out.mkdir()

        bridge.extract_zip_files(str(zip_path), None, str(out), False, None)

        assert (out / "dir" / "a.txt").read_text() == "a"
        assert (out / "b.txt").read_text() == "b"
        assert [p.processed for p in progress] == [1, 2]

    def test_extract_selected(self, tmp_path):
        zip_path = tmp_path / "pack.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr("a.txt", "a")
            zf.writestr("b.txt", "b")
        out = tmp_path / "out"
        out.mkdir()

        LocalNativeBridge().extract_zip_files(str(zip_path), ["b.txt"], str(out), False, None)

        assert not (out / "a.txt").exists()
        assert (out / "b.txt").exists()

    def test_extract_reports_existing_files(self, tmp_path):
        zip_path = tmp_path / "pack.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr("a.txt", "new")
        (tmp_path / "a.txt").write_text("old")
        bridge = LocalNativeBridge()

        with pytest.raises(NativeCommandError) as exc_info:
            bridge.extract_zip_files(str(zip_path), None, str(tmp_path), False, None)
        assert str(exc_info.value) == FILE_EXISTS
        assert (tmp_path / "a.txt").read_text() == "old"

        bridge.extract_zip_files(str(zip_path), None, str(tmp_path), True, None)
        assert (tmp_path / "a.txt").read_text() == "new"

    def test_search_before_index(self):
        with pytest.raises(NativeCommandError):
            LocalNativeBridge().search_mft("notes")

    def test_index_and_search(self, tree):
        bridge = LocalNativeBridge(index_roots=[str(tree)])
        ready, changes = [], []
        bridge.channels[INDEX_READY].subscribe(ready.append)
        bridge.channels[FILE_CHANGES].subscribe(changes.append)

        assert bridge.build_mft_index() == 3
        assert ready == [True]
        assert changes == []
        assert bridge.search_mft("CAT") == [str(tree / "photos" / "cat.jpg")]

        (tree / "photos" / "cat.jpg").unlink()
        (tree / "catalog.txt").write_text("c")
        bridge.build_mft_index()

        assert [(c.action, c.path) for c in changes[0]] == [
            ("delete", str(tree / "photos" / "cat.jpg")),
            ("create", str(tree / "catalog.txt")),
        ]
        assert bridge.search_mft("cat") == [str(tree / "catalog.txt")]
