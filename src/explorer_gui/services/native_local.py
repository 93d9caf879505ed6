from __future__ import annotations

import os
from typing import Iterable, List, Optional, Sequence

import pyzipper
from send2trash import send2trash

from explorer_gui.core.events import (
    COMPRESS_PROGRESS,
    EXTRACT_PROGRESS,
    FILE_CHANGES,
    INDEX_READY,
    EventChannel,
    ProgressEvent,
)
from explorer_gui.core.logging import get_logger
from explorer_gui.services.file_index import FileIndex
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.files_local import LocalFilesBackend
from explorer_gui.services.native import FILE_EXISTS, METHOD_STORED, NativeCommandError, ZipEntry

log = get_logger("explorer_gui.native")

AES_KEY_BITS = 128


def _password_error(e: RuntimeError) -> NativeCommandError:
    # zip readers report encryption problems as RuntimeError
    msg = str(e).lower()
    if "password" in msg and "bad" in msg:
        return NativeCommandError("Invalid password")
    if "password required" in msg or "encrypted" in msg:
        return NativeCommandError("Password required")
    return NativeCommandError(str(e))


class LocalNativeBridge:
    """Zip, trash, search and open commands for the local machine.

    Zip archives go through pyzipper, so both ZipCrypto and WinZip AES
    archives can be read and password-protected archives are written with
    AES. The search index walks `index_roots` through a FilesBackend.
    Progress, file changes and index readiness are published on
    `channels[...]`.
    """

    def __init__(self, files: Optional[FilesBackend] = None, index_roots: Iterable[str] = ()):
        self.index = FileIndex(files or LocalFilesBackend(), index_roots)
        self.channels = {
            EXTRACT_PROGRESS: EventChannel[ProgressEvent](EXTRACT_PROGRESS),
            COMPRESS_PROGRESS: EventChannel[ProgressEvent](COMPRESS_PROGRESS),
            FILE_CHANGES: EventChannel[list](FILE_CHANGES),
            INDEX_READY: EventChannel[bool](INDEX_READY),
        }

    def delete_to_trash(self, paths: Sequence[str]) -> None:
        for p in paths:
            send2trash(p)

    # ---------- archives ----------
    def extract_zip(self, zip_path: str, target_dir: str) -> None:
        self.extract_zip_files(zip_path, None, target_dir, True, None)

    def extract_zip_files(
        self,
        zip_path: str,
        files: Optional[Sequence[str]],
        target_dir: str,
        overwrite: bool,
        password: Optional[str],
    ) -> None:
        channel = self.channels[EXTRACT_PROGRESS]
        with self._open(zip_path) as zf:
            members = [m for m in zf.infolist() if files is None or m.filename in files]
            if not overwrite:
                for m in members:
                    if not m.is_dir() and os.path.exists(os.path.join(target_dir, m.filename)):
                        raise NativeCommandError(FILE_EXISTS)
            pwd = password.encode("utf-8") if password else None
            total = len(members)
            for i, m in enumerate(members, start=1):
                try:
                    zf.extract(m, target_dir, pwd=pwd)
                except RuntimeError as e:
                    raise _password_error(e) from e
                channel.emit(ProgressEvent(total=total, processed=i, filename=m.filename))
        if not members:
            channel.emit(ProgressEvent(total=0, processed=0))

    def compress_files(self, paths: Sequence[str], target_zip_path: str, method: str, password: Optional[str]) -> None:
        compression = pyzipper.ZIP_STORED if method == METHOD_STORED else pyzipper.ZIP_DEFLATED
        items = []
        for p in paths:
            base = os.path.dirname(os.path.normpath(p))
            if os.path.isdir(p):
                for root, _dirs, names in os.walk(p):
                    items.append((root, os.path.relpath(root, base)))
                    items.extend((os.path.join(root, n), os.path.relpath(os.path.join(root, n), base)) for n in names)
            else:
                items.append((p, os.path.relpath(p, base)))

        channel = self.channels[COMPRESS_PROGRESS]
        if password:
            zf = pyzipper.AESZipFile(target_zip_path, "x", compression=compression, encryption=pyzipper.WZ_AES)
            zf.setpassword(password.encode("utf-8"))
            zf.setencryption(pyzipper.WZ_AES, nbits=AES_KEY_BITS)
        else:
            zf = pyzipper.ZipFile(target_zip_path, "x", compression=compression)
        with zf:
            for i, (src, arc) in enumerate(items, start=1):
                zf.write(src, arc)
                channel.emit(ProgressEvent(total=len(items), processed=i, filename=arc))
        if not items:
            channel.emit(ProgressEvent(total=0, processed=0))
        log.info("wrote %s (%d entries, encrypted=%s)", target_zip_path, len(items), bool(password))

    def list_zip_contents(self, zip_path: str) -> List[ZipEntry]:
        with self._open(zip_path) as zf:
            return [
                ZipEntry(
                    name=m.filename,
                    is_dir=m.is_dir(),
                    size=m.file_size,
                    is_encrypted=bool(m.flag_bits & 0x1),
                )
                for m in zf.infolist()
            ]

    @staticmethod
    def _open(zip_path: str) -> pyzipper.AESZipFile:
        try:
            return pyzipper.AESZipFile(zip_path)
        except pyzipper.BadZipFile as e:
            raise NativeCommandError(f"Not a zip archive: {e}") from e

    # ---------- search ----------
    def set_index_roots(self, roots: Iterable[str]) -> None:
        self.index.set_roots(roots)

    def build_mft_index(self) -> int:
        """Rebuild the name index; publishes file-changes and index-ready."""
        changes = self.index.build()
        if changes:
            self.channels[FILE_CHANGES].emit(changes)
        self.channels[INDEX_READY].emit(True)
        return len(self.index)

    def search_mft(self, query: str) -> List[str]:
        if not self.index.ready:
            raise NativeCommandError("Index not built")
        return self.index.search(query)

    def open_file(self, path: str) -> None:
        from PySide6.QtCore import QUrl
        from PySide6.QtGui import QDesktopServices

        if not QDesktopServices.openUrl(QUrl.fromLocalFile(path)):
            raise NativeCommandError(f"No application to open '{path}'")
