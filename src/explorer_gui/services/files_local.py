from __future__ import annotations

import os
import shutil
import stat as pystat
from typing import List, Tuple

from send2trash import send2trash
from send2trash.exceptions import TrashPermissionError

from explorer_gui.core.errors import TrashUnavailableError
from explorer_gui.services.files_base import FilesBackend, FileEntry


class LocalFilesBackend(FilesBackend):
    def listdir_entries(self, path: str) -> List[FileEntry]:
        entries: List[FileEntry] = []
        with os.scandir(path) as it:
            for de in it:
                is_link = de.is_symlink()
                try:
                    st = de.stat()
                except OSError:
                    # Dangling or looping links are listed as the link itself;
                    # anything else unreadable fails the listing.
                    if not is_link:
                        raise
                    st = de.stat(follow_symlinks=False)
                is_dir = pystat.S_ISDIR(st.st_mode)
                entries.append(FileEntry(
                    name=de.name,
                    path=de.path,
                    is_dir=is_dir,
                    size=0 if is_dir else int(st.st_size),
                    mtime=int(st.st_mtime),
                    readonly=not os.access(de.path, os.W_OK),
                    is_link=is_link,
                ))
        entries.sort(key=lambda e: (not e.is_dir, e.name.lower()))
        return entries

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_symlink(self, path: str) -> bool:
        return os.path.islink(path)

    def stat(self, path: str) -> Tuple[int, int]:
        st = os.stat(path)
        return int(st.st_size), int(st.st_mtime)

    def mkdir(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def copy_file(self, src: str, dst: str) -> None:
        # "xb" makes the create exclusive: a file that appeared after the
        # unique-name check is never overwritten.
        with open(src, "rb") as fsrc, open(dst, "xb") as fdst:
            shutil.copyfileobj(fsrc, fdst)
        shutil.copystat(src, dst)

    def copy_symlink(self, src: str, dst: str) -> None:
        # os.symlink refuses an existing dst.
        os.symlink(os.readlink(src), dst, target_is_directory=os.path.isdir(src))

    def rename(self, src: str, dst: str) -> None:
        # os.rename silently replaces files on POSIX.
        if os.path.lexists(dst):
            raise FileExistsError(dst)
        os.rename(src, dst)

    def delete_to_trash(self, path: str) -> None:
        try:
            send2trash(path)
        except TrashPermissionError as e:
            raise TrashUnavailableError(path, e) from e

    def delete_permanently(self, path: str) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)

    def join(self, directory: str, name: str) -> str:
        return os.path.join(directory, name)

    def basename(self, path: str) -> str:
        return os.path.basename(path.rstrip("/\\")) or path
