from __future__ import annotations

import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

@dataclass
class FileEntry:
    name: str
    path: str
    is_dir: bool
    size: int = 0
    mtime: int = 0  # unix epoch seconds
    readonly: bool = False
    is_link: bool = False

class FilesBackend(ABC):
    """Filesystem primitives the transfer core runs on.

    Implementations must not overwrite an existing destination in
    copy_file() or rename(); they raise FileExistsError instead.
    """

    @abstractmethod
    def listdir_entries(self, path: str) -> List[FileEntry]:
        raise NotImplementedError

    @abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_symlink(self, path: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: str) -> Tuple[int, int]:
        """Return (size, mtime)."""
        raise NotImplementedError

    @abstractmethod
    def mkdir(self, path: str) -> None:
        """Create `path`; no error if it already exists as a directory."""
        raise NotImplementedError

    @abstractmethod
    def copy_file(self, src: str, dst: str) -> None:
        """Copy content and metadata of a single file."""
        raise NotImplementedError

    @abstractmethod
    def copy_symlink(self, src: str, dst: str) -> None:
        """Recreate the link `src` at `dst` without following it."""
        raise NotImplementedError

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_to_trash(self, path: str) -> None:
        """Raise TrashUnavailableError when `path` cannot go to a trash."""
        raise NotImplementedError

    @abstractmethod
    def delete_permanently(self, path: str) -> None:
        raise NotImplementedError

    # --- path helpers; local backends override with os.path ---
    def join(self, directory: str, name: str) -> str:
        return posixpath.join(directory, name)

    def basename(self, path: str) -> str:
        return posixpath.basename(path.rstrip("/")) or path
