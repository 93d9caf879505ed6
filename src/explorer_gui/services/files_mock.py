from __future__ import annotations

import posixpath
import time
from typing import Dict, List, Optional, Set, Tuple
from .files_base import FilesBackend, FileEntry

class MockFilesBackend(FilesBackend):
    """In-memory POSIX-style tree for the dry-run mode and tests.

    `fail_on` maps a source path to the exception copy_file()/rename()/
    delete_to_trash() should raise for it.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None, dirs: Optional[List[str]] = None):
        self._files: Dict[str, bytes] = {}
        self._dirs: Set[str] = {"/"}
        self._links: Dict[str, str] = {}  # link path -> target, never resolved
        self._mt: Dict[str, int] = {}
        self.trashed: List[str] = []
        self.deleted: List[str] = []
        self.mutations: List[Tuple[str, str, str]] = []  # (op, src, dst)
        self.fail_on: Dict[str, BaseException] = {}
        for d in dirs or []:
            self._add_dir(d)
        for p, text in (files or {}).items():
            self.write_text(p, text)

    # ---- setup / inspection helpers ----
    def _add_dir(self, path: str) -> None:
        path = self._norm(path)
        while path not in self._dirs:
            self._dirs.add(path)
            self._mt[path] = int(time.time())
            path = posixpath.dirname(path)

    @staticmethod
    def _norm(path: str) -> str:
        return posixpath.normpath(path) if path else "/"

    def write_text(self, path: str, text: str) -> None:
        path = self._norm(path)
        self._add_dir(posixpath.dirname(path))
        self._files[path] = text.encode("utf-8")
        self._mt[path] = int(time.time())

    def add_symlink(self, path: str, target: str) -> None:
        path = self._norm(path)
        self._add_dir(posixpath.dirname(path))
        self._links[path] = target

    def read_link(self, path: str) -> str:
        return self._links[self._norm(path)]

    def read_text(self, path: str) -> str:
        path = self._norm(path)
        if path not in self._files:
            raise FileNotFoundError(path)
        return self._files[path].decode("utf-8")

    def all_paths(self) -> List[str]:
        return sorted((self._dirs - {"/"}) | set(self._files) | set(self._links))

    def _check_fail(self, path: str) -> None:
        exc = self.fail_on.get(self._norm(path))
        if exc is not None:
            raise exc

    def _subtree(self, store, path: str) -> List[str]:
        prefix = path + "/"
        return sorted(p for p in store if p == path or p.startswith(prefix))

    # ---- FilesBackend ----
    def listdir_entries(self, path: str) -> List[FileEntry]:
        path = self._norm(path)
        if path not in self._dirs:
            raise FileNotFoundError(path)
        entries: List[FileEntry] = []
        for p in self._dirs | set(self._files) | set(self._links):
            if p == path or posixpath.dirname(p) != path:
                continue
            is_dir = p in self._dirs
            size = len(self._files[p]) if p in self._files else 0
            entries.append(FileEntry(
                name=posixpath.basename(p),
                path=p,
                is_dir=is_dir,
                size=size,
                mtime=self._mt.get(p, 0),
                is_link=p in self._links,
            ))
        entries.sort(key=lambda e: (not e.is_dir, e.name.lower()))
        return entries

    def exists(self, path: str) -> bool:
        path = self._norm(path)
        return path in self._dirs or path in self._files or path in self._links

    def is_dir(self, path: str) -> bool:
        return self._norm(path) in self._dirs

    def is_symlink(self, path: str) -> bool:
        return self._norm(path) in self._links

    def stat(self, path: str) -> Tuple[int, int]:
        path = self._norm(path)
        if not self.exists(path):
            raise FileNotFoundError(path)
        return (len(self._files.get(path, b"")), self._mt.get(path, 0))

    def mkdir(self, path: str) -> None:
        path = self._norm(path)
        if path in self._files or path in self._links:
            raise FileExistsError(path)
        if path not in self._dirs:
            if posixpath.dirname(path) not in self._dirs:
                raise FileNotFoundError(posixpath.dirname(path))
            self._dirs.add(path)
            self._mt[path] = int(time.time())
            self.mutations.append(("mkdir", "", path))

    def _check_dst(self, dst: str) -> None:
        if self.exists(dst):
            raise FileExistsError(dst)
        if posixpath.dirname(dst) not in self._dirs:
            raise FileNotFoundError(posixpath.dirname(dst))

    def copy_file(self, src: str, dst: str) -> None:
        src, dst = self._norm(src), self._norm(dst)
        self._check_fail(src)
        if src not in self._files:
            raise FileNotFoundError(src)
        self._check_dst(dst)
        self._files[dst] = self._files[src]
        self._mt[dst] = self._mt.get(src, 0)
        self.mutations.append(("copy", src, dst))

    def copy_symlink(self, src: str, dst: str) -> None:
        src, dst = self._norm(src), self._norm(dst)
        self._check_fail(src)
        if src not in self._links:
            raise FileNotFoundError(src)
        self._check_dst(dst)
        self._links[dst] = self._links[src]
        self.mutations.append(("link", src, dst))

    def rename(self, src: str, dst: str) -> None:
        src, dst = self._norm(src), self._norm(dst)
        self._check_fail(src)
        if not self.exists(src):
            raise FileNotFoundError(src)
        self._check_dst(dst)
        if src in self._dirs:
            for d in self._subtree(self._dirs, src):
                self._dirs.discard(d)
                self._dirs.add(dst + d[len(src):])
        for store in (self._files, self._links):
            for p in self._subtree(store, src):
                store[dst + p[len(src):]] = store.pop(p)
        self.mutations.append(("rename", src, dst))

    def _remove(self, path: str) -> None:
        for d in self._subtree(self._dirs, path):
            self._dirs.discard(d)
        for store in (self._files, self._links):
            for p in self._subtree(store, path):
                del store[p]

    def delete_to_trash(self, path: str) -> None:
        path = self._norm(path)
        self._check_fail(path)
        if not self.exists(path):
            raise FileNotFoundError(path)
        self._remove(path)
        self.trashed.append(path)
        self.mutations.append(("trash", path, ""))

    def delete_permanently(self, path: str) -> None:
        path = self._norm(path)
        if not self.exists(path):
            raise FileNotFoundError(path)
        self._remove(path)
        self.deleted.append(path)
        self.mutations.append(("delete", path, ""))


DEMO_ROOT = "/home/demo"


def demo_backend() -> MockFilesBackend:
    """Sample tree for `--dry-run`; nothing touches the real disk."""
    root = DEMO_ROOT
    return MockFilesBackend(
        files={
            f"{root}/notes.txt": "shopping list",
            f"{root}/todo.md": "- sort photos",
            f"{root}/projects/site/index.html": "<html></html>",
            f"{root}/projects/site/style.css": "body {}",
            f"{root}/projects/report_2023.pdf": "%PDF",
            f"{root}/projects/report_2024.pdf": "%PDF",
            f"{root}/photos/2024/beach.jpg": "jpg",
            f"{root}/photos/2024/city.jpg": "jpg",
            f"{root}/archive/old_notes.txt": "old",
        },
        dirs=[f"{root}/downloads"],
    )
