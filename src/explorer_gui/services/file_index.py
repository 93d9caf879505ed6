from __future__ import annotations

"""In-memory name index over a set of root folders.

build() walks the roots through a FilesBackend and, from the second build
on, reports what appeared and disappeared as FileChange records. search()
is a case-insensitive substring match on the item name.
"""

import re
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from explorer_gui.core.events import FileChange
from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend

log = get_logger("explorer_gui.file_index")

_SEP = re.compile(r"[/\\]")


def item_name(path: str) -> str:
    parts = [p for p in _SEP.split(path) if p]
    return parts[-1] if parts else path


def name_matches(path: str, query: str) -> bool:
    q = query.strip().lower()
    return bool(q) and q in item_name(path).lower()


def diff_index(old: Dict[str, bool], new: Dict[str, bool]) -> List[FileChange]:
    changes = [FileChange("delete", p, old[p]) for p in sorted(old) if p not in new]
    changes += [FileChange("create", p, new[p]) for p in sorted(new) if p not in old]
    return changes


def merge_changes(results: Sequence[str], changes: Iterable[FileChange], query: str) -> List[str]:
    """Apply live changes to a result list: deletions drop out, matching creations join."""
    out = list(results)
    for ch in changes:
        if ch.action == "delete":
            out = [p for p in out if p != ch.path]
        elif ch.action == "create" and name_matches(ch.path, query) and ch.path not in out:
            out.append(ch.path)
    return out


class FileIndex:
    def __init__(self, files: FilesBackend, roots: Iterable[str] = ()):
        self.files = files
        self.roots = list(roots)
        self._paths: Dict[str, bool] = {}  # path -> is_dir
        self.ready = False

    def __len__(self) -> int:
        return len(self._paths)

    def set_roots(self, roots: Iterable[str]) -> None:
        self.roots = list(roots)

    def build(self) -> List[FileChange]:
        """Re-walk every root; return the changes since the previous build."""
        found: Dict[str, bool] = {}
        pending: Deque[str] = deque()
        for root in self.roots:
            if self.files.is_dir(root):
                pending.append(root)
            else:
                log.warning("index root %s is not a folder, skipped", root)
        while pending:
            directory = pending.popleft()
            try:
                entries = self.files.listdir_entries(directory)
            except OSError as e:
                log.warning("index: cannot read %s: %s", directory, e)
                continue
            for entry in entries:
                found[entry.path] = entry.is_dir
                if entry.is_dir and not entry.is_link:
                    pending.append(entry.path)

        changes = diff_index(self._paths, found) if self.ready else []
        # Swapped in whole; search() on another thread sees old or new, never a mix.
        self._paths = found
        self.ready = True
        log.info("indexed %d item(s) under %d root(s), %d change(s)", len(found), len(self.roots), len(changes))
        return changes

    def search(self, query: str, limit: Optional[int] = None) -> List[str]:
        paths = self._paths
        hits = sorted(p for p in paths if name_matches(p, query))
        return hits[:limit] if limit is not None else hits
