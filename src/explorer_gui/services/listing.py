from __future__ import annotations

"""Column sorting for directory listings.

Folders always come before files, whichever way a column is sorted.
"""

import re
from typing import Any, Callable, Dict, Iterable, List

from explorer_gui.services.files_base import FileEntry

SORT_NAME = "name"
SORT_SIZE = "size"
SORT_TYPE = "type"
SORT_MTIME = "mtime"

SORT_KEYS = (SORT_NAME, SORT_SIZE, SORT_TYPE, SORT_MTIME)

_DIGITS = re.compile(r"(\d+)")


def file_type(name: str, is_dir: bool) -> str:
    if is_dir:
        return "Folder"
    lower = name.lower()
    if lower.endswith((".zip", ".rar", ".7z")):
        return "ZIP archive"
    if "." in name:
        return name.split(".")[-1].upper() + " File"
    return "File"


def natural_key(name: str) -> List[Any]:
    """Key under which "file2" sorts before "file10"; case is ignored."""
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(name)]


_KEYS: Dict[str, Callable[[FileEntry], Any]] = {
    SORT_NAME: lambda e: natural_key(e.name),
    SORT_SIZE: lambda e: e.size,
    SORT_TYPE: lambda e: file_type(e.name, e.is_dir).lower(),
    SORT_MTIME: lambda e: e.mtime,
}


def sort_entries(entries: Iterable[FileEntry], key: str = SORT_NAME, descending: bool = False) -> List[FileEntry]:
    if key not in _KEYS:
        raise ValueError(f"unknown sort key: {key}")
    keyfunc = _KEYS[key]
    entries = list(entries)
    dirs = sorted((e for e in entries if e.is_dir), key=keyfunc, reverse=descending)
    others = sorted((e for e in entries if not e.is_dir), key=keyfunc, reverse=descending)
    return dirs + others


def format_size(n) -> str:
    try:
        n = int(n)
    except (TypeError, ValueError):
        return ""
    units = ["B", "KB", "MB", "GB", "TB"]
    v = float(n)
    i = 0
    while v >= 1024 and i < len(units) - 1:
        v /= 1024.0
        i += 1
    return f"{v:.1f} {units[i]}" if i else f"{int(v)} {units[i]}"
