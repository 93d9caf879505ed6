from __future__ import annotations

from typing import Tuple

from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend

log = get_logger("explorer_gui.unique_name")


def split_name(name: str) -> Tuple[str, str]:
    """Split at the last dot: "a.tar.gz" -> ("a.tar", ".gz").

    A leading dot counts too: ".bashrc" -> ("", ".bashrc").
    """
    idx = name.rfind(".")
    if idx < 0:
        return name, ""
    return name[:idx], name[idx:]


def unique_path(files: FilesBackend, directory: str, desired_name: str) -> str:
    """Return a path in `directory` that does not exist right now.

    `desired_name` is kept when free, otherwise stem_1.ext, stem_2.ext, ...
    This checks the live backend; it does not reserve the name.
    """
    candidate = files.join(directory, desired_name)
    if not files.exists(candidate):
        return candidate

    stem, ext = split_name(desired_name)
    counter = 1
    while True:
        candidate = files.join(directory, f"{stem}_{counter}{ext}")
        if not files.exists(candidate):
            log.debug("name collision: %s -> %s", desired_name, candidate)
            return candidate
        counter += 1
