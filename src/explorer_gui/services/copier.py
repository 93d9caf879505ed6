from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from explorer_gui.core.errors import TransferStepFailedError
from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend

log = get_logger("explorer_gui.copier")


class RecursiveCopier:
    """Copies a file or a whole directory tree through a FilesBackend.

    The tree is walked with an explicit work-list, so depth is not bounded
    by the interpreter stack. Symbolic links are copied as links. The
    first failing entry aborts the copy; whatever was already written
    stays in place.
    """

    def __init__(self, files: FilesBackend):
        self.files = files

    def copy(self, source: str, destination: str) -> int:
        """Copy `source` to `destination`; return the number of files copied."""
        pending: Deque[Tuple[str, str]] = deque([(source, destination)])
        copied = 0
        while pending:
            src, dst = pending.popleft()
            try:
                if self.files.is_symlink(src):
                    # recreated, never followed
                    self.files.copy_symlink(src, dst)
                    copied += 1
                elif self.files.is_dir(src):
                    self.files.mkdir(dst)
                    for entry in self.files.listdir_entries(src):
                        pending.append((entry.path, self.files.join(dst, entry.name)))
                else:
                    self.files.copy_file(src, dst)
                    copied += 1
            except OSError as e:
                log.warning("copy failed at %s -> %s: %s", src, dst, e)
                raise TransferStepFailedError(src, e) from e
            log.debug("copied %s -> %s", src, dst)
        return copied
