from __future__ import annotations

"""Commands the explorer invokes on the native layer.

The archive codec, change-index search and OS "open" live outside this
package. They are reached through a NativeBridge; failures come back as
NativeCommandError carrying the native error string.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence

from explorer_gui.core.events import EventChannel

FILE_EXISTS = "FILE_EXISTS"
_PASSWORD_MARKERS = ("password required", "invalid password")

METHOD_DEFLATED = "deflated"
METHOD_STORED = "stored"


class NativeCommandError(Exception):
    """A native command failed; str(exc) is the native error string."""

    @property
    def is_file_exists(self) -> bool:
        return str(self) == FILE_EXISTS

    @property
    def is_password_error(self) -> bool:
        lo = str(self).lower()
        return any(m in lo for m in _PASSWORD_MARKERS)


@dataclass(frozen=True)
class ZipEntry:
    name: str
    is_dir: bool
    size: int
    is_encrypted: bool = False


class NativeBridge(Protocol):
    # EXTRACT_PROGRESS, COMPRESS_PROGRESS, FILE_CHANGES, INDEX_READY
    channels: Dict[str, EventChannel]

    def delete_to_trash(self, paths: Sequence[str]) -> None:
        ...

    def extract_zip(self, zip_path: str, target_dir: str) -> None:
        ...

    def extract_zip_files(
        self,
        zip_path: str,
        files: Optional[Sequence[str]],
        target_dir: str,
        overwrite: bool,
        password: Optional[str],
    ) -> None:
        ...

    def compress_files(self, paths: Sequence[str], target_zip_path: str, method: str, password: Optional[str]) -> None:
        ...

    def list_zip_contents(self, zip_path: str) -> List[ZipEntry]:
        ...

    def search_mft(self, query: str) -> List[str]:
        ...

    def build_mft_index(self) -> int:
        ...

    def open_file(self, path: str) -> None:
        ...
