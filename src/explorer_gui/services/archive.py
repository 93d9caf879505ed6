from __future__ import annotations

import os
from contextlib import nullcontext
from typing import ContextManager, List, Optional, Sequence

from explorer_gui.core.errors import ArchiveFileExistsError, ArchivePasswordRequiredError
from explorer_gui.core.events import COMPRESS_PROGRESS, EXTRACT_PROGRESS, RefreshCounter, refresh_on_completion
from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.native import METHOD_DEFLATED, METHOD_STORED, NativeBridge, NativeCommandError, ZipEntry
from explorer_gui.services.permissions import PathRuleSet
from explorer_gui.services.prompts import Prompter
from explorer_gui.services.unique_name import unique_path

log = get_logger("explorer_gui.archive")


class ArchiveActions:
    """Permission-checked extract/compress on top of the native archive codec.

    Listings are refreshed when the codec publishes its terminal progress
    event, not when the call returns.
    """

    def __init__(
        self,
        bridge: NativeBridge,
        files: FilesBackend,
        rules: PathRuleSet,
        prompter: Prompter,
        refresh: Optional[RefreshCounter] = None,
    ):
        self.bridge = bridge
        self.files = files
        self.rules = rules
        self.prompter = prompter
        self.refresh = refresh

    def list_contents(self, zip_path: str) -> List[ZipEntry]:
        return list(self.bridge.list_zip_contents(zip_path))

    def extract(
        self,
        zip_path: str,
        files: Optional[Sequence[str]] = None,
        target_dir: Optional[str] = None,
        password: Optional[str] = None,
    ) -> bool:
        """Extract all (files=None) or selected entries.

        Existing files trigger an overwrite confirmation and one retry.
        Raises ArchivePasswordRequiredError when the archive needs a
        (different) password; the caller re-prompts and calls again.
        """
        target = target_dir or os.path.dirname(zip_path)
        self.rules.require(target)
        names = list(files) if files is not None else None
        with self._refresh_when_done(EXTRACT_PROGRESS):
            try:
                self._extract(zip_path, names, target, overwrite=False, password=password)
            except ArchiveFileExistsError:
                if not self.prompter.confirm("Overwrite files", "Some files already exist. Overwrite them?"):
                    log.info("extract of %s cancelled, overwrite declined", zip_path)
                    return False
                self._extract(zip_path, names, target, overwrite=True, password=password)
        log.info("extracted %s into %s", zip_path, target)
        return True

    def _extract(self, zip_path, names, target, *, overwrite: bool, password: Optional[str]) -> None:
        try:
            self.bridge.extract_zip_files(zip_path, names, target, overwrite, password or None)
        except NativeCommandError as e:
            if e.is_file_exists:
                raise ArchiveFileExistsError(zip_path) from e
            if e.is_password_error:
                raise ArchivePasswordRequiredError(zip_path) from e
            raise

    def compress(
        self,
        paths: Sequence[str],
        target_dir: str,
        name: str,
        method: str = METHOD_DEFLATED,
        password: Optional[str] = None,
    ) -> str:
        """Zip `paths` into `target_dir`; return the archive path written.

        A password makes an AES-encrypted archive.
        """
        if method not in (METHOD_DEFLATED, METHOD_STORED):
            raise ValueError(f"unknown compression method: {method}")
        if not paths:
            raise ValueError("nothing to compress")
        self.rules.require(target_dir)
        if not name.lower().endswith(".zip"):
            name += ".zip"
        zip_path = unique_path(self.files, target_dir, name)
        with self._refresh_when_done(COMPRESS_PROGRESS):
            self.bridge.compress_files(list(paths), zip_path, method, password or None)
        log.info("compressed %d item(s) into %s", len(paths), zip_path)
        return zip_path

    def _refresh_when_done(self, channel_name: str) -> ContextManager:
        if self.refresh is None:
            return nullcontext()
        return refresh_on_completion(self.bridge.channels[channel_name], self.refresh)
