from __future__ import annotations

from typing import Optional, Sequence

from explorer_gui.core.errors import PermissionDeniedError
from explorer_gui.core.events import RefreshCounter
from explorer_gui.core.logging import get_logger
from explorer_gui.services.deletion import DeletionGateway
from explorer_gui.services.file_clipboard import ClipboardState
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.permissions import SEPARATORS, PathRuleSet, normalize_path, parent_path
from explorer_gui.services.prompts import Prompter
from explorer_gui.services.transfer import (
    TransferOp,
    TransferOrchestrator,
    TransferOutcome,
    TransferRequest,
)

log = get_logger("explorer_gui.actions")


class ExplorerActions:
    """Copy, cut, paste, drop, rename and delete as issued from the explorer views.

    Owns nothing global: the clipboard, rule set and refresh counter are
    handed in by the window, so every window (and every test) gets its own.
    """

    def __init__(
        self,
        files: FilesBackend,
        rules: PathRuleSet,
        prompter: Prompter,
        clipboard: Optional[ClipboardState] = None,
        refresh: Optional[RefreshCounter] = None,
    ):
        self.files = files
        self.prompter = prompter
        self.clipboard = clipboard if clipboard is not None else ClipboardState()
        self.refresh = refresh if refresh is not None else RefreshCounter()
        self.transfers = TransferOrchestrator(files, rules, self.refresh)
        self.deletion = DeletionGateway(files, rules, prompter, self.refresh)
        self.rules = rules

    def set_rules(self, rules: PathRuleSet) -> None:
        self.rules = rules
        self.transfers.rules = rules
        self.deletion.rules = rules

    # ---------- clipboard ----------
    def copy(self, paths: Sequence[str]) -> bool:
        if not paths:
            return False
        self.clipboard.set(paths, TransferOp.COPY)
        log.info("copied %d item(s) to clipboard", len(paths))
        return True

    def cut(self, paths: Sequence[str]) -> bool:
        """Cutting needs edit permission on every source up front."""
        if not paths:
            return False
        denied = self.rules.first_denied(paths)
        if denied is not None:
            self._show_permission_error(PermissionDeniedError(denied, f"No edit permission for '{denied}'"))
            return False
        self.clipboard.set(paths, TransferOp.MOVE)
        log.info("cut %d item(s) to clipboard", len(paths))
        return True

    def paste(self, target_dir: str) -> Optional[TransferOutcome]:
        request = self.prepare_paste(target_dir)
        if request is None:
            return None
        return self.finish_transfer(self.transfers.execute(request), from_clipboard=True)

    def prepare_paste(self, target_dir: str) -> Optional[TransferRequest]:
        entry = self.clipboard.get()
        if entry is None:
            return None
        return TransferRequest.of(entry.sources, target_dir, entry.operation)

    def finish_transfer(self, outcome: Optional[TransferOutcome], *, from_clipboard: bool = False) -> Optional[TransferOutcome]:
        """Report a failed outcome; consume a cut after a successful paste.

        Split from paste()/drop() so a view can run the orchestrator on a
        worker thread and finish on the UI thread.
        """
        if outcome is None:
            return None
        if outcome.error is not None:
            title = "Permission denied" if isinstance(outcome.error, PermissionDeniedError) else "Transfer failed"
            self.prompter.show_error(title, str(outcome.error), outcome.error)
        elif from_clipboard:
            self.clipboard.clear_if_move()
        return outcome

    # ---------- drag & drop ----------
    def prepare_drop(self, paths: Sequence[str], target_dir: str, operation) -> Optional[TransferRequest]:
        """Build the drop request; moving an item onto its own folder does nothing."""
        op = TransferOp(operation)
        sources = list(paths)
        if op == TransferOp.MOVE:
            target = normalize_path(target_dir)
            sources = [p for p in sources if parent_path(p) != target]
        if not sources:
            log.debug("drop onto %s ignored, nothing to move", target_dir)
            return None
        return TransferRequest.of(sources, target_dir, op)

    def drop(self, paths: Sequence[str], target_dir: str, operation) -> Optional[TransferOutcome]:
        request = self.prepare_drop(paths, target_dir, operation)
        if request is None:
            return None
        return self.finish_transfer(self.transfers.execute(request))

    # ---------- rename ----------
    def rename(self, path: str, new_name: str) -> Optional[str]:
        """Rename `path` in place; return the new path, None if nothing changed.

        Needs edit permission on both the old and the new path. An existing
        item with the new name is never replaced.
        """
        new_name = new_name.strip()
        if not new_name or new_name == self.files.basename(path):
            return None
        if new_name in (".", "..") or any(sep in new_name for sep in SEPARATORS):
            self.prompter.show_error("Rename failed", f"'{new_name}' is not a valid name.")
            return None
        new_path = self.files.join(parent_path(path), new_name)
        denied = self.rules.first_denied([path, new_path])
        if denied is not None:
            self._show_permission_error(PermissionDeniedError(denied, f"No edit permission for '{denied}'"))
            return None
        if self.files.exists(new_path):
            self.prompter.show_error("Rename failed", f"'{new_name}' already exists.")
            return None
        try:
            self.files.rename(path, new_path)
        except OSError as e:
            log.warning("rename %s -> %s failed: %s", path, new_path, e)
            self.prompter.show_error("Rename failed", f"Could not rename '{path}'.\n{e}", e)
            return None
        log.info("renamed %s -> %s", path, new_path)
        self.refresh.bump()
        return new_path

    # ---------- delete ----------
    def delete(self, paths: Sequence[str]) -> bool:
        try:
            return self.deletion.delete(paths)
        except PermissionDeniedError as e:
            self._show_permission_error(e)
            return False

    # ---------- helpers ----------
    def _show_permission_error(self, exc: PermissionDeniedError) -> None:
        log.warning("%s", exc)
        self.prompter.show_error("Permission denied", str(exc), exc)
