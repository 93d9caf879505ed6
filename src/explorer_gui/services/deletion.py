from __future__ import annotations

from typing import Iterable, List, Optional

from explorer_gui.core.errors import PermissionDeniedError, TrashUnavailableError
from explorer_gui.core.events import RefreshCounter
from explorer_gui.core.logging import get_logger
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.permissions import PathRuleSet
from explorer_gui.services.prompts import Prompter

log = get_logger("explorer_gui.deletion")


class DeletionGateway:
    def __init__(
        self,
        files: FilesBackend,
        rules: PathRuleSet,
        prompter: Prompter,
        refresh: Optional[RefreshCounter] = None,
    ):
        self.files = files
        self.rules = rules
        self.prompter = prompter
        self.refresh = refresh

    def delete(self, paths: Iterable[str]) -> bool:
        """Send `paths` to the trash after a permission check and confirmation.

        Raises PermissionDeniedError (nothing deleted) when any path is not
        editable. A path that cannot go to the trash is deleted permanently
        only after a second confirmation. Returns False when the user
        declines or the delete primitive fails; items already deleted at
        that point stay deleted.
        """
        paths = list(paths)
        if not paths:
            return False

        denied = self.rules.first_denied(paths)
        if denied is not None:
            log.warning("delete refused, no permission for %s", denied)
            raise PermissionDeniedError(denied, f"No delete permission for '{denied}'")

        if not self.prompter.confirm("Confirm delete", _confirm_text(paths)):
            log.info("delete of %d item(s) declined by user", len(paths))
            return False

        done: List[str] = []
        for p in paths:
            try:
                self.files.delete_to_trash(p)
            except TrashUnavailableError as e:
                if not self.prompter.confirm("Delete permanently", _permanent_text(p)):
                    log.info("permanent delete of %s declined by user", p)
                    return self._stopped(done)
                try:
                    self.files.delete_permanently(p)
                except OSError as e2:
                    return self._failed(p, e2, done)
                log.warning("%s deleted permanently: %s", p, e.cause)
            except OSError as e:
                return self._failed(p, e, done)
            done.append(p)

        log.info("deleted %d item(s)", len(done))
        self._bump_refresh()
        return True

    def _failed(self, path: str, exc: OSError, done: List[str]) -> bool:
        log.error("delete failed for %s after %d item(s): %s", path, len(done), exc)
        self.prompter.show_error("Delete failed", f"Could not delete '{path}'.\n{exc}", exc)
        return self._stopped(done)

    def _stopped(self, done: List[str]) -> bool:
        if done:
            self._bump_refresh()
        return False

    def _bump_refresh(self) -> None:
        if self.refresh is not None:
            self.refresh.bump()


def _confirm_text(paths: List[str]) -> str:
    noun = "item" if len(paths) == 1 else "items"
    return f"Delete {len(paths)} {noun}?"


def _permanent_text(path: str) -> str:
    return f"'{path}' cannot be moved to the trash.\nDelete it permanently? This cannot be undone."
