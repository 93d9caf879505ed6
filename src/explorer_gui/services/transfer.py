from __future__ import annotations

"""Copy/move of a batch of paths into a target folder (paste or drop).

A request is validated completely before anything is touched: the folder
rules must allow the target (and, for a move, every source), and no source
may contain the target. Sources are then processed one at a time, in
request order. The first failing source stops the batch; sources already
done are not undone.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from explorer_gui.core.errors import (
    ErrorKind,
    ExplorerError,
    PermissionDeniedError,
    SelfReferentialOperationError,
    TransferStepFailedError,
)
from explorer_gui.core.events import RefreshCounter
from explorer_gui.core.logging import get_logger
from explorer_gui.services.copier import RecursiveCopier
from explorer_gui.services.files_base import FilesBackend
from explorer_gui.services.permissions import PathRuleSet, is_within, normalize_path
from explorer_gui.services.unique_name import unique_path

log = get_logger("explorer_gui.transfer")


class TransferOp(str, Enum):
    COPY = "copy"
    MOVE = "move"


class TransferState(str, Enum):
    VALIDATING = "validating"
    EXECUTING = "executing"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class TransferRequest:
    sources: Tuple[str, ...]
    target_dir: str
    operation: TransferOp

    @classmethod
    def of(cls, sources: Sequence[str], target_dir: str, operation) -> "TransferRequest":
        return cls(tuple(sources), target_dir, TransferOp(operation))


@dataclass
class TransferOutcome:
    state: TransferState
    failed_path: Optional[str] = None
    reason: Optional[ErrorKind] = None
    error: Optional[ExplorerError] = None
    completed: List[Tuple[str, str]] = field(default_factory=list)  # (source, destination)

    @property
    def succeeded(self) -> bool:
        return self.state == TransferState.DONE

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class TransferOrchestrator:
    def __init__(self, files: FilesBackend, rules: PathRuleSet, refresh: Optional[RefreshCounter] = None):
        self.files = files
        self.rules = rules
        self.refresh = refresh
        self.copier = RecursiveCopier(files)
        self.state = TransferState.DONE

    def validate(self, request: TransferRequest) -> Optional[ExplorerError]:
        """Return the first reason `request` must be rejected, or None."""
        if request.operation == TransferOp.MOVE:
            denied = self.rules.first_denied(request.sources)
            if denied is not None:
                return PermissionDeniedError(denied)
        if not self.rules.is_allowed(request.target_dir):
            return PermissionDeniedError(request.target_dir)

        for src in request.sources:
            if is_within(request.target_dir, src):
                return SelfReferentialOperationError(src, request.target_dir)
        return None

    def execute(self, request: TransferRequest) -> TransferOutcome:
        if not request.sources:
            return TransferOutcome(state=TransferState.DONE)

        self.state = TransferState.VALIDATING
        err = self.validate(request)
        if err is not None:
            self.state = TransferState.REJECTED
            log.warning("%s rejected: %s", request.operation.value, err)
            return TransferOutcome(state=self.state, failed_path=err.path, reason=err.kind, error=err)

        self.state = TransferState.EXECUTING
        target = normalize_path(request.target_dir)
        completed: List[Tuple[str, str]] = []
        for src in request.sources:
            try:
                dst = self._transfer_one(src, target, request.operation)
            except Exception as e:
                return self._step_failed(request, src, e, completed)
            completed.append((src, dst))

        self.state = TransferState.DONE
        log.info("%s of %d item(s) into %s done", request.operation.value, len(completed), target)
        self._bump_refresh()
        return TransferOutcome(state=self.state, completed=completed)

    def _step_failed(
        self,
        request: TransferRequest,
        src: str,
        exc: Exception,
        completed: List[Tuple[str, str]],
    ) -> TransferOutcome:
        self.state = TransferState.FAILED
        cause = exc.cause if isinstance(exc, TransferStepFailedError) else exc
        if isinstance(exc, (ExplorerError, OSError)):
            log.error("%s stopped at %s (%d done): %s", request.operation.value, src, len(completed), cause)
        else:
            log.exception("%s stopped at %s (%d done) by an unexpected error", request.operation.value, src, len(completed))
        if completed:
            self._bump_refresh()
        return TransferOutcome(
            state=self.state,
            failed_path=src,
            reason=ErrorKind.TRANSFER_STEP_FAILED,
            error=TransferStepFailedError(src, cause),
            completed=completed,
        )

    def execute_or_raise(self, request: TransferRequest) -> TransferOutcome:
        outcome = self.execute(request)
        outcome.raise_for_error()
        return outcome

    def _transfer_one(self, src: str, target: str, op: TransferOp) -> str:
        dst = unique_path(self.files, target, self.files.basename(normalize_path(src)))
        if op == TransferOp.COPY:
            self.copier.copy(src, dst)
        else:
            self.files.rename(src, dst)
        log.debug("%s %s -> %s", op.value, src, dst)
        return dst

    def _bump_refresh(self) -> None:
        if self.refresh is not None:
            self.refresh.bump()


def crashed_outcome(request: TransferRequest, exc: BaseException) -> TransferOutcome:
    """Outcome for a batch that died outside any single step."""
    path = request.sources[0] if request.sources else request.target_dir
    return TransferOutcome(
        state=TransferState.FAILED,
        failed_path=path,
        reason=ErrorKind.TRANSFER_STEP_FAILED,
        error=TransferStepFailedError(path, exc),
    )
