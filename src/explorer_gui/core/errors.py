from __future__ import annotations

"""Error taxonomy shared by the transfer, deletion and archive services."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    SELF_REFERENTIAL_OPERATION = "self_referential_operation"
    # Resolved transparently by unique_path(); kept for logging/reporting.
    NAME_COLLISION = "name_collision"
    TRANSFER_STEP_FAILED = "transfer_step_failed"
    # Normal abort path, never raised.
    DELETION_REJECTED_BY_USER = "deletion_rejected_by_user"
    ARCHIVE_PASSWORD_REQUIRED = "archive_password_required"
    ARCHIVE_FILE_EXISTS = "archive_file_exists"
    TRASH_UNAVAILABLE = "trash_unavailable"


class ExplorerError(Exception):
    """Base exception for explorer errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str = "", *, path: Optional[str] = None):
        super().__init__(message or (path or ""))
        self.path = path


class PermissionDeniedError(ExplorerError):
    """Raised when the folder rules resolve Deny for a path that needs write access."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, path: str, message: str = ""):
        super().__init__(message or f"No write permission for '{path}'", path=path)


class SelfReferentialOperationError(ExplorerError):
    """Raised when a copy/move target is the source itself or one of its descendants."""

    kind = ErrorKind.SELF_REFERENTIAL_OPERATION

    def __init__(self, path: str, target_dir: str):
        super().__init__(f"Cannot copy or move '{path}' into itself ('{target_dir}')", path=path)
        self.target_dir = target_dir


class TransferStepFailedError(ExplorerError):
    """Raised when the copy/rename primitive fails for one source."""

    kind = ErrorKind.TRANSFER_STEP_FAILED

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Transfer failed for '{path}'{detail}", path=path)
        self.cause = cause


class ArchivePasswordRequiredError(ExplorerError):
    kind = ErrorKind.ARCHIVE_PASSWORD_REQUIRED

    def __init__(self, path: str):
        super().__init__(f"Archive '{path}' requires a password", path=path)


class ArchiveFileExistsError(ExplorerError):
    kind = ErrorKind.ARCHIVE_FILE_EXISTS

    def __init__(self, path: str):
        super().__init__(f"Extracting '{path}' would overwrite existing files", path=path)


class TrashUnavailableError(ExplorerError):
    """Raised when a path cannot be moved to a trash (no trash on that volume, no access)."""

    kind = ErrorKind.TRASH_UNAVAILABLE

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"'{path}' cannot be moved to the trash{detail}", path=path)
        self.cause = cause


class ConfigurationError(ExplorerError):
    """Raised when a configuration update is malformed."""
    pass
