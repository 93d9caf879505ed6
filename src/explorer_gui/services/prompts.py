from __future__ import annotations

from typing import Optional, Protocol


class Prompter(Protocol):
    """Blocking user interaction used by the services (Qt: QMessageBox)."""

    def confirm(self, title: str, message: str) -> bool:
        ...

    def show_error(self, title: str, message: str, exc: Optional[BaseException] = None) -> None:
        ...
