from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from explorer_gui.services.transfer import TransferOp

@dataclass(frozen=True)
class ClipboardEntry:
    sources: List[str]
    operation: TransferOp

    def __post_init__(self):
        if not self.sources:
            raise ValueError("clipboard needs at least one path")

class ClipboardState:
    """Last copy/cut of the running explorer session.

    One instance is owned by the window and handed to whoever pastes.
    """

    def __init__(self):
        self._data: Optional[ClipboardEntry] = None

    def set(self, sources: Sequence[str], operation) -> ClipboardEntry:
        self._data = ClipboardEntry(sources=list(sources), operation=TransferOp(operation))
        return self._data

    def get(self) -> Optional[ClipboardEntry]:
        return self._data

    def clear(self) -> None:
        self._data = None

    def clear_if_move(self) -> bool:
        """Drop a cut after its successful paste; copies stay reusable."""
        if self._data is not None and self._data.operation == TransferOp.MOVE:
            self._data = None
            return True
        return False

    @property
    def is_empty(self) -> bool:
        return self._data is None
