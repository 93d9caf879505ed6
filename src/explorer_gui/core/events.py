from __future__ import annotations

"""Small in-process event channels.

Native progress / file-change notifications arrive on named channels. The
core only subscribes and disposes; it never owns the producer side.
"""

from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from explorer_gui.core.logging import get_logger

T = TypeVar("T")

log = get_logger("explorer_gui.events")

EXTRACT_PROGRESS = "extract-progress"
COMPRESS_PROGRESS = "compress-progress"
FILE_CHANGES = "file-changes"
INDEX_READY = "index-ready"


@dataclass(frozen=True)
class ProgressEvent:
    total: int
    processed: int
    filename: str = ""

    @property
    def is_terminal(self) -> bool:
        # An empty job reports (0, 0) once, which is terminal too.
        return self.processed >= self.total


@dataclass(frozen=True)
class FileChange:
    action: str  # "create" | "delete"
    path: str
    is_dir: bool = False


class Subscription:
    """Handle returned by EventChannel.subscribe(); dispose() unregisters."""

    def __init__(self, channel: "EventChannel", callback: Callable):
        self._channel: Optional[EventChannel] = channel
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._channel is not None

    def dispose(self) -> None:
        ch = self._channel
        if ch is None:
            return
        self._channel = None
        ch._remove(self._callback)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class EventChannel(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: Callable) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, payload: T) -> None:
        # Snapshot: a listener may dispose itself while handling.
        for cb in list(self._listeners):
            try:
                cb(payload)
            except Exception:
                log.exception("listener failed on channel %s", self.name)


class RefreshCounter:
    """Shared counter; every bump invalidates cached directory listings."""

    def __init__(self) -> None:
        self.value = 0
        self.changed: EventChannel[int] = EventChannel("refresh")

    def bump(self) -> int:
        self.value += 1
        log.debug("refresh counter -> %d", self.value)
        self.changed.emit(self.value)
        return self.value

    def subscribe(self, callback: Callable[[int], None]) -> Subscription:
        return self.changed.subscribe(callback)


def refresh_on_completion(channel: EventChannel[ProgressEvent], counter: RefreshCounter) -> Subscription:
    """Bump `counter` when `channel` reports its terminal progress event."""

    def _on_progress(ev: ProgressEvent) -> None:
        if ev.is_terminal:
            log.info("%s finished (%d items)", channel.name, ev.total)
            counter.bump()

    return channel.subscribe(_on_progress)
