"""Tests for the session clipboard."""

import pytest

from explorer_gui.services.file_clipboard import ClipboardEntry, ClipboardState
from explorer_gui.services.transfer import TransferOp


class TestClipboardState:
    def test_starts_empty(self):
        clip = ClipboardState()
        assert clip.is_empty
        assert clip.get() is None

    def test_set_and_get(self):
        clip = ClipboardState()
        clip.set(["/a", "/b"], "move")
        entry = clip.get()
        assert entry.sources == ["/a", "/b"]
        assert entry.operation == TransferOp.MOVE

    def test_set_replaces(self):
        clip = ClipboardState()
        clip.set(["/a"], TransferOp.MOVE)
        clip.set(["/b"], TransferOp.COPY)
        assert clip.get().sources == ["/b"]
        assert clip.get().operation == TransferOp.COPY

    def test_clear_if_move(self):
        clip = ClipboardState()
        clip.set(["/a"], TransferOp.MOVE)
        assert clip.clear_if_move() is True
        assert clip.is_empty
        assert clip.clear_if_move() is False

    def test_copy_survives_clear_if_move(self):
        clip = ClipboardState()
        clip.set(["/a"], TransferOp.COPY)
        assert clip.clear_if_move() is False
        assert not clip.is_empty

    def test_instances_are_independent(self):
        first, second = ClipboardState(), ClipboardState()
        first.set(["/a"], TransferOp.COPY)
        assert second.is_empty

    def test_empty_sources_rejected(self):
        with pytest.raises(ValueError):
            ClipboardEntry(sources=[], operation=TransferOp.COPY)

    def test_unknown_operation_rejected(self):
        with pytest.raises(ValueError):
            ClipboardState().set(["/a"], "link")
