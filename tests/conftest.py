"""Shared fixtures: an in-memory tree, a scripted prompter and an isolated app dir."""

from typing import List, Optional, Tuple

import pytest

from explorer_gui.core.events import RefreshCounter
from explorer_gui.services.files_mock import MockFilesBackend
from explorer_gui.services.permissions import PathRuleSet


class FakePrompter:
    """Records every prompt; confirm() answers from a queue (default: yes)."""

    def __init__(self, answers: Optional[List[bool]] = None):
        self.answers = list(answers or [])
        self.confirms: List[Tuple[str, str]] = []
        self.errors: List[Tuple[str, str, Optional[BaseException]]] = []

    def confirm(self, title: str, message: str) -> bool:
        self.confirms.append((title, message))
        return self.answers.pop(0) if self.answers else True

    def show_error(self, title: str, message: str, exc: Optional[BaseException] = None) -> None:
        self.errors.append((title, message, exc))


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    """Keep config and logs out of the real home directory."""
    home = tmp_path / "app_home"
    monkeypatch.setenv("EXPLORER_GUI_HOME", str(home))
    return home


@pytest.fixture
def files():
    return MockFilesBackend(
        files={
            "/home/bob/a.txt": "A",
            "/home/bob/b.txt": "B",
            "/home/bob/c.txt": "C",
            "/home/bob/docs/readme.md": "hello",
            "/home/bob/docs/sub/deep.txt": "deep",
            "/home/bob2/other.txt": "other",
            "/system/kernel.bin": "k",
        },
        dirs=["/home/bob/dest", "/home/bob/empty"],
    )


@pytest.fixture
def rules():
    return PathRuleSet.from_lists(["/home/bob", "/home/bob2"], ["/home/bob/locked"])


@pytest.fixture
def prompter():
    return FakePrompter()


@pytest.fixture
def refresh():
    return RefreshCounter()
