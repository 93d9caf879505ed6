"""Tests for confirmed, permission-checked deletion."""

import pytest

from explorer_gui.core.errors import PermissionDeniedError, TrashUnavailableError
from explorer_gui.services.deletion import DeletionGateway
from conftest import FakePrompter


@pytest.fixture
def gateway(files, rules, prompter, refresh):
    return DeletionGateway(files, rules, prompter, refresh)


class TestDeletionGateway:
    def test_empty_selection(self, gateway, prompter):
        assert gateway.delete([]) is False
        assert prompter.confirms == []

    def test_deletes_after_confirmation(self, gateway, files, prompter, refresh):
        assert gateway.delete(["/home/bob/a.txt", "/home/bob/docs"]) is True

        assert prompter.confirms == [("Confirm delete", "Delete 2 items?")]
        assert files.trashed == ["/home/bob/a.txt", "/home/bob/docs"]
        assert not files.exists("/home/bob/docs/sub/deep.txt")
        assert refresh.value == 1

    def test_singular_wording(self, gateway, prompter):
        gateway.delete(["/home/bob/a.txt"])
        assert prompter.confirms[0][1] == "Delete 1 item?"

    def test_declined(self, files, rules, refresh):
        prompter = FakePrompter(answers=[False])
        gateway = DeletionGateway(files, rules, prompter, refresh)

        assert gateway.delete(["/home/bob/a.txt"]) is False
        assert files.exists("/home/bob/a.txt")
        assert files.mutations == []
        assert refresh.value == 0

    def test_permission_checked_before_prompt(self, gateway, files, prompter):
        with pytest.raises(PermissionDeniedError) as exc_info:
            gateway.delete(["/home/bob/a.txt", "/system/kernel.bin"])

        assert exc_info.value.path == "/system/kernel.bin"
        assert prompter.confirms == []
        assert files.exists("/home/bob/a.txt")

    def test_readonly_subfolder_refused(self, gateway, files):
        files.write_text("/home/bob/locked/secret.txt", "s")
        with pytest.raises(PermissionDeniedError):
            gateway.delete(["/home/bob/locked/secret.txt"])

    def test_primitive_failure_reported(self, gateway, files, prompter, refresh):
        files.fail_on["/home/bob/b.txt"] = OSError("trash unavailable")

        assert gateway.delete(["/home/bob/a.txt", "/home/bob/b.txt", "/home/bob/c.txt"]) is False

        assert files.trashed == ["/home/bob/a.txt"]
        assert files.exists("/home/bob/c.txt")
        title, message, exc = prompter.errors[0]
        assert title == "Delete failed"
        assert "/home/bob/b.txt" in message
        assert isinstance(exc, OSError)
        assert refresh.value == 1

    def test_no_trash_asks_before_permanent_delete(self, gateway, files, prompter, refresh):
        files.fail_on["/home/bob/b.txt"] = TrashUnavailableError("/home/bob/b.txt")

        assert gateway.delete(["/home/bob/a.txt", "/home/bob/b.txt"]) is True

        assert [c[0] for c in prompter.confirms] == ["Confirm delete", "Delete permanently"]
        assert "/home/bob/b.txt" in prompter.confirms[1][1]
        assert files.trashed == ["/home/bob/a.txt"]
        assert files.deleted == ["/home/bob/b.txt"]
        assert refresh.value == 1

    def test_permanent_delete_declined_stops(self, files, rules, refresh):
        prompter = FakePrompter(answers=[True, False])
        gateway = DeletionGateway(files, rules, prompter, refresh)
        files.fail_on["/home/bob/a.txt"] = TrashUnavailableError("/home/bob/a.txt")

        assert gateway.delete(["/home/bob/a.txt", "/home/bob/b.txt"]) is False

        assert files.exists("/home/bob/a.txt")
        assert files.exists("/home/bob/b.txt")
        assert files.deleted == []
        assert prompter.errors == []
        assert refresh.value == 0
