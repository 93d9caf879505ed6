"""Tests for the dry-run switch: in-memory files and a throwaway config dir."""

import os

import pytest

pytest.importorskip("PySide6.QtWidgets")

from explorer_gui.app import DRY_RUN_ENV, is_dry_run, prepare_dry_run  # noqa: E402
from explorer_gui.config.storage import load_config  # noqa: E402
from explorer_gui.core.paths import APP_DIR_ENV  # noqa: E402
from explorer_gui.services.files_mock import DEMO_ROOT, demo_backend  # noqa: E402
from explorer_gui.services.permissions import PathRuleSet  # noqa: E402


def test_flag_enables_dry_run():
    assert is_dry_run(["explorer-gui", "--dry-run"], {})
    assert not is_dry_run(["explorer-gui"], {})


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("TRUE", True), ("0", False), ("", False)])
def test_env_enables_dry_run(value, expected):
    assert is_dry_run(["explorer-gui"], {DRY_RUN_ENV: value}) is expected


def test_prepare_uses_fresh_home(app_home):
    cfg = prepare_dry_run()

    assert os.environ[APP_DIR_ENV] != str(app_home)
    assert cfg.default_path == DEMO_ROOT
    assert load_config().default_path == DEMO_ROOT


def test_demo_config_allows_editing_the_demo_tree():
    cfg = prepare_dry_run()
    rules = PathRuleSet.from_lists(cfg.editable_folders, cfg.readonly_folders)
    files = demo_backend()

    assert rules.is_allowed(files.join(DEMO_ROOT, "notes.txt"))
    assert files.is_dir(cfg.quick_access[0])
