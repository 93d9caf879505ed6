from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from explorer_gui.config.models import ConfigUpdate, ExplorerConfig, config_update_from_dict, merge_config
from explorer_gui.core.errors import ConfigurationError
from explorer_gui.core.logging import get_logger
from explorer_gui.core.paths import app_data_dir
from explorer_gui.services.permissions import PathRuleSet, RuleKind

log = get_logger("explorer_gui.config")


def _config_path() -> Path:
    return app_data_dir() / "config.json"


def _read_raw() -> Dict[str, Any]:
    p = _config_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config root is not an object")
        return data
    except (OSError, ValueError) as e:
        # corrupted config; keep a backup and start fresh
        log.warning("config unreadable (%s), backing up and using defaults", e)
        try:
            p.replace(p.with_suffix(".json.bak"))
        except OSError:
            log.exception("could not back up %s", p)
        return {}


def load_config() -> ExplorerConfig:
    raw = _read_raw()
    try:
        return ExplorerConfig.from_dict(raw)
    except ConfigurationError:
        log.exception("invalid config values, using defaults")
        return ExplorerConfig()


def save_config(update: Union[ConfigUpdate, Dict[str, Any]]) -> ExplorerConfig:
    """Shallow-merge `update` onto the stored config and write it back."""
    if isinstance(update, dict):
        update = config_update_from_dict(update)
    raw = _read_raw()
    merged = merge_config(ExplorerConfig.from_dict(raw), update)
    # Keys written by other versions survive the round-trip.
    out = dict(raw)
    out.update(merged.to_dict())
    p = _config_path()
    p.write_text(json.dumps(out, ensure_ascii=False, indent=2), encoding="utf-8")
    return merged


def add_quick_access(path: str) -> ExplorerConfig:
    cfg = load_config()
    if path in cfg.quick_access:
        return cfg
    return save_config(ConfigUpdate(quick_access=cfg.quick_access + [path]))


def remove_quick_access(path: str) -> ExplorerConfig:
    cfg = load_config()
    return save_config(ConfigUpdate(quick_access=[p for p in cfg.quick_access if p != path]))


def toggle_expanded(path: str) -> ExplorerConfig:
    cfg = load_config()
    expanded = list(cfg.expanded_paths)
    if path in expanded:
        expanded.remove(path)
    else:
        expanded.append(path)
    return save_config(ConfigUpdate(expanded_paths=expanded))


def set_folder_permission(path: str, mode: str) -> ExplorerConfig:
    """Mark `path` as "editable" or "readonly"; it leaves the other list."""
    kinds = {"editable": RuleKind.ALLOW, "readonly": RuleKind.DENY}
    if mode not in kinds:
        raise ConfigurationError("mode must be 'editable' or 'readonly'")
    cfg = load_config()
    rules = PathRuleSet.from_lists(cfg.editable_folders, cfg.readonly_folders).with_rule(path, kinds[mode])
    editable, readonly = rules.to_lists()
    log.info("folder permission: %s -> %s", path, mode)
    return save_config(ConfigUpdate(editable_folders=editable, readonly_folders=readonly))


def clear_folder_permission(path: str) -> ExplorerConfig:
    cfg = load_config()
    rules = PathRuleSet.from_lists(cfg.editable_folders, cfg.readonly_folders).without_rule(path)
    editable, readonly = rules.to_lists()
    log.info("folder permission cleared: %s", path)
    return save_config(ConfigUpdate(editable_folders=editable, readonly_folders=readonly))
