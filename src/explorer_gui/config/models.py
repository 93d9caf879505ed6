from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from explorer_gui.core.errors import ConfigurationError

VIEW_FOLDER = "folder"
VIEW_SEARCH = "search"

# dataclass field -> persisted JSON key
_JSON_KEYS = {
    "default_path": "defaultPath",
    "quick_access": "quickAccess",
    "sidebar_width": "sidebarWidth",
    "expanded_paths": "expandedPaths",
    "quick_access_height": "quickAccessHeight",
    "view": "view",
    "editable_folders": "editableFolders",
    "readonly_folders": "readonlyFolders",
}


@dataclass
class ExplorerConfig:
    default_path: str = "C:"
    quick_access: List[str] = field(default_factory=list)
    sidebar_width: int = 260
    expanded_paths: List[str] = field(default_factory=list)
    quick_access_height: int = 200
    view: str = VIEW_FOLDER
    editable_folders: List[str] = field(default_factory=list)
    readonly_folders: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExplorerConfig":
        """Build from the persisted JSON object; unknown keys are ignored."""
        return merge_config(cls(), config_update_from_dict(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {_JSON_KEYS[f.name]: _copy_value(getattr(self, f.name)) for f in fields(self)}


@dataclass
class ConfigUpdate:
    """Partial update; None means "leave unchanged"."""

    default_path: Optional[str] = None
    quick_access: Optional[List[str]] = None
    sidebar_width: Optional[int] = None
    expanded_paths: Optional[List[str]] = None
    quick_access_height: Optional[int] = None
    view: Optional[str] = None
    editable_folders: Optional[List[str]] = None
    readonly_folders: Optional[List[str]] = None


def _copy_value(v: Any) -> Any:
    return list(v) if isinstance(v, list) else v


def config_update_from_dict(data: Dict[str, Any]) -> ConfigUpdate:
    """Translate a camelCase JSON object into a ConfigUpdate."""
    kwargs: Dict[str, Any] = {}
    for attr, key in _JSON_KEYS.items():
        if key not in data or data[key] is None:
            continue
        v = data[key]
        if attr in ("quick_access", "expanded_paths", "editable_folders", "readonly_folders"):
            if not isinstance(v, list):
                raise ConfigurationError(f"'{key}' must be a list")
            v = [str(p) for p in v]
        elif attr in ("sidebar_width", "quick_access_height"):
            try:
                v = int(v)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"'{key}' must be a number") from e
        elif attr == "view" and v not in (VIEW_FOLDER, VIEW_SEARCH):
            raise ConfigurationError(f"'view' must be '{VIEW_FOLDER}' or '{VIEW_SEARCH}'")
        kwargs[attr] = v
    return ConfigUpdate(**kwargs)


def merge_config(base: ExplorerConfig, update: ConfigUpdate) -> ExplorerConfig:
    """Shallow merge: every non-None field of `update` replaces the base value."""
    changes = {
        f.name: _copy_value(getattr(update, f.name))
        for f in fields(update)
        if getattr(update, f.name) is not None
    }
    return replace(base, **changes)
