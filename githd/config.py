"""Persistent JSON preferences and change notification.

Stores the committed-files view mode, explorer folder grouping, and history
page size under flat dotted keys. All access is defensive: malformed or
missing config falls back to defaults, and write failures are ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .host import Disposable, EventEmitter

APP_NAME = "githd"
CONFIG_FILENAME = "settings.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

USE_EXPLORER_KEY = "githd.committedFilesView.useExplorer"
WITH_FOLDER_KEY = "githd.explorerView.withFolder"
COMMITS_COUNT_KEY = "githd.logView.commitsCount"

DEFAULTS: dict[str, object] = {
    USE_EXPLORER_KEY: False,
    WITH_FOLDER_KEY: True,
    COMMITS_COUNT_KEY: 200,
}


def _path_stat_signature(path: Path) -> tuple[str, int, int]:
    """Return a stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0)
    except OSError:
        return ("error", 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size)


def _coerce_bool(value: object, default: bool) -> bool:
    """Only explicit booleans are accepted."""
    return value if isinstance(value, bool) else default


def _coerce_positive_int(value: object, default: int) -> int:
    """Booleans, non-integers and values below one fall back to ``default``."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


@dataclass(frozen=True)
class ViewPreferences:
    """Snapshot of every preference the extension reacts to."""

    use_explorer: bool
    with_folder: bool
    commits_count: int

    @classmethod
    def from_mapping(cls, data: dict[str, object]) -> ViewPreferences:
        return cls(
            use_explorer=_coerce_bool(data.get(USE_EXPLORER_KEY), DEFAULTS[USE_EXPLORER_KEY]),
            with_folder=_coerce_bool(data.get(WITH_FOLDER_KEY), DEFAULTS[WITH_FOLDER_KEY]),
            commits_count=_coerce_positive_int(data.get(COMMITS_COUNT_KEY), DEFAULTS[COMMITS_COUNT_KEY]),
        )


class ConfigurationStore:
    """JSON-backed settings with an ``on_did_change`` notification."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else DEFAULT_CONFIG_PATH
        self._on_did_change = EventEmitter()
        self._signature = _path_stat_signature(self.path)

    def on_did_change(self, listener) -> Disposable:
        return self._on_did_change.event(listener)

    def load(self) -> dict[str, object]:
        """Return the persisted JSON object, or ``{}`` when unusable."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception:
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, object]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except Exception:
            pass
        self._signature = _path_stat_signature(self.path)

    def get(self, key: str) -> object:
        return self.load().get(key, DEFAULTS.get(key))

    def preferences(self) -> ViewPreferences:
        return ViewPreferences.from_mapping(self.load())

    def update(self, key: str, value: object) -> None:
        """Persist one key and notify listeners."""
        data = self.load()
        data[key] = value
        self._save(data)
        self._on_did_change.fire()

    def poll(self) -> bool:
        """Notify listeners when the file changed behind our back."""
        signature = _path_stat_signature(self.path)
        if signature == self._signature:
            return False
        self._signature = signature
        self._on_did_change.fire()
        return True

    def dispose(self) -> None:
        self._on_did_change.dispose()


__all__ = [
    "COMMITS_COUNT_KEY",
    "ConfigurationStore",
    "DEFAULTS",
    "DEFAULT_CONFIG_PATH",
    "USE_EXPLORER_KEY",
    "ViewPreferences",
    "WITH_FOLDER_KEY",
]
