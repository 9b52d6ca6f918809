"""Tests for preference persistence and change notification.

Validates defaults, per-key sanitization of malformed values, and that
writes and external edits both notify listeners.
"""

from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path

from githd.config import (
    COMMITS_COUNT_KEY,
    USE_EXPLORER_KEY,
    WITH_FOLDER_KEY,
    ConfigurationStore,
    ViewPreferences,
)


class ConfigurationStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "settings.json"
        self.store = ConfigurationStore(self.path)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_yields_defaults(self) -> None:
        self.assertEqual(self.store.preferences(), ViewPreferences(use_explorer=False, with_folder=True, commits_count=200))
        self.assertEqual(self.store.load(), {})

    def test_update_persists_and_notifies(self) -> None:
        changes: list[int] = []
        self.store.on_did_change(lambda: changes.append(1))
        self.store.update(USE_EXPLORER_KEY, True)
        self.store.update(COMMITS_COUNT_KEY, 50)

        self.assertEqual(changes, [1, 1])
        saved = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(saved, {USE_EXPLORER_KEY: True, COMMITS_COUNT_KEY: 50})
        self.assertEqual(ConfigurationStore(self.path).preferences(), ViewPreferences(True, True, 50))

    def test_malformed_file_falls_back(self) -> None:
        self.path.parent.mkdir(parents=True)
        for text in ["{not json", "[1, 2]", '"string"']:
            self.path.write_text(text, encoding="utf-8")
            with self.subTest(text=text):
                self.assertEqual(self.store.preferences(), ViewPreferences(False, True, 200))

    def test_wrong_types_fall_back_per_key(self) -> None:
        self.path.parent.mkdir(parents=True)
        self.path.write_text(
            json.dumps({USE_EXPLORER_KEY: "yes", WITH_FOLDER_KEY: False, COMMITS_COUNT_KEY: True}),
            encoding="utf-8",
        )
        self.assertEqual(self.store.preferences(), ViewPreferences(False, False, 200))

        for bad_count in [0, -3, 2.5, "10"]:
            self.path.write_text(json.dumps({COMMITS_COUNT_KEY: bad_count}), encoding="utf-8")
            with self.subTest(count=bad_count):
                self.assertEqual(self.store.preferences().commits_count, 200)

    def test_get_returns_default_for_unset_keys(self) -> None:
        self.assertIs(self.store.get(WITH_FOLDER_KEY), True)
        self.assertIsNone(self.store.get("githd.unknown"))

    def test_poll_detects_external_edit_once(self) -> None:
        self.store.update(WITH_FOLDER_KEY, True)
        changes: list[int] = []
        self.store.on_did_change(lambda: changes.append(1))
        self.assertFalse(self.store.poll())

        self.path.write_text(json.dumps({WITH_FOLDER_KEY: False, COMMITS_COUNT_KEY: 12345}), encoding="utf-8")
        stat = self.path.stat()
        os.utime(self.path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        self.assertTrue(self.store.poll())
        self.assertFalse(self.store.poll())
        self.assertEqual(changes, [1])
        self.assertFalse(self.store.preferences().with_folder)

    def test_write_failure_is_ignored(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = ConfigurationStore(blocker / "settings.json")
        store.update(USE_EXPLORER_KEY, True)
        self.assertFalse(store.preferences().use_explorer)

    def test_dispose_drops_listeners(self) -> None:
        changes: list[int] = []
        self.store.on_did_change(lambda: changes.append(1))
        self.store.dispose()
        self.store.update(USE_EXPLORER_KEY, True)
        self.assertEqual(changes, [])
