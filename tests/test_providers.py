"""Tests for the flat and folder-grouped committed-file providers."""

from __future__ import annotations

import unittest

from fakes import FakeRepository, ScriptedHost, committed

from githd.committed_files import CommittedFilesProvider, build_folder_tree
from githd.git import GitError
from githd.model import OPEN_COMMITTED_FILE_COMMAND, ProviderHandle, create_file_provider
from githd.scm_provider import ScmFilesProvider

FILES = [
    committed("src/b.py"),
    committed("README.md", "A"),
    committed("src/util/a.py", "D"),
    committed("Docs/guide.md"),
]


class ProviderTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.host = ScriptedHost()
        self.repository = FakeRepository(files={"abc": list(FILES), "empty": []})


class ScmFilesProviderTests(ProviderTestCase):
    async def test_update_lists_files_flat(self) -> None:
        provider = ScmFilesProvider(self.repository, self.host)
        changes: list[int] = []
        provider.on_did_change(lambda: changes.append(1))
        await provider.update("abc")

        self.assertEqual(provider.ref, "abc")
        self.assertEqual(changes, [1])
        rows = provider.rows()
        self.assertEqual([row.label for row in rows], ["M src/b.py", "A README.md", "D src/util/a.py", "M Docs/guide.md"])
        self.assertEqual(rows[0].command, (OPEN_COMMITTED_FILE_COMMAND, (FILES[0],)))
        self.assertFalse(provider.supports_folder_grouping)

    async def test_clear_resets_state(self) -> None:
        provider = ScmFilesProvider(self.repository, self.host)
        await provider.update("abc")
        provider.clear()
        provider.clear()
        self.assertIsNone(provider.ref)
        self.assertEqual(provider.rows(), [])

    async def test_failed_update_keeps_previous_listing(self) -> None:
        provider = ScmFilesProvider(self.repository, self.host)
        await provider.update("abc")
        with self.assertRaises(GitError):
            await provider.update("missing")
        self.assertEqual(provider.ref, "abc")

    async def test_update_resolving_after_dispose_is_dropped(self) -> None:
        provider = ScmFilesProvider(self.repository, self.host)
        pending = provider.update("abc")
        provider.dispose()
        await pending
        self.assertIsNone(provider.ref)
        self.assertEqual(provider.files, [])

    def test_dispose_unregisters_view(self) -> None:
        provider = ScmFilesProvider(self.repository, self.host)
        self.assertIs(self.host.file_views()["githd.scm"], provider)
        provider.dispose()
        self.assertEqual(self.host.file_views(), {})


class CommittedFilesProviderTests(ProviderTestCase):
    async def test_folder_rows_list_folders_first(self) -> None:
        provider = CommittedFilesProvider(self.repository, self.host, with_folder=True)
        await provider.update("abc")
        rows = [(row.depth, row.label, row.command is not None) for row in provider.rows()]
        self.assertEqual(
            rows,
            [
                (0, "Docs/", False),
                (1, "M guide.md", True),
                (0, "src/", False),
                (1, "util/", False),
                (2, "D a.py", True),
                (1, "M b.py", True),
                (0, "A README.md", True),
            ],
        )

    async def test_without_folder_rows_show_directory_hint(self) -> None:
        provider = CommittedFilesProvider(self.repository, self.host, with_folder=False)
        await provider.update("abc")
        self.assertEqual(
            [row.label for row in provider.rows()],
            ["M b.py  src", "A README.md", "D a.py  src/util", "M guide.md  Docs"],
        )

    async def test_with_folder_toggle_rerenders_in_place(self) -> None:
        provider = CommittedFilesProvider(self.repository, self.host, with_folder=True)
        await provider.update("abc")
        changes: list[int] = []
        provider.on_did_change(lambda: changes.append(1))

        provider.with_folder = True
        self.assertEqual(changes, [])
        provider.with_folder = False
        self.assertEqual(changes, [1])
        self.assertEqual(provider.ref, "abc")
        self.assertTrue(all(row.depth == 0 for row in provider.rows()))

    def test_build_folder_tree_nests_paths(self) -> None:
        root = build_folder_tree(FILES)
        self.assertEqual(sorted(root.folders), ["Docs", "src"])
        self.assertEqual([file.relative_path for file in root.folders["src"].folders["util"].files], ["src/util/a.py"])
        self.assertEqual([file.relative_path for file in root.files], ["README.md"])


class FactoryAndHandleTests(ProviderTestCase):
    def test_factory_picks_kind(self) -> None:
        explorer = create_file_provider(True, False, self.repository, self.host)
        self.assertIsInstance(explorer, CommittedFilesProvider)
        self.assertFalse(explorer.with_folder)
        explorer.dispose()
        self.assertIsInstance(create_file_provider(False, True, self.repository, self.host), ScmFilesProvider)

    def test_rebind_returns_previous(self) -> None:
        first = ScmFilesProvider(self.repository, self.host)
        handle = ProviderHandle(first)
        first.dispose()
        second = CommittedFilesProvider(self.repository, self.host)
        self.assertIs(handle.rebind(second), first)
        self.assertIs(handle.current, second)
