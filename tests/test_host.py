"""Tests for host primitives: disposables, events, the command registry,
fire-and-forget tasks, and diff colorizing."""

from __future__ import annotations

import asyncio
import unittest

from githd.cli import palette_items
from githd.highlight import colorize_diff, sanitize_terminal_text
from githd.host import (
    CommandAlreadyRegisteredError,
    CommandNotFoundError,
    CommandRegistry,
    Disposable,
    EventEmitter,
    ExtensionContext,
)
from githd.tasks import drain, pending_count, spawn


class DisposableAndEventTests(unittest.TestCase):
    def test_dispose_runs_once(self) -> None:
        calls: list[int] = []
        disposable = Disposable(lambda: calls.append(1))
        disposable.dispose()
        disposable.dispose()
        self.assertEqual(calls, [1])

    def test_event_subscription_can_be_removed(self) -> None:
        emitter = EventEmitter()
        seen: list[str] = []
        subscription = emitter.event(seen.append)
        emitter.fire("a")
        subscription.dispose()
        emitter.fire("b")
        self.assertEqual(seen, ["a"])

    def test_context_disposes_every_subscription(self) -> None:
        calls: list[str] = []
        context = ExtensionContext()
        context.subscriptions.extend([Disposable(lambda: calls.append("a")), Disposable(lambda: calls.append("b"))])
        context.dispose()
        context.dispose()
        self.assertEqual(calls, ["a", "b"])


class CommandRegistryTests(unittest.IsolatedAsyncioTestCase):
    async def test_execute_awaits_coroutine_results(self) -> None:
        registry = CommandRegistry()

        async def double(value: int) -> int:
            return value * 2

        registry.register_command("double", double)
        registry.register_command("sync", lambda: "plain")
        self.assertEqual(await registry.execute_command("double", 21), 42)
        self.assertEqual(await registry.execute_command("sync"), "plain")

    async def test_duplicate_and_missing_commands(self) -> None:
        registry = CommandRegistry()
        registration = registry.register_command("a", lambda: None)
        with self.assertRaises(CommandAlreadyRegisteredError):
            registry.register_command("a", lambda: None)
        registration.dispose()
        self.assertFalse(registry.has_command("a"))
        with self.assertRaises(CommandNotFoundError):
            await registry.execute_command("a")
        with self.assertRaises(CommandNotFoundError):
            registry.get_command("a")

    def test_get_command_returns_bound_callback(self) -> None:
        registry = CommandRegistry()

        def callback() -> str:
            return "ran"

        registry.register_command("a", callback)
        self.assertIs(registry.get_command("a"), callback)

    def test_stale_registration_does_not_remove_newer_binding(self) -> None:
        registry = CommandRegistry()
        first = registry.register_command("a", lambda: 1)
        first.dispose()
        registry.register_command("a", lambda: 2)
        first.dispose()
        self.assertTrue(registry.has_command("a"))


class TaskTests(unittest.IsolatedAsyncioTestCase):
    async def test_spawned_failure_is_logged_not_raised(self) -> None:
        async def boom() -> None:
            raise RuntimeError("boom")

        with self.assertLogs("githd.tasks", level="DEBUG") as logs:
            spawn(boom(), name="boom")
            await drain()
        self.assertEqual(pending_count(), 0)
        self.assertIn("task boom failed", logs.output[0])

    async def test_drain_waits_for_tasks_spawned_meanwhile(self) -> None:
        order: list[str] = []

        async def inner() -> None:
            await asyncio.sleep(0)
            order.append("inner")

        async def outer() -> None:
            spawn(inner())
            order.append("outer")

        spawn(outer())
        await drain()
        self.assertEqual(order, ["outer", "inner"])


class HighlightTests(unittest.TestCase):
    DIFF = "--- a\n+++ b\n@@ -1 +1 @@\n-x = 1\n+x = 2\n"

    def test_sanitize_escapes_control_bytes(self) -> None:
        self.assertEqual(sanitize_terminal_text("ok\x07\x1b[2J\n"), "ok\\x07\\x1b[2J\n")
        self.assertEqual(sanitize_terminal_text("plain\ttext\n"), "plain\ttext\n")

    def test_colorize_diff_plain_and_colored(self) -> None:
        self.assertEqual(colorize_diff(self.DIFF, no_color=True), self.DIFF)
        colored = colorize_diff(self.DIFF, style="no-such-style")
        self.assertIn("\x1b[", colored)
        self.assertIn("x = 2", colored)
        self.assertEqual(colorize_diff("", style="monokai"), "")


class PaletteTests(unittest.TestCase):
    def test_palette_excludes_file_diff_command(self) -> None:
        ids = [command_id for command_id, _title in palette_items()]
        self.assertNotIn("githd.openCommittedFile", ids)
        self.assertEqual(ids[0], "githd.updateSha")
        self.assertEqual(len(ids), 9)
