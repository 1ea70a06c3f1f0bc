import asyncio
import importlib
import logging
import os
import socket
import unittest
from unittest.mock import patch

import aiohttp
from aiohttp.web import AppRunner

from channel_pinger import server
from channel_pinger.scheduler import TaskScheduler
from channel_pinger.session_manager.manager import SessionManager
from fakes import FakeSession, make_settings


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def _get_json(url: str):
    async with aiohttp.ClientSession() as client:
        for _ in range(100):
            try:
                async with client.get(url) as resp:
                    return resp.status, await resp.json()
            except aiohttp.ClientConnectionError:
                await asyncio.sleep(0.05)
    raise AssertionError(f"{url} never answered")


class MainTests(unittest.TestCase):
    def test_missing_credentials_exit_with_status_one(self) -> None:
        for present in ({}, {"EMAIL": "bot@example.invalid"}, {"PASSWORD": "hunter2"}):
            with self.subTest(env=sorted(present)):
                with patch.dict(os.environ, present, clear=True):
                    with self.assertLogs("channel-pinger", level="ERROR"):
                        with self.assertRaises(SystemExit) as ctx:
                            server.main()
                self.assertEqual(ctx.exception.code, 1)


class LoggingSetupTests(unittest.TestCase):
    MODULES = (
        "channel_pinger.runner",
        "channel_pinger.scheduler",
        "channel_pinger.session_manager.auth",
        "channel_pinger.session_manager.browser",
        "channel_pinger.session_manager.locator",
        "channel_pinger.session_manager.manager",
        "channel_pinger.session_manager.messenger",
    )

    def test_module_loggers_do_not_repeat_through_root(self) -> None:
        for name in self.MODULES:
            with self.subTest(module=name):
                importlib.import_module(name)
                module_logger = logging.getLogger(name)
                self.assertFalse(module_logger.propagate)
                self.assertEqual(len(module_logger.handlers), 1)


class ServeTests(unittest.IsolatedAsyncioTestCase):
    async def test_answers_health_without_browser_and_stops_cleanly(self) -> None:
        port = _free_port()
        settings = make_settings(host="127.0.0.1", port=port)
        launched = []
        schedulers = []
        app_runners = []

        def browser_factory(s):
            launched.append(s)
            return FakeSession(s)

        def session_manager(s):
            return SessionManager(s, browser_factory=browser_factory)

        def task_scheduler(*args, **kwargs):
            scheduler = TaskScheduler(*args, **kwargs)
            schedulers.append(scheduler)
            return scheduler

        def app_runner(*args, **kwargs):
            runner = AppRunner(*args, **kwargs)
            app_runners.append(runner)
            return runner

        stop = asyncio.Event()

        with patch.object(server, "SessionManager", session_manager), \
                patch.object(server, "TaskScheduler", task_scheduler), \
                patch.object(server, "AppRunner", app_runner):
            serving = asyncio.create_task(server.serve(settings, stop))

            status, body = await _get_json(f"http://127.0.0.1:{port}/health")
            self.assertEqual(status, 200)
            self.assertEqual(body, {"status": "ok"})
            self.assertEqual(launched, [])
            self.assertEqual(len(schedulers), 1)
            self.assertTrue(schedulers[0].running)

            stop.set()
            await asyncio.wait_for(serving, timeout=5)

        self.assertFalse(schedulers[0].running)
        self.assertIsNone(app_runners[0].server)
        self.assertEqual(launched, [])


if __name__ == "__main__":
    unittest.main()
