"""Process entry point for the channel pinger.

Starts the liveness HTTP service and the cron schedule right away; no
browser is opened until the first scheduled run. Each run launches its
own browser, logs in, sends the command and closes the browser again.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Optional

from aiohttp.web import AppRunner, TCPSite

from .config import ConfigError, Settings, load_settings
from .runner import TaskRunner
from .scheduler import TaskScheduler
from .session_manager.manager import SessionManager, create_app

# Configure logging to stderr
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("channel-pinger")


def build_runner(settings: Settings) -> TaskRunner:
    return TaskRunner(settings, SessionManager(settings))


async def serve(settings: Settings, stop: Optional[asyncio.Event] = None) -> None:
    """Run the liveness server and scheduler until `stop` is set.

    SIGINT and SIGTERM set `stop` where the event loop supports signal
    handlers.
    """
    runner = build_runner(settings)

    app_runner = AppRunner(create_app(runner))
    await app_runner.setup()
    site = TCPSite(app_runner, settings.host, settings.port)
    await site.start()
    logger.info(f"Server running on {settings.host}:{settings.port}")

    scheduler = TaskScheduler(settings.cron_schedule, runner.run_task)
    scheduler.start(run_immediately=settings.run_on_start)
    for job in scheduler.get_jobs():
        logger.info(f"Job {job.id} next runs at {job.next_run_time}")

    if stop is None:
        stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    handled = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
            handled.append(sig)
        except NotImplementedError:
            pass  # Windows: Ctrl+C still raises KeyboardInterrupt

    try:
        await stop.wait()
    finally:
        for sig in handled:
            loop.remove_signal_handler(sig)
        scheduler.shutdown()
        await app_runner.cleanup()
        logger.info("Server stopped.")


# ── Entry Point ──────────────────────────────────────────────────────────────


def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("Starting channel pinger...")
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")


if __name__ == "__main__":
    main()
