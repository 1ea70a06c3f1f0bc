"""Session lifecycle and the liveness HTTP service.

Each scheduled run gets its own browser: the SessionManager launches it,
points it at the channel and closes it again when the run ends, whatever
the outcome. Only one session may be open at a time.

Endpoints:
    GET  /        - Liveness check
    GET  /health  - Liveness check
    GET  /status  - Last run outcome, whether a run is in progress and
                    the state of its browser session
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional

from aiohttp import web

from ..config import Settings
from .browser import BrowserSession

if TYPE_CHECKING:
    from ..runner import TaskRunner

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


class SessionManager:
    """Owns the single browser session and its teardown."""

    def __init__(
        self,
        settings: Settings,
        browser_factory: Callable[[Settings], BrowserSession] = BrowserSession,
    ):
        self._settings = settings
        self._browser_factory = browser_factory
        self._active: Optional[BrowserSession] = None

    @property
    def active(self) -> Optional[BrowserSession]:
        return self._active

    async def acquire(self) -> BrowserSession:
        """Launch a fresh browser and open the target channel."""
        if self._active is not None:
            raise RuntimeError("A browser session is already active.")

        session = self._browser_factory(self._settings)
        self._active = session
        await session.start()
        await session.open_target()
        return session

    async def probe(self, session: BrowserSession) -> bool:
        """Return True when the session's page is already logged in."""
        authenticated = await session.probe_authenticated()
        logger.info("Already logged in." if authenticated else "Not logged in.")
        return authenticated

    async def release(self) -> None:
        """Close the active browser, if any."""
        session, self._active = self._active, None
        if session is not None:
            await session.stop()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserSession]:
        """Scope one browser session; it is released on every exit path."""
        try:
            yield await self.acquire()
        finally:
            await self.release()


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def handle_status(request: web.Request) -> web.Response:
    runner: TaskRunner = request.app["runner"]
    outcome = runner.last_outcome
    session = runner.sessions.active

    status = {
        "running": runner.is_running,
        "session": session.status().model_dump(mode="json") if session else None,
        "last_outcome": outcome.model_dump(mode="json") if outcome else None,
    }
    return web.json_response(status)


# ── App Factory ──────────────────────────────────────────────────────────────


def create_app(runner: TaskRunner) -> web.Application:
    app = web.Application()
    app["runner"] = runner

    app.router.add_get("/", handle_health)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/status", handle_status)

    return app
