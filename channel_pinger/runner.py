"""The scheduled task: open a session, log in if needed, send the message."""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from playwright.async_api import Page

from .config import Settings
from .models.task import StepResult, TaskOutcome, TaskStatus
from .session_manager.auth import login
from .session_manager.manager import SessionManager
from .session_manager.messenger import send_message

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

Step = Callable[[Page, Settings], Awaitable[StepResult]]


class TaskRunner:
    """Runs one login-and-message cycle per call and never raises.

    Calls that arrive while a run is still going are skipped, since they
    would need a second browser session.

    Without a saved browser profile every run starts logged out, so login
    always runs. With a profile the page is first checked for the
    post-login marker and login is skipped when it is there; a marker that
    shows up while logged out would then skip login on every run until
    the profile is cleared.
    """

    def __init__(
        self,
        settings: Settings,
        sessions: SessionManager,
        authenticator: Step = login,
        messenger: Step = send_message,
    ):
        self._settings = settings
        self._sessions = sessions
        self._authenticator = authenticator
        self._messenger = messenger
        self._lock = asyncio.Lock()
        self.last_outcome: Optional[TaskOutcome] = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    async def run_task(self) -> TaskOutcome:
        if self._lock.locked():
            logger.warning("Previous run still in progress, skipping this tick.")
            return TaskOutcome(status=TaskStatus.SKIPPED, stage="session")

        async with self._lock:
            logger.info("Starting task...")
            outcome = TaskOutcome()
            started = time.monotonic()
            exc_info = False
            try:
                await self._run(outcome)
            except Exception as e:
                outcome.status = TaskStatus.FAILED
                outcome.error = f"{type(e).__name__}: {e}"
                exc_info = True

            outcome.finished_at = datetime.now(timezone.utc).isoformat()
            outcome.duration_seconds = round(time.monotonic() - started, 3)
            self.last_outcome = outcome

            if outcome.success:
                logger.info(f"Task finished in {outcome.duration_seconds}s.")
            else:
                logger.error(
                    f"Task failed at stage '{outcome.stage}': {outcome.error}",
                    exc_info=exc_info,
                )
            return outcome

    async def _run(self, outcome: TaskOutcome) -> None:
        async with self._sessions.session() as session:
            outcome.stage = "login"
            if self._settings.profile_dir is None or not await self._sessions.probe(session):
                outcome.login = await self._authenticator(session.page, self._settings)
                if outcome.login != StepResult.SUCCESS:
                    outcome.error = f"login {outcome.login.value}"
                    return
                session.mark_authenticated()

            outcome.stage = "message"
            outcome.message = await self._messenger(session.page, self._settings)
            if outcome.message != StepResult.SUCCESS:
                outcome.error = f"message {outcome.message.value}"
                return

            outcome.stage = "done"
            outcome.status = TaskStatus.SUCCESS
