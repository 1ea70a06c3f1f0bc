"""Camoufox browser automation: launch, open the channel, probe login state."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from camoufox.async_api import AsyncCamoufox
from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from ..config import Settings
from ..constants import SELECTORS
from ..models.session import AuthState, SessionStatus

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


class BrowserSession:
    """One browser process and one page pointed at the target channel."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._camoufox = None
        self._browser = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._auth_state = AuthState.UNKNOWN

    @property
    def is_running(self) -> bool:
        return self._page is not None

    @property
    def auth_state(self) -> AuthState:
        return self._auth_state

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser is not running.")
        return self._page

    def status(self) -> SessionStatus:
        return SessionStatus(
            is_running=self.is_running,
            auth_state=self._auth_state,
            url=self._page.url if self._page is not None else None,
        )

    async def start(self) -> None:
        """Launch Camoufox and open a page.

        With a profile directory the browser gets a persistent context, so
        cookies from an earlier run are loaded back.
        """
        if self.is_running:
            return

        settings = self._settings
        logger.info(f"Launching Camoufox (headless={settings.headless})...")

        if settings.profile_dir is not None:
            settings.profile_dir.mkdir(parents=True, exist_ok=True)
            self._camoufox = AsyncCamoufox(
                headless=settings.headless,
                humanize=True,
                persistent_context=True,
                user_data_dir=str(settings.profile_dir),
            )
            self._context = await self._camoufox.__aenter__()
        else:
            self._camoufox = AsyncCamoufox(headless=settings.headless, humanize=True)
            self._browser = await self._camoufox.__aenter__()
            self._context = await self._browser.new_context(
                viewport={"width": 1366, "height": 768},
            )

        self._page = await self._context.new_page()
        self._page.set_default_navigation_timeout(settings.navigation_timeout_ms)
        self._auth_state = AuthState.UNKNOWN

    async def open_target(self) -> None:
        """Navigate to the channel and wait for the network to go idle.

        A failed or slow navigation is only logged: whatever did load is
        checked by the element waits that follow.
        """
        url = self._settings.target_url
        logger.info(f"Navigating to {url}...")
        try:
            await self.page.goto(
                url,
                wait_until="networkidle",
                timeout=self._settings.navigation_timeout_ms,
            )
            logger.info("Page loaded successfully.")
        except PlaywrightError as e:
            logger.warning(f"Navigation did not settle, continuing: {e}")

    async def probe_authenticated(self) -> bool:
        """Check for an element that only exists after login."""
        try:
            marker = await self.page.query_selector(SELECTORS["logged_in_check"])
        except PlaywrightError as e:
            logger.warning(f"Login probe failed: {e}")
            marker = None

        self._auth_state = AuthState.AUTHENTICATED if marker else AuthState.UNAUTHENTICATED
        return marker is not None

    def mark_authenticated(self) -> None:
        self._auth_state = AuthState.AUTHENTICATED

    async def stop(self) -> None:
        """Close the browser. Errors while closing are logged, not raised."""
        logger.info("Stopping browser session...")
        self._auth_state = AuthState.UNKNOWN

        try:
            if self._context:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")
        finally:
            self._context = None
            self._page = None

        try:
            if self._camoufox:
                await self._camoufox.__aexit__(None, None, None)
        except Exception as e:
            logger.warning(f"Error closing camoufox: {e}")
        finally:
            self._camoufox = None
            self._browser = None

        logger.info("Browser session stopped.")
