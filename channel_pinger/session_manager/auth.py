"""Login step: fill the credential form and submit it."""

from __future__ import annotations

import logging
import sys

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import Settings
from ..constants import SELECTORS
from ..models.task import StepResult
from .locator import locate

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


async def login(page: Page, settings: Settings) -> StepResult:
    """Log in through the email/password form on the current page.

    Never raises on browser errors. Returns NOT_FOUND when the login form
    does not show up and ERROR when the browser fails mid-way.

    After pressing Enter this waits for the page to go network-idle, up to
    the navigation timeout. The chat client can keep a socket open past
    that point, so a timeout here is only logged and the form still counts
    as submitted.
    """
    logger.info("Attempting to log in...")
    if not await locate(
        page, SELECTORS["email_input"], settings.max_retries, settings.locate_timeout_ms
    ):
        logger.error("Login form not found, skipping login.")
        return StepResult.NOT_FOUND

    try:
        await page.fill(SELECTORS["email_input"], settings.email)
        await page.fill(SELECTORS["password_input"], settings.password.get_secret_value())
        await page.wait_for_timeout(settings.login_settle_ms)
        await page.keyboard.press("Enter")
        logger.info("Login form submitted, waiting for the page to settle...")
    except PlaywrightError as e:
        logger.error(f"Login failed: {e}")
        return StepResult.ERROR

    try:
        await page.wait_for_load_state("networkidle", timeout=settings.navigation_timeout_ms)
    except PlaywrightTimeoutError:
        logger.warning("Page did not go idle after login, continuing.")
    except PlaywrightError as e:
        logger.error(f"Page failed after login: {e}")
        return StepResult.ERROR

    logger.info("Login complete.")
    return StepResult.SUCCESS
