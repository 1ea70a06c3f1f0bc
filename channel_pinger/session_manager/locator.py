"""Bounded search for a UI element, reloading the page between attempts."""

from __future__ import annotations

import logging
import sys

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..constants import LOCATE_TIMEOUT_MS

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


async def locate(
    page: Page,
    selector: str,
    max_attempts: int,
    timeout_ms: int = LOCATE_TIMEOUT_MS,
) -> bool:
    """Wait for `selector` to appear, reloading the page after each miss.

    Each attempt waits up to `timeout_ms`. A miss with attempts left triggers
    a reload that only waits for DOMContentLoaded; the element wait that
    follows is the real readiness check, so the reload does not also sit
    out the chat client's background traffic. So at most `max_attempts` waits and `max_attempts - 1`
    reloads happen before giving up.

    Returns:
        True as soon as the selector is found, False after the last attempt.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            await page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightError:
            logger.warning(f'Selector "{selector}" not found, retrying... ({attempt}/{attempts})')

        if attempt < attempts:
            try:
                await page.reload(wait_until="domcontentloaded")
            except PlaywrightError as e:
                logger.warning(f"Reload failed, trying the selector anyway: {e}")

    logger.error(f'Selector "{selector}" not found after {attempts} attempts.')
    return False
