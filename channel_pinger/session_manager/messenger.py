"""Message step: send the slash command into the open channel."""

from __future__ import annotations

import logging
import sys

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

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


async def send_message(page: Page, settings: Settings) -> StepResult:
    """Open the command palette, pick the command and submit it.

    The first Enter selects the autocomplete entry, the second one sends
    the composed message.
    """
    logger.info("Waiting for channel to be ready...")
    if not await locate(
        page, SELECTORS["channel_list"], settings.max_retries, settings.locate_timeout_ms
    ):
        logger.error("Channel list not found, message not sent.")
        return StepResult.NOT_FOUND

    logger.info("Channel found. Sending message...")
    try:
        await page.keyboard.press("/")
        await page.keyboard.type(settings.command_token, delay=settings.key_delay_ms)
        await page.wait_for_timeout(settings.command_settle_ms)
        await page.keyboard.press("Enter")
        await page.wait_for_timeout(settings.command_settle_ms)
        await page.keyboard.press("Enter")
    except PlaywrightError as e:
        logger.error(f"Sending message failed: {e}")
        return StepResult.ERROR

    logger.info("Message sent!")
    return StepResult.SUCCESS
