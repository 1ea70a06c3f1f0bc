import unittest

from channel_pinger.constants import SELECTORS
from channel_pinger.models.task import StepResult
from channel_pinger.session_manager.messenger import send_message
from fakes import FakePage, make_settings

CHANNELS = SELECTORS["channel_list"]


class SendMessageTests(unittest.IsolatedAsyncioTestCase):
    async def test_key_sequence(self) -> None:
        page = FakePage(appears_on={CHANNELS: 1})

        result = await send_message(page, make_settings())

        self.assertEqual(result, StepResult.SUCCESS)
        self.assertEqual(
            page.key_events(),
            [
                ("press", "/"),
                ("type", "da", 100),
                ("wait", 1000),
                ("press", "Enter"),
                ("wait", 1000),
                ("press", "Enter"),
            ],
        )

    async def test_channel_list_found_on_third_attempt(self) -> None:
        page = FakePage(appears_on={CHANNELS: 3})

        result = await send_message(page, make_settings(max_retries=3, locate_timeout_ms=10))

        self.assertEqual(result, StepResult.SUCCESS)
        self.assertEqual(page.find_calls[CHANNELS], 3)
        self.assertEqual(page.reload_calls, 2)

    async def test_missing_channel_list_sends_nothing(self) -> None:
        page = FakePage()

        result = await send_message(page, make_settings(max_retries=3, locate_timeout_ms=10))

        self.assertEqual(result, StepResult.NOT_FOUND)
        self.assertEqual(page.find_calls[CHANNELS], 3)
        self.assertEqual(page.reload_calls, 2)
        self.assertEqual(page.key_events(), [])

    async def test_custom_command_token(self) -> None:
        page = FakePage(appears_on={CHANNELS: 1})

        await send_message(page, make_settings(command_token="bump", key_delay_ms=0))

        self.assertIn(("type", "bump", 0), page.key_events())

    async def test_keyboard_failure_is_reported(self) -> None:
        page = FakePage(appears_on={CHANNELS: 1}, fail_on_key=True)

        self.assertEqual(await send_message(page, make_settings()), StepResult.ERROR)


if __name__ == "__main__":
    unittest.main()
