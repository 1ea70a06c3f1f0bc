"""Target channel URL, CSS selectors, and client-side timing constants."""

# ── URLs ─────────────────────────────────────────────────────────────────────

DEFAULT_TARGET_URL = "https://discord.com/channels/1419249274356502600/1419325841099329678"

# ── CSS Selectors ────────────────────────────────────────────────────────────

SELECTORS = {
    # Login page
    "email_input": 'input[name="email"]',
    "password_input": 'input[name="password"]',

    # Channel view
    "channel_list": 'ul[aria-label="Channels"]',

    # Only rendered after login
    "logged_in_check": 'div[aria-label="User area"]',
}

# ── Message Command ──────────────────────────────────────────────────────────

# Typed after "/" to pick the slash command from the autocomplete list.
COMMAND_TOKEN = "da"

# ── Timing (ms) ──────────────────────────────────────────────────────────────
# Fixed waits matched to the chat client's rendering speed. They are not
# readiness checks; if the client gets slower these need raising.

LOGIN_SETTLE_MS = 500
KEY_DELAY_MS = 100
COMMAND_SETTLE_MS = 1000

NAVIGATION_TIMEOUT_MS = 90000
LOCATE_TIMEOUT_MS = 10000

# ── Schedule ─────────────────────────────────────────────────────────────────

DEFAULT_CRON_SCHEDULE = "*/2 * * * *"  # every 2 minutes
DEFAULT_PORT = 4567
DEFAULT_MAX_RETRIES = 3
