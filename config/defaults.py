from __future__ import annotations

import os

# Backfill reaches back to this instant (UTC) and no further.
DEFAULT_BACKFILL_AFTER = "2026-01-01T00:00:00Z"
DEFAULT_BACKFILL_PAGE_SIZE = 100
DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS = 1.0

DEFAULT_THREAD_SCAN_LIMIT = 50
THREAD_AUTO_ARCHIVE_MINUTES = 1440
THREAD_NAME_MAX_CHARS = 100

NOTICE_TTL_SECONDS = 10
EMPTY_ROOM_NOTICE_TTL_SECONDS = 15

DISCORD_MAX_MESSAGE_LEN = 1900  # keep under 2000 hard limit

PRIVATE_ROOM_MARKER = "-private"

TOKEN_PLACEHOLDERS = {"", "your_bot_token_here"}

DEFAULT_CATEGORIES_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "link_categories.yml")
