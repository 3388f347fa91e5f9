import os

import discord
from discord.ext import commands
from config.defaults import DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS
from config.defaults import DEFAULT_BACKFILL_PAGE_SIZE
from config.defaults import DEFAULT_CATEGORIES_PATH
from config.defaults import DEFAULT_THREAD_SCAN_LIMIT
from config.defaults import EMPTY_ROOM_NOTICE_TTL_SECONDS
from config.defaults import NOTICE_TTL_SECONDS
from config.defaults import PRIVATE_ROOM_MARKER
from config.defaults import THREAD_AUTO_ARCHIVE_MINUTES
from config.env import env_flag
from config.env import env_float
from config.env import parse_id_set
from config.env import resolve_backfill_after
from config.env import resolve_configured_channel_ids
from config.env import resolve_token
from misc.runtime_wiring import wire_bot_runtime
from routing.categories import load_categories
from routing.destinations import DestinationRegistry

# =========================
# ENV
# =========================
DISCORD_TOKEN = resolve_token()

ENV_PREFIX = "LINKROUTER_"

# =========================
# CATEGORIES
# =========================
CATEGORIES_PATH = os.getenv("LINKROUTER_CATEGORIES_PATH", DEFAULT_CATEGORIES_PATH)
CATEGORIES, CATEGORIES_WARNING = load_categories(CATEGORIES_PATH)
if CATEGORIES_WARNING:
    print(f"[CFG] {CATEGORIES_WARNING}")
print(
    f"[CFG] categories={','.join(c.key for c in CATEGORIES)} "
    f"source={'fallback' if CATEGORIES_WARNING else 'file'} path={CATEGORIES_PATH}"
)

# Pinned destination channels, e.g. LINKROUTER_YOUTUBE_CHANNEL_ID.
# Blank/unset means "find by name or create".
CONFIGURED_CHANNEL_IDS = resolve_configured_channel_ids(ENV_PREFIX, [c.key for c in CATEGORIES])
print(
    "[CFG] pinned_channels="
    + " ".join(f"{key}={value or '-'}" for key, value in CONFIGURED_CHANNEL_IDS.items())
)

# =========================
# BACKFILL
# =========================
BACKFILL_ENABLED = env_flag("LINKROUTER_BACKFILL_ENABLED", True)
BACKFILL_AFTER = resolve_backfill_after(os.getenv("LINKROUTER_BACKFILL_AFTER"))
BACKFILL_PAGE_PAUSE_SECONDS = env_float("LINKROUTER_BACKFILL_PAGE_PAUSE_SECONDS", DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS)
print(
    f"[CFG] backfill_enabled={BACKFILL_ENABLED} after={BACKFILL_AFTER.isoformat()} "
    f"page_size={DEFAULT_BACKFILL_PAGE_SIZE} pause_s={BACKFILL_PAGE_PAUSE_SECONDS}"
)

OWNER_USER_IDS = parse_id_set(os.getenv("LINKROUTER_OWNER_USER_IDS"))
print(f"[CFG] owner_ids={len(OWNER_USER_IDS)} private_marker={PRIVATE_ROOM_MARKER!r}")

# =========================
# BOT
# =========================
intents = discord.Intents.default()
intents.message_content = True

bot = commands.Bot(command_prefix="!", intents=intents)

registry = DestinationRegistry(CATEGORIES, CONFIGURED_CHANNEL_IDS)

wire_bot_runtime(
    bot,
    registry=registry,
    env_prefix=ENV_PREFIX,
    owner_user_ids=OWNER_USER_IDS,
    private_marker=PRIVATE_ROOM_MARKER,
    backfill_enabled=BACKFILL_ENABLED,
    backfill_after=BACKFILL_AFTER,
    backfill_page_size=DEFAULT_BACKFILL_PAGE_SIZE,
    backfill_page_pause_seconds=BACKFILL_PAGE_PAUSE_SECONDS,
    thread_scan_limit=DEFAULT_THREAD_SCAN_LIMIT,
    thread_auto_archive_minutes=THREAD_AUTO_ARCHIVE_MINUTES,
    notice_ttl_seconds=NOTICE_TTL_SECONDS,
    empty_room_notice_ttl_seconds=EMPTY_ROOM_NOTICE_TTL_SECONDS,
)


bot.run(DISCORD_TOKEN)
