from __future__ import annotations

import importlib
from datetime import datetime, timezone


def _try_import_or_skip(module_name: str, pip_name: str | None = None) -> bool:
    try:
        importlib.import_module(module_name)
        return True
    except ModuleNotFoundError:
        install_name = pip_name or module_name
        print(
            f"Smoke wiring check skipped: missing dependency '{module_name}'. "
            f"Install requirements and retry (e.g. `pip install {install_name}` "
            f"or `pip install -e .`)."
        )
        return False


def _main() -> int:
    if not _try_import_or_skip("discord", "discord.py"):
        return 0
    if not _try_import_or_skip("yaml", "PyYAML"):
        return 0

    import discord
    from discord.ext import commands
    from config.defaults import DEFAULT_CATEGORIES_PATH
    from misc.runtime_wiring import wire_bot_runtime
    from routing.categories import load_categories
    from routing.destinations import DestinationRegistry

    categories, warning = load_categories(DEFAULT_CATEGORIES_PATH)
    if warning:
        raise RuntimeError(f"Bundled category table did not load cleanly: {warning}")

    intents = discord.Intents.none()
    bot = commands.Bot(command_prefix="!", intents=intents)

    wire_bot_runtime(
        bot,
        registry=DestinationRegistry(categories, {}),
        env_prefix="LINKROUTER_",
        owner_user_ids={123456789012345678},
        private_marker="-private",
        backfill_enabled=False,
        backfill_after=datetime(2026, 1, 1, tzinfo=timezone.utc),
        backfill_page_size=100,
        backfill_page_pause_seconds=0.0,
        thread_scan_limit=50,
        thread_auto_archive_minutes=1440,
        notice_ttl_seconds=10,
        empty_room_notice_ttl_seconds=15,
    )

    expected_commands = {"links.status", "links.backfill"}
    existing_commands = set(bot.all_commands.keys())
    missing = sorted(expected_commands - existing_commands)
    if missing:
        raise RuntimeError(f"Missing expected commands: {missing}")

    for event_name in ("on_ready", "on_message", "on_guild_join"):
        if getattr(bot, event_name, None) is None:
            raise RuntimeError(f"Runtime event {event_name} was not registered")

    print("Smoke wiring check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
