from __future__ import annotations

from datetime import datetime

from ingestion.service import backfill_guild as backfill_guild_service
from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from misc.commands.commands_links import register as register_links
from misc.discord_gates import user_is_operator
from misc.events_runtime import register_runtime_events
from misc.events_runtime import start_backfill_task
from misc.runtime_deps import RuntimeBootDeps
from misc.runtime_deps import RuntimeDeps
from routing.destinations import DestinationRegistry
from routing.router import LinkRouter


def wire_bot_runtime(
    bot,
    *,
    registry: DestinationRegistry,
    env_prefix: str,
    owner_user_ids: set[int],
    private_marker: str,
    backfill_enabled: bool,
    backfill_after: datetime,
    backfill_page_size: int,
    backfill_page_pause_seconds: float,
    thread_scan_limit: int,
    thread_auto_archive_minutes: int,
    notice_ttl_seconds: float,
    empty_room_notice_ttl_seconds: float,
) -> LinkRouter:
    router = LinkRouter(
        registry=registry,
        bot_user_id=lambda: int(bot.user.id) if bot.user else None,
        private_marker=private_marker,
        thread_scan_limit=thread_scan_limit,
        thread_auto_archive_minutes=thread_auto_archive_minutes,
        notice_ttl_seconds=notice_ttl_seconds,
        empty_room_notice_ttl_seconds=empty_room_notice_ttl_seconds,
    )

    async def backfill_guild(guild):
        return await backfill_guild_service(
            guild,
            registry=registry,
            backfill_after=backfill_after,
            private_marker=private_marker,
            page_size=backfill_page_size,
            page_pause_seconds=backfill_page_pause_seconds,
        )

    boot = RuntimeBootDeps(
        backfill_enabled=backfill_enabled,
        backfill_guild_func=backfill_guild,
    )
    deps = RuntimeDeps(
        registry=registry,
        router=router,
        env_prefix=env_prefix,
    )

    command_deps = CommandDeps(
        registry=registry,
        env_prefix=env_prefix,
        start_backfill=lambda guild: start_backfill_task(bot, guild, boot),
    )
    command_gates = CommandGates(
        user_is_operator=lambda member: user_is_operator(member, owner_user_ids),
    )

    register_links(bot, deps=command_deps, gates=command_gates)
    register_runtime_events(bot, deps=deps, boot=boot)
    return router
