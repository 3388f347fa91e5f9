from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import discord

from config.defaults import DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS
from config.defaults import DEFAULT_BACKFILL_PAGE_SIZE
from config.defaults import PRIVATE_ROOM_MARKER
from misc.discord_gates import is_private_room
from misc.discord_timestamps import as_utc
from routing.classifier import group_message_links
from routing.destinations import DestinationRegistry
from routing.router import relocate_links


@dataclass(slots=True)
class BackfillReport:
    guild_id: int
    moved_by_channel: dict[int, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.moved_by_channel.values())


def _can_backfill(channel: Any, me: Any) -> bool:
    perms = channel.permissions_for(me)
    return bool(perms.view_channel and perms.read_message_history and perms.manage_messages)


def eligible_backfill_channels(
    guild: Any,
    *,
    registry: DestinationRegistry,
    private_marker: str = PRIVATE_ROOM_MARKER,
) -> list[Any]:
    destination_ids = registry.destination_channel_ids(guild.id)
    out = []
    for channel in guild.text_channels:
        if int(channel.id) in destination_ids:
            continue
        if is_private_room(channel, private_marker):
            continue
        if not _can_backfill(channel, guild.me):
            continue
        out.append(channel)
    return out


async def _fetch_page(channel: Any, *, before_id: int | None, page_size: int) -> list[Any]:
    before = discord.Object(id=before_id) if before_id else None
    return [msg async for msg in channel.history(limit=page_size, before=before)]


async def backfill_channel(
    channel: Any,
    *,
    registry: DestinationRegistry,
    backfill_after: datetime,
    page_size: int = DEFAULT_BACKFILL_PAGE_SIZE,
    page_pause_seconds: float = DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS,
) -> int:
    """
    Walk `channel` backwards page by page until the cutoff, relocating links the same
    way the live router does. Returns the number of summary records sent.
    """
    if not hasattr(channel, "id"):
        return 0

    cutoff = as_utc(backfill_after)
    print(f"[Backfill] Scanning channel {channel.id} ({getattr(channel, 'name', 'unknown')})")

    moved = 0
    cursor: int | None = None
    reached_cutoff = False
    while not reached_cutoff:
        try:
            page = await _fetch_page(channel, before_id=cursor, page_size=page_size)
        except discord.HTTPException as e:
            print(f"[Backfill] Could not fetch messages in channel {channel.id}: {e}")
            break
        if not page:
            break

        for msg in page:
            if as_utc(msg.created_at) < cutoff:
                reached_cutoff = True
                break
            if msg.author.bot:
                continue

            grouped = group_message_links(msg.content, registry.categories)
            if not grouped:
                continue

            outcome = await relocate_links(
                msg,
                grouped,
                registry=registry,
                original_timestamp=msg.created_at,
                log_tag="[Backfill]",
            )
            moved += len(outcome.routed)
            if outcome.failed and outcome.routed:
                print(f"[Backfill] partial relocation message={msg.id} failed={outcome.failed}; original deleted")
            # Deleted on any relocation; failed groups are not retried.
            if outcome.routed:
                try:
                    await msg.delete()
                except discord.HTTPException as e:
                    print(f"[Backfill] Could not delete message {msg.id}: {e}")

        cursor = int(page[-1].id)
        if not reached_cutoff:
            await asyncio.sleep(float(page_pause_seconds))

    return moved


async def backfill_guild(
    guild: Any,
    *,
    registry: DestinationRegistry,
    backfill_after: datetime,
    private_marker: str = PRIVATE_ROOM_MARKER,
    page_size: int = DEFAULT_BACKFILL_PAGE_SIZE,
    page_pause_seconds: float = DEFAULT_BACKFILL_PAGE_PAUSE_SECONDS,
) -> BackfillReport:
    print(f"[Backfill] Starting guild {guild.id} for messages since {as_utc(backfill_after).isoformat()}")
    report = BackfillReport(guild_id=int(guild.id))

    for channel in eligible_backfill_channels(guild, registry=registry, private_marker=private_marker):
        try:
            moved = await backfill_channel(
                channel,
                registry=registry,
                backfill_after=backfill_after,
                page_size=page_size,
                page_pause_seconds=page_pause_seconds,
            )
        except Exception as e:
            print(f"[Backfill] Error in channel {channel.id}: {e}")
            continue
        if moved > 0:
            report.moved_by_channel[int(channel.id)] = moved
            print(f"[Backfill] Moved {moved} link group(s) from #{getattr(channel, 'name', channel.id)}")

    print(f"[Backfill] Done guild {guild.id}. {report.total} total link group(s) organized.")
    return report
