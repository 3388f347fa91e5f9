from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import discord

from config.defaults import DEFAULT_THREAD_SCAN_LIMIT
from config.defaults import THREAD_AUTO_ARCHIVE_MINUTES
from config.defaults import THREAD_NAME_MAX_CHARS

THREAD_REASON = "Link Router: auto-created discussion thread"
FALLBACK_THREAD_TITLE = "Link Discussion"


def thread_name_for(embed: Any, max_chars: int = THREAD_NAME_MAX_CHARS) -> str:
    title = str(getattr(embed, "title", None) or FALLBACK_THREAD_TITLE)
    description = str(getattr(embed, "description", None) or "")
    first_line = description.split("\n", 1)[0].strip()

    name = f"💬 {title}"
    if first_line:
        parsed = urlparse(first_line)
        if parsed.scheme in {"http", "https"} and parsed.hostname:
            name = f"💬 {parsed.hostname}{parsed.path}"
    return name[:max_chars]


async def find_latest_summary(channel: Any, bot_user_id: int, limit: int = DEFAULT_THREAD_SCAN_LIMIT) -> Any | None:
    # history() yields newest first, so the first hit is the active anchor.
    async for msg in channel.history(limit=max(1, int(limit))):
        if int(msg.author.id) == int(bot_user_id) and msg.embeds:
            return msg
    return None


async def _existing_thread(anchor: Any) -> Any | None:
    thread = getattr(anchor, "thread", None)
    if thread is not None:
        return thread
    flags = getattr(anchor, "flags", None)
    if not getattr(flags, "has_thread", False):
        return None
    # Archived threads are not kept in the gateway cache; the thread id is the message id.
    try:
        return await anchor.guild.fetch_channel(anchor.id)
    except discord.HTTPException as e:
        print(f"[Threads] thread for message {anchor.id} could not be fetched: {e}")
        return None


async def _reopen(thread: Any) -> Any:
    if getattr(thread, "archived", False):
        reopened = await thread.edit(archived=False)
        print(f"[Threads] unarchived thread {thread.id}")
        return reopened or thread
    return thread


async def get_or_create_active_thread(
    channel: Any,
    *,
    bot_user_id: int,
    limit: int = DEFAULT_THREAD_SCAN_LIMIT,
    auto_archive_minutes: int = THREAD_AUTO_ARCHIVE_MINUTES,
) -> Any | None:
    """
    Thread anchored to the newest summary record in `channel`, creating or unarchiving
    it as needed. Returns None when the channel holds no summary record yet.
    """
    anchor = await find_latest_summary(channel, bot_user_id, limit)
    if anchor is None:
        return None

    existing = await _existing_thread(anchor)
    if existing is not None:
        return await _reopen(existing)

    name = thread_name_for(anchor.embeds[0])
    try:
        thread = await anchor.create_thread(
            name=name,
            auto_archive_duration=int(auto_archive_minutes),
            reason=THREAD_REASON,
        )
    except discord.HTTPException:
        # Another handler may have opened it first.
        raced = await _fetch_thread_by_anchor(anchor)
        if raced is None:
            raise
        return await _reopen(raced)

    print(f"[Threads] created thread {thread.id} name={name!r} on message {anchor.id}")
    return thread


async def _fetch_thread_by_anchor(anchor: Any) -> Any | None:
    try:
        found = await anchor.guild.fetch_channel(anchor.id)
    except discord.HTTPException:
        return None
    return found if isinstance(found, discord.Thread) else None
