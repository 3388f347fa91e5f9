from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

import discord

from config.defaults import DEFAULT_THREAD_SCAN_LIMIT
from config.defaults import EMPTY_ROOM_NOTICE_TTL_SECONDS
from config.defaults import NOTICE_TTL_SECONDS
from config.defaults import PRIVATE_ROOM_MARKER
from config.defaults import THREAD_AUTO_ARCHIVE_MINUTES
from misc.discord_gates import ROOM_DESTINATION
from misc.discord_gates import ROOM_PRIVATE
from misc.discord_gates import classify_room
from misc.discord_gates import should_ignore_message
from routing.categories import Category
from routing.classifier import extract_urls
from routing.classifier import group_message_links
from routing.destinations import DestinationRegistry
from routing.summary import best_display_name
from routing.summary import compose_summary
from routing.summary import empty_room_notice
from routing.summary import private_room_warning
from routing.summary import relocation_notice
from routing.summary import thread_redirect_notice
from routing.summary import thread_repost_body
from routing.threads import get_or_create_active_thread

MAX_REPOST_FILES = 10


@dataclass(slots=True)
class RelocationOutcome:
    needed: int = 0
    routed: list[tuple[Category, int]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def should_delete_original(self) -> bool:
        # A failed send keeps the original; a category with no room is only logged.
        return bool(self.routed) and not self.failed


@dataclass(slots=True)
class RouteResult:
    action: str
    categories: list[str] = field(default_factory=list)


async def relocate_links(
    message: Any,
    grouped: dict[str, list[str]],
    *,
    registry: DestinationRegistry,
    original_timestamp: datetime | None = None,
    log_tag: str = "[Router]",
) -> RelocationOutcome:
    """
    Send one summary record per category group whose destination is not the message's
    own channel. Never deletes anything; callers decide from the outcome.
    """
    outcome = RelocationOutcome()
    guild_id = int(message.guild.id)
    current_channel_id = int(message.channel.id)

    for category_key, urls in grouped.items():
        destination = registry.destination_for(guild_id, category_key)
        if destination is not None and int(destination.id) == current_channel_id:
            continue
        outcome.needed += 1
        if destination is None:
            print(f"{log_tag} No destination channel for category={category_key} guild={guild_id}")
            outcome.unresolved.append(category_key)
            continue

        category = registry.category(category_key)
        record = compose_summary(
            category,
            urls,
            message.author,
            origin_channel=message.channel,
            original_timestamp=original_timestamp,
        )
        try:
            await destination.send(embed=record.to_embed())
        except discord.HTTPException as e:
            print(
                f"{log_tag} Could not send summary category={category_key} "
                f"message={message.id} dest={destination.id}: {e}"
            )
            outcome.failed.append(category_key)
            continue
        outcome.routed.append((category, int(destination.id)))

    return outcome


class LinkRouter:
    def __init__(
        self,
        *,
        registry: DestinationRegistry,
        bot_user_id: Callable[[], int | None],
        private_marker: str = PRIVATE_ROOM_MARKER,
        thread_scan_limit: int = DEFAULT_THREAD_SCAN_LIMIT,
        thread_auto_archive_minutes: int = THREAD_AUTO_ARCHIVE_MINUTES,
        notice_ttl_seconds: float = NOTICE_TTL_SECONDS,
        empty_room_notice_ttl_seconds: float = EMPTY_ROOM_NOTICE_TTL_SECONDS,
    ) -> None:
        self.registry = registry
        self.bot_user_id = bot_user_id
        self.private_marker = private_marker
        self.thread_scan_limit = int(thread_scan_limit)
        self.thread_auto_archive_minutes = int(thread_auto_archive_minutes)
        self.notice_ttl_seconds = float(notice_ttl_seconds)
        self.empty_room_notice_ttl_seconds = float(empty_room_notice_ttl_seconds)

    def resolve_room_role(self, channel: Any, guild_id: int) -> str:
        return classify_room(
            channel,
            is_destination=self.registry.is_destination(guild_id, channel.id),
            private_marker=self.private_marker,
        )

    async def handle_message(self, message: Any) -> RouteResult:
        if should_ignore_message(message):
            return RouteResult("ignored")
        guild_id = int(message.guild.id)
        if not self.registry.is_ready(guild_id):
            return RouteResult("not_ready")

        role = self.resolve_room_role(message.channel, guild_id)
        if role == ROOM_DESTINATION:
            return await self._redirect_to_thread(message)
        if role == ROOM_PRIVATE:
            return await self._block_private_links(message)
        return await self._route_links(message)

    async def _redirect_to_thread(self, message: Any) -> RouteResult:
        channel = message.channel
        author = message.author
        try:
            saved_content = message.content
            saved_files = [await a.to_file() for a in list(message.attachments)[:MAX_REPOST_FILES]]

            await message.delete()

            bot_user_id = self.bot_user_id()
            if bot_user_id is None:
                raise RuntimeError("bot user is not available yet")
            thread = await get_or_create_active_thread(
                channel,
                bot_user_id=bot_user_id,
                limit=self.thread_scan_limit,
                auto_archive_minutes=self.thread_auto_archive_minutes,
            )

            if thread is None:
                await channel.send(empty_room_notice(author.id), delete_after=self.empty_room_notice_ttl_seconds)
                print(f"[Router] strict channel={channel.id} has no summary yet; author={author.id} warned")
                return RouteResult("empty_room")

            repost: dict[str, Any] = {"content": thread_repost_body(best_display_name(author), saved_content)}
            if saved_files:
                repost["files"] = saved_files
            await thread.send(**repost)
            await channel.send(thread_redirect_notice(author.id, thread.id), delete_after=self.notice_ttl_seconds)
            print(f"[Router] strict channel={channel.id} moved message from author={author.id} to thread={thread.id}")
            return RouteResult("redirected")
        except Exception as e:
            print(f"[Router] Error enforcing strict channel {channel.id}: {e}")
            return RouteResult("failed")

    async def _block_private_links(self, message: Any) -> RouteResult:
        if not extract_urls(message.content):
            return RouteResult("no_links")
        try:
            await message.delete()
            await message.channel.send(private_room_warning(message.author.id), delete_after=self.notice_ttl_seconds)
        except discord.HTTPException as e:
            print(f"[Router] Error handling private channel link in {message.channel.id}: {e}")
            return RouteResult("failed")
        print(f"[Router] blocked link in private channel={message.channel.id} author={message.author.id}")
        return RouteResult("blocked")

    async def _route_links(self, message: Any) -> RouteResult:
        grouped = group_message_links(message.content, self.registry.categories)
        if not grouped:
            return RouteResult("no_links")

        outcome = await relocate_links(message, grouped, registry=self.registry)
        routed_keys = [category.key for category, _ in outcome.routed]
        if outcome.needed == 0:
            return RouteResult("already_home")
        if not outcome.routed:
            return RouteResult("failed", outcome.failed + outcome.unresolved)
        if not outcome.should_delete_original:
            print(
                f"[Router] partial relocation message={message.id} routed={routed_keys} "
                f"failed={outcome.failed}; original kept"
            )
            return RouteResult("partial", routed_keys)

        try:
            await message.delete()
            await message.channel.send(
                relocation_notice(message.author.id, outcome.routed),
                delete_after=self.notice_ttl_seconds,
            )
        except discord.HTTPException as e:
            print(f"[Router] Error deleting original message {message.id}: {e}")
            return RouteResult("failed", routed_keys)

        print(f"[Router] relocated message={message.id} channel={message.channel.id} categories={routed_keys}")
        return RouteResult("relocated", routed_keys)
