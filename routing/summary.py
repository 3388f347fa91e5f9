from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import discord

from config.defaults import DISCORD_MAX_MESSAGE_LEN
from misc.discord_timestamps import as_utc
from misc.discord_timestamps import channel_mention
from misc.discord_timestamps import format_discord_timestamp
from misc.discord_timestamps import user_mention
from routing.categories import Category

SUMMARY_FOOTER = "💬 Create a thread on this message to discuss!"


def best_display_name(user_obj: Any) -> str:
    for attr in ("display_name", "global_name", "name"):
        value = getattr(user_obj, attr, None)
        if value:
            return str(value)
    return "unknown"


def avatar_url(user_obj: Any, size: int) -> str | None:
    avatar = getattr(user_obj, "display_avatar", None)
    if avatar is None:
        return None
    return str(avatar.with_size(size).url)


@dataclass(frozen=True, slots=True)
class SummaryRecord:
    category: Category
    urls: tuple[str, ...]
    author_id: int
    author_name: str
    author_avatar_url: str | None
    author_thumbnail_url: str | None
    origin_channel_id: int | None
    original_timestamp: datetime | None
    created_at: datetime

    @property
    def display_timestamp(self) -> datetime:
        return self.original_timestamp or self.created_at

    def description(self) -> str:
        lines = list(self.urls)
        lines.append("")
        lines.append(f"**Posted by:** {user_mention(self.author_id)}")
        if self.origin_channel_id is not None:
            lines.append(f"**From:** {channel_mention(self.origin_channel_id)}")
        if self.original_timestamp is not None:
            lines.append(f"**Original date:** {format_discord_timestamp(self.original_timestamp, 'f')}")
        return "\n".join(lines)

    def to_embed(self) -> discord.Embed:
        embed = discord.Embed(
            title=f"{self.category.icon} {self.category.title}",
            description=self.description(),
            colour=discord.Colour(self.category.color),
            timestamp=self.display_timestamp,
        )
        embed.set_author(name=self.author_name, icon_url=self.author_avatar_url)
        embed.set_footer(text=SUMMARY_FOOTER)
        if self.author_thumbnail_url:
            embed.set_thumbnail(url=self.author_thumbnail_url)
        return embed


def compose_summary(
    category: Category,
    urls: list[str],
    author: Any,
    *,
    origin_channel: Any | None = None,
    original_timestamp: datetime | None = None,
    now: datetime | None = None,
) -> SummaryRecord:
    return SummaryRecord(
        category=category,
        urls=tuple(urls),
        author_id=int(author.id),
        author_name=best_display_name(author),
        author_avatar_url=avatar_url(author, 64),
        author_thumbnail_url=avatar_url(author, 128),
        origin_channel_id=int(origin_channel.id) if origin_channel is not None else None,
        original_timestamp=as_utc(original_timestamp) if original_timestamp is not None else None,
        created_at=as_utc(now) if now is not None else datetime.now(timezone.utc),
    )


# =========================
# Notice texts
# =========================

def relocation_notice(author_id: int, routed: list[tuple[Category, int]]) -> str:
    lines = []
    for category, dest_channel_id in routed:
        lines.append(
            f"{category.icon} {user_mention(author_id)} {category.notice_label} detected, "
            f"moved to {channel_mention(dest_channel_id)}. Create a **thread** there to discuss it!"
        )
    return "\n".join(lines)


def private_room_warning(author_id: int) -> str:
    return (
        f"⛔ {user_mention(author_id)} This is a chat-only room. No unsolicited links allowed. "
        "Please use the designated URL channels or send links via DM."
    )


def thread_redirect_notice(author_id: int, thread_id: int) -> str:
    return (
        f"💬 {user_mention(author_id)} Your message was moved to the discussion thread: "
        f"{channel_mention(thread_id)}. Please use threads to discuss links!"
    )


def empty_room_notice(author_id: int) -> str:
    return (
        f"💬 {user_mention(author_id)} This channel is for links only! "
        "No links have been posted yet to create a thread on. "
        "Please wait for a link to be posted, then create a thread to discuss it."
    )


def thread_repost_body(author_name: str, content: str | None, limit: int = DISCORD_MAX_MESSAGE_LEN) -> str:
    text = (content or "").strip()
    if text:
        quoted = "\n".join(f"> {line}" for line in text.splitlines())
    else:
        quoted = "> *(no text)*"
    body = f"**{author_name}** said:\n{quoted}"
    if len(body) > limit:
        body = body[: limit - 3] + "..."
    return body
