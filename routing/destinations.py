from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import discord

from routing.categories import Category
from routing.categories import categories_by_key

CREATE_REASON = "Link Router: auto-created destination channel"
PERMISSIONS_REASON = "Link Router: strict link-channel permissions"


@dataclass(slots=True)
class DestinationBinding:
    guild_id: int
    category_key: str
    channel_id: int
    channel: Any
    source: str


def parse_channel_id(raw: object) -> int | None:
    text = str(raw or "").strip()
    if not text.isdigit():
        return None
    value = int(text)
    return value if value > 0 else None


def channel_env_name(env_prefix: str, category_key: str) -> str:
    return f"{env_prefix}{category_key.upper()}_CHANNEL_ID"


def _is_text_channel(channel: Any) -> bool:
    return getattr(channel, "type", None) == discord.ChannelType.text


def strict_default_overwrite() -> discord.PermissionOverwrite:
    # Members browse, react and talk in threads; top-level posts stay bot-only.
    return discord.PermissionOverwrite(
        view_channel=True,
        send_messages=False,
        send_messages_in_threads=True,
        create_public_threads=True,
        create_private_threads=True,
        read_message_history=True,
        add_reactions=True,
    )


def strict_bot_overwrite() -> discord.PermissionOverwrite:
    return discord.PermissionOverwrite(
        view_channel=True,
        send_messages=True,
        manage_messages=True,
        manage_threads=True,
        create_public_threads=True,
        embed_links=True,
        read_message_history=True,
    )


class DestinationRegistry:
    """
    One destination channel per (guild, category), resolved once and cached for the
    process lifetime. Nothing is persisted; resolved ids are only echoed for pinning.
    """

    def __init__(self, categories: list[Category], configured_ids: dict[str, int | None] | None = None) -> None:
        self.categories = list(categories)
        self._by_key = categories_by_key(self.categories)
        self.configured_ids: dict[str, int | None] = {
            c.key: (configured_ids or {}).get(c.key) for c in self.categories
        }
        self._bindings: dict[tuple[int, str], DestinationBinding] = {}
        self._ready_guilds: set[int] = set()

    def category(self, category_key: str) -> Category:
        return self._by_key[category_key]

    def is_ready(self, guild_id: int) -> bool:
        return int(guild_id) in self._ready_guilds

    def binding(self, guild_id: int, category_key: str) -> DestinationBinding | None:
        return self._bindings.get((int(guild_id), category_key))

    def bindings(self, guild_id: int) -> list[DestinationBinding]:
        out = []
        for category in self.categories:
            binding = self.binding(guild_id, category.key)
            if binding is not None:
                out.append(binding)
        return out

    def destination_for(self, guild_id: int, category_key: str) -> Any | None:
        binding = self.binding(guild_id, category_key)
        return binding.channel if binding is not None else None

    def category_for_channel(self, guild_id: int, channel_id: int) -> Category | None:
        for binding in self.bindings(guild_id):
            if binding.channel_id == int(channel_id):
                return self._by_key[binding.category_key]
        return None

    def is_destination(self, guild_id: int, channel_id: int) -> bool:
        return self.category_for_channel(guild_id, channel_id) is not None

    def destination_channel_ids(self, guild_id: int) -> set[int]:
        return {b.channel_id for b in self.bindings(guild_id)}

    def pinning_lines(self, env_prefix: str, guild_id: int) -> list[str]:
        return [
            f"{channel_env_name(env_prefix, b.category_key)}={b.channel_id}"
            for b in self.bindings(guild_id)
        ]

    async def ensure(self, guild: Any, category_key: str) -> Any:
        cached = self.binding(guild.id, category_key)
        if cached is not None:
            return cached.channel

        category = self._by_key[category_key]
        channel, source = await self._resolve(guild, category)
        self._bindings[(int(guild.id), category.key)] = DestinationBinding(
            guild_id=int(guild.id),
            category_key=category.key,
            channel_id=int(channel.id),
            channel=channel,
            source=source,
        )
        print(
            f"[Registry] {category.icon} category={category.key} guild={guild.id} "
            f"channel=#{getattr(channel, 'name', '?')} ({channel.id}) source={source}"
        )
        await self.apply_strict_permissions(channel, guild)
        return channel

    async def _resolve(self, guild: Any, category: Category) -> tuple[Any, str]:
        configured_id = self.configured_ids.get(category.key)
        if configured_id:
            existing = guild.get_channel(int(configured_id))
            if existing is not None and _is_text_channel(existing):
                return (existing, "configured")
            print(
                f"[Registry] configured channel {configured_id} for category={category.key} "
                f"not found in guild={guild.id}; falling back to name lookup"
            )

        by_name = discord.utils.find(
            lambda ch: ch.name == category.channel_name and _is_text_channel(ch),
            guild.text_channels,
        )
        if by_name is not None:
            return (by_name, "by_name")

        print(f"[Registry] {category.icon} creating #{category.channel_name} in guild={guild.id}")
        created = await guild.create_text_channel(
            category.channel_name,
            topic=category.topic or None,
            reason=CREATE_REASON,
        )
        return (created, "created")

    async def ensure_all(self, guild: Any) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for category in self.categories:
            try:
                out[category.key] = await self.ensure(guild, category.key)
            except Exception as e:
                print(f"[Registry] Could not resolve category={category.key} guild={guild.id}: {e}")
        self._ready_guilds.add(int(guild.id))
        return out

    async def apply_strict_permissions(self, channel: Any, guild: Any) -> bool:
        try:
            await channel.set_permissions(
                guild.default_role,
                overwrite=strict_default_overwrite(),
                reason=PERMISSIONS_REASON,
            )
            await channel.set_permissions(
                guild.me,
                overwrite=strict_bot_overwrite(),
                reason=PERMISSIONS_REASON,
            )
        except discord.HTTPException as e:
            print(f"[Registry] Could not set permissions on #{getattr(channel, 'name', '?')}: {e}")
            return False
        print(f"[Registry] strict permissions set on #{getattr(channel, 'name', '?')}")
        return True
