from __future__ import annotations

from typing import Any

import discord

ROOM_DESTINATION = "destination"
ROOM_PRIVATE = "private"
ROOM_ORDINARY = "ordinary"


def message_in_thread(message: Any) -> bool:
    return isinstance(message.channel, discord.Thread)


def should_ignore_message(message: Any) -> bool:
    # Bots (ourselves included), DMs and thread replies are never routed.
    if getattr(message.author, "bot", False):
        return True
    if getattr(message, "guild", None) is None:
        return True
    return message_in_thread(message)


def is_private_room(channel: Any, private_marker: str) -> bool:
    name = str(getattr(channel, "name", "") or "")
    return bool(private_marker) and private_marker in name


def classify_room(channel: Any, *, is_destination: bool, private_marker: str) -> str:
    if is_destination:
        return ROOM_DESTINATION
    if is_private_room(channel, private_marker):
        return ROOM_PRIVATE
    return ROOM_ORDINARY


def user_is_operator(member: Any, owner_user_ids: set[int]) -> bool:
    uid = int(getattr(member, "id", 0) or 0)
    if uid and uid in owner_user_ids:
        return True
    perms = getattr(member, "guild_permissions", None)
    return bool(getattr(perms, "administrator", False))
