from __future__ import annotations

"""Single source of truth for Discord <t:...> timestamp tags and <@...>/<#...> mention tokens."""

from datetime import datetime
from datetime import timezone


DISCORD_TIMESTAMP_STYLES = {"t", "T", "d", "D", "f", "F", "R"}


def _validate_style(style: str) -> str:
    clean = str(style or "").strip() or "f"
    if clean not in DISCORD_TIMESTAMP_STYLES:
        raise ValueError(f"Invalid Discord timestamp style: {clean}")
    return clean


def _require_aware_datetime(value: datetime, *, arg_name: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValueError(f"{arg_name} must be a datetime")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{arg_name} must be timezone-aware")
    return value


def as_utc(value: datetime) -> datetime:
    # discord.py hands out aware datetimes; naive values are assumed to be UTC.
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_utc(raw: str) -> datetime:
    text = str(raw or "").strip()
    if not text:
        raise ValueError("Empty timestamp")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def format_discord_timestamp(dt: datetime, style: str = "f") -> str:
    aware = _require_aware_datetime(dt, arg_name="dt")
    style_clean = _validate_style(style)
    return f"<t:{int(aware.timestamp())}:{style_clean}>"


def user_mention(user_id: int) -> str:
    return f"<@{int(user_id)}>"


def channel_mention(channel_id: int) -> str:
    return f"<#{int(channel_id)}>"
