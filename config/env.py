from __future__ import annotations

import os
import re
from datetime import datetime
from typing import Iterable, Mapping

from config.defaults import DEFAULT_BACKFILL_AFTER
from config.defaults import TOKEN_PLACEHOLDERS
from misc.discord_timestamps import parse_iso_utc
from routing.destinations import channel_env_name
from routing.destinations import parse_channel_id


def parse_id_set(raw: str | None) -> set[int]:
    if not raw:
        return set()
    out: set[int] = set()
    for tok in re.split(r"[\s,;]+", raw.strip()):
        if not tok:
            continue
        if re.fullmatch(r"\d{8,22}", tok):
            out.add(int(tok))
    return out


def env_flag(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip() == "1"


def env_float(name: str, default: float, environ: Mapping[str, str] | None = None) -> float:
    env = os.environ if environ is None else environ
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        print(f"[CFG] invalid {name}={raw!r}; falling back to {default}")
        return default
    if value < 0:
        print(f"[CFG] negative {name}={raw!r}; falling back to {default}")
        return default
    return value


def resolve_token(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    token = (env.get("DISCORD_TOKEN") or env.get("DISCORD_BOT_TOKEN") or "").strip()
    if token in TOKEN_PLACEHOLDERS:
        raise RuntimeError("Missing DISCORD_TOKEN env var (or it is still the placeholder value)")
    return token


def resolve_backfill_after(raw: str | None) -> datetime:
    if raw is None or not raw.strip():
        return parse_iso_utc(DEFAULT_BACKFILL_AFTER)
    try:
        return parse_iso_utc(raw)
    except ValueError:
        print(f"[CFG] invalid backfill cutoff {raw!r}; falling back to {DEFAULT_BACKFILL_AFTER}")
        return parse_iso_utc(DEFAULT_BACKFILL_AFTER)


def resolve_configured_channel_ids(
    env_prefix: str,
    category_keys: Iterable[str],
    environ: Mapping[str, str] | None = None,
) -> dict[str, int | None]:
    env = os.environ if environ is None else environ
    out: dict[str, int | None] = {}
    for key in category_keys:
        name = channel_env_name(env_prefix, key)
        raw = env.get(name)
        value = parse_channel_id(raw)
        if raw and raw.strip() and value is None:
            print(f"[CFG] ignoring {name}={raw!r}; expected a numeric channel id")
        out[key] = value
    return out
