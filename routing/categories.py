from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True, slots=True)
class Category:
    key: str
    pattern: re.Pattern[str] | None
    color: int
    icon: str
    title: str
    channel_name: str
    topic: str
    notice_label: str

    @property
    def is_default(self) -> bool:
        return self.pattern is None

    def matches(self, url: str) -> bool:
        if self.pattern is None:
            return True
        return self.pattern.search(url or "") is not None


def _compile(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    return re.compile(pattern, flags=re.IGNORECASE)


def default_categories() -> list[Category]:
    return [
        Category(
            key="youtube",
            pattern=_compile(r"https?://(www\.)?(youtube\.com|youtu\.be|m\.youtube\.com)(/\S*)?"),
            color=0xFF0000,
            icon="📺",
            title="YouTube Link",
            channel_name="youtube",
            topic="📺 YouTube links only — create a thread under any link to discuss it!",
            notice_label="YouTube link",
        ),
        Category(
            key="steam",
            pattern=_compile(r"https?://(store\.steampowered\.com)(/\S*)?"),
            color=0x1B2838,
            icon="🎮",
            title="Steam Store Link",
            channel_name="games",
            topic="🎮 Steam links only — create a thread under any link to discuss it!",
            notice_label="Steam link",
        ),
        Category(
            key="other",
            pattern=None,
            color=0x3498DB,
            icon="🔗",
            title="Links",
            channel_name="links-channel",
            topic="🔗 Links only — create a thread under any link to discuss it!",
            notice_label="Link",
        ),
    ]


def _parse_color(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid color: {value!r}")
    if isinstance(value, int):
        out = value
    else:
        text = str(value or "").strip().lower()
        if text.startswith("#"):
            text = "0x" + text[1:]
        try:
            out = int(text, 0)
        except ValueError as exc:
            raise ValueError(f"Invalid color: {value!r}") from exc
    if out < 0 or out > 0xFFFFFF:
        raise ValueError(f"Color out of range: {value!r}")
    return out


def _required_text(entry: dict[str, Any], name: str) -> str:
    text = str(entry.get(name) or "").strip()
    if not text:
        raise ValueError(f"Category {entry.get('key')!r} is missing {name!r}")
    return text


def _category_from_entry(entry: Any) -> Category:
    if not isinstance(entry, dict):
        raise ValueError("Each category must be a mapping")
    key = _required_text(entry, "key").lower()
    raw_pattern = entry.get("pattern")
    try:
        pattern = _compile(str(raw_pattern)) if raw_pattern is not None else None
    except re.error as exc:
        raise ValueError(f"Category {key!r} has an invalid pattern: {exc}") from exc
    title = _required_text(entry, "title")
    return Category(
        key=key,
        pattern=pattern,
        color=_parse_color(entry.get("color", 0x3498DB)),
        icon=str(entry.get("icon") or "🔗").strip(),
        title=title,
        channel_name=_required_text(entry, "channel_name"),
        topic=str(entry.get("topic") or "").strip(),
        notice_label=str(entry.get("notice_label") or title).strip(),
    )


def validate_categories(categories: list[Category]) -> list[Category]:
    """
    Enforce unique keys and exactly one catch-all category.
    Returns the categories with the catch-all moved to the end.
    """
    if not categories:
        raise ValueError("At least one category is required")
    seen: set[str] = set()
    for category in categories:
        if category.key in seen:
            raise ValueError(f"Duplicate category key: {category.key}")
        seen.add(category.key)

    defaults = [c for c in categories if c.is_default]
    if len(defaults) != 1:
        raise ValueError(f"Expected exactly one category with a null pattern, found {len(defaults)}")
    return [c for c in categories if not c.is_default] + defaults


def load_categories(path: str | Path | None) -> tuple[list[Category], str | None]:
    """
    Returns (categories, warning_message). warning_message is None on clean load.
    """
    defaults = default_categories()
    if not path:
        return (defaults, "Category table path missing; using built-in defaults.")

    p = Path(path)
    if not p.exists():
        return (defaults, f"Category table not found at {p}; using built-in defaults.")

    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as exc:
        return (defaults, f"Failed to read category table from {p}: {exc}; using built-in defaults.")

    if not isinstance(payload, dict) or not isinstance(payload.get("categories"), list):
        return (defaults, f"Invalid category table format in {p}; using built-in defaults.")

    try:
        categories = validate_categories([_category_from_entry(e) for e in payload["categories"]])
    except ValueError as exc:
        return (defaults, f"Invalid category table in {p}: {exc}; using built-in defaults.")
    return (categories, None)


def categories_by_key(categories: list[Category]) -> dict[str, Category]:
    return {c.key: c for c in categories}
