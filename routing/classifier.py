from __future__ import annotations

import re
from typing import Iterable

from routing.categories import Category

URL_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+", flags=re.IGNORECASE)

_TRAILING_PUNCTUATION = ".,;:!?'\"*_~"


def _trim_url(url: str) -> str:
    out = url
    while out:
        if out[-1] in _TRAILING_PUNCTUATION:
            out = out[:-1]
            continue
        # "(see https://en.wikipedia.org/wiki/Foo_(bar))" keeps the inner pair
        if out.endswith(")") and out.count(")") > out.count("("):
            out = out[:-1]
            continue
        break
    return out


def extract_urls(text: str | None) -> list[str]:
    urls: list[str] = []
    for match in URL_PATTERN.finditer(text or ""):
        url = _trim_url(match.group(0))
        if re.fullmatch(r"https?://", url, flags=re.IGNORECASE):
            continue
        urls.append(url)
    return urls


def classify_url(url: str, categories: Iterable[Category]) -> Category:
    fallback: Category | None = None
    for category in categories:
        if category.is_default:
            fallback = category
            continue
        if category.matches(url):
            return category
    if fallback is None:
        raise ValueError("Category table has no catch-all category")
    return fallback


def group_urls_by_category(urls: Iterable[str], categories: list[Category]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    seen: set[str] = set()
    for url in urls:
        if url in seen:
            continue
        seen.add(url)
        category = classify_url(url, categories)
        grouped.setdefault(category.key, []).append(url)
    return grouped


def group_message_links(text: str | None, categories: list[Category]) -> dict[str, list[str]]:
    return group_urls_by_category(extract_urls(text), categories)
