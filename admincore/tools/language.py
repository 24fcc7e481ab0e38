"""Parsing of HTTP Accept-Language headers."""

from __future__ import annotations

from collections.abc import Iterable


def _parse_quality(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid quality {text!r}")
    return float(text)


def parse_accept_language(
    languages: str, supported_languages: Iterable[str] | None = None
) -> list[str]:
    """Return the language codes of ``languages`` ordered by quality, best first.

    Entries without a usable quality rank by their position, earlier first.
    If ``supported_languages`` is given, only codes found in it are kept.
    """
    supported = list(supported_languages or ())
    entries = languages.split(",")
    total = len(entries)
    ranked: list[tuple[str, float]] = []
    for position, raw in enumerate(entries):
        entry = raw.strip().lower()
        if not entry:
            continue
        name, sep, param = entry.partition(";")
        if supported and name not in supported:
            continue
        quality = 0.0
        if sep and param.startswith("q="):
            try:
                quality = _parse_quality(param[2:])
            except ValueError:
                quality = 1.0
        if quality == 0:
            quality = float(total - position)
        ranked.append((name, quality))
    ranked.sort(key=lambda pair: -pair[1])
    return [name for name, _ in ranked]