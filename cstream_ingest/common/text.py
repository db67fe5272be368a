"""Text helpers for episode labels and source names."""

from __future__ import annotations

import re
from collections.abc import Iterable

__all__ = [
    "capitalize_first",
    "episode_code",
    "episode_label",
    "base_source_name",
    "format_episode_range",
]

_EPISODE_SUFFIX_RE = re.compile(r"\s*-?\s*S\d{1,2}\s*E\d{1,3}\s*$", re.IGNORECASE)
_BARE_EPISODE_SUFFIX_RE = re.compile(r"\s+E\d{1,3}\s*$", re.IGNORECASE)
_TRAILING_DASH_RE = re.compile(r"\s*-\s*$")

UNKNOWN_SOURCE = "Unknown source"


def capitalize_first(text: str) -> str:
    """Upper-case the first character of *text* and keep the rest untouched."""

    if not text:
        return text
    return text[0].upper() + text[1:]


def episode_code(season: int | None, episode: int) -> str:
    """Return ``S01E02`` (or ``E02`` without a season) for the given numbers."""

    if season is None:
        return f"E{episode:02d}"
    return f"S{season:02d}E{episode:02d}"


def episode_label(
    title: str, provider: str | None, season: int | None, episode: int
) -> str:
    """Build the display label of a bulk-imported episode record."""

    code = episode_code(season, episode)
    if provider:
        return f"{title} - {provider} {code}"
    return f"{title} {code}"


def base_source_name(label: str | None) -> str:
    """Strip the trailing ``SxxEyy`` marker so episodes group by source."""

    if not label:
        return UNKNOWN_SOURCE
    cleaned = _EPISODE_SUFFIX_RE.sub("", label)
    cleaned = _BARE_EPISODE_SUFFIX_RE.sub("", cleaned)
    cleaned = _TRAILING_DASH_RE.sub("", cleaned).strip()
    return cleaned or label


def _format_range(episodes: list[int]) -> str:
    if not episodes:
        return ""
    ordered = sorted(episodes)
    if len(ordered) == 1:
        return f"E{ordered[0]:02d}"
    return f"E{ordered[0]:02d}-E{ordered[-1]:02d}"


def format_episode_range(
    numbers: Iterable[tuple[int | None, int | None]]
) -> str:
    """Summarise ``(season, episode)`` pairs as ``S01 E01-E12``.

    Missing seasons count as season 1; missing or zero episodes only mark the
    season as present. Several seasons are joined with ``", "``.
    """

    seasons: dict[int, set[int]] = {}
    for season, episode in numbers:
        bucket = seasons.setdefault(1 if season is None else season, set())
        if episode:
            bucket.add(episode)

    parts: list[str] = []
    for season in sorted(seasons):
        episodes = list(seasons[season])
        if episodes:
            parts.append(f"S{season:02d} {_format_range(episodes)}")
        else:
            parts.append(f"S{season:02d}")
    return ", ".join(parts)
