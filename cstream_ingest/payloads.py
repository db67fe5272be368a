"""Build episode records from parsed URL arrays and operator metadata."""

from __future__ import annotations

import re
from typing import Sequence

from .common.text import episode_label
from .common.types import EpisodeRecord, MediaKind, ParsedArray, PayloadBatch, SkippedUrl
from .common.validation import is_valid_url
from .parsing.providers import detect_provider

_EPISODIC_KINDS = (MediaKind.TV_SERIES, MediaKind.ANIME)
_SEASON_EPISODE_SEGMENT_RE = re.compile(r"/(season|episode)/\d+", re.IGNORECASE)


def _label_provider(array: ParsedArray, *, multiple: bool) -> str:
    detected = detect_provider(array.urls[0]) if array.urls else ""
    if detected:
        return detected
    # Several arrays without a detectable host still need distinct labels.
    return array.provider_name if multiple else ""


def build_episode_payloads(
    arrays: Sequence[ParsedArray],
    *,
    title: str,
    language: str,
    season_number: int | None,
    media_kind: MediaKind | str,
    linked_catalog_id: int,
) -> PayloadBatch:
    """Expand *arrays* into one :class:`EpisodeRecord` per URL.

    Each array is numbered on its own starting at episode 1, in URL order.
    URLs failing re-validation are reported in ``skipped`` and keep their
    number, so later episodes are not shifted.
    """

    kind = MediaKind.normalize(media_kind)
    batch = PayloadBatch()
    multiple = len(arrays) > 1
    for array in arrays:
        provider = _label_provider(array, multiple=multiple)
        for index, url in enumerate(array.urls):
            episode_number = index + 1
            if not is_valid_url(url):
                batch.skipped.append(
                    SkippedUrl(
                        index=index,
                        url=url or "",
                        reason="invalid URL",
                        source_name=array.source_name,
                    )
                )
                continue
            batch.records.append(
                EpisodeRecord(
                    label=episode_label(title, provider, season_number, episode_number),
                    url=url,
                    media_kind=kind,
                    language=language,
                    enabled=True,
                    linked_catalog_id=linked_catalog_id,
                    season_number=season_number,
                    episode_number=episode_number,
                )
            )
    return batch


def normalize_base_url(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


def strip_episode_segments(url: str) -> str:
    """Remove ``/season/<n>`` and ``/episode/<n>`` segments from *url*."""

    return normalize_base_url(_SEASON_EPISODE_SEGMENT_RE.sub("", url))


def build_final_url(
    base_url: str,
    media_kind: MediaKind | str,
    season: int | None = None,
    episode: int | None = None,
) -> str:
    """Append season/episode path segments to an episodic base URL."""

    base = normalize_base_url(base_url)
    if MediaKind.normalize(media_kind) not in _EPISODIC_KINDS or not (season or episode):
        return base
    parts = [base]
    if season:
        parts.append(f"season/{season}")
    if episode:
        parts.append(f"episode/{episode}")
    return "/".join(parts)


__all__ = [
    "build_episode_payloads",
    "build_final_url",
    "normalize_base_url",
    "strip_episode_segments",
]
