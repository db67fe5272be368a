"""Type definitions for parsed sources and stored episode records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaKind(str, Enum):
    """Kinds of media a record can point to."""

    MOVIE = "movie"
    TV_SERIES = "tv"
    ANIME = "anime"

    @classmethod
    def normalize(cls, value: "MediaKind | str | None") -> "MediaKind":
        """Map operator input onto a canonical kind.

        ``"series"`` is an alias of ``"tv"``; anything unrecognised falls back
        to ``"tv"`` because bulk imports are episode lists.
        """

        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text == "series":
            return cls.TV_SERIES
        try:
            return cls(text)
        except ValueError:
            return cls.TV_SERIES


@dataclass(frozen=True, slots=True)
class ParsedArray:
    """One group of episode URLs found in pasted text."""

    source_name: str
    provider_name: str
    urls: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SkippedUrl:
    """A candidate URL dropped before any mutation was attempted."""

    index: int
    url: str
    reason: str
    source_name: str = "default"


class EpisodeRecord(BaseModel):
    """Outbound payload for one streaming source.

    Field names are Pythonic; aliases carry the column names used by the
    record store so ``to_row`` produces the persisted shape directly.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    label: str
    url: str
    media_kind: MediaKind = Field(alias="media_type")
    language: str
    enabled: bool = True
    linked_catalog_id: int = Field(alias="tmdb_id")
    season_number: Optional[int] = None
    episode_number: Optional[int] = None

    @field_validator("media_kind", mode="before")
    @classmethod
    def _normalize_media_kind(cls, value: Any) -> MediaKind:
        return MediaKind.normalize(value)

    def to_row(self) -> dict[str, Any]:
        """Return the record as a store row keyed by column name."""

        return self.model_dump(mode="json", by_alias=True)


class StoredRecord(EpisodeRecord):
    """Persisted record including the fields assigned by the store."""

    id: str
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class RecordDraft:
    """Operator input for a single, non-bulk source."""

    label: str
    base_url: str
    linked_catalog_id: int | None
    media_kind: MediaKind | str = MediaKind.MOVIE
    language: str = "VOSTFR"
    season_number: int | None = None
    episode_number: int | None = None
    enabled: bool = True


@dataclass(slots=True)
class PayloadBatch:
    """Records ready for insertion plus the URLs rejected while building them."""

    records: list[EpisodeRecord] = field(default_factory=list)
    skipped: list[SkippedUrl] = field(default_factory=list)


__all__ = [
    "MediaKind",
    "ParsedArray",
    "SkippedUrl",
    "EpisodeRecord",
    "StoredRecord",
    "RecordDraft",
    "PayloadBatch",
]
