"""Turn pasted source text into ordered groups of episode URLs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from ..common.types import ParsedArray, SkippedUrl
from .providers import (
    PROVIDER_PATTERNS,
    check_pattern_table,
    detect_provider,
    provider_from_identifier,
)
from .strategies import (
    DEFAULT_ARRAY_NAME,
    ArrayCandidate,
    ParseStrategy,
    StrategyResult,
    parse_line_list,
    parse_named_arrays,
    parse_single_array,
)

LOGGER = logging.getLogger("cstream_ingest.parsing")

FALLBACK_PROVIDER_NAME = "Source"

STRATEGY_CHAIN: tuple[Callable[[str], StrategyResult], ...] = (
    parse_named_arrays,
    parse_single_array,
    parse_line_list,
)


@dataclass(slots=True)
class ParseOutcome:
    """Arrays found in a paste, the literals dropped, and the dialect used."""

    arrays: list[ParsedArray] = field(default_factory=list)
    skipped: list[SkippedUrl] = field(default_factory=list)
    strategy: ParseStrategy | None = None

    @property
    def url_count(self) -> int:
        return sum(len(array.urls) for array in self.arrays)


def _resolve_provider_name(candidate: ArrayCandidate, strategy: ParseStrategy) -> str:
    detected = detect_provider(candidate.urls[0])
    if detected:
        return detected
    if strategy is ParseStrategy.NAMED_ARRAYS and candidate.name != DEFAULT_ARRAY_NAME:
        derived = provider_from_identifier(candidate.name)
        if derived:
            return derived
    return FALLBACK_PROVIDER_NAME


def _to_parsed_arrays(result: StrategyResult) -> list[ParsedArray]:
    return [
        ParsedArray(
            source_name=candidate.name,
            provider_name=_resolve_provider_name(candidate, result.strategy),
            urls=candidate.urls,
        )
        for candidate in result.candidates
        if candidate.urls
    ]


def parse_source_text(text: str | None) -> ParseOutcome:
    """Run the strategy chain over *text*; the first non-empty result wins."""

    if not text or not text.strip():
        return ParseOutcome()

    last: StrategyResult | None = None
    for strategy_fn in STRATEGY_CHAIN:
        last = strategy_fn(text)
        if last.found_urls:
            arrays = _to_parsed_arrays(last)
            LOGGER.debug(
                "Parsed %d array(s) with %d URL(s) using the %s strategy.",
                len(arrays),
                sum(len(array.urls) for array in arrays),
                last.strategy.value,
            )
            return ParseOutcome(arrays=arrays, skipped=last.skipped, strategy=last.strategy)

    LOGGER.debug("No URL found in %d character(s) of input.", len(text))
    return ParseOutcome(skipped=last.skipped if last is not None else [])


def parse_arrays(text: str | None) -> list[ParsedArray]:
    """Return the URL groups found in *text* (empty when nothing matches)."""

    return parse_source_text(text).arrays


__all__ = [
    "FALLBACK_PROVIDER_NAME",
    "PROVIDER_PATTERNS",
    "ParseOutcome",
    "ParseStrategy",
    "check_pattern_table",
    "detect_provider",
    "parse_arrays",
    "parse_source_text",
    "provider_from_identifier",
]
