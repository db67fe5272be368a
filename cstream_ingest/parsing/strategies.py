"""Parse strategies for the source text dialects an operator may paste.

Each strategy is a pure function from text to a :class:`StrategyResult`.
The chain in :mod:`cstream_ingest.parsing` tries them in order and keeps the
first one that yields at least one URL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ..common.types import SkippedUrl
from ..common.validation import is_valid_url

DEFAULT_ARRAY_NAME = "default"
INVALID_URL_REASON = "invalid URL"

_NAMED_ARRAY_RE = re.compile(
    r"\b(?:var|let|const)\s+(\w+)\s*=\s*\[(.*?)\]"
    r"(?:\s*;|\s*\Z|\s*(?=\b(?:var|let|const)\b))",
    re.DOTALL,
)
_SINGLE_ARRAY_RE = re.compile(r"\s*\[(.*)\]\s*;?\s*", re.DOTALL)
_QUOTED_RE = re.compile(r"'([^'\n]*)'|\"([^\"\n]*)\"|`([^`]*)`")
_LINE_PUNCTUATION = " \t'\"`[],;"


class ParseStrategy(str, Enum):
    """Text dialects recognised by the parser, in priority order."""

    NAMED_ARRAYS = "named_arrays"
    SINGLE_ARRAY = "single_array"
    LINE_LIST = "line_list"


@dataclass(frozen=True, slots=True)
class ArrayCandidate:
    """URLs extracted for one array before provider detection."""

    name: str
    urls: tuple[str, ...]


@dataclass(slots=True)
class StrategyResult:
    strategy: ParseStrategy
    candidates: list[ArrayCandidate] = field(default_factory=list)
    skipped: list[SkippedUrl] = field(default_factory=list)

    @property
    def found_urls(self) -> bool:
        return any(candidate.urls for candidate in self.candidates)


def unique_in_order(values: Iterable[str]) -> tuple[str, ...]:
    """Drop repeated values while keeping first-seen order."""

    return tuple(dict.fromkeys(values))


def _quoted_literals(body: str) -> list[str]:
    literals: list[str] = []
    for match in _QUOTED_RE.finditer(body):
        literal = next(group for group in match.groups() if group is not None)
        literal = literal.strip()
        if literal:
            literals.append(literal)
    return literals


def extract_urls(body: str, *, name: str, skipped: list[SkippedUrl]) -> tuple[str, ...]:
    """Return the valid, de-duplicated URL literals quoted inside *body*.

    Literals that are not URLs are appended to *skipped* with their position
    among the body's literals.
    """

    urls: list[str] = []
    for index, literal in enumerate(_quoted_literals(body)):
        if is_valid_url(literal):
            urls.append(literal)
        else:
            skipped.append(
                SkippedUrl(
                    index=index,
                    url=literal,
                    reason=INVALID_URL_REASON,
                    source_name=name,
                )
            )
    return unique_in_order(urls)


def parse_named_arrays(text: str) -> StrategyResult:
    """Match ``var|let|const <name> = [ ... ]`` declarations."""

    result = StrategyResult(ParseStrategy.NAMED_ARRAYS)
    for match in _NAMED_ARRAY_RE.finditer(text):
        name, body = match.group(1), match.group(2)
        urls = extract_urls(body, name=name, skipped=result.skipped)
        result.candidates.append(ArrayCandidate(name=name, urls=urls))
    return result


def _closing_bracket(text: str, start: int) -> int:
    """Return the index of the ``]`` matching the ``[`` at *start*, or ``-1``."""

    depth = 0
    quote: str | None = None
    for position in range(start, len(text)):
        char = text[position]
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "'\"`":
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return position
    return -1


def parse_single_array(text: str) -> StrategyResult:
    """Accept input that is exactly one anonymous bracketed list."""

    result = StrategyResult(ParseStrategy.SINGLE_ARRAY)
    match = _SINGLE_ARRAY_RE.fullmatch(text)
    if match is None or _closing_bracket(text, match.start(1) - 1) != match.end(1):
        return result
    urls = extract_urls(match.group(1), name=DEFAULT_ARRAY_NAME, skipped=result.skipped)
    result.candidates.append(ArrayCandidate(name=DEFAULT_ARRAY_NAME, urls=urls))
    return result


def parse_line_list(text: str) -> StrategyResult:
    """Treat each non-empty line as one URL candidate."""

    result = StrategyResult(ParseStrategy.LINE_LIST)
    urls: list[str] = []
    for index, line in enumerate(text.splitlines()):
        candidate = line.strip(_LINE_PUNCTUATION)
        if not candidate:
            continue
        if is_valid_url(candidate):
            urls.append(candidate)
        else:
            result.skipped.append(
                SkippedUrl(
                    index=index,
                    url=candidate,
                    reason=INVALID_URL_REASON,
                    source_name=DEFAULT_ARRAY_NAME,
                )
            )
    result.candidates.append(
        ArrayCandidate(name=DEFAULT_ARRAY_NAME, urls=unique_in_order(urls))
    )
    return result


__all__ = [
    "DEFAULT_ARRAY_NAME",
    "ParseStrategy",
    "ArrayCandidate",
    "StrategyResult",
    "unique_in_order",
    "extract_urls",
    "parse_named_arrays",
    "parse_single_array",
    "parse_line_list",
]
