"""Chunking helpers shared by the batch executor."""

from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from ..common.validation import require_positive

T = TypeVar("T")


def chunk_sequence(items: Sequence[T], size: int) -> Iterable[Sequence[T]]:
    """Yield ``items`` in chunks of at most ``size`` elements."""

    size = require_positive(int(size), name="size")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def plan_waves(
    items: Sequence[T], *, chunk_size: int, max_concurrent_chunks: int
) -> list[list[list[T]]]:
    """Partition *items* into chunks and group the chunks into waves.

    Chunk order is preserved across waves; each wave holds at most
    ``max_concurrent_chunks`` chunks.
    """

    chunks = [list(chunk) for chunk in chunk_sequence(items, chunk_size)]
    return [
        list(wave)
        for wave in chunk_sequence(
            chunks, require_positive(max_concurrent_chunks, name="max_concurrent_chunks")
        )
    ]


__all__ = ["chunk_sequence", "plan_waves"]
