"""Shared utilities used across the repo.

This module is intentionally kept free of MediaWiki and HTTP concepts.
"""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, Sequence, TypeVar

T = TypeVar("T")

PIPE = "|"


class GroupQueue(Generic[T]):
    """Read-only queue that hands out fixed-size, order-preserving batches.

    The cursor advances by `batch_size` on every poll, even when the final
    batch is short, so N items always yield ceil(N / batch_size) batches.
    """

    def __init__(self, items: Iterable[T], batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1 (got {batch_size})")

        self._items: tuple[T, ...] = tuple(items)
        self._batch_size = batch_size
        self._start = 0
        self._end = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def __len__(self) -> int:
        return len(self._items)

    def has_more(self) -> bool:
        """True while unconsumed items remain."""
        return self._start < len(self._items)

    def poll(self) -> list[T]:
        """Return the next batch, or an empty list once exhausted."""
        if not self.has_more():
            return []

        end = min(self._end, len(self._items))
        batch = list(self._items[self._start : end])

        self._start += self._batch_size
        self._end += self._batch_size

        return batch

    def __iter__(self) -> Iterator[list[T]]:
        while self.has_more():
            yield self.poll()


def pipe_fence(values: Iterable[object]) -> str:
    """Join values the way the API expects multi-valued parameters."""

    return PIPE.join(str(value) for value in values)


def contains_none(items: Sequence[object] | Iterable[object]) -> bool:
    return any(item is None for item in items)


def dedupe_preserving_order(items: Iterable[T]) -> list[T]:
    seen: set[T] = set()
    out: list[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out
