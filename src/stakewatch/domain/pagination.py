"""Fixed-size pagination over a sorted sequence."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class Page[T]:
    items: list[T] = field(default_factory=list)
    number: int = 1
    page_size: int = 50
    total_pages: int = 0
    total_items: int = 0

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 1


def total_pages(length: int, page_size: int) -> int:
    _check_page_size(page_size)
    return math.ceil(length / page_size) if length > 0 else 0


def paginate[T](sequence: Sequence[T], page_size: int, page_number: int) -> list[T]:
    """Return the 1-based ``page_number`` slice; out-of-range pages are empty."""

    _check_page_size(page_size)
    if page_number < 1 or page_number > total_pages(len(sequence), page_size):
        return []
    start = (page_number - 1) * page_size
    return list(sequence[start : start + page_size])


def build_page[T](sequence: Sequence[T], page_size: int, page_number: int) -> Page[T]:
    return Page(
        items=paginate(sequence, page_size, page_number),
        number=page_number,
        page_size=page_size,
        total_pages=total_pages(len(sequence), page_size),
        total_items=len(sequence),
    )


def _check_page_size(page_size: int) -> None:
    if page_size < 1:
        raise ValueError("Page size must be at least 1")
