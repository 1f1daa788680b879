"""Paginator protocol, an in-memory paginator and query parameter parsing."""

from __future__ import annotations

import math
from typing import Any, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field


@runtime_checkable
class Paginator(Protocol):
    """Read-only view of one page of a result set."""

    @property
    def items(self) -> list[Any]: ...

    @property
    def current_page(self) -> int: ...

    @property
    def per_page(self) -> int: ...

    @property
    def total(self) -> int: ...

    @property
    def last_page(self) -> int: ...

    @property
    def first_item(self) -> int | None: ...

    @property
    def last_item(self) -> int | None: ...

    @property
    def has_more_pages(self) -> bool: ...

    def url(self, page: int) -> str: ...


class ListPaginator:
    """Paginator over an in-memory sequence.

    ``first_item`` and ``last_item`` are 1-based positions of the page
    bounds, or None when the page holds no items.
    """

    def __init__(
        self,
        rows: Sequence[Any],
        page: int = 1,
        per_page: int = 15,
        base_url: str = "",
    ) -> None:
        self._per_page = max(1, per_page)
        self._page = max(1, page)
        self._total = len(rows)
        self._base_url = base_url
        start = (self._page - 1) * self._per_page
        self._items = list(rows[start : start + self._per_page])

    @property
    def items(self) -> list[Any]:
        return self._items

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def per_page(self) -> int:
        return self._per_page

    @property
    def total(self) -> int:
        return self._total

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self._total / self._per_page))

    @property
    def first_item(self) -> int | None:
        if not self._items:
            return None
        return (self._page - 1) * self._per_page + 1

    @property
    def last_item(self) -> int | None:
        first = self.first_item
        if first is None:
            return None
        return first + len(self._items) - 1

    @property
    def has_more_pages(self) -> bool:
        return self._page < self.last_page

    def url(self, page: int) -> str:
        page = max(1, page)
        separator = "&" if "?" in self._base_url else "?"
        return f"{self._base_url}{separator}page={page}"


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class PaginationParams(BaseModel):
    """Validated page/per_page pair taken from query parameters."""

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=15, ge=1)

    @classmethod
    def from_query(
        cls,
        page: Any = None,
        per_page: Any = None,
        *,
        default_per_page: int = 15,
        max_per_page: int = 100,
    ) -> PaginationParams:
        """Parse raw query values; bad input falls back to defaults."""
        size = _coerce_int(per_page, default_per_page) if per_page is not None else default_per_page
        return cls(
            page=max(1, _coerce_int(page, 1)),
            per_page=max(1, min(size, max_per_page)),
        )
