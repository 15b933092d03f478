# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""One slice of a filtered, sorted result set plus the count behind it."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from querykit.data.pageable import Pageable

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Page(Generic[T]):
    """A page of query results.

    Attributes:
        items: Records on this page; at most ``size`` of them.
        total: Number of records matching the query on all pages.
        page: 1-based number of this page.
        size: Requested page size.
    """

    items: list[T]
    total: int
    page: int
    size: int

    def __post_init__(self) -> None:
        if len(self.items) > self.size:
            raise ValueError(f"page holds {len(self.items)} items but size is {self.size}")

    @classmethod
    def of(cls, items: Sequence[T], total: int, pageable: Pageable) -> Page[T]:
        """Build the page *pageable* asked for from its items and the overall match count."""
        return cls(items=list(items), total=total, page=pageable.page, size=pageable.size)

    @property
    def total_pages(self) -> int:
        # ceil(total / size); an empty result has no pages at all
        return math.ceil(self.total / self.size) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def map(self, func: Callable[[T], U]) -> Page[U]:
        """Convert every item with *func*; counts and position are unchanged."""
        return Page(items=[func(item) for item in self.items], total=self.total, page=self.page, size=self.size)
