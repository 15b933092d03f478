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
"""Paging directive: which page, how big, and in what order.

A :class:`Pageable` is valid by construction (page and size at least 1).
Untrusted input goes through
:class:`~querykit.data.pagination.PaginationResolver` first, which clamps
and cleans it instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class Order:
    """Sort key: a (possibly dotted) property and a direction."""

    property: str
    direction: Direction = "asc"

    @classmethod
    def asc(cls, property: str) -> Order:
        return cls(property, "asc")

    @classmethod
    def desc(cls, property: str) -> Order:
        return cls(property, "desc")

    @property
    def is_ascending(self) -> bool:
        return self.direction == "asc"


@dataclass(frozen=True)
class Sort:
    """Ordered sort keys; the first key is the most significant."""

    orders: tuple[Order, ...] = ()

    @classmethod
    def by(cls, *keys: Order | str) -> Sort:
        """``Sort.by("category", Order.desc("prop_key"))``; bare names sort ascending."""
        return cls(tuple(key if isinstance(key, Order) else Order.asc(key) for key in keys))

    @classmethod
    def unsorted(cls) -> Sort:
        return cls()

    @property
    def is_sorted(self) -> bool:
        return len(self.orders) > 0

    @property
    def properties(self) -> list[str]:
        return [order.property for order in self.orders]

    def and_then(self, other: Sort) -> Sort:
        """This sort's keys followed by *other*'s."""
        return Sort(self.orders + other.orders)


@dataclass(frozen=True)
class Pageable:
    """1-based page number, page size and sort.

    ``offset`` is the only place a zero-based row position is derived.
    """

    page: int = 1
    size: int = 20
    sort: Sort = field(default_factory=Sort.unsorted)

    def __post_init__(self) -> None:
        if self.page < 1 or self.size < 1:
            raise ValueError(f"page and size must be >= 1, got page={self.page}, size={self.size}")

    @classmethod
    def of(cls, page: int, size: int, sort: Sort | None = None) -> Pageable:
        return cls(page, size, sort or Sort.unsorted())

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size
