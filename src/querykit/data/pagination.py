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
"""Normalise raw paging input into a valid :class:`Pageable`.

Nothing here raises on bad input: a missing or invalid page falls back to
the first page, an oversized page is capped, and a bad sort clause is
dropped on its own while the rest of the sort still applies.

Example::

    resolver = PaginationResolver()
    resolver.resolve(0, 500, "category, prop_key desc, 1bad")
    # Pageable(page=1, size=200,
    #          sort=Sort((Order("category", "asc"), Order("prop_key", "desc"))))
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection
from typing import Any

from querykit.config.properties.data import PaginationProperties
from querykit.core.config import Config
from querykit.data.pageable import Direction, Order, Pageable, Sort

_logger = logging.getLogger(__name__)

_SORT_FIELD_RE = re.compile(r"[A-Za-z0-9_.]+")

_DIRECTIONS: dict[str, Direction] = {"asc": "asc", "desc": "desc"}


class PaginationResolver:
    """Turn raw page number, page size and sort expression into a :class:`Pageable`."""

    def __init__(self, properties: PaginationProperties | None = None) -> None:
        self._props = properties or PaginationProperties()

    @classmethod
    def from_config(cls, config: Config) -> PaginationResolver:
        """Build a resolver from ``querykit.data.pagination.*`` settings."""
        return cls(config.bind(PaginationProperties))

    @property
    def max_size(self) -> int:
        return self._props.max_size

    def resolve(
        self,
        page: Any = None,
        size: Any = None,
        sort: str | None = None,
        allowed_sort_fields: Collection[str] | None = None,
    ) -> Pageable:
        """Resolve raw paging input.

        Args:
            page: 1-based page number; ``None`` or ``< 1`` means the first page.
            size: Page size; ``None`` or ``< 1`` means the default size, values
                above the maximum are capped.
            sort: Comma separated ``"<field>[ asc|desc]"`` clauses.
            allowed_sort_fields: If non-empty, clauses on other fields are dropped.
        """
        return Pageable(
            page=self._sanitize_page(page),
            size=self._sanitize_size(size),
            sort=self.parse_sort(sort, allowed_sort_fields),
        )

    def resolve_request(self, request: Any, allowed_sort_fields: Collection[str] | None = None) -> Pageable:
        """Resolve paging from a filter record's ``page_number``/``page_size``/``sort``."""
        return self.resolve(
            getattr(request, "page_number", None),
            getattr(request, "page_size", None),
            getattr(request, "sort", None),
            allowed_sort_fields,
        )

    def _sanitize_page(self, page: Any) -> int:
        value = _to_int(page)
        if value is None or value < 1:
            return self._props.default_page
        return value

    def _sanitize_size(self, size: Any) -> int:
        value = _to_int(size)
        if value is None or value < 1:
            return self._props.default_size
        if value > self._props.max_size:
            _logger.warning(
                "Requested page size %d exceeds max %d, clamping.",
                value,
                self._props.max_size,
            )
            return self._props.max_size
        return value

    def parse_sort(self, sort: str | None, allowed_sort_fields: Collection[str] | None = None) -> Sort:
        """Parse a sort expression, dropping invalid or disallowed clauses."""
        if sort is None or not sort.strip():
            return Sort.unsorted()

        orders: list[Order] = []
        for clause in sort.split(","):
            trimmed = clause.strip()
            if not trimmed:
                continue

            parts = trimmed.split(None, 1)
            field = parts[0]

            if not is_valid_sort_field(field):
                _logger.warning("Invalid sort field '%s', ignoring.", field)
                continue

            if allowed_sort_fields and field not in allowed_sort_fields:
                _logger.warning("Sort field '%s' not allowed, ignoring.", field)
                continue

            direction = _parse_direction(parts[1] if len(parts) > 1 else "asc")
            orders.append(Order(property=field, direction=direction))

        return Sort(orders=tuple(orders))


def is_valid_sort_field(field: str) -> bool:
    """``[A-Za-z0-9_.]+`` where every dot-separated segment is an identifier."""
    if not _SORT_FIELD_RE.fullmatch(field):
        return False
    return all(segment.isidentifier() for segment in field.split("."))


def _parse_direction(token: str) -> Direction:
    direction = _DIRECTIONS.get(token.strip().lower())
    if direction is None:
        _logger.warning("Invalid sort direction '%s', defaulting to ASC.", token)
        return "asc"
    return direction


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        _logger.warning("Ignoring non-numeric paging value '%s'", value)
        return None
