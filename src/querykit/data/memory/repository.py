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
"""In-memory backing store.

Keeps entities in insertion order, keyed by their identity attribute.
Useful for tests and for small reference collections that never reach a
database.  Entities are stored by reference; ``save`` of a known identity
replaces the stored object.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from querykit.data.memory.evaluator import SpecificationEvaluator, path_values
from querykit.data.page import Page
from querykit.data.pageable import Pageable, Sort
from querykit.data.paths import validate_sort_properties
from querykit.data.specification import Specification

_logger = logging.getLogger(__name__)

T = TypeVar("T")
ID = TypeVar("ID")


class InMemoryRepository(Generic[T, ID]):
    """Dictionary-backed store implementing :class:`~querykit.data.ports.outbound.BackingStore`.

    Unsorted results come back in insertion order.  When sorting, ``None``
    values sort after everything else ascending and before everything else
    descending.
    """

    def __init__(
        self,
        entity_type: type[T],
        *,
        id_attribute: str = "id",
        id_factory: Callable[[], Any] = uuid.uuid4,
        evaluator: SpecificationEvaluator | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._id_attribute = id_attribute
        self._id_factory = id_factory
        self._evaluator = evaluator or SpecificationEvaluator()
        self._items: dict[Any, T] = {}

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    async def find_all(self) -> list[T]:
        return list(self._items.values())

    async def find_all_by_spec(self, spec: Specification) -> list[T]:
        return self._filter(spec)

    async def find_all_by_spec_paged(self, spec: Specification, pageable: Pageable) -> Page[T]:
        matched = self._sorted(self._filter(spec), pageable.sort)
        items = matched[pageable.offset : pageable.offset + pageable.size]
        return Page.of(items, len(matched), pageable)

    async def find_one(self, spec: Specification) -> T | None:
        matched = self._filter(spec)
        if len(matched) > 1:
            _logger.warning(
                "%d %s records match a single-result lookup, returning the first",
                len(matched),
                self._entity_type.__name__,
            )
        return matched[0] if matched else None

    async def find_by_id(self, id: ID) -> T | None:
        return self._items.get(id)

    async def save(self, entity: T) -> T:
        key = getattr(entity, self._id_attribute, None)
        if key is None:
            key = self._id_factory()
            setattr(entity, self._id_attribute, key)
        self._items[key] = entity
        return entity

    async def count(self) -> int:
        return len(self._items)

    def _filter(self, spec: Specification) -> list[T]:
        return [item for item in self._items.values() if self._evaluator.matches(spec, item)]

    def _sorted(self, items: list[T], sort: Sort) -> list[T]:
        validate_sort_properties(self._entity_type, sort.properties)
        result = list(items)
        # Stable sorts applied from the least significant key up.
        for order in reversed(sort.orders):
            result.sort(key=lambda item, p=order.property: _sort_key(item, p), reverse=not order.is_ascending)
        return result


def _sort_key(item: Any, path: str) -> tuple[bool, Any]:
    value = next(path_values(item, path), None)
    return (value is None, value)
