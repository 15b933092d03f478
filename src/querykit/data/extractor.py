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
"""Criteria extraction — turn a filter record into ``field -> value`` pairs.

Walks the declared fields of any filter object (dataclass, pydantic model,
annotated class, plain object or mapping) and keeps the ones that carry a
value.  Paging fields are excluded by default, so the same record can drive
both the WHERE clause and the paging directive.

Example::

    @dataclass
    class ConfigFilter(PageRequest):
        category: str | None = None
        prop_key: str | None = None

    extractor = CriteriaExtractor()
    extractor.extract(ConfigFilter(category="db", page_size=50))
    # {"category": "db"}
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import threading
import typing
from collections.abc import Callable, Collection, Mapping
from typing import Any, get_origin, get_type_hints

from pydantic import BaseModel

from querykit.config.properties.data import FilterProperties
from querykit.core.config import Config

_logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_FIELDS: frozenset[str] = frozenset({"page_number", "page_size", "sort"})


class FieldMetadataCache:
    """Bounded, thread-safe ``type -> field names`` lookup table.

    When inserting a new type would exceed *max_size*, the whole table is
    cleared first; entries are never evicted one at a time.
    """

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._max_size = max_size
        self._fields: dict[type, tuple[str, ...]] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get_or_compute(self, key: type, compute: Callable[[type], tuple[str, ...]]) -> tuple[str, ...]:
        cached = self._fields.get(key)
        if cached is not None:
            return cached
        names = compute(key)
        with self._lock:
            if key not in self._fields and len(self._fields) >= self._max_size:
                _logger.warning(
                    "Field cache exceeded maximum size (%d). Clearing cache; "
                    "this may indicate excessive dynamic class creation.",
                    self._max_size,
                )
                self._fields.clear()
            self._fields.setdefault(key, names)
            return self._fields[key]

    def clear(self) -> None:
        with self._lock:
            self._fields.clear()
        _logger.debug("Field cache cleared")

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._fields


class CriteriaExtractor:
    """Extract the supplied criteria of a filter object in declaration order."""

    def __init__(
        self,
        cache: FieldMetadataCache | None = None,
        excluded_fields: Collection[str] = DEFAULT_EXCLUDED_FIELDS,
    ) -> None:
        self._cache = cache if cache is not None else FieldMetadataCache()
        self._excluded = frozenset(excluded_fields)

    @classmethod
    def from_config(cls, config: Config) -> CriteriaExtractor:
        """Build an extractor from ``querykit.data.filter.*`` settings."""
        props = config.bind(FilterProperties)
        return cls(cache=FieldMetadataCache(props.cache_size), excluded_fields=props.excluded_fields)

    @property
    def cache(self) -> FieldMetadataCache:
        return self._cache

    def extract(self, obj: Any, excluded_fields: Collection[str] | None = None) -> dict[str, Any]:
        """Return ``{field: value}`` for every non-``None`` field of *obj*.

        Args:
            obj: The filter record. ``None`` yields an empty mapping.
            excluded_fields: Names to skip; defaults to the extractor's
                exclusions (the paging fields).
        """
        if obj is None:
            return {}

        excluded = self._excluded if excluded_fields is None else frozenset(excluded_fields)

        if isinstance(obj, Mapping):
            items = [(str(k), v) for k, v in obj.items()]
        else:
            items = [(name, self._read(obj, name)) for name in self._field_names(obj)]

        return {
            name: value
            for name, value in items
            if value is not None and name not in excluded and not name.startswith("_")
        }

    def _field_names(self, obj: Any) -> list[str]:
        declared = list(self._cache.get_or_compute(type(obj), _declared_fields))
        if dataclasses.is_dataclass(obj) or isinstance(obj, BaseModel):
            return declared
        # Plain objects may carry attributes that were never annotated.
        seen = set(declared)
        extra = [name for name in getattr(obj, "__dict__", {}) if name not in seen]
        return declared + extra

    @staticmethod
    def _read(obj: Any, name: str) -> Any:
        try:
            return getattr(obj, name)
        except AttributeError:
            _logger.debug("Skipping unreadable field '%s' on '%s'", name, type(obj).__name__)
            return None


def _declared_fields(cls: type) -> tuple[str, ...]:
    """Collect field names of *cls*, inherited fields first."""
    if dataclasses.is_dataclass(cls):
        return tuple(f.name for f in dataclasses.fields(cls))
    if issubclass(cls, BaseModel):
        return tuple(cls.model_fields)

    names: list[str] = []
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        annotations = inspect.get_annotations(klass)
        try:
            hints = get_type_hints(klass)
        except (NameError, TypeError):
            hints = {}
        for name in annotations:
            hint = hints.get(name)
            if hint is typing.ClassVar or get_origin(hint) is typing.ClassVar:
                continue
            if name not in names:
                names.append(name)
    return tuple(names)
