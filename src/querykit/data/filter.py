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
"""Dynamic query building — filter records to :class:`Specification` objects.

:class:`PredicateBuilder` turns one ``field``/``value`` pair into a single
predicate, dispatching on the value's shape.  :class:`DynamicFilter` runs the
whole pipeline for a filter record: extract criteria, build one predicate
per criterion, AND them together in declaration order.

Example::

    dynamic = DynamicFilter(ConfigEntity)

    # FUZZY: strings match case-insensitively as substrings
    spec = dynamic.build_specification(ConfigFilter(category="flags"))

    # EXACT: strings must be equal
    spec = dynamic.build_exact_specification(ConfigFilter(prop_key="db.url"))

    # From a plain dict of criteria
    spec = dynamic.build_specification({"priority": Range(min=1, max=5)})

Value shapes:

* ``str`` — equality (EXACT) or substring (FUZZY; blank strings match all)
* ``bool`` / numbers — equality in both modes
* ``list`` / ``tuple`` / ``set`` — membership; empty collections match all
* :class:`Range` or a ``{"min", "max"}`` mapping — inclusive range
* anything else — ignored (matches all), with a warning
"""

from __future__ import annotations

import datetime
import decimal
import logging
import numbers
from collections.abc import Mapping
from typing import Any

from querykit.data.criteria import MatchMode, Range
from querykit.data.extractor import CriteriaExtractor
from querykit.data.paths import resolve_path
from querykit.data.specification import (
    Always,
    Between,
    Contains,
    Equals,
    GreaterOrEqual,
    In,
    LessOrEqual,
    Specification,
    compose,
)
from querykit.kernel.exceptions import InvalidArgumentException

_logger = logging.getLogger(__name__)

RANGE_MIN_KEY = "min"
RANGE_MAX_KEY = "max"

_COMPARABLE_TYPES: tuple[type, ...] = (
    numbers.Real,
    decimal.Decimal,
    str,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)

_COLLECTION_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)


def is_comparable(value: Any) -> bool:
    """Whether *value* can bound a range predicate."""
    return isinstance(value, _COMPARABLE_TYPES)


class PredicateBuilder:
    """Build single-field predicates against one entity type.

    Field paths are checked against *entity_type* when a predicate is
    built; an unknown path raises :class:`InvalidArgumentException`.
    """

    def __init__(self, entity_type: type) -> None:
        self._entity_type = entity_type

    @property
    def entity_type(self) -> type:
        return self._entity_type

    def build(self, field: str, value: Any, mode: MatchMode = MatchMode.FUZZY) -> Specification:
        """Translate one criterion into a predicate."""
        if field is None or not field.strip():
            raise InvalidArgumentException("Field must not be null or blank", code="INVALID_FIELD")
        resolve_path(self._entity_type, field)
        mode = MatchMode(mode)

        if value is None:
            return Always()

        if isinstance(value, str):
            if mode is MatchMode.EXACT:
                return Equals(field, value)
            if not value.strip():
                return Always()
            return Contains(field, value.strip())

        if isinstance(value, (bool, numbers.Number)):
            return Equals(field, value)

        if isinstance(value, _COLLECTION_TYPES):
            if not value:
                _logger.debug("Empty collection for field '%s', skipping", field)
                return Always()
            values = sorted(value, key=repr) if isinstance(value, (set, frozenset)) else value
            return In(field, tuple(values))

        if isinstance(value, Range):
            return self.build_range(field, value.min, value.max)

        if isinstance(value, Mapping):
            return self.build_range(field, value.get(RANGE_MIN_KEY), value.get(RANGE_MAX_KEY))

        _logger.warning(
            "Unsupported value type '%s' for field '%s', skipping filter",
            type(value).__name__,
            field,
        )
        return Always()

    def build_range(self, field: str, low: Any, high: Any) -> Specification:
        """Inclusive range on *field*; missing or non-comparable bounds are dropped."""
        if low is None and high is None:
            _logger.debug("Range filter for field '%s' has no min/max values, skipping", field)
            return Always()

        if is_comparable(low) and is_comparable(high):
            if type(low) is not type(high):
                _logger.warning(
                    "Range filter for field '%s' has mismatched types: min=%s, max=%s. "
                    "Using separate >= and <= instead of BETWEEN",
                    field,
                    type(low).__name__,
                    type(high).__name__,
                )
                return GreaterOrEqual(field, low) & LessOrEqual(field, high)
            return Between(field, low, high)

        if is_comparable(low):
            return GreaterOrEqual(field, low)

        if is_comparable(high):
            return LessOrEqual(field, high)

        _logger.warning("Range filter for field '%s' has non-comparable values, skipping", field)
        return Always()


class DynamicFilter:
    """Build a composed :class:`Specification` from a filter record or dict.

    FUZZY is used for list and page lookups, EXACT for single-match lookups.
    """

    def __init__(self, entity_type: type, extractor: CriteriaExtractor | None = None) -> None:
        self._builder = PredicateBuilder(entity_type)
        self._extractor = extractor if extractor is not None else CriteriaExtractor()

    @property
    def extractor(self) -> CriteriaExtractor:
        return self._extractor

    def build_specification(self, request: Any) -> Specification:
        """FUZZY specification for *request* (a filter record or a criteria dict)."""
        return self._build(request, MatchMode.FUZZY)

    def build_exact_specification(self, request: Any) -> Specification:
        """EXACT specification for *request* (a filter record or a criteria dict)."""
        return self._build(request, MatchMode.EXACT)

    def _build(self, request: Any, mode: MatchMode) -> Specification:
        criteria = self._extractor.extract(request)
        if not criteria:
            _logger.debug("No filters provided, returning empty specification")
            return Always()

        _logger.debug("Building %s specification with %d filter(s)", mode, len(criteria))
        specs = []
        for field, value in criteria.items():
            specs.append(self._builder.build(field, value, mode))
            _logger.debug("Added %s filter for field '%s' with value type: %s", mode, field, type(value).__name__)
        return compose(specs)
