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
"""In-memory interpretation of :class:`Specification` trees.

Dot paths walk attributes; when an intermediate value is a collection the
predicate holds if it holds for any element (the in-memory counterpart of
``relationship.any()``).  A ``None`` anywhere along the path never matches.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from querykit.data.specification import (
    Always,
    And,
    Between,
    Contains,
    Equals,
    GreaterOrEqual,
    In,
    LessOrEqual,
    Specification,
)

_COLLECTIONS = (list, tuple, set, frozenset)


class SpecificationEvaluator:
    """Evaluate specifications against plain Python objects."""

    def __init__(self) -> None:
        self._dispatch: dict[type, Callable[[Any, Any], bool]] = {
            Always: lambda spec, obj: True,
            And: lambda spec, obj: all(self.matches(part, obj) for part in spec.parts),
            Equals: lambda spec, obj: self._any(obj, spec.field, lambda v: v == spec.value),
            Contains: lambda spec, obj: self._any(
                obj, spec.field, lambda v: isinstance(v, str) and spec.value.lower() in v.lower()
            ),
            In: lambda spec, obj: self._any(obj, spec.field, lambda v: v in spec.values),
            Between: lambda spec, obj: self._any(obj, spec.field, lambda v: spec.low <= v <= spec.high),
            GreaterOrEqual: lambda spec, obj: self._any(obj, spec.field, lambda v: v >= spec.value),
            LessOrEqual: lambda spec, obj: self._any(obj, spec.field, lambda v: v <= spec.value),
        }

    def matches(self, spec: Specification, obj: Any) -> bool:
        """Whether *obj* satisfies *spec*."""
        evaluate = self._dispatch.get(type(spec))
        if evaluate is None:
            raise TypeError(f"Unsupported specification: {type(spec).__name__}")
        return evaluate(spec, obj)

    def predicate(self, spec: Specification) -> Callable[[Any], bool]:
        """Bind *spec* into a one-argument predicate, e.g. for ``filter()``."""
        return lambda obj: self.matches(spec, obj)

    @staticmethod
    def _any(obj: Any, path: str, test: Callable[[Any], bool]) -> bool:
        return any(value is not None and test(value) for value in path_values(obj, path))


def path_values(obj: Any, path: str) -> Iterator[Any]:
    """Yield every value reachable from *obj* along the dot *path*."""
    head, _, rest = path.partition(".")
    value = getattr(obj, head, None)
    if not rest:
        yield value
        return
    if value is None:
        return
    if isinstance(value, _COLLECTIONS):
        for item in value:
            yield from path_values(item, rest)
    else:
        yield from path_values(value, rest)
