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
"""SQLAlchemy specification compiler — turns a :class:`Specification` into a WHERE clause.

Dot paths that cross relationships compile to correlated ``EXISTS``
subqueries: ``relationship.has(...)`` for many-to-one and
``relationship.any(...)`` for collections.  No joins are added to the
outer statement, so counts and pagination stay row-exact.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import ColumnElement, and_, func, inspect, true

from querykit.data.paths import split_path
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
from querykit.kernel.exceptions import InvalidArgumentException

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so *value* matches literally with :data:`LIKE_ESCAPE`."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SpecificationCompiler:
    """Compile specifications against one mapped entity class."""

    def __init__(self, model: type) -> None:
        self._model = model
        self._dispatch: dict[type, Callable[[Any], ColumnElement[bool]]] = {
            Always: lambda spec: true(),
            And: lambda spec: and_(*(self.compile(part) for part in spec.parts)),
            Equals: lambda spec: self._on_path(spec.field, lambda col: col == spec.value),
            Contains: lambda spec: self._on_path(
                spec.field,
                lambda col: func.lower(col).like(f"%{escape_like(spec.value.lower())}%", escape=LIKE_ESCAPE),
            ),
            In: lambda spec: self._on_path(spec.field, lambda col: col.in_(spec.values)),
            Between: lambda spec: self._on_path(spec.field, lambda col: col.between(spec.low, spec.high)),
            GreaterOrEqual: lambda spec: self._on_path(spec.field, lambda col: col >= spec.value),
            LessOrEqual: lambda spec: self._on_path(spec.field, lambda col: col <= spec.value),
        }

    def compile(self, spec: Specification) -> ColumnElement[bool]:
        """Return the boolean SQL expression for *spec*."""
        build = self._dispatch.get(type(spec))
        if build is None:
            raise TypeError(f"Unsupported specification: {type(spec).__name__}")
        return build(spec)

    def _on_path(self, path: str, build: Callable[[Any], ColumnElement[bool]]) -> ColumnElement[bool]:
        return _compile_path(self._model, split_path(path), path, build)


def _compile_path(
    model: type,
    parts: list[str],
    path: str,
    build: Callable[[Any], ColumnElement[bool]],
) -> ColumnElement[bool]:
    head, rest = parts[0], parts[1:]
    attr = getattr(model, head, None)
    if attr is None:
        raise InvalidArgumentException(
            f"Invalid field path '{path}': field '{head}' not found",
            code="INVALID_FIELD_PATH",
            context={"path": path, "segment": head, "type": model.__name__},
        )
    if not rest:
        return build(attr)

    relationship = inspect(model).relationships.get(head)
    if relationship is None:
        raise InvalidArgumentException(
            f"Invalid field path '{path}': '{head}' is not a relationship",
            code="INVALID_FIELD_PATH",
            context={"path": path, "segment": head, "type": model.__name__},
        )
    inner = _compile_path(relationship.mapper.class_, rest, path, build)
    return attr.any(inner) if relationship.uselist else attr.has(inner)
