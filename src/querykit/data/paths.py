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
"""Attribute path resolution against entity types.

Filter criteria and sort orders name entity attributes by dot path
(``"owner.address.city"``).  :func:`resolve_path` checks such a path
against the entity *type* before any query runs, so a misspelled field
fails loudly instead of being skipped.

Supported entity shapes: SQLAlchemy mapped classes (columns and
relationships), dataclasses, pydantic models, and plain classes (by
annotation, class attribute or ``__init__`` parameter).
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from collections.abc import Iterable
from typing import Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from querykit.kernel.exceptions import InvalidArgumentException


def split_path(path: str | None) -> list[str]:
    """Split a dot path into segments, rejecting blank paths and empty segments."""
    if path is None or not path.strip():
        raise InvalidArgumentException("Field path must not be null or blank", code="INVALID_FIELD")
    parts = path.split(".")
    if any(not part.strip() for part in parts):
        raise InvalidArgumentException(
            f"Field path '{path}' contains empty segment",
            code="INVALID_FIELD_PATH",
            context={"path": path},
        )
    return parts


def resolve_path(entity_type: type, path: str | None) -> Any:
    """Resolve *path* on *entity_type* and return the type of the final segment.

    Returns ``Any`` when the final type cannot be determined (for example an
    un-annotated attribute).  Intermediate segments whose type is unknown
    end validation early rather than failing.

    Raises:
        InvalidArgumentException: If the path is blank, has an empty segment,
            or names an attribute the type does not have.
    """
    parts = split_path(path)
    current: Any = entity_type
    for part in parts:
        if current is Any or not isinstance(current, type):
            return Any
        attribute_type = _attribute_type(current, part)
        if attribute_type is _MISSING:
            raise InvalidArgumentException(
                f"Invalid field path '{path}': field '{part}' not found",
                code="INVALID_FIELD_PATH",
                context={"path": path, "segment": part, "type": current.__name__},
            )
        current = attribute_type
    return current


_MISSING = object()


def _attribute_type(owner: type, name: str) -> Any:
    mapper = _mapper_for(owner)
    if mapper is not None:
        relationship = mapper.relationships.get(name)
        if relationship is not None:
            return relationship.mapper.class_
        if name in mapper.all_orm_descriptors.keys():
            return Any
        return _MISSING

    if dataclasses.is_dataclass(owner):
        names = {f.name for f in dataclasses.fields(owner)}
        if name not in names:
            return _MISSING
        return _unwrap(_hints(owner).get(name, Any))

    if issubclass(owner, BaseModel):
        field = owner.model_fields.get(name)
        if field is None:
            return _MISSING
        return _unwrap(field.annotation)

    hints = _hints(owner)
    if name in hints:
        return _unwrap(hints[name])
    if hasattr(owner, name):
        return Any
    parameter = _init_parameters(owner).get(name)
    if parameter is not None:
        return Any if parameter.annotation is inspect.Parameter.empty else _unwrap(parameter.annotation)
    return _MISSING


def _init_parameters(owner: type) -> dict[str, inspect.Parameter]:
    """Named ``__init__`` parameters; plain classes often set their attributes only there."""
    if owner.__init__ is object.__init__:
        return {}
    try:
        parameters = inspect.signature(owner.__init__).parameters
    except (TypeError, ValueError):
        return {}
    named = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    return {
        key: parameter
        for key, parameter in list(parameters.items())[1:]
        if parameter.kind in named
    }


def _mapper_for(owner: type) -> Mapper[Any] | None:
    mapper = sa_inspect(owner, raiseerr=False)
    return mapper if isinstance(mapper, Mapper) else None


def _hints(owner: type) -> dict[str, Any]:
    try:
        return get_type_hints(owner)
    except (NameError, TypeError):
        return {}


def _unwrap(annotation: Any) -> Any:
    """Reduce ``X | None`` / ``Optional[X]`` to ``X``; anything else opaque becomes ``Any``."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _unwrap(members[0]) if len(members) == 1 else Any
    if origin is typing.ClassVar:
        return Any
    return annotation if isinstance(annotation, type) else Any


def validate_sort_properties(entity_type: type, properties: Iterable[str]) -> None:
    """Check every sort property resolves on *entity_type*.

    Raises:
        InvalidArgumentException: With code ``INVALID_SORT_PROPERTY``.
    """
    for prop in properties:
        try:
            resolve_path(entity_type, prop)
        except InvalidArgumentException as exc:
            raise InvalidArgumentException(
                f"Invalid sort property '{prop}' for {entity_type.__name__}",
                code="INVALID_SORT_PROPERTY",
                context=exc.context,
            ) from exc
