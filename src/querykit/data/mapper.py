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
"""Entity <-> projection mapping by matching field names.

:class:`Mapper` maps between any two types (dataclasses, pydantic models,
SQLAlchemy entities, annotated classes) field by field, with optional
renaming, value transformers and exclusions.  :class:`EntityMapper` binds a
``Mapper`` to one entity/projection pair and adds the merge-update used by
:meth:`CrudService.update <querykit.data.service.CrudService.update>`.

Example::

    mapper = EntityMapper(ConfigEntity, ConfigDTO)
    dto = mapper.to_projection(entity)
    entity = mapper.to_entity(dto)          # audit fields are not copied
    mapper.merge_onto(partial_dto, entity)  # None fields leave entity untouched
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Collection, Mapping
from typing import Any, Generic, TypeVar, get_type_hints

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper as SAMapper

from querykit.data.request import AUDIT_FIELDS

S = TypeVar("S")
D = TypeVar("D")
E = TypeVar("E")


@dataclasses.dataclass(frozen=True)
class FieldRules:
    """Per type-pair mapping rules, all keyed by *destination* field name.

    Attributes:
        sources: Destination field -> source field it is read from.
        converters: Destination field -> function applied to the value.
        skipped: Destination fields never written.
    """

    sources: Mapping[str, str] = dataclasses.field(default_factory=dict)
    converters: Mapping[str, Callable[[Any], Any]] = dataclasses.field(default_factory=dict)
    skipped: frozenset[str] = frozenset()


_NO_RULES = FieldRules()


class Mapper:
    """Copies values between types whose fields share names."""

    def __init__(self) -> None:
        self._rules: dict[tuple[type, type], FieldRules] = {}

    def add_mapping(
        self,
        source_type: type,
        dest_type: type,
        *,
        field_map: Mapping[str, str] | None = None,
        transformers: Mapping[str, Callable[[Any], Any]] | None = None,
        exclude: Collection[str] | None = None,
    ) -> None:
        """Customise mapping from *source_type* to *dest_type*.

        Args:
            field_map: ``{source_field: dest_field}`` renames.
            transformers: ``{dest_field: func}`` value conversions.
            exclude: Destination fields left unset.
        """
        self._rules[(source_type, dest_type)] = FieldRules(
            sources={dest: src for src, dest in (field_map or {}).items()},
            converters=dict(transformers or {}),
            skipped=frozenset(exclude or ()),
        )

    def map(self, source: Any, dest_type: type[D], *, skip_none: bool = False) -> D:
        """New *dest_type* built from *source*; ``skip_none`` keeps destination defaults."""
        return dest_type(**self.map_values(source, dest_type, skip_none=skip_none))

    def map_list(self, sources: list[Any], dest_type: type[D]) -> list[D]:
        return [self.map(source, dest_type) for source in sources]

    def merge(self, source: Any, target: D, *, ignore: Collection[str] = ()) -> D:
        """Write every non-``None`` value of *source* onto *target* in place."""
        for name, value in self.map_values(source, type(target), skip_none=True).items():
            if name not in ignore:
                setattr(target, name, value)
        return target

    def map_values(self, source: Any, dest_type: type, *, skip_none: bool = False) -> dict[str, Any]:
        """Destination field -> value read from *source* under the registered rules."""
        rules = self._rules.get((type(source), dest_type), _NO_RULES)
        available = field_values(source)

        values: dict[str, Any] = {}
        for name in field_names(dest_type):
            origin = rules.sources.get(name, name)
            if name in rules.skipped or origin not in available:
                continue
            value = available[origin]
            if value is None and skip_none:
                continue
            convert = rules.converters.get(name)
            values[name] = convert(value) if convert else value
        return values


class EntityMapper(Generic[E, D]):
    """:class:`~querykit.data.ports.outbound.ProjectionMapper` for one entity/projection pair.

    *owned_fields* (the audit fields by default) never travel from a
    projection to an entity; ``merge_onto`` additionally keeps the entity's id.
    """

    def __init__(
        self,
        entity_type: type[E],
        projection_type: type[D],
        mapper: Mapper | None = None,
        *,
        owned_fields: Collection[str] = AUDIT_FIELDS,
    ) -> None:
        self._entity_type = entity_type
        self._projection_type = projection_type
        self._mapper = mapper or Mapper()
        self._owned = frozenset(owned_fields)

    @property
    def entity_type(self) -> type[E]:
        return self._entity_type

    @property
    def projection_type(self) -> type[D]:
        return self._projection_type

    def to_projection(self, entity: E) -> D:
        return self._mapper.map(entity, self._projection_type)

    def to_entity(self, dto: D) -> E:
        values = self._mapper.map_values(dto, self._entity_type, skip_none=True)
        return self._entity_type(**{name: value for name, value in values.items() if name not in self._owned})

    def merge_onto(self, dto: D, entity: E) -> None:
        self._mapper.merge(dto, entity, ignore=self._owned | {"id"})

    def to_projection_list(self, entities: list[E]) -> list[D]:
        return [self.to_projection(entity) for entity in entities]

    def to_entity_list(self, dtos: list[D]) -> list[E]:
        return [self.to_entity(dto) for dto in dtos]


def _sa_mapper(cls: type) -> SAMapper[Any] | None:
    mapper = sa_inspect(cls, raiseerr=False)
    return mapper if isinstance(mapper, SAMapper) else None


def field_names(cls: type) -> list[str]:
    """Mappable fields of *cls*: dataclass fields, pydantic fields, mapped columns, or annotations."""
    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls)]
    if issubclass(cls, BaseModel):
        return list(cls.model_fields)
    sa_mapper = _sa_mapper(cls)
    if sa_mapper is not None:
        return [attr.key for attr in sa_mapper.column_attrs]
    return list(get_type_hints(cls))


def field_values(obj: object) -> dict[str, Any]:
    """Shallow field values of *obj*; plain objects contribute their public instance attributes."""
    cls = type(obj)
    if dataclasses.is_dataclass(obj) or isinstance(obj, BaseModel) or _sa_mapper(cls) is not None:
        return {name: getattr(obj, name) for name in field_names(cls)}
    return {name: value for name, value in vars(obj).items() if not name.startswith("_")}
