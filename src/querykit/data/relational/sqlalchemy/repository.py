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
"""Async SQLAlchemy 2.0 backing store driven by specifications."""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar, get_args, get_origin

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from querykit.data.page import Page
from querykit.data.pageable import Order, Pageable
from querykit.data.paths import validate_sort_properties
from querykit.data.relational.sqlalchemy.compiler import SpecificationCompiler
from querykit.data.specification import Always, Specification
from querykit.kernel.exceptions import InvalidArgumentException

_logger = logging.getLogger(__name__)

T = TypeVar("T")
ID = TypeVar("ID")


def _declared_model(cls: type) -> type | None:
    """The entity argument of a ``Repository[Entity, ID]`` base, if concrete."""
    for base in getattr(cls, "__orig_bases__", ()):
        if get_origin(base) is Repository:
            args = get_args(base)
            return args[0] if args and not isinstance(args[0], TypeVar) else None
    return None


class Repository(Generic[T, ID]):
    """:class:`~querykit.data.ports.outbound.BackingStore` over one mapped class.

    The model comes from the constructor or from the generic declaration::

        class ConfigRepository(Repository[ConfigEntity, UUID]):
            pass

        repo = ConfigRepository(session=session)
        page = await repo.find_all_by_spec_paged(Contains("category", "db"), Pageable.of(1, 20))

    Writes only flush; committing is left to whoever owns the session.
    Without sort orders rows come back in database order.  Sort properties
    may cross many-to-one relationships (``"owner.name"``).
    """

    _model_declared: type | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = _declared_model(cls)
        if declared is not None:
            cls._model_declared = declared

    def __init__(self, model: type[T] | None = None, session: AsyncSession | None = None) -> None:
        resolved = model or type(self)._model_declared
        if resolved is None:
            raise TypeError(f"{type(self).__name__} needs a model: pass one or subclass Repository[Model, ID]")
        self._model: type[T] = resolved
        self._session = session
        self._compiler = SpecificationCompiler(resolved)

    @property
    def entity_type(self) -> type[T]:
        return self._model

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError(f"{type(self).__name__} has no AsyncSession")
        return self._session

    async def save(self, entity: T) -> T:
        """Add or update *entity*, flushing so generated ids and defaults are loaded."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def find_by_id(self, id: ID) -> T | None:
        return await self.session.get(self._model, id)

    async def find_all(self) -> list[T]:
        return await self._rows(select(self._model))

    async def find_all_by_spec(self, spec: Specification) -> list[T]:
        return await self._rows(self._where(spec))

    async def find_all_by_spec_paged(self, spec: Specification, pageable: Pageable) -> Page[T]:
        """One page of matches plus the total match count."""
        query = self._where(spec)
        total = await self.session.scalar(select(func.count()).select_from(query.subquery()))

        query = self._order_by(query, pageable)
        items = await self._rows(query.offset(pageable.offset).limit(pageable.size))
        return Page.of(items, total or 0, pageable)

    async def find_one(self, spec: Specification) -> T | None:
        """First match or ``None``; two rows are fetched so ambiguity can be reported."""
        rows = await self._rows(self._where(spec).limit(2))
        if len(rows) > 1:
            _logger.warning(
                "More than one %s record matches a single-result lookup, returning the first",
                self._model.__name__,
            )
        return rows[0] if rows else None

    async def count(self) -> int:
        return await self.session.scalar(select(func.count()).select_from(self._model)) or 0

    async def _rows(self, query: Select[Any]) -> list[T]:
        result = await self.session.scalars(query)
        return list(result.all())

    def _where(self, spec: Specification) -> Select[Any]:
        query = select(self._model)
        return query if isinstance(spec, Always) else query.where(self._compiler.compile(spec))

    def _order_by(self, query: Select[Any], pageable: Pageable) -> Select[Any]:
        validate_sort_properties(self._model, pageable.sort.properties)
        for order in pageable.sort.orders:
            query, column = self._sort_column(query, order)
            query = query.order_by(column.asc() if order.is_ascending else column.desc())
        return query

    def _sort_column(self, query: Select[Any], order: Order) -> tuple[Select[Any], Any]:
        """Column for a dotted sort property; each hop is outer-joined through an alias."""
        *hops, name = order.property.split(".")
        owner: Any = self._model
        for hop in hops:
            relationship = inspect(owner).mapper.relationships.get(hop)
            if relationship is None or relationship.uselist:
                raise InvalidArgumentException(
                    f"Cannot sort on '{order.property}': '{hop}' is not a many-to-one relationship",
                    code="INVALID_SORT_PROPERTY",
                    context={"path": order.property, "segment": hop},
                )
            target = aliased(relationship.mapper.class_)
            query = query.outerjoin(target, getattr(owner, hop))
            owner = target
        return query, getattr(owner, name)
