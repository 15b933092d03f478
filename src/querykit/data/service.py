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
"""Generic paginated CRUD service over any backing store.

:class:`CrudService` ties the filter engine together: it extracts the
criteria of a filter record, builds a specification (FUZZY for list and
page lookups, EXACT for single-match lookups), resolves paging, runs the
query against a :class:`~querykit.data.ports.outbound.BackingStore`, and
maps entities to projections.

Usage::

    service = CrudService(
        Repository(ConfigEntity, session),
        EntityMapper(ConfigEntity, ConfigDTO),
        auditor=lambda: current_user.name,
        allowed_sort_fields={"prop_key", "category"},
    )

    page = await service.find_page_by_criteria(ConfigFilter(category="flags", sort="prop_key desc"))
    saved = await service.insert(ConfigDTO(prop_key="db.pool.max-size", dev_value="10"))
    merged = await service.update(ConfigDTO(id=saved.id, prod_value="50"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from querykit.data.filter import DynamicFilter
from querykit.data.page import Page
from querykit.data.pagination import PaginationResolver
from querykit.data.ports.outbound import BackingStore, ProjectionMapper
from querykit.kernel.exceptions import InvalidArgumentException, ResourceNotFoundException

_logger = logging.getLogger(__name__)

E = TypeVar("E")
D = TypeVar("D")
R = TypeVar("R")


class CrudService(Generic[E, D, R]):
    """List, page, look up, insert and merge-update one entity type.

    Type Parameters:
        E: The entity type held by the store.
        D: The projection (DTO) type returned to callers.
        R: The filter record type.

    Args:
        store: Backing store for ``E``.
        mapper: Converts between ``E`` and ``D``.
        dynamic_filter: Builds specifications; defaults to one for the
            store's entity type.
        resolver: Normalises paging input.
        auditor: Returns the acting user for audit fields, or ``None``.
        allowed_sort_fields: If non-empty, only these fields may be sorted on.
        clock: Source of audit timestamps.
    """

    def __init__(
        self,
        store: BackingStore[E, Any],
        mapper: ProjectionMapper[E, D],
        *,
        dynamic_filter: DynamicFilter | None = None,
        resolver: PaginationResolver | None = None,
        auditor: Callable[[], str | None] | None = None,
        allowed_sort_fields: Collection[str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._mapper = mapper
        self._filter = dynamic_filter or DynamicFilter(store.entity_type)
        self._resolver = resolver or PaginationResolver()
        self._auditor = auditor or (lambda: None)
        self._allowed_sort_fields = frozenset(allowed_sort_fields or ())
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_all(self) -> list[D]:
        """Every record, unfiltered and unpaged."""
        entities = await self._store.find_all()
        dtos = self._mapper.to_projection_list(entities)
        _logger.info("Retrieved %d records", len(dtos))
        return dtos

    async def list_page(self, request: R | None = None) -> Page[D]:
        """One page of records; criteria on *request* are applied FUZZY."""
        return await self._page(request)

    async def find_one_exact(self, request: R) -> D | None:
        """The first record matching every criterion exactly, or ``None``."""
        spec = self._filter.build_exact_specification(request)
        entity = await self._store.find_one(spec)
        dto = self._mapper.to_projection(entity) if entity is not None else None
        _logger.info("Found %d record matching criteria", 0 if dto is None else 1)
        return dto

    async def find_list_by_criteria(self, request: R) -> list[D]:
        """All records matching the FUZZY criteria, unpaged."""
        spec = self._filter.build_specification(request)
        entities = await self._store.find_all_by_spec(spec)
        dtos = self._mapper.to_projection_list(entities)
        _logger.info("Found %d records matching criteria", len(dtos))
        return dtos

    async def find_page_by_criteria(self, request: R) -> Page[D]:
        """One page of records matching the FUZZY criteria."""
        return await self._page(request)

    async def _page(self, request: R | None) -> Page[D]:
        spec = self._filter.build_specification(request)
        pageable = self._resolver.resolve_request(request, self._allowed_sort_fields)
        entity_page = await self._store.find_all_by_spec_paged(spec, pageable)
        page = entity_page.map(self._mapper.to_projection)
        _logger.info("Retrieved %d records out of %d total", len(page.items), page.total)
        return page

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, dto: D) -> D:
        """Store a new record; audit fields are stamped here, not taken from *dto*."""
        if dto is None:
            raise InvalidArgumentException("Record to insert must not be null", code="MISSING_PROJECTION")

        entity = self._mapper.to_entity(dto)
        now, user = self._clock(), self._auditor()
        self._stamp(entity, created_at=now, created_by=user, updated_at=now, updated_by=user)

        saved = await self._store.save(entity)
        _logger.info("Inserted %s record", type(saved).__name__)
        return self._mapper.to_projection(saved)

    async def update(self, dto: D) -> D:
        """Merge the non-``None`` fields of *dto* onto the stored record with the same id.

        Reads, merges and writes without a version check: concurrent updates
        to one record are last-write-wins unless the store locks.

        Raises:
            InvalidArgumentException: If *dto* or its id is ``None``.
            ResourceNotFoundException: If no record has that id.
        """
        if dto is None:
            raise InvalidArgumentException("Record to update must not be null", code="MISSING_PROJECTION")
        identity = getattr(dto, "id", None)
        if identity is None:
            raise InvalidArgumentException("Record to update must carry an id", code="MISSING_IDENTITY")

        entity = await self._store.find_by_id(identity)
        if entity is None:
            raise ResourceNotFoundException(
                f"No {self._store.entity_type.__name__} with id {identity}",
                code="NOT_FOUND",
                context={"id": identity},
            )

        self._mapper.merge_onto(dto, entity)
        self._stamp(entity, updated_at=self._clock(), updated_by=self._auditor())

        saved = await self._store.save(entity)
        _logger.info("Updated %s record %s", type(saved).__name__, identity)
        return self._mapper.to_projection(saved)

    @staticmethod
    def _stamp(entity: Any, **audit: Any) -> None:
        for name, value in audit.items():
            if hasattr(entity, name):
                setattr(entity, name, value)
