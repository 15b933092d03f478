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
"""Outbound ports: backing store and projection mapper interfaces."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from querykit.data.page import Page
from querykit.data.pageable import Pageable
from querykit.data.specification import Specification

T = TypeVar("T")
ID = TypeVar("ID")
E = TypeVar("E")
D = TypeVar("D")


@runtime_checkable
class BackingStore(Protocol[T, ID]):
    """Entity collection the engine reads from and writes to.

    Implementations interpret :class:`Specification` trees against their own
    schema and must reject sort properties that do not resolve on the entity.
    Calls are made once each, with no retry or timeout added by the engine.
    """

    @property
    def entity_type(self) -> type[T]: ...

    async def find_all(self) -> list[T]: ...

    async def find_all_by_spec(self, spec: Specification) -> list[T]: ...

    async def find_all_by_spec_paged(self, spec: Specification, pageable: Pageable) -> Page[T]: ...

    async def find_one(self, spec: Specification) -> T | None: ...

    async def find_by_id(self, id: ID) -> T | None: ...

    async def save(self, entity: T) -> T: ...


@runtime_checkable
class ProjectionMapper(Protocol[E, D]):
    """Converts between entities and their projections."""

    def to_projection(self, entity: E) -> D: ...

    def to_entity(self, dto: D) -> E: ...

    def merge_onto(self, dto: D, entity: E) -> None: ...

    def to_projection_list(self, entities: list[E]) -> list[D]: ...

    def to_entity_list(self, dtos: list[D]) -> list[E]: ...
