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
"""Tests for CrudService over the in-memory and SQLAlchemy backing stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import pytest
from sqlalchemy import String
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, mapped_column

from querykit.config.properties import PaginationProperties
from querykit.data.criteria import Range
from querykit.data.filter import DynamicFilter
from querykit.data.mapper import EntityMapper
from querykit.data.memory import InMemoryRepository
from querykit.data.page import Page
from querykit.data.pagination import PaginationResolver
from querykit.data.relational.sqlalchemy import Base, BaseEntity, Repository
from querykit.data.request import BaseProjection, PageRequest
from querykit.data.service import CrudService
from querykit.kernel.exceptions import InvalidArgumentException, ResourceNotFoundException

# ---------------------------------------------------------------------------
# Test domain: environment-specific configuration entries
# ---------------------------------------------------------------------------

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=UTC)
LATER = datetime(2024, 6, 2, 10, 0, tzinfo=UTC)


@dataclass
class CleanConfig:
    id: UUID | None = None
    prop_key: str | None = None
    dev_value: str | None = None
    prod_value: str | None = None
    description: str | None = None
    category: str | None = None
    data_type: str | None = None
    is_sensitive: bool | None = None
    priority: int | None = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass
class CleanConfigDTO(BaseProjection):
    prop_key: str | None = None
    dev_value: str | None = None
    prod_value: str | None = None
    description: str | None = None
    category: str | None = None
    data_type: str | None = None
    is_sensitive: bool | None = None
    priority: int | None = None


@dataclass
class CleanConfigFilter(PageRequest):
    prop_key: str | None = None
    category: str | None = None
    is_sensitive: bool | None = None
    priority: Range | None = None


class SqlCleanConfig(BaseEntity):
    __tablename__ = "service_clean_configs"

    prop_key: Mapped[str] = mapped_column(String(200), unique=True)
    dev_value: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    prod_value: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, default=None)
    data_type: Mapped[str | None] = mapped_column(String(50), nullable=True, default=None)
    is_sensitive: Mapped[bool] = mapped_column(default=False)
    priority: Mapped[int | None] = mapped_column(nullable=True, default=None)


SEED = [
    CleanConfigDTO(prop_key="db.url", dev_value="sqlite://", category="Database", priority=3),
    CleanConfigDTO(prop_key="db.pool.size", dev_value="5", prod_value="50", category="database", priority=1),
    CleanConfigDTO(prop_key="feature.dark_mode", dev_value="true", category="Feature Flags", priority=5),
    CleanConfigDTO(prop_key="feature.search", dev_value="false", category="Feature Flags", is_sensitive=True),
    CleanConfigDTO(prop_key="api.token", dev_value="x", category="Secrets", is_sensitive=True, priority=2),
]


class Clock:
    def __init__(self, *stamps: datetime) -> None:
        self._stamps = list(stamps)

    def __call__(self) -> datetime:
        return self._stamps.pop(0) if len(self._stamps) > 1 else self._stamps[0]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_service() -> CrudService[CleanConfig, CleanConfigDTO, CleanConfigFilter]:
    return CrudService(
        InMemoryRepository(CleanConfig),
        EntityMapper(CleanConfig, CleanConfigDTO),
        auditor=lambda: "alice",
        clock=Clock(NOW, LATER),
    )


@pytest.fixture
async def seeded_memory(memory_service):
    for dto in SEED:
        await memory_service.insert(dto)
    return memory_service


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def sql_service(session):
    service = CrudService(
        Repository(SqlCleanConfig, session),
        EntityMapper(SqlCleanConfig, CleanConfigDTO),
        auditor=lambda: "batch",
    )
    for dto in SEED:
        await service.insert(dto)
    return service


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestListing:
    @pytest.mark.asyncio
    async def test_list_all(self, seeded_memory):
        dtos = await seeded_memory.list_all()
        assert [d.prop_key for d in dtos] == [s.prop_key for s in SEED]
        assert all(isinstance(d, CleanConfigDTO) for d in dtos)

    @pytest.mark.asyncio
    async def test_list_all_logs_count(self, seeded_memory, caplog):
        with caplog.at_level(logging.INFO, logger="querykit.data.service"):
            await seeded_memory.list_all()
        assert "Retrieved 5 records" in caplog.text

    @pytest.mark.asyncio
    async def test_list_page_defaults(self, seeded_memory):
        page = await seeded_memory.list_page()
        assert isinstance(page, Page)
        assert (page.page, page.size, page.total) == (1, 20, 5)

    @pytest.mark.asyncio
    async def test_empty_filter_equals_list_all(self, seeded_memory):
        page = await seeded_memory.list_page(CleanConfigFilter())
        assert page.items == await seeded_memory.list_all()

    @pytest.mark.asyncio
    async def test_list_page_sorted_and_sliced(self, seeded_memory):
        page = await seeded_memory.list_page(CleanConfigFilter(page_number=2, page_size=2, sort="prop_key desc"))
        assert [d.prop_key for d in page.items] == ["db.url", "db.pool.size"]
        assert (page.total, page.total_pages) == (5, 3)

    @pytest.mark.asyncio
    async def test_oversized_page_is_clamped(self, seeded_memory):
        page = await seeded_memory.list_page(CleanConfigFilter(page_number=0, page_size=500))
        assert (page.page, page.size) == (1, 200)


class TestCriteriaLookups:
    @pytest.mark.asyncio
    async def test_fuzzy_category_scenario(self, seeded_memory):
        found = await seeded_memory.find_list_by_criteria(CleanConfigFilter(category="feature"))
        assert sorted(d.prop_key for d in found) == ["feature.dark_mode", "feature.search"]

    @pytest.mark.asyncio
    async def test_fuzzy_is_case_insensitive(self, seeded_memory):
        found = await seeded_memory.find_list_by_criteria(CleanConfigFilter(category="DATABASE"))
        assert sorted(d.prop_key for d in found) == ["db.pool.size", "db.url"]

    @pytest.mark.asyncio
    async def test_combined_criteria(self, seeded_memory):
        request = CleanConfigFilter(is_sensitive=True, priority=Range(min=1, max=4))
        found = await seeded_memory.find_list_by_criteria(request)
        assert [d.prop_key for d in found] == ["api.token"]

    @pytest.mark.asyncio
    async def test_inverted_range_matches_nothing(self, seeded_memory):
        found = await seeded_memory.find_list_by_criteria(CleanConfigFilter(priority=Range(min=10, max=5)))
        assert found == []

    @pytest.mark.asyncio
    async def test_page_by_criteria(self, seeded_memory):
        request = CleanConfigFilter(category="feature", page_size=1, sort="prop_key")
        page = await seeded_memory.find_page_by_criteria(request)
        assert [d.prop_key for d in page.items] == ["feature.dark_mode"]
        assert (page.total, page.has_next) == (2, True)

    @pytest.mark.asyncio
    async def test_find_one_exact(self, seeded_memory):
        found = await seeded_memory.find_one_exact(CleanConfigFilter(prop_key="db.url"))
        assert found is not None and found.dev_value == "sqlite://"

    @pytest.mark.asyncio
    async def test_find_one_exact_is_not_fuzzy(self, seeded_memory):
        assert await seeded_memory.find_one_exact(CleanConfigFilter(prop_key="db")) is None

    @pytest.mark.asyncio
    async def test_find_one_exact_ambiguous_returns_first(self, seeded_memory):
        found = await seeded_memory.find_one_exact(CleanConfigFilter(category="Feature Flags"))
        assert found.prop_key == "feature.dark_mode"

    @pytest.mark.asyncio
    async def test_unknown_filter_field_raises(self, seeded_memory):
        with pytest.raises(InvalidArgumentException):
            await seeded_memory.find_list_by_criteria({"colour": "red"})


class TestSortAllowList:
    @pytest.mark.asyncio
    async def test_disallowed_sort_dropped(self):
        service = CrudService(
            InMemoryRepository(CleanConfig),
            EntityMapper(CleanConfig, CleanConfigDTO),
            allowed_sort_fields={"category"},
        )
        for dto in SEED:
            await service.insert(dto)
        page = await service.list_page(CleanConfigFilter(sort="prop_key desc"))
        assert [d.prop_key for d in page.items] == [s.prop_key for s in SEED]

    @pytest.mark.asyncio
    async def test_custom_collaborators(self):
        store = InMemoryRepository(CleanConfig)
        service = CrudService(
            store,
            EntityMapper(CleanConfig, CleanConfigDTO),
            dynamic_filter=DynamicFilter(CleanConfig),
            resolver=PaginationResolver(PaginationProperties(default_size=2, max_size=3)),
        )
        for dto in SEED:
            await service.insert(dto)
        page = await service.list_page()
        assert (page.size, len(page.items)) == (2, 2)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_stamps_audit_fields(self, memory_service):
        saved = await memory_service.insert(CleanConfigDTO(prop_key="cache.ttl", dev_value="60"))
        assert isinstance(saved.id, UUID)
        assert (saved.created_at, saved.updated_at) == (NOW, NOW)
        assert (saved.created_by, saved.updated_by) == ("alice", "alice")

    @pytest.mark.asyncio
    async def test_insert_ignores_caller_audit_fields(self, memory_service):
        saved = await memory_service.insert(
            CleanConfigDTO(prop_key="cache.ttl", created_by="mallory", created_at=LATER)
        )
        assert (saved.created_by, saved.created_at) == ("alice", NOW)

    @pytest.mark.asyncio
    async def test_insert_without_auditor(self):
        service = CrudService(InMemoryRepository(CleanConfig), EntityMapper(CleanConfig, CleanConfigDTO))
        saved = await service.insert(CleanConfigDTO(prop_key="k"))
        assert saved.created_by is None
        assert saved.created_at is not None and saved.created_at.tzinfo is UTC

    @pytest.mark.asyncio
    async def test_insert_none(self, memory_service):
        with pytest.raises(InvalidArgumentException) as info:
            await memory_service.insert(None)
        assert info.value.code == "MISSING_PROJECTION"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update_never_erases(self, memory_service):
        saved = await memory_service.insert(
            CleanConfigDTO(prop_key="db.pool.size", dev_value="5", prod_value="10", description="pool")
        )
        updated = await memory_service.update(CleanConfigDTO(id=saved.id, prod_value="50"))
        assert (updated.prop_key, updated.dev_value, updated.prod_value, updated.description) == (
            "db.pool.size",
            "5",
            "50",
            "pool",
        )

    @pytest.mark.asyncio
    async def test_update_stamps_only_updated_fields(self, memory_service):
        saved = await memory_service.insert(CleanConfigDTO(prop_key="k"))
        updated = await memory_service.update(
            CleanConfigDTO(id=saved.id, description="d", created_by="mallory", created_at=LATER)
        )
        assert (updated.created_at, updated.created_by) == (NOW, "alice")
        assert updated.updated_at == LATER

    @pytest.mark.asyncio
    async def test_update_none(self, memory_service):
        with pytest.raises(InvalidArgumentException) as info:
            await memory_service.update(None)
        assert info.value.code == "MISSING_PROJECTION"

    @pytest.mark.asyncio
    async def test_update_without_id(self, memory_service):
        with pytest.raises(InvalidArgumentException) as info:
            await memory_service.update(CleanConfigDTO(prop_key="k"))
        assert info.value.code == "MISSING_IDENTITY"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, memory_service):
        missing = UUID("00000000-0000-0000-0000-000000000001")
        with pytest.raises(ResourceNotFoundException) as info:
            await memory_service.update(CleanConfigDTO(id=missing, prod_value="x"))
        assert info.value.code == "NOT_FOUND"
        assert info.value.context == {"id": missing}


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------


class TestSqlAlchemyService:
    @pytest.mark.asyncio
    async def test_insert_and_list(self, sql_service):
        dtos = await sql_service.list_all()
        assert len(dtos) == 5
        assert all(d.created_by == "batch" and d.created_at is not None for d in dtos)

    @pytest.mark.asyncio
    async def test_fuzzy_page(self, sql_service):
        page = await sql_service.find_page_by_criteria(CleanConfigFilter(category="feature", sort="prop_key desc"))
        assert [d.prop_key for d in page.items] == ["feature.search", "feature.dark_mode"]
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_find_one_exact(self, sql_service):
        found = await sql_service.find_one_exact(CleanConfigFilter(prop_key="db.pool.size"))
        assert found is not None and found.prod_value == "50"

    @pytest.mark.asyncio
    async def test_partial_update(self, sql_service):
        target = await sql_service.find_one_exact(CleanConfigFilter(prop_key="db.url"))
        updated = await sql_service.update(CleanConfigDTO(id=target.id, prod_value="postgresql://db"))
        assert (updated.dev_value, updated.prod_value, updated.category) == ("sqlite://", "postgresql://db", "Database")
        assert updated.updated_by == "batch"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, sql_service):
        with pytest.raises(ResourceNotFoundException):
            await sql_service.update(CleanConfigDTO(id=UUID(int=7), prod_value="x"))

    @pytest.mark.asyncio
    async def test_unknown_sort_property(self, sql_service):
        with pytest.raises(InvalidArgumentException) as info:
            await sql_service.list_page(CleanConfigFilter(sort="colour"))
        assert info.value.code == "INVALID_SORT_PROPERTY"
