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
"""QueryKit Data — dynamic filtering, pagination and generic CRUD services.

QueryKit Data turns filter records into composable specifications, resolves
raw paging input into a valid :class:`Pageable`, and runs both against any
:class:`BackingStore` through :class:`CrudService`.

Adapters:
    - **QueryKit Data Relational** (``querykit.data.relational.sqlalchemy``) — SQLAlchemy async ORM.
    - **QueryKit Data Memory** (``querykit.data.memory``) — dictionary-backed store.

Store-agnostic types are exported directly.  The default adapter
(SQLAlchemy) is re-exported for convenience.
"""

# Default adapter (SQLAlchemy) re-exports
from querykit.data.relational.sqlalchemy import Base, BaseEntity, Repository, SpecificationCompiler

# Store-agnostic exports
from querykit.data.criteria import MatchMode, Range
from querykit.data.extractor import CriteriaExtractor, FieldMetadataCache
from querykit.data.filter import DynamicFilter, PredicateBuilder
from querykit.data.mapper import EntityMapper, Mapper
from querykit.data.memory import InMemoryRepository, SpecificationEvaluator
from querykit.data.page import Page
from querykit.data.pageable import Order, Pageable, Sort
from querykit.data.pagination import PaginationResolver
from querykit.data.ports.outbound import BackingStore, ProjectionMapper
from querykit.data.request import BaseProjection, PageRequest
from querykit.data.service import CrudService
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
    compose,
)

__all__ = [
    # Store-agnostic
    "Always",
    "And",
    "BackingStore",
    "BaseProjection",
    "Between",
    "Contains",
    "CriteriaExtractor",
    "CrudService",
    "DynamicFilter",
    "EntityMapper",
    "Equals",
    "FieldMetadataCache",
    "GreaterOrEqual",
    "In",
    "InMemoryRepository",
    "LessOrEqual",
    "Mapper",
    "MatchMode",
    "Order",
    "Page",
    "PageRequest",
    "Pageable",
    "PaginationResolver",
    "PredicateBuilder",
    "ProjectionMapper",
    "Range",
    "Sort",
    "Specification",
    "SpecificationEvaluator",
    "compose",
    # Default adapter (SQLAlchemy)
    "Base",
    "BaseEntity",
    "Repository",
    "SpecificationCompiler",
]
