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
"""Data engine configuration properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from querykit.core.config import config_properties


@config_properties(prefix="querykit.data.pagination")
@dataclass
class PaginationProperties:
    """Paging defaults and the page size cap (querykit.data.pagination.*)."""

    default_page: int = 1
    default_size: int = 20
    max_size: int = 200


@config_properties(prefix="querykit.data.filter")
@dataclass
class FilterProperties:
    """Criteria extraction settings (querykit.data.filter.*)."""

    cache_size: int = 1000
    excluded_fields: list[str] = field(default_factory=lambda: ["page_number", "page_size", "sort"])
