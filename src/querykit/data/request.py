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
"""Base filter record and base projection shared by every entity type."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

AUDIT_FIELDS: frozenset[str] = frozenset({"created_at", "created_by", "updated_at", "updated_by"})


@dataclass
class PageRequest:
    """Paging fields every filter record carries.

    Subclass it and add optional criterion fields; fields left at ``None``
    are not filtered on.

    Usage::

        @dataclass
        class ConfigFilter(PageRequest):
            category: str | None = None
            is_sensitive: bool | None = None
    """

    page_number: int | None = 1
    page_size: int | None = 20
    sort: str | None = None


@dataclass
class BaseProjection:
    """Identity and audit fields of every projection.

    Audit fields are filled in by :class:`~querykit.data.service.CrudService`;
    values sent by callers are ignored on insert and update.
    """

    id: Any = None
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None
