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
"""Criterion value shapes shared by filter records and the predicate builder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class MatchMode(StrEnum):
    """How string criteria are matched.

    EXACT compares with equality; FUZZY does case-insensitive substring
    containment.  Non-string values always use equality.
    """

    EXACT = "exact"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class Range:
    """Inclusive range criterion; either bound may be omitted.

    A mapping with ``"min"`` / ``"max"`` keys is accepted wherever a
    ``Range`` is.
    """

    min: Any = None
    max: Any = None
