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
"""Unified exception hierarchy for QueryKit.

All library exceptions inherit from QueryKitException so callers can catch
one base type, or map the specific subclasses to distinct outward responses.

Categories:
- InvalidArgumentException: null/blank required input or an unresolvable field path
- ResourceNotFoundException: an update targets an identity absent from the store

Tolerated filter shapes (unknown value types, non-comparable range bounds)
are never raised; they degrade to permissive predicates and are only logged.
Backing-store failures propagate unchanged and are not wrapped here.
"""

from __future__ import annotations


class QueryKitException(Exception):
    """Base exception for all QueryKit errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "INVALID_FIELD_PATH").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class BusinessException(QueryKitException):
    """Errors caused by the caller's input rather than by infrastructure."""


class InvalidArgumentException(BusinessException):
    """A required argument is missing or blank, or a field path does not resolve."""


class ResourceNotFoundException(BusinessException):
    """Requested resource does not exist."""
