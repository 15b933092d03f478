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
"""Composable query predicates — a closed set of criterion shapes.

A :class:`Specification` describes *what* to match, never *how*: each
backing store brings its own interpreter
(:class:`~querykit.data.relational.sqlalchemy.compiler.SpecificationCompiler`
for SQLAlchemy, :class:`~querykit.data.memory.evaluator.SpecificationEvaluator`
for in-memory collections).

Specifications are frozen dataclasses, so two filters built from equal
inputs compare equal and hash alike.  They compose with ``&`` only:

    spec = Equals("category", "db") & Between("priority", 1, 5)

:class:`Always` is the identity of ``&`` and the result of composing
nothing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


class Specification:
    """Base of every predicate variant."""

    __slots__ = ()

    def __and__(self, other: Specification) -> Specification:
        if not isinstance(other, Specification):
            return NotImplemented
        if isinstance(other, Always):
            return self
        return And(_parts(self) + _parts(other))


def _parts(spec: Specification) -> tuple[Specification, ...]:
    return spec.parts if isinstance(spec, And) else (spec,)


@dataclass(frozen=True, slots=True)
class Always(Specification):
    """Matches every record."""

    def __and__(self, other: Specification) -> Specification:
        if not isinstance(other, Specification):
            return NotImplemented
        return other


@dataclass(frozen=True, slots=True)
class Equals(Specification):
    """``field == value``."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Contains(Specification):
    """Case-insensitive substring match; ``value`` is taken literally."""

    field: str
    value: str


@dataclass(frozen=True, slots=True)
class In(Specification):
    """``field`` is one of ``values``."""

    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Between(Specification):
    """``low <= field <= high``. Bounds are not reordered."""

    field: str
    low: Any
    high: Any


@dataclass(frozen=True, slots=True)
class GreaterOrEqual(Specification):
    """``field >= value``."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class LessOrEqual(Specification):
    """``field <= value``."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class And(Specification):
    """Conjunction of ``parts``, evaluated left to right."""

    parts: tuple[Specification, ...]


def compose(specs: Iterable[Specification]) -> Specification:
    """AND-combine *specs* in iteration order. Returns :class:`Always` if empty."""
    result: Specification = Always()
    for spec in specs:
        result = result & spec
    return result
