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
"""Tests for dot-path resolution against entity types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from pydantic import BaseModel

from querykit.data.paths import resolve_path, split_path, validate_sort_properties
from querykit.kernel.exceptions import InvalidArgumentException


@dataclass
class Team:
    name: str | None = None


@dataclass
class Owner:
    name: str | None = None
    team: Team | None = None


@dataclass
class Setting:
    prop_key: str | None = None
    priority: int | None = None
    owner: Owner | None = None
    tags: list[str] = field(default_factory=list)


class SettingModel(BaseModel):
    prop_key: str
    owner: Owner | None = None


class PlainSetting:
    prop_key: str
    extra: Any


class ConstructedSetting:
    def __init__(self, prop_key, priority: int = 0, *args, **kwargs):
        self.prop_key = prop_key
        self.priority = priority


class TestSplitPath:
    def test_split(self):
        assert split_path("owner.team.name") == ["owner", "team", "name"]

    @pytest.mark.parametrize("path", [None, "", "   "])
    def test_blank(self, path):
        with pytest.raises(InvalidArgumentException) as info:
            split_path(path)
        assert info.value.code == "INVALID_FIELD"

    @pytest.mark.parametrize("path", ["owner..name", ".owner", "owner."])
    def test_empty_segment(self, path):
        with pytest.raises(InvalidArgumentException) as info:
            split_path(path)
        assert info.value.code == "INVALID_FIELD_PATH"


class TestResolvePath:
    def test_simple_field(self):
        assert resolve_path(Setting, "priority") is int

    def test_nested_dataclass_path(self):
        assert resolve_path(Setting, "owner.team.name") is str

    def test_unknown_field(self):
        with pytest.raises(InvalidArgumentException) as info:
            resolve_path(Setting, "owner.nickname")
        assert info.value.code == "INVALID_FIELD_PATH"
        assert info.value.context == {"path": "owner.nickname", "segment": "nickname", "type": "Owner"}

    def test_pydantic_model(self):
        assert resolve_path(SettingModel, "owner.name") is str
        with pytest.raises(InvalidArgumentException):
            resolve_path(SettingModel, "missing")

    def test_annotated_class(self):
        assert resolve_path(PlainSetting, "prop_key") is str

    def test_opaque_type_stops_validation(self):
        assert resolve_path(PlainSetting, "extra.anything.goes") is Any

    def test_constructor_parameters_of_plain_class(self):
        assert resolve_path(ConstructedSetting, "prop_key") is Any
        assert resolve_path(ConstructedSetting, "priority") is Any
        for name in ("args", "kwargs", "colour"):
            with pytest.raises(InvalidArgumentException):
                resolve_path(ConstructedSetting, name)


class TestValidateSortProperties:
    def test_valid(self):
        validate_sort_properties(Setting, ["prop_key", "owner.name"])

    def test_invalid_reports_sort_code(self):
        with pytest.raises(InvalidArgumentException) as info:
            validate_sort_properties(Setting, ["prop_key", "colour"])
        assert info.value.code == "INVALID_SORT_PROPERTY"
        assert info.value.context["segment"] == "colour"
