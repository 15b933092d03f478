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
"""Tests for the QueryKit exception hierarchy."""

import pytest

from querykit.kernel.exceptions import (
    BusinessException,
    InvalidArgumentException,
    QueryKitException,
    ResourceNotFoundException,
)


class TestQueryKitException:
    def test_message_code_and_context(self):
        exc = QueryKitException("boom", code="X", context={"k": 1})
        assert str(exc) == "boom"
        assert exc.code == "X"
        assert exc.context == {"k": 1}

    def test_defaults(self):
        exc = QueryKitException("boom")
        assert exc.code is None
        assert exc.context == {}

    def test_context_not_shared_between_instances(self):
        a = QueryKitException("a")
        b = QueryKitException("b")
        a.context["x"] = 1
        assert b.context == {}


class TestHierarchy:
    @pytest.mark.parametrize("cls", [InvalidArgumentException, ResourceNotFoundException])
    def test_business_exceptions(self, cls):
        exc = cls("bad")
        assert isinstance(exc, BusinessException)
        assert isinstance(exc, QueryKitException)

    def test_catch_by_base(self):
        with pytest.raises(QueryKitException) as info:
            raise ResourceNotFoundException("missing", code="NOT_FOUND", context={"id": 7})
        assert info.value.code == "NOT_FOUND"
        assert info.value.context["id"] == 7
