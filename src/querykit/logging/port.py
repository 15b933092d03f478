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
"""Logging port for applications embedding QueryKit.

The filter, pagination and service modules log through stdlib loggers under
``querykit.*``.  A :class:`LoggingPort` decides where those records go and at
which level; :class:`~querykit.logging.structlog_adapter.StructlogAdapter` is
the bundled implementation.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from querykit.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """Routes QueryKit's log records and sets their levels."""

    def configure(self, config: Config) -> None:
        """Apply ``querykit.logging.level`` (``root`` plus per-logger names) and ``querykit.logging.format``.

        Safe to call again; the previous output handler is replaced.
        """
        ...

    def get_logger(self, name: str) -> Any:
        """Logger for *name*, emitting through the configured output."""
        ...

    def set_level(self, name: str, level: str) -> None:
        """Change one logger's level, e.g. ``set_level("querykit.data.filter", "DEBUG")``."""
        ...
