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
"""StructlogAdapter — default LoggingPort implementation using structlog.

QueryKit's own modules log through stdlib ``logging.getLogger(__name__)``.
Once configured, those records and any structlog logger share one processor
chain and one stdout handler, rendered as console text or JSON lines.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from querykit.config.properties.logging import LoggingProperties
from querykit.core.config import Config

_RENDERERS: dict[str, type] = {
    "json": structlog.processors.JSONRenderer,
    "console": structlog.dev.ConsoleRenderer,
}


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog events and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


class StructlogAdapter:
    """Default logging adapter backed by structlog.

    Reads ``querykit.logging.level`` (``root`` plus per-logger entries) and
    ``querykit.logging.format`` (``console`` or ``json``).
    """

    def __init__(self) -> None:
        self._root_level = "INFO"
        self._format = "console"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        props = config.bind(LoggingProperties)
        levels = {name: str(level).upper() for name, level in dict(props.level).items()}
        self._root_level = levels.pop("root", "INFO")
        self._module_levels = levels
        self._format = str(props.format).lower()

        shared = _shared_processors()
        structlog.configure(
            processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self._install_handler(shared)

        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set one stdlib logger's level; unknown level names mean INFO."""
        logging.getLogger(name).setLevel(_level(level))

    def _install_handler(self, shared: list[structlog.types.Processor]) -> None:
        renderer = _RENDERERS.get(self._format, structlog.dev.ConsoleRenderer)()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared,
                processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            )
        )
        # force=True replaces handlers left by an earlier configure()
        logging.basicConfig(handlers=[handler], level=_level(self._root_level), force=True)
