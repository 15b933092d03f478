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
"""Layered settings: YAML/TOML files, profile overlays, env overrides, typed binding.

Keys are dot paths into a nested mapping (``querykit.data.pagination.max_size``).
Lookup order, highest first:

1. environment variable ``QUERYKIT_<KEY>`` (see :func:`env_key`)
2. the active profile overlay (``querykit-<profile>.yaml``)
3. the base file or dict
4. defaults declared on the bound properties class
"""

from __future__ import annotations

import dataclasses
import os
import re
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_PREFIX_ATTR = "__querykit_config_prefix__"
_ENV_PREFIX = "QUERYKIT_"
_MAX_PLACEHOLDER_DEPTH = 10


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Attach a config *prefix* to a dataclass or pydantic model for :meth:`Config.bind`.

    Usage::

        @config_properties(prefix="querykit.data.pagination")
        @dataclass
        class PaginationProperties:
            max_size: int = 200
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """``querykit.data.pagination.max_size`` -> ``QUERYKIT_DATA_PAGINATION_MAX_SIZE``."""
    return _ENV_PREFIX + key.removeprefix("querykit.").upper().replace(".", "_").replace("-", "_")


def _read_file(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as fh:
            return tomllib.load(fh)
    with path.open() as fh:
        return yaml.safe_load(fh) or {}


def _merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        merged[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _coerce(value: Any, expected: Any) -> Any:
    """Convert env-var strings to the declared field type."""
    if not isinstance(value, str):
        return value
    if expected is int:
        return int(value)
    if expected is float:
        return float(value)
    if expected is bool:
        return value.strip().lower() in ("true", "1", "yes", "on")
    if get_origin(expected) in (list, set, frozenset, tuple):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Config:
    """Nested configuration with dot-path access."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._sources: list[str] = []

    @classmethod
    def from_file(cls, path: str | Path, active_profiles: list[str] | None = None) -> Config:
        """Load *path* and, for each active profile, its ``<stem>-<profile><suffix>`` overlay.

        A missing base file gives an empty configuration; missing overlays
        are skipped.
        """
        path = Path(path)
        config = cls()
        if not path.exists():
            return config

        config._data = _read_file(path)
        config._sources.append(str(path))
        for profile in active_profiles or []:
            overlay = path.with_name(f"{path.stem}-{profile}{path.suffix}")
            if overlay.exists():
                config._data = _merge(config._data, _read_file(overlay))
                config._sources.append(f"{overlay} (profile: {profile})")
        return config

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this configuration, base first."""
        return list(self._sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        """Value at dot path *key*, or *default*.

        An environment override wins over file values.  String values may
        embed ``${NAME}``, ``${other.key}`` or ``${NAME:fallback}``.
        """
        override = os.environ.get(env_key(key))
        if override is not None:
            return override

        value = self._lookup(key)
        if value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self._expand(value)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        section = self._lookup(prefix)
        return dict(section) if isinstance(section, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Instantiate a ``@config_properties`` class from its prefix.

        Every field goes through :meth:`get`, so env overrides apply per field.

        Raises:
            ValueError: If *config_cls* has no prefix, or a pydantic model
                rejects the values.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")
        if issubclass(config_cls, BaseModel):
            return self._bind_model(config_cls, prefix)
        return self._bind_dataclass(config_cls, prefix)

    def _bind_model(self, model: type[Any], prefix: str) -> Any:
        values = self.get_section(prefix)
        for name in model.model_fields:
            value = self.get(f"{prefix}.{name}")
            if value is not None:
                values[name] = value
        try:
            return model.model_validate(values)
        except ValidationError as exc:
            raise ValueError(
                f"Configuration validation failed for '{model.__name__}' (prefix='{prefix}'):\n{exc}"
            ) from exc

    def _bind_dataclass(self, cls: type[T], prefix: str) -> T:
        hints = get_type_hints(cls)
        kwargs: dict[str, Any] = {}
        for field in dataclasses.fields(cls):  # type: ignore[arg-type]
            value = self.get(f"{prefix}.{field.name}")
            if value is not None:
                kwargs[field.name] = _coerce(value, hints.get(field.name))
        return cls(**kwargs)

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _expand(self, value: str, depth: int = 0) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references."
            )

        def substitute(match: re.Match[str]) -> str:
            name, _, fallback = match.group(1).partition(":")
            has_fallback = ":" in match.group(1)

            env_value = os.environ.get(name)
            if env_value is not None:
                return env_value

            found = self._lookup(name)
            if found is not None:
                text = str(found)
                return self._expand(text, depth + 1) if "${" in text else text

            if has_fallback:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{name}}}': not found in environment or config")

        return _PLACEHOLDER_RE.sub(substitute, value)
