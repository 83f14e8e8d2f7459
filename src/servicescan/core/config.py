"""Settings for the scanner and the command line.

Settings are read from three layers, later layers winning:

1. ``ScannerSettings`` defaults
2. a YAML or JSON file (``--config`` on the command line)
3. environment variables prefixed with ``SERVICESCAN_``

Example:
    # servicescan.yaml
    container: myapp.bootstrap:build_container
    context_length: 80
    marker_base: myapp.di.AbstractDi
    extra_patterns:
      - "container\\.get\\(\\s*['\\"](?P<key>[^'\\"]+)['\\"]\\s*\\)"

    $ SERVICESCAN_LOG_LEVEL=DEBUG servicescan --config servicescan.yaml list
"""

from __future__ import annotations

import dataclasses
import importlib
import json
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, get_args, get_origin, get_type_hints

import yaml
from loguru import logger

from .errors import ConfigurationError
from .hierarchy import (
    DEFAULT_MARKER_BASE,
    DEFAULT_MARKER_MIXIN,
    DEFAULT_MIXIN_SUFFIXES,
    HiddenLookupMarker,
    HierarchyWalker,
)
from .scanner import DEFAULT_CONTEXT_LENGTH, DEFAULT_PATTERNS, HiddenDependencyScanner, LookupPattern

ENV_PREFIX = "SERVICESCAN_"


@dataclass
class ScannerSettings:
    """Configuration for container loading, hierarchy walking and scanning."""

    container: str | None = None
    context_length: int = DEFAULT_CONTEXT_LENGTH
    marker_base: str = DEFAULT_MARKER_BASE
    marker_mixin: str = DEFAULT_MARKER_MIXIN
    mixin_suffixes: list[str] = field(default_factory=lambda: list(DEFAULT_MIXIN_SUFFIXES))
    extra_patterns: list[str] = field(default_factory=list)
    encoding: str = "utf-8"
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.context_length < 0:
            raise ConfigurationError(
                f"context_length must not be negative, got {self.context_length}"
            )
        for index, regex in enumerate(self.extra_patterns):
            try:
                re.compile(regex)
            except re.error as e:
                raise ConfigurationError(f"Invalid pattern extra_patterns[{index}]: {e}") from e

    def patterns(self) -> list[LookupPattern]:
        extra = [
            LookupPattern(f"extra_{index}", regex)
            for index, regex in enumerate(self.extra_patterns)
        ]
        return [*DEFAULT_PATTERNS, *extra]

    def build_walker(self) -> HierarchyWalker:
        return HierarchyWalker(
            HiddenLookupMarker(base=self.marker_base, mixin=self.marker_mixin),
            mixin_suffixes=self.mixin_suffixes,
        )

    def build_scanner(self) -> HiddenDependencyScanner:
        return HiddenDependencyScanner(
            self.patterns(), context_length=self.context_length, encoding=self.encoding
        )


class ConfigurationSource(ABC):
    """A layer of raw configuration values."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load the values provided by this source."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


class FileSource(ConfigurationSource):
    """Values from a YAML or JSON file. A missing file provides nothing."""

    def __init__(self, path: str | Path):
        super().__init__(f"File:{path}")
        self.path = Path(path)
        self.format = self._detect_format()

    def _detect_format(self) -> str:
        suffix = self.path.suffix.lower()
        if suffix == ".json":
            return "json"
        elif suffix in (".yaml", ".yml"):
            return "yaml"
        else:
            raise ConfigurationError(f"Unknown configuration format for {self.path}")

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"Configuration file {self.path} not found")
            return {}

        content = self.path.read_text()
        try:
            if self.format == "json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot parse {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.path} must contain a mapping at the top level")
        return data


class EnvironmentSource(ConfigurationSource):
    """Values from environment variables, ``SERVICESCAN_CONTEXT_LENGTH`` -> ``context_length``."""

    def __init__(self, prefix: str = ENV_PREFIX):
        super().__init__(f"ENV:{prefix}")
        self.prefix = prefix.upper()

    def load(self) -> dict[str, Any]:
        config = {}
        for key, value in os.environ.items():
            if not key.startswith(self.prefix):
                continue
            key = key[len(self.prefix):].lower()
            if key:
                config[key] = value
        return config


def convert_value(value: Any, target_type: Any, path: str) -> Any:
    """Convert a raw configuration value to the field's declared type."""
    if value is None:
        return None

    origin = get_origin(target_type)
    args = [arg for arg in get_args(target_type) if arg is not type(None)]

    # Optional[X] / X | None
    if origin is not None and origin is not list and len(args) == 1:
        return convert_value(value, args[0], path)

    try:
        if target_type is bool:
            if isinstance(value, str):
                return value.lower() in ("true", "yes", "1", "on")
            return bool(value)
        elif target_type is int:
            if isinstance(value, bool):
                raise ValueError("booleans are not integers")
            return int(value)
        elif target_type is str:
            if not isinstance(value, str):
                raise ValueError(f"expected a string, got {type(value).__name__}")
            return value
        elif origin is list:
            if isinstance(value, str):
                value = [item.strip() for item in value.split(",") if item.strip()]
            if not isinstance(value, (list, tuple)):
                raise ValueError(f"expected a list, got {type(value).__name__}")
            item_type = args[0] if args else str
            return [convert_value(item, item_type, f"{path}[{i}]") for i, item in enumerate(value)]
        return value
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid value {value!r} for {path}: {e}") from e


def settings_from_dict(data: dict[str, Any]) -> ScannerSettings:
    """Build settings from raw values, ignoring unknown keys."""
    hints = get_type_hints(ScannerSettings)
    known = {f.name for f in dataclasses.fields(ScannerSettings)}
    kwargs = {}
    for key, value in data.items():
        if key not in known:
            logger.debug(f"Ignoring unknown setting '{key}'")
            continue
        kwargs[key] = convert_value(value, hints[key], key)
    return ScannerSettings(**kwargs)


def load_settings(
    path: str | Path | None = None, env_prefix: str = ENV_PREFIX
) -> ScannerSettings:
    """Load settings from defaults, an optional file and the environment."""
    sources: list[ConfigurationSource] = []
    if path is not None:
        sources.append(FileSource(path))
    sources.append(EnvironmentSource(env_prefix))

    data: dict[str, Any] = {}
    for source in sources:
        values = source.load()
        if values:
            logger.debug(f"Loaded {len(values)} setting(s) from {source.name}")
        data.update(values)

    return settings_from_dict(data)


def import_string(target: str) -> Any:
    """Import an object from ``package.module:attr`` or ``package.module.attr``.

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    if ":" in target:
        module_name, _, attr_path = target.partition(":")
    else:
        module_name, _, attr_path = target.rpartition(".")

    if not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import target '{target}', expected 'module:attr'")

    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"'{module_name}' has no attribute '{attr_path}'") from e
    return obj
