"""Registry-style container and the hidden-lookup helpers that go with it.

``Di`` keeps its registrations in private tables and exposes nothing but
``set``/``alias``/``get``. Code that wants a dependency without declaring it
reaches into the registry directly, either through the ``DiTrait`` mixin (or
the ``AbstractDi`` base class) or through the global ``Registry`` facade:

    >>> class ReportService(AbstractDi):
    ...     def render(self):
    ...         mailer = self.get_di(MAILER)         # hidden dependency
    ...         clock = Registry.get(CLOCK)          # hidden dependency

Those call sites are what the hidden-dependency scanner reports when they
use string-literal keys. This module is itself part of every ``AbstractDi``
hierarchy, so it must not contain literal lookups.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from servicescan.core.errors import ConfigurationError, ServiceNotFoundError

NAMESPACE_SEPARATORS = ("\\", ".")


def filter_class_name(name: str) -> str:
    """Flatten namespaced names: ``app.mail.Mailer`` becomes ``app_mail_Mailer``."""
    for separator in NAMESPACE_SEPARATORS:
        name = name.replace(separator, "_")
    return name


class Di:
    """Name-mangling service registry.

    Every entry is a closure called with the registry itself. Shared entries
    are built once.
    """

    def __init__(self):
        self._registered_objects: dict[str, dict[str, Any]] = {}
        self._aliases: dict[str, str] = {}
        self._instances: dict[str, Any] = {}

    def set(self, name: str, closure: Callable[[Di], Any], *, shared: bool = False) -> None:
        key = filter_class_name(name)
        self._registered_objects[key] = {"closure": closure, "shared": shared}
        self._instances.pop(key, None)

    def set_shared(self, name: str, closure: Callable[[Di], Any]) -> None:
        self.set(name, closure, shared=True)

    def alias(self, alias: str, target: str) -> None:
        self._aliases[filter_class_name(alias)] = target

    def get(self, name: str) -> Any:
        key = filter_class_name(name)
        seen = set()
        while key in self._aliases:
            if key in seen:
                raise ServiceNotFoundError(name)
            seen.add(key)
            key = filter_class_name(self._aliases[key])

        if key in self._instances:
            return self._instances[key]

        entry = self._registered_objects.get(key)
        if entry is None:
            raise ServiceNotFoundError(name)

        instance = entry["closure"](self)
        if entry.get("shared"):
            self._instances[key] = instance
        return instance


class Registry:
    """Global access point to the active ``Di`` registry."""

    _di: Di | None = None

    @classmethod
    def set_di(cls, di: Di | None) -> None:
        cls._di = di

    @classmethod
    def get_di(cls) -> Di:
        if cls._di is None:
            raise ConfigurationError("No registry installed, call Registry.set_di() first")
        return cls._di

    @classmethod
    def get(cls, name: str) -> Any:
        return cls.get_di().get(name)


class DiTrait:
    """Mixin giving a class direct access to the registry."""

    _di: Di | None = None

    def set_di(self, di: Di) -> None:
        self._di = di

    def get_di(self, name: str) -> Any:
        di = self._di if self._di is not None else Registry.get_di()
        return di.get(name)


class AbstractDi(DiTrait):
    """Base class for services that pull dependencies from the registry."""

    def __init__(self, di: Di | None = None):
        if di is not None:
            self.set_di(di)
