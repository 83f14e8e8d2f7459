"""Service-locator container with first-class aliases, factories and invokables.

This is the direct-API backend: every question the inspection core asks
(``has_alias``, ``get_factory``, ``is_shared``...) is answered by a public
method, so ``ServiceManagerAdapter`` only has to forward calls.

Example:
    >>> manager = ServiceManager({
    ...     "services": {"config": {"debug": True}},
    ...     "factories": {"mailer": lambda container, name: Mailer()},
    ...     "invokables": {"clock": "myapp.time.SystemClock"},
    ...     "aliases": {"Mailer": "mailer"},
    ...     "shared": {"clock": False},
    ... })
    >>> manager.get("Mailer")
    <myapp.mail.Mailer object at ...>
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from servicescan.core.config import import_string
from servicescan.core.errors import ServiceNotFoundError
from servicescan.core.types import qualified_name


class ServiceManager:
    """A small service manager keyed by string names.

    Services are resolved in this order: registered instances, factories,
    invokable classes. Aliases are followed before lookup. Shared services
    are built once and cached.
    """

    def __init__(self, config: dict[str, Any] | None = None, *, shared_by_default: bool = True):
        self._services: dict[str, Any] = {}
        self._factories: dict[str, Any] = {}
        self._invokables: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}
        self._shared: dict[str, bool] = {}
        self._instances: dict[str, Any] = {}
        self.shared_by_default = shared_by_default

        if config:
            self.configure(config)

    def configure(self, config: dict[str, Any]) -> ServiceManager:
        """Apply a configuration mapping (``services``, ``factories``, ...)."""
        if "shared_by_default" in config:
            self.shared_by_default = bool(config["shared_by_default"])
        for name, instance in config.get("services", {}).items():
            self.set_service(name, instance)
        for name, factory in config.get("factories", {}).items():
            self.set_factory(name, factory)
        for name, cls in config.get("invokables", {}).items():
            self.set_invokable_class(name, cls)
        for alias, target in config.get("aliases", {}).items():
            self.set_alias(alias, target)
        for name, flag in config.get("shared", {}).items():
            self.set_shared(name, flag)
        return self

    # Dict-like interface

    def __setitem__(self, name: str, value: Any) -> None:
        """Register an instance, or a factory when given a plain callable."""
        if callable(value) and not isinstance(value, type):
            self.set_factory(name, value)
        else:
            self.set_service(name, value)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    # Registration

    def set_service(self, name: str, instance: Any) -> None:
        self._services[name] = instance
        self._instances.pop(name, None)

    def set_factory(self, name: str, factory: Callable[..., Any] | type | str) -> None:
        self._factories[name] = factory
        self._instances.pop(name, None)

    def set_invokable_class(self, name: str, cls: type | str) -> None:
        self._invokables[name] = cls
        self._instances.pop(name, None)

    def set_alias(self, alias: str, target: str) -> None:
        self._aliases[alias] = target

    def set_shared(self, name: str, flag: bool) -> None:
        self._shared[name] = bool(flag)

    # Queries

    def has(self, name: str) -> bool:
        return (
            name in self._aliases
            or name in self._services
            or name in self._factories
            or name in self._invokables
        )

    def get(self, name: str) -> Any:
        """Resolve a service, following aliases."""
        resolved = self._resolve_name(name)

        if resolved in self._services:
            return self._services[resolved]
        if resolved in self._instances:
            return self._instances[resolved]

        if resolved in self._factories:
            instance = self._call_factory(resolved, self._factories[resolved])
        elif resolved in self._invokables:
            instance = self._build_invokable(self._invokables[resolved])
        else:
            raise ServiceNotFoundError(name, available=sorted(self.get_registered_services()))

        if self.is_shared(resolved):
            self._instances[resolved] = instance
        return instance

    def get_registered_services(self) -> list[str]:
        names: dict[str, None] = {}
        for table in (self._services, self._factories, self._invokables, self._aliases):
            names.update(dict.fromkeys(table))
        return list(names)

    def is_shared(self, name: str) -> bool:
        return self._shared.get(name, self.shared_by_default)

    def has_alias(self, name: str) -> bool:
        return name in self._aliases

    def get_alias(self, name: str) -> str:
        if name not in self._aliases:
            raise ServiceNotFoundError(name)
        return self._aliases[name]

    def has_factory(self, name: str) -> bool:
        return name in self._factories

    def get_factory(self, name: str) -> Any:
        if name not in self._factories:
            raise ServiceNotFoundError(name)
        return self._factories[name]

    def has_invokable_class(self, name: str) -> bool:
        return name in self._invokables

    def get_invokable_class(self, name: str) -> str:
        if name not in self._invokables:
            raise ServiceNotFoundError(name)
        cls = self._invokables[name]
        return cls if isinstance(cls, str) else qualified_name(cls)

    def _resolve_name(self, name: str) -> str:
        seen = set()
        while name in self._aliases:
            if name in seen:
                raise ServiceNotFoundError(name)
            seen.add(name)
            name = self._aliases[name]
        return name

    def _call_factory(self, name: str, factory: Any) -> Any:
        if isinstance(factory, str):
            factory = import_string(factory)
        if isinstance(factory, type):
            # Factory classes are instantiated, then invoked
            factory = factory()
        logger.debug(f"Building '{name}' with factory {qualified_name(factory)}")
        return factory(self, name)

    def _build_invokable(self, cls: Any) -> Any:
        if isinstance(cls, str):
            cls = import_string(cls)
        return cls()
