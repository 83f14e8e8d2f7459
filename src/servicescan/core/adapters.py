"""Adapters normalizing concrete containers into the ``ServiceContainer`` capability set.

Two backend shapes are supported:

* ``ServiceManagerAdapter`` for service locators that answer alias, factory
  and invokable questions directly (``servicescan.containers.ServiceManager``
  or anything exposing the same methods).
* ``RegistryAdapter`` for registries that only expose ``get()`` and keep
  their registrations in private tables (``servicescan.containers.Di``).
  The adapter reads those tables reflectively and applies the registry's
  own name mangling before each lookup.

Both adapters turn backend failures inside ``get`` into
``ServiceNotFoundError``/``InstantiationError``. They share no base class,
only the protocol.

Example:
    >>> adapter = adapt(di)
    >>> adapter.has_factory("app.mail.Mailer")
    True
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from .container import ServiceContainer
from .errors import ConfigurationError, InstantiationError, ServiceLookupError, ServiceNotFoundError

REGISTERED_OBJECTS_ATTR = "_registered_objects"
ALIASES_ATTR = "_aliases"


class ServiceManagerAdapter:
    """Forwards every query to a direct-API service manager.

    Backend exceptions raised by a per-name query become
    ``ServiceLookupError`` so that metadata building stays total.
    """

    def __init__(self, manager: Any):
        self.manager = manager

    def has(self, name: str) -> bool:
        return bool(self._query("has", name))

    def get(self, name: str) -> Any:
        if not self.has(name):
            raise ServiceNotFoundError(name)
        try:
            return self.manager.get(name)
        except ServiceLookupError:
            raise
        except Exception as e:
            raise InstantiationError(name, e) from e

    def get_registered_services(self) -> list[str]:
        return list(self.manager.get_registered_services())

    def is_shared(self, name: str) -> bool:
        return bool(self._query("is_shared", name))

    def has_alias(self, name: str) -> bool:
        return bool(self._query("has_alias", name))

    def get_alias(self, name: str) -> str:
        return self._query("get_alias", name)

    def has_factory(self, name: str) -> bool:
        return bool(self._query("has_factory", name))

    def get_factory(self, name: str) -> Any:
        return self._query("get_factory", name)

    def has_invokable_class(self, name: str) -> bool:
        return bool(self._query("has_invokable_class", name))

    def get_invokable_class(self, name: str) -> str:
        return self._query("get_invokable_class", name)

    def _query(self, method: str, name: str) -> Any:
        try:
            return getattr(self.manager, method)(name)
        except ServiceLookupError:
            raise
        except Exception as e:
            raise ServiceLookupError(
                f"{method}('{name}') failed: {str(e) or type(e).__name__}",
                service_name=name,
                cause=e,
            ) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({type(self.manager).__name__})"


class RegistryAdapter:
    """Derives the capability set from a registry's internal tables.

    The registry is expected to hold ``_registered_objects`` (flattened
    name to ``{"closure": ..., "shared": ...}``) and ``_aliases`` (flattened
    name to target). Every registered object is closure-backed, so every
    registered object counts as having a factory. Invokables do not exist
    in this backend.
    """

    def __init__(
        self,
        registry: Any,
        *,
        objects_attr: str = REGISTERED_OBJECTS_ATTR,
        aliases_attr: str = ALIASES_ATTR,
        separators: tuple[str, ...] = ("\\", "."),
    ):
        self.registry = registry
        self.objects_attr = objects_attr
        self.aliases_attr = aliases_attr
        self.separators = separators

    def filter_name(self, name: str) -> str:
        """Apply the registry's name mangling."""
        for separator in self.separators:
            name = name.replace(separator, "_")
        return name

    def has(self, name: str) -> bool:
        key = self.filter_name(name)
        return key in self._registered_objects() or key in self._aliases()

    def get(self, name: str) -> Any:
        if not self.has(name):
            raise ServiceNotFoundError(name)
        try:
            return self.registry.get(name)
        except ServiceLookupError:
            raise
        except Exception as e:
            raise InstantiationError(name, e) from e

    def get_registered_services(self) -> list[str]:
        names = dict.fromkeys(self._registered_objects())
        names.update(dict.fromkeys(self._aliases()))
        return list(names)

    def is_shared(self, name: str) -> bool:
        entry = self._registered_objects().get(self.filter_name(name))
        if entry is None:
            return False
        return bool(entry.get("shared", False))

    def has_alias(self, name: str) -> bool:
        return self.filter_name(name) in self._aliases()

    def get_alias(self, name: str) -> str:
        return self._aliases().get(self.filter_name(name), name)

    def has_factory(self, name: str) -> bool:
        return self.filter_name(name) in self._registered_objects()

    def get_factory(self, name: str) -> Any:
        entry = self._registered_objects().get(self.filter_name(name))
        if entry is None:
            return None
        return entry.get("closure")

    def has_invokable_class(self, name: str) -> bool:
        return False

    def get_invokable_class(self, name: str) -> str:
        return ""

    def _registered_objects(self) -> dict[str, dict[str, Any]]:
        return self._read_table(self.objects_attr)

    def _aliases(self) -> dict[str, str]:
        return self._read_table(self.aliases_attr)

    def _read_table(self, attr: str) -> dict:
        table = vars(self.registry).get(attr)
        if table is None:
            table = getattr(type(self.registry), attr, None)
        if not isinstance(table, dict):
            raise ConfigurationError(
                f"{type(self.registry).__name__} has no '{attr}' table to inspect"
            )
        return table

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({type(self.registry).__name__})"


_DIRECT_API = (
    "has",
    "get",
    "get_registered_services",
    "is_shared",
    "has_alias",
    "get_alias",
    "has_factory",
    "get_factory",
    "has_invokable_class",
    "get_invokable_class",
)


def adapt(container: Any) -> ServiceContainer:
    """Wrap a raw container in the matching adapter.

    Raises:
        ConfigurationError: If the object matches neither backend shape
    """
    if isinstance(container, (ServiceManagerAdapter, RegistryAdapter)):
        return container

    if all(callable(getattr(container, method, None)) for method in _DIRECT_API):
        logger.debug(f"Using direct API adapter for {type(container).__name__}")
        return ServiceManagerAdapter(container)

    if (
        callable(getattr(container, "get", None))
        and isinstance(getattr(container, REGISTERED_OBJECTS_ATTR, None), dict)
        and isinstance(getattr(container, ALIASES_ATTR, None), dict)
    ):
        logger.debug(f"Using registry adapter for {type(container).__name__}")
        return RegistryAdapter(container)

    raise ConfigurationError(
        f"Cannot inspect {type(container).__name__}: it is neither a service manager "
        f"nor a registry with {REGISTERED_OBJECTS_ATTR}/{ALIASES_ATTR} tables"
    )
