"""Capability set every container backend is adapted to."""

from __future__ import annotations

from typing import Any

from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class ServiceContainer(Protocol):
    """Queries the inspection core needs from a container.

    There is no shared base class: any object providing these methods can be
    inspected. ``get`` raises ``ServiceNotFoundError`` for unknown names and
    ``InstantiationError`` when the backend fails to build the service.
    """

    def has(self, name: str) -> bool:
        """Check if a name is registered."""
        ...

    def get(self, name: str) -> Any:
        """Return the service instance registered under ``name``."""
        ...

    def get_registered_services(self) -> list[str]:
        """All registered names, in no particular order."""
        ...

    def is_shared(self, name: str) -> bool:
        ...

    def has_alias(self, name: str) -> bool:
        ...

    def get_alias(self, name: str) -> str:
        ...

    def has_factory(self, name: str) -> bool:
        ...

    def get_factory(self, name: str) -> Any:
        ...

    def has_invokable_class(self, name: str) -> bool:
        ...

    def get_invokable_class(self, name: str) -> str:
        ...
