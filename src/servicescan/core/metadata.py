"""Derivation of ``ServiceDescriptor`` values from a container adapter.

Classification rules, in priority order:

1. Alias: the name forwards to another name. The target is recorded as
   ``resolved_type`` and nothing is instantiated.
2. Factory: a factory is registered for the name.
3. Invokable: an implementation class is registered for the name.
4. Service: anything else.

Factory and invokable metadata are both recorded when both exist; only the
reported kind follows the priority. Registered names are then instantiated
to capture their runtime type. Instantiation failures never escape:
the descriptor comes back as ``unknown`` with the failure in ``error``.
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from loguru import logger

from .container import ServiceContainer
from .errors import ServiceScanError
from .types import Failed, Outcome, Resolved, ServiceDescriptor, ServiceKind, qualified_name, type_name_of


def describe_factory(factory: Any) -> str | None:
    """Identifier for a registered factory."""
    if factory is None:
        return None
    if isinstance(factory, str):
        return factory
    if inspect.isclass(factory) or inspect.isfunction(factory) or inspect.ismethod(factory):
        return qualified_name(factory)
    return qualified_name(type(factory))


def resolve(container: ServiceContainer, name: str) -> Outcome[Any]:
    """Instantiate a service, returning an explicit outcome instead of raising."""
    try:
        return Resolved(container.get(name))
    except ServiceScanError as e:
        return Failed(e)


class ServiceMetadataBuilder:
    """Builds descriptors for the names registered in a container."""

    def __init__(self, container: ServiceContainer):
        self.container = container

    def describe(self, name: str) -> ServiceDescriptor:
        """Describe one registered name. Never raises for container failures."""
        try:
            return self._describe(name)
        except ServiceScanError as e:
            logger.warning(f"Could not inspect service '{name}': {e}")
            return ServiceDescriptor(name=name, kind=ServiceKind.UNKNOWN, error=str(e))

    def describe_all(self) -> list[ServiceDescriptor]:
        return [self.describe(name) for name in self.container.get_registered_services()]

    def _describe(self, name: str) -> ServiceDescriptor:
        container = self.container

        if container.has_alias(name):
            return ServiceDescriptor(
                name=name,
                kind=ServiceKind.ALIAS,
                resolved_type=container.get_alias(name),
            )

        kind = ServiceKind.SERVICE
        factory_ref = None
        invokable_class = None

        if container.has_invokable_class(name):
            kind = ServiceKind.INVOKABLE
            invokable_class = container.get_invokable_class(name) or None

        if container.has_factory(name):
            kind = ServiceKind.FACTORY
            factory_ref = describe_factory(container.get_factory(name))

        resolved_type = "unknown"
        error = None
        if container.has(name):
            outcome = resolve(container, name)
            if isinstance(outcome, Resolved):
                resolved_type = type_name_of(outcome.value)
            else:
                logger.warning(f"Service '{name}' failed to instantiate: {outcome.message}")
                kind = ServiceKind.UNKNOWN
                error = outcome.message

        return ServiceDescriptor(
            name=name,
            kind=kind,
            resolved_type=resolved_type,
            is_shared=container.is_shared(name),
            factory_ref=factory_ref,
            invokable_class=invokable_class,
            error=error,
        )


def alias_map(descriptors: Iterable[ServiceDescriptor]) -> dict[str, list[str]]:
    """Map every alias target to the sorted alias names pointing at it."""
    targets: dict[str, set[str]] = defaultdict(set)
    for descriptor in descriptors:
        if descriptor.is_alias():
            targets[descriptor.resolved_type].add(descriptor.name)
    return {target: sorted(aliases) for target, aliases in targets.items()}
