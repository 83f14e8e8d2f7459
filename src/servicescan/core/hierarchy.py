"""Class hierarchy walking for service instances.

A service's hierarchy is modelled as a chain of ``TypeDescriptor`` values:
the instance's own class first, then its primary superclass, and so on up to
``object``. Only the primary chain is followed. Mixins are recorded on the
class that declares them but are not walked.

Which base is the primary superclass? Python has no syntax for mixins, so
bases are classified by name: a base whose name ends with one of the mixin
suffixes (``Mixin``, ``Trait`` by default), or that is the hidden-lookup
marker mixin itself, is a mixin. The first remaining base is the parent.

Example:
    >>> walker = HierarchyWalker()
    >>> chain = walker.chain_for(report_service)
    >>> [t.short_name for t in chain]
    ['ReportService', 'BaseReport', 'AbstractDi', 'object']
    >>> walker.uses_hidden_lookup(chain)
    True
"""

from __future__ import annotations

import inspect
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .types import HierarchyChain, TypeDescriptor, is_structured, qualified_name

DEFAULT_MARKER_BASE = "servicescan.containers.registry.AbstractDi"
DEFAULT_MARKER_MIXIN = "servicescan.containers.registry.DiTrait"
DEFAULT_MIXIN_SUFFIXES = ("Mixin", "Trait")


@dataclass(frozen=True)
class HiddenLookupMarker:
    """Qualified names of the base class and mixin that enable hidden lookups."""

    base: str = DEFAULT_MARKER_BASE
    mixin: str = DEFAULT_MARKER_MIXIN


def source_file_of(cls: type) -> str | None:
    """Absolute path of the file defining ``cls``, None for built-ins."""
    try:
        path = inspect.getsourcefile(cls)
    except (TypeError, OSError):
        return None
    if not path:
        return None
    return os.path.abspath(path)


class HierarchyWalker:
    """Builds hierarchy chains and checks them for the hidden-lookup marker."""

    def __init__(
        self,
        marker: HiddenLookupMarker | None = None,
        mixin_suffixes: Iterable[str] = DEFAULT_MIXIN_SUFFIXES,
    ):
        self.marker = marker or HiddenLookupMarker()
        self.mixin_suffixes = tuple(mixin_suffixes)

    def is_mixin(self, cls: type) -> bool:
        if qualified_name(cls) == self.marker.mixin:
            return True
        return any(cls.__name__.endswith(suffix) for suffix in self.mixin_suffixes)

    def primary_parent(self, cls: type) -> type | None:
        if cls is object:
            return None
        for base in cls.__bases__:
            if not self.is_mixin(base):
                return base
        return object

    def describe_type(self, cls: type) -> TypeDescriptor:
        """Describe ``cls`` and its primary ancestors.

        Built iteratively from the root down so deep hierarchies never
        recurse.
        """
        classes = list(self._primary_classes(cls))
        descriptor = None
        for current in reversed(classes):
            parent = self.primary_parent(current)
            mixins = frozenset(
                qualified_name(base) for base in current.__bases__ if base is not parent
            )
            descriptor = TypeDescriptor(
                name=qualified_name(current),
                source_file=source_file_of(current),
                parent=descriptor,
                mixins=mixins,
            )
        return descriptor

    def chain_for(self, instance: Any) -> HierarchyChain:
        """Hierarchy chain of an instance, empty for non-object values."""
        if not is_structured(instance):
            return ()
        chain = self.chain_from(self.describe_type(type(instance)))
        logger.debug(f"Hierarchy of {chain[0].name}: {' -> '.join(t.short_name for t in chain)}")
        return chain

    @staticmethod
    def chain_from(descriptor: TypeDescriptor | None) -> HierarchyChain:
        chain = []
        while descriptor is not None:
            chain.append(descriptor)
            descriptor = descriptor.parent
        return tuple(chain)

    def uses_hidden_lookup(self, chain: Iterable[TypeDescriptor]) -> bool:
        """True if any class in the chain is, or directly extends, the marker base or mixin.

        A marker reached through a non-primary base is recorded in
        ``mixins``, so both names are checked there too.
        """
        markers = {self.marker.base, self.marker.mixin}
        for descriptor in chain:
            if descriptor.name in markers or markers & descriptor.mixins:
                return True
        return False

    def _primary_classes(self, cls: type | None) -> Iterator[type]:
        while cls is not None:
            yield cls
            cls = self.primary_parent(cls)
