"""Core type definitions for servicescan."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from typing_extensions import TypeAlias

T = TypeVar("T")

# Values that are reported by type tag and never walked as class hierarchies
PRIMITIVE_TYPES: tuple[type, ...] = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    list,
    tuple,
    dict,
    set,
    frozenset,
)


class ServiceKind(str, Enum):
    """How a registered name is provided by its container."""

    SERVICE = "service"
    ALIAS = "alias"
    FACTORY = "factory"
    INVOKABLE = "invokable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServiceDescriptor:
    """Uniform metadata for one registered service name.

    Attributes:
        name: Registered name, unique within a container snapshot
        kind: Classification of the registration
        resolved_type: Alias target for aliases, otherwise the runtime type name
        is_shared: True if the container caches a single instance
        factory_ref: Factory identifier when a factory is registered
        invokable_class: Declared implementation class of an invokable
        error: Failure message when the service could not be resolved
        aliases: Alias names pointing at this service (filled by listings)
    """

    name: str
    kind: ServiceKind = ServiceKind.SERVICE
    resolved_type: str = "unknown"
    is_shared: bool = False
    factory_ref: str | None = None
    invokable_class: str | None = None
    error: str | None = None
    aliases: tuple[str, ...] = ()

    def is_service(self) -> bool:
        return self.kind is ServiceKind.SERVICE

    def is_alias(self) -> bool:
        return self.kind is ServiceKind.ALIAS

    def is_factory(self) -> bool:
        return self.kind is ServiceKind.FACTORY

    def is_invokable(self) -> bool:
        return self.kind is ServiceKind.INVOKABLE

    def has_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain record for presentation layers."""
        return {
            "name": self.name,
            "type": self.kind.value,
            "class": self.resolved_type,
            "is_shared": self.is_shared,
            "is_aliased": self.is_alias(),
            "aliases": list(self.aliases),
            "factory": self.factory_ref,
            "invokable_class": self.invokable_class,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceDescriptor:
        """Rebuild a descriptor from the record produced by ``to_dict``."""
        return cls(
            name=data["name"],
            kind=ServiceKind(data.get("type", ServiceKind.SERVICE.value)),
            resolved_type=data.get("class", "unknown"),
            is_shared=bool(data.get("is_shared", False)),
            factory_ref=data.get("factory"),
            invokable_class=data.get("invokable_class"),
            error=data.get("error"),
            aliases=tuple(data.get("aliases") or ()),
        )


@dataclass(frozen=True)
class HiddenDependencyFinding:
    """One hidden-lookup call site found in a source file."""

    lookup_key: str
    source_file: str
    line_number: int
    context: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.lookup_key,
            "file": self.source_file,
            "line": self.line_number,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HiddenDependencyFinding:
        return cls(
            lookup_key=data["service"],
            source_file=data["file"],
            line_number=int(data["line"]),
            context=data["context"],
        )


@dataclass(frozen=True)
class TypeDescriptor:
    """Static view of one class in a hierarchy.

    ``source_file`` is None for built-in and extension types. ``mixins``
    holds the qualified names of mixins declared directly on the class.
    """

    name: str
    source_file: str | None = None
    parent: TypeDescriptor | None = None
    mixins: frozenset[str] = field(default_factory=frozenset)

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


HierarchyChain: TypeAlias = "tuple[TypeDescriptor, ...]"


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """Successful per-entry result."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    """Failed per-entry result carrying the error that stopped it."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error)


Outcome: TypeAlias = Union[Resolved[T], Failed]


@dataclass(frozen=True)
class HiddenDependencyReport:
    """Result of scanning one service for hidden dependencies."""

    service: str
    findings: tuple[HiddenDependencyFinding, ...] = ()
    uses_hidden_lookup: bool = False
    error: str | None = None

    def has_error(self) -> bool:
        return self.error is not None


def qualified_name(obj: Any) -> str:
    """Return ``module.QualName`` for a class or function."""
    module = getattr(obj, "__module__", None)
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or repr(obj)
    if module in (None, "builtins"):
        return name
    return f"{module}.{name}"


def is_structured(value: Any) -> bool:
    """Check if a value is an object whose class hierarchy can be walked."""
    return not isinstance(value, PRIMITIVE_TYPES)


def type_name_of(value: Any) -> str:
    """Runtime type name of a resolved service.

    Objects are named by their qualified class name, primitive values by
    their bare type tag (``str``, ``int``, ``dict``, ``NoneType``...).
    """
    if not is_structured(value):
        return type(value).__name__
    return qualified_name(type(value))
