"""Exception hierarchy for service inspection and hidden-dependency scanning.

This module defines the exceptions raised by the container adapters, the
metadata builder and the scanner. Each exception type represents a specific
failure mode and carries the context needed to report it.

Exception Hierarchy:
    ServiceScanError: Base exception for all servicescan errors
    ├── ServiceLookupError: A service could not be obtained (also a LookupError)
    │   ├── ServiceNotFoundError: Name is not registered in the container
    │   └── InstantiationError: The container raised while building the service
    ├── AliasUnresolvedError: Alias target is not registered
    ├── FileUnreadableError: Ancestor source file missing or unreadable
    └── ConfigurationError: Invalid settings or container target

Usage Patterns:
    Bulk operations never let these escape. Per-entry failures are turned
    into ``unknown`` descriptors or empty reports, so one broken service
    never aborts a listing:

    >>> descriptor = builder.describe("mailer")
    >>> if descriptor.has_error():
    ...     print(f"mailer is broken: {descriptor.error}")

    Single lookups raise, and callers check ``has()`` first:

    >>> try:
    ...     instance = adapter.get("mailer")
    ... except ServiceLookupError as e:
    ...     print(f"Failed to get {e.service_name}: {e}")
"""

from __future__ import annotations


class ServiceScanError(Exception):
    """Base exception for all servicescan errors."""

    pass


class ServiceLookupError(ServiceScanError, LookupError):
    """Raised when a service cannot be obtained from a container.

    Subclasses ``LookupError`` so callers that only know the builtin
    hierarchy can still catch it.
    """

    def __init__(
        self, message: str, service_name: str | None = None, cause: Exception | None = None
    ):
        super().__init__(message)
        self.service_name = service_name
        self.cause = cause


class ServiceNotFoundError(ServiceLookupError):
    """Raised when a requested name is not registered in the container."""

    def __init__(self, service_name: str, available: list[str] | None = None):
        self.available = available or []
        message = f"Service '{service_name}' is not registered in the container."
        if self.available:
            message += f"\nAvailable services: {', '.join(self.available[:5])}"
            if len(self.available) > 5:
                message += f" (and {len(self.available) - 5} more)"
        super().__init__(message, service_name=service_name)


class InstantiationError(ServiceLookupError):
    """Raised when the container fails while constructing a service.

    The original exception is kept in ``cause`` and chained with ``from``.
    """

    def __init__(self, service_name: str, cause: Exception):
        reason = str(cause) or type(cause).__name__
        super().__init__(
            f"Failed to instantiate '{service_name}': {reason}",
            service_name=service_name,
            cause=cause,
        )
        self.reason = reason


class AliasUnresolvedError(ServiceScanError):
    """Raised when an alias points at a name the container does not know."""

    def __init__(self, alias: str, target: str):
        self.alias = alias
        self.target = target
        super().__init__(f"Alias '{alias}' points to unregistered service '{target}'")


class FileUnreadableError(ServiceScanError):
    """Raised when a source file cannot be read.

    The scanner consumes this error and reports no findings for the file.
    """

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        message = f"Cannot read source file {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ConfigurationError(ServiceScanError):
    """Raised when settings or the container target are invalid.

    This occurs when:
    - A configuration file cannot be parsed
    - A setting has a value of the wrong type
    - The container target cannot be imported or adapted
    """

    pass
