"""Query surface over a container: listings, single lookups and hidden-dependency scans.

``ServiceReader`` ties the adapter, the metadata builder, the hierarchy
walker and the scanner together. Every query is computed fresh from the
container and the filesystem. Nothing is cached between calls.

Examples:
    Listing services:

    >>> reader = ServiceReader(ServiceManager(config))
    >>> for descriptor in reader.list_services(filter="mail", type="factory"):
    ...     print(descriptor.name, descriptor.resolved_type)

    Finding hidden dependencies:

    >>> report = reader.scan_service("report_service")
    >>> if report.has_error():
    ...     print(f"Could not scan: {report.error}")
    >>> for finding in report.findings:
    ...     print(f"{finding.source_file}:{finding.line_number} -> {finding.lookup_key}")
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from loguru import logger

from .adapters import adapt
from .errors import AliasUnresolvedError
from .hierarchy import HierarchyWalker
from .metadata import ServiceMetadataBuilder, alias_map, resolve
from .scanner import HiddenDependencyScanner
from .types import Failed, HiddenDependencyFinding, HiddenDependencyReport, ServiceDescriptor


class ServiceReader:
    """Reads service metadata and hidden dependencies from one container.

    Attributes:
        container: The adapted container
        builder: Metadata builder bound to the container
        walker: Hierarchy walker deciding whether a service is scanned
        scanner: Scanner applied to each ancestor's source file
    """

    def __init__(
        self,
        container: Any,
        *,
        walker: HierarchyWalker | None = None,
        scanner: HiddenDependencyScanner | None = None,
    ):
        self.container = adapt(container)
        self.builder = ServiceMetadataBuilder(self.container)
        self.walker = walker or HierarchyWalker()
        self.scanner = scanner or HiddenDependencyScanner()

    # Listings

    def list_services(
        self, filter: str | None = None, type: str | None = None
    ) -> list[ServiceDescriptor]:
        """List services sorted by name.

        Args:
            filter: Case-insensitive substring the name must contain
            type: Kind tag the descriptor must have ("service", "alias", ...)

        Returns:
            Matching descriptors, each carrying the aliases that point at it
        """
        descriptors = self.builder.describe_all()
        aliases = alias_map(descriptors)
        needle = filter.lower() if filter else None

        services = []
        for descriptor in descriptors:
            if needle and needle not in descriptor.name.lower():
                continue
            if type and descriptor.kind.value != type:
                continue
            if not descriptor.is_alias() and descriptor.name in aliases:
                descriptor = replace(descriptor, aliases=tuple(aliases[descriptor.name]))
            services.append(descriptor)

        return sorted(services, key=lambda d: d.name)

    def get_all_services(self) -> list[ServiceDescriptor]:
        return self.list_services()

    def get_services_by_type(self, type: str | None = None) -> list[ServiceDescriptor]:
        return self.list_services(type=type)

    # Single services

    def has_service(self, name: str) -> bool:
        return self.container.has(name)

    def get_service(self, name: str) -> ServiceDescriptor | None:
        """Describe one service, or None if the name is not registered."""
        if not self.container.has(name):
            return None
        descriptor = self.builder.describe(name)
        related = self.related_aliases(name)
        if related and not descriptor.is_alias():
            descriptor = replace(descriptor, aliases=tuple(related))
        return descriptor

    def get_service_instance(self, name: str) -> Any:
        """Instantiate a service. Raises the adapter's lookup errors."""
        return self.container.get(name)

    def related_aliases(self, name: str) -> list[str]:
        """Names of the aliases that point at ``name``."""
        aliases = []
        for registered in self.container.get_registered_services():
            if self.container.has_alias(registered) and self.container.get_alias(registered) == name:
                aliases.append(registered)
        return sorted(aliases)

    def check_alias(self, name: str) -> str:
        """Return the alias target, checking that it is registered.

        Raises:
            AliasUnresolvedError: If the target is not a registered name
        """
        target = self.container.get_alias(name)
        if not self.container.has(target):
            raise AliasUnresolvedError(name, target)
        return target

    # Hidden dependencies

    def uses_hidden_lookup(self, name: str) -> bool:
        """Check if the service's class hierarchy carries the marker."""
        outcome = resolve(self.container, name)
        if isinstance(outcome, Failed):
            return False
        return self.walker.uses_hidden_lookup(self.walker.chain_for(outcome.value))

    def scan_service(self, name: str) -> HiddenDependencyReport:
        """Scan a service's hierarchy for hidden lookups.

        Failing to instantiate the service aborts the scan. The report then
        has no findings and carries the error.
        """
        outcome = resolve(self.container, name)
        if isinstance(outcome, Failed):
            logger.warning(f"Cannot scan '{name}': {outcome.message}")
            return HiddenDependencyReport(service=name, error=outcome.message)

        chain = self.walker.chain_for(outcome.value)
        if not self.walker.uses_hidden_lookup(chain):
            logger.debug(f"'{name}' does not use hidden lookups, skipping scan")
            return HiddenDependencyReport(service=name)

        findings = self.scanner.scan_chain(chain)
        return HiddenDependencyReport(
            service=name, findings=tuple(findings), uses_hidden_lookup=True
        )

    def get_hidden_dependencies(self, name: str) -> list[HiddenDependencyFinding]:
        """Hidden lookups of one service. Empty when there is nothing to report."""
        return list(self.scan_service(name).findings)

    def scan_services(self, filter: str | None = None) -> list[HiddenDependencyReport]:
        """Scan every registered (non-alias) service matching ``filter``."""
        needle = filter.lower() if filter else None
        reports = []
        for name in sorted(self.container.get_registered_services()):
            if needle and needle not in name.lower():
                continue
            if self.container.has_alias(name):
                continue
            reports.append(self.scan_service(name))
        return reports
