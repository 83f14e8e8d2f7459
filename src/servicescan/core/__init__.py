"""Core inspection machinery: adapters, metadata, hierarchy walking and scanning."""

from servicescan.core.adapters import RegistryAdapter, ServiceManagerAdapter, adapt
from servicescan.core.config import ScannerSettings, load_settings
from servicescan.core.container import ServiceContainer
from servicescan.core.errors import (
    AliasUnresolvedError,
    ConfigurationError,
    FileUnreadableError,
    InstantiationError,
    ServiceLookupError,
    ServiceNotFoundError,
    ServiceScanError,
)
from servicescan.core.hierarchy import HiddenLookupMarker, HierarchyWalker
from servicescan.core.metadata import ServiceMetadataBuilder, alias_map
from servicescan.core.reader import ServiceReader
from servicescan.core.scanner import HiddenDependencyScanner, LookupPattern, context_around
from servicescan.core.types import (
    HiddenDependencyFinding,
    HiddenDependencyReport,
    ServiceDescriptor,
    ServiceKind,
    TypeDescriptor,
)

__all__ = [
    # Containers
    "ServiceContainer",
    "ServiceManagerAdapter",
    "RegistryAdapter",
    "adapt",
    # Inspection
    "ServiceMetadataBuilder",
    "ServiceReader",
    "HierarchyWalker",
    "HiddenLookupMarker",
    "HiddenDependencyScanner",
    "LookupPattern",
    "alias_map",
    "context_around",
    # Types
    "ServiceDescriptor",
    "ServiceKind",
    "HiddenDependencyFinding",
    "HiddenDependencyReport",
    "TypeDescriptor",
    # Settings
    "ScannerSettings",
    "load_settings",
    # Errors
    "ServiceScanError",
    "ServiceLookupError",
    "ServiceNotFoundError",
    "InstantiationError",
    "AliasUnresolvedError",
    "FileUnreadableError",
    "ConfigurationError",
]
