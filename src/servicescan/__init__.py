"""servicescan - inspect dependency-injection containers and find hidden dependencies."""

from loguru import logger

__version__ = "0.1.0"

from servicescan.containers import AbstractDi, Di, DiTrait, Registry, ServiceManager
from servicescan.core import (
    HiddenDependencyFinding,
    HiddenDependencyScanner,
    HierarchyWalker,
    ScannerSettings,
    ServiceDescriptor,
    ServiceKind,
    ServiceReader,
    ServiceScanError,
    adapt,
    load_settings,
)

__all__ = [
    # Inspection
    "ServiceReader",
    "HierarchyWalker",
    "HiddenDependencyScanner",
    "adapt",
    "ServiceDescriptor",
    "ServiceKind",
    "HiddenDependencyFinding",
    "ServiceScanError",
    # Settings
    "ScannerSettings",
    "load_settings",
    # Containers
    "ServiceManager",
    "Di",
    "Registry",
    "DiTrait",
    "AbstractDi",
]

# Disabled by default, the command line enables it
logger.disable("servicescan")
