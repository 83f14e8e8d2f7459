"""Reference containers that servicescan can inspect."""

from servicescan.containers.registry import AbstractDi, Di, DiTrait, Registry, filter_class_name
from servicescan.containers.service_manager import ServiceManager

__all__ = [
    "ServiceManager",
    "Di",
    "Registry",
    "DiTrait",
    "AbstractDi",
    "filter_class_name",
]
