"""Shared test fixtures and utilities."""

import importlib.util
import sys
import textwrap
import uuid

import pytest
from loguru import logger

from servicescan.containers import Di, Registry, ServiceManager


@pytest.fixture(autouse=True)
def reset_registry():
    """Make sure no test leaks a global registry into the next one."""
    Registry.set_di(None)
    yield
    Registry.set_di(None)


@pytest.fixture
def write_module(tmp_path):
    """Write Python source to a fresh module file and import it.

    Returns a function ``write(source, name=None)``. Every module gets a
    unique name so that classes from different tests never collide.
    """
    created = []

    def write(source: str, name: str | None = None):
        name = name or f"scanned_{uuid.uuid4().hex[:10]}"
        path = tmp_path / f"{name}.py"
        path.write_text(textwrap.dedent(source))

        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        created.append(name)
        spec.loader.exec_module(module)
        return module

    yield write

    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture
def unique_name():
    """Generate unique module names for modules importing each other."""
    return lambda prefix="scanned": f"{prefix}_{uuid.uuid4().hex[:10]}"


@pytest.fixture
def log_messages():
    """Capture servicescan log records."""
    messages = []
    logger.enable("servicescan")
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)
    logger.disable("servicescan")


# Plain services used across tests
class Mailer:
    """Service with no dependencies."""

    def send(self, to: str) -> str:
        return f"sent to {to}"


class Clock:
    """Service created by invokable registration."""

    def now(self) -> int:
        return 42


class BrokenService:
    """Service whose construction always fails."""

    def __init__(self):
        raise RuntimeError("database is down")


def mailer_factory(container, name):
    return Mailer()


def broken_factory(container, name):
    raise RuntimeError("database is down")


@pytest.fixture
def service_manager():
    """Service manager with one registration of every kind."""
    return ServiceManager({
        "services": {"config": {"debug": True}, "app.name": "demo"},
        "factories": {"mailer": mailer_factory, "broken": broken_factory},
        "invokables": {"clock": Clock},
        "aliases": {"Mailer": "mailer", "MailService": "mailer", "Ghost": "missing"},
        "shared": {"clock": False},
    })


@pytest.fixture
def di():
    """Registry-style container with namespaced names."""
    registry = Di()
    registry.set_shared("app.mail.Mailer", lambda d: Mailer())
    registry.set("app.time.Clock", lambda d: Clock())
    registry.set("app.broken.Service", lambda d: BrokenService())
    registry.alias("mailer", "app.mail.Mailer")
    return registry
