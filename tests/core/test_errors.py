"""Tests for servicescan's exception types."""

import pytest

from servicescan.core.errors import (
    AliasUnresolvedError,
    ConfigurationError,
    FileUnreadableError,
    InstantiationError,
    ServiceLookupError,
    ServiceNotFoundError,
    ServiceScanError,
)


class TestServiceLookupErrors:
    """Test the lookup error family."""

    def test_not_found_is_lookup_error(self):
        """Callers catching LookupError also catch unknown services."""
        error = ServiceNotFoundError("mailer")
        assert isinstance(error, LookupError)
        assert isinstance(error, ServiceLookupError)
        assert isinstance(error, ServiceScanError)
        assert error.service_name == "mailer"
        assert "mailer" in str(error)

    def test_not_found_lists_available_services(self):
        """Test that available names are listed, truncated after five."""
        error = ServiceNotFoundError("x", available=["a", "b", "c", "d", "e", "f", "g"])
        message = str(error)
        assert "Available services: a, b, c, d, e" in message
        assert "(and 2 more)" in message

    def test_instantiation_error_keeps_cause(self):
        """Test that the original exception is kept."""
        cause = RuntimeError("database is down")
        error = InstantiationError("repo", cause)

        assert isinstance(error, LookupError)
        assert error.cause is cause
        assert error.reason == "database is down"
        assert str(error) == "Failed to instantiate 'repo': database is down"

    def test_instantiation_error_without_message(self):
        """Test that an empty cause message falls back to the exception type."""
        error = InstantiationError("repo", ValueError())
        assert error.reason == "ValueError"

    def test_catch_with_base_class(self):
        """Test catching every error through the base class."""
        with pytest.raises(ServiceScanError):
            raise InstantiationError("repo", KeyError("x"))


class TestOtherErrors:
    """Test the remaining error types."""

    def test_alias_unresolved(self):
        error = AliasUnresolvedError("Ghost", "missing")
        assert error.alias == "Ghost"
        assert error.target == "missing"
        assert "Ghost" in str(error)
        assert "missing" in str(error)

    def test_file_unreadable(self):
        cause = FileNotFoundError("no such file")
        error = FileUnreadableError("/tmp/gone.py", cause)
        assert error.path == "/tmp/gone.py"
        assert error.cause is cause
        assert str(error).startswith("Cannot read source file /tmp/gone.py")

    def test_configuration_error(self):
        error = ConfigurationError("bad setting")
        assert isinstance(error, ServiceScanError)
        assert not isinstance(error, LookupError)
