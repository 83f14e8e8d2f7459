"""Tests for service metadata derivation."""

from servicescan.containers import ServiceManager
from servicescan.core.adapters import adapt
from servicescan.core.metadata import ServiceMetadataBuilder, alias_map, describe_factory, resolve
from servicescan.core.types import Failed, Resolved, ServiceDescriptor, ServiceKind


def make_mailer(container, name):
    return object()


class MailerFactory:
    def __call__(self, container, name):
        return object()


class Thing:
    pass


class FlakyManager(ServiceManager):
    """Third-party style container whose factory lookup fails for one name."""

    def get_factory(self, name):
        if name == "mailer":
            raise KeyError(name)
        return super().get_factory(name)


class TestDescribeFactory:
    """Test factory identifiers."""

    def test_none(self):
        assert describe_factory(None) is None

    def test_string(self):
        assert describe_factory("app.factories.make_mailer") == "app.factories.make_mailer"

    def test_function(self):
        assert describe_factory(make_mailer) == f"{__name__}.make_mailer"

    def test_class(self):
        assert describe_factory(MailerFactory) == f"{__name__}.MailerFactory"

    def test_callable_instance(self):
        assert describe_factory(MailerFactory()) == f"{__name__}.MailerFactory"

    def test_lambda(self):
        assert describe_factory(lambda c, n: None).endswith("<lambda>")


class TestServiceMetadataBuilder:
    """Test classification of registered names."""

    def test_alias(self, service_manager):
        """Aliases record their target and are not instantiated."""
        descriptor = ServiceMetadataBuilder(adapt(service_manager)).describe("Mailer")

        assert descriptor.kind is ServiceKind.ALIAS
        assert descriptor.is_alias()
        assert descriptor.resolved_type == "mailer"
        assert descriptor.factory_ref is None

    def test_alias_to_missing_target_is_reported_as_is(self, service_manager):
        descriptor = ServiceMetadataBuilder(adapt(service_manager)).describe("Ghost")

        assert descriptor.is_alias()
        assert descriptor.resolved_type == "missing"
        assert not descriptor.has_error()

    def test_factory(self, service_manager):
        descriptor = ServiceMetadataBuilder(adapt(service_manager)).describe("mailer")

        assert descriptor.kind is ServiceKind.FACTORY
        assert descriptor.factory_ref.endswith(".mailer_factory")
        assert descriptor.resolved_type.endswith(".Mailer")
        assert descriptor.is_shared

    def test_invokable(self, service_manager):
        descriptor = ServiceMetadataBuilder(adapt(service_manager)).describe("clock")

        assert descriptor.kind is ServiceKind.INVOKABLE
        assert descriptor.invokable_class.endswith(".Clock")
        assert descriptor.resolved_type.endswith(".Clock")
        assert not descriptor.is_shared

    def test_plain_service_values(self, service_manager):
        builder = ServiceMetadataBuilder(adapt(service_manager))

        config = builder.describe("config")
        assert config.kind is ServiceKind.SERVICE
        assert config.resolved_type == "dict"

        assert builder.describe("app.name").resolved_type == "str"

    def test_factory_wins_over_invokable(self):
        """Both are recorded, the reported kind follows the priority."""
        manager = ServiceManager()
        manager.set_factory("thing", lambda c, n: Thing())
        manager.set_invokable_class("thing", Thing)

        descriptor = ServiceMetadataBuilder(adapt(manager)).describe("thing")

        assert descriptor.kind is ServiceKind.FACTORY
        assert descriptor.factory_ref is not None
        assert descriptor.invokable_class == f"{__name__}.Thing"

    def test_instantiation_failure_is_captured(self, service_manager):
        descriptor = ServiceMetadataBuilder(adapt(service_manager)).describe("broken")

        assert descriptor.kind is ServiceKind.UNKNOWN
        assert descriptor.has_error()
        assert "database is down" in descriptor.error
        assert descriptor.resolved_type == "unknown"
        assert descriptor.factory_ref.endswith(".broken_factory")

    def test_failure_is_logged(self, service_manager, log_messages):
        ServiceMetadataBuilder(adapt(service_manager)).describe("broken")

        warnings = [r for r in log_messages if r["level"].name == "WARNING"]
        assert any("broken" in r["message"] for r in warnings)

    def test_describe_all_is_total(self, service_manager):
        """One broken service does not stop the others from being described."""
        descriptors = ServiceMetadataBuilder(adapt(service_manager)).describe_all()

        by_name = {d.name: d for d in descriptors}
        assert len(by_name) == 8
        assert by_name["broken"].has_error()
        assert not by_name["mailer"].has_error()

    def test_backend_query_failure_is_captured(self):
        manager = FlakyManager()
        manager.configure({
            "services": {"config": {"debug": True}},
            "factories": {"mailer": make_mailer},
        })
        builder = ServiceMetadataBuilder(adapt(manager))

        descriptors = {d.name: d for d in builder.describe_all()}

        assert descriptors["mailer"].kind is ServiceKind.UNKNOWN
        assert "get_factory('mailer') failed" in descriptors["mailer"].error
        assert descriptors["config"].resolved_type == "dict"

    def test_registry_backend(self, di):
        builder = ServiceMetadataBuilder(adapt(di))

        clock = builder.describe("app_time_Clock")
        assert clock.kind is ServiceKind.FACTORY
        assert clock.factory_ref.endswith("<lambda>")
        assert clock.resolved_type.endswith(".Clock")
        assert not clock.is_shared

        alias = builder.describe("mailer")
        assert alias.is_alias()
        assert alias.resolved_type == "app.mail.Mailer"


class TestResolve:
    """Test the explicit instantiation outcome."""

    def test_resolved(self, service_manager):
        outcome = resolve(adapt(service_manager), "config")
        assert isinstance(outcome, Resolved)
        assert outcome.value == {"debug": True}

    def test_failed(self, service_manager):
        outcome = resolve(adapt(service_manager), "broken")
        assert isinstance(outcome, Failed)
        assert "database is down" in outcome.message

    def test_unknown_name(self, service_manager):
        assert isinstance(resolve(adapt(service_manager), "nothing"), Failed)


class TestAliasMap:
    """Test the reverse alias map."""

    def test_groups_aliases_by_target(self):
        descriptors = [
            ServiceDescriptor("mailer", ServiceKind.FACTORY, "app.Mailer"),
            ServiceDescriptor("Mailer", ServiceKind.ALIAS, "mailer"),
            ServiceDescriptor("MailService", ServiceKind.ALIAS, "mailer"),
            ServiceDescriptor("Clock", ServiceKind.ALIAS, "clock"),
        ]
        assert alias_map(descriptors) == {
            "mailer": ["MailService", "Mailer"],
            "clock": ["Clock"],
        }

    def test_no_aliases(self):
        assert alias_map([ServiceDescriptor("mailer")]) == {}
