"""Tests for the Di registry, the Registry facade and the lookup helpers."""

import pytest

from servicescan.containers import AbstractDi, Di, DiTrait, Registry, filter_class_name
from servicescan.core.errors import ConfigurationError, ServiceNotFoundError


class Mailer:
    pass


class TestFilterClassName:
    """Test name flattening."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("app.mail.Mailer", "app_mail_Mailer"),
            ("App\\Mail\\Mailer", "App_Mail_Mailer"),
            ("mailer", "mailer"),
        ],
    )
    def test_flattening(self, name, expected):
        assert filter_class_name(name) == expected


class TestDi:
    """Test the registry container."""

    def test_names_are_stored_flattened(self, di):
        assert list(di._registered_objects) == [
            "app_mail_Mailer",
            "app_time_Clock",
            "app_broken_Service",
        ]
        assert di._aliases == {"mailer": "app.mail.Mailer"}

    def test_get_flattens_names(self, di):
        assert di.get("app.mail.Mailer") is di.get("app_mail_Mailer")

    def test_closure_receives_registry(self):
        di = Di()
        di.set("owner", lambda d: d)
        assert di.get("owner") is di

    def test_shared(self, di):
        assert di.get("app.mail.Mailer") is di.get("app.mail.Mailer")
        assert di.get("app.time.Clock") is not di.get("app.time.Clock")

    def test_alias(self, di):
        assert di.get("mailer") is di.get("app.mail.Mailer")

    def test_missing(self, di):
        with pytest.raises(ServiceNotFoundError):
            di.get("app.missing")

    def test_alias_cycle(self):
        di = Di()
        di.alias("a", "b")
        di.alias("b", "a")
        with pytest.raises(ServiceNotFoundError):
            di.get("a")

    def test_closure_errors_propagate(self, di):
        with pytest.raises(RuntimeError, match="database is down"):
            di.get("app.broken.Service")

    def test_reregistering_drops_shared_instance(self):
        di = Di()
        di.set_shared("mailer", lambda d: Mailer())
        first = di.get("mailer")
        di.set_shared("mailer", lambda d: Mailer())
        assert di.get("mailer") is not first


class TestRegistry:
    """Test the global facade."""

    def test_requires_installed_registry(self):
        with pytest.raises(ConfigurationError, match="No registry installed"):
            Registry.get("mailer")

    def test_get(self, di):
        Registry.set_di(di)
        assert Registry.get_di() is di
        assert Registry.get("mailer") is di.get("app.mail.Mailer")


class TestLookupHelpers:
    """Test the mixin and base class used for hidden lookups."""

    def test_trait_uses_own_registry(self, di):
        class Report(DiTrait):
            pass

        report = Report()
        report.set_di(di)
        assert report.get_di("mailer") is di.get("mailer")

    def test_trait_falls_back_to_global_registry(self, di):
        class Report(DiTrait):
            pass

        Registry.set_di(di)
        assert Report().get_di("mailer") is di.get("mailer")

    def test_abstract_di_constructor(self, di):
        class Report(AbstractDi):
            pass

        assert Report(di).get_di("mailer") is di.get("mailer")
        assert Report()._di is None
