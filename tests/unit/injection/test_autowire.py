"""Tests for constructor autowiring."""

from __future__ import annotations

from abc import ABC, abstractmethod

import pytest

from armature.injection import (
    AutowireError,
    AutowirePass,
    ContainerBuilder,
    Reference,
    type_id,
)


class Transport(ABC):
    @abstractmethod
    def send(self, message: str) -> None: ...


class SmtpTransport(Transport):
    def send(self, message: str) -> None:
        pass


class SendmailTransport(Transport):
    def send(self, message: str) -> None:
        pass


class LoggingTransport(Transport):
    def __init__(self, inner: Transport) -> None:
        self.inner = inner

    def send(self, message: str) -> None:
        self.inner.send(message)


class Logger:
    pass


class Mailer:
    def __init__(self, transport: Transport) -> None:
        self.transport = transport


class Newsletter:
    def __init__(
        self,
        mailer: Mailer,
        logger: Logger | None = None,
        *,
        subject: str = "news",
    ) -> None:
        self.mailer = mailer
        self.logger = logger
        self.subject = subject


class Audit:
    def __init__(self, logger: Logger | None) -> None:
        self.logger = logger


class Legacy:
    def __init__(self, thing) -> None:  # noqa: ANN001
        self.thing = thing


class Report:
    def __init__(self, title: str, mailer: Mailer, retries: int = 3, *args, **kwargs) -> None:
        self.title = title
        self.mailer = mailer
        self.retries = retries


class Notifier:
    def __init__(self, mailer: Mailer, *, logger: Logger) -> None:
        self.mailer = mailer
        self.logger = logger


def build_mailer(transport: Transport) -> Mailer:
    return Mailer(transport)


class TestCandidateSelection:
    def test_single_candidate_is_bound(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer)

        container = builder.compile()

        assert builder.get_definition("mailer").get_arguments() == [Reference("smtp")]
        assert container.get("mailer").transport is container.get("smtp")

    def test_ambiguous_candidates_fail(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("sendmail", SendmailTransport)
        builder.autowire("mailer", Mailer)

        with pytest.raises(AutowireError) as exc:
            builder.compile()

        assert "ambiguous autowiring for type" in str(exc.value)
        assert type_id(Transport) in str(exc.value)
        assert exc.value.candidates == ["smtp", "sendmail"]
        assert exc.value.service_id == "mailer"
        assert exc.value.parameter == "transport"
        assert not builder.is_compiled()

    def test_registration_under_type_id_wins(self, builder: ContainerBuilder) -> None:
        builder.register(Transport, SendmailTransport)
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer)

        container = builder.compile()

        assert isinstance(container.get("mailer").transport, SendmailTransport)

    def test_alias_under_type_id_wins(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("sendmail", SendmailTransport)
        builder.set_alias(Transport, "sendmail")
        builder.autowire("mailer", Mailer)

        container = builder.compile()

        assert container.get("mailer").transport is container.get("sendmail")

    def test_no_candidate_fails(self, builder: ContainerBuilder) -> None:
        builder.autowire("mailer", Mailer)
        with pytest.raises(AutowireError) as exc:
            builder.compile()
        assert "no service implements type" in str(exc.value)

    def test_definition_is_not_its_own_candidate(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.autowire("logging_transport", LoggingTransport)

        container = builder.compile()

        assert container.get("logging_transport").inner is container.get("smtp")

    def test_abstract_definitions_are_not_candidates(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("base_transport", SmtpTransport).set_abstract(True)
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer)

        builder.compile()

        assert builder.get_definition("mailer").get_arguments() == [Reference("smtp")]

    def test_synthetic_instances_are_candidates(
        self, builder: ContainerBuilder
    ) -> None:
        smtp = SmtpTransport()
        builder.set("smtp", smtp)
        builder.autowire("mailer", Mailer)

        container = builder.compile()

        assert container.get("mailer").transport is smtp


class TestExplicitArguments:
    def test_explicit_positional_argument_is_kept(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("sendmail", SendmailTransport)
        builder.autowire("mailer", Mailer).add_argument(Reference("sendmail"))

        builder.compile()

        assert builder.get_definition("mailer").get_arguments() == [
            Reference("sendmail")
        ]

    def test_explicit_named_argument_is_kept(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("sendmail", SendmailTransport)
        builder.autowire("mailer", Mailer).set_argument(
            "transport", Reference("smtp")
        )

        builder.compile()

        definition = builder.get_definition("mailer")
        assert definition.get_arguments() == []
        assert definition.get_named_arguments() == {"transport": Reference("smtp")}

    def test_gap_moves_later_values_to_named_arguments(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer)
        builder.autowire("report", Report).set_argument("title", "Monthly")

        container = builder.compile()

        definition = builder.get_definition("report")
        assert definition.get_arguments() == []
        assert definition.get_named_arguments() == {
            "title": "Monthly",
            "mailer": Reference("mailer"),
        }
        report = container.get("report")
        assert report.title == "Monthly"
        assert report.retries == 3

    def test_keyword_only_parameters_are_named(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("logger", Logger)
        builder.autowire("mailer", Mailer)
        builder.autowire("notifier", Notifier)

        container = builder.compile()

        definition = builder.get_definition("notifier")
        assert definition.get_arguments() == [Reference("mailer")]
        assert definition.get_named_arguments() == {"logger": Reference("logger")}
        assert container.get("notifier").logger is container.get("logger")


class TestDefaultsAndNullability:
    def test_defaults_are_left_to_python(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer)
        builder.autowire("newsletter", Newsletter)

        container = builder.compile()

        newsletter = container.get("newsletter")
        assert newsletter.logger is None
        assert newsletter.subject == "news"
        assert builder.get_definition("newsletter").get_arguments() == [
            Reference("mailer")
        ]

    def test_optional_dependency_is_bound_when_available(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("logger", Logger)
        builder.autowire("mailer", Mailer)
        builder.autowire("newsletter", Newsletter)

        container = builder.compile()

        assert container.get("newsletter").logger is container.get("logger")

    def test_nullable_without_default_gets_none(
        self, builder: ContainerBuilder
    ) -> None:
        builder.autowire("audit", Audit)
        container = builder.compile()
        assert builder.get_definition("audit").get_arguments() == [None]
        assert container.get("audit").logger is None

    def test_untyped_parameter_without_default_fails(
        self, builder: ContainerBuilder
    ) -> None:
        builder.autowire("legacy", Legacy)
        with pytest.raises(AutowireError) as exc:
            builder.compile()
        assert "has no type and no default" in str(exc.value)
        assert exc.value.parameter == "thing"

    def test_untyped_parameter_can_be_supplied(self, builder: ContainerBuilder) -> None:
        builder.autowire("legacy", Legacy).add_argument("value")
        assert builder.compile().get("legacy").thing == "value"


class TestTargets:
    def test_factory_signature_is_used(self, builder: ContainerBuilder) -> None:
        builder.register("smtp", SmtpTransport)
        builder.autowire("mailer", Mailer).set_factory(build_mailer)

        container = builder.compile()

        assert container.get("mailer").transport is container.get("smtp")

    def test_non_autowired_definitions_are_untouched(
        self, builder: ContainerBuilder
    ) -> None:
        builder.register("smtp", SmtpTransport)
        builder.register("mailer", Mailer)
        builder.compile()
        assert builder.get_definition("mailer").get_arguments() == []

    def test_pass_can_run_alone(self, bare_builder: ContainerBuilder) -> None:
        bare_builder.register("smtp", SmtpTransport)
        bare_builder.autowire("mailer", Mailer)
        AutowirePass().process(bare_builder)
        assert bare_builder.get_definition("mailer").get_arguments() == [
            Reference("smtp")
        ]
