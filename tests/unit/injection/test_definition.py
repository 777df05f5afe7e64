"""Tests for Definition, the mutable service blueprint."""

from __future__ import annotations

import pytest

from armature.injection import Definition, FrozenContainerError, MethodCall, Reference


class Mailer:
    pass


class TestArguments:
    def test_arguments_keep_order(self) -> None:
        definition = Definition(Mailer).add_argument("a").add_argument(Reference("b"))
        assert definition.get_arguments() == ["a", Reference("b")]

    def test_get_argument_by_index_and_name(self) -> None:
        definition = Definition(Mailer, ["first"]).set_argument("subject", "hi")
        assert definition.get_argument(0) == "first"
        assert definition.get_argument("subject") == "hi"

    def test_get_argument_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            Definition(Mailer).get_argument(0)
        with pytest.raises(KeyError):
            Definition(Mailer).get_argument("missing")

    def test_set_argument_replaces_or_appends(self) -> None:
        definition = Definition(Mailer, ["a"])
        definition.set_argument(0, "b")
        definition.set_argument(1, "c")
        assert definition.get_arguments() == ["b", "c"]

    def test_set_argument_refuses_gaps(self) -> None:
        with pytest.raises(IndexError):
            Definition(Mailer).set_argument(2, "x")

    def test_get_arguments_returns_a_copy(self) -> None:
        definition = Definition(Mailer, ["a"])
        definition.get_arguments().append("b")
        assert definition.get_arguments() == ["a"]


class TestMethodCallsAndTags:
    def test_method_calls_run_in_registration_order(self) -> None:
        definition = (
            Definition(Mailer)
            .add_method_call("set_logger", [Reference("logger")])
            .add_method_call("set_debug", [True])
        )
        assert definition.get_method_calls() == [
            MethodCall("set_logger", (Reference("logger"),)),
            MethodCall("set_debug", (True,)),
        ]
        assert definition.has_method_call("set_debug")

    def test_remove_method_call(self) -> None:
        definition = Definition(Mailer).add_method_call("a").add_method_call("b")
        definition.remove_method_call("a")
        assert [call.method for call in definition.get_method_calls()] == ["b"]

    def test_tags_accumulate_attribute_maps(self) -> None:
        definition = (
            Definition(Mailer)
            .add_tag("report.generator", {"format": "pdf"})
            .add_tag("report.generator", {"format": "csv"})
            .add_tag("console.command")
        )
        assert definition.get_tag("report.generator") == [
            {"format": "pdf"},
            {"format": "csv"},
        ]
        assert definition.get_tag("console.command") == [{}]
        assert definition.has_tag("console.command")
        assert not definition.has_tag("unknown")
        assert definition.get_tag("unknown") == []

    def test_clear_tag(self) -> None:
        definition = Definition(Mailer).add_tag("a").add_tag("b")
        definition.clear_tag("a")
        assert list(definition.get_tags()) == ["b"]
        definition.clear_tags()
        assert definition.get_tags() == {}


class TestFlags:
    def test_defaults(self) -> None:
        definition = Definition(Mailer)
        assert definition.is_public()
        assert definition.is_shared()
        assert not definition.is_autowired()
        assert not definition.is_lazy()
        assert not definition.is_synthetic()
        assert not definition.is_abstract()
        assert definition.get_parent() is None

    def test_changes_track_inheritable_settings(self) -> None:
        definition = Definition(Mailer).set_shared(False).set_abstract(True)
        assert definition.get_changes() == frozenset({"shared"})

    def test_repr_lists_flags(self) -> None:
        definition = Definition(Mailer).set_public(False).set_lazy(True)
        assert "private" in repr(definition)
        assert "lazy" in repr(definition)


class TestClassAndFactory:
    def test_resolve_class_from_dotted_path(self) -> None:
        definition = Definition("collections.OrderedDict")
        from collections import OrderedDict

        assert definition.resolve_class() is OrderedDict
        assert definition.class_name == "collections.OrderedDict"

    def test_resolve_class_rejects_non_class(self) -> None:
        with pytest.raises(ImportError):
            Definition("os.path.join").resolve_class()

    def test_factory_pair_from_list(self) -> None:
        definition = Definition(Mailer).set_factory([Reference("factory"), "create"])
        assert definition.get_factory() == (Reference("factory"), "create")

    def test_invalid_factory(self) -> None:
        with pytest.raises(ValueError):
            Definition(Mailer).set_factory([Reference("factory")])
        with pytest.raises(ValueError):
            Definition(Mailer).set_factory(42)


class TestFreezing:
    def test_frozen_definition_rejects_mutation(self) -> None:
        definition = Definition(Mailer)
        definition.freeze()
        assert definition.is_frozen()
        with pytest.raises(FrozenContainerError):
            definition.add_argument("x")
        with pytest.raises(FrozenContainerError):
            definition.add_tag("tag")
        with pytest.raises(FrozenContainerError):
            definition.set_public(False)

    def test_copy_is_independent_and_unfrozen(self) -> None:
        definition = Definition(Mailer, ["a"]).add_tag("t", {"x": 1})
        definition.freeze()
        clone = definition.copy()
        clone.add_argument("b").add_tag("t", {"x": 2})
        assert not clone.is_frozen()
        assert definition.get_arguments() == ["a"]
        assert definition.get_tag("t") == [{"x": 1}]
