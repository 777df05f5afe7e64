"""Tests for references, service ids and type introspection."""

from __future__ import annotations

import inspect
from dataclasses import FrozenInstanceError
from typing import Optional

import pytest

from armature.injection import (
    Definition,
    InvalidBehavior,
    Reference,
    TypeRegistry,
    normalize_id,
    type_id,
)
from armature.injection.type_registry import describe_parameters, import_string


class Engine:
    pass


class Diesel(Engine):
    pass


class Car:
    def __init__(
        self,
        engine: Engine,
        spare: Optional[Engine] = None,
        name="car",
        *wheels: int,
        color: str,
        **extras: object,
    ) -> None:
        pass


class TestReference:
    def test_defaults_to_exception(self) -> None:
        reference = Reference("mailer")
        assert reference.get_id() == "mailer"
        assert reference.get_invalid_behavior() is InvalidBehavior.EXCEPTION
        assert str(reference) == "mailer"

    def test_class_is_normalised(self) -> None:
        assert Reference(Engine).id == type_id(Engine)

    def test_behavior_from_string(self) -> None:
        assert Reference("a", "null").invalid_behavior is InvalidBehavior.NULL  # type: ignore[arg-type]

    def test_value_semantics(self) -> None:
        assert Reference("a") == Reference("a")
        assert Reference("a") != Reference("a", InvalidBehavior.IGNORE)
        assert len({Reference("a"), Reference("a")}) == 1
        with pytest.raises(FrozenInstanceError):
            Reference("a").id = "b"  # type: ignore[misc]


class TestIds:
    def test_type_id(self) -> None:
        assert type_id(Engine) == f"{__name__}.Engine"

    def test_normalize_id(self) -> None:
        assert normalize_id("mailer") == "mailer"
        assert normalize_id(Engine) == type_id(Engine)

    @pytest.mark.parametrize("key", ["", None, 42])
    def test_invalid_ids(self, key: object) -> None:
        with pytest.raises(TypeError):
            normalize_id(key)  # type: ignore[arg-type]


class TestDescribeParameters:
    def test_parameters(self) -> None:
        parameters = {p.name: p for p in describe_parameters(Car)}

        assert parameters["engine"].declared_type is Engine
        assert parameters["engine"].position == 0
        assert not parameters["engine"].nullable

        assert parameters["spare"].declared_type is Engine
        assert parameters["spare"].nullable
        assert parameters["spare"].has_default

        assert parameters["name"].declared_type is None
        assert parameters["name"].default == "car"

        assert parameters["wheels"].is_variadic
        assert parameters["color"].is_keyword_only
        assert parameters["color"].position is None
        assert parameters["extras"].kind is inspect.Parameter.VAR_KEYWORD

    def test_plain_function(self) -> None:
        def build(engine: Engine, /, label: str | None) -> Car: ...

        parameters = describe_parameters(build)

        assert parameters[0].is_positional_only
        assert parameters[1].declared_type is str
        assert parameters[1].nullable


class TestImportString:
    def test_imports_attribute(self) -> None:
        assert import_string("os.path.join") is __import__("os").path.join

    def test_unknown_path(self) -> None:
        with pytest.raises(ImportError):
            import_string("no_such_module_here.Thing")
        with pytest.raises(ImportError):
            import_string("os.no_such_attribute")


class TestTypeRegistry:
    def test_candidates_in_registration_order(self) -> None:
        registry = TypeRegistry(
            {
                "diesel": Definition(Diesel),
                "engine": Definition(Engine),
                "car": Definition(Car),
                "abstract": Definition(Diesel).set_abstract(True),
                "broken": Definition("no_such_module_here.Thing"),
            }
        )
        assert registry.resolve_candidates_for(Engine) == ["diesel", "engine"]
        assert registry.resolve_candidates_for(Engine, exclude=["diesel"]) == ["engine"]
        assert registry.resolve_candidates_for(Diesel) == ["diesel"]

    def test_explicit_id(self) -> None:
        registry = TypeRegistry(
            {type_id(Engine): Definition(Diesel)}, {type_id(Diesel): "x"}
        )
        assert registry.explicit_id_for(Engine) == type_id(Engine)
        assert registry.explicit_id_for(Diesel) == type_id(Diesel)
        assert registry.explicit_id_for(Car) is None
