# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Service definitions.

A Definition is a mutable blueprint describing how to construct one
service: its class or factory, constructor arguments, method calls to run
after construction, tags and behaviour flags. It has no knowledge of the
container that holds it. Once the owning builder compiles, every
definition is frozen.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from armature.injection.errors import FrozenContainerError
from armature.injection.reference import Reference

TypeRef = type | str
"""A class object or a dotted import path to a class."""

FactoryTarget = Reference | type | str
Factory = Callable[..., Any] | str | tuple[FactoryTarget, str]

# Settings inherited from a parent definition unless the child changed them
INHERITABLE: frozenset[str] = frozenset(
    {"class", "factory", "public", "shared", "autowired", "lazy"}
)


@dataclass(frozen=True, slots=True)
class MethodCall:
    """A method to invoke on the instance after construction."""

    method: str
    arguments: tuple[Any, ...] = field(default_factory=tuple)


class Definition:
    """Declarative blueprint for constructing one service.

    All mutators return the definition itself for chaining:

        builder.register("newsletter", Newsletter)
            .add_argument(Reference("mailer"))
            .add_method_call("set_logger", [Reference("logger")])
            .add_tag("report.generator", {"format": "pdf"})
    """

    def __init__(
        self,
        service_class: TypeRef | None = None,
        arguments: Iterable[Any] | None = None,
    ) -> None:
        self._class: TypeRef | None = service_class
        self._arguments: list[Any] = list(arguments or [])
        self._named_arguments: dict[str, Any] = {}
        self._method_calls: list[MethodCall] = []
        self._tags: dict[str, list[dict[str, Any]]] = {}
        self._factory: Factory | None = None
        self._public = True
        self._shared = True
        self._autowired = False
        self._lazy = False
        self._synthetic = False
        self._abstract = False
        self._parent: str | None = None
        self._changes: set[str] = set()
        self._frozen = False

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise FrozenContainerError(
                "Cannot modify a definition once its container is compiled."
            )

    def _mark(self, setting: str) -> None:
        self._check_not_frozen()
        self._changes.add(setting)

    # Class / factory

    def get_class(self) -> TypeRef | None:
        return self._class

    def set_class(self, service_class: TypeRef | None) -> Definition:
        self._mark("class")
        self._class = service_class
        return self

    def resolve_class(self) -> type | None:
        """Return the class object, importing it when given as a dotted path.

        Raises:
            ImportError: If a dotted path cannot be imported
        """
        from armature.injection.type_registry import import_string

        if self._class is None or isinstance(self._class, type):
            return self._class
        resolved = import_string(self._class)
        if not isinstance(resolved, type):
            raise ImportError(f'"{self._class}" does not name a class')
        return resolved

    def get_factory(self) -> Factory | None:
        return self._factory

    def set_factory(self, factory: Factory | list[Any] | None) -> Definition:
        """Set a factory used instead of the class constructor.

        Accepts a callable, a dotted path to a callable, or a
        ``(target, method_name)`` pair where target is a Reference, a
        service id or a class.
        """
        self._mark("factory")
        if isinstance(factory, list | tuple):
            if len(factory) != 2 or not isinstance(factory[1], str):
                raise ValueError(
                    "A factory pair must be (service reference or class, method name)"
                )
            factory = (factory[0], factory[1])
        elif factory is not None and not (callable(factory) or isinstance(factory, str)):
            raise ValueError(f"Invalid factory {factory!r}")
        self._factory = factory
        return self

    # Arguments

    def get_arguments(self) -> list[Any]:
        return list(self._arguments)

    def set_arguments(self, arguments: Iterable[Any]) -> Definition:
        self._check_not_frozen()
        self._arguments = list(arguments)
        return self

    def add_argument(self, argument: Any) -> Definition:
        self._check_not_frozen()
        self._arguments.append(argument)
        return self

    def get_argument(self, index: int | str) -> Any:
        """Return a positional (int) or named (str) argument.

        Raises:
            IndexError: For a position outside the argument list
            KeyError: For an unknown named argument
        """
        if isinstance(index, str):
            if index not in self._named_arguments:
                raise KeyError(f'Named argument "{index}" is not defined')
            return self._named_arguments[index]
        if not 0 <= index < len(self._arguments):
            raise IndexError(
                f"Argument index {index} is out of range "
                f"(the definition has {len(self._arguments)} arguments)"
            )
        return self._arguments[index]

    def set_argument(self, index: int | str, argument: Any) -> Definition:
        """Set a positional (int) or named (str) argument.

        An index equal to the current length appends; anything further out
        raises IndexError instead of silently padding the list.
        """
        self._check_not_frozen()
        if isinstance(index, str):
            self._named_arguments[index] = argument
            return self
        if index == len(self._arguments):
            self._arguments.append(argument)
        elif 0 <= index < len(self._arguments):
            self._arguments[index] = argument
        else:
            raise IndexError(
                f"Cannot set argument {index}: the definition has "
                f"{len(self._arguments)} arguments"
            )
        return self

    def get_named_arguments(self) -> dict[str, Any]:
        return dict(self._named_arguments)

    def set_named_arguments(self, arguments: Mapping[str, Any]) -> Definition:
        self._check_not_frozen()
        self._named_arguments = dict(arguments)
        return self

    # Method calls

    def add_method_call(
        self, method: str, arguments: Iterable[Any] = ()
    ) -> Definition:
        self._check_not_frozen()
        self._method_calls.append(MethodCall(method, tuple(arguments)))
        return self

    def set_method_calls(self, calls: Iterable[MethodCall]) -> Definition:
        self._check_not_frozen()
        self._method_calls = list(calls)
        return self

    def remove_method_call(self, method: str) -> Definition:
        self._check_not_frozen()
        self._method_calls = [c for c in self._method_calls if c.method != method]
        return self

    def get_method_calls(self) -> list[MethodCall]:
        return list(self._method_calls)

    def has_method_call(self, method: str) -> bool:
        return any(call.method == method for call in self._method_calls)

    # Tags

    def add_tag(
        self, name: str, attributes: Mapping[str, Any] | None = None
    ) -> Definition:
        """Append an attribute map to a tag; a tag may be added many times."""
        self._check_not_frozen()
        self._tags.setdefault(name, []).append(dict(attributes or {}))
        return self

    def get_tags(self) -> dict[str, list[dict[str, Any]]]:
        return {name: [dict(a) for a in attrs] for name, attrs in self._tags.items()}

    def get_tag(self, name: str) -> list[dict[str, Any]]:
        return [dict(a) for a in self._tags.get(name, [])]

    def has_tag(self, name: str) -> bool:
        return name in self._tags

    def clear_tag(self, name: str) -> Definition:
        self._check_not_frozen()
        self._tags.pop(name, None)
        return self

    def clear_tags(self) -> Definition:
        self._check_not_frozen()
        self._tags = {}
        return self

    # Flags

    def set_public(self, public: bool) -> Definition:
        self._mark("public")
        self._public = public
        return self

    def is_public(self) -> bool:
        return self._public

    def set_shared(self, shared: bool) -> Definition:
        self._mark("shared")
        self._shared = shared
        return self

    def is_shared(self) -> bool:
        return self._shared

    def set_autowired(self, autowired: bool) -> Definition:
        self._mark("autowired")
        self._autowired = autowired
        return self

    def is_autowired(self) -> bool:
        return self._autowired

    def set_lazy(self, lazy: bool) -> Definition:
        self._mark("lazy")
        self._lazy = lazy
        return self

    def is_lazy(self) -> bool:
        return self._lazy

    def set_synthetic(self, synthetic: bool) -> Definition:
        self._check_not_frozen()
        self._synthetic = synthetic
        return self

    def is_synthetic(self) -> bool:
        return self._synthetic

    def set_abstract(self, abstract: bool) -> Definition:
        self._check_not_frozen()
        self._abstract = abstract
        return self

    def is_abstract(self) -> bool:
        return self._abstract

    def set_parent(self, parent: str | None) -> Definition:
        self._check_not_frozen()
        self._parent = parent
        return self

    def get_parent(self) -> str | None:
        return self._parent

    def get_changes(self) -> frozenset[str]:
        """Inheritable settings explicitly set on this definition."""
        return frozenset(self._changes)

    # Lifecycle

    def freeze(self) -> None:
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def copy(self) -> Definition:
        """Return an unfrozen structural copy."""
        clone = copy.copy(self)
        clone._arguments = copy.copy(self._arguments)
        clone._named_arguments = dict(self._named_arguments)
        clone._method_calls = list(self._method_calls)
        clone._tags = {name: [dict(a) for a in attrs] for name, attrs in self._tags.items()}
        clone._changes = set(self._changes)
        clone._frozen = False
        return clone

    @property
    def class_name(self) -> str | None:
        if self._class is None:
            return None
        if isinstance(self._class, type):
            return f"{self._class.__module__}.{self._class.__qualname__}"
        return self._class

    def __repr__(self) -> str:
        flags = [
            name
            for name, on in (
                ("private", not self._public),
                ("prototype", not self._shared),
                ("autowired", self._autowired),
                ("lazy", self._lazy),
                ("synthetic", self._synthetic),
                ("abstract", self._abstract),
            )
            if on
        ]
        return f"<Definition class={self.class_name!r} flags={flags}>"
