# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Type introspection for autowiring.

``describe_parameters`` lists a constructor's parameters with their
declared type, default and nullability. ``TypeRegistry`` answers which
registered definitions can satisfy a declared type.
"""

from __future__ import annotations

import importlib
import inspect
import sys
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from armature.injection.ids import type_id

if TYPE_CHECKING:
    from armature.injection.definition import Definition

_NONE_TYPE = type(None)


def import_string(path: str) -> Any:
    """Import an object from a dotted path such as ``"package.module.Class"``.

    Raises:
        ImportError: If no prefix of the path is an importable module or the
            remaining attributes do not exist
    """
    parts = path.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            target: Any = importlib.import_module(module_name)
        except ModuleNotFoundError:
            continue
        try:
            for attribute in parts[index:]:
                target = getattr(target, attribute)
        except AttributeError as exc:
            raise ImportError(f'Cannot import "{path}": {exc}') from exc
        return target
    raise ImportError(f'Cannot import "{path}": no importable module prefix')


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    """A constructor parameter as seen by the autowiring pass."""

    name: str
    position: int | None
    kind: inspect._ParameterKind
    declared_type: type | str | None
    has_default: bool
    default: Any
    nullable: bool

    @property
    def is_variadic(self) -> bool:
        return self.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        )

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY

    @property
    def is_positional_only(self) -> bool:
        return self.kind is inspect.Parameter.POSITIONAL_ONLY


def _unwrap_annotation(annotation: Any) -> tuple[type | str | None, bool]:
    """Reduce an annotation to (usable type, nullable)."""
    if annotation is inspect.Parameter.empty or annotation is Any:
        return None, False
    if isinstance(annotation, str):
        return annotation, _is_nullable_text(annotation)
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        nullable = _NONE_TYPE in args
        concrete = [arg for arg in args if arg is not _NONE_TYPE]
        if len(concrete) == 1:
            inner, _ = _unwrap_annotation(concrete[0])
            return inner, nullable
        # Several concrete types cannot be autowired
        return None, nullable
    if origin is not None and isinstance(origin, type):
        return origin, False
    if isinstance(annotation, type):
        return annotation, False
    return None, False


def _eval_namespaces(target: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    """Namespaces that string annotations of the target are evaluated in."""
    function = target.__init__ if isinstance(target, type) else target
    function = inspect.unwrap(function)
    globalns = getattr(function, "__globals__", None)
    if globalns is None:
        module = sys.modules.get(getattr(target, "__module__", None) or "")
        globalns = vars(module) if module is not None else {}
    localns = dict(vars(target)) if isinstance(target, type) else {}
    return globalns, localns


def _eval_annotation(
    annotation: Any, globalns: dict[str, Any], localns: dict[str, Any]
) -> Any:
    """Evaluate one string annotation; keep the string when it cannot be resolved.

    Each annotation is evaluated on its own, so a name that only exists for
    type checkers leaves the other parameters resolvable.
    """
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)  # noqa: S307
    except Exception:
        return annotation


def _is_nullable_text(annotation: str) -> bool:
    parts = {part.strip() for part in annotation.split("|")}
    return "None" in parts or annotation.replace(" ", "").startswith(
        ("Optional[", "typing.Optional[")
    )


def describe_parameters(target: Callable[..., Any]) -> list[ParameterInfo]:
    """List the parameters of a class constructor or a callable.

    Raises:
        TypeError: If the target has no introspectable signature
    """
    try:
        signature = inspect.signature(target)
    except ValueError as exc:
        raise TypeError(f"Cannot introspect {target!r}: {exc}") from exc

    globalns, localns = _eval_namespaces(target)

    parameters: list[ParameterInfo] = []
    position = 0
    for parameter in signature.parameters.values():
        annotation = _eval_annotation(parameter.annotation, globalns, localns)
        declared, nullable = _unwrap_annotation(annotation)
        has_default = parameter.default is not inspect.Parameter.empty
        if has_default and parameter.default is None:
            nullable = True
        positional = parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        )
        parameters.append(
            ParameterInfo(
                name=parameter.name,
                position=position if positional else None,
                kind=parameter.kind,
                declared_type=declared,
                has_default=has_default,
                default=parameter.default if has_default else None,
                nullable=nullable,
            )
        )
        if positional:
            position += 1
    return parameters


def type_label(service_type: type | str) -> str:
    if isinstance(service_type, str):
        return service_type
    return type_id(service_type)


class TypeRegistry:
    """Maps declared types to the ids of definitions that satisfy them.

    A definition satisfies a type when its class equals, implements or
    extends that type. Abstract definitions are never candidates, and
    definitions whose class cannot be imported are skipped.
    """

    def __init__(
        self,
        definitions: Mapping[str, Definition],
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._definitions = definitions
        self._aliases = aliases or {}
        self._classes: dict[str, type] | None = None

    def _index(self) -> dict[str, type]:
        if self._classes is None:
            classes: dict[str, type] = {}
            for service_id, definition in self._definitions.items():
                if definition.is_abstract():
                    continue
                try:
                    service_class = definition.resolve_class()
                except ImportError:
                    continue
                if service_class is not None:
                    classes[service_id] = service_class
            self._classes = classes
        return self._classes

    def explicit_id_for(self, service_type: type) -> str | None:
        """Return the id registered under the type's own id, if any."""
        candidate = type_id(service_type)
        if candidate in self._definitions or candidate in self._aliases:
            return candidate
        return None

    def resolve_candidates_for(
        self, service_type: type, exclude: Iterable[str] = ()
    ) -> list[str]:
        """Return, in registration order, every id whose class satisfies the type."""
        excluded = set(exclude)
        candidates = []
        for service_id, service_class in self._index().items():
            if service_id in excluded:
                continue
            try:
                matches = issubclass(service_class, service_type)
            except TypeError:
                # Non-runtime-checkable protocols and typing constructs
                matches = False
            if matches:
                candidates.append(service_id)
        return candidates
