# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Parameter store with ``%placeholder%`` substitution.

A string that is exactly one placeholder resolves to the parameter value
with its type preserved. A placeholder embedded in a longer string is
substituted textually. ``%%`` is an escaped literal percent sign.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterator, Mapping
from typing import Any, Final

from armature.injection.errors import (
    FrozenContainerError,
    ParameterCircularReferenceError,
    ParameterNotFoundError,
    ParameterTypeError,
)

PLACEHOLDER: Final = re.compile(r"%([^%\s]+)%")
_TOKEN: Final = re.compile(r"%%|%([^%\s]+)%")
_SCALARS: Final = (str, int, float, bool)


class ParameterStore:
    """Flat name -> value registry for container configuration."""

    def __init__(self, parameters: Mapping[str, Any] | None = None) -> None:
        self._parameters: dict[str, Any] = dict(parameters or {})
        self._resolved: dict[str, Any] | None = None

    @property
    def frozen(self) -> bool:
        return self._resolved is not None

    def _check_not_frozen(self, operation: str) -> None:
        if self.frozen:
            raise FrozenContainerError(
                f"Cannot {operation} on a frozen parameter store."
            )

    def set(self, name: str, value: Any) -> None:
        self._check_not_frozen(f'set parameter "{name}"')
        self._parameters[name] = value

    def remove(self, name: str) -> None:
        self._check_not_frozen(f'remove parameter "{name}"')
        self._parameters.pop(name, None)

    def has(self, name: str) -> bool:
        return name in self._parameters

    def names(self) -> list[str]:
        return list(self._parameters)

    def all(self) -> dict[str, Any]:
        """Return the raw, unresolved parameters."""
        return dict(self._parameters)

    def get(self, name: str) -> Any:
        """Return the fully resolved value of a parameter.

        Raises:
            ParameterNotFoundError: If the parameter (or one it references) is unknown
            ParameterCircularReferenceError: If placeholders loop
        """
        if self._resolved is not None:
            if name not in self._resolved:
                raise ParameterNotFoundError(name)
            return copy.deepcopy(self._resolved[name])
        return self._resolve_parameter(name, [])

    def resolve(self) -> dict[str, Any]:
        """Resolve every parameter and return the results."""
        return {name: self.get(name) for name in self._parameters}

    def freeze(self) -> None:
        """Resolve every parameter once and reject further changes."""
        if self._resolved is None:
            self._resolved = self.resolve()

    def resolve_value(self, value: Any) -> Any:
        """Substitute placeholders inside a value, recursing into collections."""
        return self._resolve_value(value, [])

    def _resolve_value(self, value: Any, resolving: list[str]) -> Any:
        if isinstance(value, str):
            return self._resolve_string(value, resolving)
        if isinstance(value, list):
            return [self._resolve_value(item, resolving) for item in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_value(item, resolving) for item in value)
        if isinstance(value, dict):
            return {
                key: self._resolve_value(item, resolving) for key, item in value.items()
            }
        return value

    def _resolve_string(self, value: str, resolving: list[str]) -> Any:
        match = PLACEHOLDER.fullmatch(value)
        if match:
            return self._lookup(match.group(1), resolving)

        def substitute(token: re.Match[str]) -> str:
            name = token.group(1)
            if name is None:
                return "%"
            resolved = self._lookup(name, resolving)
            if resolved is None:
                return ""
            if not isinstance(resolved, _SCALARS):
                raise ParameterTypeError(name, resolved, value)
            return str(resolved)

        return _TOKEN.sub(substitute, value)

    def _lookup(self, name: str, resolving: list[str]) -> Any:
        if self._resolved is not None and not resolving:
            return self.get(name)
        return self._resolve_parameter(name, resolving)

    def _resolve_parameter(self, name: str, resolving: list[str]) -> Any:
        if name in resolving:
            raise ParameterCircularReferenceError([*resolving, name])
        if name not in self._parameters:
            raise ParameterNotFoundError(
                name, source_key=resolving[-1] if resolving else None
            )
        return self._resolve_value(self._parameters[name], [*resolving, name])

    def __contains__(self, name: object) -> bool:
        return name in self._parameters

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def copy(self) -> ParameterStore:
        """Return an unfrozen copy of the raw parameters."""
        return ParameterStore(copy.deepcopy(self._parameters))
