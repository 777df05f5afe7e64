# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Protocol definitions for the armature DI system.

These are the interfaces the surrounding system consumes: collaborators
depend on ContainerProtocol rather than on a concrete container, and
compile-time extensions implement CompilerPassProtocol.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from armature.injection.reference import InvalidBehavior

if TYPE_CHECKING:
    from armature.injection.builder import ContainerBuilder
    from armature.injection.ids import ServiceKey


@runtime_checkable
class ContainerProtocol(Protocol):
    """Read side of a container: what services and collaborators call."""

    def get(
        self,
        service_id: ServiceKey,
        invalid_behavior: InvalidBehavior = InvalidBehavior.EXCEPTION,
    ) -> Any:
        """Return the service registered under an id."""
        ...

    def has(self, service_id: ServiceKey) -> bool:
        """Check whether an id can be resolved, without instantiating anything."""
        ...

    def get_parameter(self, name: str) -> Any:
        ...

    def has_parameter(self, name: str) -> bool:
        ...


@runtime_checkable
class CompilerPassProtocol(Protocol):
    """A validation or transformation step run once during compile()."""

    def process(self, builder: ContainerBuilder) -> None:
        ...


class TypeRegistryProtocol(Protocol):
    """Capability used by autowiring to find definitions satisfying a type."""

    def explicit_id_for(self, service_type: type) -> str | None:
        ...

    def resolve_candidates_for(
        self, service_type: type, exclude: Iterable[str] = ()
    ) -> list[str]:
        ...
