# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Compile-time validation of service references.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from armature.injection.errors import (
    AliasCircularReferenceError,
    MissingReferenceTargetError,
)
from armature.injection.ids import SERVICE_CONTAINER_ID
from armature.injection.reference import InvalidBehavior, Reference
from armature.logging import get_logger

if TYPE_CHECKING:
    from armature.injection.builder import ContainerBuilder
    from armature.injection.definition import Definition

logger = get_logger(__name__)


def iter_references(value: Any) -> Iterator[Reference]:
    """Yield every Reference in an argument value, recursing into collections."""
    if isinstance(value, Reference):
        yield value
    elif isinstance(value, list | tuple):
        for item in value:
            yield from iter_references(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_references(item)


def definition_references(definition: Definition) -> Iterator[Reference]:
    """Yield the references a definition holds, in argument order."""
    yield from iter_references(definition.get_arguments())
    yield from iter_references(definition.get_named_arguments())
    for call in definition.get_method_calls():
        yield from iter_references(call.arguments)
    factory = definition.get_factory()
    if isinstance(factory, tuple):
        yield from iter_references(factory[0])


class ResolveReferencesPass:
    """Fail compilation on a strict reference to a service that does not exist.

    References with the NULL or IGNORE behaviour are left alone; the pass
    never mutates a definition.
    """

    def process(self, builder: ContainerBuilder) -> None:
        aliases = builder.get_aliases()
        definitions = builder.get_definitions()

        for alias_id in aliases:
            self._check_alias_chain(alias_id, aliases)

        checked = 0
        for service_id, definition in definitions.items():
            if definition.is_abstract():
                continue
            for reference in definition_references(definition):
                checked += 1
                if reference.get_invalid_behavior() is not InvalidBehavior.EXCEPTION:
                    continue
                if not self._exists(reference.get_id(), definitions, aliases):
                    raise MissingReferenceTargetError(service_id, reference.get_id())

        logger.debug("Validated service references", extra={"references": checked})

    @staticmethod
    def _check_alias_chain(alias_id: str, aliases: dict[str, str]) -> None:
        path = [alias_id]
        current = alias_id
        while current in aliases:
            current = aliases[current]
            if current in path:
                raise AliasCircularReferenceError([*path, current])
            path.append(current)

    @staticmethod
    def _exists(
        target_id: str, definitions: dict[str, Definition], aliases: dict[str, str]
    ) -> bool:
        seen: set[str] = set()
        while target_id in aliases and target_id not in seen:
            seen.add(target_id)
            target_id = aliases[target_id]
        return target_id == SERVICE_CONTAINER_ID or target_id in definitions
