# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Parent/child definition inheritance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from armature.injection.errors import CircularDependencyError, ServiceNotFoundError
from armature.logging import get_logger

if TYPE_CHECKING:
    from armature.injection.builder import ContainerBuilder
    from armature.injection.definition import Definition

logger = get_logger(__name__)


class ResolveChildDefinitionsPass:
    """Merge every definition that names a parent with that parent.

    The child keeps whatever it set explicitly. It inherits the class and
    factory when it has none, the public/shared/autowired/lazy flags unless
    it changed them, positional arguments by index, and named arguments,
    method calls and tags (parent entries first). ``abstract`` is never
    inherited. The parent link is cleared once merged.
    """

    def process(self, builder: ContainerBuilder) -> None:
        resolved: set[str] = set()
        for service_id in builder.get_definitions():
            self._resolve(builder, service_id, [], resolved)

    def _resolve(
        self,
        builder: ContainerBuilder,
        service_id: str,
        chain: list[str],
        resolved: set[str],
    ) -> Definition:
        definition = builder.get_definition(service_id)
        parent_id = definition.get_parent()
        if parent_id is None or service_id in resolved:
            return definition
        if service_id in chain:
            raise CircularDependencyError([*chain, service_id])
        if not builder.has_definition(parent_id):
            raise ServiceNotFoundError(
                parent_id,
                message=(
                    f'Service "{service_id}" has parent "{parent_id}" '
                    "which is not defined."
                ),
                child_id=service_id,
            )

        parent = self._resolve(builder, parent_id, [*chain, service_id], resolved)
        self._merge(parent, definition)
        resolved.add(service_id)
        logger.debug(
            "Resolved child definition",
            extra={"service_id": service_id, "parent_id": parent_id},
        )
        return definition

    @staticmethod
    def _merge(parent: Definition, child: Definition) -> None:
        changes = child.get_changes()

        if child.get_class() is None:
            child.set_class(parent.get_class())
        if child.get_factory() is None and parent.get_factory() is not None:
            child.set_factory(parent.get_factory())
        if "public" not in changes:
            child.set_public(parent.is_public())
        if "shared" not in changes:
            child.set_shared(parent.is_shared())
        if "autowired" not in changes:
            child.set_autowired(parent.is_autowired())
        if "lazy" not in changes:
            child.set_lazy(parent.is_lazy())

        arguments = parent.get_arguments()
        for index, argument in enumerate(child.get_arguments()):
            if index < len(arguments):
                arguments[index] = argument
            else:
                arguments.append(argument)
        child.set_arguments(arguments)
        child.set_named_arguments(
            {**parent.get_named_arguments(), **child.get_named_arguments()}
        )
        child.set_method_calls([*parent.get_method_calls(), *child.get_method_calls()])

        child_tags = child.get_tags()
        child.clear_tags()
        for name, attribute_maps in parent.get_tags().items():
            for attributes in attribute_maps:
                child.add_tag(name, attributes)
        for name, attribute_maps in child_tags.items():
            for attributes in attribute_maps:
                child.add_tag(name, attributes)

        child.set_parent(None)
