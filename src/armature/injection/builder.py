# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Container builder.

The builder is the mutable side of the container: definitions, aliases,
parameters and compiler passes are registered on it, then ``compile()``
runs the passes, freezes everything and returns the runtime Container.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from armature.config.settings import ContainerSettings
from armature.injection.compiler.autowire import AutowirePass
from armature.injection.compiler.child_definitions import ResolveChildDefinitionsPass
from armature.injection.compiler.passes import PassConfig, PassStage
from armature.injection.compiler.resolve_references import ResolveReferencesPass
from armature.injection.container import Container
from armature.injection.definition import Definition, TypeRef
from armature.injection.errors import (
    AliasCircularReferenceError,
    FrozenContainerError,
    InjectionError,
    ServiceNotFoundError,
)
from armature.injection.ids import SERVICE_CONTAINER_ID, ServiceKey, normalize_id
from armature.injection.parameters import ParameterStore
from armature.injection.protocols import CompilerPassProtocol
from armature.injection.reference import InvalidBehavior
from armature.logging import get_logger

logger = get_logger(__name__)


class ContainerBuilder:
    """Registry of service definitions, compiled into a Container.

    Usage:
        ```python
        builder = ContainerBuilder()
        builder.set_parameter("db.host", "localhost")
        builder.register("db", Database).add_argument("%db.host%")
        builder.autowire(UserRepository)
        container = builder.compile()
        ```

    A builder constructed with ``default_passes=False`` starts with an empty
    compiler pipeline.
    """

    def __init__(
        self,
        parameters: Mapping[str, Any] | None = None,
        settings: ContainerSettings | None = None,
        *,
        default_passes: bool = True,
    ) -> None:
        self._definitions: dict[str, Definition] = {}
        self._aliases: dict[str, str] = {}
        self._parameters = ParameterStore(parameters)
        self._settings = settings or ContainerSettings.load()
        self._instances: dict[str, Any] = {}
        self._passes = PassConfig()
        self._container: Container | None = None
        self._bootstrap: Container | None = None

        if default_passes:
            self._passes.add(
                ResolveChildDefinitionsPass(), PassStage.BEFORE_OPTIMIZATION, 100
            )
            self._passes.add(AutowirePass(), PassStage.BEFORE_OPTIMIZATION, 0)
            self._passes.add(ResolveReferencesPass(), PassStage.BEFORE_REMOVING, 0)

    def _check_not_frozen(self) -> None:
        if self._container is not None:
            raise FrozenContainerError()

    def _forget(self, service_id: str) -> None:
        self._instances.pop(service_id, None)
        if self._bootstrap is not None:
            self._bootstrap._forget(service_id)

    # Definitions

    def register(
        self, service_id: ServiceKey, service_class: TypeRef | None = None
    ) -> Definition:
        """Register a service and return its definition for further configuration.

        When no class is given the id itself is used: a class registers under
        its type id, a string id is taken as a dotted import path.
        """
        if service_class is None:
            service_class = service_id
        definition = Definition(service_class)
        self.set_definition(service_id, definition)
        logger.debug(
            "Registered service",
            extra={
                "service_id": normalize_id(service_id),
                "service_class": definition.class_name,
            },
        )
        return definition

    def autowire(
        self, service_id: ServiceKey, service_class: TypeRef | None = None
    ) -> Definition:
        """Register a service whose constructor arguments are autowired."""
        return self.register(service_id, service_class).set_autowired(True)

    def register_child(self, service_id: ServiceKey, parent_id: ServiceKey) -> Definition:
        """Register a definition that inherits its settings from another one."""
        return self.set_definition(
            service_id, Definition().set_parent(normalize_id(parent_id))
        )

    def set_definition(self, service_id: ServiceKey, definition: Definition) -> Definition:
        """Register a definition, replacing any definition or alias with that id."""
        self._check_not_frozen()
        service_id = normalize_id(service_id)
        if service_id == SERVICE_CONTAINER_ID:
            raise InjectionError(
                f'The id "{SERVICE_CONTAINER_ID}" is reserved for the container itself.',
                service_id=service_id,
            )
        self._aliases.pop(service_id, None)
        self._forget(service_id)
        self._definitions[service_id] = definition
        return definition

    def add_definitions(self, definitions: Mapping[ServiceKey, Definition]) -> None:
        for service_id, definition in definitions.items():
            self.set_definition(service_id, definition)

    def get_definition(self, service_id: ServiceKey) -> Definition:
        """Raises ServiceNotFoundError for an unknown id."""
        service_id = normalize_id(service_id)
        try:
            return self._definitions[service_id]
        except KeyError:
            raise ServiceNotFoundError(service_id) from None

    def has_definition(self, service_id: ServiceKey) -> bool:
        return normalize_id(service_id) in self._definitions

    def remove_definition(self, service_id: ServiceKey) -> None:
        self._check_not_frozen()
        service_id = normalize_id(service_id)
        self._definitions.pop(service_id, None)
        self._forget(service_id)

    def get_definitions(self) -> dict[str, Definition]:
        return dict(self._definitions)

    # Aliases

    def set_alias(self, alias: ServiceKey, target: ServiceKey) -> None:
        self._check_not_frozen()
        alias = normalize_id(alias)
        target = normalize_id(target)
        if alias == target:
            raise AliasCircularReferenceError([alias, target])
        if alias == SERVICE_CONTAINER_ID:
            raise InjectionError(
                f'The id "{SERVICE_CONTAINER_ID}" is reserved for the container itself.',
                service_id=alias,
            )
        self._definitions.pop(alias, None)
        self._forget(alias)
        self._aliases[alias] = target

    def get_alias(self, alias: ServiceKey) -> str:
        """Raises ServiceNotFoundError for an unknown alias."""
        alias = normalize_id(alias)
        try:
            return self._aliases[alias]
        except KeyError:
            raise ServiceNotFoundError(
                alias, message=f'Alias "{alias}" not found in container.'
            ) from None

    def has_alias(self, alias: ServiceKey) -> bool:
        return normalize_id(alias) in self._aliases

    def remove_alias(self, alias: ServiceKey) -> None:
        self._check_not_frozen()
        self._aliases.pop(normalize_id(alias), None)

    def get_aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    # Parameters

    def set_parameter(self, name: str, value: Any) -> None:
        self._check_not_frozen()
        self._parameters.set(name, value)

    def get_parameter(self, name: str) -> Any:
        return self._parameters.get(name)

    def has_parameter(self, name: str) -> bool:
        return self._parameters.has(name)

    def get_parameter_names(self) -> list[str]:
        return self._parameters.names()

    def get_parameter_store(self) -> ParameterStore:
        return self._parameters

    # Instances

    def set(self, service_id: ServiceKey, instance: Any) -> None:
        """Register an existing instance as a synthetic service.

        The instance is carried into the compiled container.
        """
        service_id = normalize_id(service_id)
        self.set_definition(service_id, Definition(type(instance)).set_synthetic(True))
        self._instances[service_id] = instance
        if self._bootstrap is not None:
            self._bootstrap.set_synthetic(service_id, instance)

    def get(
        self,
        service_id: ServiceKey,
        invalid_behavior: InvalidBehavior = InvalidBehavior.EXCEPTION,
    ) -> Any:
        """Return a service; before compile() it is built from the live definitions."""
        if self._container is not None:
            return self._container.get(service_id, invalid_behavior)
        return self._get_bootstrap().get(service_id, invalid_behavior)

    def has(self, service_id: ServiceKey) -> bool:
        if self._container is not None:
            return self._container.has(service_id)
        return self._get_bootstrap().has(service_id)

    def _get_bootstrap(self) -> Container:
        if self._bootstrap is None:
            self._bootstrap = Container(
                self._definitions,
                self._aliases,
                self._parameters,
                self._settings,
                instances=self._instances,
                hide_private=False,
            )
        return self._bootstrap

    # Tags

    def find_tagged_service_ids(self, tag: str) -> dict[str, list[dict[str, Any]]]:
        """Return ``{service id: [attributes, ...]}`` in registration order."""
        return {
            service_id: definition.get_tag(tag)
            for service_id, definition in self._definitions.items()
            if definition.has_tag(tag)
        }

    def find_tags(self) -> list[str]:
        tags: dict[str, None] = {}
        for definition in self._definitions.values():
            tags.update(dict.fromkeys(definition.get_tags()))
        return list(tags)

    # Compilation

    def add_compiler_pass(
        self,
        compiler_pass: CompilerPassProtocol,
        stage: PassStage = PassStage.BEFORE_OPTIMIZATION,
        priority: int = 0,
    ) -> None:
        self._check_not_frozen()
        self._passes.add(compiler_pass, stage, priority)

    def get_compiler_passes(self) -> list[CompilerPassProtocol]:
        """Return the compiler passes in execution order."""
        return self._passes.get_passes()

    def compile(self) -> Container:
        """Run the compiler passes, freeze the builder and return the Container.

        If any pass fails, the definitions and aliases are restored to their
        state before the call and the builder stays open for changes.

        Raises:
            FrozenContainerError: If the builder was already compiled
        """
        if self._container is not None:
            raise FrozenContainerError("The container is already compiled.")

        definitions = {
            service_id: definition.copy()
            for service_id, definition in self._definitions.items()
        }
        aliases = dict(self._aliases)
        try:
            for registered in self._passes.get_registered():
                logger.debug(
                    "Running compiler pass",
                    extra={
                        "compiler_pass": type(registered.compiler_pass).__name__,
                        "stage": registered.stage.value,
                        "priority": registered.priority,
                    },
                )
                registered.compiler_pass.process(self)
            self._parameters.freeze()
        except Exception:
            # Restore in place so the bootstrap container keeps seeing the live maps
            self._definitions.clear()
            self._definitions.update(definitions)
            self._aliases.clear()
            self._aliases.update(aliases)
            raise

        for definition in self._definitions.values():
            definition.freeze()
        self._container = Container(
            dict(self._definitions),
            dict(self._aliases),
            self._parameters,
            self._settings,
            instances=self._instances,
        )
        logger.info(
            "Container compiled",
            extra={
                "services": len(self._definitions),
                "aliases": len(self._aliases),
                "parameters": len(self._parameters),
                "compiler_passes": len(self._passes),
            },
        )
        return self._container

    def is_compiled(self) -> bool:
        return self._container is not None

    def get_container(self) -> Container:
        """Return the compiled Container.

        Raises:
            InjectionError: If compile() has not been called
        """
        if self._container is None:
            raise InjectionError("The container has not been compiled yet.")
        return self._container
