# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Compiled DI container.

The container resolves services from frozen definitions on demand: it
follows aliases, resolves arguments (references, parameter placeholders,
nested collections), instantiates through the class or a factory, caches
shared instances and runs method calls.
"""

from __future__ import annotations

import contextvars
import threading
from collections.abc import Callable, Mapping
from typing import Any, Final

from armature.config.settings import ContainerSettings
from armature.injection.definition import Definition, Factory
from armature.injection.errors import (
    AbstractServiceInstantiationError,
    AliasCircularReferenceError,
    CircularDependencyError,
    FrozenContainerError,
    InjectionError,
    ServiceCreationError,
    ServiceNotFoundError,
    SyntheticServiceNotSetError,
)
from armature.injection.ids import SERVICE_CONTAINER_ID, ServiceKey, normalize_id
from armature.injection.lifetime_policies import PrototypePolicy, SharedPolicy, Store
from armature.injection.parameters import ParameterStore
from armature.injection.reference import InvalidBehavior, Reference
from armature.injection.type_registry import import_string
from armature.logging import get_logger

logger = get_logger(__name__)

# An IGNORE reference whose target does not exist
_OMIT: Final = object()
_NOT_BUILT: Final = object()

# Services under construction in the current thread or task, as
# (id(container), service id) pairs
_CONSTRUCTION_STACK: contextvars.ContextVar[tuple[tuple[int, str], ...]] = (
    contextvars.ContextVar("armature_construction_stack", default=())
)


class Container:
    """Runtime service container.

    A container is usually obtained from ``ContainerBuilder.compile()``;
    its definitions are frozen and only synthetic services may still be
    injected with ``set_synthetic``.

    Shared services are constructed at most once even under concurrent
    ``get`` calls. The construction stack used for cycle detection is kept
    per thread and per asyncio task.

    Example:
        ```python
        container = builder.compile()
        mailer = container.get("mailer")
        ```
    """

    def __init__(
        self,
        definitions: Mapping[str, Definition] | None = None,
        aliases: Mapping[str, str] | None = None,
        parameters: ParameterStore | None = None,
        settings: ContainerSettings | None = None,
        instances: Mapping[str, Any] | None = None,
        *,
        hide_private: bool | None = None,
    ) -> None:
        self._definitions: Mapping[str, Definition] = (
            definitions if definitions is not None else {}
        )
        self._aliases: Mapping[str, str] = aliases if aliases is not None else {}
        self._parameters = parameters if parameters is not None else ParameterStore()
        self._settings = settings or ContainerSettings.load()
        self._hide_private = (
            self._settings.hide_private_services if hide_private is None else hide_private
        )
        self._lock = threading.RLock()
        self._shared = SharedPolicy(self._lock, instances)
        self._prototype = PrototypePolicy()

    # Service access

    def get(
        self,
        service_id: ServiceKey,
        invalid_behavior: InvalidBehavior = InvalidBehavior.EXCEPTION,
    ) -> Any:
        """Return the service registered under an id (or a class's type id).

        Args:
            service_id: The service id, an alias, or a class
            invalid_behavior: EXCEPTION raises for an unknown id, NULL and
                IGNORE return None instead

        Raises:
            ServiceNotFoundError: If the id is unknown or names a private service
            SyntheticServiceNotSetError: If a synthetic service was never injected
            AbstractServiceInstantiationError: If the definition is abstract
            CircularDependencyError: If construction re-enters the same id
            ServiceCreationError: If a constructor, factory or method call fails
        """
        requested = normalize_id(service_id)
        target = self._resolve_alias(requested)
        if target == SERVICE_CONTAINER_ID:
            return self

        strict = InvalidBehavior(invalid_behavior) is InvalidBehavior.EXCEPTION
        if not self._is_visible(requested, target):
            if strict:
                raise ServiceNotFoundError(requested)
            return None
        if not strict and not self._is_available(target):
            return None
        return self._get_service(target)

    def has(self, service_id: ServiceKey) -> bool:
        """Check whether get() would find an id, without instantiating anything."""
        requested = normalize_id(service_id)
        target = self._resolve_alias(requested)
        return target == SERVICE_CONTAINER_ID or self._is_visible(requested, target)

    def is_initialized(self, service_id: ServiceKey) -> bool:
        target = self._resolve_alias(normalize_id(service_id))
        return target == SERVICE_CONTAINER_ID or self._shared.has_instance(target)

    def set_synthetic(self, service_id: ServiceKey, instance: Any) -> None:
        """Inject the instance of a synthetic service.

        Raises:
            FrozenContainerError: If the id is not a synthetic definition or
                its instance is already set
        """
        target = self._resolve_alias(normalize_id(service_id))
        definition = self._definitions.get(target)
        if definition is None or not definition.is_synthetic():
            raise FrozenContainerError(
                f'Cannot set service "{target}": only synthetic services can be '
                "set on a compiled container."
            )
        with self._lock:
            if self._shared.has_instance(target):
                raise FrozenContainerError(
                    f'Synthetic service "{target}" is already set.'
                )
            self._shared.store_instance(target, instance)
        logger.debug("Synthetic service set", extra={"service_id": target})

    def initialize_eager_services(self) -> list[str]:
        """Instantiate every shared, public, non-lazy service.

        Returns:
            The ids that were instantiated, in registration order
        """
        initialized = []
        for service_id, definition in self._definitions.items():
            if (
                definition.is_shared()
                and definition.is_public()
                and not definition.is_lazy()
                and not definition.is_synthetic()
                and not definition.is_abstract()
            ):
                self._get_service(service_id)
                initialized.append(service_id)
        logger.info("Initialized eager services", extra={"count": len(initialized)})
        return initialized

    # Parameters

    def get_parameter(self, name: str) -> Any:
        return self._parameters.get(name)

    def has_parameter(self, name: str) -> bool:
        return self._parameters.has(name)

    def get_parameter_names(self) -> list[str]:
        return self._parameters.names()

    # Introspection

    def get_service_ids(self) -> list[str]:
        """Return every id get() accepts: services, aliases and the container itself."""
        ids = [SERVICE_CONTAINER_ID]
        ids.extend(
            service_id
            for service_id in self._definitions
            if self._is_visible(service_id, service_id)
        )
        ids.extend(self._aliases)
        return ids

    def get_definition(self, service_id: ServiceKey) -> Definition:
        service_id = normalize_id(service_id)
        try:
            return self._definitions[service_id]
        except KeyError:
            raise ServiceNotFoundError(service_id) from None

    def find_tagged_service_ids(self, tag: str) -> dict[str, list[dict[str, Any]]]:
        return {
            service_id: definition.get_tag(tag)
            for service_id, definition in self._definitions.items()
            if definition.has_tag(tag)
        }

    # Resolution

    def _resolve_alias(self, service_id: str) -> str:
        path = [service_id]
        current = service_id
        while current in self._aliases:
            current = self._aliases[current]
            if current in path:
                raise AliasCircularReferenceError([*path, current])
            path.append(current)
            if len(path) > self._settings.max_alias_depth + 1:
                raise InjectionError(
                    f'Alias chain for "{service_id}" exceeds '
                    f"{self._settings.max_alias_depth} hops.",
                    service_id=service_id,
                    path=path,
                )
        return current

    def _is_visible(self, requested: str, target: str) -> bool:
        definition = self._definitions.get(target)
        if definition is None:
            return False
        # Aliases are public entry points to private services
        return requested != target or not self._hide_private or definition.is_public()

    def _is_available(self, target: str) -> bool:
        if target == SERVICE_CONTAINER_ID:
            return True
        definition = self._definitions.get(target)
        if definition is None:
            return False
        return not definition.is_synthetic() or self._shared.has_instance(target)

    def _get_by_id(self, service_id: str) -> Any:
        target = self._resolve_alias(service_id)
        if target == SERVICE_CONTAINER_ID:
            return self
        if target not in self._definitions:
            raise ServiceNotFoundError(service_id)
        return self._get_service(target)

    def _get_service(self, service_id: str) -> Any:
        instance = self._shared.get_cached(service_id, _NOT_BUILT)
        if instance is not _NOT_BUILT:
            return instance

        definition = self._definitions[service_id]
        if definition.is_synthetic():
            raise SyntheticServiceNotSetError(service_id)
        if definition.is_abstract():
            raise AbstractServiceInstantiationError(service_id)

        entry = (id(self), service_id)
        stack = _CONSTRUCTION_STACK.get()
        if entry in stack:
            raise CircularDependencyError([*self._chain(), service_id])

        token = _CONSTRUCTION_STACK.set((*stack, entry))
        try:
            policy = self._shared if definition.is_shared() else self._prototype
            return policy.get_instance(
                service_id,
                lambda store: self._create_service(service_id, definition, store),
            )
        finally:
            _CONSTRUCTION_STACK.reset(token)

    def _chain(self) -> list[str]:
        """The ids this container is constructing in the current thread or task."""
        key = id(self)
        return [
            service_id
            for owner, service_id in _CONSTRUCTION_STACK.get()
            if owner == key
        ]

    def _create_service(
        self, service_id: str, definition: Definition, store: Store
    ) -> Any:
        factory = definition.get_factory()
        if factory is not None:
            target = self._get_factory(service_id, factory)
        else:
            target = self._get_class(service_id, definition)

        args, kwargs = self._resolve_arguments(
            definition.get_arguments(), definition.get_named_arguments()
        )
        instance = self._call(service_id, target, args, kwargs)
        store(instance)

        for call in definition.get_method_calls():
            call_args, _ = self._resolve_arguments(call.arguments, {})
            try:
                method = getattr(instance, call.method)
            except AttributeError as exc:
                raise ServiceCreationError(service_id, exc, self._chain()) from exc
            self._call(service_id, method, call_args, {})

        logger.debug(
            "Instantiated service",
            extra={"service_id": service_id, "shared": definition.is_shared()},
        )
        return instance

    def _get_class(self, service_id: str, definition: Definition) -> type:
        try:
            service_class = definition.resolve_class()
        except ImportError as exc:
            raise ServiceCreationError(service_id, exc, self._chain()) from exc
        if service_class is None:
            raise InjectionError(
                f'Service "{service_id}" has neither a class nor a factory.',
                service_id=service_id,
            )
        return service_class

    def _get_factory(self, service_id: str, factory: Factory) -> Callable[..., Any]:
        if isinstance(factory, tuple):
            target, method = factory
            if isinstance(target, Reference):
                owner = self._get_by_id(target.get_id())
            elif isinstance(target, str):
                if self._resolve_alias(target) in self._definitions:
                    owner = self._get_by_id(target)
                else:
                    owner = self._import(service_id, target)
            else:
                owner = target
            try:
                return getattr(owner, method)
            except AttributeError as exc:
                raise ServiceCreationError(service_id, exc, self._chain()) from exc
        if isinstance(factory, str):
            return self._import(service_id, factory)
        return factory

    def _import(self, service_id: str, path: str) -> Any:
        try:
            return import_string(path)
        except ImportError as exc:
            raise ServiceCreationError(service_id, exc, self._chain()) from exc

    def _call(
        self,
        service_id: str,
        target: Callable[..., Any],
        args: list[Any],
        kwargs: dict[str, Any],
    ) -> Any:
        try:
            return target(*args, **kwargs)
        except InjectionError:
            raise
        except Exception as exc:
            raise ServiceCreationError(service_id, exc, self._chain()) from exc

    def _resolve_arguments(
        self, arguments: Any, named: Mapping[str, Any]
    ) -> tuple[list[Any], dict[str, Any]]:
        args = [self._resolve_value(argument, nested=False) for argument in arguments]
        # Omitted positionals only drop off the end; gaps become None
        while args and args[-1] is _OMIT:
            args.pop()
        args = [None if value is _OMIT else value for value in args]

        kwargs = {}
        for name, argument in named.items():
            value = self._resolve_value(argument, nested=False)
            if value is not _OMIT:
                kwargs[name] = value
        return args, kwargs

    def _resolve_value(self, value: Any, nested: bool) -> Any:
        if isinstance(value, Reference):
            return self._resolve_reference(value, nested)
        if isinstance(value, str):
            return self._parameters.resolve_value(value)
        if isinstance(value, list):
            return [self._resolve_value(item, nested=True) for item in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_value(item, nested=True) for item in value)
        if isinstance(value, dict):
            return {
                key: self._resolve_value(item, nested=True) for key, item in value.items()
            }
        return value

    def _resolve_reference(self, reference: Reference, nested: bool) -> Any:
        behavior = reference.get_invalid_behavior()
        if behavior is not InvalidBehavior.EXCEPTION and not self._is_available(
            self._resolve_alias(reference.get_id())
        ):
            if behavior is InvalidBehavior.NULL or nested:
                return None
            return _OMIT
        return self._get_by_id(reference.get_id())

    def _forget(self, service_id: str) -> None:
        """Drop a cached instance whose definition was replaced before compile."""
        with self._lock:
            self._shared.forget(service_id)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} services={len(self._definitions)} "
            f"aliases={len(self._aliases)} parameters={len(self._parameters)}>"
        )
