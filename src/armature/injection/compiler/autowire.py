# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Autowiring compiler pass.

Fills the constructor arguments an autowired definition leaves out by
reading the declared parameter types of its class (or of its factory).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final

from armature.injection.errors import AutowireError
from armature.injection.reference import Reference
from armature.injection.type_registry import (
    ParameterInfo,
    TypeRegistry,
    describe_parameters,
    import_string,
    type_label,
)
from armature.logging import get_logger

if TYPE_CHECKING:
    from armature.injection.builder import ContainerBuilder
    from armature.injection.definition import Definition
    from armature.injection.protocols import TypeRegistryProtocol

logger = get_logger(__name__)

# Marker: leave the parameter out so Python applies its default
_USE_DEFAULT: Final = object()


class AutowirePass:
    """Bind missing constructor parameters of autowired definitions.

    For each parameter not supplied explicitly:

    - no declared type: the default if there is one, else an error;
    - an annotation that cannot be evaluated (a name imported only for
      type checkers): the default, then None if nullable, else an error;
    - a definition registered under the type's own id wins outright;
    - otherwise exactly one definition whose class satisfies the type is
      bound as a Reference, more than one is an ambiguity error;
    - with no candidate the default is used, then None for nullable
      parameters, else an error.

    Explicit arguments are never overwritten.
    """

    def __init__(
        self,
        type_registry_factory: Callable[[ContainerBuilder], TypeRegistryProtocol]
        | None = None,
    ) -> None:
        self._type_registry_factory = type_registry_factory or (
            lambda builder: TypeRegistry(
                builder.get_definitions(), builder.get_aliases()
            )
        )

    def process(self, builder: ContainerBuilder) -> None:
        registry = self._type_registry_factory(builder)
        for service_id, definition in builder.get_definitions().items():
            if (
                not definition.is_autowired()
                or definition.is_abstract()
                or definition.is_synthetic()
            ):
                continue
            target = self._get_target(service_id, definition)
            if target is None:
                continue
            self._autowire(service_id, definition, target, registry)

    @staticmethod
    def _get_target(
        service_id: str, definition: Definition
    ) -> Callable[..., Any] | None:
        factory = definition.get_factory()
        if factory is not None:
            if isinstance(factory, tuple):
                target, method = factory
                if isinstance(target, type):
                    return getattr(target, method, None)
                # Instance methods of other services are left to explicit arguments
                return None
            if isinstance(factory, str):
                try:
                    return import_string(factory)
                except ImportError as exc:
                    raise AutowireError(
                        service_id, "", f'factory "{factory}" cannot be imported: {exc}'
                    ) from exc
            return factory

        try:
            service_class = definition.resolve_class()
        except ImportError as exc:
            raise AutowireError(
                service_id,
                "",
                f'class "{definition.class_name}" cannot be imported: {exc}',
            ) from exc
        if service_class is None:
            raise AutowireError(service_id, "", "the definition has no class")
        return service_class

    def _autowire(
        self,
        service_id: str,
        definition: Definition,
        target: Callable[..., Any],
        registry: TypeRegistryProtocol,
    ) -> None:
        try:
            parameters = describe_parameters(target)
        except TypeError as exc:
            raise AutowireError(service_id, "", str(exc)) from exc

        positional_count = len(definition.get_arguments())
        named = definition.get_named_arguments()
        contiguous = True

        for parameter in parameters:
            if parameter.is_variadic:
                continue
            if parameter.position is not None and parameter.position < positional_count:
                continue
            if parameter.name in named:
                contiguous = False
                continue

            value = self._resolve_parameter(service_id, parameter, registry)
            if value is _USE_DEFAULT:
                if parameter.position is not None:
                    contiguous = False
                continue

            if parameter.position is not None and contiguous:
                definition.add_argument(value)
                positional_count += 1
            elif parameter.is_positional_only:
                raise AutowireError(
                    service_id,
                    parameter.name,
                    f'positional-only parameter "{parameter.name}" follows a '
                    "parameter that was not supplied positionally",
                )
            else:
                definition.set_argument(parameter.name, value)

            logger.debug(
                "Autowired parameter",
                extra={
                    "service_id": service_id,
                    "parameter": parameter.name,
                    "bound_to": str(value),
                },
            )

    @staticmethod
    def _resolve_parameter(
        service_id: str, parameter: ParameterInfo, registry: TypeRegistryProtocol
    ) -> Any:
        declared = parameter.declared_type
        if declared is None:
            if parameter.has_default:
                return _USE_DEFAULT
            raise AutowireError(
                service_id,
                parameter.name,
                f'parameter "{parameter.name}" has no type and no default',
            )
        if isinstance(declared, str):
            if parameter.has_default:
                return _USE_DEFAULT
            if parameter.nullable:
                return None
            raise AutowireError(
                service_id,
                parameter.name,
                f'type annotation "{declared}" of parameter "{parameter.name}" '
                "cannot be resolved",
            )

        explicit = registry.explicit_id_for(declared)
        if explicit is not None and explicit != service_id:
            return Reference(explicit)

        candidates = registry.resolve_candidates_for(declared, exclude=[service_id])
        if len(candidates) == 1:
            return Reference(candidates[0])
        if len(candidates) > 1:
            raise AutowireError(
                service_id,
                parameter.name,
                f"ambiguous autowiring for type {type_label(declared)}: "
                f"candidates [{', '.join(candidates)}] "
                f'(parameter "{parameter.name}")',
                candidates=candidates,
            )

        if parameter.has_default:
            return _USE_DEFAULT
        if parameter.nullable:
            return None
        raise AutowireError(
            service_id,
            parameter.name,
            f"no service implements type {type_label(declared)} "
            f'(parameter "{parameter.name}")',
        )
