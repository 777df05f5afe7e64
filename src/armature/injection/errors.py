# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Error classes for the armature dependency injection system.

Every error carries a registered ErrorCode in the INJECTION category and
the identifiers involved in its context, so failures can be logged and
inspected without parsing messages.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Final

from armature.errors.base import ArmatureError, ErrorCategory, ErrorCode, ErrorSeverity

INJECTION: Final = ErrorCategory.get_or_create("INJECTION")
INJECTION_ERROR: Final = ErrorCode.get_or_create("INJECTION_ERROR", INJECTION)
INJECTION_SERVICE_NOT_FOUND: Final = ErrorCode.get_or_create(
    "INJECTION_SERVICE_NOT_FOUND", INJECTION
)
INJECTION_SYNTHETIC_NOT_SET: Final = ErrorCode.get_or_create(
    "INJECTION_SYNTHETIC_NOT_SET", INJECTION
)
INJECTION_PARAMETER_NOT_FOUND: Final = ErrorCode.get_or_create(
    "INJECTION_PARAMETER_NOT_FOUND", INJECTION
)
INJECTION_PARAMETER_TYPE: Final = ErrorCode.get_or_create(
    "INJECTION_PARAMETER_TYPE", INJECTION
)
INJECTION_CIRCULAR_DEPENDENCY: Final = ErrorCode.get_or_create(
    "INJECTION_CIRCULAR_DEPENDENCY", INJECTION
)
INJECTION_FROZEN_CONTAINER: Final = ErrorCode.get_or_create(
    "INJECTION_FROZEN_CONTAINER", INJECTION
)
INJECTION_AUTOWIRE_FAILURE: Final = ErrorCode.get_or_create(
    "INJECTION_AUTOWIRE_FAILURE", INJECTION
)
INJECTION_ABSTRACT_SERVICE: Final = ErrorCode.get_or_create(
    "INJECTION_ABSTRACT_SERVICE", INJECTION
)
INJECTION_MISSING_REFERENCE_TARGET: Final = ErrorCode.get_or_create(
    "INJECTION_MISSING_REFERENCE_TARGET", INJECTION
)
INJECTION_SERVICE_CREATION: Final = ErrorCode.get_or_create(
    "INJECTION_SERVICE_CREATION", INJECTION
)
INJECTION_KERNEL: Final = ErrorCode.get_or_create("INJECTION_KERNEL", INJECTION)


class InjectionError(ArmatureError):
    """Base class for all DI-related errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = INJECTION_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            code=code,
            severity=severity,
            context=context,
            **kwargs,
        )


class ServiceNotFoundError(InjectionError):
    """Raised when a service id is neither a definition nor an alias."""

    def __init__(
        self,
        service_id: str,
        message: str | None = None,
        code: ErrorCode = INJECTION_SERVICE_NOT_FOUND,
        **kwargs: Any,
    ) -> None:
        self.service_id = service_id
        super().__init__(
            message or f'Service "{service_id}" not found in container.',
            code=code,
            service_id=service_id,
            **kwargs,
        )


class SyntheticServiceNotSetError(ServiceNotFoundError):
    """Raised when a synthetic service is requested before it was injected."""

    def __init__(self, service_id: str, **kwargs: Any) -> None:
        super().__init__(
            service_id,
            message=(
                f'Service "{service_id}" is synthetic and must be set at runtime '
                "before it is requested."
            ),
            code=INJECTION_SYNTHETIC_NOT_SET,
            **kwargs,
        )


class ParameterNotFoundError(InjectionError):
    """Raised when a parameter key is unknown, including inside placeholders."""

    def __init__(
        self, name: str, source_key: str | None = None, **kwargs: Any
    ) -> None:
        self.name = name
        self.source_key = source_key
        message = f'Parameter "{name}" not found in container.'
        if source_key is not None:
            message = (
                f'Parameter "{name}" not found in container '
                f'(referenced by "{source_key}").'
            )
        super().__init__(
            message,
            code=INJECTION_PARAMETER_NOT_FOUND,
            parameter=name,
            source_key=source_key,
            **kwargs,
        )


class ParameterTypeError(InjectionError):
    """Raised when a non-scalar parameter is embedded inside a larger string."""

    def __init__(self, name: str, value: Any, template: str, **kwargs: Any) -> None:
        self.name = name
        super().__init__(
            f'Parameter "{name}" of type {type(value).__name__} cannot be embedded '
            f'in the string "{template}".',
            code=INJECTION_PARAMETER_TYPE,
            parameter=name,
            parameter_type=type(value).__name__,
            template=template,
            **kwargs,
        )


class CircularDependencyError(InjectionError):
    """Raised when resolution re-enters an id that is already in progress.

    ``path`` holds the full cycle, first and last entries being the same id.
    """

    kind = "service"

    def __init__(
        self, path: Sequence[str], message: str | None = None, **kwargs: Any
    ) -> None:
        self.path = list(path)
        super().__init__(
            message or f"Circular dependency detected: {' -> '.join(self.path)}",
            code=INJECTION_CIRCULAR_DEPENDENCY,
            path=self.path,
            kind=self.kind,
            **kwargs,
        )


class AliasCircularReferenceError(CircularDependencyError):
    """Raised when an alias chain revisits an id."""

    kind = "alias"

    def __init__(self, path: Sequence[str], **kwargs: Any) -> None:
        super().__init__(
            path,
            message=f"Circular alias reference detected: {' -> '.join(path)}",
            **kwargs,
        )


class ParameterCircularReferenceError(CircularDependencyError):
    """Raised when parameter placeholders reference each other in a loop."""

    kind = "parameter"

    def __init__(self, path: Sequence[str], **kwargs: Any) -> None:
        super().__init__(
            path,
            message=f"Circular parameter reference detected: {' -> '.join(path)}",
            **kwargs,
        )


class FrozenContainerError(InjectionError):
    """Raised on any mutating call after compile()."""

    def __init__(
        self, message: str = "Cannot modify a frozen container.", **kwargs: Any
    ) -> None:
        super().__init__(message, code=INJECTION_FROZEN_CONTAINER, **kwargs)


class AutowireError(InjectionError):
    """Raised when a constructor parameter cannot be autowired.

    This is a build-time configuration defect surfaced by compile().
    """

    def __init__(
        self,
        service_id: str,
        parameter: str,
        reason: str,
        candidates: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.service_id = service_id
        self.parameter = parameter
        self.candidates = list(candidates or [])
        super().__init__(
            f'Cannot autowire service "{service_id}": {reason}',
            code=INJECTION_AUTOWIRE_FAILURE,
            service_id=service_id,
            parameter=parameter,
            candidates=self.candidates,
            **kwargs,
        )


class AbstractServiceInstantiationError(InjectionError):
    """Raised when get() targets a definition flagged abstract."""

    def __init__(self, service_id: str, **kwargs: Any) -> None:
        self.service_id = service_id
        super().__init__(
            f'Service "{service_id}" is abstract and cannot be instantiated.',
            code=INJECTION_ABSTRACT_SERVICE,
            service_id=service_id,
            **kwargs,
        )


class MissingReferenceTargetError(InjectionError):
    """Raised at compile time for a strict reference to an unknown service."""

    def __init__(self, service_id: str, target_id: str, **kwargs: Any) -> None:
        self.service_id = service_id
        self.target_id = target_id
        super().__init__(
            f'Service "{service_id}" has a dependency on non-existent service '
            f'"{target_id}".',
            code=INJECTION_MISSING_REFERENCE_TARGET,
            service_id=service_id,
            target_id=target_id,
            **kwargs,
        )


class ServiceCreationError(InjectionError):
    """Raised when a constructor, factory or method call fails.

    The original exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        service_id: str,
        original_error: BaseException,
        dependency_chain: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> None:
        self.service_id = service_id
        self.original_error = original_error
        super().__init__(
            f'Failed to create service "{service_id}": {original_error}',
            code=INJECTION_SERVICE_CREATION,
            service_id=service_id,
            error_type=type(original_error).__name__,
            original_error=str(original_error),
            dependency_chain=list(dependency_chain or []),
            **kwargs,
        )
        self.__cause__ = original_error


class KernelError(InjectionError):
    """Raised when the kernel is used in the wrong lifecycle state."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, code=INJECTION_KERNEL, **kwargs)


__all__ = [
    "INJECTION",
    "AbstractServiceInstantiationError",
    "AliasCircularReferenceError",
    "AutowireError",
    "CircularDependencyError",
    "FrozenContainerError",
    "InjectionError",
    "KernelError",
    "MissingReferenceTargetError",
    "ParameterCircularReferenceError",
    "ParameterNotFoundError",
    "ParameterTypeError",
    "ServiceCreationError",
    "ServiceNotFoundError",
    "SyntheticServiceNotSetError",
]
