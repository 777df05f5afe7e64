# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Public API for the armature DI system.
"""

from __future__ import annotations

from armature.injection.builder import ContainerBuilder
from armature.injection.compiler import (
    AutowirePass,
    PassStage,
    ResolveChildDefinitionsPass,
    ResolveReferencesPass,
)
from armature.injection.container import Container
from armature.injection.definition import Definition, MethodCall
from armature.injection.errors import (
    AbstractServiceInstantiationError,
    AliasCircularReferenceError,
    AutowireError,
    CircularDependencyError,
    FrozenContainerError,
    InjectionError,
    KernelError,
    MissingReferenceTargetError,
    ParameterCircularReferenceError,
    ParameterNotFoundError,
    ParameterTypeError,
    ServiceCreationError,
    ServiceNotFoundError,
    SyntheticServiceNotSetError,
)
from armature.injection.ids import SERVICE_CONTAINER_ID, normalize_id, type_id
from armature.injection.parameters import ParameterStore
from armature.injection.protocols import (
    CompilerPassProtocol,
    ContainerProtocol,
    TypeRegistryProtocol,
)
from armature.injection.reference import InvalidBehavior, Reference
from armature.injection.type_registry import TypeRegistry

__all__ = [
    "SERVICE_CONTAINER_ID",
    "AbstractServiceInstantiationError",
    "AliasCircularReferenceError",
    "AutowireError",
    "AutowirePass",
    "CircularDependencyError",
    "CompilerPassProtocol",
    "Container",
    "ContainerBuilder",
    "ContainerProtocol",
    "Definition",
    "FrozenContainerError",
    "InjectionError",
    "InvalidBehavior",
    "KernelError",
    "MethodCall",
    "MissingReferenceTargetError",
    "ParameterCircularReferenceError",
    "ParameterNotFoundError",
    "ParameterStore",
    "ParameterTypeError",
    "PassStage",
    "Reference",
    "ResolveChildDefinitionsPass",
    "ResolveReferencesPass",
    "ServiceCreationError",
    "ServiceNotFoundError",
    "SyntheticServiceNotSetError",
    "TypeRegistry",
    "TypeRegistryProtocol",
    "normalize_id",
    "type_id",
]
