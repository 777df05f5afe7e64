# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
armature: a compiled dependency injection service container.
"""

from __future__ import annotations

from armature.config import ContainerSettings, Environment, KernelSettings
from armature.errors import ArmatureError, ErrorCategory, ErrorCode, ErrorSeverity
from armature.injection import (
    SERVICE_CONTAINER_ID,
    Container,
    ContainerBuilder,
    Definition,
    InjectionError,
    InvalidBehavior,
    ParameterStore,
    PassStage,
    Reference,
)
from armature.kernel import Kernel

__version__ = "0.1.0"

__all__ = [
    "SERVICE_CONTAINER_ID",
    "ArmatureError",
    "Container",
    "ContainerBuilder",
    "ContainerSettings",
    "Definition",
    "Environment",
    "ErrorCategory",
    "ErrorCode",
    "ErrorSeverity",
    "InjectionError",
    "InvalidBehavior",
    "Kernel",
    "KernelSettings",
    "ParameterStore",
    "PassStage",
    "Reference",
]
