# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Compiler passes run by ContainerBuilder.compile().
"""

from __future__ import annotations

from armature.injection.compiler.autowire import AutowirePass
from armature.injection.compiler.child_definitions import ResolveChildDefinitionsPass
from armature.injection.compiler.passes import PassConfig, PassStage, RegisteredPass
from armature.injection.compiler.resolve_references import (
    ResolveReferencesPass,
    definition_references,
    iter_references,
)

__all__ = [
    "AutowirePass",
    "PassConfig",
    "PassStage",
    "RegisteredPass",
    "ResolveChildDefinitionsPass",
    "ResolveReferencesPass",
    "definition_references",
    "iter_references",
]
