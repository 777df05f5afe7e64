# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Compiler pass ordering.

Passes run grouped by stage in a fixed order, then by descending
priority, ties broken by registration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from armature.injection.protocols import CompilerPassProtocol


class PassStage(str, Enum):
    """Compilation stages, declared in execution order."""

    BEFORE_OPTIMIZATION = "before_optimization"
    OPTIMIZE = "optimize"
    BEFORE_REMOVING = "before_removing"
    REMOVE = "remove"
    AFTER_REMOVING = "after_removing"

    @property
    def order(self) -> int:
        return list(PassStage).index(self)


@dataclass(frozen=True, slots=True)
class RegisteredPass:
    compiler_pass: CompilerPassProtocol
    stage: PassStage
    priority: int
    sequence: int

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.stage.order, -self.priority, self.sequence)


class PassConfig:
    """Ordered collection of compiler passes for one builder."""

    def __init__(self) -> None:
        self._passes: list[RegisteredPass] = []

    def add(
        self,
        compiler_pass: CompilerPassProtocol,
        stage: PassStage = PassStage.BEFORE_OPTIMIZATION,
        priority: int = 0,
    ) -> None:
        if not callable(getattr(compiler_pass, "process", None)):
            raise TypeError(
                f"{type(compiler_pass).__name__} does not implement process(builder)"
            )
        self._passes.append(
            RegisteredPass(compiler_pass, PassStage(stage), priority, len(self._passes))
        )

    def get_registered(self) -> list[RegisteredPass]:
        return sorted(self._passes, key=lambda registered: registered.sort_key)

    def get_passes(self) -> list[CompilerPassProtocol]:
        """Return every pass in execution order."""
        return [registered.compiler_pass for registered in self.get_registered()]

    def get_passes_for(self, stage: PassStage) -> list[CompilerPassProtocol]:
        return [
            registered.compiler_pass
            for registered in self.get_registered()
            if registered.stage is stage
        ]

    def __len__(self) -> int:
        return len(self._passes)
