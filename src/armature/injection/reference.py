# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
References to other services in the container.

A Reference is a named pointer used in definition arguments; it never owns
its target and is resolved when the owning service is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from armature.injection.ids import normalize_id


class InvalidBehavior(str, Enum):
    """What to do when a referenced service does not exist."""

    EXCEPTION = "exception"  # fail at compile time and at runtime
    NULL = "null"  # inject None
    IGNORE = "ignore"  # omit the argument (None inside collections)


@dataclass(frozen=True, slots=True)
class Reference:
    """Reference to another service id.

    Usage:
        builder.register("mailer", Mailer).add_argument(Reference("transport"))
    """

    id: str
    invalid_behavior: InvalidBehavior = InvalidBehavior.EXCEPTION

    def __post_init__(self) -> None:
        # Classes are accepted and stored under their type id
        object.__setattr__(self, "id", normalize_id(self.id))
        object.__setattr__(
            self, "invalid_behavior", InvalidBehavior(self.invalid_behavior)
        )

    def get_id(self) -> str:
        return self.id

    def get_invalid_behavior(self) -> InvalidBehavior:
        return self.invalid_behavior

    def __str__(self) -> str:
        return self.id
