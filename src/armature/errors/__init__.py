# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Error handling for armature.
"""

from __future__ import annotations

from armature.errors.base import (
    INTERNAL,
    INTERNAL_ERROR,
    ArmatureError,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
)
from armature.errors.registry import ErrorRegistry, registry

__all__ = [
    # Error categories
    "ErrorCode",
    "ErrorCategory",
    "ErrorSeverity",
    "INTERNAL",
    "INTERNAL_ERROR",
    # Base errors
    "ArmatureError",
    # Registry
    "ErrorRegistry",
    "registry",
]
