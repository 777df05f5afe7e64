# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Public API for the armature logging system.
"""

from __future__ import annotations

from armature.logging.config import LoggingSettings
from armature.logging.level import LogLevel
from armature.logging.logger import (
    ArmatureJsonEncoder,
    StructuredFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ArmatureJsonEncoder",
    "LogLevel",
    "LoggingSettings",
    "StructuredFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
]
