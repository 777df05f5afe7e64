# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""Configuration management for armature.

Settings are loaded from environment variables and validated with
pydantic-settings.
"""

from armature.config.environment import Environment
from armature.config.errors import CONFIG, CONFIG_ENVIRONMENT_ERROR, CONFIG_ERROR, ConfigError
from armature.config.settings import ContainerSettings, KernelSettings

__all__ = [
    "CONFIG",
    "CONFIG_ENVIRONMENT_ERROR",
    "CONFIG_ERROR",
    "ConfigError",
    "ContainerSettings",
    "Environment",
    "KernelSettings",
]
