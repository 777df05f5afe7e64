# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Settings models for the container and the kernel.

Both load from environment variables through pydantic-settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from armature.config.environment import Environment


class ContainerSettings(BaseSettings):
    """Runtime behaviour of compiled containers."""

    model_config = SettingsConfigDict(
        env_prefix="ARMATURE_CONTAINER_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    max_alias_depth: int = Field(
        default=32, ge=1, description="Maximum alias hops followed by get()"
    )
    hide_private_services: bool = Field(
        default=True,
        description="Treat public=False services as unknown to get()/has() callers",
    )

    @classmethod
    def load(cls) -> ContainerSettings:
        return cls()


class KernelSettings(BaseSettings):
    """Settings consumed by Kernel.boot()."""

    model_config = SettingsConfigDict(
        env_prefix="ARMATURE_KERNEL_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=True)
    project_dir: Path = Field(default_factory=Path.cwd)
    eager_boot: bool = Field(
        default=False,
        description="Instantiate shared, public, non-lazy services during boot",
    )
    container: ContainerSettings = Field(default_factory=ContainerSettings)

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: Any) -> Environment:
        if isinstance(v, Environment):
            return v
        return Environment.from_string(v)
