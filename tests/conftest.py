"""Top-level pytest configuration for armature."""

from __future__ import annotations

import pytest

# Import error modules for their side effects so every code is registered
import armature.config.errors
import armature.errors.base
import armature.injection.errors
from armature.config import ContainerSettings
from armature.injection import ContainerBuilder


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings deterministic regardless of the developer's shell."""
    for name in (
        "ARMATURE_ENV",
        "ENVIRONMENT",
        "ENV",
        "ARMATURE_CONTAINER_MAX_ALIAS_DEPTH",
        "ARMATURE_CONTAINER_HIDE_PRIVATE_SERVICES",
        "ARMATURE_KERNEL_ENVIRONMENT",
        "ARMATURE_KERNEL_DEBUG",
        "ARMATURE_KERNEL_EAGER_BOOT",
        "ARMATURE_KERNEL_PROJECT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def container_settings() -> ContainerSettings:
    return ContainerSettings()


@pytest.fixture
def builder(container_settings: ContainerSettings) -> ContainerBuilder:
    """A builder with the standard compiler pipeline."""
    return ContainerBuilder(settings=container_settings)


@pytest.fixture
def bare_builder(container_settings: ContainerSettings) -> ContainerBuilder:
    """A builder with no compiler passes."""
    return ContainerBuilder(settings=container_settings, default_passes=False)
