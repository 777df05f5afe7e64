"""Tests for environment detection and settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from armature.config import (
    CONFIG_ENVIRONMENT_ERROR,
    ConfigError,
    ContainerSettings,
    Environment,
    KernelSettings,
)


class TestEnvironment:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("dev", Environment.DEVELOPMENT),
            ("Development", Environment.DEVELOPMENT),
            (" test ", Environment.TESTING),
            ("testing", Environment.TESTING),
            ("PROD", Environment.PRODUCTION),
            ("production", Environment.PRODUCTION),
            (None, Environment.DEVELOPMENT),
        ],
    )
    def test_from_string(self, value: str | None, expected: Environment) -> None:
        assert Environment.from_string(value) is expected

    def test_invalid_environment(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Environment.from_string("staging")
        assert exc_info.value.code == CONFIG_ENVIRONMENT_ERROR
        assert exc_info.value.context == {"provided_value": "staging"}

    def test_short_names(self) -> None:
        assert [env.short_name for env in Environment] == ["dev", "test", "prod"]

    def test_get_current_prefers_armature_env(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        assert Environment.get_current() is Environment.DEVELOPMENT
        monkeypatch.setenv("ENV", "test")
        assert Environment.get_current() is Environment.TESTING
        monkeypatch.setenv("ARMATURE_ENV", "prod")
        assert Environment.get_current() is Environment.PRODUCTION


class TestContainerSettings:
    def test_defaults(self, container_settings: ContainerSettings) -> None:
        assert container_settings.max_alias_depth == 32
        assert container_settings.hide_private_services is True

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ARMATURE_CONTAINER_MAX_ALIAS_DEPTH", "4")
        monkeypatch.setenv("ARMATURE_CONTAINER_HIDE_PRIVATE_SERVICES", "false")
        settings = ContainerSettings.load()
        assert settings.max_alias_depth == 4
        assert settings.hide_private_services is False

    def test_alias_depth_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ContainerSettings(max_alias_depth=0)

    def test_frozen(self, container_settings: ContainerSettings) -> None:
        with pytest.raises(ValidationError):
            container_settings.max_alias_depth = 3  # type: ignore[misc]


class TestKernelSettings:
    def test_defaults(self) -> None:
        settings = KernelSettings()
        assert settings.environment is Environment.DEVELOPMENT
        assert settings.debug is True
        assert settings.eager_boot is False
        assert settings.project_dir == Path.cwd()
        assert isinstance(settings.container, ContainerSettings)

    def test_environment_aliases(self) -> None:
        assert KernelSettings(environment="prod").environment is Environment.PRODUCTION

    def test_from_environment_variables(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("ARMATURE_KERNEL_ENVIRONMENT", "test")
        monkeypatch.setenv("ARMATURE_KERNEL_DEBUG", "0")
        monkeypatch.setenv("ARMATURE_KERNEL_EAGER_BOOT", "true")
        monkeypatch.setenv("ARMATURE_KERNEL_PROJECT_DIR", str(tmp_path))
        settings = KernelSettings()
        assert settings.environment is Environment.TESTING
        assert settings.debug is False
        assert settings.eager_boot is True
        assert settings.project_dir == tmp_path

    def test_invalid_environment(self) -> None:
        with pytest.raises(ConfigError):
            KernelSettings(environment="staging")
