# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature

"""
Application kernel.

The kernel owns the container lifecycle: it seeds a builder with kernel
parameters, lets configurators and subclasses register services and
compiler passes, compiles once and hands out the resulting container.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from armature.config.environment import Environment
from armature.config.settings import KernelSettings
from armature.injection.builder import ContainerBuilder
from armature.injection.container import Container
from armature.injection.errors import KernelError
from armature.logging import get_logger

logger = get_logger(__name__)

Configurator = Callable[[ContainerBuilder], None]


class Kernel:
    """Boots a compiled container from configurators.

    Example:
        ```python
        def services(builder: ContainerBuilder) -> None:
            builder.autowire(Mailer)

        kernel = Kernel(KernelSettings(environment="prod"), [services])
        container = kernel.boot()
        ```

    Subclasses may override ``configure_container`` and
    ``register_compiler_passes``.
    """

    def __init__(
        self,
        settings: KernelSettings | None = None,
        configurators: Iterable[Configurator] = (),
    ) -> None:
        self._settings = settings or KernelSettings()
        self._configurators = list(configurators)
        self._container: Container | None = None

    @property
    def settings(self) -> KernelSettings:
        return self._settings

    @property
    def environment(self) -> Environment:
        return self._settings.environment

    @property
    def debug(self) -> bool:
        return self._settings.debug

    def is_booted(self) -> bool:
        return self._container is not None

    def add_configurator(self, configurator: Configurator) -> None:
        if self._container is not None:
            raise KernelError("Cannot add a configurator after the kernel is booted.")
        self._configurators.append(configurator)

    def boot(self) -> Container:
        """Build and compile the container; later calls return the same container."""
        if self._container is not None:
            return self._container

        builder = ContainerBuilder(settings=self._settings.container)
        builder.set_parameter("kernel.environment", self.environment.short_name)
        builder.set_parameter("kernel.debug", self.debug)
        builder.set_parameter("kernel.project_dir", str(self._settings.project_dir))
        builder.set("kernel", self)

        for configure in self._configurators:
            configure(builder)
        self.configure_container(builder)
        self.register_compiler_passes(builder)

        container = builder.compile()
        if self._settings.eager_boot:
            container.initialize_eager_services()

        self._container = container
        logger.info(
            "Kernel booted",
            extra={
                "environment": self.environment.short_name,
                "debug": self.debug,
                "services": len(container.get_service_ids()),
            },
        )
        return container

    def configure_container(self, builder: ContainerBuilder) -> None:
        """Hook for subclasses to register services."""

    def register_compiler_passes(self, builder: ContainerBuilder) -> None:
        """Hook for subclasses to add compiler passes."""

    def get_container(self) -> Container:
        """Raises KernelError before boot()."""
        if self._container is None:
            raise KernelError("Cannot get the container before the kernel is booted.")
        return self._container
