# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Instance lifetime policies.

A creation routine receives a ``store`` callback and must call it with the
new instance before running method calls on it, so that setter injection
can see a shared service that is still being configured.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

Store = Callable[[Any], None]
Creator = Callable[[Store], Any]

_MISSING: Final = object()


@dataclass
class _Staging:
    """Instances a thread has built but not yet published."""

    depth: int = 0
    instances: dict[str, Any] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)

    def add(self, service_id: str, instance: Any) -> None:
        self.instances[service_id] = instance
        self.order.append(service_id)

    def discard_from(self, mark: int) -> None:
        for service_id in self.order[mark:]:
            self.instances.pop(service_id, None)
        del self.order[mark:]


class SharedPolicy:
    """One instance per id and container, constructed at most once.

    Instances built by a thread stay visible to that thread only until its
    outermost construction returns; other threads wait on the lock and then
    see fully configured instances. When a construction fails, the failing
    instance and every instance built after it was stored are discarded.
    """

    def __init__(
        self,
        lock: threading.RLock | None = None,
        instances: Mapping[str, Any] | None = None,
    ) -> None:
        self._lock = lock or threading.RLock()
        self._instances: dict[str, Any] = dict(instances or {})
        self._staging: dict[int, _Staging] = {}

    def get_instance(self, service_id: str, creator: Creator) -> Any:
        instance = self.get_cached(service_id, _MISSING)
        if instance is not _MISSING:
            return instance
        with self._lock:
            instance = self.get_cached(service_id, _MISSING)
            if instance is not _MISSING:
                return instance

            ident = threading.get_ident()
            staging = self._staging.setdefault(ident, _Staging())
            staging.depth += 1
            marks: list[int] = []

            def store(built: Any) -> None:
                marks.append(len(staging.order))
                staging.add(service_id, built)

            try:
                instance = creator(store)
                if not marks:
                    staging.add(service_id, instance)
                return instance
            except BaseException:
                if marks:
                    staging.discard_from(marks[0])
                raise
            finally:
                staging.depth -= 1
                if staging.depth == 0:
                    self._instances.update(staging.instances)
                    del self._staging[ident]

    def store_instance(self, service_id: str, instance: Any) -> None:
        self._instances[service_id] = instance

    def has_instance(self, service_id: str) -> bool:
        return self.get_cached(service_id, _MISSING) is not _MISSING

    def get_cached(self, service_id: str, default: Any = None) -> Any:
        """Return a published instance, or one the calling thread is still building."""
        instance = self._instances.get(service_id, _MISSING)
        if instance is not _MISSING:
            return instance
        staging = self._staging.get(threading.get_ident())
        if staging is not None:
            return staging.instances.get(service_id, default)
        return default

    def forget(self, service_id: str) -> None:
        self._instances.pop(service_id, None)


class PrototypePolicy:
    """A new instance on every request."""

    def get_instance(self, service_id: str, creator: Creator) -> Any:
        return creator(lambda built: None)
