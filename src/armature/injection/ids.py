# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: armature
"""
Service id helpers.

Service ids are strings. Public entry points also accept a class, which is
normalised to its type id ``"module.QualifiedName"``; registering a service
under a type id is how autowiring picks an explicit winner for that type.
"""

from __future__ import annotations

from typing import Any, Final

# The id under which every container exposes itself
SERVICE_CONTAINER_ID: Final = "service_container"

ServiceKey = str | type


def type_id(cls: type[Any]) -> str:
    """Return the service id used for a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def normalize_id(key: ServiceKey) -> str:
    """Normalise a service key (id string or class) to an id string."""
    if isinstance(key, type):
        return type_id(key)
    if not isinstance(key, str) or not key:
        raise TypeError(
            f"Service id must be a non-empty string or a class, got {key!r}"
        )
    return key
