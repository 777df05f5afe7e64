"""Tests for the injection error taxonomy."""

from __future__ import annotations

import pytest

from armature.errors import ArmatureError, ErrorCode, ErrorSeverity
from armature.injection import (
    AbstractServiceInstantiationError,
    AliasCircularReferenceError,
    AutowireError,
    CircularDependencyError,
    FrozenContainerError,
    InjectionError,
    KernelError,
    MissingReferenceTargetError,
    ParameterCircularReferenceError,
    ParameterNotFoundError,
    ParameterTypeError,
    ServiceCreationError,
    ServiceNotFoundError,
    SyntheticServiceNotSetError,
)
from armature.injection.errors import INJECTION


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ServiceNotFoundError("a"), "INJECTION_SERVICE_NOT_FOUND"),
        (SyntheticServiceNotSetError("a"), "INJECTION_SYNTHETIC_NOT_SET"),
        (ParameterNotFoundError("p"), "INJECTION_PARAMETER_NOT_FOUND"),
        (ParameterTypeError("p", [1], "x%p%"), "INJECTION_PARAMETER_TYPE"),
        (CircularDependencyError(["a", "a"]), "INJECTION_CIRCULAR_DEPENDENCY"),
        (AliasCircularReferenceError(["a", "a"]), "INJECTION_CIRCULAR_DEPENDENCY"),
        (ParameterCircularReferenceError(["a", "a"]), "INJECTION_CIRCULAR_DEPENDENCY"),
        (FrozenContainerError(), "INJECTION_FROZEN_CONTAINER"),
        (AutowireError("a", "p", "reason"), "INJECTION_AUTOWIRE_FAILURE"),
        (AbstractServiceInstantiationError("a"), "INJECTION_ABSTRACT_SERVICE"),
        (MissingReferenceTargetError("a", "b"), "INJECTION_MISSING_REFERENCE_TARGET"),
        (ServiceCreationError("a", ValueError("x")), "INJECTION_SERVICE_CREATION"),
        (KernelError("not booted"), "INJECTION_KERNEL"),
    ],
)
def test_error_codes(error: InjectionError, code: str) -> None:
    assert isinstance(error, InjectionError)
    assert isinstance(error, ArmatureError)
    assert error.code == code
    assert error.category == INJECTION
    assert error.severity is ErrorSeverity.ERROR
    assert str(error).startswith(f"{code}: ")


def test_codes_are_registered() -> None:
    code = ErrorCode.get_by_code("INJECTION_SERVICE_NOT_FOUND")
    assert code.category == INJECTION
    assert ErrorCode.get_by_code("INJECTION_AUTOWIRE_FAILURE") in ErrorCode.filter_by_category(
        INJECTION
    )


def test_synthetic_error_is_a_not_found_error() -> None:
    error = SyntheticServiceNotSetError("request")
    assert isinstance(error, ServiceNotFoundError)
    assert error.service_id == "request"


def test_circular_dependency_context() -> None:
    error = CircularDependencyError(["a", "b", "a"])
    assert error.message == "Circular dependency detected: a -> b -> a"
    assert error.context == {"path": ["a", "b", "a"], "kind": "service"}
    assert AliasCircularReferenceError(["x", "y", "x"]).context["kind"] == "alias"


def test_service_creation_error_chains_cause() -> None:
    original = RuntimeError("db down")
    error = ServiceCreationError("repo", original, ["app", "repo"])
    assert error.__cause__ is original
    assert error.original_error is original
    assert error.context["error_type"] == "RuntimeError"
    assert error.context["dependency_chain"] == ["app", "repo"]
    assert 'Failed to create service "repo": db down' in str(error)


def test_to_dict() -> None:
    data = MissingReferenceTargetError("mailer", "transport").to_dict()
    assert data["code"] == "INJECTION_MISSING_REFERENCE_TARGET"
    assert data["category"] == "INJECTION"
    assert data["context"] == {"service_id": "mailer", "target_id": "transport"}
