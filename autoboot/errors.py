"""Central error taxonomy and framework exception hierarchy.

Every framework error carries an ``error_type`` code from the taxonomy so
metrics and logs can be grouped without string matching on messages.
"""
from __future__ import annotations

from typing import Iterable, Tuple

_ALLOWED_ERROR_TYPES = {
    # activation
    "excluded-identity-not-found",
    "cyclic-ordering-constraint",
    "manifest-invalid",
    "factories-invalid",
    # lifecycle
    "listener-error",
    "failed-handler-error",
    "listener-load-error",
    # config
    "config-invalid",
    "config-out-of-range",
    # infra
    "event-handler-error",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


class AutobootError(Exception):
    """Base framework exception."""

    error_type = "config-invalid"


class ConfigurationError(AutobootError):
    """Resolution cannot produce a valid activation result.

    Raised before any module activates; never leaves a partial result.
    """


class ExcludedIdentityNotFound(ConfigurationError):
    error_type = "excluded-identity-not-found"

    def __init__(self, identities: Iterable[str]):
        self.identities: Tuple[str, ...] = tuple(identities)
        super().__init__(
            "The following modules could not be excluded because they are "
            "not candidates: " + ", ".join(self.identities)
        )


class CyclicOrderingConstraint(ConfigurationError):
    error_type = "cyclic-ordering-constraint"

    def __init__(self, identities: Iterable[str]):
        self.identities: Tuple[str, ...] = tuple(identities)
        super().__init__(
            "Module ordering cycle detected between: "
            + ", ".join(self.identities)
        )


class ManifestError(ConfigurationError):
    error_type = "manifest-invalid"


class FactoriesError(ConfigurationError):
    error_type = "factories-invalid"


class ListenerError(AutobootError):
    """Conventional base for errors raised by startup listeners.

    The broadcaster does not require it: any exception a listener raises
    is propagated unchanged.
    """

    error_type = "listener-error"


class ListenerLoadError(AutobootError):
    error_type = "listener-load-error"


def error_type_of(exc: BaseException) -> str:
    code = getattr(exc, "error_type", None)
    if isinstance(code, str) and code in _ALLOWED_ERROR_TYPES:
        return code
    return "listener-error"


__all__ = [
    "validate_error_type",
    "error_type_of",
    "AutobootError",
    "ConfigurationError",
    "ExcludedIdentityNotFound",
    "CyclicOrderingConstraint",
    "ManifestError",
    "FactoriesError",
    "ListenerError",
    "ListenerLoadError",
]
