import pytest

from autoboot.errors import (
    AutobootError,
    ConfigurationError,
    CyclicOrderingConstraint,
    ExcludedIdentityNotFound,
    ListenerError,
    error_type_of,
    validate_error_type,
)


def test_error_taxonomy_known():
    assert validate_error_type("listener-error") == "listener-error"
    assert validate_error_type("config-out-of-range") == "config-out-of-range"


def test_error_taxonomy_unknown():
    with pytest.raises(AssertionError):
        validate_error_type("not-a-code")


def test_every_framework_error_carries_known_code():
    errors = [
        ExcludedIdentityNotFound(["a.B"]),
        CyclicOrderingConstraint(["x", "y"]),
        ListenerError("boom"),
    ]
    for e in errors:
        assert isinstance(e, AutobootError)
        validate_error_type(e.error_type)
    assert isinstance(errors[0], ConfigurationError)
    assert "x, y" in str(errors[1])


def test_error_type_of_foreign_exception():
    assert error_type_of(ValueError()) == "listener-error"
    assert error_type_of(CyclicOrderingConstraint(["a"])) == (
        "cyclic-ordering-constraint"
    )
