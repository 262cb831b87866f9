import logging
from ctypes import c_double

import pytest

from plugin_harness.errors import (
    BundleError,
    CallerNotFoundError,
    ClassResolutionError,
    ConfigurationError,
    HarnessError,
    InvocationTargetError,
    NoMatchingMemberError,
    ProvisioningError,
    ResolutionError,
    UnsupportedTypeError,
    UsageError,
    log_error,
)


@pytest.mark.parametrize(
    "error,bases",
    [
        (ProvisioningError("no room", {"path": "/tmp/x"}), (HarnessError, OSError)),
        (BundleError("unreadable"), (HarnessError, OSError)),
        (ClassResolutionError("a.B"), (ResolutionError, LookupError)),
        (NoMatchingMemberError("a.B", "make", (1,)), (ResolutionError, LookupError)),
        (CallerNotFoundError("nobody"), (UsageError, ResolutionError)),
        (UnsupportedTypeError(c_double), (ConfigurationError, TypeError)),
    ],
)
def test_error_taxonomy(error, bases):
    for base in bases:
        assert isinstance(error, base)


def test_provisioning_error_message():
    error = ProvisioningError("no room", {"path": "/tmp/x"})

    assert str(error) == "no room"
    assert error.details == {"path": "/tmp/x"}


def test_class_resolution_error():
    error = ClassResolutionError("a.B", "not a class")

    assert str(error) == "Could not load a.B: not a class"
    assert error.name == "a.B"


def test_no_matching_member_error():
    error = NoMatchingMemberError("a.B", None, (1, "x", None))

    assert "a.B.constructor" in str(error)
    assert error.details["argument_types"] == ["int", "str", "NoneType"]


def test_invocation_target_error_keeps_cause():
    cause = ValueError("boom")
    error = InvocationTargetError("a.B.make", cause)

    assert error.cause is cause
    assert str(error) == "a.B.make raised ValueError: boom"


def test_log_error():
    logger = logging.getLogger("plugin_harness_test.errors")
    records = []

    class Handler(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger.addHandler(Handler())
    log_error(BundleError("unreadable", {"unit": "a.b"}), {"step": "bundle"}, logger)

    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].data == {
        "error_type": "BundleError",
        "error_message": "unreadable",
        "context": {"step": "bundle"},
        "details": {"unit": "a.b"},
    }
