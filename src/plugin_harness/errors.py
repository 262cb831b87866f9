"""Error hierarchy for the test harness."""
import logging
from typing import Any, Dict, Optional


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger(__name__)

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, HarnessError):
        error_info["details"] = error.details

    logger.error("Harness error occurred", extra={"data": error_info})


class HarnessError(Exception):
    """Base error class for the harness."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ProvisioningError(HarnessError, OSError):
    """A sandbox could not be created or its placeholder file removed."""


class BundleError(HarnessError, OSError):
    """A code unit could not be read while building an archive."""


class ResolutionError(HarnessError, LookupError):
    """Something looked up by name does not exist."""


class ClassResolutionError(ResolutionError):
    """The loader could not resolve a dotted name."""
    def __init__(self, name: str, reason: Optional[str] = None):
        message = f"Could not load {name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"name": name})
        self.name = name


class NoMatchingMemberError(ResolutionError):
    """No constructor or static function accepts the given arguments."""
    def __init__(self, class_name: str, member_name: Optional[str], arguments: tuple):
        member = member_name or "constructor"
        super().__init__(
            f"No matching method found: {class_name}.{member} for "
            f"{len(arguments)} argument(s)",
            {
                "class_name": class_name,
                "member_name": member_name,
                "argument_types": [type(arg).__name__ for arg in arguments],
            }
        )


class UsageError(HarnessError):
    """The harness was called in a way it does not support."""


class CallerNotFoundError(UsageError, ResolutionError):
    """No frame outside the harness could be resolved to a caller."""


class ConfigurationError(HarnessError):
    """Invalid harness configuration or unsupported declarations."""


class UnsupportedTypeError(ConfigurationError, TypeError):
    """A declared primitive-like parameter type cannot be matched."""
    def __init__(self, declared: type):
        super().__init__(
            f"unsupported primitive type {declared.__name__}",
            {"declared_type": declared.__name__}
        )


class InvocationTargetError(HarnessError):
    """The resolved member raised; the original exception is the cause."""
    def __init__(self, member: str, cause: BaseException):
        super().__init__(
            f"{member} raised {cause.__class__.__name__}: {cause}",
            {"member": member, "cause_type": cause.__class__.__name__}
        )
        self.cause = cause
