"""Construct objects and call static functions by name.

Test code uses this to work with classes it does not import directly, for
instance ones living behind an isolated loader.
"""

import inspect
from typing import Any, Optional

from plugin_harness.errors import (
    ClassResolutionError,
    InvocationTargetError,
    NoMatchingMemberError,
    log_error,
)
from plugin_harness.logging import get_logger
from plugin_harness.reflection.loaders import ClassLoader, ImportLoader
from plugin_harness.reflection.overloads import (
    constructor_candidates,
    first_match,
    static_candidates,
)
from plugin_harness.types import CandidateMember, InvocationRequest

logger = get_logger(__name__)


def _loader(loader: Optional[ClassLoader]) -> ClassLoader:
    return ImportLoader() if loader is None else loader


def _load_class(loader: Optional[ClassLoader], class_name: str) -> type:
    cls = _loader(loader).load_class(class_name)
    if not inspect.isclass(cls):
        raise ClassResolutionError(class_name, "not a class")
    return cls


def _invoke(request: InvocationRequest, candidate: CandidateMember) -> Any:
    logger.debug(
        {
            "event": "member_invoke",
            "member": request.member,
            "parameter_types": [getattr(t, "__name__", repr(t)) for t in candidate.parameter_types],
        }
    )
    try:
        return candidate.target(*request.arguments)
    except Exception as e:
        error = InvocationTargetError(request.member, e)
        log_error(error, {"member": request.member}, logger)
        raise error from e


def find_constructor(loader: Optional[ClassLoader], class_name: str, *args: Any) -> CandidateMember:
    """Return the first constructor of ``class_name`` accepting ``args``."""
    cls = _load_class(loader, class_name)
    candidate = first_match(constructor_candidates(cls), args)
    if candidate is None:
        raise NoMatchingMemberError(class_name, None, args)
    return candidate


def find_static(loader: Optional[ClassLoader], class_name: str, method_name: str, *args: Any) -> CandidateMember:
    """Return the first static function ``method_name`` accepting ``args``.

    ``class_name`` may name a class or a module; module-level functions
    count as static.
    """
    owner = _loader(loader).load_class(class_name)
    candidate = first_match(static_candidates(owner, method_name), args)
    if candidate is None:
        raise NoMatchingMemberError(class_name, method_name, args)
    return candidate


def construct(loader: Optional[ClassLoader], class_name: str, *args: Any) -> Any:
    """Instantiate a class loaded through ``loader``.

    Raises:
        ClassResolutionError: the class cannot be loaded.
        NoMatchingMemberError: no constructor accepts the arguments.
        InvocationTargetError: the constructor raised.
    """
    request = InvocationRequest(class_name, None, args)
    return _invoke(request, find_constructor(loader, class_name, *args))


def invoke_static(loader: Optional[ClassLoader], class_name: str, method_name: str, *args: Any) -> Any:
    """Call a static function of a class (or module) loaded through ``loader``.

    Works like :func:`construct`, matching functions by exact name.
    """
    request = InvocationRequest(class_name, method_name, args)
    return _invoke(request, find_static(loader, class_name, method_name, *args))
