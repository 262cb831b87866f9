"""Overload matching and candidate enumeration.

Targets declare alternative signatures with ``typing.overload``; a member
without overloads contributes its own signature. Parameter annotations are
the declared types. Primitive-like parameters are declared with ``ctypes``
scalar types and only accept values of exactly that type.
"""

import ctypes
import inspect
import types
import typing
from typing import Any, Callable, List, Optional, Sequence

from plugin_harness.errors import UnsupportedTypeError
from plugin_harness.logging import get_logger
from plugin_harness.types import CandidateMember, PrimitiveKind

logger = get_logger(__name__)

SUPPORTED_PRIMITIVES = frozenset(kind.value for kind in PrimitiveKind)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_UNION_TYPES = (typing.Union, types.UnionType)


def is_primitive(declared: Any) -> bool:
    return isinstance(declared, type) and issubclass(declared, ctypes._SimpleCData)


def _check_primitives(declared_types: Sequence[Any]) -> None:
    for declared in declared_types:
        if is_primitive(declared) and declared not in SUPPORTED_PRIMITIVES:
            raise UnsupportedTypeError(declared)


def is_assignable(declared: Any, value: Any) -> bool:
    """Whether a non-None value may be passed where ``declared`` is expected."""
    if declared in (inspect.Parameter.empty, typing.Any, object):
        return True
    if isinstance(declared, typing.ForwardRef):
        # nested forward references are left unevaluated
        return True
    if is_primitive(declared):
        return type(value) is declared
    if isinstance(declared, typing.TypeVar):
        return declared.__bound__ is None or is_assignable(declared.__bound__, value)

    origin = typing.get_origin(declared)
    if origin in _UNION_TYPES:
        return any(is_assignable(member, value) for member in typing.get_args(declared))
    if origin is typing.Literal:
        return value in typing.get_args(declared)
    if origin is typing.Annotated:
        return is_assignable(typing.get_args(declared)[0], value)
    if origin is not None:
        return isinstance(origin, type) and isinstance(value, origin)

    if declared is None or declared is type(None):
        return False
    if isinstance(declared, type):
        return isinstance(value, declared)
    return False


def parameters_match(declared_types: Sequence[Any], actual_values: Sequence[Any]) -> bool:
    """Check whether argument values fit a list of declared parameter types.

    Unsupported primitive-like declarations raise UnsupportedTypeError as soon
    as the lengths agree, whatever the argument values are.
    """
    if len(declared_types) != len(actual_values):
        return False
    _check_primitives(declared_types)

    for declared, value in zip(declared_types, actual_values):
        if value is None:
            continue
        if not is_assignable(declared, value):
            return False
    return True


def _unwrap(member: Any) -> Any:
    # staticmethod, classmethod and bound methods
    return getattr(member, "__func__", member)


def _evaluate(annotation: Any, function: Callable[..., Any]) -> Any:
    """Evaluate a string annotation against the globals of ``function``.

    Names only imported for type checking cannot be evaluated; those
    positions count as unannotated while the rest keep their types.
    """
    if not isinstance(annotation, str):
        return annotation
    globalns = getattr(function, "__globals__", {})
    try:
        return eval(annotation, globalns)
    except (NameError, AttributeError, SyntaxError, TypeError):
        logger.debug({"event": "annotation_unresolved", "annotation": annotation})
        return inspect.Parameter.empty


def declared_parameter_types(function: Callable[..., Any], bound: bool = False) -> Optional[tuple]:
    """Positional parameter annotations of ``function``.

    Returns None when the function cannot be called positionally (required
    keyword-only parameters) or its signature cannot be read.
    """
    function = _unwrap(function)
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        logger.debug({"event": "signature_unavailable", "function": repr(function)})
        return None

    parameters = list(signature.parameters.values())
    if bound and parameters and parameters[0].kind in _POSITIONAL:
        parameters = parameters[1:]

    declared = []
    for parameter in parameters:
        if parameter.kind in _POSITIONAL:
            declared.append(_evaluate(parameter.annotation, function))
        elif parameter.kind is inspect.Parameter.KEYWORD_ONLY and parameter.default is inspect.Parameter.empty:
            return None
    return tuple(declared)


def _declarations(function: Callable[..., Any]) -> List[Callable[..., Any]]:
    function = _unwrap(function)
    # builtins and slot wrappers cannot carry typing.overload declarations
    if inspect.isfunction(function):
        overloads = typing.get_overloads(function)
        if overloads:
            return [_unwrap(stub) for stub in overloads]
    return [function]


def constructor_candidates(cls: type) -> List[CandidateMember]:
    """Constructors of ``cls`` in declaration order."""
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return [CandidateMember(cls.__name__, (), cls, cls)]

    initializer = cls.__init__ if cls.__init__ is not object.__init__ else cls.__new__
    candidates = []
    for declaration in _declarations(initializer):
        parameter_types = declared_parameter_types(declaration, bound=True)
        if parameter_types is not None:
            candidates.append(CandidateMember(cls.__name__, parameter_types, declaration, cls))
    return candidates


def static_candidates(owner: Any, name: str) -> List[CandidateMember]:
    """Public static functions called ``name`` on a class or module."""
    if name.startswith("_"):
        return []

    if inspect.ismodule(owner):
        target = getattr(owner, name, None)
        if not (inspect.isfunction(target) or inspect.isbuiltin(target)):
            return []
        bound = False
    else:
        try:
            raw = inspect.getattr_static(owner, name)
        except AttributeError:
            return []
        if isinstance(raw, staticmethod):
            bound = False
        elif isinstance(raw, classmethod):
            bound = True
        else:
            return []
        target = getattr(owner, name)

    candidates = []
    for declaration in _declarations(target):
        parameter_types = declared_parameter_types(declaration, bound=bound)
        if parameter_types is not None:
            candidates.append(CandidateMember(name, parameter_types, declaration, target))
    return candidates


def first_match(candidates: Sequence[CandidateMember], arguments: Sequence[Any]) -> Optional[CandidateMember]:
    """The first candidate, in declaration order, accepting ``arguments``."""
    for candidate in candidates:
        if parameters_match(candidate.parameter_types, arguments):
            return candidate
    return None
