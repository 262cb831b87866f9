"""Loading contexts that resolve dotted names to classes and modules."""

import importlib
import inspect
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from plugin_harness.errors import ClassResolutionError
from plugin_harness.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ClassLoader(Protocol):
    """Anything able to map a dotted name to a class or module."""

    def load_class(self, name: str) -> Any:
        """Return the object named ``name`` or raise ClassResolutionError."""
        ...


def qualified_name(obj: Any) -> str:
    """Dotted name of a module, class or function."""
    if inspect.ismodule(obj):
        return obj.__name__
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if qualname is None:
        raise TypeError(f"{obj!r} has no qualified name")
    return f"{module}.{qualname}" if module else qualname


class ImportLoader:
    """Resolve names through the regular import system.

    The longest importable module prefix of the name is imported and the
    remaining components are looked up as attributes, so both
    ``package.module`` and ``package.module.Class.Nested`` resolve.
    """

    def load_class(self, name: str) -> Any:
        parts = name.split(".")
        if not name or not all(parts):
            raise ClassResolutionError(name, "not a dotted name")

        for index in range(len(parts), 0, -1):
            module_name = ".".join(parts[:index])
            try:
                obj = importlib.import_module(module_name)
            except ModuleNotFoundError as e:
                # a missing dependency inside the module is a real failure
                if e.name is None or not (
                    module_name == e.name or module_name.startswith(e.name + ".")
                ):
                    raise ClassResolutionError(name, str(e)) from e
                continue
            except ImportError as e:
                raise ClassResolutionError(name, str(e)) from e

            for attribute in parts[index:]:
                try:
                    obj = getattr(obj, attribute)
                except AttributeError as e:
                    raise ClassResolutionError(name, str(e)) from e

            logger.debug({"event": "class_loaded", "name": name, "module": module_name})
            return obj

        raise ClassResolutionError(name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RegistryLoader:
    """Explicit name to object registry, falling back to a parent loader."""

    def __init__(self, mapping: Mapping[str, Any], parent: Optional[ClassLoader] = None):
        self._mapping = dict(mapping)
        self._parent = parent

    def load_class(self, name: str) -> Any:
        if name in self._mapping:
            return self._mapping[name]
        if self._parent is None:
            raise ClassResolutionError(name, "not registered")
        return self._parent.load_class(name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({sorted(self._mapping)!r})"
