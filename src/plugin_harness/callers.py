"""Find out which code outside the harness called into it."""

import inspect
import sys
import sysconfig
from pathlib import Path
from types import FrameType
from typing import Any, Optional

from plugin_harness.errors import CallerNotFoundError, ClassResolutionError
from plugin_harness.logging import get_logger
from plugin_harness.reflection.loaders import ClassLoader, ImportLoader, qualified_name

logger = get_logger(__name__)

PACKAGE = __name__.partition(".")[0]


_STDLIB_DIRS = tuple(
    {Path(sysconfig.get_paths()[key]).resolve() for key in ("stdlib", "platstdlib")}
)
_SITE_DIRS = tuple(
    {Path(sysconfig.get_paths()[key]).resolve() for key in ("purelib", "platlib")}
)


def _in_any(path: Path, directories: tuple) -> bool:
    return any(path == directory or directory in path.parents for directory in directories)


def _is_internal(module_name: str, filename: str) -> bool:
    """Whether a frame runs standard library code.

    Projects may reuse standard library module names (``code``, ``types``),
    so the name only counts when the source comes from the interpreter's
    own library directories.
    """
    top_level = module_name.partition(".")[0]
    if top_level == "builtins":
        return True
    if top_level not in sys.stdlib_module_names:
        return False
    if filename.startswith("<"):
        # frozen modules
        return True
    path = Path(filename).resolve()
    return _in_any(path, _STDLIB_DIRS) and not _in_any(path, _SITE_DIRS)


def _is_harness(module_name: str) -> bool:
    return module_name == PACKAGE or module_name.startswith(PACKAGE + ".")


def declaring_name(frame: FrameType) -> Optional[str]:
    """``module.Class`` for frames running a method, the module name otherwise."""
    module_name = frame.f_globals.get("__name__")
    if not module_name:
        return None
    owner = frame.f_code.co_qualname.split(".<locals>", 1)[0].rpartition(".")[0]
    return f"{module_name}.{owner}" if owner else module_name


def resolve_caller(excluding: Any = None, loader: Optional[ClassLoader] = None) -> Any:
    """Return the class (or module) of the innermost caller outside the harness.

    Sometimes it is convenient to know the caller's context, e.g. whether its
    source lives in a project's test tree. Frames of this package, of the
    standard library and of ``excluding`` (a class, module or dotted name)
    are skipped.

    Raises:
        CallerNotFoundError: no frame survives, or the caller cannot be loaded.
    """
    excluded = None
    if excluding is not None:
        excluded = excluding if isinstance(excluding, str) else qualified_name(excluding)
    loader = ImportLoader() if loader is None else loader

    frame = inspect.currentframe()
    try:
        while frame is not None:
            module_name = frame.f_globals.get("__name__")
            frame_file = frame.f_code.co_filename
            name = declaring_name(frame)
            frame = frame.f_back
            if (
                name is None
                or _is_harness(module_name)
                or _is_internal(module_name, frame_file)
                or name == excluded
                or module_name == excluded
            ):
                continue

            try:
                caller = loader.load_class(name)
            except ClassResolutionError as e:
                raise CallerNotFoundError(
                    f"Could not load {name} with the current loader ({loader!r})!",
                    {"name": name}
                ) from e
            logger.debug({"event": "caller_resolved", "caller": name})
            return caller
    finally:
        del frame

    raise CallerNotFoundError(
        f"No calling class outside {PACKAGE} found!", {"excluding": excluded}
    )


def locate(unit: Any) -> Optional[Path]:
    """Directory holding the source file of a class or module, if it has one."""
    try:
        source = inspect.getfile(unit)
    except (TypeError, OSError):
        # built-in, or defined in an interactive __main__
        return None
    return Path(source).resolve().parent
