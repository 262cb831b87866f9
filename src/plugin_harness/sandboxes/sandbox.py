"""Sandbox directory provisioning and teardown."""

import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from plugin_harness.callers import locate, resolve_caller
from plugin_harness.config import get_config
from plugin_harness.errors import ProvisioningError
from plugin_harness.logging import get_logger

logger = get_logger(__name__)

MAX_ATTEMPTS = 10
PROJECT_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg")


def _reserve_name(prefix: str, suffix: str, parent: Optional[Path]) -> Path:
    """Create an empty, uniquely named file and return its path."""
    try:
        fd, name = tempfile.mkstemp(
            suffix=suffix, prefix=prefix, dir=None if parent is None else os.fspath(parent)
        )
    except OSError as e:
        location = parent if parent is not None else tempfile.gettempdir()
        raise ProvisioningError(
            f"Could not create temporary file in {location}", {"parent": str(location)}
        ) from e
    os.close(fd)
    return Path(name)


def create_sandbox(prefix: str, suffix: str = "", parent: Optional[Path] = None) -> Path:
    """Create a new empty directory with a unique name.

    There is no atomic way to do that, so a temporary file is created,
    deleted, and a directory made in its place. Another process may claim
    the name in between; that is handled optimistically by starting over
    with a new name, up to MAX_ATTEMPTS times.

    The caller owns the directory and must remove it, see release_sandbox().
    """
    if parent is None:
        parent = get_config().temp_dir

    for attempt in range(1, MAX_ATTEMPTS + 1):
        path = _reserve_name(prefix, suffix, parent)

        try:
            path.unlink()
        except OSError as e:
            raise ProvisioningError(f"Could not delete file {path}", {"path": str(path)}) from e

        # in case of a race condition, just try again
        try:
            path.mkdir()
        except OSError as e:
            logger.debug(
                {"event": "sandbox_race", "path": str(path), "attempt": attempt, "error": str(e)}
            )
            continue

        logger.info({"event": "sandbox_created", "root": str(path), "attempt": attempt})
        return path

    raise ProvisioningError(
        "Could not create temporary directory (too many race conditions?)",
        {"attempts": MAX_ATTEMPTS, "parent": str(parent) if parent else None},
    )


def _is_project_root(directory: Path) -> bool:
    return any((directory / marker).is_file() for marker in PROJECT_MARKERS)


def sandbox_parent_for(location: Optional[Path]) -> Optional[Path]:
    """Project-local build directory for code living in a test tree, if any.

    ``location`` must be a test directory itself, or lie below the test
    directory at the top of its project (next to ``pyproject.toml`` or
    ``setup.py``). Test directories above the nearest project root do
    not count.
    """
    if location is None:
        return None

    config = get_config()
    if location.name == config.test_dir_name:
        return location.parent / config.build_dir_name
    if _is_project_root(location):
        return None

    for directory in location.parents:
        if _is_project_root(directory):
            return None
        if directory.name == config.test_dir_name and _is_project_root(directory.parent):
            return directory.parent / config.build_dir_name
    return None


def create_sandbox_for(prefix: str, for_unit: Any = None) -> Path:
    """Create a sandbox next to the build tree of the calling project.

    When ``for_unit`` (by default the calling class or module) comes from a
    project's test tree, the sandbox goes into that project's build directory
    instead of the global temp directory.
    """
    if for_unit is None:
        for_unit = resolve_caller()

    base = sandbox_parent_for(locate(for_unit))
    if base is not None:
        try:
            base.mkdir(parents=True, exist_ok=True)
            path = _reserve_name(prefix, "", base)
            path.unlink()
            path.mkdir()
        except OSError as e:
            logger.warning(
                {"event": "build_sandbox_failed", "base": str(base), "error": str(e)}
            )
        else:
            logger.info({"event": "sandbox_created", "root": str(path), "build_dir": str(base)})
            return path

    return create_sandbox(prefix, "", None)


def release_sandbox(directory: Optional[Path]) -> bool:
    """Delete a directory recursively.

    Stops at the first entry that cannot be removed. Symbolic links are
    removed, never followed. Nesting depth is not limited by the
    interpreter's recursion limit.

    Returns:
        whether the directory is gone; None counts as released.
    """
    if directory is None:
        return True
    directory = Path(directory)

    # (path, emptied): a directory is removed once everything below it is gone
    pending = [(directory, False)]
    while pending:
        current, emptied = pending.pop()
        if emptied:
            try:
                current.rmdir()
            except OSError as e:
                logger.warning({"event": "sandbox_release_failed", "path": str(current), "error": str(e)})
                return False
            continue

        pending.append((current, True))
        try:
            entries = list(current.iterdir())
        except OSError:
            entries = []

        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                pending.append((entry, False))
                continue
            try:
                entry.unlink()
            except OSError as e:
                logger.warning({"event": "sandbox_release_failed", "path": str(entry), "error": str(e)})
                return False

    logger.debug({"event": "sandbox_released", "root": str(directory)})
    return True
