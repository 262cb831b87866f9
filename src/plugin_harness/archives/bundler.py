"""Bundle modules into a zip archive with a plugins.config manifest."""

import importlib.util
import zipfile
from pathlib import Path
from typing import Optional

from plugin_harness.errors import BundleError
from plugin_harness.logging import get_logger
from plugin_harness.types import ManifestEntry

logger = get_logger(__name__)

MANIFEST_NAME = "plugins.config"
UNIT_SUFFIX = ".py"


def manifest_entry(unit_name: str) -> Optional[ManifestEntry]:
    """Plugin registration for a unit, if its simple name marks it as a plugin.

    Units whose last name component contains an underscore are plugins; the
    display name is that component with underscores turned into spaces.
    """
    simple_name = unit_name.rpartition(".")[2]
    if "_" not in simple_name:
        return None
    return ManifestEntry(simple_name.replace("_", " "), unit_name)


def _read_unit(unit_name: str) -> tuple[str, bytes]:
    """Archive path and source bytes of a module."""
    try:
        spec = importlib.util.find_spec(unit_name)
    except (ImportError, ValueError) as e:
        raise BundleError(f"Could not find {unit_name}: {e}", {"unit": unit_name}) from e
    if spec is None or spec.origin is None or not spec.origin.endswith(UNIT_SUFFIX):
        raise BundleError(f"No source available for {unit_name}", {"unit": unit_name})

    path = unit_name.replace(".", "/")
    if spec.submodule_search_locations is not None:
        path = f"{path}/__init__"

    get_data = getattr(spec.loader, "get_data", None)
    if get_data is None:
        raise BundleError(f"Loader of {unit_name} cannot read source", {"unit": unit_name})
    try:
        return path + UNIT_SUFFIX, get_data(spec.origin)
    except OSError as e:
        raise BundleError(f"Could not read {spec.origin}: {e}", {"unit": unit_name}) from e


def make_archive(archive_path: Path, *unit_names: str) -> Path:
    """Bundle the given modules in a new zip file.

    A ``plugins.config`` entry is added when at least one unit is a plugin
    (see manifest_entry). A unit that cannot be read aborts the bundle;
    entries written before it are left in the archive.
    """
    archive_path = Path(archive_path)
    plugins_config = []

    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for unit_name in unit_names:
            path, data = _read_unit(unit_name)
            archive.writestr(path, data)

            entry = manifest_entry(unit_name)
            if entry is not None:
                plugins_config.append(entry.line + "\n")

        if plugins_config:
            archive.writestr(MANIFEST_NAME, "".join(plugins_config).encode("utf-8"))

    logger.info(
        {
            "event": "archive_created",
            "archive": str(archive_path),
            "units": len(unit_names),
            "plugins": len(plugins_config),
        }
    )
    return archive_path
