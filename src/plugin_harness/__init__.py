"""Building blocks for isolated, reproducible plugin host tests."""

from plugin_harness.archives.bundler import make_archive, manifest_entry
from plugin_harness.callers import locate, resolve_caller
from plugin_harness.environments.environment import (
    cleanup_environment,
    create_environment,
    get_test_environment,
)
from plugin_harness.reflection.invoker import construct, invoke_static
from plugin_harness.reflection.loaders import ClassLoader, ImportLoader, RegistryLoader
from plugin_harness.reflection.overloads import parameters_match
from plugin_harness.sandboxes.sandbox import (
    create_sandbox,
    create_sandbox_for,
    release_sandbox,
)

__all__ = [
    "ClassLoader",
    "ImportLoader",
    "RegistryLoader",
    "cleanup_environment",
    "construct",
    "create_environment",
    "create_sandbox",
    "create_sandbox_for",
    "get_test_environment",
    "invoke_static",
    "locate",
    "make_archive",
    "manifest_entry",
    "parameters_match",
    "release_sandbox",
    "resolve_caller",
]
