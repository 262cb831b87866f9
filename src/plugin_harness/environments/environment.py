"""Test environment lifecycle management."""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from fuuid import b58_fuuid

from plugin_harness.config import get_config
from plugin_harness.logging import get_logger
from plugin_harness.reflection.invoker import construct
from plugin_harness.reflection.loaders import ClassLoader
from plugin_harness.sandboxes.sandbox import (
    create_sandbox,
    create_sandbox_for,
    release_sandbox,
)
from plugin_harness.types import HarnessEnvironment

logger = get_logger(__name__)


def get_test_environment(
    loader: Optional[ClassLoader] = None, class_name: Optional[str] = None
) -> Any:
    """Instantiate the host's legacy environment for use in unit tests.

    Unit tests should not depend on side effects such as plugins found in the
    user's home directory, so the environment is created without a loader
    of its own and with those side effects switched off. The class is
    resolved by name, which keeps the host out of this package's imports.
    """
    class_name = class_name or get_config().environment_class
    return construct(loader, class_name, None, True)


def create_environment(
    prefix: str = "harness-",
    loader: Optional[ClassLoader] = None,
    class_name: Optional[str] = None,
    parent: Optional[Path] = None,
) -> HarnessEnvironment:
    """Create a host environment together with a fresh sandbox."""
    env_id = b58_fuuid()
    logger.info({"event": "creating_environment", "env_id": env_id})

    sandbox_prefix = f"{prefix}{env_id}-"
    if parent is None:
        sandbox = create_sandbox_for(sandbox_prefix)
    else:
        sandbox = create_sandbox(sandbox_prefix, "", parent)

    try:
        handle = get_test_environment(loader, class_name)
    except Exception:
        release_sandbox(sandbox)
        raise

    env = HarnessEnvironment(
        id=env_id,
        handle=handle,
        sandbox=sandbox,
        created_at=datetime.now(timezone.utc),
    )
    logger.info(
        {"event": "environment_created", "env_id": env_id, "sandbox": str(sandbox)}
    )
    return env


def cleanup_environment(env: HarnessEnvironment) -> bool:
    """Clean up environment and its sandbox."""
    logger.debug({"event": "cleaning_environment", "env_id": env.id})
    return release_sandbox(env.sandbox)
