"""Stand-in for the host application's legacy environment facility."""

from typing import Optional


class LegacyEnvironment:
    """Records how it was constructed instead of starting a host."""

    def __init__(self, loader: Optional[object], headless: bool):
        self.loader = loader
        self.headless = headless
        self.plugins_dir_read = not headless


class BrokenEnvironment:
    def __init__(self, loader: Optional[object], headless: bool):
        raise RuntimeError("host failed to start")


class StrictEnvironment:
    """Only accepts a loader object and a string mode."""

    def __init__(self, loader: object, mode: str):
        self.loader = loader
        self.mode = mode
