"""Host classes written with postponed annotations."""

from __future__ import annotations

from ctypes import c_int32, c_int64
from typing import TYPE_CHECKING, overload

if TYPE_CHECKING:
    from legacy_host import LegacyEnvironment


class Meter:
    @overload
    def __init__(self, reading: c_int32, environment: LegacyEnvironment) -> None: ...

    @overload
    def __init__(self, reading: c_int64, environment: LegacyEnvironment) -> None: ...

    def __init__(self, reading, environment):
        self.reading = reading
        self.environment = environment

    @staticmethod
    def scale(reading: c_int64, factor: int) -> int:
        return reading.value * factor
