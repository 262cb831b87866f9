"""Core type definitions"""

import ctypes
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional


class PrimitiveKind(Enum):
    """Primitive-like parameter kinds the overload matcher understands."""
    INTEGER = ctypes.c_int32
    LONG = ctypes.c_int64
    BOOLEAN = ctypes.c_bool


@dataclass(frozen=True)
class InvocationRequest:
    """A by-name constructor or static function call"""
    class_name: str
    member_name: Optional[str]
    arguments: tuple

    @property
    def member(self) -> str:
        return f"{self.class_name}.{self.member_name or '__init__'}"


@dataclass(frozen=True)
class CandidateMember:
    """A constructor or static function considered during resolution"""
    name: str
    parameter_types: tuple
    declaration: Callable[..., Any]
    target: Callable[..., Any]


@dataclass(frozen=True)
class ManifestEntry:
    """A plugins.config registration line"""
    display_name: str
    unit_name: str

    @property
    def line(self) -> str:
        return f'Plugins, "{self.display_name}", {self.unit_name}'


@dataclass(frozen=True)
class HarnessEnvironment:
    """Host environment handle paired with its sandbox"""
    id: str
    handle: Any
    sandbox: Path
    created_at: datetime
