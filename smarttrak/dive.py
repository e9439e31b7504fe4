"""
Decoded dive data model.

A Dive is built in one pass from a summary record and its timeseries block
and is never mutated afterwards. Opaque fields are carried verbatim.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Any, Tuple


class WaterType(IntEnum):
    """Water the dive took place in; the value is the density in g/L."""

    SWEET = 1000
    SALT = 1025

    @property
    def density(self) -> float:
        return float(self.value)


@dataclass(frozen=True)
class DataPoint:
    """One profile sample."""

    time: datetime
    depth: float = 0.0
    temperature: float = 0.0
    alert: bool = False
    warning: bool = False
    high_workload: bool = False
    bookmark: bool = False

    @property
    def state(self) -> str:
        """Human-readable alert/warning/bookmark state."""
        if self.alert:
            ret = "Alert"
        elif self.warning:
            ret = "Warning"
        elif self.high_workload:
            ret = "High workload"
        else:
            ret = "No alert/warning"
        if self.bookmark:
            ret += ", Bookmark"
        return ret


@dataclass(frozen=True)
class DecodeEvent:
    """
    Diagnostic produced while decoding.

    Events describe fields that are read but not exposed on the Dive
    (diagnostic tags, tentative values) and input the decoder tolerated
    (unknown control bytes, unknown block sub-types).
    """

    kind: str
    offset: int
    value: Any
    message: str


@dataclass(frozen=True)
class Dive:
    """Information about a single dive."""

    device_id: int
    sequence: int
    time: datetime
    duration: timedelta
    surface_interval: timedelta
    time_limit: timedelta
    water_type: WaterType
    max_depth: float
    average_depth: float
    depth_limit: float
    air_temperature: float
    deco_temperature: float
    min_temperature: float
    max_temperature: float
    pressure_start: float
    pressure_end: float
    tank_warning: float
    tank_reserve: float
    percent_o2: int = 0
    percent_he: int = 0
    profile: Tuple[DataPoint, ...] = field(default_factory=tuple)

    # Unparsed
    work_sensitivity: int = 0
    desat_before: int = 0
    feature_set: int = 0
    settings1: int = 0
    settings2: int = 0

    # Not certain
    max_po2: float = 0.0


@dataclass(frozen=True)
class DecodeResult:
    """A decoded dive together with the diagnostics gathered on the way."""

    dive: Dive
    events: Tuple[DecodeEvent, ...] = ()

    def events_of(self, kind: str) -> Tuple[DecodeEvent, ...]:
        return tuple(e for e in self.events if e.kind == kind)
