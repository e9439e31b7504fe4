"""
Fixed 195-byte per-dive summary record.

Field offsets (little-endian):

    Offset  Size  Field
    ------  ----  -----
    8       4     Device id
    16      8     Start time, half-seconds since 2000-01-01T00:00:00Z
    24      2     UTC offset of the device, signed, 15 minute units
    28      2     Sequence number
    30      2     Air temperature, signed, 1/10 degree
    33      2     Time limit, minutes
    35      4     Feature set (opaque)
    42      2     Max depth, 1/10 m of fresh water equivalent
    44      2     Duration, minutes
    46      2     Min temperature
    50      2     Surface interval, minutes
    54      2     Start pressure, 1/128 bar
    56      2     End pressure
    60      2     Max pO2 (tentative), 1/1000 bar
    62      2     Depth limit
    64      2     Tank warning pressure
    66      2     Tank reserve pressure
    68      2     Work sensitivity (opaque)
    70      2     Deco temperature
    72      2     Desaturation before dive (opaque)
    82      4     Settings 1, bit 0x00100000 = salt water
    158     2     Average depth
    160     2     Max temperature
    167     4     Settings 2 (opaque)
    191     2     Length of the following timeseries block
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

from .dive import DataPoint, Dive, WaterType
from .exceptions import MalformedRecord, SizeMismatch
from .reader import i16, u16, u32, u64

SUMMARY_SIZE = 195

EPOCH_2000 = datetime(2000, 1, 1, tzinfo=timezone.utc)
TZ_OFFSET_UNIT = 900  # seconds
SALT_WATER_BIT = 0x00100000


@dataclass(frozen=True)
class SummaryRecord:
    """Scalar fields of one summary record."""

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
    work_sensitivity: int
    desat_before: int
    feature_set: int
    settings1: int
    settings2: int
    max_po2: float
    timeseries_size: int

    def to_dive(
        self,
        profile: Sequence[DataPoint] = (),
        percent_o2: int = 0,
        percent_he: int = 0,
    ) -> Dive:
        """Combine the summary with its decoded timeseries into a Dive."""
        return Dive(
            device_id=self.device_id,
            sequence=self.sequence,
            time=self.time,
            duration=self.duration,
            surface_interval=self.surface_interval,
            time_limit=self.time_limit,
            water_type=self.water_type,
            max_depth=self.max_depth,
            average_depth=self.average_depth,
            depth_limit=self.depth_limit,
            air_temperature=self.air_temperature,
            deco_temperature=self.deco_temperature,
            min_temperature=self.min_temperature,
            max_temperature=self.max_temperature,
            pressure_start=self.pressure_start,
            pressure_end=self.pressure_end,
            tank_warning=self.tank_warning,
            tank_reserve=self.tank_reserve,
            percent_o2=percent_o2,
            percent_he=percent_he,
            profile=tuple(profile),
            work_sensitivity=self.work_sensitivity,
            desat_before=self.desat_before,
            feature_set=self.feature_set,
            settings1=self.settings1,
            settings2=self.settings2,
            max_po2=self.max_po2,
        )


def parse_time(data: bytes, offset: int = 16) -> datetime:
    """
    Decode the 10-byte timestamp into the device's fixed-offset zone.

    Raises:
        MalformedRecord: If the zone offset reaches a full day or the
            instant falls outside the range datetime can represent
    """
    half_seconds = u64(data, offset)
    units = i16(data, offset + 8)
    try:
        tz = timezone(timedelta(seconds=units * TZ_OFFSET_UNIT))
    except ValueError:
        raise MalformedRecord(f"UTC offset of {units} quarter hours out of range", offset + 8) from None
    try:
        return (EPOCH_2000 + timedelta(seconds=half_seconds // 2)).astimezone(tz)
    except OverflowError:
        raise MalformedRecord(f"Start time of {half_seconds} half-seconds out of range", offset) from None


def parse_duration_min(value: int) -> timedelta:
    return timedelta(minutes=value)


def parse_temperature(value: int) -> float:
    # value is already sign-widened by the i16 accessor
    return value / 10.0


def parse_pressure(value: int) -> float:
    return value / 128.0


def parse_depth(value: int, water_type: WaterType) -> float:
    return 10.0 * value / water_type.density


def water_type_from_settings(settings1: int) -> WaterType:
    if settings1 & SALT_WATER_BIT:
        return WaterType.SALT
    return WaterType.SWEET


def parse_summary(data: bytes) -> SummaryRecord:
    """
    Parse one summary record.

    Args:
        data: Exactly SUMMARY_SIZE bytes

    Returns:
        SummaryRecord including the declared timeseries block length

    Raises:
        SizeMismatch: If data is not SUMMARY_SIZE bytes long
    """
    if len(data) != SUMMARY_SIZE:
        raise SizeMismatch(len(data), SUMMARY_SIZE)

    settings1 = u32(data, 82)
    water_type = water_type_from_settings(settings1)

    return SummaryRecord(
        device_id=u32(data, 8),
        sequence=u16(data, 28),
        time=parse_time(data, 16),
        duration=parse_duration_min(u16(data, 44)),
        surface_interval=parse_duration_min(u16(data, 50)),
        time_limit=parse_duration_min(u16(data, 33)),
        water_type=water_type,
        max_depth=parse_depth(u16(data, 42), water_type),
        average_depth=parse_depth(u16(data, 158), water_type),
        depth_limit=parse_depth(u16(data, 62), water_type),
        air_temperature=parse_temperature(i16(data, 30)),
        deco_temperature=parse_temperature(i16(data, 70)),
        min_temperature=parse_temperature(i16(data, 46)),
        max_temperature=parse_temperature(i16(data, 160)),
        pressure_start=parse_pressure(u16(data, 54)),
        pressure_end=parse_pressure(u16(data, 56)),
        tank_warning=parse_pressure(u16(data, 64)),
        tank_reserve=parse_pressure(u16(data, 66)),
        work_sensitivity=u16(data, 68),
        desat_before=u16(data, 72),
        feature_set=u32(data, 35),
        settings1=settings1,
        settings2=u32(data, 167),
        max_po2=u16(data, 60) / 1000.0,
        timeseries_size=u16(data, 191),
    )
