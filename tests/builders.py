"""Helpers that assemble .asd byte fixtures for the tests."""

import struct
from datetime import datetime, timezone

EPOCH_2000 = datetime(2000, 1, 1, tzinfo=timezone.utc)
START = datetime(2021, 10, 17, 9, 15, 14, tzinfo=timezone.utc)
DEVICE_ID = 0x04692C61

SUMMARY_LAYOUT = {
    "device_id": (8, "<I"),
    "half_seconds": (16, "<Q"),
    "tz_units": (24, "<h"),
    "sequence": (28, "<H"),
    "air_temperature": (30, "<h"),
    "time_limit": (33, "<H"),
    "feature_set": (35, "<I"),
    "max_depth": (42, "<H"),
    "duration": (44, "<H"),
    "min_temperature": (46, "<h"),
    "surface_interval": (50, "<H"),
    "pressure_start": (54, "<H"),
    "pressure_end": (56, "<H"),
    "max_po2": (60, "<H"),
    "depth_limit": (62, "<H"),
    "tank_warning": (64, "<H"),
    "tank_reserve": (66, "<H"),
    "work_sensitivity": (68, "<H"),
    "deco_temperature": (70, "<h"),
    "desat_before": (72, "<H"),
    "settings1": (82, "<I"),
    "average_depth": (158, "<H"),
    "max_temperature": (160, "<h"),
    "settings2": (167, "<I"),
    "timeseries_size": (191, "<H"),
}


def half_seconds(dt: datetime) -> int:
    return int((dt - EPOCH_2000).total_seconds()) * 2


def make_summary(**overrides) -> bytes:
    """Create a 195-byte summary record with raw field values."""
    fields = dict(
        device_id=DEVICE_ID,
        half_seconds=half_seconds(START) + 1,
        tz_units=8,  # +02:00
        sequence=12,
        air_temperature=114,
        time_limit=45,
        feature_set=0xDEADBEEF,
        max_depth=2090,
        duration=30,
        min_temperature=88,
        surface_interval=90,
        pressure_start=200 * 128,
        pressure_end=50 * 128,
        max_po2=1400,
        depth_limit=400,
        tank_warning=100 * 128,
        tank_reserve=40 * 128,
        work_sensitivity=3,
        deco_temperature=100,
        desat_before=120,
        settings1=0,
        average_depth=750,
        max_temperature=140,
        settings2=0x12345678,
        timeseries_size=0,
    )
    fields.update(overrides)

    buf = bytearray(195)
    for name, value in fields.items():
        offset, fmt = SUMMARY_LAYOUT[name]
        struct.pack_into(fmt, buf, offset, value)
    return bytes(buf)


def make_record(block: bytes = b"", footer: bytes = b"\x00" * 8, **overrides) -> bytes:
    """Summary + timeseries block + footer, with the block length declared."""
    return make_summary(timeseries_size=len(block), **overrides) + block + footer


def framed(text: str) -> bytes:
    return b"\xff\xfe\xff" + bytes([len(text)]) + text.encode("utf-16-le")


def make_header(name: str = "Logbook", suit: str = "Dry suit", weather: str = "Sunny") -> bytes:
    return (
        b"\x02\x00\x00\x00"
        + b"CTravelTrakCEDoc"
        + framed(name)
        + b"\x00" * 38
        + framed(suit)
        + b"\x00" * 2
        + framed(weather)
        + b"\x00" * 27
    )


class TrickleStream:
    """Binary stream that returns at most one byte per read call."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def read(self, n: int = -1) -> bytes:
        if n == 0 or self.pos >= len(self.data):
            return b""
        chunk = self.data[self.pos:self.pos + 1]
        self.pos += 1
        return chunk
