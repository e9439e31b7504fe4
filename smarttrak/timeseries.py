"""
Tagged timeseries block that follows each summary record.

The block is a flat sequence of tagged entries:

    Tag    Size after tag   Meaning
    ---    --------------   -------
    0xF0   1                Diagnostic A
    0xF2   1                Diagnostic B
    0xF3   2                Diagnostic C (u16)
    0xF4   2                Diagnostic D (u16)
    0xF8   4                Diagnostic E (u32)
    0xF9   1                Diagnostic F
    0xFA   variable         Profile run, ends before the next 0xFB
    0xFB   L                Sub-block: L, type, L-2 payload bytes
                              type 32: gas mixture (O2 @+3, He @+5)
                              type 26: no-stop limits

The cursor is checked against the block length before every read.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from .dive import DataPoint, DecodeEvent
from .exceptions import MalformedRecord
from .profile import ProfileDecoder
from .reader import u8, u16, u32

TAG_PROFILE = 0xFA
TAG_BLOCK = 0xFB

BLOCK_GAS_MIXTURE = 32
BLOCK_NO_STOP = 26

DIAGNOSTIC_TAGS = {
    0xF0: 1,
    0xF2: 1,
    0xF3: 2,
    0xF4: 2,
    0xF8: 4,
    0xF9: 1,
}

_READERS = {1: u8, 2: u16, 4: u32}


@dataclass(frozen=True)
class BlockResult:
    """Everything a timeseries block contributes to a Dive."""

    profile: Tuple[DataPoint, ...]
    percent_o2: int = 0
    percent_he: int = 0


def _require(pos: int, length: int, size: int) -> None:
    if pos + length > size:
        raise MalformedRecord(f"Reading {length} bytes overruns block of {size} bytes", pos)


class TimeseriesDecoder:
    """Decode one timeseries block."""

    def __init__(
        self,
        start_time: datetime,
        events: Optional[List[DecodeEvent]] = None,
    ):
        self.profile = ProfileDecoder(start_time)
        self.events = events if events is not None else []
        self.percent_o2 = 0
        self.percent_he = 0

    def decode(self, data: bytes, min_temperature: float, max_temperature: float) -> BlockResult:
        """
        Scan the block and decode every tagged entry.

        Raises:
            MalformedRecord: On an unknown tag or when an entry runs past
                the end of the block
        """
        size = len(data)
        pos = 0
        while pos < size:
            tag = data[pos]

            if tag in DIAGNOSTIC_TAGS:
                width = DIAGNOSTIC_TAGS[tag]
                _require(pos + 1, width, size)
                value = _READERS[width](data, pos + 1)
                self.events.append(DecodeEvent("diagnostic", pos, (tag, value), f"{tag:#04X} => {value}"))
                pos += 1 + width
            elif tag == TAG_PROFILE:
                consumed = self.profile.decode_run(data[pos + 1:], pos + 1, self.events)
                pos += 1 + consumed
            elif tag == TAG_BLOCK:
                pos += 1 + self._decode_sub_block(data, pos)
            else:
                raise MalformedRecord(f"Unexpected byte {tag:#x}", pos)

        profile = self.profile.finish(min_temperature, max_temperature)
        return BlockResult(
            profile=tuple(profile),
            percent_o2=self.percent_o2,
            percent_he=self.percent_he,
        )

    def _decode_sub_block(self, data: bytes, pos: int) -> int:
        """Decode the 0xFB sub-block at pos; returns bytes used after the tag."""
        size = len(data)
        _require(pos + 1, 2, size)
        length = data[pos + 1]
        typ = data[pos + 2]
        if length < 2:
            raise MalformedRecord(f"Sub-block length {length} shorter than its header", pos)
        _require(pos + 1, length, size)

        if typ == BLOCK_GAS_MIXTURE:
            if length < 6:
                raise MalformedRecord(f"Gas mixture sub-block too short ({length} bytes)", pos)
            self.percent_o2 = u16(data, pos + 3)
            self.percent_he = u16(data, pos + 5)
            self.events.append(DecodeEvent(
                "gas_mixture", pos, (self.percent_o2, self.percent_he),
                f"Mixture: {self.percent_o2}% O2, {self.percent_he}% He",
            ))
            if length >= 12:
                po2 = u16(data, pos + 11)
                self.events.append(DecodeEvent("max_po2_estimate", pos, po2, f"Maybe max pO2: {po2}"))
        elif typ == BLOCK_NO_STOP:
            if length < 4:
                raise MalformedRecord(f"No-stop sub-block too short ({length} bytes)", pos)
            limits = (data[pos + 3], data[pos + 4])
            self.events.append(DecodeEvent(
                "no_stop_limit", pos, limits,
                f"NOSTOPMIN: {limits[0]}, NOSTOPMBMIN: {limits[1]}",
            ))
        else:
            self.events.append(DecodeEvent(
                "unknown_block", pos, typ,
                f"Unknown block: type {typ}, payload {length - 2} bytes",
            ))

        return length


def decode_block(
    data: bytes,
    start_time: datetime,
    min_temperature: float,
    max_temperature: float,
    events: Optional[List[DecodeEvent]] = None,
) -> BlockResult:
    """Decode a timeseries block of exactly the declared length."""
    decoder = TimeseriesDecoder(start_time, events)
    return decoder.decode(bytes(data), min_temperature, max_temperature)
