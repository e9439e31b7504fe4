"""
Delta-encoded dive profile decoder.

A profile run is a sequence of one-byte instructions that update running
accumulators and emit samples at a fixed interval:

    Byte     Meaning
    ----     -------
    0xB_     Temperature step, low nibble is a signed 4-bit delta
    0xC_     Emit the current state n times (n = low nibble)
    0xE_     Event flags: bit 0 warning, 1 alert, 2 high workload,
             3 bookmark; all zero clears every flag
    0xFB     End of run (not consumed)
    0x8_-0xF_ (other)  Unknown control byte, skipped
    0x00-0x7F  Depth delta: 7-bit signed, 1/50 m; emits one sample
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from .calibration import rescale_temperatures
from .dive import DataPoint, DecodeEvent

SAMPLE_INTERVAL = timedelta(seconds=4)
END_OF_RUN = 0xFB
DEPTH_SCALE = 50.0


def to_int8(value: int) -> int:
    """Reinterpret the low 8 bits of an unsigned value as a signed byte."""
    value &= 0xFF
    if value & 0x80:
        return value - 0x100
    return value


def temperature_step(b: int) -> int:
    """Sign-extend the 4-bit temperature delta in the low nibble."""
    raw = b & 0x0F
    if raw & 0x08:
        raw |= 0xF0
    return to_int8(raw)


def depth_delta(b: int) -> float:
    """Sign-extend a 7-bit depth delta (bit 6 copied to bit 7) in meters."""
    raw = (b | ((b & 0x40) << 1)) & 0xFF
    return to_int8(raw) / DEPTH_SCALE


@dataclass
class _Flags:
    alert: bool = False
    warning: bool = False
    high_workload: bool = False
    bookmark: bool = False

    def apply(self, b: int) -> None:
        if b & 0x0F == 0:
            self.alert = self.warning = self.high_workload = self.bookmark = False
            return
        if b & 0x01:
            self.warning = True
        if b & 0x02:
            self.alert = True
        if b & 0x04:
            self.high_workload = True
        if b & 0x08:
            self.bookmark = True


class ProfileDecoder:
    """
    Running state for the profile runs of one dive.

    A timeseries block may contain several runs. State carries over between
    them so the sample clock keeps advancing and no timestamp repeats.
    """

    def __init__(self, start_time: datetime, interval: timedelta = SAMPLE_INTERVAL):
        self.interval = interval
        self.time = start_time
        self.depth = 0.0
        # Temperature is recorded as steps; the absolute value is recovered
        # by rescaling against the summary min/max once decoding is done.
        self.temperature = 0
        self.acc_min = 0
        self.acc_max = 0
        self.flags = _Flags()
        self.points: List[DataPoint] = []

    def _emit(self) -> None:
        self.points.append(DataPoint(
            time=self.time,
            depth=self.depth,
            temperature=float(self.temperature),
            alert=self.flags.alert,
            warning=self.flags.warning,
            high_workload=self.flags.high_workload,
            bookmark=self.flags.bookmark,
        ))
        self.time += self.interval

    def _repeat_count(self, b: int) -> Optional[int]:
        """Number of samples a 0xC_ byte emits, or None if unsupported."""
        return b & 0x0F

    def decode_run(
        self,
        data: bytes,
        base_offset: int = 0,
        events: Optional[List[DecodeEvent]] = None,
    ) -> int:
        """
        Decode one profile run.

        Args:
            data: Bytes following a 0xFA tag, up to the end of the block
            base_offset: Position of data[0] in the enclosing block, for events
            events: Optional list collecting diagnostic events

        Returns:
            Number of bytes consumed. A terminating 0xFB is not consumed.
        """
        for i, b in enumerate(data):
            high = b & 0xF0

            if high == 0xB0:
                self.temperature += temperature_step(b)
                self.acc_min = min(self.acc_min, self.temperature)
                self.acc_max = max(self.acc_max, self.temperature)
            elif high == 0xC0 and (count := self._repeat_count(b)) is not None:
                for _ in range(count):
                    self._emit()
            elif high == 0xE0:
                self.flags.apply(b)
            elif b == END_OF_RUN:
                return i
            elif b & 0x80:
                if events is not None:
                    events.append(DecodeEvent(
                        "unknown_control_byte", base_offset + i, b,
                        f"Unknown control byte: {b:#04x}",
                    ))
            else:
                self.depth += depth_delta(b)
                self._emit()

        return len(data)

    def finish(self, min_temperature: float, max_temperature: float) -> List[DataPoint]:
        """Return the decoded samples with calibrated temperatures."""
        return rescale_temperatures(
            self.points, self.acc_min, self.acc_max, min_temperature, max_temperature
        )
