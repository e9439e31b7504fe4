"""
Older single-shot record layout.

Some files carry a fixed 316-byte record per dive instead of the summary +
declared-length tagged block. The first 195 bytes use the regular summary
field table; the remaining bytes are a single profile run in which only
0xC1 emits a sample (one per byte). There is no trailing footer.
"""

from typing import List, Optional

from .dive import DecodeEvent, DecodeResult
from .exceptions import SizeMismatch
from .profile import ProfileDecoder
from .summary import SUMMARY_SIZE, parse_summary

LEGACY_RECORD_SIZE = 316
LEGACY_SAMPLE = 0xC1


class LegacyProfileDecoder(ProfileDecoder):
    """Profile decoder for the legacy layout's instruction set."""

    def _repeat_count(self, b: int) -> Optional[int]:
        if b == LEGACY_SAMPLE:
            return 1
        return None


def decode_legacy_record(data: bytes) -> DecodeResult:
    """
    Decode a fixed-size legacy record.

    Raises:
        SizeMismatch: If data is not LEGACY_RECORD_SIZE bytes long
    """
    if len(data) != LEGACY_RECORD_SIZE:
        raise SizeMismatch(len(data), LEGACY_RECORD_SIZE)

    events: List[DecodeEvent] = []
    summary = parse_summary(bytes(data[:SUMMARY_SIZE]))

    decoder = LegacyProfileDecoder(summary.time)
    decoder.decode_run(bytes(data[SUMMARY_SIZE:]), SUMMARY_SIZE, events)
    profile = decoder.finish(summary.min_temperature, summary.max_temperature)

    return DecodeResult(dive=summary.to_dive(profile), events=tuple(events))
