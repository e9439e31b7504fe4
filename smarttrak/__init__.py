"""
Decoder for SmartTrak .asd dive computer logs.

Modules:
    - reader: exact-length stream reads and little-endian field access
    - header: file preamble (logbook name)
    - summary: fixed 195-byte per-dive summary record
    - timeseries: tagged timeseries block
    - profile: delta-encoded profile runs
    - calibration: temperature rescaling
    - legacy: older fixed 316-byte record layout
    - decoder: stream, logbook and record-scan entry points
    - config: decoder configuration from config.yaml
"""

from .dive import DataPoint, DecodeEvent, DecodeResult, Dive, WaterType
from .exceptions import DecodeError, FramingError, MalformedRecord, SizeMismatch, UnexpectedEOF
from .header import Header, read_header
from .summary import SummaryRecord, parse_summary
from .timeseries import decode_block
from .profile import ProfileDecoder, SAMPLE_INTERVAL
from .calibration import rescale_temperatures
from .config import DecoderConfig, load_effective_config
from .decoder import (
    Logbook,
    read_dive,
    iter_dives,
    read_logbook,
    load_logbook,
    decode_dive_bytes,
    find_records,
    decode_records,
    load_records,
)

__all__ = [
    "DataPoint",
    "DecodeEvent",
    "DecodeResult",
    "Dive",
    "WaterType",
    "DecodeError",
    "FramingError",
    "MalformedRecord",
    "SizeMismatch",
    "UnexpectedEOF",
    "Header",
    "read_header",
    "SummaryRecord",
    "parse_summary",
    "decode_block",
    "ProfileDecoder",
    "SAMPLE_INTERVAL",
    "rescale_temperatures",
    "DecoderConfig",
    "load_effective_config",
    "Logbook",
    "read_dive",
    "iter_dives",
    "read_logbook",
    "load_logbook",
    "decode_dive_bytes",
    "find_records",
    "decode_records",
    "load_records",
]
