"""
Decode dives from .asd streams and raw buffers.

Streaming layout:

    [4B magic][16B signature][name][38B][suit type][2B][weather][27B]
    then per dive:
    [195B summary][timeseries block, length from summary][8B footer]

Raw buffers can also be scanned for records by device id, in which case
each record is decoded on its own and records may be decoded in parallel.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Tuple

from .config import DEFAULT_CONFIG, VARIANT_LEGACY, DecoderConfig
from .dive import DecodeEvent, DecodeResult, Dive
from .exceptions import DecodeError, UnexpectedEOF
from .header import Header, read_header
from .legacy import LEGACY_RECORD_SIZE, decode_legacy_record
from .reader import read_exact
from .summary import SUMMARY_SIZE, SummaryRecord, parse_summary
from .timeseries import decode_block

logger = logging.getLogger(__name__)

FOOTER_SIZE = 8
DEVICE_ID_OFFSET = 8


@dataclass(frozen=True)
class Logbook:
    """All dives decoded from one .asd file."""

    header: Header
    results: Tuple[DecodeResult, ...] = ()
    events: Tuple[DecodeEvent, ...] = ()

    @property
    def dives(self) -> List[Dive]:
        return [r.dive for r in self.results]


def _decode_tagged(summary: SummaryRecord, block_data: bytes) -> DecodeResult:
    events: List[DecodeEvent] = []
    block = decode_block(
        block_data,
        summary.time,
        summary.min_temperature,
        summary.max_temperature,
        events,
    )
    dive = summary.to_dive(block.profile, block.percent_o2, block.percent_he)
    return DecodeResult(dive=dive, events=tuple(events))


def _read_first(stream: BinaryIO, length: int) -> Optional[bytes]:
    """Read a record start; None if the stream is already at its end."""
    first = stream.read(1)
    if not first:
        return None
    return first + read_exact(stream, length - 1)


def _read_dive(stream: BinaryIO, config: DecoderConfig, at_boundary: bool) -> Optional[DecodeResult]:
    if config.variant == VARIANT_LEGACY:
        if at_boundary:
            data = _read_first(stream, LEGACY_RECORD_SIZE)
            if data is None:
                return None
        else:
            data = read_exact(stream, LEGACY_RECORD_SIZE)
        return decode_legacy_record(data)

    if at_boundary:
        summary_data = _read_first(stream, SUMMARY_SIZE)
        if summary_data is None:
            return None
    else:
        summary_data = read_exact(stream, SUMMARY_SIZE)

    summary = parse_summary(summary_data)
    block_data = read_exact(stream, summary.timeseries_size)
    result = _decode_tagged(summary, block_data)

    read_exact(stream, FOOTER_SIZE)
    return result


def read_dive(stream: BinaryIO, config: DecoderConfig = DEFAULT_CONFIG) -> DecodeResult:
    """
    Read and decode the next dive record from a stream.

    Args:
        stream: Binary stream positioned at a record boundary
        config: Decoder configuration selecting the record layout

    Returns:
        DecodeResult with the dive and its diagnostic events

    Raises:
        DecodeError: On any short read, size mismatch, malformed block or
            framing error. No partial dive is returned.
    """
    return _read_dive(stream, config, at_boundary=False)


def iter_dives(stream: BinaryIO, config: DecoderConfig = DEFAULT_CONFIG) -> Iterator[DecodeResult]:
    """Yield dives until the stream ends cleanly at a record boundary."""
    while True:
        result = _read_dive(stream, config, at_boundary=True)
        if result is None:
            return
        dive = result.dive
        logger.debug(
            f"Decoded dive #{dive.sequence} at {dive.time.isoformat()}: "
            f"{len(dive.profile)} samples, {len(result.events)} events"
        )
        yield result


def read_logbook(stream: BinaryIO, config: DecoderConfig = DEFAULT_CONFIG) -> Logbook:
    """Read the file header followed by every dive in the stream."""
    events: List[DecodeEvent] = []
    header = read_header(stream, events)
    results = tuple(iter_dives(stream, config))
    logger.info(f"Decoded {len(results)} dives from logbook '{header.name}'")
    return Logbook(header=header, results=results, events=tuple(events))


def load_logbook(filepath: str, config: DecoderConfig = DEFAULT_CONFIG) -> Logbook:
    """Decode an .asd file from disk."""
    with open(filepath, "rb") as f:
        return read_logbook(f, config)


def decode_dive_bytes(data: bytes, config: DecoderConfig = DEFAULT_CONFIG) -> DecodeResult:
    """
    Decode one dive from an in-memory record.

    For the tagged layout, data starts with the summary record; anything
    after the declared timeseries block (footer, padding) is ignored.

    Raises:
        UnexpectedEOF: If data is shorter than the record it declares
    """
    data = bytes(data)
    if config.variant == VARIANT_LEGACY:
        return decode_legacy_record(data[:LEGACY_RECORD_SIZE])

    if len(data) < SUMMARY_SIZE:
        raise UnexpectedEOF(SUMMARY_SIZE, len(data))
    summary = parse_summary(data[:SUMMARY_SIZE])
    size = summary.timeseries_size

    end = SUMMARY_SIZE + size
    if len(data) < end:
        raise UnexpectedEOF(size, len(data) - SUMMARY_SIZE)
    return _decode_tagged(summary, data[SUMMARY_SIZE:end])


def find_records(data: bytes, device_id: int) -> List[int]:
    """
    Locate dive records in a raw buffer.

    Every summary record carries the device id at byte 8, so each
    occurrence of the little-endian id marks a record starting 8 bytes
    earlier.

    Returns:
        Record start offsets in ascending order
    """
    needle = device_id.to_bytes(4, "little")
    offsets = []
    pos = data.find(needle, DEVICE_ID_OFFSET)
    while pos != -1:
        offsets.append(pos - DEVICE_ID_OFFSET)
        pos = data.find(needle, pos + 1)
    return offsets


def split_records(data: bytes, device_id: int) -> List[Tuple[int, bytes]]:
    """Slice a buffer into (offset, record bytes) pairs."""
    offsets = find_records(data, device_id)
    records = []
    for i, start in enumerate(offsets):
        end = offsets[i + 1] if i + 1 < len(offsets) else len(data)
        records.append((start, data[start:end]))
    return records


def decode_records(
    data: bytes,
    device_id: Optional[int] = None,
    config: DecoderConfig = DEFAULT_CONFIG,
) -> List[Tuple[int, DecodeResult]]:
    """
    Decode every record found in a raw buffer.

    Records that fail to decode are logged and skipped. With
    config.workers > 1 the records are decoded by a thread pool; results
    are returned in buffer order either way.

    Args:
        data: Raw file contents
        device_id: Device id to scan for (defaults to config.device_id)
        config: Decoder configuration

    Returns:
        List of (record offset, DecodeResult)
    """
    if device_id is None:
        device_id = config.device_id
    if device_id is None:
        raise ValueError("A device id is required to scan for records")

    records = split_records(bytes(data), device_id)
    results: List[Optional[DecodeResult]] = [None] * len(records)

    def _decode(idx: int) -> None:
        offset, record = records[idx]
        try:
            results[idx] = decode_dive_bytes(record, config)
        except DecodeError as e:
            logger.warning(f"Failed to decode record at {offset:#06x}: {e}")

    if config.workers > 1 and len(records) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = [executor.submit(_decode, i) for i in range(len(records))]
            for future in as_completed(futures):
                future.result()
    else:
        for i in range(len(records)):
            _decode(i)

    decoded = [(records[i][0], r) for i, r in enumerate(results) if r is not None]
    logger.info(f"Decoded {len(decoded)} of {len(records)} records")
    return decoded


def load_records(filepath: str, config: DecoderConfig = DEFAULT_CONFIG) -> List[Tuple[int, DecodeResult]]:
    """Scan an .asd file on disk for records and decode them."""
    return decode_records(Path(filepath).read_bytes(), config=config)
