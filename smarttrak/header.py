"""Parse the file preamble that precedes the dive records."""

from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from .dive import DecodeEvent
from .reader import read_exact, read_framed_string

MAGIC_SIZE = 4
SIGNATURE_SIZE = 16  # "CTravelTrakCEDoc"


@dataclass(frozen=True)
class Header:
    """Logbook-level information read once per file."""

    name: str


def read_header(stream: BinaryIO, events: Optional[List[DecodeEvent]] = None) -> Header:
    """
    Read the .asd preamble and return the logbook header.

    The magic is read but not validated. Suit type and weather strings are
    reported as events only.

    Args:
        stream: Binary stream positioned at the start of the file
        events: Optional list collecting diagnostic events

    Returns:
        Header carrying the logbook name
    """
    read_exact(stream, MAGIC_SIZE)
    read_exact(stream, SIGNATURE_SIZE)

    name = read_framed_string(stream)
    read_exact(stream, 38)

    suit_type = read_framed_string(stream)
    read_exact(stream, 2)

    weather = read_framed_string(stream)
    read_exact(stream, 27)

    if events is not None:
        events.append(DecodeEvent("suit_type", -1, suit_type, f"Suit type: {suit_type}"))
        events.append(DecodeEvent("weather", -1, weather, f"Weather: {weather}"))

    return Header(name=name)
