"""Exceptions raised while decoding SmartTrak .asd data."""


class DecodeError(Exception):
    """Base exception for all decoding failures."""

    pass


class UnexpectedEOF(DecodeError, EOFError):
    """Raised when the stream ends before a declared field could be read."""

    def __init__(self, wanted: int, got: int):
        self.wanted = wanted
        self.got = got
        super().__init__(f"Unexpected end of data: wanted {wanted} bytes, got {got}")


class SizeMismatch(DecodeError, ValueError):
    """Raised when a fixed-size record does not have the expected length."""

    def __init__(self, got: int, want: int):
        self.got = got
        self.want = want
        super().__init__(f"Unexpected size: got {got}, want {want}")


class MalformedRecord(DecodeError, ValueError):
    """Raised on an unknown block tag or a cursor advance past the block end."""

    def __init__(self, message: str, offset: int):
        self.offset = offset
        super().__init__(f"{message} at offset {offset}")


class FramingError(DecodeError, ValueError):
    """Raised when a framed string does not start with the FF FE FF marker."""

    def __init__(self, marker: bytes):
        self.marker = marker
        super().__init__(f"Unexpected string header: {marker.hex(' ')}")
