from __future__ import annotations


class PingError(Exception):
    """Base class for every failure raised while querying a server."""


class TransportError(PingError, OSError):
    """Socket level failure: resolve, open, send or receive."""


class QueryTimeout(TransportError, TimeoutError):
    pass


class TruncatedPacketError(TransportError, EOFError):
    """The packet ended before a field was complete."""


class FrameError(PingError, ValueError):
    """The reply is structurally invalid."""


class UnexpectedPacketIDError(FrameError):
    def __init__(self, packet_id: int, expected: int):
        super().__init__(f"unexpected packet id: 0x{packet_id:02x} (expected 0x{expected:02x})")
        self.packet_id = packet_id
        self.expected = expected


class InvalidMagicError(FrameError):
    def __init__(self, magic: bytes):
        super().__init__(f"invalid offline message data id: {magic.hex()}")
        self.magic = magic


class MalformedPayloadError(FrameError):
    def __init__(self, payload: str):
        super().__init__(f"invalid payload: {payload!r}")
        self.payload = payload


class InvalidNumberError(FrameError):
    def __init__(self, field: str, token: str):
        super().__init__(f"{field} is not a decimal number: {token!r}")
        self.field = field
        self.token = token
