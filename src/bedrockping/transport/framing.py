from __future__ import annotations

import io
import logging
import re
import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterable

from bedrockping.errors import (
    InvalidMagicError,
    InvalidNumberError,
    MalformedPayloadError,
    TruncatedPacketError,
    UnexpectedPacketIDError,
)
from bedrockping.transport import msgtypes as mt

logger = logging.getLogger(__name__)

# offline message data id shared by every unconnected packet
MAGIC = bytes([
    0x00, 0xFF, 0xFF, 0x00, 0xFE, 0xFE, 0xFE, 0xFE,
    0xFD, 0xFD, 0xFD, 0xFD, 0x12, 0x34, 0x56, 0x78,
])

# ping: ID(1), TIMESTAMP(8), MAGIC(16) => total 25 bytes
_ID_FMT = "!B"
_U64_FMT = "!Q"
_STRLEN_FMT = "!H"
PING_SIZE = struct.calcsize(_ID_FMT) + struct.calcsize(_U64_FMT) + len(MAGIC)

_U64_MAX = 0xFFFFFFFFFFFFFFFF
_STR_MAX = 0xFFFF
_PAYLOAD_FIELDS = 6
_DECIMAL = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Response:
    timestamp: int
    server_id: int
    game_id: str
    server_name: str
    protocol_version: int
    mcpe_version: str
    player_count: int
    max_players: int
    extra: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "serverId": self.server_id,
            "gameId": self.game_id,
            "serverName": self.server_name,
            "protocolVersion": self.protocol_version,
            "mcpeVersion": self.mcpe_version,
            "playerCount": self.player_count,
            "maxPlayers": self.max_players,
            "extra": list(self.extra),
        }


def _check_u64(name: str, value: int) -> None:
    if not (0 <= value <= _U64_MAX):
        raise ValueError(f"{name} must fit in an unsigned 64-bit integer")


def _read_exact(source: BinaryIO, n: int, what: str) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = source.read(n - len(buf))
        if not chunk:
            raise TruncatedPacketError(f"packet ended while reading {what} ({len(buf)} of {n} bytes)")
        buf.extend(chunk)
    return bytes(buf)


def _read_packet_id(source: BinaryIO, expected: int) -> None:
    (packet_id,) = struct.unpack(_ID_FMT, _read_exact(source, 1, "packet id"))
    if packet_id != expected:
        raise UnexpectedPacketIDError(packet_id, expected)


def _read_u64(source: BinaryIO, what: str) -> int:
    return struct.unpack(_U64_FMT, _read_exact(source, 8, what))[0]


def _read_magic(source: BinaryIO) -> None:
    magic = _read_exact(source, len(MAGIC), "magic")
    if magic != MAGIC:
        raise InvalidMagicError(magic)


def _parse_int(field: str, token: str) -> int:
    if not _DECIMAL.fullmatch(token):
        raise InvalidNumberError(field, token)
    value = int(token)
    if not (_INT64_MIN <= value <= _INT64_MAX):
        raise InvalidNumberError(field, token)
    return value


def write_unconnected_ping(sink: BinaryIO, timestamp: int = 0) -> None:
    """Write the 'Unconnected Ping (0x01)' packet to a binary sink."""
    _check_u64("timestamp", timestamp)
    sink.write(struct.pack(_ID_FMT, mt.ID_UNCONNECTED_PING))
    sink.write(struct.pack(_U64_FMT, timestamp))
    sink.write(MAGIC)


def encode_unconnected_ping(timestamp: int = 0) -> bytes:
    """Build the ping as a single datagram."""
    buf = io.BytesIO()
    write_unconnected_ping(buf, timestamp)
    return buf.getvalue()


def read_unconnected_ping(source: BinaryIO) -> int:
    """Validate an 'Unconnected Ping (0x01)' packet and return its timestamp."""
    _read_packet_id(source, mt.ID_UNCONNECTED_PING)
    timestamp = _read_u64(source, "timestamp")
    _read_magic(source)
    return timestamp


def write_utf_string(sink: BinaryIO, text: str) -> None:
    data = text.encode("utf-8")
    if len(data) > _STR_MAX:
        raise ValueError("string too large")
    sink.write(struct.pack(_STRLEN_FMT, len(data)))
    sink.write(data)


def read_utf_string(source: BinaryIO) -> str:
    """
    Read a UTF-8 string with a uint16 length header.

    Keeps reading until the full length is collected, so short reads from
    stream transports are handled; a source that ends early raises
    TruncatedPacketError.
    """
    (length,) = struct.unpack(_STRLEN_FMT, _read_exact(source, 2, "string length"))
    return _read_exact(source, length, "string body").decode("utf-8", errors="replace")


def format_payload(
    game_id: str,
    server_name: str,
    protocol_version: int,
    mcpe_version: str,
    player_count: int,
    max_players: int,
    extra: Iterable[str] = (),
) -> str:
    fields = [game_id, server_name, str(protocol_version), mcpe_version, str(player_count), str(max_players)]
    fields.extend(extra)
    return ";".join(fields)


def write_unconnected_pong(sink: BinaryIO, timestamp: int, server_id: int, payload: str) -> None:
    _check_u64("timestamp", timestamp)
    _check_u64("server_id", server_id)
    sink.write(struct.pack(_ID_FMT, mt.ID_UNCONNECTED_PONG))
    sink.write(struct.pack(_U64_FMT, timestamp))
    sink.write(struct.pack(_U64_FMT, server_id))
    sink.write(MAGIC)
    write_utf_string(sink, payload)


def encode_unconnected_pong(timestamp: int, server_id: int, payload: str) -> bytes:
    buf = io.BytesIO()
    write_unconnected_pong(buf, timestamp, server_id, payload)
    return buf.getvalue()


def read_unconnected_pong(source: BinaryIO) -> Response:
    """
    Read the 'Unconnected Pong (0x1C)' packet into a Response.

    The payload is split on ';' and assigned positionally:
    game id, server name, protocol version, MCPE version, player count,
    max players, then any trailing tokens as extra.
    """
    _read_packet_id(source, mt.ID_UNCONNECTED_PONG)
    timestamp = _read_u64(source, "timestamp")
    server_id = _read_u64(source, "server id")
    _read_magic(source)

    payload = read_utf_string(source)
    split = payload.split(";")
    if len(split) < _PAYLOAD_FIELDS:
        raise MalformedPayloadError(payload)

    resp = Response(
        timestamp=timestamp,
        server_id=server_id,
        game_id=split[0],
        server_name=split[1],
        protocol_version=_parse_int("protocol_version", split[2]),
        mcpe_version=split[3],
        player_count=_parse_int("player_count", split[4]),
        max_players=_parse_int("max_players", split[5]),
        extra=tuple(split[_PAYLOAD_FIELDS:]),
    )
    logger.debug("decoded pong from server %d: %r", server_id, payload)
    return resp
