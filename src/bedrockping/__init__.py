"""Client for the Minecraft Bedrock/MCPE unconnected ping protocol."""
from bedrockping.errors import (
    FrameError,
    InvalidMagicError,
    InvalidNumberError,
    MalformedPayloadError,
    PingError,
    QueryTimeout,
    TransportError,
    TruncatedPacketError,
    UnexpectedPacketIDError,
)
from bedrockping.transport.framing import (
    MAGIC,
    Response,
    read_unconnected_pong,
    read_utf_string,
    write_unconnected_ping,
)
from bedrockping.transport.msgtypes import DEFAULT_PORT
from bedrockping.transport.udp import BedrockClient, UdpEndpoint, query

__all__ = [
    "DEFAULT_PORT",
    "MAGIC",
    "BedrockClient",
    "FrameError",
    "InvalidMagicError",
    "InvalidNumberError",
    "MalformedPayloadError",
    "PingError",
    "QueryTimeout",
    "Response",
    "TransportError",
    "TruncatedPacketError",
    "UdpEndpoint",
    "UnexpectedPacketIDError",
    "query",
    "read_unconnected_pong",
    "read_utf_string",
    "write_unconnected_ping",
]
