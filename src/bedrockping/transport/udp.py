from __future__ import annotations
import io
import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Union

from bedrockping.config.settings import Settings
from bedrockping.errors import QueryTimeout, TransportError
from bedrockping.transport.framing import Response, encode_unconnected_ping, read_unconnected_pong
from bedrockping.transport import msgtypes as mt
from bedrockping.utils.retry import RetryPolicy, with_retries

logger = logging.getLogger(__name__)

# largest possible UDP payload, so a pong is never cut short
_RECV_BUF = 65536

@dataclass(frozen=True)
class UdpEndpoint:
    host: str
    port: int = mt.DEFAULT_PORT

    @classmethod
    def parse(cls, address: str) -> UdpEndpoint:
        """Parse "host", "host:port", "[v6]" or "[v6]:port"; the port defaults to 19132."""
        host, port = address, None
        if address.startswith("["):
            host, sep, rest = address[1:].partition("]")
            if not sep or (rest and not rest.startswith(":")):
                raise ValueError(f"invalid address: {address!r}")
            if rest:
                port = rest[1:]
        elif address.count(":") == 1:
            host, port = address.split(":")
        if not host:
            raise ValueError(f"missing host in address: {address!r}")
        if port is None:
            return cls(host)
        if not port.isdigit() or not (0 < int(port) <= 65535):
            raise ValueError(f"invalid port in address: {address!r}")
        return cls(host, int(port))

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


Address = Union[str, UdpEndpoint]


class _Resender(threading.Thread):
    """Re-sends the same ping every interval until cancelled or the deadline passes."""

    def __init__(self, sock: socket.socket, packet: bytes, interval_s: float, deadline: float):
        super().__init__(name="bedrockping-resend", daemon=True)
        self._sock = sock
        self._packet = packet
        self._interval_s = interval_s
        self._deadline = deadline
        self._cancelled = threading.Event()
        self.error: OSError | None = None
        self.sent = 0

    def run(self) -> None:
        while not self._cancelled.wait(self._interval_s):
            if time.monotonic() >= self._deadline:
                return
            try:
                self._sock.send(self._packet)
            except OSError as e:
                self.error = e
                logger.warning("resending ping failed: %s", e)
                return
            self.sent += 1
            logger.debug("resent ping (#%d)", self.sent)

    def cancel(self) -> None:
        self._cancelled.set()
        self.join()


def _recv_before(sock: socket.socket, deadline: float, endpoint: UdpEndpoint) -> bytes:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise QueryTimeout(f"no reply from {endpoint} before the deadline")
    sock.settimeout(remaining)
    try:
        data = sock.recv(_RECV_BUF)
    except socket.timeout as e:
        raise QueryTimeout(f"no reply from {endpoint} before the deadline") from e
    except OSError as e:
        raise TransportError(f"receive from {endpoint} failed: {e}") from e
    logger.debug("received %d bytes from %s", len(data), endpoint)
    return data


def query(address: Address, timeout_s: float = 5.0, resend_s: float | None = None) -> Response:
    """
    Query a Bedrock/MCPE server with an unconnected ping and return its status.

    One ping is sent right away; when resend_s is set the same ping is sent
    again every resend_s seconds until a reply arrives or timeout_s elapses.
    Exactly one reply datagram is read and decoded. The socket is always
    closed before returning.
    """
    endpoint = address if isinstance(address, UdpEndpoint) else UdpEndpoint.parse(address)
    if timeout_s <= 0:
        raise ValueError("timeout_s must be positive")
    if resend_s is not None and resend_s <= 0:
        raise ValueError("resend_s must be positive")

    deadline = time.monotonic() + timeout_s

    try:
        infos = socket.getaddrinfo(endpoint.host, endpoint.port, type=socket.SOCK_DGRAM)
        family, socktype, proto, _, sockaddr = infos[0]
        sock = socket.socket(family, socktype, proto)
    except OSError as e:
        raise TransportError(f"cannot open socket to {endpoint}: {e}") from e

    packet = encode_unconnected_ping(0)
    try:
        # name resolution counts against the deadline
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise QueryTimeout(f"resolving {endpoint} took longer than {timeout_s}s")
        sock.settimeout(remaining)
        try:
            sock.connect(sockaddr)
            sock.send(packet)
        except OSError as e:
            raise TransportError(f"sending ping to {endpoint} failed: {e}") from e
        logger.debug("sent ping to %s", endpoint)

        resender = None
        if resend_s is not None:
            resender = _Resender(sock, packet, resend_s, deadline)
            resender.start()
        try:
            data = _recv_before(sock, deadline, endpoint)
        finally:
            if resender is not None:
                resender.cancel()
                if resender.error is not None:
                    raise TransportError(f"resending ping to {endpoint} failed: {resender.error}") from resender.error
    finally:
        sock.close()

    return read_unconnected_pong(io.BytesIO(data))


class BedrockClient:
    def __init__(self, endpoint: UdpEndpoint, timeout_s: float = 5.0, resend_s: float | None = None):
        self._endpoint = endpoint
        self._timeout_s = timeout_s
        self._resend_s = resend_s

    @classmethod
    def from_settings(cls, settings: Settings) -> BedrockClient:
        return cls(UdpEndpoint(settings.host, settings.port), settings.timeout_s, settings.resend_s)

    @property
    def endpoint(self) -> UdpEndpoint:
        return self._endpoint

    def request_once(self) -> Response:
        return query(self._endpoint, self._timeout_s, self._resend_s)

    def request(self, *, policy: RetryPolicy | None = None) -> Response:
        if policy is None:
            return self.request_once()
        return with_retries(self.request_once, policy)
