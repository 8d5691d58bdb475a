import socket

import pytest

from bedrockping.config.settings import get_settings


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def blackhole():
    """
    A bound UDP socket that never answers, so queries against it can only
    time out (no ICMP port-unreachable from a closed port).
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    try:
        yield sock.getsockname()
    finally:
        sock.close()
