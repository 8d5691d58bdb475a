import os
import socket
import subprocess
import sys
import tempfile
import time
from pathlib import Path

import httpx
import pytest

from bedrockping.transport.udp import UdpEndpoint
from services.bedrock_sim.client import SimApiClient

REPO_ROOT = Path(__file__).resolve().parents[2]

def _free_port(kind: int) -> int:
    with socket.socket(socket.AF_INET, kind) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]

def _wait_for_http_ready(url: str, proc: subprocess.Popen, log_path: Path, timeout_s: float = 15.0) -> None:
    """
    Wait for the simulator to respond at url. If the process exits, surface logs.
    """
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if proc.poll() is not None:
            raise RuntimeError(
                f"Simulator exited early (code={proc.returncode}).\n"
                f"--- simulator output ---\n{log_path.read_text()}"
            )
        try:
            if httpx.get(url, timeout=1.0).status_code == 200:
                return
        except httpx.HTTPError:
            pass
        time.sleep(0.2)

    raise RuntimeError(
        f"Simulator did not become ready at {url} within {timeout_s}s.\n"
        f"--- simulator output ---\n{log_path.read_text()}"
    )

@pytest.fixture(scope="session")
def simulator():
    """
    Starts the bedrock simulator for the session with uvicorn, on free ports
    unless SIM_HTTP_PORT / SIM_UDP_PORT are set. Yields (http_url, udp_endpoint).
    """
    host = "127.0.0.1"
    http_port = int(os.getenv("SIM_HTTP_PORT") or _free_port(socket.SOCK_STREAM))
    udp_port = int(os.getenv("SIM_UDP_PORT") or _free_port(socket.SOCK_DGRAM))

    env = os.environ.copy()
    env["SIM_HTTP_HOST"] = host
    env["SIM_HTTP_PORT"] = str(http_port)
    env["SIM_UDP_HOST"] = host
    env["SIM_UDP_PORT"] = str(udp_port)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(REPO_ROOT / "src"), str(REPO_ROOT), env.get("PYTHONPATH")) if p
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "services.bedrock_sim.app.main:app",
        "--host", host,
        "--port", str(http_port),
        "--log-level", "info",
    ]

    with tempfile.TemporaryDirectory() as tmp:
        log_path = Path(tmp) / "simulator.log"
        with open(log_path, "w") as log:
            p = subprocess.Popen(cmd, cwd=str(REPO_ROOT), env=env, stdout=log, stderr=subprocess.STDOUT)
            try:
                base_url = f"http://{host}:{http_port}"
                _wait_for_http_ready(f"{base_url}/health", p, log_path)
                yield base_url, UdpEndpoint(host, udp_port)
            finally:
                # graceful terminate, then force kill if needed
                p.terminate()
                try:
                    p.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    p.kill()
                    p.wait()

@pytest.fixture
def sim_api(simulator):
    client = SimApiClient(simulator[0])
    try:
        yield client
    finally:
        client.close()

@pytest.fixture
def sim_endpoint(simulator):
    return simulator[1]

@pytest.fixture(autouse=True)
def reset_simulator(sim_api):
    """
    Ensure each test starts from a clean state.
    """
    sim_api.reset()
    yield
