import asyncio
import io
import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI
from pydantic import BaseModel, Field

from services.bedrock_sim.app.core.faults import CorruptMode, FaultConfig
from services.bedrock_sim.app.core.model import SimModel
from bedrockping.errors import PingError
from bedrockping.transport.framing import read_unconnected_ping

HTTP_HOST = os.getenv("SIM_HTTP_HOST", "127.0.0.1")
HTTP_PORT = int(os.getenv("SIM_HTTP_PORT", "8000"))

UDP_HOST = os.getenv("SIM_UDP_HOST", "127.0.0.1")
UDP_PORT = int(os.getenv("SIM_UDP_PORT", "19132"))

logger = logging.getLogger("bedrock_sim")

MODEL = SimModel()

class UdpProto(asyncio.DatagramProtocol):
    def connection_made(self, transport):
        # stored for later sendto()
        self.transport = transport

    def datagram_received(self, data: bytes, addr):
        try:
            timestamp = read_unconnected_ping(io.BytesIO(data))
        except PingError as e:
            # real servers ignore anything that is not an unconnected ping
            MODEL.invalid_received += 1
            logger.info("ignoring datagram from %s: %s", addr, e)
            return

        MODEL.pings_received += 1
        if MODEL.faults.should_drop(MODEL.pings_received):
            MODEL.pings_dropped += 1
            logger.info("dropped ping #%d from %s", MODEL.pings_received, addr)
            return

        resp_pkt = MODEL.build_pong(timestamp)
        MODEL.pongs_sent += 1

        delay = MODEL.faults.delay_s
        if delay > 0:
            asyncio.get_running_loop().call_later(delay, self.transport.sendto, resp_pkt, addr)
        else:
            self.transport.sendto(resp_pkt, addr)

@asynccontextmanager
async def lifespan(app: FastAPI):
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        UdpProto,
        local_addr=(UDP_HOST, UDP_PORT),
    )
    app.state.udp_transport = transport
    logger.info("answering unconnected pings on %s:%d", UDP_HOST, UDP_PORT)
    try:
        yield
    finally:
        transport.close()

app = FastAPI(title="Bedrock Server Simulator", version="0.1.0", lifespan=lifespan)

class StatusIn(BaseModel):
    server_id: int = Field(0x1234_5678_9ABC_DEF0, ge=0, le=0xFFFF_FFFF_FFFF_FFFF)
    game_id: str = "MCPE"
    server_name: str = "Bedrock Simulator"
    protocol_version: int = 729
    mcpe_version: str = "1.21.80"
    player_count: int = Field(0, ge=0)
    max_players: int = Field(20, ge=0)
    extra: List[str] = Field(default_factory=list)

class FaultsIn(BaseModel):
    delay_ms: int = Field(0, ge=0, le=5000)
    drop_rate: float = Field(0.0, ge=0.0, le=1.0)
    drop_first: int = Field(0, ge=0)
    corrupt: CorruptMode = "none"

def _faults_dict(f: FaultConfig) -> dict:
    return {
        "delay_ms": f.delay_ms,
        "drop_rate": f.drop_rate,
        "drop_first": f.drop_first,
        "corrupt": f.corrupt,
    }

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/status")
def status():
    return {
        "server_name": MODEL.status.server_name,
        "payload": MODEL.status.payload(),
        "reset_count": MODEL.reset_count,
        "pings_received": MODEL.pings_received,
        "pings_dropped": MODEL.pings_dropped,
        "pongs_sent": MODEL.pongs_sent,
        "invalid_received": MODEL.invalid_received,
        "faults": _faults_dict(MODEL.faults),
    }

@app.post("/control/reset")
def reset():
    MODEL.reset()
    return {"status": "reset", "reset_count": MODEL.reset_count}

@app.post("/control/status")
def set_status(s: StatusIn):
    for name, value in s.model_dump().items():
        setattr(MODEL.status, name, value)
    return {"status": "status_updated", "payload": MODEL.status.payload()}

@app.get("/control/faults")
def get_faults():
    return _faults_dict(MODEL.faults)

@app.post("/control/faults")
def set_faults(f: FaultsIn):
    MODEL.faults = FaultConfig(**f.model_dump())
    return {"status": "faults_updated", "faults": f.model_dump()}

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=HTTP_HOST, port=HTTP_PORT, reload=False)
