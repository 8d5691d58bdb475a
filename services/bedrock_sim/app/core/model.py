from __future__ import annotations
from dataclasses import dataclass, field

from bedrockping.transport.framing import encode_unconnected_pong, format_payload
from .faults import FaultConfig

# offset of the magic block inside a pong: ID(1) + TIMESTAMP(8) + SERVER_ID(8)
_PONG_MAGIC_OFFSET = 17

@dataclass
class ServerStatus:
    server_id: int = 0x1234_5678_9ABC_DEF0
    game_id: str = "MCPE"
    server_name: str = "Bedrock Simulator"
    protocol_version: int = 729
    mcpe_version: str = "1.21.80"
    player_count: int = 0
    max_players: int = 20
    extra: list[str] = field(default_factory=lambda: ["Simulator", "Survival", "1"])

    def payload(self) -> str:
        return format_payload(
            self.game_id,
            self.server_name,
            self.protocol_version,
            self.mcpe_version,
            self.player_count,
            self.max_players,
            self.extra,
        )

@dataclass
class SimModel:
    status: ServerStatus = field(default_factory=ServerStatus)
    faults: FaultConfig = field(default_factory=FaultConfig)
    pings_received: int = 0
    pings_dropped: int = 0
    pongs_sent: int = 0
    invalid_received: int = 0
    reset_count: int = 0

    def reset(self) -> None:
        self.status = ServerStatus()
        self.faults = FaultConfig()
        self.pings_received = 0
        self.pings_dropped = 0
        self.pongs_sent = 0
        self.invalid_received = 0
        self.reset_count += 1

    def build_pong(self, timestamp: int) -> bytes:
        """Encode the pong for the current status, applying the corruption fault if any."""
        mode = self.faults.corrupt
        payload = self.status.payload()
        if mode == "payload":
            payload = ";".join(payload.split(";")[:3])
        elif mode == "number":
            fields = payload.split(";")
            fields[4] = "many"
            payload = ";".join(fields)

        pkt = bytearray(encode_unconnected_pong(timestamp, self.status.server_id, payload))
        if mode == "packet_id":
            pkt[0] = 0x1D
        elif mode == "magic":
            pkt[_PONG_MAGIC_OFFSET] ^= 0xFF
        return bytes(pkt)
