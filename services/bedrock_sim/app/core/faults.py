from __future__ import annotations
from dataclasses import dataclass
import random
from typing import Literal

CorruptMode = Literal["none", "packet_id", "magic", "payload", "number"]

@dataclass
class FaultConfig:
    delay_ms: int = 0           # add delay before responding
    drop_rate: float = 0.0      # 0.0..1.0
    drop_first: int = 0         # drop this many pings before answering any
    corrupt: CorruptMode = "none"

    @property
    def delay_s(self) -> float:
        return self.delay_ms / 1000.0

    def should_drop(self, seen: int) -> bool:
        """seen is the 1-based count of valid pings received so far."""
        if seen <= self.drop_first:
            return True
        return self.drop_rate > 0 and random.random() < self.drop_rate
