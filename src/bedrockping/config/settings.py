from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from bedrockping.transport.msgtypes import DEFAULT_PORT


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    timeout_s: float
    resend_s: float | None
    log_level: str


def get_settings() -> Settings:
    """
    Centralized configuration for the client and the command line.
    Values come from environment variables with safe defaults.
    A resend interval of 0 disables resending.
    Malformed values raise ValueError.
    """
    resend_s = float(os.getenv("BEDROCK_RESEND_S", "0.15"))
    log_level = os.getenv("BEDROCK_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"unknown log level: {log_level!r}")
    return Settings(
        host=os.getenv("BEDROCK_HOST", "127.0.0.1"),
        port=int(os.getenv("BEDROCK_PORT", str(DEFAULT_PORT))),
        timeout_s=float(os.getenv("BEDROCK_TIMEOUT_S", "5.0")),
        resend_s=resend_s if resend_s > 0 else None,
        log_level=log_level,
    )
