"""
Command line probe for Bedrock/MCPE servers.

Prints a single-line summary (or the JSON record with --json) and exits 0 on
success. Exit codes: 3 timeout, 2 invalid reply, 1 any other failure.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from bedrockping.config.settings import Settings, get_settings
from bedrockping.errors import FrameError, QueryTimeout, TransportError
from bedrockping.transport.framing import Response
from bedrockping.transport.udp import BedrockClient, UdpEndpoint
from bedrockping.utils.retry import RetryPolicy

logger = logging.getLogger("bedrockping")


def _summary(endpoint: UdpEndpoint, resp: Response) -> str:
    return (
        f"{endpoint} {resp.game_id} {resp.mcpe_version} (protocol {resp.protocol_version}) "
        f"{resp.player_count}/{resp.max_players} players - {resp.server_name}"
    )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bedrock-ping", description="Query a Minecraft Bedrock/MCPE server.")
    parser.add_argument(
        "address",
        nargs="?",
        default=f"{settings.host}:{settings.port}",
        help="Target host[:port] (default: %(default)s)",
    )
    parser.add_argument("--timeout", type=float, default=settings.timeout_s, help="Overall timeout in seconds")
    parser.add_argument(
        "--resend",
        type=float,
        default=settings.resend_s or 0.0,
        help="Resend the ping every N seconds while waiting, 0 to send once",
    )
    parser.add_argument("--attempts", type=int, default=1, help="Whole queries to try on transport errors")
    parser.add_argument("--json", action="store_true", help="Print the status record as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        settings = get_settings()
    except ValueError as exc:
        print(f"ERROR: invalid BEDROCK_* configuration: {exc}", file=sys.stderr)
        return 1

    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        endpoint = UdpEndpoint.parse(args.address)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    client = BedrockClient(endpoint, timeout_s=args.timeout, resend_s=args.resend if args.resend > 0 else None)
    policy = RetryPolicy(attempts=args.attempts) if args.attempts > 1 else None
    try:
        resp = client.request(policy=policy)
    except QueryTimeout as exc:
        print(f"TIMEOUT: {exc}", file=sys.stderr)
        return 3
    except FrameError as exc:
        print(f"INVALID: {exc}", file=sys.stderr)
        return 2
    except TransportError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    logger.debug("query to %s succeeded", endpoint)
    if args.json:
        print(json.dumps(resp.to_dict()))
    else:
        print(_summary(endpoint, resp))
    return 0


if __name__ == "__main__":
    sys.exit(main())
