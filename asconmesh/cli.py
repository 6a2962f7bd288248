"""Command line interface: one-shot encrypt/decrypt and the demo mesh nodes."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from . import aead
from .config import LOG_LEVELS, ConfigError, NodeConfig, load_config
from .errors import AsconError, AuthenticationFailure, InvalidMessageLength
from .mesh import SensorNode, start_sink
from .params import for_key_length
from .permutation import MAX_ROUNDS, STATE_BYTES, permute

logger = logging.getLogger(__name__)


def _hex_arg(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asconmesh",
        description="Ascon authenticated encryption for mesh telemetry",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="logging level (default: from config, INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_cipher_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--key", type=_hex_arg, required=True, help="key (hex)")
        p.add_argument("--nonce", type=_hex_arg, required=True, help="nonce (hex)")
        p.add_argument("--ad", default="", help="associated data (text)")

    p = sub.add_parser("encrypt", help="encrypt text, print ciphertext||tag as hex")
    add_cipher_args(p)
    p.add_argument("plaintext")

    p = sub.add_parser("decrypt", help="verify and decrypt hex ciphertext||tag")
    add_cipher_args(p)
    p.add_argument("ciphertext", type=_hex_arg)

    p = sub.add_parser("permute", help="apply the permutation to a 40-byte state")
    p.add_argument("--rounds", type=int, default=MAX_ROUNDS)
    p.add_argument("state", nargs="?", type=_hex_arg, default=bytes(STATE_BYTES))

    p = sub.add_parser("sink", help="run the receiving node")
    p.add_argument("--config", help="TOML configuration file")

    p = sub.add_parser("sensor", help="run the sending node")
    p.add_argument("--config", help="TOML configuration file")
    p.add_argument("--count", type=int, default=None, help="stop after N sends")
    return parser


def _cmd_encrypt(args) -> int:
    params = for_key_length(len(args.key))
    ct = aead.encrypt(
        params, args.key, args.nonce, args.plaintext.encode(), args.ad.encode()
    )
    print(ct.hex())
    return 0


def _cmd_decrypt(args) -> int:
    params = for_key_length(len(args.key))
    try:
        pt = aead.decrypt(
            params, args.key, args.nonce, args.ciphertext, args.ad.encode()
        )
    except (AuthenticationFailure, InvalidMessageLength) as e:
        logger.error("%s: %s", e.kind.value, e)
        return 1
    sys.stdout.write(bytes(pt).decode("utf-8", errors="replace") + "\n")
    return 0


def _cmd_permute(args) -> int:
    if len(args.state) != STATE_BYTES:
        logger.error("state must be %d bytes", STATE_BYTES)
        return 2
    state = bytearray(args.state)
    permute(state, args.rounds)
    print(state.hex())
    return 0


async def _run_sink(config: NodeConfig) -> None:
    transport, _ = await start_sink(config)
    try:
        await asyncio.Event().wait()
    finally:
        transport.close()


async def _run_sensor(config: NodeConfig, count: int | None) -> None:
    node = SensorNode(config)
    await node.start()
    try:
        await node.run(count)
    finally:
        node.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = None
    if args.command in ("sink", "sensor"):
        try:
            config = load_config(args.config)
            if args.log_level:
                config = replace(config, log_level=args.log_level)
        except ConfigError as e:
            parser.error(str(e))
    level = config.log_level if config else args.log_level or "INFO"
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.command == "encrypt":
            return _cmd_encrypt(args)
        if args.command == "decrypt":
            return _cmd_decrypt(args)
        if args.command == "permute":
            return _cmd_permute(args)
        if args.command == "sink":
            asyncio.run(_run_sink(config))
        else:
            asyncio.run(_run_sensor(config, args.count))
    except AsconError as e:
        logger.error("%s: %s", e.kind.value, e)
        return 2
    except ValueError as e:
        logger.error("%s", e)
        return 2
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
