"""Sensor and sink nodes exchanging encrypted telemetry over UDP.

The nodes run on an asyncio event loop and call the cipher synchronously from
their callbacks. Route formation, reachability and transport belong to the
surrounding network stack; here reachability is a plain callable and transport
is a datagram endpoint.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable

from . import aead
from .config import NodeConfig
from .errors import AuthenticationFailure, InvalidMessageLength

__all__ = ["SinkProtocol", "SensorProtocol", "SensorNode", "start_sink"]

logger = logging.getLogger(__name__)


class SinkProtocol(asyncio.DatagramProtocol):
    """Decrypt inbound telemetry and echo accepted plaintext to the sender."""

    def __init__(
        self,
        config: NodeConfig,
        on_message: Callable[[bytes, tuple], None] | None = None,
    ) -> None:
        self.config = config
        self.on_message = on_message
        self.transport: asyncio.DatagramTransport | None = None
        self.received = 0
        self.accepted = 0
        self.rejected = 0

    def connection_made(self, transport) -> None:
        self.transport = transport
        logger.info("Sink listening on %s", transport.get_extra_info("sockname"))

    def datagram_received(self, data: bytes, addr) -> None:
        host, port = addr[0], addr[1]
        self.received += 1
        logger.info("Received message from %s (port %d)", host, port)
        cfg = self.config
        try:
            plaintext = bytes(
                aead.decrypt(
                    cfg.params,
                    cfg.key,
                    cfg.nonce,
                    data,
                    cfg.associated_data,
                    limits=cfg.limits,
                )
            )
        except (AuthenticationFailure, InvalidMessageLength) as e:
            self.rejected += 1
            logger.error("Decryption failed for message from %s: %s", host, e)
            return

        self.accepted += 1
        logger.info("Decrypted message: %r", plaintext)
        if self.on_message is not None:
            self.on_message(plaintext, addr)
        if self.transport is not None:
            logger.info("Sending response to %s (port %d)", host, port)
            self.transport.sendto(plaintext, addr)

    def error_received(self, exc: Exception) -> None:
        logger.warning("Sink socket error: %s", exc)


class SensorProtocol(asyncio.DatagramProtocol):
    """Collect responses the sink sends back to the sensor."""

    def __init__(self) -> None:
        self.responses: asyncio.Queue[bytes] = asyncio.Queue()

    def datagram_received(self, data: bytes, addr) -> None:
        logger.info("Response received from %s: %r", addr[0], data)
        self.responses.put_nowait(data)

    def error_received(self, exc: Exception) -> None:
        logger.warning("Sensor socket error: %s", exc)


class SensorNode:
    """Periodically encrypt the configured payload and send it to the sink.

    Args:
        config: Node configuration.
        reachable: Returns True when a route to the sink exists (default: always).
        rng: Random source for the start delay and send jitter.
    """

    def __init__(
        self,
        config: NodeConfig,
        *,
        reachable: Callable[[], bool] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.reachable = reachable or (lambda: True)
        self.rng = rng or random.Random()
        self.transport: asyncio.DatagramTransport | None = None
        self.protocol: SensorProtocol | None = None
        self.sent = 0
        self.unreachable = 0

    async def start(self, local_port: int | None = None) -> None:
        """Open the UDP endpoint towards the sink."""
        loop = asyncio.get_running_loop()
        cfg = self.config
        port = cfg.sensor_port if local_port is None else local_port
        self.transport, self.protocol = await loop.create_datagram_endpoint(
            SensorProtocol,
            local_addr=("0.0.0.0", port),
            remote_addr=(cfg.sink_host, cfg.sink_port),
        )
        if cfg.uses_demo_key:
            logger.warning("Using the all-zero demo key and nonce")

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
            self.transport = None

    def next_delay(self) -> float:
        """Interval until the next send: send_interval - jitter + U(0, 2 * jitter)."""
        cfg = self.config
        return cfg.send_interval - cfg.jitter + self.rng.random() * 2 * cfg.jitter

    def send_once(self) -> bool:
        """Encrypt and send one message if the sink is reachable."""
        if self.transport is None:
            raise RuntimeError("Cannot call send_once() before start()")
        if not self.reachable():
            self.unreachable += 1
            logger.info("Network not reachable.")
            return False

        cfg = self.config
        logger.info("Starting encryption...")
        ct = aead.encrypt(
            cfg.params,
            cfg.key,
            cfg.nonce,
            cfg.payload,
            cfg.associated_data,
            limits=cfg.limits,
        )
        logger.info("Sending encrypted message...")
        self.transport.sendto(bytes(ct))
        self.sent += 1
        if self.sent % cfg.stats_every == 0:
            logger.info(
                "Messages sent: %d, unreachable: %d", self.sent, self.unreachable
            )
        return True

    async def run(self, count: int | None = None) -> None:
        """Send until ``count`` attempts were made (forever when None)."""
        await asyncio.sleep(self.rng.random() * self.config.send_interval)
        attempts = 0
        while count is None or attempts < count:
            self.send_once()
            attempts += 1
            if count is not None and attempts >= count:
                break
            await asyncio.sleep(self.next_delay())


async def start_sink(
    config: NodeConfig,
    *,
    host: str = "0.0.0.0",
    on_message: Callable[[bytes, tuple], None] | None = None,
) -> tuple[asyncio.DatagramTransport, SinkProtocol]:
    """Bind the sink endpoint on ``config.sink_port``."""
    loop = asyncio.get_running_loop()
    return await loop.create_datagram_endpoint(
        lambda: SinkProtocol(config, on_message),
        local_addr=(host, config.sink_port),
    )
