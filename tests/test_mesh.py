"""Loopback tests for the sensor and sink nodes."""

import asyncio
import logging
import random
from dataclasses import replace

import pytest

from asconmesh import encrypt
from asconmesh.config import NodeConfig
from asconmesh.mesh import SensorNode, SinkProtocol, start_sink

from .util import wait_until


@pytest.fixture
def config():
    return NodeConfig(
        sink_host="127.0.0.1", sink_port=0, send_interval=0.05, jitter=0.0
    )


async def start_pair(config, **sensor_kwargs):
    transport, sink = await start_sink(config, host="127.0.0.1")
    port = transport.get_extra_info("sockname")[1]
    sensor = SensorNode(replace(config, sink_port=port), **sensor_kwargs)
    await sensor.start(local_port=0)
    return transport, sink, sensor


class TestSinkSensorExchange:
    """Test a full encrypt, send, decrypt, echo cycle."""

    @pytest.mark.asyncio
    async def test_payload_round_trip(self, config):
        transport, sink, sensor = await start_pair(config)
        try:
            assert sensor.send_once()
            response = await asyncio.wait_for(sensor.protocol.responses.get(), 2.0)
            assert response == b"SAMSUN"
            assert sink.received == 1
            assert sink.accepted == 1
            assert sink.rejected == 0
        finally:
            sensor.close()
            transport.close()

    @pytest.mark.asyncio
    async def test_on_message_callback(self, config):
        seen = []
        transport, sink = await start_sink(
            config, host="127.0.0.1", on_message=lambda pt, addr: seen.append(pt)
        )
        port = transport.get_extra_info("sockname")[1]
        sensor = SensorNode(replace(config, sink_port=port, payload=b"t=22.1"))
        await sensor.start(local_port=0)
        try:
            sensor.send_once()
            await wait_until(lambda: seen)
            assert seen == [b"t=22.1"]
        finally:
            sensor.close()
            transport.close()

    @pytest.mark.asyncio
    async def test_tampered_datagram_rejected(self, config, caplog):
        transport, sink, sensor = await start_pair(config)
        try:
            with caplog.at_level(logging.ERROR, logger="asconmesh.mesh"):
                sensor.transport.sendto(bytes(22))
                sensor.transport.sendto(b"short")
                await wait_until(lambda: sink.received == 2)
            assert sink.rejected == 2
            assert sink.accepted == 0
            assert sensor.protocol.responses.empty()
            assert "Decryption failed" in caplog.text
        finally:
            sensor.close()
            transport.close()

    @pytest.mark.asyncio
    async def test_wrong_key_rejected(self, config):
        transport, sink, sensor = await start_pair(config)
        sensor.config = replace(sensor.config, key=b"\x01" * 16)
        try:
            sensor.send_once()
            await wait_until(lambda: sink.received == 1)
            assert sink.rejected == 1
        finally:
            sensor.close()
            transport.close()


class TestSensorNode:
    """Test scheduling and reachability handling."""

    @pytest.mark.asyncio
    async def test_unreachable_skips_send(self, config, caplog):
        transport, sink, sensor = await start_pair(config, reachable=lambda: False)
        try:
            with caplog.at_level(logging.INFO, logger="asconmesh.mesh"):
                assert not sensor.send_once()
            assert sensor.unreachable == 1
            assert sensor.sent == 0
            assert "Network not reachable." in caplog.text
        finally:
            sensor.close()
            transport.close()

    @pytest.mark.asyncio
    async def test_run_counts_attempts(self, config):
        transport, sink, sensor = await start_pair(config, rng=random.Random(7))
        try:
            await sensor.run(count=3)
            await wait_until(lambda: sink.received == 3)
            assert sensor.sent == 3
            assert sink.accepted == 3
        finally:
            sensor.close()
            transport.close()

    @pytest.mark.asyncio
    async def test_demo_key_warning(self, config, caplog):
        with caplog.at_level(logging.WARNING, logger="asconmesh.mesh"):
            transport, sink, sensor = await start_pair(config)
        sensor.close()
        transport.close()
        assert "demo key" in caplog.text

    def test_send_before_start(self, config):
        with pytest.raises(RuntimeError, match="before start"):
            SensorNode(config).send_once()

    def test_next_delay_within_jitter(self):
        node = SensorNode(
            NodeConfig(send_interval=10.0, jitter=1.0), rng=random.Random(1)
        )
        for _ in range(100):
            assert 9.0 <= node.next_delay() <= 11.0


def test_sink_decrypts_without_transport():
    """Decryption works before connection_made; nothing is echoed."""
    seen = []
    sink = SinkProtocol(NodeConfig(), on_message=lambda pt, addr: seen.append(pt))
    datagram = encrypt(bytes(16), bytes(16), b"SAMSUN", b"ASCON")
    sink.datagram_received(datagram, ("127.0.0.1", 1))
    assert sink.accepted == 1
    assert seen == [b"SAMSUN"]
