import asyncio
import json
from pathlib import Path

from asconmesh import ascon96, ascon128

VECTORS_DIR = Path(__file__).parent / "test-vectors"

# p^a applied to the all-zero state
P12_ZERO = bytes.fromhex(
    "78ea7ae5cfebb1089b9bfb8513b560f76937f83e03d11a503fe53f36f2c1178c045d648e4def12c9"
)


def load_aead_test_vectors():
    """Load AEAD known-answer vectors from JSON file."""
    with open(VECTORS_DIR / "ascon-aead-test-vectors.json", "r") as f:
        return json.load(f)


def get_algorithm_module(name):
    """Map test vector name to parameter-set module."""
    if name.startswith("Ascon-128"):
        return ascon128
    elif name.startswith("Ascon-96"):
        return ascon96
    else:
        raise ValueError(f"Unknown algorithm in test vector name: {name}")


def flip_bit(data, bit: int) -> bytes:
    """Return a copy of data with one bit inverted."""
    out = bytearray(data)
    out[bit // 8] ^= 1 << (bit % 8)
    return bytes(out)


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll predicate on the event loop until it returns True."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise TimeoutError("condition not met in time")
        await asyncio.sleep(0.01)
