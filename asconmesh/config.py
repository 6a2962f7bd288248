"""Node configuration loaded from TOML and ``ASCONMESH_*`` environment variables.

Example ``asconmesh.toml``::

    [node]
    key = "000102030405060708090a0b0c0d0e0f"
    nonce = "000102030405060708090a0b0c0d0e0f"
    associated_data = "ASCON"
    payload = "SAMSUN"
    sink_host = "127.0.0.1"
    sink_port = 5678
    send_interval = 10.0

    [limits]
    max_message_bytes = 1024
    max_ad_bytes = 256

Environment variables override file values, e.g. ``ASCONMESH_KEY``,
``ASCONMESH_SINK_PORT`` or ``ASCONMESH_MAX_MESSAGE_BYTES``.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .buffers import Limits
from .errors import InvalidKeyLength
from .params import ParameterSet, for_key_length

__all__ = ["ConfigError", "NodeConfig", "load_config", "ENV_PREFIX"]

ENV_PREFIX = "ASCONMESH_"

UDP_SINK_PORT = 5678
UDP_SENSOR_PORT = 8765

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised for missing, malformed or inconsistent configuration values."""


@dataclass(frozen=True)
class NodeConfig:
    """Settings shared by the sensor and sink nodes.

    The all-zero key and nonce defaults are demo wiring only. A deployment
    has to supply its own key and a fresh nonce per message.
    """

    key: bytes = bytes(16)
    nonce: bytes = bytes(16)
    associated_data: bytes = b"ASCON"
    payload: bytes = b"SAMSUN"
    sink_host: str = "127.0.0.1"
    sink_port: int = UDP_SINK_PORT
    sensor_port: int = UDP_SENSOR_PORT
    send_interval: float = 10.0
    jitter: float = 1.0
    stats_every: int = 10
    log_level: str = "INFO"
    limits: Limits = field(default_factory=Limits)

    def __post_init__(self) -> None:
        try:
            params = for_key_length(len(self.key))
        except InvalidKeyLength as e:
            raise ConfigError(str(e)) from None
        if len(self.nonce) != params.nonce_bytes:
            raise ConfigError(
                f"nonce must be {params.nonce_bytes} bytes for {params.name}"
            )
        for name in ("sink_port", "sensor_port"):
            port = getattr(self, name)
            if not 0 <= port <= 65535:
                raise ConfigError(f"{name} out of range: {port}")
        if self.send_interval <= 0:
            raise ConfigError("send_interval must be positive")
        if not 0 <= self.jitter <= self.send_interval:
            raise ConfigError("jitter must be between 0 and send_interval")
        if self.stats_every < 1:
            raise ConfigError("stats_every must be at least 1")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    @property
    def params(self) -> ParameterSet:
        return for_key_length(len(self.key))

    @property
    def uses_demo_key(self) -> bool:
        return not any(self.key) and not any(self.nonce)


def _hex(name: str, value: Any) -> bytes:
    try:
        return bytes.fromhex(str(value))
    except ValueError:
        raise ConfigError(f"{name} must be a hex string") from None


def _text(name: str, value: Any) -> bytes:
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string")
    return value.encode("utf-8")


def _int(name: str, value: Any) -> int:
    if isinstance(value, (bool, float)):
        raise ConfigError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer") from None


def _float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number") from None


_NODE_FIELDS = {
    "key": _hex,
    "nonce": _hex,
    "associated_data": _text,
    "payload": _text,
    "sink_host": lambda name, v: str(v),
    "sink_port": _int,
    "sensor_port": _int,
    "send_interval": _float,
    "jitter": _float,
    "stats_every": _int,
    "log_level": lambda name, v: str(v).upper(),
}

_LIMIT_FIELDS = {f.name for f in fields(Limits)}


def _collect(
    node: Mapping[str, Any], limits: Mapping[str, Any]
) -> tuple[dict[str, Any], dict[str, int]]:
    kwargs = {}
    for name, value in node.items():
        if name not in _NODE_FIELDS:
            raise ConfigError(f"unknown node setting: {name}")
        kwargs[name] = _NODE_FIELDS[name](name, value)
    limit_kwargs = {}
    for name, value in limits.items():
        if name not in _LIMIT_FIELDS:
            raise ConfigError(f"unknown limits setting: {name}")
        limit_kwargs[name] = _int(name, value)
    return kwargs, limit_kwargs


def _from_env(environ: Mapping[str, str]) -> tuple[dict[str, Any], dict[str, Any]]:
    node, limits = {}, {}
    for name in _NODE_FIELDS:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            node[name] = value
    for name in _LIMIT_FIELDS:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            limits[name] = value
    return node, limits


def load_config(
    path: str | os.PathLike | None = None,
    environ: Mapping[str, str] | None = None,
) -> NodeConfig:
    """Build a :class:`NodeConfig` from an optional TOML file and the environment.

    Args:
        path: TOML file with ``[node]`` and ``[limits]`` tables (optional).
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: If the file cannot be read or a value is invalid.
    """
    environ = os.environ if environ is None else environ
    data: dict[str, Any] = {}
    if path is not None:
        try:
            data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"cannot read {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML in {path}: {e}") from e
    unknown = set(data) - {"node", "limits"}
    if unknown:
        raise ConfigError(f"unknown sections: {', '.join(sorted(unknown))}")

    node, limits = _collect(data.get("node", {}), data.get("limits", {}))
    env_node, env_limits = _collect(*_from_env(environ))
    node.update(env_node)
    limits.update(env_limits)

    try:
        config = NodeConfig(**node)
        if limits:
            config = replace(config, limits=replace(config.limits, **limits))
    except ConfigError:
        raise
    except ValueError as e:
        raise ConfigError(str(e)) from e
    return config
