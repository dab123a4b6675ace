from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from seven.core.registry import DEFAULT_CAPACITY

log = logging.getLogger("seven.server.config")

DEFAULT_LISTEN = ":8080"
DEFAULT_NAME = "Seven"
DEFAULT_VERSION = "v0.1"


@dataclass
class ServerConfig:
    listen: str = DEFAULT_LISTEN
    debug: bool = True
    capacity: int = DEFAULT_CAPACITY
    component_name: str = DEFAULT_NAME
    component_version: str = DEFAULT_VERSION

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int) or self.capacity <= 0:
            raise ValueError(f"registry.capacity must be a positive integer, got {self.capacity!r}")
        if not isinstance(self.debug, bool):
            raise ValueError(f"debug must be true or false, got {self.debug!r}")
        parse_listen(self.listen)

    @property
    def host(self) -> Optional[str]:
        return parse_listen(self.listen)[0]

    @property
    def port(self) -> int:
        return parse_listen(self.listen)[1]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ServerConfig":
        registry = _section(data, "registry")
        component = _section(data, "component")
        return cls(
            listen=str(data.get("listen", DEFAULT_LISTEN)),
            debug=data.get("debug", True),
            capacity=registry.get("capacity", DEFAULT_CAPACITY),
            component_name=str(component.get("name", DEFAULT_NAME)),
            component_version=str(component.get("version", DEFAULT_VERSION)),
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ServerConfig":
        if path is None or not path.exists():
            if path is not None:
                log.warning("Config %s not found, using defaults", path)
            return cls()
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at top level")
        return cls.from_mapping(data)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must be a mapping, got {value!r}")
    return value


def parse_listen(value: str) -> Tuple[Optional[str], int]:
    """Split "host:port"; an empty host means every interface."""
    if ":" not in value:
        raise ValueError(f"listen address must be host:port, got {value!r}")
    host, port = value.rsplit(":", 1)
    if not port.isdigit() or int(port) > 65535:
        raise ValueError(f"invalid port in listen address {value!r}")
    host = host.strip("[]")
    return (host or None), int(port)


__all__ = ["ServerConfig", "parse_listen", "DEFAULT_LISTEN"]
