"""Configuration for the local print agent."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import os

from ..const import (
    DEFAULT_AGENT_HOST,
    DEFAULT_AGENT_PORT,
    ENV_AGENT_HOST,
    ENV_AGENT_PORT,
    ENV_DEVICE_PATHS,
)
from ..printer import DeviceConfig

_LOGGER = logging.getLogger(__name__)


@dataclass
class AgentConfig:
    """Where the agent listens and which printer it drives."""

    host: str = DEFAULT_AGENT_HOST
    port: int = DEFAULT_AGENT_PORT
    device: DeviceConfig = field(default_factory=DeviceConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentConfig:
        """Build a configuration from environment variables.

        ``PRINTER_DEVICE_PATHS`` is a colon-separated list of device nodes.
        Invalid values are logged and replaced by defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()
        config.host = env.get(ENV_AGENT_HOST, config.host) or config.host

        raw_port = env.get(ENV_AGENT_PORT)
        if raw_port:
            try:
                port = int(raw_port)
                if not 0 < port < 65536:
                    raise ValueError(raw_port)
                config.port = port
            except ValueError:
                _LOGGER.warning("Ignoring invalid %s=%r", ENV_AGENT_PORT, raw_port)

        raw_paths = env.get(ENV_DEVICE_PATHS)
        if raw_paths:
            paths = tuple(p.strip() for p in raw_paths.split(":") if p.strip())
            if paths:
                config.device.device_paths = paths
        return config
