"""Service configuration and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog

from cpamm.constants import DEFAULT_REGISTRY_ADDRESS
from cpamm.types import normalize_address


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class ServiceConfig:
    """Settings of the HTTP service.

    Attributes:
        host: Interface to bind (CPAMM_HOST, default 0.0.0.0)
        port: Port to bind (CPAMM_PORT, default 8000)
        debug: Enable auto-reload (CPAMM_DEBUG, default false)
        log_level: Minimum log level name (CPAMM_LOG_LEVEL, default INFO)
        registry_address: Address pair addresses are derived from
            (CPAMM_REGISTRY_ADDRESS)
    """

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    registry_address: str = DEFAULT_REGISTRY_ADDRESS

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build a config from CPAMM_* environment variables.

        Raises:
            ValueError: If CPAMM_PORT is not an integer or the registry
                address is malformed
        """
        return cls(
            host=os.environ.get("CPAMM_HOST", cls.host),
            port=int(os.environ.get("CPAMM_PORT", str(cls.port))),
            debug=_env_flag("CPAMM_DEBUG"),
            log_level=os.environ.get("CPAMM_LOG_LEVEL", cls.log_level).upper(),
            registry_address=normalize_address(
                os.environ.get("CPAMM_REGISTRY_ADDRESS", cls.registry_address),
                validate=True,
            ),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install the console structlog pipeline filtered at `level`."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
