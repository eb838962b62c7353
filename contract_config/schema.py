"""
KernelConfig schema.

Typed, frozen view of a configuration file.  The loader parses YAML into
these types; ``contract_kernel.runtime.bootstrap`` consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from contract_kernel.domain.roles import DEFAULT_ROLE_NAMES, Role


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings passed to ``init_engine_from_url``."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class KernelConfig:
    """The complete runtime configuration of the contract kernel."""

    config_id: str
    version: int
    database: DatabaseConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    # External role name -> kernel role
    roles: dict[str, Role] = field(default_factory=lambda: dict(DEFAULT_ROLE_NAMES))
    checksum: str = ""
