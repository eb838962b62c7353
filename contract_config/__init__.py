"""
contract_config -- single public entrypoint for kernel configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains
    configuration.  YAML parsing lives in ``loader``; the typed result is a
    frozen ``KernelConfig``.

Architecture position:
    Configuration sits above ``contract_kernel``.  The kernel never imports
    from ``contract_config``; ``contract_kernel.runtime.bootstrap`` receives
    a ``KernelConfig`` from its caller.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.

Every successful call emits a ``CONTRACT_CONFIG_TRACE`` log entry with the
config id, version and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contract_config.loader import compute_checksum, load_config
from contract_config.schema import DatabaseConfig, KernelConfig, LoggingConfig

_logger = logging.getLogger("contract_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> KernelConfig:
    """
    Load and return the active configuration.

    Args:
        config_path: YAML file to load.  Defaults to
            ``contract_config/sets/default.yaml``.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    config = load_config(path)

    _logger.info(
        "CONTRACT_CONFIG_TRACE",
        extra={
            "trace_type": "CONTRACT_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "role_mapping_count": len(config.roles),
        },
    )
    return config


__all__ = [
    "DatabaseConfig",
    "KernelConfig",
    "LoggingConfig",
    "compute_checksum",
    "get_active_config",
]
