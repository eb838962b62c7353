"""
Configuration Loader (``contract_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``contract_config.schema``.  Runtime callers go through
``contract_config.get_active_config()`` instead of calling this directly.

Invariants enforced
-------------------
* Required keys are never defaulted; a missing key raises ``KeyError``.
* Invalid values (unknown role, bad log level) raise ``ValueError``.
* ``compute_checksum`` is deterministic for identical parsed content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from contract_config.schema import DatabaseConfig, KernelConfig, LoggingConfig
from contract_kernel.domain.roles import DEFAULT_ROLE_NAMES, Role


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_logging(data: dict[str, Any] | None) -> LoggingConfig:
    if not data:
        return LoggingConfig()
    level = str(data.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level!r}")
    return LoggingConfig(level=level)


def parse_roles(data: dict[str, Any] | None) -> dict[str, Role]:
    """Map external role names to ``Role`` members by value."""
    if not data:
        return {}
    roles: dict[str, Role] = {}
    for external_name, role_value in data.items():
        try:
            roles[str(external_name)] = Role(role_value)
        except ValueError:
            raise ValueError(
                f"Role {external_name!r} maps to unknown kernel role {role_value!r}"
            ) from None
    return roles


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_config(data: dict[str, Any]) -> KernelConfig:
    """
    Parse a whole configuration document.

    Raises:
        KeyError: ``config_id``, ``version`` or ``database.url`` missing.
        ValueError: invalid role mapping or log level.
    """
    roles = parse_roles(data.get("roles"))
    return KernelConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        database=parse_database(data["database"]),
        logging=parse_logging(data.get("logging")),
        roles=roles or dict(DEFAULT_ROLE_NAMES),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> KernelConfig:
    return parse_config(load_yaml_file(path))
