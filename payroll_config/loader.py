"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a payroll YAML file and parses it into a validated
``PayrollConfig``.  The single public entry point for runtime config is
``payroll_config.get_active_config()``; this module is the tooling
underneath it.

Invariants enforced
-------------------
* The file must have a ``payroll`` mapping; ``config_id`` and ``version``
  identify it.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  document for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing sections or bad values  -> ``ConfigurationError`` naming the file.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from payroll_kernel.exceptions import ConfigurationError
from payroll_modules.payroll.config import PayrollConfig


@dataclass(frozen=True)
class LoadedPayrollConfig:
    """A parsed config plus the identity of the file it came from."""
    config: PayrollConfig
    config_id: str
    version: int
    checksum: str
    source: str


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_payroll_config(data: dict[str, Any], source: str = "<dict>") -> LoadedPayrollConfig:
    """Parse an already-loaded YAML document."""
    if not isinstance(data, dict):
        raise ConfigurationError("Config document must be a mapping", source=source)
    section = data.get("payroll")
    if not isinstance(section, dict):
        raise ConfigurationError("Missing 'payroll' section", source=source)

    try:
        config = PayrollConfig.from_dict(section)
    except ConfigurationError as exc:
        raise ConfigurationError(str(exc), source=source) from exc
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid payroll config: {exc}", source=source) from exc

    return LoadedPayrollConfig(
        config=config,
        config_id=str(data.get("config_id", Path(source).stem)),
        version=int(data.get("version", 1)),
        checksum=compute_checksum(data),
        source=source,
    )


def load_payroll_config(path: Path) -> LoadedPayrollConfig:
    """Load and parse a payroll YAML file."""
    return parse_payroll_config(load_yaml_file(path), source=str(path))
