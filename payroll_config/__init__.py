"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain payroll configuration at runtime
    through ``get_active_config()``.  Services receive the returned
    ``PayrollConfig``; they never read configuration files or environment
    variables themselves.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and beside
    ``payroll_modules``.  The kernel and the engines MUST NEVER import
    from ``payroll_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- schema or value validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry containing the config id, version,
    checksum and source path, tying each payroll run to the exact
    configuration that priced it.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from payroll_config.loader import (
    LoadedPayrollConfig,
    compute_checksum,
    load_payroll_config,
    load_yaml_file,
    parse_payroll_config,
)
from payroll_modules.payroll.config import PayrollConfig

_logger = logging.getLogger("payroll_kernel.config")

CONFIG_PATH_ENV = "PAYROLL_CONFIG_PATH"

# Default configuration file
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "payroll.yaml"


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit path, else ``PAYROLL_CONFIG_PATH``, else the shipped default."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_PATH


def load_active_config(path: Path | str | None = None) -> LoadedPayrollConfig:
    """Like ``get_active_config`` but also returns the file identity."""
    loaded = load_payroll_config(resolve_config_path(path))

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": loaded.config_id,
            "config_version": loaded.version,
            "checksum": loaded.checksum,
            "source": loaded.source,
        },
    )
    return loaded


def get_active_config(path: Path | str | None = None) -> PayrollConfig:
    """The ONLY public configuration entrypoint.

    Not cached: callers hold the returned config for the duration of a
    payroll run.

    Args:
        path: Override path to a payroll YAML file.  Defaults to
            ``$PAYROLL_CONFIG_PATH`` or ``payroll_config/defaults/payroll.yaml``.
    """
    return load_active_config(path).config


__all__ = [
    "CONFIG_PATH_ENV",
    "LoadedPayrollConfig",
    "compute_checksum",
    "get_active_config",
    "load_active_config",
    "load_payroll_config",
    "load_yaml_file",
    "parse_payroll_config",
    "resolve_config_path",
]
