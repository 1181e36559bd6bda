"""
invoicing_config -- single public entrypoint for invoicing configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``InvoicingConfig``.

Architecture position:
    Configuration -- sits above ``invoicing_kernel`` and below
    ``invoicing_services``.  The kernel and the engines MUST NEVER import
    from ``invoicing_config``; services pass values into them explicitly.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- values fail validation.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``INVOICING_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying every committed invoice to the configuration that
    validated it.
"""

from __future__ import annotations

from pathlib import Path

from invoicing_config.loader import compute_checksum, load_config_file, parse_config
from invoicing_config.schema import InvoicingConfig, OrderDefaults, ValidationLimits
from invoicing_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> InvoicingConfig:
    """The ONLY public configuration entrypoint.

    Does NOT cache across calls; callers hold the returned config.

    Args:
        config_path: Override path to a configuration file.
            Defaults to invoicing_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the configuration fails validation.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_config_file(path)

    _logger.info(
        "INVOICING_CONFIG_TRACE",
        extra={
            "trace_type": "INVOICING_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "InvoicingConfig",
    "OrderDefaults",
    "ValidationLimits",
    "compute_checksum",
    "get_active_config",
    "parse_config",
]
