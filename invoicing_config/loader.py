"""
Configuration Loader (``invoicing_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``invoicing_config.schema`` dataclasses.  The single public entry point
for runtime config is ``invoicing_config.get_active_config()``.

Invariants enforced
-------------------
* Every semantic problem is collected and raised together as one
  ``ConfigurationError``; no silent defaults for malformed values.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong types or out-of-range values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from invoicing_config.schema import InvoicingConfig, OrderDefaults, ValidationLimits
from invoicing_kernel.exceptions import ConfigurationError


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
    """SHA-256 checksum of the canonical JSON serialization."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _parse_decimal(value: Any, key: str, errors: list[str]) -> Decimal | None:
    # YAML floats go through str() so 10.0 stays 10.0, not its binary expansion
    if isinstance(value, bool):
        errors.append(f"{key}: expected a number, got {value!r}")
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors.append(f"{key}: expected a number, got {value!r}")
        return None
    if not result.is_finite():
        errors.append(f"{key}: must be finite")
        return None
    return result


def _section(data: dict[str, Any], key: str, errors: list[str]) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        errors.append(f"{key}: expected a mapping, got {type(value).__name__}")
        return {}
    return value


def parse_config(data: dict[str, Any], source: str = "<memory>") -> InvoicingConfig:
    """
    Parse and validate a configuration dict.

    Missing keys take the schema defaults; present keys must be valid.

    Raises:
        ConfigurationError: listing every invalid value.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(source, [f"top level: expected a mapping, got {type(data).__name__}"])

    errors: list[str] = []
    defaults = InvoicingConfig()

    currency = data.get("currency", defaults.currency)
    if not isinstance(currency, str) or not currency.strip():
        errors.append(f"currency: expected a non-empty string, got {currency!r}")

    places = data.get("money_decimal_places", defaults.money_decimal_places)
    if isinstance(places, bool) or not isinstance(places, int) or not 0 <= places <= 4:
        errors.append(f"money_decimal_places: expected an integer 0..4, got {places!r}")

    validation_data = _section(data, "validation", errors)
    max_percent = _parse_decimal(
        validation_data.get("max_discount_percent", defaults.validation.max_discount_percent),
        "validation.max_discount_percent",
        errors,
    )
    if max_percent is not None and not (Decimal("0") <= max_percent <= Decimal("100")):
        errors.append(f"validation.max_discount_percent: must be within 0..100, got {max_percent}")

    allow_zero_rate = validation_data.get("allow_zero_rate", defaults.validation.allow_zero_rate)
    if not isinstance(allow_zero_rate, bool):
        errors.append(f"validation.allow_zero_rate: expected a boolean, got {allow_zero_rate!r}")

    order_data = _section(data, "order_defaults", errors)
    gst_rate = _parse_decimal(
        order_data.get("gst_rate", defaults.order_defaults.gst_rate),
        "order_defaults.gst_rate",
        errors,
    )
    if gst_rate is not None and gst_rate < 0:
        errors.append(f"order_defaults.gst_rate: must not be negative, got {gst_rate}")

    version = data.get("version", defaults.version)
    if isinstance(version, bool) or not isinstance(version, int):
        errors.append(f"version: expected an integer, got {version!r}")

    if errors:
        raise ConfigurationError(source, errors)

    return InvoicingConfig(
        config_id=str(data.get("config_id", defaults.config_id)),
        version=version,
        currency=currency.strip(),
        money_decimal_places=places,
        validation=ValidationLimits(
            max_discount_percent=max_percent,
            allow_zero_rate=allow_zero_rate,
        ),
        order_defaults=OrderDefaults(gst_rate=gst_rate),
        checksum=compute_checksum(data),
    )


def load_config_file(path: Path) -> InvoicingConfig:
    """Load and parse one configuration file."""
    return parse_config(load_yaml_file(path), source=str(path))
