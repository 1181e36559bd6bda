"""Tests for loading and validating the invoicing configuration."""

from decimal import Decimal

import pytest
import yaml

from invoicing_config import DEFAULT_CONFIG_PATH, compute_checksum, get_active_config, parse_config
from invoicing_kernel.exceptions import ConfigurationError


class TestDefaultConfig:

    def test_default_file_loads(self):
        config = get_active_config()

        assert config.config_id == "default"
        assert config.currency == "INR"
        assert config.money_decimal_places == 2
        assert config.validation.max_discount_percent == Decimal("100")
        assert config.validation.allow_zero_rate is False
        assert config.order_defaults.gst_rate == Decimal("10.00")

    def test_checksum_matches_file_content(self):
        with open(DEFAULT_CONFIG_PATH) as f:
            data = yaml.safe_load(f)
        assert get_active_config().checksum == compute_checksum(data)

    def test_emits_config_trace(self, captured_logs):
        config = get_active_config()

        [trace] = [r for r in captured_logs() if r["message"] == "INVOICING_CONFIG_TRACE"]
        assert trace["checksum"] == config.checksum
        assert trace["config_version"] == 1


class TestCustomConfig:

    def test_override_path(self, tmp_path):
        path = tmp_path / "warehouse.yaml"
        path.write_text(
            "config_id: north\n"
            "currency: INR\n"
            "validation:\n"
            "  max_discount_percent: 25\n"
            "  allow_zero_rate: true\n"
            "order_defaults:\n"
            "  gst_rate: 12.5\n"
        )

        config = get_active_config(path)

        assert config.config_id == "north"
        assert config.validation.max_discount_percent == Decimal("25")
        assert config.validation.allow_zero_rate is True
        assert config.order_defaults.gst_rate == Decimal("12.5")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = get_active_config(path)

        assert config.currency == "INR"
        assert config.order_defaults.gst_rate == Decimal("10.00")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestValidation:

    def test_collects_all_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config(
                {
                    "currency": "",
                    "money_decimal_places": 7,
                    "validation": {"max_discount_percent": 150, "allow_zero_rate": "yes"},
                    "order_defaults": {"gst_rate": "ten"},
                },
                source="bad.yaml",
            )

        error = exc_info.value
        assert error.code == "CONFIGURATION_ERROR"
        assert error.source == "bad.yaml"
        assert len(error.errors) == 5

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError, match="validation"):
            parse_config({"validation": [1, 2]})

    def test_negative_order_rate_rejected(self):
        with pytest.raises(ConfigurationError, match="order_defaults.gst_rate"):
            parse_config({"order_defaults": {"gst_rate": -1}})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_config(["not", "a", "mapping"])

    def test_checksum_is_deterministic(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
