"""Tests for configuration loading (billing_config)."""

import logging
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from billing_config import BillingConfig, get_active_config
from billing_config.loader import compute_checksum, parse_config


class TestGetActiveConfig:
    def test_packaged_defaults(self, monkeypatch):
        monkeypatch.delenv("BILLING_CONFIG", raising=False)
        config = get_active_config()
        assert config.currency == "COP"
        assert config.amount_ceiling == Decimal("999999999999")
        assert config.unknown_client_label == "Cliente desconocido"
        assert config.independent_client_label == "Cliente independiente"
        assert config.sort_groups is True
        assert len(config.checksum) == 64

    def test_file_overrides_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("BILLING_CONFIG", raising=False)
        path = tmp_path / "billing.yaml"
        path.write_text("amount_ceiling: 5000000\nsort_groups: false\ndata_dir: /srv/billing\n")
        config = get_active_config(path)
        assert config.amount_ceiling == Decimal("5000000")
        assert config.sort_groups is False
        assert config.data_dir == Path("/srv/billing")
        assert config.currency == "COP"

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("log_level: debug\n")
        monkeypatch.setenv("BILLING_CONFIG", str(path))
        assert get_active_config().log_level == "DEBUG"

    def test_trace_emitted(self, caplog, monkeypatch):
        monkeypatch.delenv("BILLING_CONFIG", raising=False)
        with caplog.at_level(logging.INFO, logger="billing_kernel.config"):
            config = get_active_config()
        traces = [r for r in caplog.records if r.getMessage() == "BILLING_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0].checksum == config.checksum

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("currency: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            get_active_config(path)


class TestValidation:
    @pytest.mark.parametrize("ceiling", [0, -1, "abc"])
    def test_invalid_ceiling(self, ceiling):
        with pytest.raises(ValueError):
            parse_config({"amount_ceiling": ceiling})

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            parse_config({"log_level": "LOUD"})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            parse_config({"ceiling": 10})

    def test_config_is_frozen(self):
        config = BillingConfig()
        with pytest.raises(AttributeError):
            config.currency = "USD"

    def test_checksum_deterministic(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
