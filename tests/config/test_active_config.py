"""
Tests for asset_config: get_active_config() and the YAML loader.

Validates packaged defaults, overrides from a custom file, rejection of
unknown sections / keys / methods, checksum stability, and the config
trace log entry.
"""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from asset_config import DEFAULT_CONFIG_PATH, ActiveConfig, get_active_config
from asset_config.loader import compute_checksum, load_yaml_file, parse_depreciation_config
from asset_modules.depreciation.config import DepreciationConfig


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "assets.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestPackagedDefaults:

    def test_defaults_load(self):
        config = get_active_config()

        assert isinstance(config, ActiveConfig)
        assert config.source == DEFAULT_CONFIG_PATH
        assert config.database_url is None
        dep = config.depreciation
        assert dep.default_depreciation_method == "straight_line"
        assert dep.legacy_sum_of_years is False
        assert dep.money_decimal_places == 2
        assert dep.alert_recent_days == 30
        assert dep.high_depreciation_threshold_percent == Decimal("80")
        assert dep.batch_default_business_unit_id is None

    def test_defaults_match_dataclass_defaults(self):
        assert get_active_config().depreciation == DepreciationConfig()

    def test_config_is_frozen(self):
        config = get_active_config()
        with pytest.raises(AttributeError):
            config.checksum = "x"


class TestCustomFile:

    def test_overrides(self, tmp_path):
        path = _write(tmp_path, {
            "database": {"url": "postgresql://localhost/assets"},
            "depreciation": {
                "legacy_sum_of_years": True,
                "high_depreciation_threshold_percent": 90.5,
                "alert_recent_days": 7,
            },
        })

        config = get_active_config(path)

        assert config.source == path
        assert config.database_url == "postgresql://localhost/assets"
        assert config.depreciation.legacy_sum_of_years is True
        assert config.depreciation.high_depreciation_threshold_percent == Decimal("90.5")
        assert config.depreciation.alert_recent_days == 7
        assert config.depreciation.money_decimal_places == 2

    def test_accepts_string_path(self, tmp_path):
        path = _write(tmp_path, {"depreciation": {"alert_recent_days": 1}})
        assert get_active_config(str(path)).depreciation.alert_recent_days == 1

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = get_active_config(path)

        assert config.depreciation == DepreciationConfig()
        assert config.database_url is None

    def test_unknown_section_rejected(self, tmp_path):
        path = _write(tmp_path, {"depreciation": {}, "ledger": {"post": True}})
        with pytest.raises(ValueError, match="ledger"):
            get_active_config(path)

    def test_unknown_key_rejected(self, tmp_path):
        path = _write(tmp_path, {"depreciation": {"legacy_sum_of_year": True}})
        with pytest.raises(ValueError, match="legacy_sum_of_year"):
            get_active_config(path)

    def test_unknown_method_rejected(self, tmp_path):
        path = _write(tmp_path, {"depreciation": {"default_depreciation_method": "double_declining"}})
        with pytest.raises(ValueError):
            get_active_config(path)

    def test_negative_alert_window_rejected(self, tmp_path):
        path = _write(tmp_path, {"depreciation": {"alert_recent_days": -1}})
        with pytest.raises(ValueError):
            get_active_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_yaml_file(path)

    def test_non_mapping_section(self):
        with pytest.raises(ValueError):
            parse_depreciation_config(["legacy_sum_of_years"])


class TestChecksumAndTrace:

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_checksum_changes_with_content(self, tmp_path):
        first = get_active_config(_write(tmp_path, {"depreciation": {"alert_recent_days": 1}}))
        second = get_active_config(_write(tmp_path, {"depreciation": {"alert_recent_days": 2}}))
        assert first.checksum != second.checksum

    def test_trace_logged(self, captured_logs):
        config = get_active_config()

        trace = next(r for r in captured_logs() if r["message"] == "ASSET_CONFIG_TRACE")
        assert trace["trace_type"] == "ASSET_CONFIG_TRACE"
        assert trace["checksum"] == config.checksum
        assert trace["config_source"] == str(DEFAULT_CONFIG_PATH)
        assert trace["legacy_sum_of_years"] is False
