"""
Tests for the YAML configuration loader.

Verifies:
- The bundled defaults load into the standard DepreciationConfig
- Sections map onto config fields with exact decimals
- Unknown sections, keys and malformed values fail loudly
"""

from decimal import Decimal

import pytest
import yaml

from depreciation_config import DEFAULTS_PATH, load_config, load_yaml_file, parse_config
from depreciation_kernel.domain.types import DepreciationMethodType, TierLevel
from depreciation_modules.assets.config import DepreciationConfig

M = DepreciationMethodType


def _write(tmp_path, text: str):
    path = tmp_path / "depreciation.yaml"
    path.write_text(text)
    return path


class TestBundledDefaults:
    def test_matches_schema_defaults(self):
        loaded = load_config()
        expected = DepreciationConfig()
        assert loaded == expected

    def test_defaults_file_exists(self):
        assert DEFAULTS_PATH.name == "defaults.yaml"
        assert "methods" in load_yaml_file(DEFAULTS_PATH)

    def test_load_logged(self, captured_logs):
        load_config()
        record = [r for r in captured_logs() if r["message"] == "config_loaded"][0]
        assert record["tier"] == "basic"
        assert record["path"].endswith("defaults.yaml")


class TestParseConfig:
    """Tests for mapping YAML onto config fields."""

    def test_full_document(self, tmp_path):
        path = _write(tmp_path, """
tier: enterprise
currency: eur
methods:
  default: sum_of_years
  disabled: [annuity, bonus]
macrs:
  property_class: 7
  bonus_rate: "0.6"
tax:
  rate: "0.25"
forecast:
  default_periods: 24
""")
        config = load_config(path)

        assert config.tier is TierLevel.ENTERPRISE
        assert config.default_currency == "EUR"
        assert config.default_method is M.SUM_OF_YEARS
        assert config.disabled_methods == frozenset({M.ANNUITY, M.BONUS})
        assert config.macrs_property_class == 7
        assert config.macrs_bonus_rate == Decimal("0.6")
        assert config.tax_rate == Decimal("0.25")
        assert config.default_forecast_periods == 24

    def test_unquoted_decimal_is_exact(self):
        """A YAML float goes through its string form, not binary."""
        config = parse_config({"annuity": {"interest_rate": 0.1}})
        assert config.annuity_interest_rate == Decimal("0.1")

    def test_empty_document(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == DepreciationConfig()

    def test_string_path(self, tmp_path):
        path = _write(tmp_path, "tier: advanced\n")
        assert load_config(str(path)).tier is TierLevel.ADVANCED


class TestRejections:
    @pytest.mark.parametrize(
        "data,message",
        [
            ({"reporting": {}}, "Unknown depreciation config section: reporting"),
            ({"macrs": {"life": 5}}, "Unknown depreciation config key: macrs.life"),
            ({"methods": "straight_line"}, "Section methods must be a mapping"),
            ({"methods": {"prorate_daily": "yes"}}, "methods.prorate_daily must be true or false"),
            ({"macrs": {"property_class": 7.5}}, "macrs.property_class must be an integer"),
            ({"macrs": {"property_class": "seven"}}, "macrs.property_class must be an integer"),
            ({"tax": {"rate": "high"}}, "tax.rate must be a decimal"),
            ({"tax": {"rate": True}}, "tax.rate must be a decimal"),
            ({"methods": {"default": "fastest"}}, "methods.default is not a depreciation method"),
            ({"methods": {"disabled": "annuity"}}, "methods.disabled must be a list of methods"),
            ({"currency": 840}, "currency must be a string"),
        ],
    )
    def test_invalid(self, data, message):
        with pytest.raises(ValueError, match=message):
            parse_config(data)

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping, got list"):
            parse_config(["tier", "basic"])

    def test_invalid_currency_wrapped(self):
        with pytest.raises(ValueError, match="Invalid depreciation config"):
            parse_config({"currency": "XXQ"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_config(_write(tmp_path, "tier: [basic\n"))
