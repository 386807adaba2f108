"""
Unit tests for configuration utilities.
"""
import json
import logging
import pytest
from config_utils import (
    STRATEGY_OPTIONS, configure_logging, get_default_form_values,
    get_form_widget_mappings, load_ui_config, get_form_defaults
)
from io_utils import parse_form_inputs
from withdrawal import WithdrawalStrategyType


class TestDefaults:
    """Test default form configuration"""

    def test_default_form_values(self):
        """Test defaults parse to the documented neutral inputs"""
        defaults = get_default_form_values()

        assert defaults['annual_return_pct'] == 7.0
        assert defaults['withdrawal_strategy'] == 'fixed_percentage'
        assert defaults['retirement_duration_years'] == 30
        assert defaults['current_savings'] is None

        inputs = parse_form_inputs(defaults)
        assert inputs.annual_return_rate == pytest.approx(0.07)
        assert inputs.current_savings == 0

    def test_every_strategy_has_a_label(self):
        """Test select box labels cover the closed set of strategies"""
        assert set(STRATEGY_OPTIONS) == set(WithdrawalStrategyType)

    def test_widget_mappings_cover_form_fields(self):
        """Test every form field has exactly one widget"""
        mapped_fields = list(get_form_widget_mappings().values())

        assert sorted(mapped_fields) == sorted(get_default_form_values())
        assert len(mapped_fields) == len(set(mapped_fields))


class TestUIConfig:
    """Test ui_config.json loading"""

    def test_missing_file(self, tmp_path):
        """Test a missing file gives an empty config"""
        assert load_ui_config(str(tmp_path / "missing.json")) == {}

    def test_malformed_file(self, tmp_path, caplog):
        """Test malformed JSON is logged and ignored"""
        path = tmp_path / "ui_config.json"
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert load_ui_config(str(path)) == {}
        assert "Could not load" in caplog.text

    def test_non_object_file(self, tmp_path):
        """Test a JSON list is ignored"""
        path = tmp_path / "ui_config.json"
        path.write_text("[1, 2, 3]")

        assert load_ui_config(str(path)) == {}

    def test_form_default_overrides(self, tmp_path, caplog):
        """Test overrides apply to known keys and unknown keys are ignored"""
        path = tmp_path / "ui_config.json"
        path.write_text(json.dumps({
            'form_defaults': {
                'annual_return_pct': 6.0,
                'withdrawal_strategy': 'valuation_adjusted',
                'not_a_field': 1
            }
        }))

        with caplog.at_level(logging.WARNING):
            defaults = get_form_defaults(str(path))

        assert defaults['annual_return_pct'] == 6.0
        assert defaults['withdrawal_strategy'] == 'valuation_adjusted'
        assert 'not_a_field' not in defaults
        assert "not_a_field" in caplog.text

    def test_configure_logging_is_idempotent(self):
        """Test repeated setup does not stack handlers"""
        configure_logging()
        handler_count = len(logging.getLogger().handlers)
        configure_logging()

        assert len(logging.getLogger().handlers) == handler_count
