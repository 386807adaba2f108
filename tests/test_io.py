"""
Unit tests for IO utilities (form parsing, exports, formatting).
"""
import pytest
import json
import math
import pandas as pd
from io import StringIO
from projection import ProjectionInputs, run_projection
from withdrawal import WithdrawalStrategyType
from deterministic import AccumulationProjector
from io_utils import (
    parse_form_inputs, inputs_to_dict, result_to_dict, export_year_by_year_csv,
    create_summary_report, export_summary_report_json, format_currency, format_percentage,
    _safe_numeric_convert, _safe_int_convert, MAX_AMOUNT, MAX_YEARS
)


class TestSafeConversion:
    """Test permissive numeric conversion"""

    def test_safe_numeric_convert(self):
        """Test valid and invalid values"""
        assert _safe_numeric_convert("50000", 0.0) == 50_000
        assert _safe_numeric_convert(" 1,250.50 ", 0.0) == 1_250.5
        assert _safe_numeric_convert("$2,500", 0.0) == 2_500
        assert _safe_numeric_convert(7, 0.0) == 7.0
        assert _safe_numeric_convert("", 3.0) == 3.0
        assert _safe_numeric_convert(None, 3.0) == 3.0
        assert _safe_numeric_convert("abc", 3.0) == 3.0
        assert _safe_numeric_convert("nan", 3.0) == 3.0
        assert _safe_numeric_convert(float('inf'), 3.0) == 3.0

    def test_safe_int_convert_truncates(self):
        """Test whole-number parsing"""
        assert _safe_int_convert("30", 0) == 30
        assert _safe_int_convert("30.7", 0) == 30
        assert _safe_int_convert("", 0) == 0
        assert _safe_int_convert("x", 5) == 5


class TestParseFormInputs:
    """Test form value parsing into ProjectionInputs"""

    def test_typical_form(self):
        """Test a fully filled-in form"""
        inputs = parse_form_inputs({
            'current_savings': '50000',
            'monthly_contribution': '1000',
            'annual_return_pct': '7',
            'years_to_retirement': '30',
            'nominal_return_pct': '10',
            'inflation_pct': '3',
            'social_security_monthly': '2500',
            'years_until_social_security': '35',
            'withdrawal_strategy': 'fixed_divisor',
            'retirement_duration_years': '25',
        })

        assert inputs.current_savings == 50_000
        assert inputs.monthly_contribution == 1_000
        assert inputs.annual_return_rate == pytest.approx(0.07)
        assert inputs.years_to_retirement == 30
        assert inputs.nominal_return_rate == pytest.approx(0.10)
        assert inputs.inflation_rate == pytest.approx(0.03)
        assert inputs.social_security_monthly == 2_500
        assert inputs.years_until_social_security == 35
        assert inputs.withdrawal_strategy == WithdrawalStrategyType.FIXED_DIVISOR
        assert inputs.retirement_duration_years == 25

    def test_empty_form_uses_neutral_defaults(self):
        """Test blank fields become zero amounts, default return and default duration"""
        inputs = parse_form_inputs({})

        assert inputs.current_savings == 0
        assert inputs.monthly_contribution == 0
        assert inputs.annual_return_rate == pytest.approx(0.07)
        assert inputs.years_to_retirement == 0
        assert inputs.nominal_return_rate is None
        assert inputs.inflation_rate is None
        assert inputs.social_security_monthly is None
        assert inputs.years_until_social_security is None
        assert inputs.withdrawal_strategy == WithdrawalStrategyType.FIXED_PERCENTAGE
        assert inputs.retirement_duration_years == 30

    def test_invalid_text_coerced(self):
        """Test garbage input never raises"""
        inputs = parse_form_inputs({
            'current_savings': 'lots',
            'monthly_contribution': '-500',
            'annual_return_pct': 'seven',
            'years_to_retirement': 'soon',
            'withdrawal_strategy': 'yolo',
            'retirement_duration_years': '0',
        })

        assert inputs.current_savings == 0
        assert inputs.monthly_contribution == 0
        assert inputs.annual_return_rate == pytest.approx(0.07)
        assert inputs.years_to_retirement == 0
        assert inputs.withdrawal_strategy == WithdrawalStrategyType.FIXED_PERCENTAGE
        assert inputs.retirement_duration_years == 30

    def test_zero_return_is_kept(self):
        """Test an explicit 0% return is not replaced by the default"""
        inputs = parse_form_inputs({'annual_return_pct': 0, 'current_savings': 100_000,
                                    'years_to_retirement': 10})

        assert inputs.annual_return_rate == 0.0
        assert run_projection(inputs).total_savings == 100_000

    def test_one_rate_missing_means_no_real_return(self):
        """Test that real rate is only computed when both rates are given"""
        inputs = parse_form_inputs({'nominal_return_pct': '10', 'inflation_pct': ''})

        assert inputs.inflation_rate is None
        assert run_projection(inputs).real_rate_of_return is None


class TestInputBounds:
    """Test that out-of-range form values are clamped before projecting"""

    def test_years_capped(self):
        """Test a very long horizon is clamped and projects to a finite balance"""
        inputs = parse_form_inputs({'current_savings': '50000', 'annual_return_pct': '7',
                                    'years_to_retirement': '20000',
                                    'years_until_social_security': '20000'})

        assert inputs.years_to_retirement == MAX_YEARS
        assert inputs.years_until_social_security == MAX_YEARS
        assert math.isfinite(run_projection(inputs).total_savings)

    def test_amounts_capped(self):
        """Test huge amounts are clamped and never displayed as infinity"""
        inputs = parse_form_inputs({'current_savings': '1e308', 'monthly_contribution': '1e308',
                                    'social_security_monthly': '1e308',
                                    'years_to_retirement': '30'})
        result = run_projection(inputs)

        assert inputs.current_savings == MAX_AMOUNT
        assert inputs.monthly_contribution == MAX_AMOUNT
        assert inputs.social_security_monthly == MAX_AMOUNT
        assert 'inf' not in format_currency(result.total_savings)
        assert 'inf' not in format_currency(result.social_security.total_monthly_income)

    def test_rates_capped(self):
        """Test percentages are limited to +/-100%"""
        inputs = parse_form_inputs({'annual_return_pct': '5000', 'nominal_return_pct': '-250',
                                    'inflation_pct': '3'})

        assert inputs.annual_return_rate == 1.0
        assert inputs.nominal_return_rate == -1.0
        assert inputs.inflation_rate == pytest.approx(0.03)

    def test_duration_capped(self):
        """Test the retirement duration never exceeds the year limit"""
        inputs = parse_form_inputs({'retirement_duration_years': '500'})

        assert inputs.retirement_duration_years == MAX_YEARS


class TestSerialization:
    """Test conversion of inputs and results to dictionaries"""

    def test_inputs_to_dict(self):
        """Test strategy is serialised as its value"""
        inputs = ProjectionInputs(current_savings=1_000,
                                  withdrawal_strategy=WithdrawalStrategyType.VALUATION_ADJUSTED)
        input_dict = inputs_to_dict(inputs)

        assert input_dict['current_savings'] == 1_000
        assert input_dict['withdrawal_strategy'] == 'valuation_adjusted'

    def test_result_to_dict_omits_unrequested_fields(self):
        """Test optional fields are dropped rather than shown as zero"""
        result = run_projection(ProjectionInputs(current_savings=1_000, years_to_retirement=1))
        result_dict = result_to_dict(result)

        assert 'real_rate_of_return' not in result_dict
        assert 'social_security' not in result_dict
        assert result_dict['total_savings'] == pytest.approx(1_070)

    def test_result_to_dict_nested_social_security(self):
        """Test Social Security income is serialised as a nested dict"""
        result = run_projection(ProjectionInputs(social_security_monthly=1_500))
        result_dict = result_to_dict(result)

        assert result_dict['social_security']['annual_social_security'] == 18_000


class TestExports:
    """Test CSV and JSON exports"""

    def test_export_year_by_year_csv(self):
        """Test year-by-year CSV export"""
        inputs = ProjectionInputs(current_savings=10_000, monthly_contribution=100,
                                  annual_return_rate=0.05, years_to_retirement=4)
        details = AccumulationProjector(inputs).run_projection().year_by_year_details

        csv_string = export_year_by_year_csv(details, "nominal")
        df = pd.read_csv(StringIO(csv_string))

        assert len(df) == 4
        assert 'year' in df.columns
        assert 'end_balance_nominal' in df.columns
        assert 'growth_nominal' in df.columns
        assert df['end_balance_nominal'].iloc[-1] == pytest.approx(details['end_balance'][-1])

    def test_summary_report(self):
        """Test summary report structure and JSON export"""
        inputs = ProjectionInputs(current_savings=50_000, monthly_contribution=1_000,
                                  annual_return_rate=0.07, years_to_retirement=30,
                                  nominal_return_rate=0.10, inflation_rate=0.03)
        result = run_projection(inputs)

        report = create_summary_report(inputs, result)
        assert 'report_generated' in report
        assert report['inputs']['years_to_retirement'] == 30
        assert report['results']['total_savings'] == pytest.approx(result.total_savings)
        assert report['display']['real_rate_of_return'] == "6.80%"
        assert report['display']['effective_withdrawal_rate'] == "4.0%"

        parsed = json.loads(export_summary_report_json(report))
        assert parsed['inputs']['withdrawal_strategy'] == 'fixed_percentage'
        assert parsed['results']['strategy_label'] == '4% Rule'


class TestFormatting:
    """Test display formatting"""

    def test_format_currency(self):
        """Test USD formatting with no decimals"""
        assert format_currency(1_600_583.4) == "$1,600,583"
        assert format_currency(5_335.5) == "$5,336"
        assert format_currency(0) == "$0"
        assert format_currency(-1_234) == "-$1,234"
        assert format_currency(7_835.333, precision=2) == "$7,835.33"

    def test_format_percentage(self):
        """Test percent formatting"""
        assert format_percentage(6.796116) == "6.80%"
        assert format_percentage(2.56, 1) == "2.6%"
