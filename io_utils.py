"""
IO utilities for reading form values and exporting projection results.
Handles permissive parsing of raw form input, JSON summaries and CSV exports.
"""
import json
import logging
import math
import pandas as pd
from typing import Dict, Any, List, Optional
from dataclasses import asdict
from datetime import datetime

from projection import ProjectionInputs, ProjectionResult, DEFAULT_ANNUAL_RETURN_RATE
from withdrawal import WithdrawalStrategyType, DEFAULT_RETIREMENT_DURATION_YEARS

logger = logging.getLogger(__name__)

# Form bounds; values outside are clamped when parsed
MAX_AMOUNT = 1e12
MAX_YEARS = 100
MIN_RATE_PCT = -100.0
MAX_RATE_PCT = 100.0


def _to_float(value: Any) -> Optional[float]:
    """Parse a raw form value into a finite float, or None when it is blank or invalid"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(',', '').replace('$', '').rstrip('%')
        if not value:
            return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        logger.debug("Could not parse %r as a number", value)
        return None
    return number if math.isfinite(number) else None


def _safe_numeric_convert(value: Any, default: float) -> float:
    """Safely convert a value to a numeric type, using default if invalid"""
    number = _to_float(value)
    return default if number is None else number


def _safe_int_convert(value: Any, default: int) -> int:
    """Safely convert a value to a whole number, truncating fractions"""
    number = _to_float(value)
    return default if number is None else int(number)


def _clamp(value, lower, upper):
    if value < lower or value > upper:
        logger.debug("Clamping %r to [%r, %r]", value, lower, upper)
    return min(max(value, lower), upper)


def _safe_amount(value: Any) -> float:
    """Currency amount: blank, invalid or negative input counts as zero"""
    return _clamp(_safe_numeric_convert(value, 0.0), 0.0, MAX_AMOUNT)


def _optional_percentage(value: Any) -> Optional[float]:
    """Percent value from the form as a fraction, or None when not supplied"""
    number = _to_float(value)
    return None if number is None else _clamp(number, MIN_RATE_PCT, MAX_RATE_PCT) / 100


def parse_form_inputs(form_values: Dict[str, Any]) -> ProjectionInputs:
    """
    Convert raw form values into ProjectionInputs.

    Parsing is permissive: amounts fall back to 0, the expected return to the
    default rate, the retirement duration to 30 years, and optional fields to
    None. Amounts are capped at MAX_AMOUNT, year counts at MAX_YEARS and
    percentages to [MIN_RATE_PCT, MAX_RATE_PCT] so projections stay finite.
    Percent fields are converted to fractions.

    Args:
        form_values: Dictionary keyed by form field name

    Returns:
        ProjectionInputs object
    """
    annual_return_pct = _clamp(_safe_numeric_convert(
        form_values.get('annual_return_pct'), DEFAULT_ANNUAL_RETURN_RATE * 100),
        MIN_RATE_PCT, MAX_RATE_PCT)

    retirement_duration_years = _safe_int_convert(
        form_values.get('retirement_duration_years'), DEFAULT_RETIREMENT_DURATION_YEARS)
    if retirement_duration_years <= 0:
        retirement_duration_years = DEFAULT_RETIREMENT_DURATION_YEARS
    retirement_duration_years = min(retirement_duration_years, MAX_YEARS)

    ss_monthly = _to_float(form_values.get('social_security_monthly'))
    ss_years = _to_float(form_values.get('years_until_social_security'))

    return ProjectionInputs(
        current_savings=_safe_amount(form_values.get('current_savings')),
        monthly_contribution=_safe_amount(form_values.get('monthly_contribution')),
        annual_return_rate=annual_return_pct / 100,
        years_to_retirement=_clamp(
            _safe_int_convert(form_values.get('years_to_retirement'), 0), 0, MAX_YEARS),
        nominal_return_rate=_optional_percentage(form_values.get('nominal_return_pct')),
        inflation_rate=_optional_percentage(form_values.get('inflation_pct')),
        social_security_monthly=None if ss_monthly is None else _clamp(ss_monthly, 0.0, MAX_AMOUNT),
        years_until_social_security=None if ss_years is None else _clamp(int(ss_years), 0, MAX_YEARS),
        withdrawal_strategy=WithdrawalStrategyType.from_value(form_values.get('withdrawal_strategy')),
        retirement_duration_years=retirement_duration_years
    )


def inputs_to_dict(inputs: ProjectionInputs) -> Dict[str, Any]:
    """Convert ProjectionInputs to a JSON-friendly dictionary"""
    input_dict = asdict(inputs)
    input_dict['withdrawal_strategy'] = inputs.withdrawal_strategy.value
    return input_dict


def result_to_dict(result: ProjectionResult) -> Dict[str, Any]:
    """Convert ProjectionResult to a dictionary, dropping fields that were not requested"""
    result_dict = asdict(result)
    for key in ('real_rate_of_return', 'social_security'):
        if result_dict[key] is None:
            del result_dict[key]
    return result_dict


def export_year_by_year_csv(details: Dict[str, List],
                            currency_format: str = "nominal") -> str:
    """
    Export the year-by-year accumulation table to CSV string.

    Args:
        details: Dictionary with year-by-year details
        currency_format: "nominal" or "real" for column naming

    Returns:
        CSV string
    """
    df = pd.DataFrame(details)

    currency_columns = [
        'start_balance', 'contributions', 'growth', 'end_balance', 'total_contributed'
    ]

    rename_dict = {}
    for col in currency_columns:
        if col in df.columns:
            rename_dict[col] = f'{col}_{currency_format}'

    df = df.rename(columns=rename_dict)

    return df.to_csv(index=False)


def create_summary_report(inputs: ProjectionInputs,
                          result: ProjectionResult) -> Dict[str, Any]:
    """
    Create a summary report of one projection.

    Args:
        inputs: Inputs used for the projection
        result: Projection result

    Returns:
        Dictionary with report data
    """
    return {
        'report_generated': datetime.now().isoformat(),
        'inputs': inputs_to_dict(inputs),
        'results': result_to_dict(result),
        'display': {
            'total_savings': format_currency(result.total_savings),
            'annual_withdrawal': format_currency(result.annual_withdrawal),
            'monthly_withdrawal': format_currency(result.monthly_withdrawal),
            'effective_withdrawal_rate': format_percentage(result.effective_withdrawal_rate * 100, 1),
            'real_rate_of_return': (
                format_percentage(result.real_rate_of_return)
                if result.real_rate_of_return is not None else None
            ),
        }
    }


def export_summary_report_json(report: Dict[str, Any]) -> str:
    """
    Export summary report to JSON string.

    Args:
        report: Report dictionary

    Returns:
        JSON string
    """
    return json.dumps(report, indent=2, default=str)


def format_currency(value: float, precision: int = 0) -> str:
    """
    Format a dollar amount for display, e.g. 1600583.4 -> "$1,600,583".

    Args:
        value: Numeric value to format
        precision: Number of decimal places

    Returns:
        Formatted string
    """
    if value < 0:
        return f"-${abs(value):,.{precision}f}"
    return f"${value:,.{precision}f}"


def format_percentage(value: float, precision: int = 2) -> str:
    """Format a value already expressed in percent, e.g. 6.796 -> "6.80%" """
    return f"{value:.{precision}f}%"
