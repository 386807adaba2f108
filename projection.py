"""
Retirement projection engine.
Closed-form accumulation of savings and contributions, plus the withdrawal,
real-return and Social Security figures derived from the projected balance.
Pure functions, decoupled from UI.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from withdrawal import (
    WithdrawalStrategyType, DEFAULT_RETIREMENT_DURATION_YEARS,
    build_strategy, compute_withdrawal
)

logger = logging.getLogger(__name__)

DEFAULT_ANNUAL_RETURN_RATE = 0.07

# Projected amounts beyond this are reported at the cap so results stay finite.
MAX_PROJECTED_BALANCE = 1e15


@dataclass(frozen=True)
class ProjectionInputs:
    """Validated inputs for one projection (rates as fractions)"""
    current_savings: float = 0.0
    monthly_contribution: float = 0.0
    annual_return_rate: float = DEFAULT_ANNUAL_RETURN_RATE
    years_to_retirement: int = 0

    # Real rate of return (None = not requested)
    nominal_return_rate: Optional[float] = None
    inflation_rate: Optional[float] = None

    # Social Security (None = not requested)
    social_security_monthly: Optional[float] = None
    years_until_social_security: Optional[int] = None

    # Withdrawal strategy
    withdrawal_strategy: WithdrawalStrategyType = WithdrawalStrategyType.FIXED_PERCENTAGE
    retirement_duration_years: int = DEFAULT_RETIREMENT_DURATION_YEARS


@dataclass(frozen=True)
class SocialSecurityIncome:
    """Retirement income once Social Security is added to portfolio withdrawals"""
    monthly_social_security: float
    annual_social_security: float
    total_annual_income: float
    total_monthly_income: float
    years_until_social_security: Optional[int] = None


@dataclass(frozen=True)
class ProjectionResult:
    """Results of one projection"""
    total_savings: float
    future_value_savings: float
    future_value_contributions: float
    annual_withdrawal: float
    monthly_withdrawal: float
    effective_withdrawal_rate: float
    strategy_label: str
    strategy_explanation: str
    real_rate_of_return: Optional[float] = None
    social_security: Optional[SocialSecurityIncome] = None


def _bounded(value: float) -> float:
    """Keep a projected amount finite: NaN becomes 0, anything past the cap is clamped"""
    if math.isnan(value):
        logger.warning("Projected amount is undefined, using 0")
        return 0.0
    if abs(value) > MAX_PROJECTED_BALANCE:
        logger.warning("Projected amount %.3g exceeds the %.0e cap", value, MAX_PROJECTED_BALANCE)
        return math.copysign(MAX_PROJECTED_BALANCE, value)
    return value


def _growth_rate(annual_return_rate: float) -> float:
    """Return rate to compound with; a total loss or worse is treated as zero growth"""
    if annual_return_rate <= -1:
        logger.warning("Annual return rate %.4f is at or below -100%%, treating as zero growth",
                       annual_return_rate)
        return 0.0
    return annual_return_rate


def compute_future_value(current_savings: float,
                         annual_return_rate: float,
                         years_to_retirement: int) -> float:
    """
    Project a lump sum forward with annual compounding.

    Args:
        current_savings: Present balance
        annual_return_rate: Expected annual return as a fraction (0.07 = 7%)
        years_to_retirement: Whole years of growth (negative values count as 0)

    Returns:
        Balance at retirement
    """
    years = max(0, int(years_to_retirement))
    if years == 0 or current_savings == 0:
        return current_savings

    rate = _growth_rate(annual_return_rate)
    try:
        growth_factor = (1 + rate) ** years
    except OverflowError:
        growth_factor = math.inf
    return _bounded(current_savings * growth_factor)


def compute_annuity_future_value(monthly_contribution: float,
                                 annual_return_rate: float,
                                 years_to_retirement: int) -> float:
    """
    Future value of a level monthly contribution, compounded monthly.

    Args:
        monthly_contribution: Amount added at the end of every month
        annual_return_rate: Expected annual return as a fraction
        years_to_retirement: Whole years of contributions

    Returns:
        Value of all contributions at retirement
    """
    total_months = max(0, int(years_to_retirement)) * 12
    monthly_rate = _growth_rate(annual_return_rate) / 12

    if monthly_rate == 0 or monthly_contribution == 0:
        return _bounded(monthly_contribution * total_months)

    try:
        annuity_factor = ((1 + monthly_rate) ** total_months - 1) / monthly_rate
    except OverflowError:
        annuity_factor = math.inf
    return _bounded(monthly_contribution * annuity_factor)


def compute_total_balance(inputs: ProjectionInputs) -> float:
    """Projected retirement balance: grown savings plus accumulated contributions"""
    return _bounded(
        compute_future_value(inputs.current_savings, inputs.annual_return_rate,
                             inputs.years_to_retirement)
        + compute_annuity_future_value(inputs.monthly_contribution, inputs.annual_return_rate,
                                       inputs.years_to_retirement)
    )


def compute_real_rate_of_return(nominal_rate: Optional[float],
                                inflation_rate: Optional[float]) -> Optional[float]:
    """
    Inflation-adjusted return (Fisher equation), in percent.

    Returns None when either rate is missing, so an unrequested calculation is
    never shown as 0%. An inflation rate of -100% is undefined and also gives None.
    """
    if nominal_rate is None or inflation_rate is None:
        return None
    if not (math.isfinite(nominal_rate) and math.isfinite(inflation_rate)):
        return None
    if inflation_rate == -1:
        logger.warning("Inflation rate of -100% has no defined real return")
        return None

    real_rate = ((1 + nominal_rate) / (1 + inflation_rate) - 1) * 100
    return real_rate if math.isfinite(real_rate) else None


def compute_social_security_income(monthly_benefit: Optional[float],
                                   annual_withdrawal: float,
                                   years_until_social_security: Optional[int] = None
                                   ) -> Optional[SocialSecurityIncome]:
    """Combine a monthly Social Security benefit with the portfolio withdrawal"""
    if monthly_benefit is None or not monthly_benefit > 0:
        return None

    monthly_benefit = _bounded(monthly_benefit)
    annual_social_security = _bounded(monthly_benefit * 12)
    total_annual_income = _bounded(annual_withdrawal + annual_social_security)

    return SocialSecurityIncome(
        monthly_social_security=monthly_benefit,
        annual_social_security=annual_social_security,
        total_annual_income=total_annual_income,
        total_monthly_income=total_annual_income / 12,
        years_until_social_security=years_until_social_security
    )


def run_projection(inputs: ProjectionInputs) -> ProjectionResult:
    """Run the full projection for one set of inputs"""
    future_value_savings = compute_future_value(
        inputs.current_savings, inputs.annual_return_rate, inputs.years_to_retirement)
    future_value_contributions = compute_annuity_future_value(
        inputs.monthly_contribution, inputs.annual_return_rate, inputs.years_to_retirement)
    total_savings = _bounded(future_value_savings + future_value_contributions)

    strategy = build_strategy(inputs.withdrawal_strategy, inputs.retirement_duration_years)
    withdrawal = compute_withdrawal(total_savings, strategy)

    logger.debug("Projected %.2f over %s years, %s withdrawal %.2f/yr",
                 total_savings, inputs.years_to_retirement, withdrawal.label, withdrawal.annual)

    return ProjectionResult(
        total_savings=total_savings,
        future_value_savings=future_value_savings,
        future_value_contributions=future_value_contributions,
        annual_withdrawal=withdrawal.annual,
        monthly_withdrawal=withdrawal.monthly,
        effective_withdrawal_rate=withdrawal.rate,
        strategy_label=withdrawal.label,
        strategy_explanation=withdrawal.explanation,
        real_rate_of_return=compute_real_rate_of_return(
            inputs.nominal_return_rate, inputs.inflation_rate),
        social_security=compute_social_security_income(
            inputs.social_security_monthly, withdrawal.annual,
            inputs.years_until_social_security)
    )
