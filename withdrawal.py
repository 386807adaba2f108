"""
Withdrawal strategies for turning a projected retirement balance into an income.
Pure functions over tagged strategy variants, decoupled from UI.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)

DEFAULT_WITHDRAWAL_RATE = 0.04
DEFAULT_RETIREMENT_DURATION_YEARS = 30

# Shiller CAPE assumptions for the valuation-adjusted rate. These are fixed
# planning constants, not a live market feed.
CURRENT_CAPE_RATIO = 25.0
HISTORICAL_AVERAGE_CAPE = 16.0


class WithdrawalStrategyType(str, Enum):
    """Closed set of strategy selections offered by the form"""
    FIXED_PERCENTAGE = "fixed_percentage"
    FIXED_DIVISOR = "fixed_divisor"
    VALUATION_ADJUSTED = "valuation_adjusted"

    @classmethod
    def from_value(cls, value: Any) -> "WithdrawalStrategyType":
        """Resolve a selection, falling back to the percentage rule for anything unknown"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown withdrawal strategy %r, using %s", value, cls.FIXED_PERCENTAGE.value)
            return cls.FIXED_PERCENTAGE


@dataclass(frozen=True)
class FixedPercentage:
    """Withdraw a fixed share of the balance every year (the classic 4% rule)"""
    rate: float = DEFAULT_WITHDRAWAL_RATE


@dataclass(frozen=True)
class FixedDivisor:
    """Spread the balance evenly over a fixed number of retirement years"""
    duration_years: Any = DEFAULT_RETIREMENT_DURATION_YEARS


@dataclass(frozen=True)
class ValuationAdjusted:
    """Scale the base rate by how expensive the market is relative to history"""
    cape_ratio: float = CURRENT_CAPE_RATIO
    normal_cape: float = HISTORICAL_AVERAGE_CAPE
    base_rate: float = DEFAULT_WITHDRAWAL_RATE
    min_rate: float = 0.02
    max_rate: float = 0.06


WithdrawalStrategy = Union[FixedPercentage, FixedDivisor, ValuationAdjusted]


@dataclass(frozen=True)
class WithdrawalResult:
    """Withdrawal amounts and display text for one strategy"""
    annual: float
    monthly: float
    label: str
    explanation: str
    rate: float


def _format_pct(rate: float) -> str:
    return f"{rate * 100:g}"


def _effective_duration(duration_years: Any) -> float:
    """Duration used by the divisor strategy; anything non-positive or non-numeric becomes 30"""
    try:
        duration = float(duration_years)
    except (ValueError, TypeError):
        duration = float('nan')

    if not math.isfinite(duration) or duration <= 0:
        logger.debug("Invalid retirement duration %r, using %d years",
                     duration_years, DEFAULT_RETIREMENT_DURATION_YEARS)
        return float(DEFAULT_RETIREMENT_DURATION_YEARS)
    return duration


def _fixed_percentage(total_balance: float, strategy: FixedPercentage) -> WithdrawalResult:
    annual = total_balance * strategy.rate
    pct = _format_pct(strategy.rate)
    explanation = (
        f"The {pct}% rule suggests that you can safely withdraw {pct}% of your retirement "
        f"portfolio each year without running out of money for at least 30 years. This "
        f"calculation assumes your investments continue to grow during retirement."
    )
    return WithdrawalResult(
        annual=annual,
        monthly=annual / 12,
        label=f"{pct}% Rule",
        explanation=explanation,
        rate=strategy.rate
    )


def _fixed_divisor(total_balance: float, strategy: FixedDivisor) -> WithdrawalResult:
    duration = _effective_duration(strategy.duration_years)
    annual = total_balance / duration
    explanation = (
        f"Divides your projected savings evenly across {duration:g} years of retirement. "
        f"Each year you withdraw 1/{duration:g} of the balance at retirement, so the money "
        f"lasts exactly {duration:g} years even with no further growth."
    )
    return WithdrawalResult(
        annual=annual,
        monthly=annual / 12,
        label=f"Fixed {duration:g}-Year Drawdown",
        explanation=explanation,
        rate=1.0 / duration
    )


def _valuation_adjusted(total_balance: float, strategy: ValuationAdjusted) -> WithdrawalResult:
    if strategy.cape_ratio > 0:
        adjustment_factor = strategy.normal_cape / strategy.cape_ratio
    else:
        logger.warning("Non-positive CAPE ratio %r, using the unadjusted base rate", strategy.cape_ratio)
        adjustment_factor = 1.0

    adjusted_rate = strategy.base_rate * adjustment_factor
    adjusted_rate = min(max(adjusted_rate, strategy.min_rate), strategy.max_rate)

    annual = total_balance * adjusted_rate
    explanation = (
        f"Starts from a {_format_pct(strategy.base_rate)}% base rate and scales it by the "
        f"historical average CAPE ({strategy.normal_cape:g}) divided by today's CAPE "
        f"({strategy.cape_ratio:g}), bounded between {_format_pct(strategy.min_rate)}% and "
        f"{_format_pct(strategy.max_rate)}%. Your effective withdrawal rate is "
        f"{adjusted_rate * 100:.1f}%."
    )
    return WithdrawalResult(
        annual=annual,
        monthly=annual / 12,
        label="CAPE-Adjusted Rate",
        explanation=explanation,
        rate=adjusted_rate
    )


def compute_withdrawal(total_balance: float, strategy: Any = None) -> WithdrawalResult:
    """
    Compute the sustainable withdrawal for a retirement balance.

    Args:
        total_balance: Projected balance at retirement
        strategy: FixedPercentage, FixedDivisor or ValuationAdjusted instance.
            Anything else falls back to the 4% rule.

    Returns:
        WithdrawalResult with annual/monthly amounts and display text
    """
    if isinstance(strategy, FixedDivisor):
        return _fixed_divisor(total_balance, strategy)
    elif isinstance(strategy, ValuationAdjusted):
        return _valuation_adjusted(total_balance, strategy)
    elif isinstance(strategy, FixedPercentage):
        return _fixed_percentage(total_balance, strategy)
    else:
        return _fixed_percentage(total_balance, FixedPercentage())


def build_strategy(strategy_type: Any,
                   retirement_duration_years: Any = DEFAULT_RETIREMENT_DURATION_YEARS) -> WithdrawalStrategy:
    """Map a form selection to its strategy variant with default parameters"""
    strategy_type = WithdrawalStrategyType.from_value(strategy_type)

    if strategy_type == WithdrawalStrategyType.FIXED_DIVISOR:
        return FixedDivisor(duration_years=retirement_duration_years)
    elif strategy_type == WithdrawalStrategyType.VALUATION_ADJUSTED:
        return ValuationAdjusted()
    else:
        return FixedPercentage()


def compare_strategies(total_balance: float,
                       retirement_duration_years: Any = DEFAULT_RETIREMENT_DURATION_YEARS
                       ) -> Dict[WithdrawalStrategyType, WithdrawalResult]:
    """Evaluate every strategy against the same balance for side-by-side display"""
    return {
        strategy_type: compute_withdrawal(
            total_balance, build_strategy(strategy_type, retirement_duration_years))
        for strategy_type in WithdrawalStrategyType
    }
