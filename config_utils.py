"""
Configuration Utilities for the Retirement Withdrawal Estimator
Default form values, strategy labels, widget mappings and optional
ui_config.json overrides.
"""

import json
import logging
import os
from typing import Dict, Any

from withdrawal import WithdrawalStrategyType, DEFAULT_RETIREMENT_DURATION_YEARS

logger = logging.getLogger(__name__)

UI_CONFIG_PATH = 'ui_config.json'

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Set up root logging once; later calls are no-ops"""
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)


# Display labels for the strategy select box
STRATEGY_OPTIONS = {
    WithdrawalStrategyType.FIXED_PERCENTAGE: "4% Rule (fixed percentage)",
    WithdrawalStrategyType.FIXED_DIVISOR: "Fixed duration (balance ÷ years)",
    WithdrawalStrategyType.VALUATION_ADJUSTED: "CAPE-adjusted rate",
}


FOUR_PERCENT_RULE_EXPLAINER = """
The **4% rule** comes from studies of historical US market returns (most famously
the 1994 Bengen paper and the 1998 Trinity study). A retiree who withdrew 4% of
their starting portfolio in the first year, then kept that amount level, did not
run out of money over any 30-year period in the data.

- It is a rule of thumb, not a guarantee.
- It assumes a balanced stock/bond portfolio that keeps growing in retirement.
- Longer retirements or expensive markets argue for a lower rate.
"""


def get_default_form_values() -> Dict[str, Any]:
    """Get default form values (percent fields in percent, blanks as None)"""
    return {
        'current_savings': None,
        'monthly_contribution': None,
        'annual_return_pct': 7.0,
        'years_to_retirement': None,

        # Real rate of return
        'nominal_return_pct': None,
        'inflation_pct': None,

        # Social Security
        'social_security_monthly': None,
        'years_until_social_security': None,

        # Withdrawal strategy
        'withdrawal_strategy': WithdrawalStrategyType.FIXED_PERCENTAGE.value,
        'retirement_duration_years': DEFAULT_RETIREMENT_DURATION_YEARS,
    }


def get_form_widget_mappings() -> Dict[str, str]:
    """Get mapping from Streamlit widget keys to form field names"""
    return {
        'form_current_savings': 'current_savings',
        'form_monthly_contribution': 'monthly_contribution',
        'form_annual_return': 'annual_return_pct',
        'form_years_to_retirement': 'years_to_retirement',
        'form_nominal_return': 'nominal_return_pct',
        'form_inflation': 'inflation_pct',
        'form_ss_monthly': 'social_security_monthly',
        'form_ss_years': 'years_until_social_security',
        'form_strategy': 'withdrawal_strategy',
        'form_retirement_duration': 'retirement_duration_years',
    }


def load_ui_config(path: str = UI_CONFIG_PATH) -> Dict[str, Any]:
    """Load UI configuration overrides from a JSON file"""
    if not os.path.exists(path):
        logger.debug("No UI config at %s", path)
        return {}

    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return {}

    if not isinstance(config, dict):
        logger.warning("Ignoring %s: expected a JSON object, got %s", path, type(config).__name__)
        return {}

    logger.info("Loaded UI config from %s with %d keys", path, len(config))
    return config


def get_form_defaults(path: str = UI_CONFIG_PATH) -> Dict[str, Any]:
    """Default form values with any ui_config.json overrides applied"""
    defaults = get_default_form_values()
    overrides = load_ui_config(path).get('form_defaults', {})

    if not isinstance(overrides, dict):
        logger.warning("Ignoring form_defaults in %s: expected a JSON object", path)
        return defaults

    for key, value in overrides.items():
        if key in defaults:
            defaults[key] = value
        else:
            logger.warning("Ignoring unknown form default %r", key)

    return defaults
