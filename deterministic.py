"""
Year-by-year accumulation schedule for a retirement projection.
Provides the balance path behind the closed-form total, for charts and tables.
"""
import numpy as np
from typing import Dict, List
from dataclasses import dataclass
from projection import ProjectionInputs, compute_future_value, compute_annuity_future_value


@dataclass
class AccumulationResults:
    """Results from the accumulation schedule"""
    balance_path: np.ndarray
    savings_path: np.ndarray
    contributions_path: np.ndarray
    year_by_year_details: Dict


class AccumulationProjector:
    """Year-by-year growth of savings and contributions up to retirement"""

    def __init__(self, inputs: ProjectionInputs):
        self.inputs = inputs

    @property
    def years(self) -> int:
        return max(0, int(self.inputs.years_to_retirement))

    def run_projection(self) -> AccumulationResults:
        """Run the accumulation schedule"""
        savings_path = np.zeros(self.years + 1)
        contributions_path = np.zeros(self.years + 1)

        # Each point is the closed-form value for a shorter horizon, so the last
        # point always matches compute_total_balance.
        for year in range(self.years + 1):
            savings_path[year] = compute_future_value(
                self.inputs.current_savings, self.inputs.annual_return_rate, year)
            contributions_path[year] = compute_annuity_future_value(
                self.inputs.monthly_contribution, self.inputs.annual_return_rate, year)

        balance_path = savings_path + contributions_path
        annual_contribution = self.inputs.monthly_contribution * 12

        details = {
            'year': [],
            'start_balance': [],
            'contributions': [],
            'growth': [],
            'end_balance': [],
            'total_contributed': []
        }

        for year in range(1, self.years + 1):
            start_balance = balance_path[year - 1]
            end_balance = balance_path[year]

            details['year'].append(year)
            details['start_balance'].append(float(start_balance))
            details['contributions'].append(annual_contribution)
            details['growth'].append(float(end_balance - start_balance - annual_contribution))
            details['end_balance'].append(float(end_balance))
            details['total_contributed'].append(
                self.inputs.current_savings + annual_contribution * year)

        return AccumulationResults(
            balance_path=balance_path,
            savings_path=savings_path,
            contributions_path=contributions_path,
            year_by_year_details=details
        )


def convert_to_real(nominal_values: np.ndarray,
                    inflation_rate: float = 0.03) -> np.ndarray:
    """
    Convert nominal values to today's dollars using compound inflation.

    Args:
        nominal_values: Array of nominal dollar values, one per year starting at year 0
        inflation_rate: Annual inflation rate

    Returns:
        Array of real dollar values
    """
    if inflation_rate <= -1:
        return np.asarray(nominal_values, dtype=float)

    years = len(nominal_values)
    deflators = np.array([(1 + inflation_rate) ** t for t in range(years)])
    return np.asarray(nominal_values, dtype=float) / deflators


def create_real_table(details: Dict[str, List],
                      inflation_rate: float = 0.03) -> Dict[str, List]:
    """
    Create a today's-dollars version of the year-by-year details table.

    Args:
        details: Year-by-year details dictionary in nominal dollars
        inflation_rate: Annual inflation rate

    Returns:
        Dictionary with real values
    """
    real_details = {}

    # Fields that need inflation adjustment
    currency_fields = [
        'start_balance', 'contributions', 'growth', 'end_balance', 'total_contributed'
    ]

    for field in currency_fields:
        if field in details:
            nominal_values = np.array(details[field], dtype=float)
            if inflation_rate <= -1:
                real_details[field] = nominal_values.tolist()
                continue
            deflators = (1 + inflation_rate) ** np.array(details['year'])
            real_details[field] = (nominal_values / deflators).tolist()

    if 'year' in details:
        real_details['year'] = details['year']

    return real_details
