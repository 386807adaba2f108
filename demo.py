#!/usr/bin/env python3
"""
Demo script showing how to use the retirement projection modules programmatically.
This demonstrates the core functionality without the Streamlit UI.
"""

from projection import ProjectionInputs, run_projection
from withdrawal import WithdrawalStrategyType, compare_strategies
from deterministic import AccumulationProjector
from io_utils import create_summary_report, export_summary_report_json, format_currency, format_percentage


def main():
    print("🚀 Retirement Projection Demo")
    print("=" * 50)

    # 1. Create projection inputs
    print("\n📊 Setting up projection inputs...")
    inputs = ProjectionInputs(
        current_savings=50_000,
        monthly_contribution=1_000,
        annual_return_rate=0.07,
        years_to_retirement=30,
        nominal_return_rate=0.10,
        inflation_rate=0.03,
        social_security_monthly=2_500,
        years_until_social_security=35,
        withdrawal_strategy=WithdrawalStrategyType.FIXED_PERCENTAGE
    )

    print(f"   Current savings: {format_currency(inputs.current_savings)}")
    print(f"   Monthly contribution: {format_currency(inputs.monthly_contribution)}")
    print(f"   Expected return: {inputs.annual_return_rate:.1%} for {inputs.years_to_retirement} years")

    # 2. Run the projection
    print("\n📈 Results Summary:")
    result = run_projection(inputs)

    print(f"   Total retirement savings: {format_currency(result.total_savings)}")
    print(f"   Annual withdrawal ({result.strategy_label}): {format_currency(result.annual_withdrawal)}")
    print(f"   Monthly withdrawal: {format_currency(result.monthly_withdrawal)}")
    if result.real_rate_of_return is not None:
        print(f"   Real rate of return: {format_percentage(result.real_rate_of_return)}")
    if result.social_security is not None:
        print(f"   Total monthly income with Social Security: "
              f"{format_currency(result.social_security.total_monthly_income)}")

    # 3. Compare strategies
    print("\n⚖️  Strategy Comparison:")
    for strategy_type, withdrawal in compare_strategies(result.total_savings).items():
        print(f"   {withdrawal.label:<28} {format_currency(withdrawal.annual):>12}/yr "
              f"({withdrawal.rate:.1%})")

    # 4. Show some year-by-year details
    print("\n📋 Sample Year-by-Year Details (First 5 Years):")
    details = AccumulationProjector(inputs).run_projection().year_by_year_details
    print(f"   {'Year':<6} {'Start':<14} {'Growth':<12} {'End':<14}")
    print(f"   {'-'*6} {'-'*14} {'-'*12} {'-'*14}")

    for i in range(min(5, len(details['year']))):
        print(f"   {details['year'][i]:<6} {format_currency(details['start_balance'][i]):<14} "
              f"{format_currency(details['growth'][i]):<12} {format_currency(details['end_balance'][i]):<14}")

    # 5. Report export demo
    print("\n💾 Report Export Demo:")
    report_json = export_summary_report_json(create_summary_report(inputs, result))
    print(f"   Summary exported to JSON ({len(report_json)} characters)")

    print("\n✅ Demo completed successfully!")
    print("   To run the Streamlit UI: streamlit run app.py")
    print("   To run tests: python3 -m pytest tests/ -v")


if __name__ == "__main__":
    main()
