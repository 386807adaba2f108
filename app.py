"""
Streamlit web application for the retirement withdrawal estimator.
Collects savings and return assumptions, projects the retirement balance and
shows the sustainable withdrawal under the selected strategy.
"""
import logging
import streamlit as st
import numpy as np
import pandas as pd
from typing import Dict, Any, List, Optional, Tuple

# Import our modules
from projection import ProjectionInputs, ProjectionResult, run_projection
from withdrawal import WithdrawalStrategyType, compare_strategies
from deterministic import AccumulationProjector, convert_to_real, create_real_table
from charts import (
    create_balance_growth_chart, create_strategy_comparison_chart,
    create_income_breakdown_chart
)
from io_utils import (
    parse_form_inputs, export_year_by_year_csv, create_summary_report,
    export_summary_report_json, format_currency, format_percentage,
    MAX_AMOUNT, MAX_YEARS, MIN_RATE_PCT, MAX_RATE_PCT
)
from config_utils import (
    STRATEGY_OPTIONS, FOUR_PERCENT_RULE_EXPLAINER, configure_logging,
    get_form_defaults, get_form_widget_mappings
)

logger = logging.getLogger(__name__)


def initialize_session_state():
    """Initialize session state with form defaults and an empty result"""
    if 'form_defaults' not in st.session_state:
        st.session_state.form_defaults = get_form_defaults()
    if 'projection_inputs' not in st.session_state:
        st.session_state.projection_inputs = None
    if 'projection_result' not in st.session_state:
        st.session_state.projection_result = None


def collect_form_values(state: Dict[str, Any]) -> Dict[str, Any]:
    """Read raw widget values into a dictionary keyed by form field name"""
    return {field: state.get(widget_key)
            for widget_key, field in get_form_widget_mappings().items()}


def build_result_metrics(result: ProjectionResult) -> List[Tuple[str, str, Optional[str]]]:
    """Rows of (label, formatted value, caption) for the results panel"""
    metrics = [
        ("Total Retirement Savings", format_currency(result.total_savings), None),
        (f"Annual Withdrawal ({result.strategy_label})",
         format_currency(result.annual_withdrawal),
         f"{format_percentage(result.effective_withdrawal_rate * 100, 1)} of balance"),
        ("Monthly Withdrawal", format_currency(result.monthly_withdrawal), None),
    ]

    if result.real_rate_of_return is not None:
        metrics.append(("Your Real Rate of Return",
                        format_percentage(result.real_rate_of_return), None))

    ss = result.social_security
    if ss is not None:
        starting = (f"Starting in {ss.years_until_social_security} years"
                    if ss.years_until_social_security is not None else None)
        metrics.append(("Monthly Social Security",
                        format_currency(ss.monthly_social_security), starting))
        metrics.append(("Total Monthly Retirement Income",
                        format_currency(ss.total_monthly_income),
                        "Withdrawal + Social Security"))

    return metrics


def calculate_projection(form_values: Dict[str, Any]) -> Tuple[ProjectionInputs, ProjectionResult]:
    """Parse the submitted form and run the projection"""
    inputs = parse_form_inputs(form_values)
    result = run_projection(inputs)
    logger.info("Projection complete: balance %s, %s", format_currency(result.total_savings),
                result.strategy_label)
    return inputs, result


@st.dialog("About the 4% Rule")
def show_four_percent_rule():
    """Static explainer for the 4% rule"""
    st.markdown(FOUR_PERCENT_RULE_EXPLAINER)


def _default_float(value: Any, lower: float, upper: float) -> Optional[float]:
    try:
        return None if value is None else min(max(float(value), lower), upper)
    except (TypeError, ValueError):
        return None


def _default_int(value: Any, lower: int, upper: int,
                 fallback: Optional[int] = None) -> Optional[int]:
    try:
        return fallback if value is None else min(max(int(value), lower), upper)
    except (TypeError, ValueError):
        return fallback


def create_input_form():
    """Render the input form; returns True when the form was submitted"""
    defaults = st.session_state.form_defaults
    strategy_keys = [strategy_type.value for strategy_type in WithdrawalStrategyType]
    default_strategy = WithdrawalStrategyType.from_value(defaults['withdrawal_strategy']).value

    with st.form("projection_form"):
        st.subheader("Your Financial Information")

        col1, col2 = st.columns(2)
        with col1:
            st.number_input("Current Retirement Savings ($)", min_value=0.0, max_value=MAX_AMOUNT, step=1000.0,
                            value=_default_float(defaults['current_savings'], 0.0, MAX_AMOUNT), placeholder="e.g., 50000",
                            key="form_current_savings")
            st.number_input("Expected Annual Return (%)", min_value=MIN_RATE_PCT, max_value=MAX_RATE_PCT, step=0.1,
                            value=_default_float(defaults['annual_return_pct'], MIN_RATE_PCT, MAX_RATE_PCT), placeholder="e.g., 7",
                            key="form_annual_return")
        with col2:
            st.number_input("Monthly Contribution ($)", min_value=0.0, max_value=MAX_AMOUNT, step=100.0,
                            value=_default_float(defaults['monthly_contribution'], 0.0, MAX_AMOUNT), placeholder="e.g., 1000",
                            key="form_monthly_contribution")
            st.number_input("Years Until Retirement", min_value=0, max_value=MAX_YEARS, step=1,
                            value=_default_int(defaults['years_to_retirement'], 0, MAX_YEARS), placeholder="e.g., 30",
                            key="form_years_to_retirement")

        st.subheader("Withdrawal Strategy")
        col1, col2 = st.columns(2)
        with col1:
            st.selectbox("Strategy", strategy_keys,
                         index=strategy_keys.index(default_strategy),
                         format_func=lambda key: STRATEGY_OPTIONS[WithdrawalStrategyType(key)],
                         key="form_strategy")
        with col2:
            st.number_input("Retirement Duration (years)", min_value=1, max_value=MAX_YEARS, step=1,
                            value=_default_int(defaults['retirement_duration_years'], 1, MAX_YEARS, 30),
                            help="Used by the fixed duration strategy",
                            key="form_retirement_duration")

        st.subheader("Real Rate of Return Calculator")
        col1, col2 = st.columns(2)
        with col1:
            st.number_input("Nominal Annual Return (%)", min_value=MIN_RATE_PCT, max_value=MAX_RATE_PCT, step=0.1,
                            value=_default_float(defaults['nominal_return_pct'], MIN_RATE_PCT, MAX_RATE_PCT), placeholder="e.g., 10",
                            key="form_nominal_return")
        with col2:
            st.number_input("Expected Inflation Rate (%)", min_value=MIN_RATE_PCT, max_value=MAX_RATE_PCT, step=0.1,
                            value=_default_float(defaults['inflation_pct'], MIN_RATE_PCT, MAX_RATE_PCT), placeholder="e.g., 3",
                            key="form_inflation")

        st.subheader("Social Security Income")
        col1, col2 = st.columns(2)
        with col1:
            st.number_input("Monthly Social Security ($)", min_value=0.0, max_value=MAX_AMOUNT, step=100.0,
                            value=_default_float(defaults['social_security_monthly'], 0.0, MAX_AMOUNT), placeholder="e.g., 2500",
                            key="form_ss_monthly")
        with col2:
            st.number_input("Years Until Social Security Starts", min_value=0, max_value=MAX_YEARS, step=1,
                            value=_default_int(defaults['years_until_social_security'], 0, MAX_YEARS), placeholder="e.g., 35",
                            key="form_ss_years")

        return st.form_submit_button("Calculate Retirement", type="primary")


def display_results():
    """Display result metrics"""
    result = st.session_state.projection_result
    if result is None:
        return

    st.header("Your Retirement Projection")

    metrics = build_result_metrics(result)
    cols = st.columns(3)
    for i, (label, value, caption) in enumerate(metrics):
        with cols[i % 3]:
            st.metric(label, value)
            if caption:
                st.caption(caption)

    st.info(result.strategy_explanation)

    if st.button("About the 4% Rule"):
        show_four_percent_rule()


def display_charts():
    """Display interactive charts"""
    inputs = st.session_state.projection_inputs
    result = st.session_state.projection_result
    if result is None:
        return

    accumulation = AccumulationProjector(inputs).run_projection()
    years = np.arange(len(accumulation.balance_path))
    contributed = inputs.current_savings + inputs.monthly_contribution * 12 * years
    balance = accumulation.balance_path
    currency_format = "nominal"

    if inputs.inflation_rate is not None and st.toggle("Show in today's dollars"):
        balance = convert_to_real(balance, inputs.inflation_rate)
        contributed = convert_to_real(contributed, inputs.inflation_rate)
        currency_format = "real"

    st.subheader("Balance Growth")
    fig = create_balance_growth_chart(years, balance, contributed, currency_format=currency_format)
    st.plotly_chart(fig, width="stretch")

    st.subheader("Strategy Comparison")
    comparison = compare_strategies(result.total_savings, inputs.retirement_duration_years)
    fig = create_strategy_comparison_chart(comparison, selected=inputs.withdrawal_strategy)
    st.plotly_chart(fig, width="stretch")

    if result.social_security is not None:
        st.subheader("Income Mix")
        st.plotly_chart(create_income_breakdown_chart(result), width="stretch")


def display_year_by_year_table():
    """Display year-by-year accumulation table"""
    inputs = st.session_state.projection_inputs
    if st.session_state.projection_result is None:
        return

    st.header("Year-by-Year Accumulation")

    details = AccumulationProjector(inputs).run_projection().year_by_year_details
    if not details['year']:
        st.info("No accumulation years to show.")
        return

    currency_view = "Nominal"
    if inputs.inflation_rate is not None:
        currency_view = st.radio("Currency view", ["Nominal", "Real"], horizontal=True)
    if currency_view == "Real":
        details = create_real_table(details, inputs.inflation_rate)

    df = pd.DataFrame(details)
    currency_cols = [col for col in df.columns if col != 'year']
    for col in currency_cols:
        df[col] = df[col].apply(format_currency)

    st.dataframe(df, width="stretch")

    currency_suffix = currency_view.lower()
    st.download_button(
        label=f"Download Year-by-Year CSV ({currency_view})",
        data=export_year_by_year_csv(details, currency_suffix),
        file_name=f"year_by_year_{currency_suffix}.csv",
        mime="text/csv"
    )


def display_downloads():
    """Display download section"""
    if st.session_state.projection_result is None:
        return

    report = create_summary_report(st.session_state.projection_inputs,
                                   st.session_state.projection_result)
    st.download_button(
        label="Download Summary Report JSON",
        data=export_summary_report_json(report),
        file_name="retirement_projection.json",
        mime="application/json"
    )


def main():
    """Main application"""
    st.set_page_config(
        page_title="Retirement Withdrawal Estimator",
        page_icon="💰",
        layout="wide"
    )
    configure_logging()

    st.title("💰 4% Retirement Rule Calculator")
    st.markdown("Calculate how much you can safely withdraw in retirement")

    initialize_session_state()

    if create_input_form():
        inputs, result = calculate_projection(collect_form_values(st.session_state))
        st.session_state.projection_inputs = inputs
        st.session_state.projection_result = result

    tab1, tab2, tab3 = st.tabs(["Results", "Charts", "Year-by-Year"])

    with tab1:
        display_results()
        display_downloads()

    with tab2:
        display_charts()

    with tab3:
        display_year_by_year_table()

    st.markdown("---")
    st.markdown("Built with Streamlit • Estimates only, not financial advice")


if __name__ == "__main__":
    main()
