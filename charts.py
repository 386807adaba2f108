"""
Plotly chart builders for retirement projection visualizations.
Creates interactive charts for balance growth, strategy comparison and income mix.
"""
import plotly.graph_objects as go
import numpy as np
from typing import Dict, Optional

from projection import ProjectionResult
from withdrawal import WithdrawalStrategyType, WithdrawalResult


def create_balance_growth_chart(years: np.ndarray,
                                balance_path: np.ndarray,
                                contributed_path: np.ndarray,
                                chart_type: str = "stacked",
                                title: str = "Projected Balance Growth",
                                currency_format: str = "nominal") -> go.Figure:
    """
    Create chart showing how contributions and investment growth build the balance.

    Args:
        years: Array of years from today (0 = now)
        balance_path: Projected balance at each year
        contributed_path: Cumulative amount paid in (savings plus contributions)
        chart_type: "stacked" for contributions vs growth areas, "line" for balance only
        title: Chart title
        currency_format: "nominal" or "real" for axis labels

    Returns:
        Plotly figure
    """
    balance_thousands = np.asarray(balance_path, dtype=float) / 1000
    contributed_thousands = np.asarray(contributed_path, dtype=float) / 1000
    growth_thousands = np.maximum(balance_thousands - contributed_thousands, 0)

    fig = go.Figure()

    if chart_type == "stacked":
        fig.add_trace(go.Scatter(
            x=years,
            y=contributed_thousands,
            mode='lines',
            stackgroup='one',
            name='Amount Contributed',
            line=dict(width=0.5),
            fillcolor='lightblue',
            hovertemplate="<b>Contributed</b><br>" +
                         "<b>Year:</b> %{x}<br>" +
                         "<b>Amount:</b> $%{y:,.0f}K<br>" +
                         "<extra></extra>"
        ))
        fig.add_trace(go.Scatter(
            x=years,
            y=growth_thousands,
            mode='lines',
            stackgroup='one',
            name='Investment Growth',
            line=dict(width=0.5),
            fillcolor='lightgreen',
            hovertemplate="<b>Growth</b><br>" +
                         "<b>Year:</b> %{x}<br>" +
                         "<b>Amount:</b> $%{y:,.0f}K<br>" +
                         "<extra></extra>"
        ))
    elif chart_type == "line":
        fig.add_trace(go.Scatter(
            x=years,
            y=balance_thousands,
            mode='lines+markers',
            name='Balance',
            line=dict(color='darkblue', width=3),
            marker=dict(size=4),
            hovertemplate="<b>Year:</b> %{x}<br>" +
                         "<b>Balance:</b> $%{y:,.0f}K<br>" +
                         "<extra></extra>"
        ))
    else:
        raise ValueError(f"Unknown chart type: {chart_type}")

    currency_label = "Real" if currency_format == "real" else "Nominal"
    fig.update_layout(
        title=f"{title} ({currency_label} Dollars)",
        xaxis_title="Years From Today",
        yaxis_title=f"Balance ({currency_label} $000s)",
        template="plotly_white",
        hovermode="x unified",
        legend=dict(x=0.02, y=0.98)
    )

    return fig


def create_strategy_comparison_chart(comparison: Dict[WithdrawalStrategyType, WithdrawalResult],
                                     selected: Optional[WithdrawalStrategyType] = None,
                                     title: str = "Annual Withdrawal by Strategy") -> go.Figure:
    """
    Create bar chart comparing annual withdrawals across strategies.

    Args:
        comparison: Strategy results keyed by strategy type
        selected: Strategy to highlight
        title: Chart title

    Returns:
        Plotly figure
    """
    labels = [result.label for result in comparison.values()]
    annual = [result.annual for result in comparison.values()]
    rates = [result.rate * 100 for result in comparison.values()]
    colors = ['darkblue' if strategy_type == selected else 'lightsteelblue'
              for strategy_type in comparison]

    fig = go.Figure(data=[go.Bar(
        x=labels,
        y=annual,
        marker_color=colors,
        customdata=rates,
        text=[f"${value:,.0f}" for value in annual],
        textposition='outside',
        hovertemplate="<b>%{x}</b><br>" +
                     "<b>Annual:</b> $%{y:,.0f}<br>" +
                     "<b>Rate:</b> %{customdata:.1f}%<br>" +
                     "<extra></extra>"
    )])

    fig.update_layout(
        title=title,
        xaxis_title="Strategy",
        yaxis_title="Annual Withdrawal ($)",
        template="plotly_white",
        showlegend=False
    )

    return fig


def create_income_breakdown_chart(result: ProjectionResult,
                                  title: str = "Monthly Retirement Income") -> go.Figure:
    """Create donut chart splitting monthly income between withdrawals and Social Security"""
    labels = ['Portfolio Withdrawal']
    values = [result.monthly_withdrawal]
    colors = ['#45B7D1']

    if result.social_security is not None:
        labels.append('Social Security')
        values.append(result.social_security.monthly_social_security)
        colors.append('#96CEB4')

    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=values,
        hole=0.4,
        marker_colors=colors,
        textinfo='label+percent',
        textposition='outside',
        hovertemplate="<b>%{label}</b><br>$%{value:,.0f}/month<extra></extra>"
    )])

    fig.update_layout(
        title=title,
        font=dict(size=14),
        height=400,
        showlegend=False
    )

    return fig
