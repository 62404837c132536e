"""
Chart functions for visualizing cash-flow forecasts.

All chart functions take the frames produced by ``ForecastResult.daily_frame``
and ``ForecastResult.monthly_frame`` and return ``(figure, tidy_dataframe_used)``
for consistency.
"""

from __future__ import annotations

import pandas as pd

# Plotly imports with graceful fallback
try:
    import plotly.graph_objects as go

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False


def _check_plotly() -> None:
    """Check if Plotly is available and raise helpful error if not."""
    if not PLOTLY_AVAILABLE:
        raise ImportError(
            "Plotly is required for chart functions. Install with:\n"
            "pip install plotly\n"
            "or\n"
            "pip install 'settlelab[viz]'"
        )


def cash_balance_vs_time(
    daily: pd.DataFrame, today=None
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot the projected bank balance day by day.

    Draws the reconciled balance as a line, daily inflows and outflows as bars,
    and an optional vertical marker on ``today``.

    **Args:**
        daily: Frame from ``daily_frame`` (DatetimeIndex)
        today: Optional anchor day to mark on the chart

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used)

    **Example:**
        ```python
        result = forecast.run(preset_range("month", today))
        fig, data = cash_balance_vs_time(result.daily_frame(), today=result.today)
        fig.show()
        ```
    """
    _check_plotly()

    tidy = daily.reset_index()
    balance = tidy["reconciled_balance"].fillna(tidy["cumulative_balance"])

    fig = go.Figure()
    fig.add_trace(go.Bar(x=tidy["date"], y=tidy["total_in"], name="Entradas"))
    fig.add_trace(go.Bar(x=tidy["date"], y=-tidy["total_out"], name="Saídas"))
    fig.add_trace(
        go.Scatter(x=tidy["date"], y=balance, name="Saldo", mode="lines+markers")
    )
    if today is not None:
        fig.add_vline(x=pd.Timestamp(today), line_dash="dash", line_color="gray")

    fig.update_layout(
        title="Fluxo de caixa previsto",
        xaxis_title="Data",
        yaxis_title="Valor",
        barmode="relative",
        hovermode="x unified",
    )
    return fig, tidy


def monthly_cashflow_bars(monthly: pd.DataFrame) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot monthly inflows vs outflows with the projected bank balance.

    **Args:**
        monthly: Frame from ``monthly_frame`` (monthly PeriodIndex)

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used)
    """
    _check_plotly()

    tidy = monthly.reset_index()
    tidy["month"] = tidy["month"].astype(str)

    fig = go.Figure()
    fig.add_trace(go.Bar(x=tidy["month"], y=tidy["total_in"], name="Receitas"))
    fig.add_trace(go.Bar(x=tidy["month"], y=tidy["total_out"], name="Despesas"))
    if tidy["bank_balance"].notna().any():
        fig.add_trace(
            go.Scatter(
                x=tidy["month"],
                y=tidy["bank_balance"],
                name="Saldo banco",
                mode="lines+markers",
            )
        )
    fig.update_layout(
        title="Fluxo previsto (mensal)",
        xaxis_title="Mês",
        yaxis_title="Valor",
        barmode="group",
    )
    return fig, tidy
