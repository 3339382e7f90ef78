"""Plotly visualisation helpers for FinTrack.

Each function accepts a chart series produced by :mod:`fintrack.reports`
(``{'labels': [...], 'datasets': [{'data': [...], ...}]}``) and returns a
``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.  Empty series produce a placeholder figure titled
"No data to display" instead of an empty axis.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .config import CURRENCY_SYMBOL


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def _series(chart: Dict[str, Any]) -> Tuple[List[str], List[float], Dict[str, Any]]:
    labels = list(chart.get('labels') or [])
    datasets = chart.get('datasets') or [{}]
    dataset = datasets[0]
    return labels, list(dataset.get('data') or []), dataset


def create_category_pie_chart(chart: Dict[str, Any], title: str | None = None) -> go.Figure:
    """Generate a pie chart showing spending by category.

    Parameters
    ----------
    chart : dict
        Category chart series from :func:`fintrack.reports.category_chart_data`.
    title : str, optional
        Title for the chart.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    labels, values, dataset = _series(chart)
    if not labels or not any(values):
        return _empty_figure()
    df = pd.DataFrame({"Category": labels, "Amount": values})
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        color_discrete_sequence=dataset.get('backgroundColor') or px.colors.qualitative.Set3,
    )
    fig.update_traces(textposition='inside', textinfo='percent+label')
    fig.update_layout(title=title or "Spending by Category")
    return fig


def create_category_bar_chart(chart: Dict[str, Any], title: str | None = None) -> go.Figure:
    """Generate a bar chart of per-category totals.

    Categories with zero activity are kept so the bars line up with the
    category list shown next to the chart.
    """
    labels, values, dataset = _series(chart)
    if not labels:
        return _empty_figure()
    df = pd.DataFrame({"Category": labels, "Amount": values})
    fig = px.bar(
        df,
        x="Category",
        y="Amount",
        color="Category",
        color_discrete_sequence=dataset.get('backgroundColor') or px.colors.qualitative.Set3,
    )
    fig.update_layout(
        title=title or "Spending by Category",
        xaxis_title="Category",
        yaxis_title="Amount",
        showlegend=False,
    )
    return fig


def create_monthly_line_chart(chart: Dict[str, Any], title: str | None = None) -> go.Figure:
    """Generate a line chart of monthly spending.

    Parameters
    ----------
    chart : dict
        Monthly chart series from :func:`fintrack.reports.monthly_chart_data`.
    title : str, optional
        Chart title.  Defaults to the dataset label.

    Returns
    -------
    plotly.graph_objects.Figure
        Interactive line chart with a currency y-axis.
    """
    labels, values, dataset = _series(chart)
    if not labels:
        return _empty_figure()
    df = pd.DataFrame({"Month": labels, "Amount": values})
    fig = px.line(df, x="Month", y="Amount", markers=True, line_shape='spline')
    fig.update_traces(line_color=dataset.get('borderColor'))
    fig.update_layout(
        title=title or dataset.get('label') or "Monthly Spending",
        xaxis_title="Month",
        yaxis_title="Amount",
        yaxis_tickprefix=CURRENCY_SYMBOL,
    )
    return fig
