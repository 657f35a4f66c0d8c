"""Plotly figures for budget progress and spending.

Each function accepts a DataFrame produced elsewhere in the package
(:func:`clearcents.calculations.budget_progress` or
:meth:`clearcents.db.FinanceStore.transactions_frame`) and returns a
``plotly.graph_objects.Figure`` that Streamlit renders with
``st.plotly_chart``.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .calculations import (
    STATUS_NO_BUDGET,
    STATUS_ON_TRACK,
    STATUS_OVERSPENT,
    STATUS_WARNING,
)

STATUS_COLORS = {
    STATUS_OVERSPENT: "#EF4444",
    STATUS_WARNING: "#EAB308",
    STATUS_ON_TRACK: "#22C55E",
    STATUS_NO_BUDGET: "#94A3B8",
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_budget_progress_chart(progress: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal bars of spend per category, coloured by budget status.

    Parameters
    ----------
    progress : pandas.DataFrame
        Output of :func:`~clearcents.calculations.budget_progress`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bar chart with one bar per category and a marker at its budget.
    """
    if progress.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(
        y=progress["Category"],
        x=progress["Spent"],
        orientation="h",
        name="Spent",
        marker_color=[STATUS_COLORS.get(s, STATUS_COLORS[STATUS_NO_BUDGET]) for s in progress["Status"]],
        customdata=progress[["Percent Used", "Status"]],
        hovertemplate="%{y}: $%{x:,.2f} (%{customdata[0]:.1f}%, %{customdata[1]})<extra></extra>",
    ))
    budgeted = progress[progress["Budget"] > 0]
    if not budgeted.empty:
        fig.add_trace(go.Scatter(
            y=budgeted["Category"],
            x=budgeted["Budget"],
            mode="markers",
            name="Budget",
            marker=dict(symbol="line-ns-open", size=18, color="#1E293B"),
        ))
    fig.update_layout(
        title=title or "Budget progress",
        xaxis_title="Amount",
        yaxis_title="Category",
        barmode="overlay",
    )
    return fig


def create_spending_pie_chart(progress: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Share of spend per category, using each category's own colour."""
    spent = progress[progress["Spent"] > 0] if not progress.empty else progress
    if spent.empty:
        return _empty_figure()
    fig = px.pie(
        spent,
        names="Category",
        values="Spent",
        color="Category",
        color_discrete_map=dict(zip(spent["Category"], spent["Color"])),
    )
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_monthly_flow_chart(transactions: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Grouped bars of monthly income against monthly expenses.

    Parameters
    ----------
    transactions : pandas.DataFrame
        Frame with ``Transaction Date`` and signed ``Amount`` columns.
    """
    if transactions.empty or "Amount" not in transactions.columns:
        return _empty_figure()
    df = transactions.copy()
    df["Month"] = pd.to_datetime(df["Transaction Date"]).dt.to_period("M").astype(str)
    income = df[df["Amount"] > 0].groupby("Month")["Amount"].sum()
    expenses = df[df["Amount"] < 0].groupby("Month")["Amount"].sum().abs()
    monthly = pd.DataFrame({"Income": income, "Expenses": expenses}).fillna(0.0).sort_index()
    melted = monthly.reset_index().rename(columns={"index": "Month"}).melt(
        id_vars="Month", var_name="Flow", value_name="Amount"
    )
    fig = px.bar(melted, x="Month", y="Amount", color="Flow", barmode="group")
    fig.update_layout(
        title=title or "Income vs expenses",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig
