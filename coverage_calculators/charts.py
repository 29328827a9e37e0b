from __future__ import annotations

import logging
from pathlib import Path

import altair as alt
import pandas as pd

from coverage_calculators.breakeven.models import BreakEvenResult
from coverage_calculators.simulations.models import MonteCarloAnalysis

logger = logging.getLogger(__name__)


def cost_curve_frame(result: BreakEvenResult) -> pd.DataFrame:
    """Cost curve in long form: one row per (medical_expense, plan)."""
    records = []
    for point in result.cost_curve:
        records.append(
            {"medical_expense": point.medical_expense, "plan": result.plan1.name, "total_cost": point.plan1_total_cost}
        )
        records.append(
            {"medical_expense": point.medical_expense, "plan": result.plan2.name, "total_cost": point.plan2_total_cost}
        )
    return pd.DataFrame(records)


def cost_curve_chart(result: BreakEvenResult) -> alt.Chart:
    """Line chart of both plans' total annual cost across medical expenses."""
    df = cost_curve_frame(result)
    title = f"Total Annual Cost: {result.plan1.name} vs {result.plan2.name}"
    if result.break_even_point is not None:
        title += f" (break-even ${result.break_even_point:,})"

    return (
        alt.Chart(df)
        .mark_line(point=True)
        .encode(
            x=alt.X("medical_expense:Q", title="Medical Expenses ($)"),
            y=alt.Y("total_cost:Q", title="Total Annual Cost ($)", scale=alt.Scale(zero=False)),
            color=alt.Color("plan:N", title="Plan"),
            tooltip=["plan", "medical_expense", "total_cost"],
        )
        .properties(title=title)
    )


def histogram_frame(analysis: MonteCarloAnalysis) -> pd.DataFrame:
    return pd.DataFrame([bucket.model_dump() for bucket in analysis.histogram_data])


def histogram_chart(analysis: MonteCarloAnalysis) -> alt.Chart:
    """Bar chart of the simulated out-of-pocket cost distribution."""
    df = histogram_frame(analysis)
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("label:N", sort=None, title="Out-of-Pocket Cost"),
            y=alt.Y("percentage:Q", title="Share of Simulated Years (%)"),
            tooltip=["label", "percentage"],
        )
        .properties(
            title=f"Out-of-Pocket Cost Distribution ({analysis.result.simulation_count:,} simulations)"
        )
    )


def save_chart(chart: alt.Chart, output_path: str | Path) -> Path:
    """Write a chart to an HTML file, creating parent directories."""
    path = Path(output_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    chart.save(str(path))
    logger.info("Chart saved to %s", path)
    return path
