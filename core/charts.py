from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

PALETTE = ["#064e3b", "#059669", "#10b981", "#34d399", "#6ee7b7", "#a7f3d0", "#d1fae5"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def type_donut_chart(by_type: pd.DataFrame) -> alt.Chart:
    order = by_type["category"].tolist()
    return (
        alt.Chart(by_type)
        .mark_arc(innerRadius=60, stroke="#ffffff", strokeWidth=2)
        .encode(
            theta=alt.Theta("count:Q", stack=True),
            color=alt.Color(
                "category:N",
                title="Type",
                sort=order,
                scale=alt.Scale(domain=order, range=PALETTE),
                legend=alt.Legend(orient="bottom", columns=2),
            ),
            order=alt.Order("count:Q", sort="descending"),
            tooltip=[alt.Tooltip("category:N", title="Type"), alt.Tooltip("count:Q", title="Innovations", format="d")],
        )
        .properties(height=300)
    )


def country_bar_chart(by_country: pd.DataFrame) -> alt.Chart:
    return (
        alt.Chart(by_country)
        .mark_bar(color="#059669", cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
        .encode(
            x=alt.X("category:N", title=None, sort=by_country["category"].tolist(), axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("count:Q", title="Innovations", axis=alt.Axis(format="d", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("category:N", title="Country"), alt.Tooltip("count:Q", title="Innovations", format="d")],
        )
        .properties(height=300)
    )


def scale_bar_chart(by_scale: pd.DataFrame) -> alt.Chart:
    # Keep the semantic Plot -> National ordering on the axis.
    return (
        alt.Chart(by_scale)
        .mark_bar(color="#064e3b", cornerRadiusTopRight=4, cornerRadiusBottomRight=4)
        .encode(
            y=alt.Y("category:N", title=None, sort=by_scale["category"].tolist()),
            x=alt.X("count:Q", title="Innovations", axis=alt.Axis(format="d", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("category:N", title="Scale"), alt.Tooltip("count:Q", title="Innovations", format="d")],
        )
        .properties(height=260)
    )
