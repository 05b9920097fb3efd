from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from core.aggregate import AggregationSettings, compute_aggregates, to_records
from core.charts import country_bar_chart, scale_bar_chart, to_vega_spec, type_donut_chart
from core.filters import DashboardFilters
from core.records import (
    CENTRES_INVOLVED,
    CLIMATE_CLASSIFICATION,
    COUNTRY,
    INNOVATION,
    SCALE,
    TYPE_OF_INNOVATION,
    split_multi_value,
)


NOT_AVAILABLE = "N/A"
NO_MATCHES = "No innovations found matching filters."


def _distinct_tokens(series: pd.Series) -> int:
    tokens = set()
    for value in series.tolist():
        tokens.update(split_multi_value(value))
    return len(tokens)


def table_rows(records: pd.DataFrame) -> List[Dict[str, str]]:
    if records.empty:
        return []
    rows = records[[INNOVATION, CENTRES_INVOLVED, TYPE_OF_INNOVATION, SCALE, CLIMATE_CLASSIFICATION, COUNTRY]].copy()
    rows[CLIMATE_CLASSIFICATION] = rows[CLIMATE_CLASSIFICATION].where(rows[CLIMATE_CLASSIFICATION] != "", NOT_AVAILABLE)
    return rows.to_dict(orient="records")


def compute_overview(
    filters: DashboardFilters,
    ctx: Dict[str, Any],
    *,
    settings: AggregationSettings = AggregationSettings(),
) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    aggregates = compute_aggregates(df, settings) if not df.empty else {}

    stats = {
        "innovations": int(len(df)),
        "countries": _distinct_tokens(df[COUNTRY]) if not df.empty else 0,
        "centres": _distinct_tokens(df[CENTRES_INVOLVED]) if not df.empty else 0,
    }

    charts: Dict[str, Any] = {}
    if aggregates:
        if not aggregates["by_type"].empty:
            charts["type_donut"] = to_vega_spec(type_donut_chart(aggregates["by_type"]))
        if not aggregates["by_country"].empty:
            charts["country_bar"] = to_vega_spec(country_bar_chart(aggregates["by_country"]))
        if not aggregates["by_scale"].empty:
            charts["scale_bar"] = to_vega_spec(scale_bar_chart(aggregates["by_scale"]))

    return {
        "filters": dict(filters.selections),
        "stats": stats,
        "aggregates": {
            "by_type": to_records(aggregates["by_type"]) if aggregates else [],
            "by_country": to_records(aggregates["by_country"]) if aggregates else [],
            "by_scale": to_records(aggregates["by_scale"]) if aggregates else [],
        },
        "charts": charts,
        "rows": table_rows(df),
        "empty": df.empty,
        "message": NO_MATCHES if df.empty else None,
    }
