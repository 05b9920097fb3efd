from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from core.filters import DashboardFilters
from core.records import CANONICAL_COLUMNS, CENTRES_INVOLVED, COUNTRY, split_multi_value


def compute_debug(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    state = ctx.get("state")
    payload = {
        "filters": dict(filters.selections),
        "state": getattr(state, "value", state),
        "error": ctx.get("error"),
        "row_counts": {
            "records": int(len(records)),
            "filtered_records": int(len(filtered)),
            "skipped_lines": len(ctx.get("skipped_lines", []) or []),
        },
        "skipped_lines": list(ctx.get("skipped_lines", []) or []),
        "blank_counts": {},
        "multi_valued": {"centres_involved": 0, "country": 0},
        "passthrough_columns": [],
    }
    if records.empty:
        return payload

    payload["blank_counts"] = {
        col: int((records[col].str.strip() == "").sum()) for col in CANONICAL_COLUMNS if col in records.columns
    }
    payload["multi_valued"] = {
        col: int(records[col].apply(lambda v: len(split_multi_value(v)) > 1).sum())
        for col in [CENTRES_INVOLVED, COUNTRY]
    }
    payload["passthrough_columns"] = [c for c in records.columns if c not in CANONICAL_COLUMNS]
    return payload
