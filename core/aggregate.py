from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from core.records import COUNTRY, SCALE, TYPE_OF_INNOVATION, split_multi_value


UNKNOWN = "Unknown"
OTHER = "Other"

SCALE_LEXICON = {
    "plot": "Plot",
    "farm": "Farm",
    "community": "Community",
    "landscape": "Landscape",
    "multiscale": "Multiscale",
    "national": "National",
    "unknown": UNKNOWN,
}

# Smallest to largest operational scale.
SCALE_RANK = {
    "Plot": 1,
    "Farm": 2,
    "Community": 3,
    "Landscape": 4,
    "Multiscale": 5,
    "National": 6,
    UNKNOWN: 99,
}
UNRANKED_SCALE = 50

AGGREGATE_COLUMNS = ["category", "count"]


@dataclass(frozen=True)
class AggregationSettings:
    other_share: float = 0.05
    other_min_categories: int = 6
    top_countries: int = 10


def _empty() -> pd.DataFrame:
    return pd.DataFrame({"category": pd.Series(dtype=object), "count": pd.Series(dtype="int64")})


def _count(values: pd.Series) -> pd.DataFrame:
    """Counts per value, in order of first appearance."""
    if values.empty:
        return _empty()
    counts = values.groupby(values, sort=False).size()
    return pd.DataFrame({"category": counts.index.astype(object), "count": counts.to_numpy(dtype="int64")})


def _sort_by_count(df: pd.DataFrame) -> pd.DataFrame:
    return df.sort_values("count", ascending=False, kind="stable").reset_index(drop=True)


def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    return [{"category": str(c), "count": int(n)} for c, n in zip(df["category"], df["count"])]


def aggregate_by_type(records: pd.DataFrame, settings: AggregationSettings = AggregationSettings()) -> pd.DataFrame:
    """Innovation types, with small categories folded into "Other".

    Folding only kicks in when there are more than `other_min_categories`
    distinct types; a type is small when its count is strictly below
    max(1, other_share * total).
    """
    if records.empty:
        return _empty()
    types = records[TYPE_OF_INNOVATION].fillna("").astype(str).str.strip().replace("", UNKNOWN)
    counts = _count(types)

    threshold = max(1.0, len(records) * settings.other_share)
    if len(counts) > settings.other_min_categories:
        small = counts["count"] < threshold
        other_total = int(counts.loc[small, "count"].sum())
        counts = counts[~small].copy()
        if other_total > 0:
            if (counts["category"] == OTHER).any():
                counts.loc[counts["category"] == OTHER, "count"] += other_total
            else:
                counts = pd.concat(
                    [counts, pd.DataFrame({"category": [OTHER], "count": [other_total]})],
                    ignore_index=True,
                )
    return _sort_by_count(counts)


def aggregate_by_country(records: pd.DataFrame, settings: AggregationSettings = AggregationSettings()) -> pd.DataFrame:
    """Top countries; a record naming several countries counts toward each."""
    if records.empty:
        return _empty()
    raw = records[COUNTRY].fillna("").astype(str)
    raw = raw.where(raw != "", UNKNOWN)
    tokens = raw.apply(split_multi_value).explode().dropna()
    counts = _count(tokens.astype(str))
    return _sort_by_count(counts).head(settings.top_countries).reset_index(drop=True)


def normalize_scale(value: object) -> str:
    text = "" if value is None or (isinstance(value, float) and pd.isna(value)) else str(value).strip()
    if not text:
        return UNKNOWN
    known = SCALE_LEXICON.get(text.lower())
    if known:
        return known
    return text[:1].upper() + text[1:].lower()


def aggregate_by_scale(records: pd.DataFrame) -> pd.DataFrame:
    """Scale counts in semantic order (Plot .. National, unranked, Unknown)."""
    if records.empty:
        return _empty()
    scales = records[SCALE].apply(normalize_scale)
    counts = _count(scales)
    counts["rank"] = counts["category"].map(SCALE_RANK).fillna(UNRANKED_SCALE)
    counts = counts.sort_values(["rank", "count"], ascending=[True, False], kind="stable")
    return counts[AGGREGATE_COLUMNS].reset_index(drop=True)


def compute_aggregates(records: pd.DataFrame, settings: AggregationSettings = AggregationSettings()) -> Dict[str, pd.DataFrame]:
    return {
        "by_type": aggregate_by_type(records, settings),
        "by_country": aggregate_by_country(records, settings),
        "by_scale": aggregate_by_scale(records),
    }
