from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from core.records import (
    CENTRES_INVOLVED,
    CLIMATE_CLASSIFICATION,
    COUNTRY,
    SCALE,
    TYPE_OF_INNOVATION,
    split_multi_value,
)


ALL = "All"


@dataclass(frozen=True)
class FacetDefinition:
    label: str
    field: str
    multi_valued: bool = False


FACETS: List[FacetDefinition] = [
    FacetDefinition("Centre (s) involved", CENTRES_INVOLVED, multi_valued=True),
    FacetDefinition("Type of innovations/solutions", TYPE_OF_INNOVATION),
    FacetDefinition("Scale", SCALE),
    FacetDefinition("Climate Classification", CLIMATE_CLASSIFICATION),
    FacetDefinition("Country", COUNTRY, multi_valued=True),
]


@dataclass(frozen=True)
class DashboardFilters:
    selections: Dict[str, str] = field(default_factory=dict)

    def selected(self, facet_field: str) -> str:
        return self.selections.get(facet_field, ALL)

    @property
    def active(self) -> Dict[str, str]:
        return {k: v for k, v in self.selections.items() if v != ALL}


def normalize_filters(
    raw: Optional[Mapping[str, object]],
    *,
    facets: Sequence[FacetDefinition] = FACETS,
    options: Optional[Mapping[str, Sequence[str]]] = None,
) -> DashboardFilters:
    """Build a complete facet -> selection map from loosely-typed input.

    Unknown keys are dropped and blank values fall back to "All". When the
    current option lists are given, a selection that is no longer offered is
    reset to "All".
    """
    raw = raw or {}
    selections: Dict[str, str] = {}
    for facet in facets:
        value = raw.get(facet.field)
        value = ALL if value is None else str(value)
        if not value.strip():
            value = ALL
        if options is not None and value != ALL and value not in options.get(facet.field, ()):
            value = ALL
        selections[facet.field] = value
    return DashboardFilters(selections=selections)


def extract_facet_options(
    records: pd.DataFrame,
    facets: Sequence[FacetDefinition] = FACETS,
) -> Dict[str, List[str]]:
    """Distinct values per facet, sorted, with the "All" sentinel first.

    Always computed over the full record list so that choosing a value in one
    facet never narrows another facet's options.
    """
    options: Dict[str, List[str]] = {}
    for facet in facets:
        values = set()
        if facet.field in records.columns:
            for raw_value in records[facet.field].tolist():
                if facet.multi_valued:
                    values.update(split_multi_value(raw_value))
                else:
                    text = "" if raw_value is None or pd.isna(raw_value) else str(raw_value).strip()
                    if text:
                        values.add(text)
        values.discard(ALL)
        options[facet.field] = [ALL] + sorted(values)
    return options


def _facet_mask(records: pd.DataFrame, facet: FacetDefinition, selected: str) -> pd.Series:
    if selected == ALL:
        return pd.Series(True, index=records.index)
    if facet.field not in records.columns:
        return pd.Series(False, index=records.index)
    column = records[facet.field]
    if facet.multi_valued:
        return column.apply(lambda v: selected in split_multi_value(v)).astype(bool)
    return column.fillna("").astype(str) == selected


def filter_records(
    records: pd.DataFrame,
    filters: DashboardFilters,
    facets: Sequence[FacetDefinition] = FACETS,
) -> pd.DataFrame:
    """Rows matching every facet selection, in original order."""
    if records.empty:
        return records.copy()
    mask = pd.Series(True, index=records.index)
    for facet in facets:
        mask &= _facet_mask(records, facet, filters.selected(facet.field))
    return records[mask].reset_index(drop=True)
