from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping

import pandas as pd


INNOVATION = "innovation"
TYPE_OF_INNOVATION = "type_of_innovation"
SCALE = "scale"
PRODUCTION_SYSTEM = "production_system"
CLIMATE_CLASSIFICATION = "climate_classification"
COUNTRY = "country"
DESCRIPTION = "description"
CENTRES_INVOLVED = "centres_involved"

CANONICAL_COLUMNS = [
    INNOVATION,
    TYPE_OF_INNOVATION,
    SCALE,
    PRODUCTION_SYSTEM,
    CLIMATE_CLASSIFICATION,
    COUNTRY,
    DESCRIPTION,
    CENTRES_INVOLVED,
]

# Raw feed headers read straight into a canonical column.
RECORD_COLUMNS = {
    "Innovation/ Technology/ Tool": INNOVATION,
    "Type of Innovation / Technology/ Tool": TYPE_OF_INNOVATION,
    "Scale": SCALE,
    "Production system": PRODUCTION_SYSTEM,
    "Climate Classification": CLIMATE_CLASSIFICATION,
    "Country": COUNTRY,
}

# The feed spells this header two ways; the trailing-space variant wins.
CENTRES_KEYS = ("Centre (s) involved ", "Centre (s) involved")

CHALLENGE_KEY = "Challenge it was addressing"
DATA_COLLECTED_KEY = "Data collected"
SITE_KEY = "Site"
NATIVE_DESCRIPTION_KEY = "Description"
NO_DESCRIPTION = "No description available"

MULTI_VALUE_SEPARATORS = re.compile(r"[,;]")


def clean_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value)


def split_multi_value(value: object) -> List[str]:
    """Split a `,`/`;` joined field into trimmed, non-empty tokens."""
    text = clean_text(value)
    if not text:
        return []
    return [token.strip() for token in MULTI_VALUE_SEPARATORS.split(text) if token.strip()]


def build_description(raw: Mapping[str, Any]) -> str:
    native = clean_text(raw.get(NATIVE_DESCRIPTION_KEY))
    if native:
        return native

    parts = []
    challenge = clean_text(raw.get(CHALLENGE_KEY))
    if challenge:
        parts.append(f"Challenge: {challenge}")
    data_collected = clean_text(raw.get(DATA_COLLECTED_KEY))
    if data_collected:
        parts.append(f"Data: {data_collected}")
    site = clean_text(raw.get(SITE_KEY))
    if site:
        parts.append(f"Site: {site}")
    if parts:
        return ". ".join(parts)

    return clean_text(raw.get("Innovation/ Technology/ Tool")) or NO_DESCRIPTION


def centres_value(raw: Mapping[str, Any]) -> str:
    for key in CENTRES_KEYS:
        value = clean_text(raw.get(key))
        if value:
            return value
    return ""


def normalize_record(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map one parsed feed object onto the canonical record shape.

    Unrecognised keys are carried along unchanged; canonical columns are
    written last so they always win over a colliding raw key.
    """
    record: Dict[str, Any] = dict(raw)
    for raw_key, column in RECORD_COLUMNS.items():
        record[column] = clean_text(raw.get(raw_key))
    record[CENTRES_INVOLVED] = centres_value(raw)
    record[DESCRIPTION] = build_description(raw)
    return record


def records_frame(records: List[Mapping[str, Any]]) -> pd.DataFrame:
    """Stack normalized records into a frame, canonical columns first."""
    if not records:
        return pd.DataFrame(columns=CANONICAL_COLUMNS, dtype=object)
    df = pd.DataFrame.from_records(list(records))
    extra = [c for c in df.columns if c not in CANONICAL_COLUMNS]
    df = df[CANONICAL_COLUMNS + extra]
    for col in CANONICAL_COLUMNS:
        df[col] = df[col].fillna("").astype(str)
    return df.reset_index(drop=True)
