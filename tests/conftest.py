from __future__ import annotations

import json
from typing import List

import pandas as pd
import pytest

from core.data import LoadState
from core.filters import extract_facet_options
from core.records import normalize_record, records_frame


RAW_RECORDS: List[dict] = [
    {
        "Innovation/ Technology/ Tool": "Climate-smart village",
        "Type of Innovation / Technology/ Tool": "Socio-technical",
        "Scale": "Community",
        "Production system": "Mixed",
        "Climate Classification": "Tropical savanna",
        "Country": "Kenya; Tanzania",
        "Challenge it was addressing": "Erratic rainfall",
        "Centre (s) involved ": "ILRI, CIAT",
        "Focal Point": "J. Mwangi",
    },
    {
        "Innovation/ Technology/ Tool": "Drought-tolerant maize",
        "Type of Innovation / Technology/ Tool": "Technical",
        "Scale": "farm",
        "Production system": "Cereal",
        "Climate Classification": "Semi-arid",
        "Country": "Zimbabwe",
        "Centre (s) involved": "CIMMYT",
    },
    {
        "Innovation/ Technology/ Tool": "Livestock insurance",
        "Type of Innovation / Technology/ Tool": "Socio-economic",
        "Scale": "Landscape",
        "Country": "Kenya, Ethiopia",
        "Centre (s) involved ": "ILRI",
    },
    {
        "Innovation/ Technology/ Tool": "Alternate wetting and drying",
        "Type of Innovation / Technology/ Tool": "Technical",
        "Scale": "Plot",
        "Climate Classification": "Tropical monsoon",
        "Country": "Bangladesh",
        "Centre (s) involved": "IRRI; IWMI",
    },
    {
        "Innovation/ Technology/ Tool": "Seed certification",
        "Type of Innovation / Technology/ Tool": "",
        "Scale": "",
        "Country": "",
    },
]


@pytest.fixture
def raw_records() -> List[dict]:
    return [dict(r) for r in RAW_RECORDS]


@pytest.fixture
def records(raw_records) -> pd.DataFrame:
    return records_frame([normalize_record(r) for r in raw_records])


@pytest.fixture
def ndjson_text(raw_records) -> str:
    return "\n".join(json.dumps(r) for r in raw_records) + "\n"


@pytest.fixture
def data_ctx(records, ndjson_text) -> dict:
    return {
        "state": LoadState.SUCCESS,
        "error": None,
        "source": "memory",
        "records": records,
        "raw_text": ndjson_text,
        "skipped_lines": [],
        "facet_options": extract_facet_options(records),
    }


def make_records(rows: List[dict]) -> pd.DataFrame:
    return records_frame([normalize_record(r) for r in rows])
