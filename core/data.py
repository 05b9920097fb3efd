from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd
import requests

from core.filters import FACETS, DashboardFilters, extract_facet_options, filter_records, normalize_filters
from core.records import normalize_record, records_frame


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_FILE = DATA_DIR / "Descriptions_of_innovations.json"
FETCH_TIMEOUT = 30

Source = Union[str, Path]


class LoadState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


class DatasetLoadError(RuntimeError):
    """The dataset source itself could not be read."""


@dataclass(frozen=True)
class LoadResult:
    records: pd.DataFrame
    raw_text: str
    skipped_lines: List[int] = field(default_factory=list)


def _is_url(source: Source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def fetch_text(source: Source) -> str:
    """Read the raw NDJSON text from a local path or an http(s) URL."""
    if _is_url(source):
        try:
            resp = requests.get(str(source), timeout=FETCH_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DatasetLoadError(f"Failed to fetch data from {source}: {exc}") from exc
        resp.encoding = resp.encoding or "utf-8"
        return resp.text
    path = Path(source)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise DatasetLoadError(f"Failed to read data from {path}: {exc}") from exc
    # Undecodable bytes become U+FFFD instead of failing the whole load.
    return raw.decode("utf-8", errors="replace")


def parse_ndjson(text: str) -> Tuple[List[dict], List[int]]:
    """Parse each non-blank line on its own; bad lines are skipped, not fatal."""
    parsed: List[dict] = []
    skipped: List[int] = []
    for line_no, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse JSON line %d (%s): %.80s", line_no, exc.msg, line.strip())
            skipped.append(line_no)
            continue
        if not isinstance(obj, dict):
            logger.warning("Skipping line %d: expected a JSON object, got %s", line_no, type(obj).__name__)
            skipped.append(line_no)
            continue
        parsed.append(obj)
    return parsed, skipped


def load_dataset(source: Source = DATA_FILE) -> LoadResult:
    text = fetch_text(source)
    parsed, skipped = parse_ndjson(text)
    records = records_frame([normalize_record(obj) for obj in parsed])
    logger.info("Loaded %d innovation records from %s (%d lines skipped)", len(records), source, len(skipped))
    return LoadResult(records=records, raw_text=text, skipped_lines=skipped)


def source_signature(source: Source) -> Tuple[str, Optional[float]]:
    if _is_url(source):
        return str(source), None
    path = Path(source)
    try:
        return str(path), path.stat().st_mtime
    except OSError:
        return str(path), None


def _error_context(message: str) -> Dict[str, object]:
    records = records_frame([])
    return {
        "state": LoadState.ERROR,
        "error": message,
        "source": None,
        "records": records,
        "raw_text": "",
        "skipped_lines": [],
        "facet_options": extract_facet_options(records),
    }


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(source_sig: Tuple[str, Optional[float]]) -> Dict[str, object]:
    source, _ = source_sig
    result = load_dataset(source)
    return {
        "state": LoadState.SUCCESS,
        "error": None,
        "source": source,
        "records": result.records,
        "raw_text": result.raw_text,
        "skipped_lines": result.skipped_lines,
        "facet_options": extract_facet_options(result.records),
    }


def load_dashboard_data(source: Optional[Source] = None) -> Dict[str, object]:
    """Load (or reuse) the dataset context.

    A failed fetch yields a context in the error state instead of an empty
    dataset, so callers can tell "could not load" apart from "no matches".
    """
    source = DATA_FILE if source is None else source
    try:
        return _load_dashboard_data_cached(source_signature(source))
    except DatasetLoadError as exc:
        logger.exception("Error loading dataset")
        return _error_context(str(exc))


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: pd.DataFrame = data_ctx.get("records", records_frame([]))
    facet_options = data_ctx.get("facet_options") or extract_facet_options(records)

    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters, options=facet_options)
    filtered_records = filter_records(records, filt, FACETS)

    return {
        "filters": filt,
        "state": data_ctx.get("state", LoadState.IDLE),
        "error": data_ctx.get("error"),
        "records": records,
        "filtered_records": filtered_records,
        "facet_options": facet_options,
        "raw_text": data_ctx.get("raw_text", ""),
        "skipped_lines": data_ctx.get("skipped_lines", []),
    }
