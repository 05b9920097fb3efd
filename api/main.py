from __future__ import annotations

import logging
import math
from typing import Dict, Literal

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    ChatRequest,
    ChatResponse,
    DashboardFiltersModel,
    FacetModel,
    MetaFacetsResponse,
    SummaryRequest,
    SummaryResponse,
)
from core.assistant import send_chat_message
from core.data import LoadState, load_dashboard_data, prepare_context
from core.export import (
    CSV_MEDIA_TYPE,
    XLSX_MEDIA_TYPE,
    NothingToExportError,
    export_filename,
    to_csv_bytes,
    to_xlsx_bytes,
)
from core.filters import FACETS, DashboardFilters, normalize_filters
from core.metrics_debug import compute_debug
from core.metrics_overview import compute_overview
from core.summary import SummaryCoordinator


app = FastAPI(title="Innovation Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One debounce window per client session; a request only supersedes its own session.
MAX_SUMMARY_SESSIONS = 256
new_summary_coordinator = SummaryCoordinator
summary_coordinators: Dict[str, SummaryCoordinator] = {}


def _summary_coordinator(session_id: str) -> SummaryCoordinator:
    coordinator = summary_coordinators.get(session_id)
    if coordinator is None:
        if len(summary_coordinators) >= MAX_SUMMARY_SESSIONS:
            summary_coordinators.pop(next(iter(summary_coordinators)))
        coordinator = summary_coordinators[session_id] = new_summary_coordinator()
    return coordinator


def _filters_from_model(model: DashboardFiltersModel, *, data_ctx: Dict[str, object]) -> DashboardFilters:
    raw = model.model_dump(include=set(DashboardFiltersModel.model_fields))
    return normalize_filters(raw, options=data_ctx.get("facet_options"))


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _load_error(data_ctx: Dict[str, object]) -> JSONResponse | None:
    if data_ctx.get("state") != LoadState.ERROR:
        return None
    return JSONResponse(status_code=503, content={"error": data_ctx.get("error"), "state": LoadState.ERROR.value})


def _context(filters: DashboardFiltersModel):
    data_ctx = load_dashboard_data()
    failed = _load_error(data_ctx)
    if failed is not None:
        return None, None, failed
    f = _filters_from_model(filters, data_ctx=data_ctx)
    return f, prepare_context(f, data_ctx), None


@app.get("/meta/facets")
def meta_facets():
    try:
        data_ctx = load_dashboard_data()
        failed = _load_error(data_ctx)
        if failed is not None:
            return failed
        options = data_ctx.get("facet_options", {})
        facets = [
            FacetModel(label=f.label, field=f.field, multi_valued=f.multi_valued, options=options.get(f.field, ["All"]))
            for f in FACETS
        ]
        return _json(MetaFacetsResponse(facets=facets).model_dump())
    except Exception as exc:
        logger.exception("meta_facets failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        f, ctx, failed = _context(filters)
        if failed is not None:
            return failed
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/records")
def records(filters: DashboardFiltersModel):
    try:
        f, ctx, failed = _context(filters)
        if failed is not None:
            return failed
        filtered: pd.DataFrame = ctx["filtered_records"]
        rows = filtered.astype(object).where(filtered.notna(), None).to_dict(orient="records")
        return _json({"filters": dict(f.selections), "count": len(rows), "records": rows})
    except Exception as exc:
        logger.exception("records failed")
        return _error(exc)


@app.post("/summary")
async def summary(request: SummaryRequest):
    try:
        f, ctx, failed = _context(request)
        if failed is not None:
            return failed
        coordinator = _summary_coordinator(request.session_id)
        text = await coordinator.request(ctx["filtered_records"])
        payload = SummaryResponse(summary=text, superseded=text is None, generation=coordinator.generation)
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/assistant/chat")
def assistant_chat(request: ChatRequest):
    try:
        data_ctx = load_dashboard_data()
        history = [turn.model_dump() for turn in request.history]
        reply = send_chat_message(history, request.message, str(data_ctx.get("raw_text", "") or ""))
        return _json(ChatResponse(reply=reply).model_dump())
    except Exception as exc:
        logger.exception("assistant_chat failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: DashboardFiltersModel):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters, data_ctx=data_ctx)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_debug(f, ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{fmt}")
def export_records(fmt: Literal["csv", "xlsx"], filters: DashboardFiltersModel):
    f, ctx, failed = _context(filters)
    if failed is not None:
        return failed
    filtered = ctx["filtered_records"]
    try:
        if fmt == "csv":
            content, media_type = to_csv_bytes(filtered), CSV_MEDIA_TYPE
        else:
            content, media_type = to_xlsx_bytes(filtered), XLSX_MEDIA_TYPE
    except NothingToExportError as exc:
        return _error(exc, status_code=400)
    filename = export_filename(fmt)
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": f"attachment; filename={filename}"})
