import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Dict, List, Optional

from core.assistant import generate_innovation_summary, send_chat_message
from core.data import LoadState, load_dashboard_data, prepare_context
from core.export import (
    CSV_MEDIA_TYPE,
    NOTHING_TO_EXPORT,
    XLSX_MEDIA_TYPE,
    export_filename,
    to_csv_bytes,
    to_xlsx_bytes,
)
from core.filters import ALL, FACETS, normalize_filters
from core.markup import filter_chips_html, summary_box_html
from core.metrics_overview import compute_overview

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #d1fae5;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #064e3b;}
        .card {border: 1px solid #d1fae5;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #064e3b;}
        .summary-box {background: #fff2a7;border: 1px solid #fcd34d;border-radius: 12px;padding: 18px;color: #374151;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f0fdf4;border: 1px solid #d1fae5;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #064e3b;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


@st.cache_data(show_spinner=False)
def cached_summary(records: pd.DataFrame) -> str:
    return generate_innovation_summary(records)


# ---------- UI setup ----------
st.set_page_config(page_title="Innovation / Solutions Explorer", layout="wide")
inject_base_styles()
st.title("Innovation / Solutions")
st.caption("Explore our comprehensive database of agricultural innovations and solutions.")

with st.spinner("Loading dataset..."):
    data_ctx = load_dashboard_data()
if data_ctx.get("state") == LoadState.ERROR:
    st.error(f"Error loading dataset. Please try refreshing.\n\n{data_ctx.get('error')}")
    st.stop()

facet_options: Dict[str, List[str]] = data_ctx.get("facet_options", {})
skipped_lines = data_ctx.get("skipped_lines", [])

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    raw_filters = {}
    for facet in FACETS:
        raw_filters[facet.field] = st.selectbox(
            facet.label,
            options=facet_options.get(facet.field, [ALL]),
            index=0,
            key=f"facet_{facet.field}",
        )
    if skipped_lines:
        st.caption(f"{len(skipped_lines)} unreadable line(s) skipped while loading.")

filters = normalize_filters(raw_filters, options=facet_options)
ctx = prepare_context(filters, data_ctx)
filtered_records: pd.DataFrame = ctx["filtered_records"]
overview = compute_overview(filters, ctx)

st.markdown(f"<div class='chip-row'>{filter_chips_html(filters.selections)}</div>", unsafe_allow_html=True)

# ----- Stats row -----
stats = overview["stats"]
cols = st.columns(4)
cols[0].metric("Innovations Shown", f"{stats['innovations']:,}")
cols[1].metric("Countries", f"{stats['countries']:,}")
cols[2].metric("Centers", f"{stats['centres']:,}")
cols[3].metric("AI", "Powered Analysis")

# ----- AI summary -----
with card("Gemini AI Summary"):
    if filtered_records.empty:
        summary_text = "No innovations match the selected criteria."
    else:
        with st.spinner("Gemini is analyzing the filtered data..."):
            summary_text = cached_summary(filtered_records)
    st.markdown(summary_box_html(summary_text), unsafe_allow_html=True)

# ----- Charts -----
charts = overview["charts"]
if overview["empty"]:
    st.info(overview["message"])
else:
    c1, c2, c3 = st.columns(3)
    with c1:
        with card("Innovation types"):
            if "type_donut" in charts:
                st.vega_lite_chart(charts["type_donut"], use_container_width=True)
    with c2:
        with card("Top countries"):
            if "country_bar" in charts:
                st.vega_lite_chart(charts["country_bar"], use_container_width=True)
    with c3:
        with card("Implementation scale"):
            if "scale_bar" in charts:
                st.vega_lite_chart(charts["scale_bar"], use_container_width=True)

# ----- Table + downloads -----
with card("Innovations"):
    btn_cols = st.columns([6, 1, 1])
    can_export = not filtered_records.empty
    btn_cols[1].download_button(
        "Download CSV",
        data=to_csv_bytes(filtered_records) if can_export else b"",
        file_name=export_filename("csv"),
        mime=CSV_MEDIA_TYPE,
        disabled=not can_export,
    )
    btn_cols[2].download_button(
        "Download Excel",
        data=to_xlsx_bytes(filtered_records) if can_export else b"",
        file_name=export_filename("xlsx"),
        mime=XLSX_MEDIA_TYPE,
        disabled=not can_export,
    )
    if not can_export:
        st.info(NOTHING_TO_EXPORT)

    rows = pd.DataFrame(overview["rows"])
    if rows.empty:
        st.caption(overview["message"])
    else:
        rows = rows.rename(
            columns={
                "innovation": "Innovation",
                "centres_involved": "Centre (s)",
                "type_of_innovation": "Type",
                "scale": "Scale",
                "climate_classification": "Climate",
                "country": "Country",
            }
        )
        st.dataframe(rows, hide_index=True, use_container_width=True)

# ----- Assistant -----
with st.expander("Ask the MFL assistant", expanded=False):
    history: List[Dict[str, str]] = st.session_state.setdefault("chat_history", [])
    for turn in history:
        with st.chat_message("assistant" if turn["role"] == "model" else "user"):
            st.markdown(turn["text"])
    question: Optional[str] = st.chat_input("Ask about the innovations in the dataset")
    if question:
        with st.chat_message("user"):
            st.markdown(question)
        reply = send_chat_message(history, question, data_ctx.get("raw_text", ""))
        with st.chat_message("assistant"):
            st.markdown(reply)
        history.append({"role": "user", "text": question})
        history.append({"role": "model", "text": reply})
