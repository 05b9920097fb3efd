"""Core (UI-agnostic) innovation explorer logic.

This package contains:
- NDJSON loading and record normalization
- facet extraction and filter evaluation
- category/count aggregations and chart helpers (Altair -> Vega-Lite spec dict)
- CSV / XLSX export and escaped HTML fragments for the dashboard page
- Gemini chat and debounced summary helpers
"""
