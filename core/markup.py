from __future__ import annotations

from html import escape
from typing import Dict

from core.filters import ALL, FACETS


def filter_chips_html(selections: Dict[str, str]) -> str:
    """One chip per facet; dataset values are escaped before they reach raw HTML."""
    chips = [f"{facet.label}: {selections.get(facet.field, ALL)}" for facet in FACETS]
    return "".join(f"<span class='chip'>{escape(txt)}</span>" for txt in chips)


def summary_box_html(summary_text: str) -> str:
    return f"<div class='summary-box'>{escape(summary_text)}</div>"
