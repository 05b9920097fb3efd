from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from core.records import (
    CENTRES_INVOLVED,
    CLIMATE_CLASSIFICATION,
    COUNTRY,
    DESCRIPTION,
    INNOVATION,
    SCALE,
    TYPE_OF_INNOVATION,
)


EXPORT_COLUMNS = {
    INNOVATION: "Innovation",
    CENTRES_INVOLVED: "Centre (s) involved",
    TYPE_OF_INNOVATION: "Type of Innovation / Technology/ Tool",
    SCALE: "Scale",
    CLIMATE_CLASSIFICATION: "Climate Classification",
    COUNTRY: "Country",
    DESCRIPTION: "Description",
}
EXPORT_COLUMN_WIDTHS = [30, 25, 30, 15, 20, 15, 50]
SHEET_NAME = "Innovations"
NOTHING_TO_EXPORT = "No data to download."

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class NothingToExportError(ValueError):
    def __init__(self, message: str = NOTHING_TO_EXPORT):
        super().__init__(message)


def build_export_frame(records: pd.DataFrame) -> pd.DataFrame:
    """Project the filtered records onto the fixed seven download columns."""
    if records is None or records.empty:
        raise NothingToExportError()
    out = pd.DataFrame({header: records[col].fillna("").astype(str) for col, header in EXPORT_COLUMNS.items()})
    climate = EXPORT_COLUMNS[CLIMATE_CLASSIFICATION]
    out[climate] = out[climate].where(out[climate] != "", "N/A")
    return out.reset_index(drop=True)


def to_csv_bytes(records: pd.DataFrame) -> bytes:
    csv_text = build_export_frame(records).to_csv(index=False, lineterminator="\n")
    # Rows are newline-joined; drop the terminator after the last row.
    if csv_text.endswith("\n"):
        csv_text = csv_text[:-1]
    return csv_text.encode("utf-8")


def to_xlsx_bytes(records: pd.DataFrame) -> bytes:
    export_df = build_export_frame(records)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        export_df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for idx, width in enumerate(EXPORT_COLUMN_WIDTHS, start=1):
            worksheet.column_dimensions[get_column_letter(idx)].width = width
    return buffer.getvalue()


def export_filename(extension: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"innovations_{today.isoformat()}.{extension}"
