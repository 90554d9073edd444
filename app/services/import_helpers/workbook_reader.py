# /marksheet-backend/app/services/import_helpers/workbook_reader.py

import io
from typing import Dict, List

import pandas as pd


class WorkbookReadError(ValueError):
    """Raised when the uploaded bytes cannot be decoded as a spreadsheet workbook."""


def read_workbook_sheets(file_bytes: bytes) -> Dict[str, List[Dict]]:
    """
    Decodes an uploaded Excel workbook into `{sheet name: [row mapping, ...]}`.

    Every sheet is read with `dtype=object` so cells keep their native Python
    types (ints stay ints, dates stay datetimes) for the row parsers. Blank
    rows are dropped; the first row of each sheet is the header.
    """
    if not file_bytes:
        raise WorkbookReadError("The uploaded file is empty.")
    try:
        sheets = pd.read_excel(io.BytesIO(file_bytes), sheet_name=None, dtype=object)
    except Exception as e:
        raise WorkbookReadError(f"Could not read the uploaded file as an Excel workbook: {e}") from e

    rows_by_sheet = {}
    for sheet_name, df in sheets.items():
        df = df.dropna(how="all")
        df.columns = [str(column).strip() for column in df.columns]
        rows_by_sheet[str(sheet_name)] = df.to_dict(orient="records")
    return rows_by_sheet
