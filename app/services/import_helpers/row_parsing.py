# /marksheet-backend/app/services/import_helpers/row_parsing.py

"""
Cell-level parsers used by the import reconciler. Each one is permissive:
bad input yields a sentinel (None / NaN) instead of an exception, and the
reconciler decides what a sentinel means for the row.
"""

import math
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional, Type, TypeVar

import pandas as pd

# Tried in order; the first format that parses wins.
DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d"]

# Excel's 1900 date system counts a non-existent 1900-02-29 (serial 60).
_EXCEL_EPOCH = date(1899, 12, 31)
_EXCEL_FAKE_LEAP_DAY = 60

E = TypeVar("E", bound=Enum)


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Converts an Excel 1900-system date serial to a calendar date."""
    if serial is None or math.isnan(serial) or serial < 1:
        return None
    days = int(serial)
    if days >= _EXCEL_FAKE_LEAP_DAY:
        days -= 1
    try:
        return _EXCEL_EPOCH + timedelta(days=days)
    except OverflowError:
        return None


def parse_excel_date(raw: Any) -> Optional[date]:
    """
    Layered date parsing for a Date of Birth cell:
    1. a date/datetime cell is taken as-is;
    2. a numeric cell is an Excel date serial;
    3. a string is tried against DATE_FORMATS, then as ISO 8601.
    Returns None when nothing matches.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return None if pd.isna(raw) else raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return excel_serial_to_date(float(raw))
    if isinstance(raw, str):
        text = raw.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def convert_empty_to_null(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_number(raw: Any) -> float:
    """
    Permissive numeric parsing; anything that is not a number becomes NaN.
    """
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return math.nan
    value = pd.to_numeric(raw, errors="coerce")
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def nan_to_none(value: float) -> Optional[float]:
    return None if math.isnan(value) else value


def match_enum(enum_cls: Type[E], raw: str) -> Optional[E]:
    """Case-insensitive lookup of a spreadsheet label against an enum's values."""
    wanted = " ".join(raw.split()).lower()
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member
    return None


def format_number(value: float) -> str:
    """Renders 60.0 as '60' and 12.5 as '12.5' for feedback messages."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
