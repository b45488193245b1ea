# utils/lead_performance/data_processor.py
"""
Record Normalization & Calendar Helpers for Lead Performance

Handles the shape of raw records coming from the record store:
- Leads / meta leads -> typed DataFrames (dates, money, flags)
- Attendance answers -> detailed status + tri-state attended flag
- Calendar helpers (Monday alignment, week numbers, month bounds)
- Meta-lead record preparation (week normalized to its Monday)

Normalization never rejects a record: unparsable dates become NaT,
non-numeric amounts become NaN, blanks become None.
"""

import calendar
import logging
import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import pandas as pd

from .constants import (
    LEAD_AMOUNT_COLUMNS,
    LEAD_COLUMNS,
    LEAD_DATE_COLUMNS,
    LEAD_TEXT_COLUMNS,
    META_LEAD_COLUMNS,
)
from .models import AttendanceStatus, FormType, LeadResult, PaymentMethod

logger = logging.getLogger(__name__)

Records = Union[pd.DataFrame, Iterable[Dict[str, Any]], None]

_TRUE_STRINGS = {'true', '1', 'si', 'sí', 'yes', 't'}

_CHOICE_COLUMNS = {
    'result': LeadResult,
    'payment_method': PaymentMethod,
    'form_type': FormType,
}


# =============================================================================
# SCALAR HELPERS
# =============================================================================

def as_date(value: Any) -> date:
    """Convert date / datetime / Timestamp / ISO string to a date."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date) and not hasattr(value, 'hour'):
        return value
    return pd.Timestamp(value).date()


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if pd.isna(value):
        return False
    return bool(value)


def _attended_flag(status: Any) -> Optional[bool]:
    parsed = AttendanceStatus.parse(status)
    if parsed is None:
        return None
    return parsed.attended_flag


def _status_value(value: Any) -> Optional[str]:
    parsed = AttendanceStatus.parse(value)
    return parsed.value if parsed is not None else None


def _to_day(series: pd.Series) -> pd.Series:
    """Parse a column to day-precision naive timestamps (NaT if invalid)."""
    parsed = pd.to_datetime(series, errors='coerce', utc=True, format='mixed')
    return parsed.dt.tz_localize(None).dt.normalize()


def to_frame(records: Records) -> pd.DataFrame:
    """Copy records (DataFrame or iterable of dicts) into a new DataFrame."""
    if records is None:
        return pd.DataFrame()
    if isinstance(records, pd.DataFrame):
        return records.copy()
    return pd.DataFrame(list(records))


# =============================================================================
# RECORD NORMALIZATION
# =============================================================================

def normalize_leads(leads: Records) -> pd.DataFrame:
    """
    Normalize lead records for the metrics engine.

    Args:
        leads: DataFrame or list of lead dicts (one project)

    Returns:
        New DataFrame with every lead column present and typed:
        - entry/contact/scheduled dates: Timestamp at midnight or NaT
        - text columns: stripped, blank -> None
        - result / payment_method / form_type: canonical choice spelling
        - sale_made: bool (null -> False)
        - sale_amount/cash_collected/initial_payment: float (null -> NaN)
        - attendance_status: 'si'/'cancelada'/'no_show'/'no' or None
        - attended_meeting: True / False / None
    """
    df = to_frame(leads)

    for col in LEAD_COLUMNS:
        if col not in df.columns:
            df[col] = None

    for col in LEAD_DATE_COLUMNS:
        df[col] = _to_day(df[col])

    for col in LEAD_AMOUNT_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce').astype(float)

    df['installment_count'] = pd.to_numeric(df['installment_count'], errors='coerce')

    for col in LEAD_TEXT_COLUMNS:
        df[col] = df[col].map(_clean_text).astype(object)

    # Known choices get their canonical spelling; free text is kept as entered
    for col, choices in _CHOICE_COLUMNS.items():
        df[col] = df[col].map(choices.canonical).astype(object)

    df['sale_made'] = df['sale_made'].map(_to_bool).astype(bool)

    # Detailed answer wins over the collapsed flag when both are present
    status = df['attended_meeting'].map(_status_value).astype(object)
    if 'attendance_status' in df.columns:
        detailed = df['attendance_status'].map(_status_value).astype(object)
        status = detailed.where(detailed.notna(), status)
    df['attendance_status'] = status
    df['attended_meeting'] = status.map(_attended_flag).astype(object)

    return df


def normalize_meta_leads(meta_leads: Records) -> pd.DataFrame:
    """
    Normalize weekly meta-lead records.

    Returns:
        New DataFrame with week_start_date as Timestamp and
        leads_count as int (null -> 0).
    """
    df = to_frame(meta_leads)

    for col in META_LEAD_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df['week_start_date'] = _to_day(df['week_start_date'])
    df['leads_count'] = (
        pd.to_numeric(df['leads_count'], errors='coerce').fillna(0).astype(int)
    )
    return df


# =============================================================================
# CALENDAR HELPERS
# =============================================================================

def monday_on_or_before(value: Any) -> date:
    """Return the Monday of the week containing the given date."""
    day = as_date(value)
    return day - timedelta(days=day.weekday())


def week_number(value: Any) -> int:
    """
    Week of year as stored on meta-lead records.

    ceil((days since Jan 1 + weekday of Jan 1 with Sunday=0 + 1) / 7)
    """
    day = as_date(value)
    jan_first = date(day.year, 1, 1)
    past_days = (day - jan_first).days
    jan_first_weekday = (jan_first.weekday() + 1) % 7
    return math.ceil((past_days + jan_first_weekday + 1) / 7)


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """Return (first day, last day) of a calendar month. Month is 1-12."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move (year, month) by offset months; month is 1-12."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


# =============================================================================
# META-LEAD RECORDS
# =============================================================================

def build_meta_lead_record(
    project_id: str,
    user_id: str,
    week_date: Any,
    leads_count: int
) -> Dict[str, Any]:
    """
    Prepare a meta-lead row for storage.

    Any date in the week is accepted; the stored week_start_date is its
    Monday, with week_number and year derived from that Monday.

    Raises:
        ValueError: if leads_count is negative
    """
    leads_count = int(leads_count)
    if leads_count < 0:
        raise ValueError(f"leads_count must be non-negative, got {leads_count}")

    monday = monday_on_or_before(week_date)
    return {
        'project_id': project_id,
        'user_id': user_id,
        'week_start_date': monday.isoformat(),
        'week_number': week_number(monday),
        'year': monday.year,
        'leads_count': leads_count,
    }
