# utils/lead_performance/metrics.py
"""
Period Aggregation for Lead Performance

Handles all lead metric calculations:
- Month filter (entry_date is the only partition key)
- Monday-aligned week buckets with manual + meta lead volume
- Funnel counts, money totals and rates
- 6-month rolling comparison
- Drill-through record selection and display status

Every function takes the records it needs and returns new objects;
inputs are never mutated and nothing is cached between calls.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Optional

import numpy as np
import pandas as pd

from .commissions import compute_billing_summary, compute_commissions
from .constants import (
    DEFAULT_LOCALE,
    DEFAULT_WEEKLY_GOAL,
    MAX_WEEKS_PER_MONTH,
    MONTH_ABBR,
    ROLLING_MONTHS,
    WEEKS_PER_MONTH_GOAL,
)
from .data_processor import (
    Records,
    as_date,
    month_bounds,
    monday_on_or_before,
    normalize_leads,
    normalize_meta_leads,
    shift_month,
)
from .models import (
    AttendanceStatus,
    BillingSummary,
    CommissionReport,
    FunnelMetrics,
    LeadResult,
    LeadStatus,
    MonthBucket,
    WeekBucket,
)

logger = logging.getLogger(__name__)


def _safe_percent(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is not positive."""
    if not denominator or denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def _between(series: pd.Series, start: date, end: date) -> pd.Series:
    return series.between(pd.Timestamp(start), pd.Timestamp(end))


def month_label(month: int, locale: str = DEFAULT_LOCALE) -> str:
    """Capitalized abbreviated month name (month is 1-12)."""
    labels = MONTH_ABBR.get(locale, MONTH_ABBR[DEFAULT_LOCALE])
    return labels[month - 1]


# =============================================================================
# PERIOD FILTER
# =============================================================================

def filter_by_month(leads: Records, month: int, year: int) -> pd.DataFrame:
    """
    Leads whose entry_date falls in the given calendar month.

    Args:
        leads: Lead records of one project
        month: 1-12
        year: Four-digit year

    Returns:
        Normalized DataFrame (leads without entry_date are excluded)
    """
    df = normalize_leads(leads)
    entry = df['entry_date']
    mask = (entry.dt.month == month) & (entry.dt.year == year)
    return df[mask]


def bucket_into_weeks(
    leads: Records,
    meta_leads: Records,
    month: int,
    year: int,
    weekly_goal: int = DEFAULT_WEEKLY_GOAL
) -> List[WeekBucket]:
    """
    Split a month into Monday-aligned weeks and count lead volume.

    Week 1 starts on the Monday on or before the 1st. Buckets are 7 days
    long; no bucket starts after the month's last day (at most 6 buckets).
    Manual leads come from the month's leads only, so leads of the
    neighbouring months that share an edge week are not counted. Meta
    leads are summed by their week_start_date.
    """
    monthly = filter_by_month(leads, month, year)
    meta = normalize_meta_leads(meta_leads)

    first_day, last_day = month_bounds(month, year)
    monday = monday_on_or_before(first_day)

    buckets = []
    for i in range(MAX_WEEKS_PER_MONTH):
        week_start = monday + timedelta(days=7 * i)
        if week_start > last_day:
            break
        week_end = week_start + timedelta(days=6)

        manual_leads = int(_between(monthly['entry_date'], week_start, week_end).sum())
        in_week = _between(meta['week_start_date'], week_start, week_end)
        meta_leads_count = int(meta.loc[in_week, 'leads_count'].sum())
        total = manual_leads + meta_leads_count

        buckets.append(WeekBucket(
            week=i + 1,
            week_start=week_start,
            week_end=week_end,
            manual_leads=manual_leads,
            meta_leads=meta_leads_count,
            total_leads=total,
            goal=weekly_goal,
            percentage=_safe_percent(total, weekly_goal),
        ))

    return buckets


def weeks_to_frame(
    buckets: List[WeekBucket],
    monthly_goal: Optional[int] = None
) -> pd.DataFrame:
    """
    Week buckets as a table, optionally with a month total row.

    The total row sums each volume column; its goal is the monthly goal
    and its percentage is total / monthly goal.
    """
    df = pd.DataFrame([b.to_dict() for b in buckets])
    if df.empty:
        return df

    if monthly_goal is not None:
        total_leads = int(df['total_leads'].sum())
        total_row = {
            'week': None,
            'week_start': df['week_start'].min(),
            'week_end': df['week_end'].max(),
            'manual_leads': int(df['manual_leads'].sum()),
            'meta_leads': int(df['meta_leads'].sum()),
            'total_leads': total_leads,
            'goal': monthly_goal,
            'percentage': _safe_percent(total_leads, monthly_goal),
        }
        df = pd.concat([df, pd.DataFrame([total_row])], ignore_index=True)

    return df


# =============================================================================
# FUNNEL METRICS
# =============================================================================

def compute_funnel_metrics(
    monthly_leads: Records,
    weekly_goal: int = DEFAULT_WEEKLY_GOAL
) -> FunnelMetrics:
    """
    Funnel counts, money totals and rates for one month of leads.

    Attendance runs on the tri-state flag: cancelled counts not-attended
    leads that had a call scheduled, no_show counts every not-attended
    lead, so the two overlap.

    All rates are 0 when their denominator is 0.
    """
    df = normalize_leads(monthly_leads)

    monthly_goal = weekly_goal * WEEKS_PER_MONTH_GOAL
    total_leads = len(df)

    has_call = df['scheduled_call_date'].notna()
    attended_flag = df['attended_meeting']
    not_attended = attended_flag.eq(False)

    scheduled = int(has_call.sum())
    attended = int(attended_flag.eq(True).sum())
    cancelled = int((not_attended & has_call).sum())
    no_show = int(not_attended.sum())
    offers_given = int((df['result'].notna() & df['result'].ne(LeadResult.NO.value)).sum())
    sales = int(df['sale_made'].sum())

    total_revenue = float(df['sale_amount'].fillna(0).sum())
    total_cash_collected = float(df['cash_collected'].fillna(0).sum())

    return FunnelMetrics(
        weekly_goal=weekly_goal,
        monthly_goal=monthly_goal,
        total_leads=total_leads,
        scheduled=scheduled,
        attended=attended,
        cancelled=cancelled,
        no_show=no_show,
        offers_given=offers_given,
        sales=sales,
        total_revenue=total_revenue,
        total_cash_collected=total_cash_collected,
        scheduled_rate=_safe_percent(scheduled, monthly_goal),
        show_rate=_safe_percent(attended, scheduled),
        close_rate=_safe_percent(sales, scheduled),
        goal_progress=_safe_percent(total_leads, monthly_goal),
        revenue_per_lead=total_revenue / total_leads if total_leads else 0.0,
        collection_rate=_safe_percent(total_cash_collected, total_revenue),
    )


# =============================================================================
# ROLLING MONTHS
# =============================================================================

def compute_rolling_months(
    leads: Records,
    meta_leads: Records,
    anchor_date: Any = None,
    locale: str = DEFAULT_LOCALE
) -> List[MonthBucket]:
    """
    Lead volume and sales for the 6 months ending at the anchor month.

    Args:
        leads: Lead records (bucketed by entry_date)
        meta_leads: Meta-lead records (bucketed by week_start_date)
        anchor_date: Any date in the last month of the window (default today)
        locale: Month label language

    Returns:
        6 MonthBucket, oldest first. Records outside the window are ignored.
    """
    anchor = as_date(anchor_date) if anchor_date is not None else date.today()

    buckets = {}
    for offset in range(ROLLING_MONTHS - 1, -1, -1):
        year, month = shift_month(anchor.year, anchor.month, -offset)
        buckets[(year, month)] = MonthBucket(
            year=year, month=month, label=month_label(month, locale)
        )

    df = normalize_leads(leads)
    df = df[df['entry_date'].notna()]
    for (year, month), group in df.groupby([df['entry_date'].dt.year, df['entry_date'].dt.month]):
        bucket = buckets.get((int(year), int(month)))
        if bucket is None:
            continue
        sold = group[group['sale_made']]
        bucket.manual_leads = len(group)
        bucket.sales = len(sold)
        bucket.revenue = float(sold['sale_amount'].fillna(0).sum())
        bucket.cash_collected = float(sold['cash_collected'].fillna(0).sum())

    meta = normalize_meta_leads(meta_leads)
    meta = meta[meta['week_start_date'].notna()]
    for (year, month), group in meta.groupby([meta['week_start_date'].dt.year, meta['week_start_date'].dt.month]):
        bucket = buckets.get((int(year), int(month)))
        if bucket is not None:
            bucket.meta_leads = int(group['leads_count'].sum())

    return list(buckets.values())


def months_to_frame(buckets: List[MonthBucket]) -> pd.DataFrame:
    """Rolling month buckets as a table (chart / export input)."""
    return pd.DataFrame([b.to_dict() for b in buckets])


# =============================================================================
# DRILL-THROUGH
# =============================================================================

def select_records_in_range(leads: Records, start: Any, end: Any) -> pd.DataFrame:
    """Leads with entry_date in [start, end], both ends inclusive."""
    df = normalize_leads(leads)
    return df[_between(df['entry_date'], as_date(start), as_date(end))]


def add_lead_status(leads: Records) -> pd.DataFrame:
    """
    Add the display `status` column.

    Priority: sale > attended > cancelled > no show > scheduled > pending.
    A plain 'no' attendance answer falls through to scheduled / pending.
    """
    df = normalize_leads(leads)
    status = df['attendance_status']

    conditions = [
        df['sale_made'].to_numpy(dtype=bool),
        status.eq(AttendanceStatus.ATTENDED.value).to_numpy(dtype=bool),
        status.eq(AttendanceStatus.CANCELLED.value).to_numpy(dtype=bool),
        status.eq(AttendanceStatus.NO_SHOW.value).to_numpy(dtype=bool),
        df['scheduled_call_date'].notna().to_numpy(dtype=bool),
    ]
    choices = [
        LeadStatus.SALE.value,
        LeadStatus.ATTENDED.value,
        LeadStatus.CANCELLED.value,
        LeadStatus.NO_SHOW.value,
        LeadStatus.SCHEDULED.value,
    ]
    df['status'] = np.select(conditions, choices, default=LeadStatus.PENDING.value)
    return df


# =============================================================================
# FACADE
# =============================================================================

class LeadMetrics:
    """
    Lead performance calculations for one project.

    Usage:
        metrics = LeadMetrics(leads_df, meta_leads_df, weekly_goal=50)

        funnel = metrics.funnel(month=3, year=2025)
        weeks = metrics.weeks(month=3, year=2025)
        trend = metrics.rolling_months()
        report = metrics.commissions(month=3, year=2025)
    """

    def __init__(
        self,
        leads: Records,
        meta_leads: Records = None,
        weekly_goal: Optional[int] = None
    ):
        """
        Initialize with data.

        Args:
            leads: Lead records of one project
            meta_leads: Weekly meta-lead records of the same project
            weekly_goal: Project weekly goal (DEFAULT_WEEKLY_GOAL when None)
        """
        self.leads_df = normalize_leads(leads)
        self.meta_leads_df = normalize_meta_leads(meta_leads)
        self.weekly_goal = weekly_goal if weekly_goal is not None else DEFAULT_WEEKLY_GOAL

    @property
    def monthly_goal(self) -> int:
        return self.weekly_goal * WEEKS_PER_MONTH_GOAL

    def monthly_leads(self, month: int, year: int) -> pd.DataFrame:
        return filter_by_month(self.leads_df, month, year)

    def funnel(self, month: int, year: int) -> FunnelMetrics:
        return compute_funnel_metrics(self.monthly_leads(month, year), self.weekly_goal)

    def weeks(self, month: int, year: int) -> List[WeekBucket]:
        return bucket_into_weeks(
            self.leads_df, self.meta_leads_df, month, year, self.weekly_goal
        )

    def rolling_months(self, anchor_date: Any = None, locale: str = DEFAULT_LOCALE) -> List[MonthBucket]:
        return compute_rolling_months(self.leads_df, self.meta_leads_df, anchor_date, locale)

    def commissions(self, month: int, year: int) -> CommissionReport:
        return compute_commissions(self.monthly_leads(month, year))

    def billing(self, month: int, year: int) -> BillingSummary:
        return compute_billing_summary(self.monthly_leads(month, year))

    def records_in_range(self, start: Any, end: Any) -> pd.DataFrame:
        return add_lead_status(select_records_in_range(self.leads_df, start, end))
