# utils/lead_performance/commissions.py
"""
Commission & Billing Calculations for Lead Performance

Commission rules (one canonical formula set):
- Setter: 7% of revenue and 7% of cash collected
- Closer: 8% of revenue plus 8% of cash collected, per closer
- Only leads with sale_made count towards commissions

Per-lead display commissions are cash-collected based (at-a-glance rows),
plus the setter share of the sale amount.

Billing summary: revenue / cash / pending / average ticket and the
split by payment method.
"""

import logging
from typing import List

import pandas as pd

from .constants import CLOSER_COMMISSION_RATE, SETTER_COMMISSION_RATE
from .data_processor import Records, normalize_leads
from .models import (
    BillingSummary,
    CloserCommission,
    CommissionReport,
    PaymentMethodTotal,
)

logger = logging.getLogger(__name__)


def _money(value: float) -> float:
    return round(float(value), 2)


# =============================================================================
# COMMISSION REPORT
# =============================================================================

def compute_commissions(monthly_leads: Records) -> CommissionReport:
    """
    Setter and closer commissions for one month of leads.

    Args:
        monthly_leads: Leads already filtered to the reporting month

    Returns:
        CommissionReport; closer_breakdown is sorted by total commission
        (descending, ties keep the order closers first appear in)
    """
    df = normalize_leads(monthly_leads)
    sold = df[df['sale_made']]

    total_revenue = float(sold['sale_amount'].fillna(0).sum())
    total_cash_collected = float(sold['cash_collected'].fillna(0).sum())

    return CommissionReport(
        total_sales=len(sold),
        total_revenue=total_revenue,
        total_cash_collected=total_cash_collected,
        setter_commission_from_sales=_money(total_revenue * SETTER_COMMISSION_RATE),
        setter_commission_from_cash=_money(total_cash_collected * SETTER_COMMISSION_RATE),
        closer_commission_from_sales=_money(total_revenue * CLOSER_COMMISSION_RATE),
        closer_commission_from_cash=_money(total_cash_collected * CLOSER_COMMISSION_RATE),
        closer_breakdown=_closer_breakdown(sold),
    )


def _closer_breakdown(sold: pd.DataFrame) -> List[CloserCommission]:
    """Aggregate sold leads by closer; leads without closer are skipped."""
    with_closer = sold[sold['closer'].notna()]
    if with_closer.empty:
        return []

    amounts = with_closer.assign(
        sale_amount=with_closer['sale_amount'].fillna(0),
        cash_collected=with_closer['cash_collected'].fillna(0),
    )

    # sort=False keeps first-appearance order for the stable sort below
    summary = amounts.groupby('closer', sort=False).agg(
        sales=('sale_made', 'size'),
        revenue=('sale_amount', 'sum'),
        cash_collected=('cash_collected', 'sum'),
    ).reset_index()

    summary['commission_from_sales'] = summary['revenue'] * CLOSER_COMMISSION_RATE
    summary['commission_from_cash'] = summary['cash_collected'] * CLOSER_COMMISSION_RATE
    summary['total_commission'] = (
        summary['commission_from_sales'] + summary['commission_from_cash']
    )

    summary = summary.sort_values('total_commission', ascending=False, kind='stable')

    return [
        CloserCommission(
            closer=str(row.closer),
            sales=int(row.sales),
            revenue=float(row.revenue),
            cash_collected=float(row.cash_collected),
            commission_from_sales=_money(row.commission_from_sales),
            commission_from_cash=_money(row.commission_from_cash),
            total_commission=_money(row.total_commission),
        )
        for row in summary.itertuples(index=False)
    ]


def closer_breakdown_to_frame(report: CommissionReport) -> pd.DataFrame:
    """Closer breakdown as a table (display / export)."""
    return pd.DataFrame([line.to_dict() for line in report.closer_breakdown])


# =============================================================================
# PER-LEAD COMMISSIONS
# =============================================================================

def compute_lead_commissions(leads: Records) -> pd.DataFrame:
    """
    Add per-lead commission columns for list views.

    - setter_commission_sale: sale_amount x 7%
    - setter_commission_cash: cash_collected x 7%
    - closer_commission: cash_collected x 8%

    Null amounts give 0.
    """
    df = normalize_leads(leads)
    sale_amount = df['sale_amount'].fillna(0)
    cash_collected = df['cash_collected'].fillna(0)

    df['setter_commission_sale'] = (sale_amount * SETTER_COMMISSION_RATE).round(2)
    df['setter_commission_cash'] = (cash_collected * SETTER_COMMISSION_RATE).round(2)
    df['closer_commission'] = (cash_collected * CLOSER_COMMISSION_RATE).round(2)
    return df


# =============================================================================
# BILLING
# =============================================================================

def compute_billing_summary(monthly_leads: Records) -> BillingSummary:
    """
    Financial summary of one month of leads.

    pending_payments = revenue - cash collected; it is not clamped, so
    malformed rows (cash > sale amount) can make it negative.
    """
    df = normalize_leads(monthly_leads)

    total_sales = int(df['sale_made'].sum())
    total_revenue = float(df['sale_amount'].fillna(0).sum())
    total_cash_collected = float(df['cash_collected'].fillna(0).sum())

    return BillingSummary(
        total_sales=total_sales,
        total_revenue=total_revenue,
        total_cash_collected=total_cash_collected,
        pending_payments=total_revenue - total_cash_collected,
        average_sale_value=total_revenue / total_sales if total_sales else 0.0,
        by_payment_method=_payment_method_breakdown(df),
    )


def _payment_method_breakdown(df: pd.DataFrame) -> List[PaymentMethodTotal]:
    sold = df[df['sale_made'] & df['payment_method'].notna()]
    if sold.empty:
        return []

    summary = sold.assign(sale_amount=sold['sale_amount'].fillna(0)).groupby(
        'payment_method', sort=False
    ).agg(
        sales=('sale_made', 'size'),
        amount=('sale_amount', 'sum'),
    ).reset_index()

    summary = summary.sort_values('amount', ascending=False, kind='stable')

    return [
        PaymentMethodTotal(
            payment_method=str(row.payment_method),
            count=int(row.sales),
            amount=float(row.amount),
        )
        for row in summary.itertuples(index=False)
    ]
