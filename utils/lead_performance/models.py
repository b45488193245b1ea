# utils/lead_performance/models.py
"""
Data Classes for Lead Performance

Closed categorical types for lead fields and the result containers
returned by the metrics and commission calculators.

Attendance note:
    The lead form offers four answers (si / cancelada / no_show / no) but
    funnel arithmetic runs on the tri-state `attended_meeting` flag
    (True / False / None). AttendanceStatus keeps the detailed answer for
    display; `attended_flag` collapses it for the funnel.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd


# =============================================================================
# ENUMS
# =============================================================================

class AttendanceStatus(str, Enum):
    """Answer to 'did the lead attend the scheduled meeting?'"""
    ATTENDED = 'si'
    CANCELLED = 'cancelada'
    NO_SHOW = 'no_show'
    NOT_ATTENDED = 'no'

    @property
    def attended_flag(self) -> bool:
        return self is AttendanceStatus.ATTENDED

    @classmethod
    def parse(cls, value: Any) -> Optional['AttendanceStatus']:
        """
        Parse a stored value into a status.

        Accepts the form strings, legacy booleans and blanks.
        Unknown values are treated as unset.
        """
        if isinstance(value, AttendanceStatus):
            return value
        if isinstance(value, (bool, np.bool_)):
            return cls.ATTENDED if value else cls.NOT_ATTENDED
        if value is None or pd.isna(value):
            return None
        # TINYINT(1) columns come back as 0/1 (or 0.0/1.0 next to NULLs)
        if isinstance(value, (int, float, np.number)):
            return cls.ATTENDED if value else cls.NOT_ATTENDED

        text = str(value).strip().lower()
        if not text:
            return None
        if text in ('true', 'sí', '1'):
            return cls.ATTENDED
        if text in ('false', '0'):
            return cls.NOT_ATTENDED
        try:
            return cls(text)
        except ValueError:
            return None


class ChoiceEnum(str, Enum):
    """Closed set of form choices, matched case-insensitively."""

    @classmethod
    def parse(cls, value: Any) -> Optional['ChoiceEnum']:
        if value is None or not isinstance(value, str):
            return None
        text = value.strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None

    @classmethod
    def canonical(cls, value: Any) -> Any:
        """Member value for a known choice; other values are returned unchanged."""
        member = cls.parse(value)
        return member.value if member is not None else value


class LeadResult(ChoiceEnum):
    INTERESTED = 'interesado'
    NO = 'no'
    FOLLOW_UP = 'seguimiento'


class PaymentMethod(ChoiceEnum):
    CASH = 'Efectivo'
    INSTALLMENTS = 'Pago a plazos'
    SEQURA = 'Sequra'


class FormType(ChoiceEnum):
    GUIDE = 'guía'
    CALCULATOR = 'calculadora'
    DASHBOARD = 'dashboard'
    NEW_PROGRAM = 'nuevo programa'


class LeadStatus(str, Enum):
    """Display status of a lead in drill-through tables."""
    SALE = 'sale'
    ATTENDED = 'attended'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'
    SCHEDULED = 'scheduled'
    PENDING = 'pending'


# =============================================================================
# RESULT CONTAINERS
# =============================================================================

@dataclass
class WeekBucket:
    """Lead volume for one Monday-aligned week of a month."""
    week: int  # 1-based position within the month
    week_start: date
    week_end: date
    manual_leads: int
    meta_leads: int
    total_leads: int
    goal: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FunnelMetrics:
    """Funnel counts, money totals and rates for one month."""
    weekly_goal: int
    monthly_goal: int
    total_leads: int
    scheduled: int
    attended: int
    cancelled: int
    no_show: int
    offers_given: int
    sales: int
    total_revenue: float
    total_cash_collected: float
    scheduled_rate: float
    show_rate: float
    close_rate: float
    goal_progress: float = 0.0
    revenue_per_lead: float = 0.0
    collection_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CloserCommission:
    """Per-closer commission line."""
    closer: str
    sales: int = 0
    revenue: float = 0.0
    cash_collected: float = 0.0
    commission_from_sales: float = 0.0
    commission_from_cash: float = 0.0
    total_commission: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CommissionReport:
    """Setter and closer commissions for one month."""
    total_sales: int
    total_revenue: float
    total_cash_collected: float
    setter_commission_from_sales: float
    setter_commission_from_cash: float
    closer_commission_from_sales: float
    closer_commission_from_cash: float
    closer_breakdown: List[CloserCommission] = field(default_factory=list)

    def get_closer(self, name: str) -> Optional[CloserCommission]:
        for line in self.closer_breakdown:
            if line.closer == name:
                return line
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PaymentMethodTotal:
    payment_method: str
    count: int = 0
    amount: float = 0.0


@dataclass
class BillingSummary:
    """Financial view of one month (billing page)."""
    total_sales: int
    total_revenue: float
    total_cash_collected: float
    pending_payments: float
    average_sale_value: float
    by_payment_method: List[PaymentMethodTotal] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MonthBucket:
    """One month of the rolling comparison view."""
    year: int
    month: int  # 1-12
    label: str
    manual_leads: int = 0
    meta_leads: int = 0
    sales: int = 0
    revenue: float = 0.0
    cash_collected: float = 0.0

    @property
    def total_leads(self) -> int:
        return self.manual_leads + self.meta_leads

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['total_leads'] = self.total_leads
        return data
