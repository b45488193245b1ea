# utils/lead_performance/__init__.py
"""
Lead Performance Module

Utilities for the lead dashboard and billing & commissions pages.
All components are self-contained within this module.

Components:
- models: Categorical types and result containers
- data_processor: Record normalization and calendar helpers
- metrics: Month filter, week buckets, funnel, rolling months, drill-through
- commissions: Setter / closer commissions and billing summary
- queries: Project-scoped record store with caching
- charts: Altair visualizations and st.metric cards
- filters: Sidebar filter components
- export: Formatted Excel report generation

Usage:
    from utils.lead_performance import (
        LeadQueries,
        LeadMetrics,
        LeadCharts,
        LeadPerformanceExport,
    )
"""

from .queries import LeadQueries, RecordStoreError, get_projects, find_project
from .metrics import (
    LeadMetrics,
    filter_by_month,
    bucket_into_weeks,
    weeks_to_frame,
    compute_funnel_metrics,
    compute_rolling_months,
    months_to_frame,
    select_records_in_range,
    add_lead_status,
    month_label,
)
from .commissions import (
    compute_commissions,
    compute_lead_commissions,
    compute_billing_summary,
    closer_breakdown_to_frame,
)
from .data_processor import (
    normalize_leads,
    normalize_meta_leads,
    monday_on_or_before,
    week_number,
    build_meta_lead_record,
)
from .models import (
    AttendanceStatus,
    LeadResult,
    PaymentMethod,
    ChoiceEnum,
    FormType,
    LeadStatus,
    WeekBucket,
    FunnelMetrics,
    CloserCommission,
    CommissionReport,
    PaymentMethodTotal,
    BillingSummary,
    MonthBucket,
)
from .filters import LeadFilters, year_options
from .charts import LeadCharts
from .export import LeadPerformanceExport

# Constants
from .constants import (
    COLORS,
    SETTER_COMMISSION_RATE,
    CLOSER_COMMISSION_RATE,
    DEFAULT_WEEKLY_GOAL,
    MONTH_NAMES,
    YEAR_SELECTOR_SPAN,
    EXCEL_MIME_TYPE,
)

__all__ = [
    # Classes
    'LeadQueries',
    'LeadMetrics',
    'LeadFilters',
    'LeadCharts',
    'LeadPerformanceExport',
    'RecordStoreError',

    # Functions
    'get_projects',
    'year_options',
    'find_project',
    'filter_by_month',
    'bucket_into_weeks',
    'weeks_to_frame',
    'compute_funnel_metrics',
    'compute_rolling_months',
    'months_to_frame',
    'select_records_in_range',
    'add_lead_status',
    'month_label',
    'compute_commissions',
    'compute_lead_commissions',
    'compute_billing_summary',
    'closer_breakdown_to_frame',
    'normalize_leads',
    'normalize_meta_leads',
    'monday_on_or_before',
    'week_number',
    'build_meta_lead_record',

    # Models
    'AttendanceStatus',
    'LeadResult',
    'PaymentMethod',
    'ChoiceEnum',
    'FormType',
    'LeadStatus',
    'WeekBucket',
    'FunnelMetrics',
    'CloserCommission',
    'CommissionReport',
    'PaymentMethodTotal',
    'BillingSummary',
    'MonthBucket',

    # Constants
    'COLORS',
    'SETTER_COMMISSION_RATE',
    'CLOSER_COMMISSION_RATE',
    'DEFAULT_WEEKLY_GOAL',
    'MONTH_NAMES',
    'YEAR_SELECTOR_SPAN',
    'EXCEL_MIME_TYPE',
]

__version__ = '1.0.0'
