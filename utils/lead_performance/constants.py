# utils/lead_performance/constants.py
"""
Constants for Lead Performance Module

Centralized configuration for:
- Commission rates
- Goal settings
- Calendar / month labels
- Color schemes
- Chart and export settings
"""

# =====================================================================
# COMMISSION RATES
# =====================================================================

# Setter: books the initial meeting
SETTER_COMMISSION_RATE = 0.07

# Closer: runs the sales meeting and closes the deal
CLOSER_COMMISSION_RATE = 0.08

# =====================================================================
# GOALS
# =====================================================================

# Used when a project has no weekly goal configured
DEFAULT_WEEKLY_GOAL = 50

# Monthly goal = weekly goal x 4 (fixed, not calendar-aware)
WEEKS_PER_MONTH_GOAL = 4

# =====================================================================
# CALENDAR
# =====================================================================

# Maximum number of Monday-aligned week buckets in a month view
MAX_WEEKS_PER_MONTH = 6

# Trailing months shown in the comparison view (anchor month included)
ROLLING_MONTHS = 6

MONTH_ABBR = {
    'es': ["Ene", "Feb", "Mar", "Abr", "May", "Jun",
           "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"],
    'en': ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
}

MONTH_NAMES = {
    'es': ["Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
           "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre"],
    'en': ["January", "February", "March", "April", "May", "June",
           "July", "August", "September", "October", "November", "December"],
}

DEFAULT_LOCALE = 'es'

# Years offered in month/year selectors (current year and N-1 previous)
YEAR_SELECTOR_SPAN = 5

# =====================================================================
# RECORD COLUMNS
# =====================================================================

LEAD_DATE_COLUMNS = ['entry_date', 'contact_date', 'scheduled_call_date']

LEAD_AMOUNT_COLUMNS = ['sale_amount', 'cash_collected', 'initial_payment']

LEAD_TEXT_COLUMNS = [
    'first_name', 'last_name', 'form_type', 'result',
    'payment_method', 'closer', 'setter', 'observations'
]

LEAD_COLUMNS = [
    'id', 'project_id', 'user_id',
    'first_name', 'last_name', 'form_type',
    'entry_date', 'contact_date', 'scheduled_call_date',
    'attended_meeting', 'result', 'sale_made', 'observations',
    'sale_amount', 'payment_method', 'cash_collected',
    'closer', 'setter', 'installment_count', 'initial_payment',
]

META_LEAD_COLUMNS = [
    'id', 'project_id', 'user_id',
    'week_start_date', 'week_number', 'year', 'leads_count',
]

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    # Lead volume
    "manual_leads": "#2ca02c",         # Green
    "meta_leads": "#1f77b4",           # Blue
    "goal": "#d62728",                 # Red

    # Money
    "revenue": "#FFA500",              # Orange
    "cash_collected": "#28a745",       # Green
    "pending": "#dc3545",              # Red

    # Funnel
    "sales": "#800080",                # Purple
    "achievement_good": "#28a745",     # Green (>=100%)
    "achievement_bad": "#dc3545",      # Red (<100%)

    # Misc
    "text_dark": "#333333",
    "text_light": "#666666",
    "grid": "#e0e0e0",
}

# =====================================================================
# CHART DIMENSIONS
# =====================================================================

CHART_WIDTH = 800
CHART_HEIGHT = 400

# =====================================================================
# CACHE SETTINGS
# =====================================================================

CACHE_TTL_SECONDS = 300  # 5 minutes

# =====================================================================
# EXPORT SETTINGS
# =====================================================================

EXCEL_STYLES = {
    "header_fill_color": "1f77b4",
    "header_font_color": "FFFFFF",
    "currency_format": '#,##0.00',
    "percent_format": '0.0%',
    "date_format": 'YYYY-MM-DD',
}

EXCEL_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
