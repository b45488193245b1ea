# utils/lead_performance/filters.py
"""
Sidebar Filter Components for Lead Performance

Renders filter UI elements:
- Selected project guard (project chosen on the main page)
- Month / year selector
- Drill-through date range
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

import streamlit as st

from .constants import DEFAULT_LOCALE, MONTH_NAMES, YEAR_SELECTOR_SPAN
from .data_processor import month_bounds

logger = logging.getLogger(__name__)


def year_options(today: Optional[date] = None, span: int = YEAR_SELECTOR_SPAN) -> List[int]:
    """Current year first, then the previous span - 1 years."""
    today = today or date.today()
    return [today.year - i for i in range(span)]


class LeadFilters:
    """
    Filter widgets shared by the lead performance pages.

    Usage:
        project_id = LeadFilters.require_project()
        month, year = LeadFilters.render_period_selector(key="dashboard")
    """

    @staticmethod
    def require_project() -> str:
        """Selected project id; stops the page when none is selected."""
        project_id = st.session_state.get('project_id')
        if not project_id:
            st.warning("⚠️ Please select a project first")
            st.info("Go to the main page to choose a project")
            st.stop()
        return project_id

    @staticmethod
    def render_period_selector(
        key: str,
        locale: str = DEFAULT_LOCALE,
        today: Optional[date] = None
    ) -> Tuple[int, int]:
        """
        Month and year selectors in the sidebar (default: current month).

        Returns:
            (month 1-12, year)
        """
        today = today or date.today()
        names = MONTH_NAMES.get(locale, MONTH_NAMES[DEFAULT_LOCALE])

        with st.sidebar:
            st.markdown("### 📅 Period")
            col1, col2 = st.columns(2)
            with col1:
                month = st.selectbox(
                    "Month",
                    options=list(range(1, 13)),
                    index=today.month - 1,
                    format_func=lambda m: names[m - 1],
                    key=f"{key}_month"
                )
            with col2:
                year = st.selectbox(
                    "Year",
                    options=year_options(today),
                    index=0,
                    key=f"{key}_year"
                )

        logger.debug(f"Period selected: {month}/{year}")
        return month, year

    @staticmethod
    def render_date_range(month: int, year: int, key: str) -> Tuple[date, date]:
        """Inclusive drill-through range, defaulting to the selected month."""
        first_day, last_day = month_bounds(month, year)
        col1, col2 = st.columns(2)
        with col1:
            start = st.date_input("From", value=first_day, key=f"{key}_start")
        with col2:
            end = st.date_input("To", value=last_day, key=f"{key}_end")

        if start > end:
            st.warning("'From' is after 'To'; dates were swapped")
            start, end = end, start
        return start, end

    @staticmethod
    def get_filter_summary(month: int, year: int, locale: str = DEFAULT_LOCALE) -> str:
        names = MONTH_NAMES.get(locale, MONTH_NAMES[DEFAULT_LOCALE])
        return f"{names[month - 1]} {year}"
