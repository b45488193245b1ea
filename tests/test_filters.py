"""Tests for the non-widget parts of the filter helpers."""
from datetime import date

from utils.lead_performance.filters import LeadFilters, year_options


def test_year_options_current_year_first():
    assert year_options(date(2025, 3, 15)) == [2025, 2024, 2023, 2022, 2021]


def test_year_options_span():
    assert year_options(date(2025, 1, 1), span=2) == [2025, 2024]


def test_filter_summary_locales():
    assert LeadFilters.get_filter_summary(3, 2025) == 'Marzo 2025'
    assert LeadFilters.get_filter_summary(12, 2024, 'en') == 'December 2024'
    assert LeadFilters.get_filter_summary(1, 2024, 'fr') == 'Enero 2024'
