"""Tests for utils.lead_performance.metrics: month filter, weeks, funnel, rolling months, drill-through."""
from datetime import date

import pandas as pd
import pytest

from utils.lead_performance.metrics import (
    LeadMetrics,
    add_lead_status,
    bucket_into_weeks,
    compute_funnel_metrics,
    compute_rolling_months,
    filter_by_month,
    month_label,
    months_to_frame,
    select_records_in_range,
    weeks_to_frame,
)


# ---------------------------------------------------------------------------
# filter_by_month
# ---------------------------------------------------------------------------

class TestFilterByMonth:

    def test_keeps_only_entry_dates_in_month(self, make_lead):
        leads = [
            make_lead('2025-02-28'),
            make_lead('2025-03-01'),
            make_lead('2025-03-31'),
            make_lead('2025-04-01'),
            make_lead('2024-03-15'),
        ]
        result = filter_by_month(leads, 3, 2025)
        assert len(result) == 2
        assert set(result['entry_date'].dt.day) == {1, 31}

    def test_other_dates_do_not_partition(self, make_lead):
        leads = [make_lead('2025-02-27', scheduled_call_date='2025-03-05')]
        assert filter_by_month(leads, 3, 2025).empty

    def test_missing_or_invalid_entry_date_is_excluded(self, make_lead):
        leads = [make_lead(None), make_lead('not a date'), make_lead('2025-03-02')]
        assert len(filter_by_month(leads, 3, 2025)) == 1

    def test_empty_input(self):
        assert filter_by_month([], 3, 2025).empty


# ---------------------------------------------------------------------------
# bucket_into_weeks
# ---------------------------------------------------------------------------

class TestBucketIntoWeeks:

    def test_scenario_buckets(self, scenario_leads):
        weeks = bucket_into_weeks(scenario_leads, [], 3, 2025, weekly_goal=50)
        by_start = {w.week_start: w for w in weeks}

        assert by_start[date(2025, 3, 3)].manual_leads == 1
        assert by_start[date(2025, 3, 3)].week_end == date(2025, 3, 9)
        assert by_start[date(2025, 3, 10)].manual_leads == 1
        assert by_start[date(2025, 3, 10)].week_end == date(2025, 3, 16)

    def test_first_bucket_starts_on_monday_on_or_before_first(self):
        # 1 Mar 2025 is a Saturday
        weeks = bucket_into_weeks([], [], 3, 2025)
        assert weeks[0].week_start == date(2025, 2, 24)
        assert all(w.week_start.weekday() == 0 for w in weeks)
        assert [w.week for w in weeks] == list(range(1, len(weeks) + 1))

    def test_march_2025_has_six_buckets(self):
        weeks = bucket_into_weeks([], [], 3, 2025)
        assert len(weeks) == 6
        assert weeks[-1].week_start == date(2025, 3, 31)

    def test_february_starting_on_monday_has_four_buckets(self):
        # 1 Feb 2021 is a Monday and Feb 2021 has 28 days
        weeks = bucket_into_weeks([], [], 2, 2021)
        assert len(weeks) == 4
        assert weeks[-1].week_end == date(2021, 2, 28)

    @pytest.mark.parametrize('month,year', [(1, 2024), (2, 2024), (3, 2025), (6, 2025), (12, 2025)])
    def test_bucket_completeness(self, make_lead, month, year):
        leads = [make_lead(f'{year}-{month:02d}-{day:02d}') for day in (1, 2, 7, 15, 28)]
        # Neighbouring months share edge weeks but must not be counted
        leads.append(make_lead('2023-12-31'))
        leads.append(make_lead('2026-01-01'))

        weeks = bucket_into_weeks(leads, [], month, year)
        assert sum(w.manual_leads for w in weeks) == len(filter_by_month(leads, month, year))

    def test_meta_leads_summed_by_week_start(self, scenario_leads):
        meta = [
            {'week_start_date': '2025-03-03', 'leads_count': 10},
            {'week_start_date': '2025-03-03', 'leads_count': 2},
            {'week_start_date': '2025-03-17', 'leads_count': 4},
            {'week_start_date': '2025-05-05', 'leads_count': 99},
        ]
        weeks = bucket_into_weeks(scenario_leads, meta, 3, 2025, weekly_goal=50)
        by_start = {w.week_start: w for w in weeks}

        second = by_start[date(2025, 3, 3)]
        assert second.meta_leads == 12
        assert second.total_leads == 13
        assert second.percentage == pytest.approx(26.0)
        assert by_start[date(2025, 3, 17)].meta_leads == 4
        assert sum(w.meta_leads for w in weeks) == 16

    def test_zero_goal_gives_zero_percentage(self, scenario_leads):
        weeks = bucket_into_weeks(scenario_leads, [], 3, 2025, weekly_goal=0)
        assert all(w.percentage == 0 for w in weeks)
        assert all(w.goal == 0 for w in weeks)

    def test_weeks_to_frame_total_row(self, scenario_leads):
        weeks = bucket_into_weeks(scenario_leads, [], 3, 2025, weekly_goal=50)
        df = weeks_to_frame(weeks, monthly_goal=200)

        assert len(df) == len(weeks) + 1
        total = df.iloc[-1]
        assert pd.isna(total['week'])
        assert total['total_leads'] == 2
        assert total['goal'] == 200
        assert total['percentage'] == pytest.approx(1.0)

    def test_weeks_to_frame_without_goal_has_no_total(self, scenario_leads):
        weeks = bucket_into_weeks(scenario_leads, [], 3, 2025)
        assert len(weeks_to_frame(weeks)) == len(weeks)


# ---------------------------------------------------------------------------
# compute_funnel_metrics
# ---------------------------------------------------------------------------

class TestComputeFunnelMetrics:

    @pytest.fixture
    def month_leads(self, make_lead):
        return [
            make_lead('2025-03-03', scheduled_call_date='2025-03-05', attended_meeting=True),
            make_lead('2025-03-04', scheduled_call_date='2025-03-06', attended_meeting=False),
            make_lead('2025-03-05', attended_meeting=False),
            make_lead('2025-03-06', scheduled_call_date='2025-03-08', result='interesado'),
            make_lead('2025-03-07', result='no'),
            make_lead(
                '2025-03-10', scheduled_call_date='2025-03-11', attended_meeting=True,
                result='interesado', sale_made=True, sale_amount=1000, cash_collected=400,
            ),
        ]

    def test_counts(self, month_leads):
        funnel = compute_funnel_metrics(month_leads, weekly_goal=50)

        assert funnel.total_leads == 6
        assert funnel.scheduled == 4
        assert funnel.attended == 2
        assert funnel.cancelled == 1
        assert funnel.no_show == 2
        assert funnel.offers_given == 2
        assert funnel.sales == 1

    def test_money_and_rates(self, month_leads):
        funnel = compute_funnel_metrics(month_leads, weekly_goal=50)

        assert funnel.monthly_goal == 200
        assert funnel.total_revenue == pytest.approx(1000)
        assert funnel.total_cash_collected == pytest.approx(400)
        assert funnel.scheduled_rate == pytest.approx(2.0)
        assert funnel.show_rate == pytest.approx(50.0)
        assert funnel.close_rate == pytest.approx(25.0)
        assert funnel.goal_progress == pytest.approx(3.0)
        assert funnel.revenue_per_lead == pytest.approx(1000 / 6)
        assert funnel.collection_rate == pytest.approx(40.0)

    def test_form_answers_collapse_to_attended_flag(self, make_lead):
        leads = [
            make_lead('2025-03-03', scheduled_call_date='2025-03-05', attended_meeting='si'),
            make_lead('2025-03-03', scheduled_call_date='2025-03-05', attended_meeting='cancelada'),
            make_lead('2025-03-03', scheduled_call_date='2025-03-05', attended_meeting='no_show'),
            make_lead('2025-03-03', attended_meeting='no'),
        ]
        funnel = compute_funnel_metrics(leads)

        assert funnel.attended == 1
        assert funnel.no_show == 3
        assert funnel.cancelled == 2

    def test_result_no_is_not_an_offer_in_any_case(self, make_lead):
        leads = [
            make_lead('2025-03-03', result='No'),
            make_lead('2025-03-04', result='INTERESADO'),
            make_lead('2025-03-05', result='  '),
        ]
        assert compute_funnel_metrics(leads).offers_given == 1

    def test_zero_goal_is_safe(self, month_leads):
        funnel = compute_funnel_metrics(month_leads, weekly_goal=0)
        assert funnel.scheduled_rate == 0
        assert funnel.goal_progress == 0

    def test_rates_zero_without_scheduled_calls(self, make_lead):
        leads = [
            make_lead('2025-03-03', attended_meeting=True, sale_made=True, sale_amount=500),
            make_lead('2025-03-04', sale_made=True),
        ]
        funnel = compute_funnel_metrics(leads)

        assert funnel.scheduled == 0
        assert funnel.show_rate == 0
        assert funnel.close_rate == 0

    def test_null_amounts_sum_as_zero(self, make_lead):
        leads = [make_lead('2025-03-03', sale_made=True), make_lead('2025-03-04', sale_amount='n/a')]
        funnel = compute_funnel_metrics(leads)
        assert funnel.total_revenue == 0
        assert funnel.collection_rate == 0

    def test_empty_month(self):
        funnel = compute_funnel_metrics([], weekly_goal=50)
        assert funnel.total_leads == 0
        assert funnel.revenue_per_lead == 0
        assert funnel.to_dict()['monthly_goal'] == 200


# ---------------------------------------------------------------------------
# compute_rolling_months
# ---------------------------------------------------------------------------

class TestComputeRollingMonths:

    def test_six_months_oldest_first(self, anchor_date):
        months = compute_rolling_months([], [], anchor_date)
        assert [(m.year, m.month) for m in months] == [
            (2024, 10), (2024, 11), (2024, 12), (2025, 1), (2025, 2), (2025, 3)
        ]
        assert [m.label for m in months] == ['Oct', 'Nov', 'Dic', 'Ene', 'Feb', 'Mar']

    def test_english_labels(self, anchor_date):
        months = compute_rolling_months([], [], anchor_date, locale='en')
        assert [m.label for m in months] == ['Oct', 'Nov', 'Dec', 'Jan', 'Feb', 'Mar']

    def test_records_outside_window_are_dropped(self, make_lead, anchor_date):
        leads = [
            make_lead('2024-07-15'),  # 8 months before the anchor
            make_lead('2025-04-02'),  # after the anchor month
            make_lead('2024-10-01'),
            make_lead('2025-03-31'),
        ]
        months = compute_rolling_months(leads, [], anchor_date)
        assert sum(m.manual_leads for m in months) == 2
        assert months[0].manual_leads == 1
        assert months[-1].manual_leads == 1

    def test_sales_and_meta_leads(self, scenario_leads, anchor_date):
        meta = [
            {'week_start_date': '2025-01-06', 'leads_count': 7},
            {'week_start_date': '2025-01-13', 'leads_count': 3},
            {'week_start_date': '2024-01-08', 'leads_count': 50},
        ]
        months = compute_rolling_months(scenario_leads, meta, anchor_date)
        by_month = {(m.year, m.month): m for m in months}

        march = by_month[(2025, 3)]
        assert march.manual_leads == 2
        assert march.sales == 1
        assert march.revenue == pytest.approx(2000)
        assert march.cash_collected == pytest.approx(2000)

        january = by_month[(2025, 1)]
        assert january.meta_leads == 10
        assert january.total_leads == 10
        assert sum(m.meta_leads for m in months) == 10

    def test_defaults_to_current_month(self, make_lead):
        today = date.today()
        leads = [make_lead(today.isoformat())]

        months = compute_rolling_months(leads, [])
        facade_months = LeadMetrics(leads).rolling_months()

        for result in (months, facade_months):
            assert (result[-1].year, result[-1].month) == (today.year, today.month)
            assert result[-1].manual_leads == 1

    def test_year_boundary(self, make_lead):
        months = compute_rolling_months([make_lead('2025-12-20')], [], date(2026, 2, 1))
        assert months[0].year == 2025 and months[0].month == 9
        assert {(m.year, m.month): m.manual_leads for m in months}[(2025, 12)] == 1

    def test_months_to_frame(self, scenario_leads, anchor_date):
        df = months_to_frame(compute_rolling_months(scenario_leads, [], anchor_date))
        assert len(df) == 6
        assert df.iloc[-1]['total_leads'] == 2


# ---------------------------------------------------------------------------
# Drill-through
# ---------------------------------------------------------------------------

class TestDrillThrough:

    def test_range_is_inclusive(self, make_lead):
        leads = [
            make_lead('2025-03-02'),
            make_lead('2025-03-03'),
            make_lead('2025-03-09'),
            make_lead('2025-03-10'),
        ]
        result = select_records_in_range(leads, '2025-03-03', date(2025, 3, 9))
        assert list(result['entry_date'].dt.day) == [3, 9]

    def test_status_priority(self, make_lead):
        leads = [
            make_lead('2025-03-01', sale_made=True, attended_meeting='si'),
            make_lead('2025-03-02', attended_meeting='si'),
            make_lead('2025-03-03', attended_meeting='cancelada', scheduled_call_date='2025-03-05'),
            make_lead('2025-03-04', attended_meeting='no_show'),
            make_lead('2025-03-05', attended_meeting='no', scheduled_call_date='2025-03-07'),
            make_lead('2025-03-06'),
        ]
        result = add_lead_status(leads)
        assert list(result['status']) == [
            'sale', 'attended', 'cancelled', 'no_show', 'scheduled', 'pending'
        ]


# ---------------------------------------------------------------------------
# LeadMetrics facade
# ---------------------------------------------------------------------------

class TestLeadMetrics:

    def test_scenario(self, scenario_leads):
        metrics = LeadMetrics(scenario_leads, weekly_goal=50)
        funnel = metrics.funnel(3, 2025)

        assert funnel.monthly_goal == 200
        assert funnel.total_leads == 2
        assert funnel.sales == 1
        assert funnel.total_revenue == pytest.approx(2000)

        ben = metrics.commissions(3, 2025).get_closer('Ben')
        assert ben.commission_from_cash == pytest.approx(160.0)

    def test_default_goal(self, scenario_leads):
        metrics = LeadMetrics(scenario_leads)
        assert metrics.weekly_goal == 50
        assert metrics.monthly_goal == 200

    def test_input_frame_not_mutated(self, scenario_leads):
        leads_df = pd.DataFrame(scenario_leads)
        before = leads_df.copy()

        metrics = LeadMetrics(leads_df)
        metrics.funnel(3, 2025)
        metrics.weeks(3, 2025)
        metrics.records_in_range('2025-03-01', '2025-03-31')

        pd.testing.assert_frame_equal(leads_df, before)

    def test_records_in_range_has_status(self, scenario_leads):
        records = LeadMetrics(scenario_leads).records_in_range('2025-03-01', '2025-03-31')
        assert list(records['status']) == ['pending', 'sale']

    def test_month_label(self):
        assert month_label(9) == 'Sep'
        assert month_label(1, 'en') == 'Jan'
