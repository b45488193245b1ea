"""Chart builders produce valid Vega-Lite specs."""
import altair as alt
import pandas as pd

from utils.lead_performance.charts import LeadCharts
from utils.lead_performance.metrics import LeadMetrics, months_to_frame, weeks_to_frame


def test_weekly_chart_drops_total_row(scenario_leads):
    metrics = LeadMetrics(scenario_leads, weekly_goal=50)
    weeks_df = weeks_to_frame(metrics.weeks(3, 2025), monthly_goal=metrics.monthly_goal)

    chart = LeadCharts.build_weekly_chart(weeks_df, weekly_goal=50)

    assert isinstance(chart, alt.LayerChart)
    bar_data = chart.layer[0].data
    # 6 weeks x (manual, meta)
    assert len(bar_data) == 12
    assert 'Total' not in set(bar_data['week_label'])
    chart.to_dict()


def test_rolling_months_chart(scenario_leads, anchor_date):
    months_df = months_to_frame(LeadMetrics(scenario_leads).rolling_months(anchor_date))
    chart = LeadCharts.build_rolling_months_chart(months_df)

    assert isinstance(chart, alt.LayerChart)
    chart.to_dict()


def test_empty_inputs_give_placeholder():
    assert isinstance(LeadCharts.build_weekly_chart(pd.DataFrame()), alt.Chart)
    assert isinstance(LeadCharts.build_rolling_months_chart(pd.DataFrame()), alt.Chart)


def test_payment_method_chart(make_lead):
    billing = LeadMetrics([
        make_lead('2025-03-10', sale_made=True, sale_amount=500, payment_method='Efectivo'),
    ]).billing(3, 2025)

    chart = LeadCharts.build_payment_method_chart(billing)

    assert list(chart.data['payment_method']) == ['Efectivo']
    chart.to_dict()
