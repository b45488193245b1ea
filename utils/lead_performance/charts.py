# utils/lead_performance/charts.py
"""
Altair Chart Builders for Lead Performance

All visualization components using Altair:
- Funnel KPI cards (using st.metric)
- Weekly lead volume (stacked manual + meta, goal rule)
- 6-month rolling comparison (leads bars + sales line)
- Commission / billing summary cards
"""

import logging
from typing import List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from .constants import CHART_HEIGHT, CHART_WIDTH, COLORS
from .models import BillingSummary, CommissionReport, FunnelMetrics

logger = logging.getLogger(__name__)


def _week_label(row) -> str:
    if pd.isna(row['week']):
        return "Total"
    return f"S{int(row['week'])} ({row['week_start']:%d/%m})"


class LeadCharts:
    """
    Chart builders for the lead performance dashboard.

    All methods are static - can be called without instantiation.

    Usage:
        LeadCharts.render_funnel_cards(funnel)
        chart = LeadCharts.build_weekly_chart(weeks_df)
        st.altair_chart(chart, use_container_width=True)
    """

    # =========================================================================
    # KPI CARDS (Using st.metric)
    # =========================================================================

    @staticmethod
    def render_funnel_cards(funnel: FunnelMetrics):
        """
        Render funnel KPI cards.

        Layout:
        - 🎯 VOLUME: Leads vs goal, Scheduled, Attended, Sales
        - 📈 RATES: Scheduled rate, Show rate, Close rate, Offers
        - 💰 MONEY: Revenue, Cash collected, Revenue/lead, Collection rate
        """
        with st.container(border=True):
            st.markdown("**🎯 VOLUME**")
            col1, col2, col3, col4 = st.columns(4)

            with col1:
                st.metric(
                    label="Leads",
                    value=f"{funnel.total_leads:,}",
                    delta=f"{funnel.goal_progress:.1f}% of {funnel.monthly_goal:,}",
                    delta_color="normal" if funnel.goal_progress >= 100 else "off",
                    help="Manual leads entered this month. Monthly goal = weekly goal x 4"
                )
            with col2:
                st.metric(
                    label="Scheduled",
                    value=f"{funnel.scheduled:,}",
                    help="Leads with a scheduled call date"
                )
            with col3:
                st.metric(
                    label="Attended",
                    value=f"{funnel.attended:,}",
                    delta=f"{funnel.no_show:,} no show" if funnel.no_show else None,
                    delta_color="inverse",
                    help="Leads that attended the meeting. No show counts every lead marked as not attended"
                )
            with col4:
                st.metric(
                    label="Sales",
                    value=f"{funnel.sales:,}",
                    help="Leads with sale made"
                )

        with st.container(border=True):
            st.markdown("**📈 RATES**")
            col1, col2, col3, col4 = st.columns(4)

            with col1:
                st.metric(
                    label="Scheduled Rate",
                    value=f"{funnel.scheduled_rate:.1f}%",
                    help="Scheduled / monthly goal"
                )
            with col2:
                st.metric(
                    label="Show Rate",
                    value=f"{funnel.show_rate:.1f}%",
                    help="Attended / scheduled"
                )
            with col3:
                st.metric(
                    label="Close Rate",
                    value=f"{funnel.close_rate:.1f}%",
                    help="Sales / scheduled"
                )
            with col4:
                st.metric(
                    label="Offers Given",
                    value=f"{funnel.offers_given:,}",
                    delta=f"{funnel.cancelled:,} cancelled" if funnel.cancelled else None,
                    delta_color="inverse",
                    help="Leads with a result other than 'no'"
                )

        with st.container(border=True):
            st.markdown("**💰 MONEY**")
            col1, col2, col3, col4 = st.columns(4)

            with col1:
                st.metric(label="Revenue", value=f"€{funnel.total_revenue:,.2f}")
            with col2:
                st.metric(label="Cash Collected", value=f"€{funnel.total_cash_collected:,.2f}")
            with col3:
                st.metric(
                    label="Revenue / Lead",
                    value=f"€{funnel.revenue_per_lead:,.2f}"
                )
            with col4:
                st.metric(
                    label="Collection Rate",
                    value=f"{funnel.collection_rate:.1f}%",
                    help="Cash collected / revenue"
                )

    @staticmethod
    def render_commission_cards(report: CommissionReport, billing: BillingSummary):
        """Render billing and commission summary cards."""
        with st.container(border=True):
            st.markdown("**💶 BILLING**")
            col1, col2, col3, col4 = st.columns(4)

            col1.metric("Revenue", f"€{billing.total_revenue:,.2f}")
            col2.metric("Cash Collected", f"€{billing.total_cash_collected:,.2f}")
            col3.metric(
                "Pending",
                f"€{billing.pending_payments:,.2f}",
                help="Revenue minus cash collected"
            )
            col4.metric(
                "Average Sale",
                f"€{billing.average_sale_value:,.2f}",
                help=f"Revenue / {billing.total_sales} sales"
            )

        with st.container(border=True):
            st.markdown("**🤝 COMMISSIONS**")
            col1, col2, col3, col4 = st.columns(4)

            col1.metric("Setter (sales 7%)", f"€{report.setter_commission_from_sales:,.2f}")
            col2.metric("Setter (cash 7%)", f"€{report.setter_commission_from_cash:,.2f}")
            col3.metric("Closer (sales 8%)", f"€{report.closer_commission_from_sales:,.2f}")
            col4.metric("Closer (cash 8%)", f"€{report.closer_commission_from_cash:,.2f}")

    # =========================================================================
    # WEEKLY CHART
    # =========================================================================

    @staticmethod
    def build_weekly_chart(
        weeks_df: pd.DataFrame,
        weekly_goal: Optional[int] = None,
        title: str = "📅 Weekly Leads vs Goal"
    ) -> alt.Chart:
        """
        Stacked bars (manual + meta leads) per week with the goal as a rule.

        Args:
            weeks_df: Output of weeks_to_frame (a total row is dropped)
            weekly_goal: Goal line value (default: the goal column)
            title: Chart title
        """
        if weeks_df.empty:
            return LeadCharts._empty_chart("No data available")

        df = weeks_df[weeks_df['week'].notna()].copy()
        df['week_label'] = df.apply(_week_label, axis=1)
        week_order = df['week_label'].tolist()

        bar_data = df.melt(
            id_vars=['week_label', 'total_leads', 'percentage'],
            value_vars=['manual_leads', 'meta_leads'],
            var_name='Source',
            value_name='Leads'
        )
        bar_data['Source'] = bar_data['Source'].map({
            'manual_leads': 'Manual',
            'meta_leads': 'Meta',
        })

        color_scale = alt.Scale(
            domain=['Manual', 'Meta'],
            range=[COLORS['manual_leads'], COLORS['meta_leads']]
        )

        bars = alt.Chart(bar_data).mark_bar().encode(
            x=alt.X('week_label:N', sort=week_order, title='Week'),
            y=alt.Y('Leads:Q', stack='zero', title='Leads'),
            color=alt.Color('Source:N', scale=color_scale, legend=alt.Legend(orient='bottom')),
            tooltip=[
                alt.Tooltip('week_label:N', title='Week'),
                alt.Tooltip('Source:N', title='Source'),
                alt.Tooltip('Leads:Q', title='Leads'),
                alt.Tooltip('total_leads:Q', title='Total'),
                alt.Tooltip('percentage:Q', title='% of goal', format='.1f')
            ]
        )

        goal = weekly_goal if weekly_goal is not None else int(df['goal'].iloc[0])
        rule = alt.Chart(pd.DataFrame({'goal': [goal]})).mark_rule(
            color=COLORS['goal'], strokeDash=[6, 4], strokeWidth=2
        ).encode(
            y='goal:Q',
            tooltip=[alt.Tooltip('goal:Q', title='Weekly goal')]
        )

        return alt.layer(bars, rule).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # ROLLING MONTHS CHART
    # =========================================================================

    @staticmethod
    def build_rolling_months_chart(
        months_df: pd.DataFrame,
        title: str = "📊 Last 6 Months"
    ) -> alt.Chart:
        """
        Grouped bars (manual / meta leads) per month with sales as a line.

        Months keep the order of months_df (oldest first).
        """
        if months_df.empty:
            return LeadCharts._empty_chart("No data available")

        df = months_df.copy()
        df['period'] = df['label'] + ' ' + df['year'].astype(str)
        month_order = df['period'].tolist()

        bar_data = df.melt(
            id_vars=['period'],
            value_vars=['manual_leads', 'meta_leads'],
            var_name='Source',
            value_name='Leads'
        )
        bar_data['Source'] = bar_data['Source'].map({
            'manual_leads': 'Manual',
            'meta_leads': 'Meta',
        })

        color_scale = alt.Scale(
            domain=['Manual', 'Meta'],
            range=[COLORS['manual_leads'], COLORS['meta_leads']]
        )

        bars = alt.Chart(bar_data).mark_bar().encode(
            x=alt.X('period:N', sort=month_order, title='Month'),
            y=alt.Y('Leads:Q', title='Leads'),
            color=alt.Color('Source:N', scale=color_scale, legend=alt.Legend(orient='bottom')),
            xOffset='Source:N',
            tooltip=[
                alt.Tooltip('period:N', title='Month'),
                alt.Tooltip('Source:N', title='Source'),
                alt.Tooltip('Leads:Q', title='Leads')
            ]
        )

        line = alt.Chart(df).mark_line(
            point=True,
            color=COLORS['sales'],
            strokeWidth=2
        ).encode(
            x=alt.X('period:N', sort=month_order),
            y=alt.Y('sales:Q', title='Sales'),
            tooltip=[
                alt.Tooltip('period:N', title='Month'),
                alt.Tooltip('sales:Q', title='Sales'),
                alt.Tooltip('revenue:Q', title='Revenue', format=',.2f'),
                alt.Tooltip('cash_collected:Q', title='Cash', format=',.2f')
            ]
        )

        return alt.layer(bars, line).resolve_scale(
            y='independent'
        ).properties(
            width=CHART_WIDTH,
            height=CHART_HEIGHT,
            title=title
        )

    # =========================================================================
    # BILLING CHART
    # =========================================================================

    @staticmethod
    def build_payment_method_chart(billing: BillingSummary) -> alt.Chart:
        """Donut of revenue by payment method."""
        if not billing.by_payment_method:
            return LeadCharts._empty_chart("No sales with payment method")

        df = pd.DataFrame([
            {'payment_method': p.payment_method, 'count': p.count, 'amount': p.amount}
            for p in billing.by_payment_method
        ])

        return alt.Chart(df).mark_arc(innerRadius=60).encode(
            theta=alt.Theta('amount:Q'),
            color=alt.Color('payment_method:N', title='Payment method',
                            legend=alt.Legend(orient='bottom')),
            tooltip=[
                alt.Tooltip('payment_method:N', title='Payment method'),
                alt.Tooltip('count:Q', title='Sales'),
                alt.Tooltip('amount:Q', title='Amount', format=',.2f')
            ]
        ).properties(
            height=CHART_HEIGHT,
            title="💳 Revenue by Payment Method"
        )

    # =========================================================================
    # TABLES
    # =========================================================================

    @staticmethod
    def render_closer_table(closer_df: pd.DataFrame):
        """Closer commission breakdown as a formatted dataframe."""
        if closer_df.empty:
            st.info("No closed sales with an assigned closer in this period.")
            return

        st.dataframe(
            closer_df,
            hide_index=True,
            use_container_width=True,
            column_config={
                'closer': st.column_config.TextColumn('Closer'),
                'sales': st.column_config.NumberColumn('Sales'),
                'revenue': st.column_config.NumberColumn('Revenue', format='€%.2f'),
                'cash_collected': st.column_config.NumberColumn('Cash', format='€%.2f'),
                'commission_from_sales': st.column_config.NumberColumn('From sales', format='€%.2f'),
                'commission_from_cash': st.column_config.NumberColumn('From cash', format='€%.2f'),
                'total_commission': st.column_config.NumberColumn('Total', format='€%.2f'),
            }
        )

    @staticmethod
    def render_records_table(records_df: pd.DataFrame, columns: Optional[List[str]] = None):
        """Drill-through lead list."""
        if records_df.empty:
            st.info("No leads in this range.")
            return

        columns = columns or [
            'entry_date', 'first_name', 'last_name', 'form_type', 'status',
            'scheduled_call_date', 'result', 'sale_amount', 'cash_collected', 'closer'
        ]
        columns = [c for c in columns if c in records_df.columns]

        st.dataframe(
            records_df[columns],
            hide_index=True,
            use_container_width=True,
            column_config={
                'entry_date': st.column_config.DateColumn('Entry', format='DD/MM/YYYY'),
                'scheduled_call_date': st.column_config.DateColumn('Call', format='DD/MM/YYYY'),
                'sale_amount': st.column_config.NumberColumn('Sale', format='€%.2f'),
                'cash_collected': st.column_config.NumberColumn('Cash', format='€%.2f'),
            }
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _empty_chart(message: str = "No data available") -> alt.Chart:
        """Create an empty chart with a message."""
        return alt.Chart(pd.DataFrame({'note': [message]})).mark_text(
            text=message,
            fontSize=16,
            color=COLORS['text_light']
        ).properties(
            width=CHART_WIDTH,
            height=200
        )
