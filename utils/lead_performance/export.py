# utils/lead_performance/export.py
"""
Formatted Excel Export for Lead Performance

Creates Excel reports with:
- Info sheet (project, period, generation time)
- Dashboard report: funnel summary, weekly breakdown, last 6 months
- Commission report: commissions, per-closer breakdown, sold leads

Uses openpyxl for formatting capabilities.
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.formatting.rule import ColorScaleRule
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .commissions import closer_breakdown_to_frame, compute_lead_commissions
from .constants import EXCEL_STYLES
from .models import BillingSummary, CommissionReport, FunnelMetrics

logger = logging.getLogger(__name__)

# (column, header, width)
ColumnSpec = List[Tuple[str, str, int]]

CURRENCY_COLUMNS = {
    'revenue', 'cash_collected', 'sale_amount', 'initial_payment',
    'commission_from_sales', 'commission_from_cash', 'total_commission',
    'setter_commission_sale', 'setter_commission_cash', 'closer_commission',
}
DATE_COLUMNS = {'week_start', 'week_end', 'entry_date', 'scheduled_call_date'}


def _cell_value(value: Any) -> Any:
    """Excel-safe scalar (NaN/NaT -> None, numpy -> python)."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, 'item'):
        return value.item()
    return value


class LeadPerformanceExport:
    """
    Excel report generator for lead performance.

    Usage:
        exporter = LeadPerformanceExport()
        excel_bytes = exporter.create_dashboard_report(
            funnel=funnel,
            weeks_df=weeks_df,
            months_df=months_df,
            filters={'project': 'Academy', 'month': 3, 'year': 2025}
        )

        st.download_button(
            label="Download Report",
            data=excel_bytes,
            file_name="lead_performance.xlsx",
            mime=EXCEL_MIME_TYPE
        )
    """

    def __init__(self):
        """Initialize with default styles."""
        self.wb = None
        self._init_styles()

    def _init_styles(self):
        """Initialize reusable styles."""
        self.header_fill = PatternFill(
            start_color=EXCEL_STYLES['header_fill_color'],
            end_color=EXCEL_STYLES['header_fill_color'],
            fill_type='solid'
        )
        self.header_font = Font(
            bold=True,
            color=EXCEL_STYLES['header_font_color'],
            size=11
        )

        self.title_font = Font(bold=True, size=16)
        self.subtitle_font = Font(bold=True, size=12)
        self.total_font = Font(bold=True, size=11)

        thin_border = Side(style='thin', color='000000')
        self.cell_border = Border(
            left=thin_border,
            right=thin_border,
            top=thin_border,
            bottom=thin_border
        )

        self.center_align = Alignment(horizontal='center', vertical='center')
        self.right_align = Alignment(horizontal='right', vertical='center')

        self.currency_format = EXCEL_STYLES['currency_format']
        self.date_format = EXCEL_STYLES['date_format']

    # =========================================================================
    # MAIN EXPORT METHODS
    # =========================================================================

    def create_dashboard_report(
        self,
        funnel: FunnelMetrics,
        weeks_df: pd.DataFrame,
        months_df: pd.DataFrame,
        filters: Dict
    ) -> BytesIO:
        """
        Create the lead dashboard report.

        Sheets: Info, Summary, Weekly Breakdown, Last 6 Months

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_info_sheet("Lead Performance Report", filters)
        self._create_key_value_sheet("Summary", "Funnel", [
            ("Weekly Goal", funnel.weekly_goal),
            ("Monthly Goal", funnel.monthly_goal),
            ("Total Leads", funnel.total_leads),
            ("Goal Progress %", round(funnel.goal_progress, 1)),
            ("Scheduled", funnel.scheduled),
            ("Attended", funnel.attended),
            ("Cancelled", funnel.cancelled),
            ("No Show", funnel.no_show),
            ("Offers Given", funnel.offers_given),
            ("Sales", funnel.sales),
            ("Scheduled Rate %", round(funnel.scheduled_rate, 1)),
            ("Show Rate %", round(funnel.show_rate, 1)),
            ("Close Rate %", round(funnel.close_rate, 1)),
            ("Revenue", funnel.total_revenue),
            ("Cash Collected", funnel.total_cash_collected),
        ])

        weeks_sheet = self._write_table("Weekly Breakdown", weeks_df, [
            ('week', 'Week', 8),
            ('week_start', 'From', 14),
            ('week_end', 'To', 14),
            ('manual_leads', 'Manual Leads', 14),
            ('meta_leads', 'Meta Leads', 12),
            ('total_leads', 'Total', 10),
            ('goal', 'Goal', 10),
            ('percentage', '% of Goal', 12),
        ])
        if weeks_sheet is not None:
            self._add_goal_scale(weeks_sheet, 'H', len(weeks_df))
            self._bold_total_row(weeks_sheet, weeks_df)

        self._write_table("Last 6 Months", months_df, [
            ('label', 'Month', 10),
            ('year', 'Year', 8),
            ('manual_leads', 'Manual Leads', 14),
            ('meta_leads', 'Meta Leads', 12),
            ('total_leads', 'Total Leads', 12),
            ('sales', 'Sales', 8),
            ('revenue', 'Revenue', 15),
            ('cash_collected', 'Cash Collected', 15),
        ])

        return self._save("Dashboard")

    def create_commission_report(
        self,
        report: CommissionReport,
        billing: BillingSummary,
        leads_df: pd.DataFrame,
        filters: Dict
    ) -> BytesIO:
        """
        Create the billing & commissions report.

        Sheets: Info, Commissions, By Closer, Leads (sold leads of the period)

        Returns:
            BytesIO containing Excel file
        """
        self.wb = Workbook()

        self._create_info_sheet("Billing & Commissions Report", filters)

        rows = [
            ("Total Sales", report.total_sales),
            ("Revenue", report.total_revenue),
            ("Cash Collected", report.total_cash_collected),
            ("Pending Payments", billing.pending_payments),
            ("Average Sale", billing.average_sale_value),
            ("Setter Commission (sales)", report.setter_commission_from_sales),
            ("Setter Commission (cash)", report.setter_commission_from_cash),
            ("Closer Commission (sales)", report.closer_commission_from_sales),
            ("Closer Commission (cash)", report.closer_commission_from_cash),
        ]
        rows.extend(
            (f"Payment: {p.payment_method} ({p.count})", p.amount)
            for p in billing.by_payment_method
        )
        self._create_key_value_sheet("Commissions", "Commissions", rows)

        self._write_table("By Closer", closer_breakdown_to_frame(report), [
            ('closer', 'Closer', 22),
            ('sales', 'Sales', 8),
            ('revenue', 'Revenue', 15),
            ('cash_collected', 'Cash Collected', 15),
            ('commission_from_sales', 'From Sales', 14),
            ('commission_from_cash', 'From Cash', 14),
            ('total_commission', 'Total Commission', 16),
        ])

        leads = compute_lead_commissions(leads_df)
        sold = leads[leads['sale_made']]
        self._write_table("Leads", sold, [
            ('entry_date', 'Entry Date', 13),
            ('first_name', 'First Name', 16),
            ('last_name', 'Last Name', 18),
            ('closer', 'Closer', 18),
            ('setter', 'Setter', 18),
            ('payment_method', 'Payment', 15),
            ('sale_amount', 'Sale Amount', 14),
            ('cash_collected', 'Cash Collected', 15),
            ('setter_commission_sale', 'Setter (sale)', 14),
            ('setter_commission_cash', 'Setter (cash)', 14),
            ('closer_commission', 'Closer', 12),
        ])

        return self._save("Commission")

    # =========================================================================
    # SHEET BUILDERS
    # =========================================================================

    def _create_info_sheet(self, title: str, filters: Dict):
        ws = self.wb.active
        ws.title = "Info"

        ws.cell(row=1, column=1, value=title).font = self.title_font
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=4)

        info_rows = [
            ("Project:", filters.get('project', '')),
            ("Period:", filters.get('period', f"{filters.get('month', '')}/{filters.get('year', '')}")),
            ("Generated:", datetime.now().strftime('%Y-%m-%d %H:%M')),
        ]
        for row, (label, value) in enumerate(info_rows, 3):
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)

        ws.column_dimensions['A'].width = 18
        ws.column_dimensions['B'].width = 30

    def _create_key_value_sheet(
        self,
        sheet_name: str,
        section: str,
        rows: List[Tuple[str, Any]]
    ):
        """Two-column label / value sheet; floats get currency format."""
        ws = self.wb.create_sheet(sheet_name)
        ws.cell(row=1, column=1, value=section).font = self.subtitle_font

        for row, (label, value) in enumerate(rows, 2):
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=_cell_value(value))
            cell.alignment = self.right_align
            if isinstance(value, float) and "%" not in label:
                cell.number_format = self.currency_format

        ws.column_dimensions['A'].width = 30
        ws.column_dimensions['B'].width = 18

    def _write_table(self, sheet_name: str, df: pd.DataFrame, columns: ColumnSpec):
        """Header + rows for the columns present in df. Returns the sheet."""
        if df is None or df.empty:
            return None

        columns = [c for c in columns if c[0] in df.columns]
        ws = self.wb.create_sheet(sheet_name)

        for col_idx, (_, header, width) in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = self.center_align
            cell.border = self.cell_border
            ws.column_dimensions[get_column_letter(col_idx)].width = width

        names = [c[0] for c in columns]
        for row_idx, values in enumerate(df[names].itertuples(index=False, name=None), 2):
            for col_idx, (col_name, value) in enumerate(zip(names, values), 1):
                cell = ws.cell(row=row_idx, column=col_idx, value=_cell_value(value))
                cell.border = self.cell_border
                if col_name in CURRENCY_COLUMNS:
                    cell.number_format = self.currency_format
                    cell.alignment = self.right_align
                elif col_name in DATE_COLUMNS:
                    cell.number_format = self.date_format
                elif col_name == 'percentage':
                    cell.number_format = '0.0'
                    cell.alignment = self.right_align

        ws.freeze_panes = 'A2'
        return ws

    def _add_goal_scale(self, ws, column: str, n_rows: int):
        # Red below 50% of goal, yellow at goal, green above
        ws.conditional_formatting.add(
            f'{column}2:{column}{n_rows + 1}',
            ColorScaleRule(
                start_type='num', start_value=50, start_color='F8696B',
                mid_type='num', mid_value=100, mid_color='FFEB84',
                end_type='num', end_value=150, end_color='63BE7B'
            )
        )

    def _bold_total_row(self, ws, weeks_df: pd.DataFrame):
        if weeks_df['week'].isna().any():
            ws.cell(row=len(weeks_df) + 1, column=1, value="Total")
            for cell in ws[len(weeks_df) + 1]:
                cell.font = self.total_font

    def _save(self, kind: str) -> BytesIO:
        if 'Sheet' in self.wb.sheetnames:
            del self.wb['Sheet']

        output = BytesIO()
        self.wb.save(output)
        output.seek(0)

        logger.info(f"{kind} Excel report created successfully")
        return output
