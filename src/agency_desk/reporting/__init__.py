"""Reporting module: filters, aggregation, report builders and CSV export."""

from agency_desk.reporting.aggregation import BreakdownItem, Page, group_and_sum, paginate
from agency_desk.reporting.export import (
    export_csv,
    export_filename,
    report_records,
    to_csv_text,
)
from agency_desk.reporting.filters import (
    DailyFilters,
    MonthlyFilters,
    ProgressFilters,
    ProgressMode,
    ReferralFilters,
    select_progress_mode,
    set_progress_date,
    update_daily_filters,
    update_monthly_filters,
    update_referral_filters,
)
from agency_desk.reporting.reports import (
    AgentProgressReport,
    AgentStats,
    DailyReport,
    MonthlyReport,
    ReferralReport,
    ReferralSummary,
    build_daily_report,
    build_monthly_report,
    build_progress_report,
    build_referral_report,
)

__all__ = [
    "AgentProgressReport",
    "AgentStats",
    "BreakdownItem",
    "DailyFilters",
    "DailyReport",
    "MonthlyFilters",
    "MonthlyReport",
    "Page",
    "ProgressFilters",
    "ProgressMode",
    "ReferralFilters",
    "ReferralReport",
    "ReferralSummary",
    "build_daily_report",
    "build_monthly_report",
    "build_progress_report",
    "build_referral_report",
    "export_csv",
    "export_filename",
    "group_and_sum",
    "paginate",
    "report_records",
    "select_progress_mode",
    "set_progress_date",
    "to_csv_text",
    "update_daily_filters",
    "update_monthly_filters",
    "update_referral_filters",
]
