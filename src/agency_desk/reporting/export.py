"""CSV export of report rows."""

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Sequence

from agency_desk.common.logging import get_logger
from agency_desk.domain.errors import EmptyExportError
from agency_desk.domain.models import Entry
from agency_desk.reporting.reports import (
    AgentProgressReport,
    DailyReport,
    MonthlyReport,
    ReferralReport,
)

logger = get_logger(__name__)


def entry_records(entries: Iterable[Entry]) -> list[dict[str, Any]]:
    """Entries as flat export records."""
    return [entry.to_dict() for entry in entries]


def progress_records(report: AgentProgressReport) -> list[dict[str, Any]]:
    """Leaderboard rows without the drill-down breakdowns."""
    return [row.export_row() for row in report.rows]


def to_csv_text(records: Sequence[dict[str, Any]]) -> str:
    """Render records as CSV text.

    The header row comes from the keys of the first record. Values containing
    commas, quotes or newlines are quoted.

    Raises:
        EmptyExportError: If there are no records.
    """
    if not records:
        raise EmptyExportError()

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(records[0].keys()), extrasaction="ignore")
    writer.writeheader()
    for record in records:
        writer.writerow(record)
    return buffer.getvalue()


def export_csv(records: Sequence[dict[str, Any]], path: str | Path) -> Path:
    """Write records to a CSV file.

    Nothing is written when there are no records.

    Args:
        records: Flat records to export.
        path: Destination file. Parent directories are created.

    Returns:
        Path of the written file.

    Raises:
        EmptyExportError: If there are no records.
    """
    text = to_csv_text(records)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(text)

    logger.info("csv_exported", path=str(path), rows=len(records))
    return path


def export_filename(report: Any) -> str:
    """Default download name for a report export."""
    if isinstance(report, DailyReport):
        return "daily_report.csv"
    if isinstance(report, MonthlyReport):
        return f"monthly_report_{report.filters.month}.csv"
    if isinstance(report, ReferralReport):
        return f"referral_log_{report.filters.code.value}.csv"
    if isinstance(report, AgentProgressReport):
        start = report.filters.start_date.isoformat()
        end = report.filters.end_date.isoformat()
        return f"advanced_agent_insight_{start}_to_{end}.csv"
    raise TypeError(f"Unsupported report type: {type(report).__name__}")


def report_records(report: Any) -> list[dict[str, Any]]:
    """The rows a report exports: its filtered entries or leaderboard rows."""
    if isinstance(report, (DailyReport, MonthlyReport)):
        return entry_records(report.entries)
    if isinstance(report, ReferralReport):
        return entry_records(report.log_entries)
    if isinstance(report, AgentProgressReport):
        return progress_records(report)
    raise TypeError(f"Unsupported report type: {type(report).__name__}")
