#!/usr/bin/env python3
"""CLI script to build back-office reports.

Prints a report for one business as JSON, optionally exporting its rows to
CSV and asking the AI provider for a summary.

Usage:
    # Today's daily report
    python scripts/build_report.py --business owner@example.com daily

    # Daily report for one agent on a date
    python scripts/build_report.py --business owner@example.com daily --date 2024-05-01 --agent ali

    # Monthly report, second page of 25 rows, exported to CSV
    python scripts/build_report.py --business owner@example.com monthly --month 2024-05 \\
        --page 2 --rows 25 --export exports/

    # Referral report comparing two codes
    python scripts/build_report.py --business owner@example.com referral --code FR2K --compare UM303

    # Agent progress for the last 15 days with an AI summary
    python scripts/build_report.py --business owner@example.com progress --mode 15days --ai
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agency_desk.common.config import AppConfig, load_config
from agency_desk.common.logging import get_logger, setup_logging
from agency_desk.common.time_utils import today
from agency_desk.desk import AgencyDesk
from agency_desk.domain.errors import DeskError
from agency_desk.domain.models import TenantContext
from agency_desk.insights import DEFAULT_PROMPTS, GeminiSummaryProvider, InsightCache
from agency_desk.reporting import (
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
from agency_desk.storage.database import Database

logger = get_logger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Build back-office reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--config",
        type=str,
        default="configs/dev.yaml",
        help="Path to config file (default: configs/dev.yaml)",
    )

    parser.add_argument(
        "--business",
        type=str,
        required=True,
        help="Email of the business to report on",
    )

    parser.add_argument(
        "report",
        choices=["daily", "monthly", "referral", "progress"],
        help="Report to build",
    )

    parser.add_argument("--date", type=str, help="Daily: date (YYYY-MM-DD)")
    parser.add_argument("--agent", type=str, help="Daily: agent name filter")
    parser.add_argument("--platform", type=str, help="Daily: platform filter")
    parser.add_argument("--page-name", type=str, help="Daily: page name filter")
    parser.add_argument("--payment-method", type=str, help="Daily: payment method filter")
    parser.add_argument("--category", type=str, help="Daily: category filter")

    parser.add_argument("--month", type=str, help="Monthly: month (YYYY-MM)")

    parser.add_argument("--code", type=str, help="Referral: referral code")
    parser.add_argument("--compare", type=str, help="Referral: code to compare with")

    parser.add_argument("--start", type=str, help="Referral/progress: start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Referral/progress: end date (YYYY-MM-DD)")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ProgressMode],
        help="Progress: date range preset",
    )

    parser.add_argument("--page", type=int, default=1, help="Listing page (default: 1)")
    parser.add_argument("--rows", type=int, help="Rows per page (10, 25 or 50)")

    parser.add_argument(
        "--export",
        type=str,
        help="Directory to export the report rows to as CSV",
    )

    parser.add_argument(
        "--ai",
        action="store_true",
        help="Append an AI summary of the report",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def build_filters(args: argparse.Namespace, desk: AgencyDesk, ctx: TenantContext, rows: int) -> Any:
    """Turn command line options into the report's filter value."""
    current = today()

    if args.report == "daily":
        filters = DailyFilters.cleared(current)
        for name, value in (
            ("on_date", args.date),
            ("agent", args.agent),
            ("platform", args.platform),
            ("page_name", args.page_name),
            ("payment_method", args.payment_method),
            ("category", args.category),
        ):
            if value:
                filters = update_daily_filters(filters, name, value)
        return filters

    if args.report == "monthly":
        filters = MonthlyFilters.for_today(current, rows_per_page=rows)
        if args.month:
            filters = update_monthly_filters(filters, "month", args.month)
        return update_monthly_filters(filters, "current_page", args.page)

    if args.report == "referral":
        filters = ReferralFilters.spanning(desk.view(ctx).entries, current)
        filters = update_referral_filters(filters, "rows_per_page", rows)
        for name, value in (
            ("code", args.code),
            ("compare_code", args.compare),
            ("start_date", args.start),
            ("end_date", args.end),
        ):
            if value:
                filters = update_referral_filters(filters, name, value)
        return update_referral_filters(filters, "current_page", args.page)

    filters = ProgressFilters.for_today(current)
    if args.mode:
        filters = select_progress_mode(filters, args.mode, current)
    if args.start:
        filters = set_progress_date(filters, "start_date", args.start)
    if args.end:
        filters = set_progress_date(filters, "end_date", args.end)
    return filters


async def summarize(config: AppConfig, page: str, context: dict[str, Any]) -> str | None:
    """Fetch an AI summary for a report."""
    if not config.ai.is_configured:
        return await InsightCache(None).fetch(page, DEFAULT_PROMPTS[page], context)

    async with GeminiSummaryProvider(config.ai) as provider:
        cache = InsightCache(provider)
        return await cache.fetch(page, DEFAULT_PROMPTS[page], context)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logging(config.logging)

    logger.info("report_builder_starting", report=args.report, db=config.database.path)

    db = Database(config.database.path)
    db.connect()
    db.migrate()

    try:
        business = db.find_business_by_email(args.business)
        if business is None:
            print(f"Error: No business registered with {args.business}")
            return 1

        desk = AgencyDesk.from_backend(db)
        ctx = TenantContext(tenant_id=business.id, actor=business.owner_name)
        rows = args.rows or config.desk.default_rows_per_page

        try:
            filters = build_filters(args, desk, ctx, rows)
        except (DeskError, ValueError) as e:
            print(f"Error: {e}")
            return 1

        report = getattr(desk, f"{args.report}_report")(ctx, filters)
        output: dict[str, Any] = {"report": report.to_dict()}

        if args.export:
            try:
                path = desk.export_report(report, args.export)
                output["export"] = str(path)
            except DeskError as e:
                output["export_error"] = str(e)

        if args.ai:
            output["summary"] = asyncio.run(summarize(config, args.report, report.to_dict()))

        print(json.dumps(output, indent=2, default=str))
        logger.info("report_builder_complete", report=args.report)
        return 0

    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
