#!/usr/bin/env python3
"""
Run depreciation from the command line and print JSON results.

Reads settings from the active config (``--config`` or the packaged
defaults).  The database URL comes from ``--db-url``, then the config's
``database.url``, then a local SQLite file.

Usage:
    python -m scripts.run_depreciation [--db-url URL] [--config PATH] <command> ...

Examples:
    # Create tables in a fresh database
    python -m scripts.run_depreciation --db-url sqlite:///assets.db create-tables

    # Depreciate every due asset in one business unit
    python -m scripts.run_depreciation batch --actor <uuid> --business-unit <uuid>

    # Print the projected schedule for one asset
    python -m scripts.run_depreciation schedule <asset-uuid> --actor <uuid>

    # List assets due now
    python -m scripts.run_depreciation due --actor <uuid>

    # Move every depreciating asset's next run to July 1
    python -m scripts.run_depreciation reschedule <bu-uuid> --actor <uuid> --date 2024-07-01
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

DEFAULT_DB_URL = "sqlite+pysqlite:///assets.db"


def _utc_datetime(text: str) -> datetime:
    """ISO 8601 argument; naive values are taken as UTC."""
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Asset depreciation: batch runs, schedules, summaries and reports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help=f"Database URL (default: config database.url, else {DEFAULT_DB_URL!r}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML config file (default: packaged defaults.yaml).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for structured logs on stderr (default: WARNING).",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("create-tables", help="Create all tables.")

    batch = sub.add_parser("batch", help="Depreciate every asset that is due.")
    batch.add_argument("--actor", type=UUID, required=True, help="Acting user UUID.")
    batch.add_argument("--business-unit", type=UUID, default=None, help="Business unit scope.")
    batch.add_argument(
        "--asset", type=UUID, action="append", default=None, dest="assets",
        help="Explicit asset UUID (repeatable); bypasses the due-date filter.",
    )

    calc = sub.add_parser("calculate", help="Run one depreciation cycle for one asset.")
    calc.add_argument("asset_id", type=UUID)
    calc.add_argument("--actor", type=UUID, required=True)
    calc.add_argument("--units", type=int, default=None, help="Units consumed this period.")

    schedule = sub.add_parser("schedule", help="Project the schedule for one asset.")
    schedule.add_argument("asset_id", type=UUID)
    schedule.add_argument("--actor", type=UUID, required=True)

    due = sub.add_parser("due", help="List assets due for depreciation.")
    due.add_argument("--actor", type=UUID, required=True)
    due.add_argument("--business-unit", type=UUID, default=None)

    summary = sub.add_parser("summary", help="Business-unit depreciation totals.")
    summary.add_argument("business_unit_id", type=UUID)
    summary.add_argument("--actor", type=UUID, required=True)

    report = sub.add_parser("report", help="Depreciation report for a business unit.")
    report.add_argument("business_unit_id", type=UUID)
    report.add_argument("--actor", type=UUID, required=True)
    report.add_argument("--start", type=_utc_datetime, default=None)
    report.add_argument("--end", type=_utc_datetime, default=None)

    dashboard = sub.add_parser("dashboard", help="Dashboard view of a business unit.")
    dashboard.add_argument("business_unit_id", type=UUID)
    dashboard.add_argument("--actor", type=UUID, required=True)

    reschedule = sub.add_parser(
        "reschedule", help="Set the next run date for a business unit's assets.",
    )
    reschedule.add_argument("business_unit_id", type=UUID)
    reschedule.add_argument("--actor", type=UUID, required=True)
    reschedule.add_argument("--date", type=_utc_datetime, required=True, dest="schedule_date")
    reschedule.add_argument(
        "--asset", type=UUID, action="append", default=None, dest="assets",
        help="Limit to this asset UUID (repeatable).",
    )

    return parser.parse_args(argv)


def _print(result) -> None:
    print(json.dumps(result, indent=2, default=str))


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from asset_config import get_active_config
    from asset_kernel.db.engine import get_session, init_engine_from_url
    from asset_kernel.db.immutability import register_immutability_listeners
    from asset_kernel.logging_config import configure_logging
    from asset_modules._orm_registry import create_all_tables
    from asset_services import DepreciationActions

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        config = get_active_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"ERROR: Could not load config: {exc}", file=sys.stderr)
        return 1

    db_url = args.db_url or config.database_url or DEFAULT_DB_URL
    try:
        engine = init_engine_from_url(db_url)
    except Exception as exc:
        print(f"ERROR: Could not connect: {exc}", file=sys.stderr)
        return 1

    if args.command == "create-tables":
        create_all_tables(engine)
        _print({"success": True, "message": "Tables created"})
        return 0

    register_immutability_listeners()
    session = get_session()
    try:
        actions = DepreciationActions(session, config=config.depreciation)
        if args.command == "batch":
            result = actions.batch_calculate_depreciation(
                args.actor, args.business_unit, asset_ids=args.assets,
            )
        elif args.command == "calculate":
            result = actions.calculate_asset_depreciation(args.asset_id, args.actor, args.units)
        elif args.command == "schedule":
            result = actions.get_depreciation_schedule(args.asset_id, args.actor)
        elif args.command == "due":
            result = actions.get_assets_due_for_depreciation(args.actor, args.business_unit)
        elif args.command == "summary":
            result = actions.get_depreciation_summary(args.business_unit_id, args.actor)
        elif args.command == "dashboard":
            result = actions.get_depreciation_dashboard(args.business_unit_id, args.actor)
        elif args.command == "reschedule":
            result = actions.schedule_depreciation_calculation(
                args.business_unit_id, args.actor, args.schedule_date, asset_ids=args.assets,
            )
        else:
            result = actions.generate_depreciation_report(
                args.business_unit_id, args.actor, args.start, args.end,
            )
    finally:
        session.close()

    _print(result)
    if isinstance(result, dict) and result.get("success") is False:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
