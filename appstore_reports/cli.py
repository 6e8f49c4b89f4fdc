"""
Command line entry point for App Store Connect sales reports.

Usage:
    # Print the account's first vendor number
    appstore-reports vendors

    # List apps as JSON lines
    appstore-reports apps

    # Download a daily summary report as JSON lines
    appstore-reports sales --date 2026-02-01 --vendor 888888

Credentials come from APPSTORE_* environment variables (see config.py).
"""

import argparse
import json
import sys
from collections.abc import Sequence

import httpx

from appstore_reports.config import Settings, get_settings
from appstore_reports.exceptions import AppStoreConnectError
from appstore_reports.observability import get_logger, setup_logging
from appstore_reports.services.sales_reports import AppStoreConnectClient

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="appstore-reports",
        description="Fetch App Store Connect vendors, apps and daily sales reports",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("vendors", help="Print the first vendor number on the account")

    apps = subparsers.add_parser("apps", help="List apps as JSON lines")
    apps.add_argument("--limit", type=int, default=20, help="Maximum apps to list")

    sales = subparsers.add_parser("sales", help="Print a daily sales summary as JSON lines")
    sales.add_argument("--date", required=True, help="Report date (YYYY-MM-DD)")
    sales.add_argument("--vendor", help="Vendor number (default: first vendor on the account)")

    return parser


def run(
    args: argparse.Namespace,
    settings: Settings,
    http_client: httpx.Client | None = None,
) -> int:
    """Execute a parsed command; returns the process exit code."""
    with AppStoreConnectClient(
        settings.credentials(),
        base_url=settings.base_url,
        http_client=http_client,
    ) as client:
        if args.command == "vendors":
            print(client.get_first_vendor_number())

        elif args.command == "apps":
            for app in client.list_apps(limit=args.limit).data:
                print(json.dumps({"id": app.id, **app.attributes.model_dump(by_alias=True)}))

        elif args.command == "sales":
            vendor_number = args.vendor or client.get_first_vendor_number()
            with client.stream_sales_report(vendor_number, args.date) as rows:
                count = 0
                for row in rows:
                    print(json.dumps(row.to_json_dict()))
                    count += 1
                skipped = rows.skipped_rows
            print(f"{count} rows, {skipped} skipped", file=sys.stderr)

    logger.info("command_completed", command=args.command)

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_format, settings.service_name)
        return run(args, settings)
    except AppStoreConnectError as exc:
        # Logging may not be configured yet if settings failed
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
