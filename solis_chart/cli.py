# solis_chart/cli.py
import argparse
import json
import sys

from solis_chart.aggregator import fetch_monthly_production
from solis_chart.client import SolisClient
from solis_chart.config import AppConfig
from solis_chart.logging import get_logger, setup_logging
from solis_chart.page import format_swedish_number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="solis-chart",
        description="Monthly SolisCloud production chart"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    cmd_serve = sub.add_parser("serve", help="Run the chart web server")
    cmd_serve.add_argument("--host", help="Override HOST")
    cmd_serve.add_argument("--port", type=int, help="Override PORT")

    cmd_fetch = sub.add_parser("fetch", help="Print this month's aggregated production")
    cmd_fetch.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = AppConfig.from_env()
    setup_logging(config.logging.level, debug=args.debug, quiet=args.quiet)

    if args.command == "serve":
        from solis_chart.app import create_app

        app = create_app(config)
        app.run(host=args.host or config.server.host, port=args.port or config.server.port)
        return 0

    client = SolisClient(config.solis, get_logger("solis_chart.client"))
    result = fetch_monthly_production(
        client,
        get_logger("solis_chart.aggregator"),
        timezone=config.page.timezone,
        currency=config.solis.currency,
    )
    if args.json:
        print(json.dumps(result.as_dict(), ensure_ascii=False))
    elif result.error:
        print(f"Error: {result.error}")
    else:
        for day, value in enumerate(result.daily_totals, start=1):
            print(f"{day:2d} {result.month_name}: {format_swedish_number(value)} kWh")
        print(f"Total: {format_swedish_number(result.monthly_total)} kWh")
    return 1 if result.error else 0


if __name__ == "__main__":
    sys.exit(main())
