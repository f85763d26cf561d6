from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

import httpx
from loguru import logger
from pydantic import ValidationError

from ochistory.config import (
    DEFAULT_RANGE_ALL,
    DEFAULT_RANGE_NOT_IN_OC,
    ReportConfig,
    Settings,
    build_report_config,
)
from ochistory.errors import ConfigurationError
from ochistory.logsetup import configure_logging
from ochistory.runner import ReportRunner
from ochistory.service import ReportService
from ochistory.sinks import ConsoleSink, ReportSink, SheetsSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torn-oc-history",
        description="Report each faction member's latest organized crime pass rates.",
    )
    parser.add_argument(
        "--output",
        default="stdout",
        help="output destination: stdout or sheets",
    )
    parser.add_argument(
        "--all",
        dest="all_members",
        action="store_true",
        help="generate report for all faction members",
    )
    parser.add_argument(
        "--both",
        action="store_true",
        help="generate both reports (all members and those not in OC)",
    )
    parser.add_argument(
        "--range-noc",
        default=DEFAULT_RANGE_NOT_IN_OC,
        help="spreadsheet range for members not in OC",
    )
    parser.add_argument(
        "--range-all",
        default=DEFAULT_RANGE_ALL,
        help="spreadsheet range for all members report",
    )
    parser.add_argument(
        "--interval",
        default="0",
        help="repeat execution at this interval (e.g. 5m); 0 runs once",
    )
    parser.add_argument("--env-file", type=Path, default=Path(".env"))
    return parser


def _make_sink(config: ReportConfig, settings: Settings) -> ReportSink:
    if config.output == "sheets":
        return SheetsSink.from_credentials_file(
            settings.google_credentials_file, config.spreadsheet_id
        )
    return ConsoleSink()


async def _run(config: ReportConfig, settings: Settings) -> None:
    sink = _make_sink(config, settings)
    timeout = httpx.Timeout(settings.http_timeout_seconds)
    async with httpx.AsyncClient(timeout=timeout) as client:
        runner = ReportRunner(ReportService(config, client, sink))
        await runner.serve()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings(_env_file=args.env_file)
    except ValidationError as exc:
        logger.error("Invalid environment configuration: {}", exc)
        return 2
    configure_logging(settings)

    try:
        config = build_report_config(
            settings,
            output=args.output,
            all_members=args.all_members,
            both=args.both,
            range_not_in_oc=args.range_noc,
            range_all=args.range_all,
            interval=args.interval,
        )
        asyncio.run(_run(config, settings))
    except ConfigurationError as exc:
        logger.error("{}", exc)
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
