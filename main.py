"""
Alert Review - Main Entry Point

Runs one report pass: collects alert sources, aggregates them and renders
the review into a Google Doc or Sheet. Meant to be run by hand or by a
scheduler (cron, Cloud Scheduler job).
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from alert_review.agents.alert_collector import AlertCollectorAgent
from alert_review.agents.report_agent import ReportAgent, ReportRenderer
from alert_review.cache import build_cache
from alert_review.config.settings import Config, load_config
from alert_review.tools.docs_client import DocsReportRenderer
from alert_review.tools.gmail_client import GmailClient
from alert_review.tools.sheets_client import SheetsClient, SheetsReportRenderer
from alert_review.tools.victorops_client import VictorOpsClient
from alert_review.utils.error_handling import FetchFailurePolicy, ReportGenerationError
from alert_review.utils.logging_context import LoggingContext, install_run_id_filter


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - [run %(run_id)s] %(message)s",
        handlers=[
            install_run_id_filter(logging.StreamHandler(sys.stdout))
        ],
        force=True,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Generate the alert review report")
    p.add_argument("--output", choices=["doc", "sheet"], help="Render into a Google Doc or Sheet")
    p.add_argument("--sources", help="Comma-separated sources: email,paging,spreadsheet")
    p.add_argument("--top", type=int, help="Number of alerts listed per section")
    p.add_argument("--days", type=int, help="Lookback window in days")
    p.add_argument("--policy", choices=[policy.value for policy in FetchFailurePolicy], help="Failed source handling")
    p.add_argument("--no-cache", action="store_true", help="Bypass the read-through cache")
    p.add_argument("--log-level", help="Logging level")
    p.add_argument("--env-file", default=".env", help="Optional .env file")
    return p.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return ``config`` with command-line overrides applied (validated)."""
    report = {}
    if args.output:
        report["output"] = args.output
    if args.sources:
        report["sources"] = args.sources
    if args.top is not None:
        report["top_count"] = args.top
    if args.days is not None:
        report["lookback_days"] = args.days
    if args.policy:
        report["failure_policy"] = args.policy

    data = config.model_dump()
    data["report"].update(report)
    if args.no_cache:
        data["cache"]["enabled"] = False
    if args.log_level:
        data["log_level"] = args.log_level
    return Config(**data)


def build_renderer(config: Config) -> ReportRenderer:
    if config.report.output == "sheet":
        client = SheetsClient(config.google.spreadsheet_id)
        return SheetsReportRenderer(client, config.google.report_sheet)
    return DocsReportRenderer(config.google.document_id)


async def run(config: Config) -> int:
    """Wire the components from ``config`` and run one report pass."""
    logger = logging.getLogger("alert-review")
    sources = config.report.sources

    victorops = VictorOpsClient(config.victorops) if "paging" in sources else None
    collector = AlertCollectorAgent(
        cache=build_cache(config.cache.enabled, config.cache.backend, config.cache.directory),
        ttl_seconds=config.cache.ttl_seconds,
        gmail_client=GmailClient(user_id=config.gmail.user_id) if "email" in sources else None,
        victorops_client=victorops,
        sheets_client=SheetsClient(config.google.spreadsheet_id) if "spreadsheet" in sources else None,
    )
    agent = ReportAgent(config, collector, build_renderer(config))

    try:
        sections = await agent.generate()
    except ReportGenerationError as e:
        logger.error(f"Report generated with failures: {e}")
        return 1
    finally:
        if victorops is not None:
            await victorops.aclose()

    logger.info(f"Report complete: {', '.join(f'{s.source.value}={s.total_count}' for s in sections)}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = apply_overrides(load_config(args.env_file), args)
        config.validate_required()
    except (ValidationError, ValueError) as e:
        setup_logging()
        logging.getLogger("alert-review").critical(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)
    run_id = LoggingContext.set_run_id()
    logging.getLogger("alert-review").info(
        f"Starting alert review run {run_id} "
        f"(sources={','.join(config.report.sources)}, output={config.report.output})"
    )
    return asyncio.run(run(config))


if __name__ == "__main__":
    raise SystemExit(main())
