"""
Tests for the command line entry point.
"""

import logging

import pytest

import main
from alert_review.agents.report_agent import ReportAgent
from alert_review.config.settings import Config
from alert_review.tools.docs_client import DocsReportRenderer
from alert_review.tools.sheets_client import SheetsReportRenderer
from alert_review.utils.error_handling import FetchFailurePolicy, ReportGenerationError
from alert_review.utils.logging_context import LoggingContext, RunIdFilter


class TestOverrides:

    def test_no_flags_keep_config(self, clean_env):
        config = Config()
        assert main.apply_overrides(config, main.parse_args([])) == config

    def test_flags_override_report_settings(self, clean_env):
        args = main.parse_args([
            "--output", "sheet",
            "--sources", "paging,spreadsheet",
            "--top", "3",
            "--days", "30",
            "--policy", "degrade",
            "--no-cache",
            "--log-level", "debug",
        ])

        config = main.apply_overrides(Config(), args)

        assert config.report.output == "sheet"
        assert config.report.sources == ["paging", "spreadsheet"]
        assert config.report.top_count == 3
        assert config.report.lookback_days == 30
        assert config.report.failure_policy is FetchFailurePolicy.DEGRADE
        assert config.cache.enabled is False
        assert config.log_level == "DEBUG"
        assert config.gmail_query.endswith("newer_than:30d")

    def test_invalid_override_is_rejected(self, clean_env):
        with pytest.raises(ValueError):
            main.apply_overrides(Config(), main.parse_args(["--sources", "fax"]))

    def test_unknown_policy_flag(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--policy", "ignore"])


class TestBuildRenderer:

    def test_doc(self, clean_env):
        clean_env.setenv("GOOGLE_DOCUMENT_ID", "doc-1")
        renderer = main.build_renderer(Config())

        assert isinstance(renderer, DocsReportRenderer)
        assert renderer.document_id == "doc-1"

    def test_sheet(self, clean_env):
        clean_env.setenv("REPORT_OUTPUT", "sheet")
        clean_env.setenv("GOOGLE_SPREADSHEET_ID", "sheet-1")

        renderer = main.build_renderer(Config())

        assert isinstance(renderer, SheetsReportRenderer)
        assert renderer.sheet_name == "Report"


class TestMain:

    def test_missing_configuration_exits_1(self, clean_env, tmp_path):
        assert main.main(["--env-file", str(tmp_path / "none.env")]) == 1

    def test_invalid_configuration_exits_1(self, clean_env, tmp_path):
        clean_env.setenv("REPORT_TOP_COUNT", "zero")
        assert main.main(["--env-file", str(tmp_path / "none.env")]) == 1

    @pytest.mark.asyncio
    async def test_run_returns_1_on_failed_sections(self, clean_env, monkeypatch):
        async def failing_generate(self):
            raise ReportGenerationError({"email": "[gmail] boom"})

        monkeypatch.setattr(ReportAgent, "generate", failing_generate)
        monkeypatch.setattr(main, "build_renderer", lambda config: None)
        config = main.apply_overrides(
            Config(),
            main.parse_args(["--sources", "email", "--no-cache"]),
        )

        assert await main.run(config) == 1

    @pytest.mark.asyncio
    async def test_run_returns_0(self, clean_env, monkeypatch):
        async def generate(self):
            return []

        monkeypatch.setattr(ReportAgent, "generate", generate)
        monkeypatch.setattr(main, "build_renderer", lambda config: None)
        config = main.apply_overrides(Config(), main.parse_args(["--sources", "email", "--no-cache"]))

        assert await main.run(config) == 0


class TestRunIdLogging:

    def test_filter_adds_run_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        LoggingContext.clear()
        RunIdFilter().filter(record)
        assert record.run_id == "-"

        run_id = LoggingContext.set_run_id()
        RunIdFilter().filter(record)
        assert record.run_id == run_id
        LoggingContext.clear()
