"""
Report Agent - Generate the Alert Review Report

Runs one report pass: collects every configured source, builds one section
per source, renders them, and applies the fetch failure policy.
"""

import logging
from typing import Optional, Protocol, Sequence

from alert_review.agents.alert_collector import AlertCollectorAgent
from alert_review.config.settings import Config
from alert_review.models.alert import AlertSource, ReportSection
from alert_review.utils.error_handling import (
    ErrorContext,
    FetchFailurePolicy,
    ReportGenerationError,
)

logger = logging.getLogger(__name__)


class ReportRenderer(Protocol):
    """Output adapter (Doc or Sheet)."""

    def render(self, title: str, subtitle: str, sections: Sequence[ReportSection]) -> None:
        ...


SECTION_TITLES = {
    AlertSource.EMAIL: ("Top Root@ mail alerts", "Subject"),
    AlertSource.PAGING: ("Top VictorOps incidents", "Service"),
    AlertSource.SPREADSHEET: ("Top alerting services", "Service"),
}


class ReportAgent:
    """
    Agent responsible for:
    1. Collecting the configured sources in one concurrent pass
    2. Turning each result into a report section with totals and top-N share
    3. Rendering the sections and enforcing the failure policy
    """

    AGENT_NAME = "ReportAgent"

    def __init__(
        self,
        config: Config,
        collector: AlertCollectorAgent,
        renderer: ReportRenderer,
    ):
        self._config = config
        self._collector = collector
        self._renderer = renderer

    @property
    def policy(self) -> FetchFailurePolicy:
        return self._config.report.failure_policy

    def build_section(self, source: AlertSource, result, error: Optional[Exception] = None) -> ReportSection:
        """Section for one source; ``error`` marks a failed fetch."""
        report = self._config.report
        title, label_column = SECTION_TITLES[source]

        alerts = result if error is None else []
        message = None
        if error is not None:
            if self.policy is FetchFailurePolicy.DEGRADE:
                logger.warning(f"[{self.AGENT_NAME}] {title}: source failed, rendering it empty")
            else:
                message = str(error)

        return ReportSection(
            source=source,
            title=title,
            subtitle=f"Last {report.lookback_days} days",
            label_column=label_column,
            alerts=alerts,
            top_count=report.top_count,
            error=message,
        )

    async def generate(self) -> list[ReportSection]:
        """
        Run one report pass.

        Returns:
            The rendered sections.

        Raises:
            ReportGenerationError: Under the ``raise`` policy, after rendering,
                if any source failed.
        """
        report = self._config.report
        sources = [AlertSource(name) for name in report.sources]

        results = await self._collector.collect(
            sources,
            query=self._config.gmail_query,
            lookback_days=report.lookback_days,
            sheet_name=self._config.google.source_sheet,
        )

        sections = []
        failures: dict[str, str] = {}
        for source in sources:
            result = results[source]
            if isinstance(result, Exception):
                ErrorContext(f"collect:{source.value}").capture(result)
                failures[source.value] = str(result)
                sections.append(self.build_section(source, [], error=result))
            else:
                logger.info(f"[{self.AGENT_NAME}] {source.value}: {len(result)} distinct alerts")
                sections.append(self.build_section(source, result))

        self._renderer.render(report.title, report.subtitle, sections)
        logger.info(f"[{self.AGENT_NAME}] Report rendered: {len(sections)} sections")

        if failures and self.policy is FetchFailurePolicy.RAISE:
            raise ReportGenerationError(failures)
        return sections
