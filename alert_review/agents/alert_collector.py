"""Alert Collector Agent - fetches and aggregates alerts from each source"""
import asyncio
import logging
from typing import Optional, Union

from alert_review.cache import (
    DEFAULT_TTL_SECONDS,
    EMAIL_ALERTS_KEY,
    PAGING_INCIDENTS_KEY,
    SPREADSHEET_ALERTS_KEY,
    Cache,
    NullCache,
    afetch_with_cache,
    fetch_with_cache,
)
from alert_review.models.alert import AggregatedAlert, AlertSource
from alert_review.tools.gmail_client import GmailClient
from alert_review.tools.sheets_client import SheetsClient
from alert_review.tools.victorops_client import VictorOpsClient
from alert_review.utils.alert_normalizer import AlertNormalizer
from alert_review.utils.error_handling import SourceFetchError

logger = logging.getLogger(__name__)

CollectResult = Union[list[AggregatedAlert], Exception]


class AlertCollectorAgent:
    """
    Agent responsible for collecting alerts from mail, paging and spreadsheet sources.

    Input: query / lookback window per source
    Output: List[AggregatedAlert] per source, served through the read-through cache
    Side Effects: Populates the cache on a miss
    """

    def __init__(
        self,
        cache: Optional[Cache] = None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        gmail_client: Optional[GmailClient] = None,
        victorops_client: Optional[VictorOpsClient] = None,
        sheets_client: Optional[SheetsClient] = None,
        normalizer: Optional[AlertNormalizer] = None,
    ):
        self.cache = cache if cache is not None else NullCache()
        self.ttl_seconds = ttl_seconds
        self.gmail_client = gmail_client
        self.victorops_client = victorops_client
        self.sheets_client = sheets_client
        self.normalizer = normalizer or AlertNormalizer()
        self.agent_name = "AlertCollectorAgent"

    @staticmethod
    def _require(client, source: AlertSource):
        if client is None:
            raise SourceFetchError(source.value, "No client configured for this source")
        return client

    def collect_email_alerts(self, query: str) -> list[AggregatedAlert]:
        """Aggregate the subjects of mails matching ``query``."""
        gmail = self._require(self.gmail_client, AlertSource.EMAIL)

        def produce() -> list[AggregatedAlert]:
            alerts = self.normalizer.aggregate(gmail.search_subjects(query))
            logger.info(f"Aggregated {len(alerts)} distinct email alerts")
            return alerts

        return fetch_with_cache(self.cache, EMAIL_ALERTS_KEY, self.ttl_seconds, produce, fingerprint=f"query={query}")

    async def collect_paging_alerts(self, lookback_days: int) -> list[AggregatedAlert]:
        """Aggregate the service names of incidents from the last ``lookback_days`` days."""
        victorops = self._require(self.victorops_client, AlertSource.PAGING)

        async def produce() -> list[AggregatedAlert]:
            alerts = self.normalizer.aggregate(await victorops.fetch_service_names(lookback_days))
            logger.info(f"Aggregated {len(alerts)} distinct paging services")
            return alerts

        return await afetch_with_cache(
            self.cache,
            PAGING_INCIDENTS_KEY,
            self.ttl_seconds,
            produce,
            fingerprint=f"lookback_days={lookback_days}",
        )

    def collect_spreadsheet_alerts(self, sheet_name: str) -> list[AggregatedAlert]:
        """Read pre-aggregated service counts from ``sheet_name``."""
        sheets = self._require(self.sheets_client, AlertSource.SPREADSHEET)
        return fetch_with_cache(
            self.cache,
            SPREADSHEET_ALERTS_KEY,
            self.ttl_seconds,
            lambda: sheets.read_alert_rows(sheet_name),
            fingerprint=f"sheet={sheet_name}",
        )

    async def collect(
        self,
        sources: list[AlertSource],
        query: str,
        lookback_days: int,
        sheet_name: str,
    ) -> dict[AlertSource, CollectResult]:
        """
        Collect every requested source concurrently.

        Synchronous Google API sources run in worker threads; the paging
        source runs on the event loop. A failing source never cancels the
        others: its entry in the result is the exception it raised.

        Returns:
            Mapping of source to its alerts or its exception, in ``sources`` order.
        """
        coroutines = []
        for source in sources:
            if source is AlertSource.EMAIL:
                coroutines.append(asyncio.to_thread(self.collect_email_alerts, query))
            elif source is AlertSource.PAGING:
                coroutines.append(self.collect_paging_alerts(lookback_days))
            elif source is AlertSource.SPREADSHEET:
                coroutines.append(asyncio.to_thread(self.collect_spreadsheet_alerts, sheet_name))
            else:
                raise ValueError(f"Unsupported source: {source}")

        logger.info(f"Collecting {len(sources)} source(s): {', '.join(s.value for s in sources)}")
        results = await asyncio.gather(*coroutines, return_exceptions=True)

        collected: dict[AlertSource, CollectResult] = {}
        for source, result in zip(sources, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            collected[source] = result
        return collected
