"""VictorOps (Splunk On-Call) reporting API client"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from alert_review.config.settings import VictorOpsConfig
from alert_review.utils.error_handling import SourceFetchError

logger = logging.getLogger(__name__)

INCIDENTS_PATH = "/api-reporting/v2/incidents"
SOURCE_NAME = "victorops"


class VictorOpsClient:
    """
    Async wrapper for the VictorOps incident reporting endpoint.

    Connect errors and timeouts are retried with exponential backoff
    (3 attempts); everything else surfaces as SourceFetchError.
    """

    def __init__(
        self,
        config: VictorOpsConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config
        self._client = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            transport=httpx.AsyncHTTPTransport(retries=0),  # Manual retry via tenacity
        )
        self._owns_client = http_client is None

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-VO-Api-Id": self._config.api_id,
            "X-VO-Api-Key": self._config.api_key,
        }

    @staticmethod
    def started_after(lookback_days: int, now: Optional[datetime] = None) -> str:
        """ISO-8601 UTC timestamp ``lookback_days`` before ``now``."""
        now = now or datetime.now(timezone.utc)
        return (now - timedelta(days=lookback_days)).isoformat(timespec="seconds").replace("+00:00", "Z")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),  # 1s, 2s, 4s
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _get_incidents(self, params: dict[str, Any]) -> httpx.Response:
        return await self._client.get(INCIDENTS_PATH, params=params, headers=self._headers())

    async def fetch_incidents(self, lookback_days: int, now: Optional[datetime] = None) -> list[dict[str, Any]]:
        """
        Fetch incidents started within the last ``lookback_days`` days.

        Returns:
            The raw incident objects.

        Raises:
            SourceFetchError: On transport errors, HTTP error statuses, a
                non-JSON body, an ``error`` payload or a missing ``incidents`` list.
        """
        params = {
            "limit": self._config.limit,
            "startedAfter": self.started_after(lookback_days, now),
        }
        logger.info(f"Fetching VictorOps incidents started after {params['startedAfter']}")

        try:
            response = await self._get_incidents(params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(SOURCE_NAME, f"HTTP {e.response.status_code} from incidents API") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(SOURCE_NAME, f"Incidents request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise SourceFetchError(SOURCE_NAME, "Incidents response is not JSON") from e

        if not isinstance(data, dict):
            raise SourceFetchError(SOURCE_NAME, "Incidents response is not a JSON object")
        if data.get("error"):
            raise SourceFetchError(SOURCE_NAME, f"API error: {data['error']}")

        incidents = data.get("incidents")
        if not isinstance(incidents, list):
            raise SourceFetchError(SOURCE_NAME, "Response is missing the 'incidents' list")

        logger.info(f"Fetched {len(incidents)} incidents from VictorOps")
        return incidents

    async def fetch_service_names(self, lookback_days: int, now: Optional[datetime] = None) -> list[str]:
        """
        Fetch the ``service`` field of each recent incident.

        Incidents without a string service are skipped.
        """
        incidents = await self.fetch_incidents(lookback_days, now)

        services = []
        for incident in incidents:
            service = incident.get("service") if isinstance(incident, dict) else None
            if not isinstance(service, str):
                logger.warning(f"Skipping incident without service: {incident!r:.120}")
                continue
            services.append(service)
        return services

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
