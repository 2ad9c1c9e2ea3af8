"""Gmail search client - collects message subjects for a query"""
import logging
from typing import Any, Optional

from googleapiclient.errors import HttpError

from alert_review.tools.google_auth import GMAIL_SCOPES, build_service
from alert_review.utils.error_handling import SourceFetchError

logger = logging.getLogger(__name__)

SOURCE_NAME = "gmail"


class GmailClient:
    """
    Wrapper for Gmail thread search.

    Every message of every matching thread contributes its subject, so a
    thread with five alert mails counts five times.
    """

    def __init__(self, service: Optional[Any] = None, user_id: str = "me", page_size: int = 100):
        self._service = service
        self.user_id = user_id
        self.page_size = page_size

    @property
    def service(self):
        if self._service is None:
            self._service = build_service("gmail", "v1", GMAIL_SCOPES)
        return self._service

    def _list_thread_ids(self, query: str) -> list[str]:
        threads = self.service.users().threads()
        thread_ids: list[str] = []
        page_token: Optional[str] = None

        while True:
            list_kwargs: dict[str, Any] = {
                "userId": self.user_id,
                "q": query,
                "maxResults": self.page_size,
            }
            if page_token:
                list_kwargs["pageToken"] = page_token

            response = threads.list(**list_kwargs).execute()
            thread_ids.extend(t["id"] for t in response.get("threads", []) or [] if t.get("id"))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        return thread_ids

    @staticmethod
    def _subject_of(message: dict) -> str:
        headers = (message.get("payload") or {}).get("headers") or []
        for header in headers:
            if str(header.get("name", "")).lower() == "subject":
                return str(header.get("value", ""))
        return ""

    def search_subjects(self, query: str) -> list[str]:
        """
        Return the subject of every message in threads matching ``query``.

        Raises:
            SourceFetchError: If a Gmail API call fails.
        """
        logger.info(f"Searching Gmail: {query}")

        try:
            thread_ids = self._list_thread_ids(query)

            subjects: list[str] = []
            for thread_id in thread_ids:
                thread = (
                    self.service.users()
                    .threads()
                    .get(
                        userId=self.user_id,
                        id=thread_id,
                        format="metadata",
                        metadataHeaders=["Subject"],
                    )
                    .execute()
                )
                subjects.extend(self._subject_of(message) for message in thread.get("messages", []) or [])
        except HttpError as e:
            raise SourceFetchError(SOURCE_NAME, f"Gmail API request failed: {e}") from e

        logger.info(f"Collected {len(subjects)} subjects from {len(thread_ids)} threads")
        return subjects
