"""Google API credentials and service construction"""
import logging
from typing import Sequence

import google.auth
from google.auth.transport.requests import Request
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
DOCS_SCOPES = ["https://www.googleapis.com/auth/documents"]
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Suppress the "No project ID could be determined" warning; Workspace APIs need no quota project
logging.getLogger("google.auth._default").setLevel(logging.ERROR)


def load_credentials(scopes: Sequence[str]):
    """Load credentials using Application Default Credentials.

    Credentials are loaded from (in order):
    1. GOOGLE_APPLICATION_CREDENTIALS environment variable (path to key/token file)
    2. gcloud application-default credentials
    3. GCE/Cloud Run metadata service

    Returns:
        Google credentials object
    """
    creds, _project = google.auth.default(scopes=list(scopes))

    if creds.expired and hasattr(creds, "refresh"):
        logger.info("Refreshing expired credentials...")
        creds.refresh(Request())

    return creds


def build_service(api: str, version: str, scopes: Sequence[str]):
    """Build a Google API service object for ``api``/``version``."""
    return build(api, version, credentials=load_credentials(scopes), cache_discovery=False)
