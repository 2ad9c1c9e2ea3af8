# Tools Package
"""
External integrations.

- victorops_client.py: Incident reporting API (httpx)
- gmail_client.py: Mail subject search (Gmail API)
- sheets_client.py: Spreadsheet alert source and Sheet report renderer
- docs_client.py: Doc report renderer
- report_layout.py: Text and colors shared by both renderers
"""

from alert_review.tools.docs_client import DocsReportRenderer
from alert_review.tools.gmail_client import GmailClient
from alert_review.tools.sheets_client import SheetsClient, SheetsReportRenderer, parse_alert_rows
from alert_review.tools.victorops_client import VictorOpsClient

__all__ = [
    "DocsReportRenderer",
    "GmailClient",
    "SheetsClient",
    "SheetsReportRenderer",
    "parse_alert_rows",
    "VictorOpsClient",
]
