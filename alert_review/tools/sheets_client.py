"""
Google Sheets client

- Reads a pre-aggregated alert tab ('Service' / 'Number Of Alerts')
- Renders the alert review report into a report tab
"""

import logging
from typing import Any, Optional, Sequence

from googleapiclient.errors import HttpError

from alert_review.models.alert import AggregatedAlert, ReportSection
from alert_review.tools.google_auth import SHEETS_SCOPES, build_service
from alert_review.tools.report_layout import (
    PALETTE,
    failure_text,
    footer_text,
    hex_to_rgb,
    section_header,
    table_rows,
)
from alert_review.utils.error_handling import SchemaError, SourceFetchError

logger = logging.getLogger(__name__)

SOURCE_NAME = "spreadsheet"
SERVICE_COLUMN = "Service"
COUNT_COLUMN = "Number Of Alerts"


def _parse_count(value: Any) -> Optional[int]:
    """Parse a cell into a positive integer count, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        count = int(value)
    else:
        try:
            count = int(str(value).strip().replace(",", ""), 10)
        except ValueError:
            return None
    return count if count >= 1 else None


def sheet_range(sheet_name: str, cell: str = "") -> str:
    """A1 range for ``sheet_name``; quotes in the name are doubled."""
    quoted = "'" + sheet_name.replace("'", "''") + "'"
    return f"{quoted}!{cell}" if cell else quoted


def parse_alert_rows(values: Sequence[Sequence[Any]]) -> list[AggregatedAlert]:
    """
    Convert sheet values (header row first) into aggregated alerts.

    Rows are already aggregated upstream: no label normalization is applied.
    Rows with a blank service or an invalid count are skipped. Rows naming
    the same service are summed under its first occurrence.

    Raises:
        SchemaError: If the header lacks 'Service' or 'Number Of Alerts'.
    """
    if not values:
        raise SchemaError(SOURCE_NAME, "Sheet is empty; expected a header row")

    header = [str(cell).strip() for cell in values[0]]
    missing = [name for name in (SERVICE_COLUMN, COUNT_COLUMN) if name not in header]
    if missing:
        raise SchemaError(SOURCE_NAME, f"Header is missing required column(s): {', '.join(missing)}")

    service_idx = header.index(SERVICE_COLUMN)
    count_idx = header.index(COUNT_COLUMN)

    totals: dict[str, int] = {}
    for row_number, row in enumerate(values[1:], start=2):
        service = str(row[service_idx]).strip() if service_idx < len(row) else ""
        raw_count = row[count_idx] if count_idx < len(row) else None
        count = _parse_count(raw_count) if raw_count is not None else None

        if not service or count is None:
            logger.warning(f"Skipping sheet row {row_number}: service={service!r}, count={raw_count!r}")
            continue
        totals[service] = totals.get(service, 0) + count

    alerts = [AggregatedAlert(label=label, count=count) for label, count in totals.items()]
    return sorted(alerts, key=lambda alert: alert.count, reverse=True)


class SheetsClient:
    """Wrapper for Sheets value reads/writes on one spreadsheet."""

    def __init__(self, spreadsheet_id: str, service: Optional[Any] = None):
        self.spreadsheet_id = spreadsheet_id
        self._service = service

    @property
    def service(self):
        if self._service is None:
            self._service = build_service("sheets", "v4", SHEETS_SCOPES)
        return self._service

    def read_alert_rows(self, sheet_name: str) -> list[AggregatedAlert]:
        """
        Read the pre-aggregated alert tab.

        Raises:
            SchemaError: On missing columns.
            SourceFetchError: If the Sheets API call fails.
        """
        try:
            response = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    range=sheet_range(sheet_name),
                    valueRenderOption="UNFORMATTED_VALUE",
                )
                .execute()
            )
        except HttpError as e:
            raise SourceFetchError(SOURCE_NAME, f"Sheets API request failed: {e}") from e

        alerts = parse_alert_rows(response.get("values", []))
        logger.info(f"Read {len(alerts)} services from sheet '{sheet_name}'")
        return alerts

    def sheet_id(self, sheet_name: str) -> int:
        """Return the numeric id of ``sheet_name``, creating the tab if needed."""
        spreadsheet = (
            self.service.spreadsheets()
            .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties")
            .execute()
        )
        for sheet in spreadsheet.get("sheets", []):
            props = sheet.get("properties", {})
            if props.get("title") == sheet_name:
                return props["sheetId"]

        logger.info(f"Creating sheet '{sheet_name}'")
        reply = (
            self.service.spreadsheets()
            .batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": [{"addSheet": {"properties": {"title": sheet_name}}}]},
            )
            .execute()
        )
        return reply["replies"][0]["addSheet"]["properties"]["sheetId"]

    def replace_values(self, sheet_name: str, rows: list[list[Any]]) -> None:
        values = self.service.spreadsheets().values()
        values.clear(spreadsheetId=self.spreadsheet_id, range=sheet_range(sheet_name), body={}).execute()
        values.update(
            spreadsheetId=self.spreadsheet_id,
            range=sheet_range(sheet_name, "A1"),
            valueInputOption="RAW",
            body={"values": rows},
        ).execute()

    def batch_update(self, requests: list[dict]) -> None:
        if not requests:
            return
        self.service.spreadsheets().batchUpdate(
            spreadsheetId=self.spreadsheet_id,
            body={"requests": requests},
        ).execute()


class SheetsReportRenderer:
    """Writes the report sections as rows of a sheet tab."""

    # Row kinds used for formatting
    TITLE = "title"
    SUBTITLE = "subtitle"
    HEADING = "heading"
    SUBHEADING = "subheading"
    TABLE_HEADER = "table_header"

    def __init__(self, client: SheetsClient, sheet_name: str):
        self._client = client
        self.sheet_name = sheet_name

    def build_rows(
        self,
        title: str,
        subtitle: str,
        sections: Sequence[ReportSection],
    ) -> tuple[list[list[Any]], list[tuple[int, str]]]:
        """
        Lay out the report as sheet rows.

        Returns:
            Tuple of (rows, kinds) where kinds pairs a row index with the
            formatting kind applied to it.
        """
        rows: list[list[Any]] = [[title]]
        kinds: list[tuple[int, str]] = [(0, self.TITLE)]

        if subtitle:
            kinds.append((len(rows), self.SUBTITLE))
            rows.append([subtitle])
        rows.append([])

        for section in sections:
            kinds.append((len(rows), self.HEADING))
            rows.append([section.title])
            if section.subtitle:
                kinds.append((len(rows), self.SUBHEADING))
                rows.append([section.subtitle])

            if section.failed:
                rows.append([failure_text(section)])
                rows.append([])
                continue

            kinds.append((len(rows), self.TABLE_HEADER))
            rows.append(section_header(section))
            rows.extend(table_rows(section))
            rows.append([footer_text(section)])
            rows.append([])

        return rows, kinds

    def format_requests(self, sheet_id: int, kinds: list[tuple[int, str]]) -> list[dict]:
        """repeatCell requests styling the given rows."""
        formats = {
            self.TITLE: ({"bold": True, "fontSize": 18}, None),
            self.SUBTITLE: ({"fontSize": 12, "foregroundColor": hex_to_rgb(PALETTE["Black75"])}, None),
            self.HEADING: ({"bold": True, "fontSize": 14}, None),
            self.SUBHEADING: ({"italic": True}, None),
            self.TABLE_HEADER: (
                {"bold": True, "foregroundColor": hex_to_rgb(PALETTE["White"])},
                hex_to_rgb(PALETTE["BlueAAA"]),
            ),
        }

        # Reset formatting left over from a previous report
        requests: list[dict] = [{
            "repeatCell": {
                "range": {"sheetId": sheet_id},
                "cell": {},
                "fields": "userEnteredFormat",
            }
        }]
        for row_index, kind in kinds:
            text_format, background = formats[kind]
            cell_format: dict[str, Any] = {"textFormat": text_format}
            fields = "userEnteredFormat.textFormat"
            if background is not None:
                cell_format["backgroundColor"] = background
                fields += ",userEnteredFormat.backgroundColor"

            requests.append({
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": row_index,
                        "endRowIndex": row_index + 1,
                        "startColumnIndex": 0,
                        "endColumnIndex": 2,
                    },
                    "cell": {"userEnteredFormat": cell_format},
                    "fields": fields,
                }
            })
        return requests

    def render(self, title: str, subtitle: str, sections: Sequence[ReportSection]) -> None:
        rows, kinds = self.build_rows(title, subtitle, sections)
        sheet_id = self._client.sheet_id(self.sheet_name)

        self._client.replace_values(self.sheet_name, rows)
        self._client.batch_update(self.format_requests(sheet_id, kinds))
        logger.info(f"Rendered {len(sections)} section(s) into sheet '{self.sheet_name}' ({len(rows)} rows)")
