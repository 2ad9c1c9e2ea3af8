"""
Google Docs report renderer

Clears a document and writes the alert review into it: title, subtitle, a
rule, then per section a heading, subheading, top-N table and footer.

Paragraphs are appended through a cursor tracked locally (Docs indexes are
UTF-16 code units). Tables are inserted empty, then the document is read
back to locate the cells, which are filled in reverse index order so
earlier insertions do not shift later ones.
"""

import logging
from typing import Any, Optional, Sequence

from alert_review.models.alert import ReportSection
from alert_review.tools.google_auth import DOCS_SCOPES, build_service
from alert_review.tools.report_layout import (
    PALETTE,
    failure_text,
    footer_text,
    hex_to_rgb,
    section_header,
    table_rows,
)

logger = logging.getLogger(__name__)

FONT_FAMILY = "Montserrat"


def _color(name: str) -> dict:
    return {"color": {"rgbColor": hex_to_rgb(PALETTE[name])}}


# Text styles per paragraph kind; alignment is a paragraph style
TITLE_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 36, "bold": True, "color": "Black", "alignment": "CENTER"}
SUBTITLE_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 18, "bold": False, "color": "Black75", "alignment": "CENTER"}
HEADING_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 28, "bold": True, "color": "Black", "alignment": "START"}
SUBHEADING_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 18, "bold": False, "color": "Black", "alignment": "START"}
BODY_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 10, "bold": False, "color": "Black", "alignment": "START"}
TABLE_TITLE_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 10, "bold": True, "color": "White", "alignment": "CENTER"}
TABLE_CONTENT_STYLE = {"fontFamily": FONT_FAMILY, "fontSize": 10, "bold": False, "color": "Black", "alignment": "START"}


def utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def text_style_request(start: int, end: int, style: dict) -> dict:
    return {
        "updateTextStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "textStyle": {
                "weightedFontFamily": {"fontFamily": style["fontFamily"]},
                "fontSize": {"magnitude": style["fontSize"], "unit": "PT"},
                "bold": style["bold"],
                "foregroundColor": _color(style["color"]),
            },
            "fields": "weightedFontFamily,fontSize,bold,foregroundColor",
        }
    }


def paragraph_style_request(start: int, end: int, style: dict, border_bottom: bool = False) -> dict:
    paragraph_style: dict[str, Any] = {
        "namedStyleType": "NORMAL_TEXT",
        "alignment": style["alignment"],
    }
    fields = "namedStyleType,alignment"
    if border_bottom:
        paragraph_style["borderBottom"] = {
            "color": _color("Black25"),
            "width": {"magnitude": 1, "unit": "PT"},
            "padding": {"magnitude": 4, "unit": "PT"},
            "dashStyle": "SOLID",
        }
        fields += ",borderBottom"
    return {
        "updateParagraphStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "paragraphStyle": paragraph_style,
            "fields": fields,
        }
    }


class DocsRequestBuilder:
    """
    Accumulates batchUpdate requests that append paragraphs at a cursor.

    The cursor is the start index of the document's trailing empty
    paragraph; every appended paragraph moves it forward.
    """

    def __init__(self, index: int = 1):
        self.index = index
        self.requests: list[dict] = []

    def paragraph(self, text: str, style: dict, border_bottom: bool = False) -> "DocsRequestBuilder":
        start = self.index
        end = start + utf16_len(text) + 1  # trailing newline

        self.requests.append({"insertText": {"location": {"index": start}, "text": f"{text}\n"}})
        self.requests.append(paragraph_style_request(start, end, style, border_bottom))
        if text:
            self.requests.append(text_style_request(start, end - 1, style))

        self.index = end
        return self

    def rule(self) -> "DocsRequestBuilder":
        """Empty paragraph with a bottom border (Docs has no horizontal-rule request)."""
        return self.paragraph("", BODY_STYLE, border_bottom=True)

    def take(self) -> list[dict]:
        requests, self.requests = self.requests, []
        return requests


def last_table(document: dict) -> dict:
    """Return the last table element of the document body."""
    tables = [element for element in document["body"]["content"] if "table" in element]
    if not tables:
        raise ValueError("Document has no table")
    return tables[-1]


def end_cursor(document: dict) -> int:
    """Start index of the trailing paragraph of the body."""
    return document["body"]["content"][-1]["endIndex"] - 1


def table_fill_requests(table_element: dict, rows: Sequence[Sequence[str]]) -> list[dict]:
    """
    Requests filling an empty table with ``rows`` (first row = header).

    Cells are filled from the highest index down.
    """
    table_start = table_element["startIndex"]
    columns = len(rows[0]) if rows else 0

    requests: list[dict] = [{
        "updateTableCellStyle": {
            "tableRange": {
                "tableCellLocation": {
                    "tableStartLocation": {"index": table_start},
                    "rowIndex": 0,
                    "columnIndex": 0,
                },
                "rowSpan": 1,
                "columnSpan": columns,
            },
            "tableCellStyle": {"backgroundColor": _color("BlueAAA")},
            "fields": "backgroundColor",
        }
    }]

    cells = []
    for row_index, table_row in enumerate(table_element["table"]["tableRows"]):
        for col_index, cell in enumerate(table_row["tableCells"]):
            index = cell["content"][0]["startIndex"]
            cells.append((index, rows[row_index][col_index], row_index == 0))

    for index, text, is_header in sorted(cells, key=lambda c: c[0], reverse=True):
        if not text:
            continue
        style = TABLE_TITLE_STYLE if is_header else TABLE_CONTENT_STYLE
        end = index + utf16_len(text)
        requests.append({"insertText": {"location": {"index": index}, "text": text}})
        requests.append(text_style_request(index, end, style))
        requests.append(paragraph_style_request(index, end, style))

    return requests


class DocsReportRenderer:
    """Renders report sections into one Google Doc."""

    def __init__(self, document_id: str, service: Optional[Any] = None):
        self.document_id = document_id
        self._service = service

    @property
    def service(self):
        if self._service is None:
            self._service = build_service("docs", "v1", DOCS_SCOPES)
        return self._service

    def _get(self) -> dict:
        return self.service.documents().get(documentId=self.document_id).execute()

    def _batch_update(self, requests: list[dict]) -> None:
        if not requests:
            return
        self.service.documents().batchUpdate(
            documentId=self.document_id,
            body={"requests": requests},
        ).execute()

    def clear(self) -> int:
        """Delete the body content; returns the cursor (always 1)."""
        cursor = end_cursor(self._get())
        if cursor > 1:
            self._batch_update([{"deleteContentRange": {"range": {"startIndex": 1, "endIndex": cursor}}}])
        return 1

    def append_table(self, index: int, rows: Sequence[Sequence[str]]) -> int:
        """
        Insert a table at ``index`` and fill it.

        Returns:
            The cursor after the table.
        """
        self._batch_update([{
            "insertTable": {
                "rows": len(rows),
                "columns": len(rows[0]),
                "location": {"index": index},
            }
        }])
        self._batch_update(table_fill_requests(last_table(self._get()), rows))
        return end_cursor(self._get())

    def render(self, title: str, subtitle: str, sections: Sequence[ReportSection]) -> None:
        builder = DocsRequestBuilder(self.clear())

        builder.paragraph(title, TITLE_STYLE)
        if subtitle:
            builder.paragraph(subtitle, SUBTITLE_STYLE)
        builder.rule()

        for section in sections:
            builder.paragraph(section.title, HEADING_STYLE)
            if section.subtitle:
                builder.paragraph(section.subtitle, SUBHEADING_STYLE)

            if section.failed:
                builder.paragraph(failure_text(section), BODY_STYLE)
                continue

            self._batch_update(builder.take())
            cursor = self.append_table(builder.index, [section_header(section), *table_rows(section)])
            builder = DocsRequestBuilder(cursor)
            builder.paragraph(footer_text(section), BODY_STYLE)

        self._batch_update(builder.take())
        logger.info(f"Rendered {len(sections)} section(s) into document {self.document_id}")
