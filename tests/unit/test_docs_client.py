"""
Unit Tests for the Google Docs Report Renderer

Covers request index arithmetic and the render call sequence against a
mocked Docs service.
"""

from unittest.mock import MagicMock

import pytest

from alert_review.models.alert import AlertSource, ReportSection
from alert_review.tools.docs_client import (
    BODY_STYLE,
    TABLE_TITLE_STYLE,
    TITLE_STYLE,
    DocsReportRenderer,
    DocsRequestBuilder,
    end_cursor,
    last_table,
    table_fill_requests,
    utf16_len,
)
from alert_review.tools.report_layout import hex_to_rgb


def empty_document(end_index=2):
    return {"body": {"content": [{"endIndex": 1, "sectionBreak": {}}, {"startIndex": 1, "endIndex": end_index}]}}


def table_document(start_index, cell_indexes, end_index):
    rows = [
        {"tableCells": [{"content": [{"startIndex": index}]} for index in row]}
        for row in cell_indexes
    ]
    return {
        "body": {
            "content": [
                {"endIndex": 1, "sectionBreak": {}},
                {"startIndex": 1, "endIndex": start_index},
                {"startIndex": start_index, "endIndex": end_index - 1, "table": {"tableRows": rows}},
                {"startIndex": end_index - 1, "endIndex": end_index},
            ]
        }
    }


class TestRequestBuilder:

    def test_utf16_length(self):
        assert utf16_len("abc") == 3
        assert utf16_len("\U0001F525 x") == 4

    def test_paragraph_indices(self):
        builder = DocsRequestBuilder(1)
        builder.paragraph("ALERT REVIEW", TITLE_STYLE)

        insert, paragraph_style, text_style = builder.take()

        assert insert == {"insertText": {"location": {"index": 1}, "text": "ALERT REVIEW\n"}}
        assert paragraph_style["updateParagraphStyle"]["range"] == {"startIndex": 1, "endIndex": 14}
        assert paragraph_style["updateParagraphStyle"]["paragraphStyle"]["alignment"] == "CENTER"
        assert text_style["updateTextStyle"]["range"] == {"startIndex": 1, "endIndex": 13}
        assert text_style["updateTextStyle"]["textStyle"]["fontSize"] == {"magnitude": 36, "unit": "PT"}
        assert builder.index == 14

    def test_cursor_counts_utf16_units(self):
        builder = DocsRequestBuilder(5)
        builder.paragraph("\U0001F525 disk", BODY_STYLE)
        assert builder.index == 5 + 7 + 1

    def test_rule_is_bordered_empty_paragraph(self):
        builder = DocsRequestBuilder(10).rule()

        insert, paragraph_style = builder.take()

        assert insert["insertText"]["text"] == "\n"
        assert "borderBottom" in paragraph_style["updateParagraphStyle"]["paragraphStyle"]
        assert paragraph_style["updateParagraphStyle"]["fields"].endswith("borderBottom")
        assert builder.index == 11

    def test_take_resets_requests(self):
        builder = DocsRequestBuilder(1).paragraph("a", BODY_STYLE)
        builder.take()
        assert builder.take() == []
        assert builder.index == 3


class TestDocumentHelpers:

    def test_end_cursor(self):
        assert end_cursor(empty_document(40)) == 39

    def test_last_table(self):
        document = table_document(10, [[12, 14]], 20)
        assert "table" in last_table(document)

    def test_last_table_missing(self):
        with pytest.raises(ValueError):
            last_table(empty_document())

    def test_table_fill_reverse_order(self):
        table = table_document(20, [[23, 25], [28, 30]], 33)["body"]["content"][2]
        rows = [["Top 5 count", "Subject"], ["3 (75.00%)", "disk full"]]

        requests = table_fill_requests(table, rows)

        cell_style = requests[0]["updateTableCellStyle"]
        assert cell_style["tableRange"]["tableCellLocation"]["tableStartLocation"] == {"index": 20}
        assert cell_style["tableRange"]["columnSpan"] == 2
        assert cell_style["tableCellStyle"]["backgroundColor"]["color"]["rgbColor"] == hex_to_rgb("#0C57A8")

        inserts = [r["insertText"] for r in requests if "insertText" in r]
        assert [i["location"]["index"] for i in inserts] == [30, 28, 25, 23]
        assert [i["text"] for i in inserts] == ["disk full", "3 (75.00%)", "Subject", "Top 5 count"]

        header_style = requests[-2]["updateTextStyle"]["textStyle"]
        assert header_style["foregroundColor"]["color"]["rgbColor"] == hex_to_rgb("#FFFFFF")
        assert header_style["bold"] is TABLE_TITLE_STYLE["bold"]

    def test_table_fill_skips_empty_cells(self):
        table = table_document(20, [[23, 25]], 28)["body"]["content"][2]

        requests = table_fill_requests(table, [["Top 5 count", ""]])

        assert len([r for r in requests if "insertText" in r]) == 1


class TestDocsReportRenderer:

    @pytest.fixture
    def service(self):
        return MagicMock()

    def batch_requests(self, service):
        calls = service.documents.return_value.batchUpdate.call_args_list
        return [c.kwargs["body"]["requests"] for c in calls]

    def test_render_section_with_table(self, service, sample_alerts):
        documents = service.documents.return_value
        documents.get.return_value.execute.side_effect = [
            empty_document(50),
            table_document(60, [[63, 65], [68, 70], [73, 75]], 80),
            table_document(60, [[63, 65], [68, 70], [73, 75]], 120),
        ]
        section = ReportSection(
            source=AlertSource.EMAIL,
            title="Top Root@ mail alerts",
            subtitle="Last 100 days",
            alerts=sample_alerts,
        )

        DocsReportRenderer("doc-1", service=service).render("ALERT REVIEW", "", [section])

        batches = self.batch_requests(service)
        assert batches[0] == [{"deleteContentRange": {"range": {"startIndex": 1, "endIndex": 49}}}]
        assert batches[1][0]["insertText"]["text"] == "ALERT REVIEW\n"
        assert batches[2] == [{"insertTable": {"rows": 3, "columns": 2, "location": {"index": 51}}}]
        assert any(r.get("insertText", {}).get("text") == "disk full" for r in batches[3])
        assert batches[4][0]["insertText"] == {
            "location": {"index": 119},
            "text": "The top 5 alerts represent 100.00% of the total number of alerts (4).\n",
        }

    def test_table_inserted_at_builder_cursor(self, service, sample_alerts):
        documents = service.documents.return_value
        documents.get.return_value.execute.side_effect = [
            empty_document(2),
            table_document(40, [[43, 45], [48, 50], [53, 55]], 60),
            table_document(40, [[43, 45], [48, 50], [53, 55]], 90),
        ]
        section = ReportSection(source=AlertSource.EMAIL, title="H", alerts=sample_alerts)

        DocsReportRenderer("doc-1", service=service).render("T", "", [section])

        batches = self.batch_requests(service)
        # empty document: nothing to delete; "T\n" + rule "\n" + "H\n" -> cursor 1 + 2 + 1 + 2
        assert batches[0][0]["insertText"]["location"] == {"index": 1}
        assert batches[1][0]["insertTable"]["location"] == {"index": 6}

    def test_failed_section_has_no_table(self, service):
        service.documents.return_value.get.return_value.execute.return_value = empty_document(2)
        section = ReportSection(source=AlertSource.PAGING, title="Top VictorOps incidents", error="HTTP 500")

        DocsReportRenderer("doc-1", service=service).render("ALERT REVIEW", "Q1", [section])

        batches = self.batch_requests(service)
        assert len(batches) == 1
        texts = [r["insertText"]["text"] for r in batches[0] if "insertText" in r]
        assert texts == [
            "ALERT REVIEW\n",
            "Q1\n",
            "\n",
            "Top VictorOps incidents\n",
            "Failed to fetch Top VictorOps incidents: HTTP 500\n",
        ]
