"""Tests for branded document export."""

import datetime as dt
from unittest.mock import Mock, patch

import requests

from project_insights.renderers.branded_document import (
    DocumentMetadata,
    fetch_logo,
    render_branded_document,
)

TODAY = dt.date(2024, 6, 15)


class TestRenderBrandedDocument:
    """Test suite for render_branded_document."""

    def test_header(self):
        metadata = DocumentMetadata(title="Kickoff Notes", author="Ann Lee")

        document = render_branded_document("<p>Hello</p>", metadata, TODAY)

        texts = [run.text for run in document.runs]
        assert texts[0] == "Organization"
        assert texts[1] == "Jun 15, 2024"
        assert "Kickoff Notes" in texts
        assert "Author: Ann Lee  |  Category: General  |  Created: Jun 15, 2024" in texts

    def test_company_and_created_date(self):
        metadata = DocumentMetadata(
            title="Plan",
            category="Planning",
            company_name="Acme",
            created_date=dt.date(2024, 1, 2),
        )

        document = render_branded_document("", metadata, TODAY)

        assert document.runs[0].text == "Acme"
        assert "Category: Planning  |  Created: Jan 2, 2024" in document.text()

    def test_blocks(self):
        html = (
            "<h1>Goals</h1><h3>Detail</h3><p>Ship it</p>"
            "<ul><li>One</li></ul><ol><li>First</li></ol><blockquote>Quote</blockquote><hr>"
        )

        document = render_branded_document(html, DocumentMetadata("Plan"), TODAY)

        texts = [run.text for run in document.runs]
        for expected in ("Goals", "Detail", "Ship it", "•", "One", "1.", "First", "Quote"):
            assert expected in texts

        goals = next(run for run in document.runs if run.text == "Goals")
        detail = next(run for run in document.runs if run.text == "Detail")
        assert goals.size == 16
        assert detail.size == 13

    def test_long_document_paginates(self):
        html = "".join(f"<p>Paragraph {i}</p>" for i in range(80))

        document = render_branded_document(html, DocumentMetadata("Plan"), TODAY)

        assert document.page_count > 1
        assert document.runs_on_page(2)[0].y == 20

    def test_long_document_keeps_every_block(self):
        html = "".join(f"<p>Paragraph {i} of the plan.</p>" for i in range(120))
        html += "<ul>" + "".join(f"<li>Item {i}</li>" for i in range(30)) + "</ul>"

        document = render_branded_document(html, DocumentMetadata("Plan"), TODAY)

        assert document.page_count >= 3
        assert document.page_count * document.page_height > document.line_height_total
        texts = {run.text for run in document.runs}
        assert all(f"Paragraph {i} of the plan." in texts for i in range(120))
        assert all(f"Item {i}" in texts for i in range(30))

    def test_logo_loader_is_called(self):
        loader = Mock(return_value=None)
        metadata = DocumentMetadata("Plan", logo_url="https://cdn.test/logo.png")

        document = render_branded_document("<p>x</p>", metadata, TODAY, logo_loader=loader)

        loader.assert_called_once_with("https://cdn.test/logo.png")
        assert document.page_count == 1

    def test_no_logo_url_skips_loader(self):
        loader = Mock()

        render_branded_document("<p>x</p>", DocumentMetadata("Plan"), TODAY, logo_loader=loader)

        loader.assert_not_called()


class TestFetchLogo:
    @patch("project_insights.renderers.branded_document.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = Mock(content=b"png", raise_for_status=Mock())

        assert fetch_logo("https://cdn.test/logo.png", timeout=3) == b"png"
        mock_get.assert_called_once_with("https://cdn.test/logo.png", timeout=3)

    @patch("project_insights.renderers.branded_document.requests.get")
    def test_failure_returns_none(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")

        assert fetch_logo("https://cdn.test/logo.png") is None
