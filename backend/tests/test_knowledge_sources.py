"""
Unit Tests for Knowledge Sources
================================
Tests for the cleaner, FAQ sheet parser and SOP folder loader
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from knowledge_sources.errors import KnowledgeSourceError


class TestCleaner:
    """Tests for text cleaning helpers"""

    def test_clean_text_whitespace(self):
        from knowledge_sources.cleaner import clean_text

        assert clean_text("Hello   world\n\n\n\ntest\u00a0again") == "Hello world test again"

    def test_clean_text_none(self):
        from knowledge_sources.cleaner import clean_text

        assert clean_text(None) == ""

    def test_clean_document_keeps_paragraphs(self):
        from knowledge_sources.cleaner import clean_document

        result = clean_document("Line one   \r\n\r\n\r\n\r\nLine two")

        assert result == "Line one\n\nLine two"

    def test_summarize_first_paragraph(self):
        from knowledge_sources.cleaner import summarize

        text = "## Steps\n\n- Order **signs** from [the portal](https://x)\n\nSecond paragraph."

        assert summarize(text) == "Steps"
        assert summarize("- Order **signs** from [the portal](https://x)\n\nMore") == "Order signs from the portal"

    def test_summarize_truncates_on_word_boundary(self):
        from knowledge_sources.cleaner import summarize

        result = summarize("word " * 100, max_chars=22)

        assert result == "word word word word…"


class TestFaqSheet:
    """Tests for FAQ CSV parsing"""

    def test_parse_rows(self):
        from knowledge_sources.faq_sheet import parse_faq_csv

        csv_text = (
            "Category,Question,Answer\n"
            "Commission,What is the split?,60/40 for year one.\n"
            "Marketing,Who orders signs?,\"The listing coordinator,\nwithin 24 hours.\"\n"
        )

        items = parse_faq_csv(csv_text)

        assert [i.id for i in items] == ["faq-2", "faq-3"]
        assert items[0].category == "Commission"
        assert items[1].answer == "The listing coordinator,\nwithin 24 hours."

    def test_header_aliases_and_bom(self):
        from knowledge_sources.faq_sheet import parse_faq_csv

        items = parse_faq_csv("\ufeffTOPIC , Q , Response\nBuyers,Pre-approval first?,Yes.\n")

        assert len(items) == 1
        assert items[0].category == "Buyers"
        assert items[0].question == "Pre-approval first?"

    def test_category_column_optional(self):
        from knowledge_sources.faq_sheet import parse_faq_csv

        items = parse_faq_csv("question,answer\nWhere is the office?,Main St.\n")

        assert items[0].category is None

    def test_incomplete_rows_skipped(self):
        """Row ids follow sheet rows even when rows are skipped"""
        from knowledge_sources.faq_sheet import parse_faq_csv

        items = parse_faq_csv("question,answer\nNo answer yet?,\n,Orphan answer\nReal?,Yes\n")

        assert [i.id for i in items] == ["faq-4"]

    def test_missing_columns_raise(self):
        from knowledge_sources.faq_sheet import parse_faq_csv

        with pytest.raises(KnowledgeSourceError):
            parse_faq_csv("title,body\nx,y\n")

    def test_export_url_from_edit_link(self):
        from knowledge_sources.faq_sheet import to_csv_export_url

        url = "https://docs.google.com/spreadsheets/d/abc_123-XYZ/edit#gid=42"

        assert to_csv_export_url(url) == (
            "https://docs.google.com/spreadsheets/d/abc_123-XYZ/export?format=csv&gid=42"
        )

    def test_export_url_passthrough(self):
        from knowledge_sources.faq_sheet import to_csv_export_url

        published = "https://docs.google.com/spreadsheets/d/e/2PACX/pub?output=csv"

        assert to_csv_export_url(published) == published
        assert to_csv_export_url("https://example.com/faq.csv") == "https://example.com/faq.csv"

    @pytest.mark.asyncio
    async def test_local_file_source(self, tmp_path):
        from knowledge_sources.faq_sheet import FaqSheetSource

        path = tmp_path / "faq.csv"
        path.write_text("question,answer\nWhat is the split?,60/40\n", encoding="utf-8")

        source = FaqSheetSource(str(path))
        items = await source.load()

        assert not source.is_remote
        assert items[0].answer == "60/40"

    @pytest.mark.asyncio
    async def test_missing_local_file_raises(self, tmp_path):
        from knowledge_sources.faq_sheet import FaqSheetSource

        with pytest.raises(KnowledgeSourceError):
            await FaqSheetSource(str(tmp_path / "missing.csv")).load()


class TestProcedureDocs:
    """Tests for SOP document parsing"""

    def test_header_lines(self):
        from knowledge_sources.procedure_docs import parse_procedure

        text = (
            "# Open House Checklist\n"
            "Tags: Open House, Marketing\n"
            "Link: https://drive.example.com/oh\n"
            "\n"
            "Order signs two days ahead.\n"
            "\n"
            "Print flyers.\n"
        )

        item = parse_procedure(text, "open-house.md")

        assert item.title == "Open House Checklist"
        assert item.tags == frozenset({"open house", "marketing"})
        assert item.source_link == "https://drive.example.com/oh"
        assert item.summary == "Order signs two days ahead."
        assert item.content.startswith("Order signs")
        assert "Tags:" not in item.content

    def test_title_from_filename_and_base_link(self):
        from knowledge_sources.procedure_docs import parse_procedure

        item = parse_procedure("Call every new lead within 5 minutes.", "leads/speed_to-lead.md",
                               link_base_url="https://wiki.example.com/sops/")

        assert item.title == "Speed To Lead"
        assert item.source_link == "https://wiki.example.com/sops/leads/speed_to-lead.md"
        assert item.content == "Call every new lead within 5 minutes."

    def test_empty_body_returns_none(self):
        from knowledge_sources.procedure_docs import parse_procedure

        assert parse_procedure("# Title only\nTags: x\n", "empty.md") is None

    def test_no_link_without_base(self):
        from knowledge_sources.procedure_docs import parse_procedure

        assert parse_procedure("Body.", "x.txt").source_link is None

    @pytest.mark.asyncio
    async def test_folder_source(self, tmp_path):
        from knowledge_sources.procedure_docs import ProcedureFolderSource

        (tmp_path / "closing").mkdir()
        (tmp_path / "closing" / "final-walkthrough.md").write_text("# Final Walkthrough\n\nCheck appliances.")
        (tmp_path / "open-house.txt").write_text("Order signs.")
        (tmp_path / "empty.md").write_text("# Nothing here\n")
        (tmp_path / "photo.png").write_bytes(b"\x89PNG")

        items = await ProcedureFolderSource(str(tmp_path)).load()

        assert [i.id for i in items] == ["closing/final-walkthrough.md", "open-house.txt"]
        assert items[1].title == "Open House"

    @pytest.mark.asyncio
    async def test_missing_folder_raises(self, tmp_path):
        from knowledge_sources.procedure_docs import ProcedureFolderSource

        with pytest.raises(KnowledgeSourceError):
            await ProcedureFolderSource(str(tmp_path / "nope")).load()
