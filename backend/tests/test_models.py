"""
Unit Tests for Models
=====================
Tests for knowledge items and Pydantic transport/API schemas
"""

import pytest
from datetime import datetime, timezone
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestKnowledgeItems:
    """Tests for FaqItem and ProcedureItem"""

    def test_faq_item_strips_whitespace(self):
        from murphybot.models.knowledge import FaqItem

        item = FaqItem(id="faq-2", question="  What is the split?  ", answer=" 60/40 ")

        assert item.question == "What is the split?"
        assert item.answer == "60/40"

    def test_faq_item_requires_answer(self):
        from murphybot.models.knowledge import FaqItem
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            FaqItem(id="faq-2", question="What is the split?", answer="   ")

    def test_procedure_item_requires_content(self):
        from murphybot.models.knowledge import ProcedureItem
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ProcedureItem(id="x.md", title="Empty", content="")

    def test_items_are_immutable(self):
        from murphybot.models.knowledge import FaqItem
        from pydantic import ValidationError

        item = FaqItem(id="faq-2", question="Q?", answer="A")

        with pytest.raises(ValidationError):
            item.answer = "changed"

    def test_procedure_scoring_fields_order(self):
        """Headline first, body last"""
        from murphybot.models.knowledge import ProcedureItem
        from murphybot.services.scoring import BODY_WEIGHT, HEADLINE_WEIGHT

        item = ProcedureItem(id="x.md", title="Showings", content="Confirm with the seller.",
                             tags=frozenset({"showing", "buyers"}))
        fields = item.scoring_fields()

        assert fields[0] == ("Showings", HEADLINE_WEIGHT)
        assert fields[2][0] == "buyers showing"
        assert fields[-1] == ("Confirm with the seller.", BODY_WEIGHT)


class TestTransportSchemas:
    """Tests for inbound/outbound message schemas"""

    def test_should_handle(self):
        from murphybot.models.schemas import InboundMessage

        assert InboundMessage(text="hi", conversation_id="C1").should_handle
        assert not InboundMessage(text="   ", conversation_id="C1").should_handle
        assert not InboundMessage(text="hi", conversation_id="C1", sender_is_bot=True).should_handle

    def test_section_with_button(self):
        from murphybot.models.schemas import BlockType, ReplyBlock

        block = ReplyBlock(type=BlockType.SECTION, text="*SOP*", link_url="https://x", link_label="Open SOP")

        assert block.to_slack() == {
            "type": "section",
            "text": {"type": "mrkdwn", "text": "*SOP*"},
            "accessory": {
                "type": "button",
                "text": {"type": "plain_text", "text": "Open SOP"},
                "url": "https://x",
            },
        }

    def test_context_and_divider(self):
        from murphybot.models.schemas import BlockType, ReplyBlock

        assert ReplyBlock(type=BlockType.DIVIDER).to_slack() == {"type": "divider"}
        assert ReplyBlock(type=BlockType.CONTEXT, text="ctx").to_slack()["elements"][0]["text"] == "ctx"

    def test_plain_reply_has_no_blocks(self):
        from murphybot.models.schemas import OutboundReply

        assert OutboundReply(text="hi").to_slack_blocks() is None


class TestRefreshStatus:
    """Tests for RefreshStatus.ok"""

    def test_never_refreshed_not_ok(self):
        from murphybot.models.schemas import RefreshStatus

        assert not RefreshStatus(collection="faq").ok

    def test_success_ok(self):
        from murphybot.models.schemas import RefreshStatus

        now = datetime.now(timezone.utc)
        status = RefreshStatus(collection="faq", last_attempt_at=now, last_success_at=now, item_count=3)

        assert status.ok
        assert status.model_dump()["ok"] is True

    def test_error_not_ok(self):
        from murphybot.models.schemas import RefreshStatus

        now = datetime.now(timezone.utc)
        status = RefreshStatus(collection="faq", last_success_at=now, last_error="timeout")

        assert not status.ok


class TestAPISchemas:
    """Tests for API request schemas"""

    def test_chat_request_valid(self):
        from murphybot.models.schemas import ChatRequest

        assert ChatRequest(message="sop: open house").message == "sop: open house"

    def test_chat_request_validation_min_length(self):
        from murphybot.models.schemas import ChatRequest
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ChatRequest(message="")

    def test_chat_request_validation_max_length(self):
        from murphybot.models.schemas import ChatRequest
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            ChatRequest(message="x" * 4001)
