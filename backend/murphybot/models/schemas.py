"""
Pydantic Schemas
================
Transport, routing and API request/response models
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, computed_field

from murphybot.models.knowledge import FaqItem, ProcedureItem


# ============================================
# Transport Schemas
# ============================================

class InboundMessage(BaseModel):
    """Inbound chat event as seen by the router
    conversation_id: channel or DM id the reply goes to
    thread_id: thread timestamp to reply into (None replies at top level)
    """
    text: str = ""
    conversation_id: str
    thread_id: Optional[str] = None
    is_direct_message: bool = False
    sender_is_bot: bool = False

    @property
    def should_handle(self) -> bool:
        """Bot-authored and blank messages are ignored"""
        return not self.sender_is_bot and bool(self.text.strip())


class BlockType(str, Enum):
    CONTEXT = "context"
    SECTION = "section"
    DIVIDER = "divider"


class ReplyBlock(BaseModel):
    """Single block descriptor of a structured reply
    link_url/link_label: optional button attached to a section
    """
    type: BlockType
    text: str = ""
    link_url: Optional[str] = None
    link_label: str = "Open"

    def to_slack(self) -> Dict[str, Any]:
        """Render as a Slack Block Kit block"""
        if self.type == BlockType.DIVIDER:
            return {"type": "divider"}

        if self.type == BlockType.CONTEXT:
            return {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": self.text}],
            }

        block: Dict[str, Any] = {
            "type": "section",
            "text": {"type": "mrkdwn", "text": self.text},
        }
        if self.link_url:
            block["accessory"] = {
                "type": "button",
                "text": {"type": "plain_text", "text": self.link_label},
                "url": self.link_url,
            }
        return block


class OutboundReply(BaseModel):
    """Reply sent back through the transport; blocks empty for plain text"""
    text: str
    blocks: List[ReplyBlock] = []

    def to_slack_blocks(self) -> Optional[List[Dict[str, Any]]]:
        if not self.blocks:
            return None
        return [block.to_slack() for block in self.blocks]


# ============================================
# Routing Schemas
# ============================================

class MaintenanceKind(str, Enum):
    FAQ = "faq"
    PROCEDURES = "procedures"
    ALL = "all"


class DecisionKind(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    TRIVIAL_PROMPT = "trivial_prompt"
    MAINTENANCE_ACK = "maintenance_ack"
    PROCEDURE_ANSWER = "procedure_answer"
    FAQ_ANSWER = "faq_answer"
    GENERATIVE_ANSWER = "generative_answer"


class RoutingDecision(BaseModel):
    """Outcome of routing one message
    maintenance: set for MAINTENANCE_ACK
    items: the answering items for PROCEDURE_ANSWER (one) and FAQ_ANSWER (one or more)
    generated_text: model output for GENERATIVE_ANSWER
    """
    kind: DecisionKind
    reply: OutboundReply
    maintenance: Optional[MaintenanceKind] = None
    items: List[Union[ProcedureItem, FaqItem]] = []
    generated_text: Optional[str] = None


# ============================================
# Knowledge Status Schemas
# ============================================

class RefreshStatus(BaseModel):
    """Observable outcome of the latest refresh of one collection
    ok: configured, refreshed at least once, and the latest attempt succeeded
    """
    collection: str
    configured: bool = True
    item_count: int = 0
    last_attempt_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_error: Optional[str] = None

    @computed_field
    @property
    def ok(self) -> bool:
        return self.configured and self.last_error is None and self.last_success_at is not None


# ============================================
# API Schemas
# ============================================

class ChatRequest(BaseModel):
    """Request for the chat endpoint"""
    message: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    """Routed reply for one message"""
    kind: DecisionKind
    text: str
    blocks: List[Dict[str, Any]] = []


class KnowledgeHit(BaseModel):
    """Single search hit from either collection"""
    collection: str
    id: str
    title: str
    score: float
    link: Optional[str] = None


class KnowledgeSearchResponse(BaseModel):
    """Search results"""
    query: str
    results: List[KnowledgeHit]
    total: int


class RefreshResponse(BaseModel):
    """Outcome of an on-demand refresh"""
    collections: List[RefreshStatus]
