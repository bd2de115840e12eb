"""
Answer Router
=============
Decides where the reply to one message comes from.

    maintenance command  -> refresh, MAINTENANCE_ACK
    acknowledgement      -> ACKNOWLEDGE
    trivial message      -> TRIVIAL_PROMPT
    procedure-first path -> SOP best match, FAQ search, SOP search, LLM
    faq-first path       -> FAQ search, SOP best match, LLM

Procedures win over FAQs by default; a "faq:" or category prefix selects
the FAQ-first path. A "sop:" prefix and a procedure topic hint
(`Intent.prefers_procedure`) select the procedure-first path, which is
also the default, so the hint is logged but does not change the outcome.
The router keeps no state between messages.
"""

import logging
from typing import List, Protocol

from murphybot.models.knowledge import FaqItem, ProcedureItem
from murphybot.models.schemas import (
    DecisionKind,
    MaintenanceKind,
    RefreshStatus,
    RoutingDecision,
)
from murphybot.services.intent_classifier import ControlMode, Intent, IntentClassifier
from murphybot.services.knowledge_store import KnowledgeBase, KnowledgeCollection
from murphybot.services.reply_formatter import format_faq_reply, format_plain_reply, format_procedure_reply

logger = logging.getLogger(__name__)

ACKNOWLEDGE_TEXT = "Anytime! 👍 Ping me if anything else comes up."
TRIVIAL_PROMPT_TEXT = (
    "Ask me a question about our FAQs or SOPs. For example: "
    "`sop: open house`, `faq: commission split`, or just ask in plain English."
)

_COLLECTION_LABELS = {"faq": "FAQ", "procedures": "SOPs"}


class Generator(Protocol):
    async def answer(self, text: str) -> str: ...


class AnswerRouter:
    """
    Routes classified messages to knowledge answers or the LLM fallback.

    Args:
        knowledge: FAQ and procedure collections
        classifier: Intent classifier
        generator: Generative fallback (LLMService or a test double)
        faq_max_results: Maximum FAQ items per answer
    """

    def __init__(
        self,
        knowledge: KnowledgeBase,
        classifier: IntentClassifier,
        generator: Generator,
        faq_max_results: int = 3,
    ):
        self.knowledge = knowledge
        self.classifier = classifier
        self.generator = generator
        self.faq_max_results = faq_max_results

    async def route(self, text: str) -> RoutingDecision:
        intent = self.classifier.classify(text)

        if intent.maintenance is not None:
            decision = await self._maintenance(intent.maintenance)
        elif intent.is_acknowledgement:
            decision = RoutingDecision(kind=DecisionKind.ACKNOWLEDGE, reply=format_plain_reply(ACKNOWLEDGE_TEXT))
        elif intent.is_trivial:
            decision = RoutingDecision(kind=DecisionKind.TRIVIAL_PROMPT, reply=format_plain_reply(TRIVIAL_PROMPT_TEXT))
        elif intent.control_mode == ControlMode.FAQ:
            decision = await self._faq_first(intent)
        else:
            # Default precedence; also taken for a sop prefix or topic hint
            decision = await self._procedure_first(intent)

        logger.info(
            f"Routed: query='{intent.cleaned_text[:60]}', mode={intent.control_mode.value if intent.control_mode else None}, "
            f"prefers_procedure={intent.prefers_procedure}, decision={decision.kind.value}"
        )
        return decision

    # ────────────────────────────────────────────
    # Terminal states
    # ────────────────────────────────────────────

    async def _maintenance(self, kind: MaintenanceKind) -> RoutingDecision:
        if kind == MaintenanceKind.FAQ:
            collections: List[KnowledgeCollection] = [self.knowledge.faqs]
        elif kind == MaintenanceKind.PROCEDURES:
            collections = [self.knowledge.procedures]
        else:
            collections = list(self.knowledge.collections)

        lines = []
        for collection in collections:
            status = await collection.refresh()
            lines.append(self._describe_refresh(status, len(collection)))

        return RoutingDecision(
            kind=DecisionKind.MAINTENANCE_ACK,
            maintenance=kind,
            reply=format_plain_reply("\n".join(lines)),
        )

    @staticmethod
    def _describe_refresh(status: RefreshStatus, cached: int) -> str:
        label = _COLLECTION_LABELS.get(status.collection, status.collection)
        if not status.configured:
            return f"⚠️ {label} source is not configured."
        if status.last_error:
            return f"⚠️ {label} refresh failed; still serving {cached} cached items."
        return f"🔄 {label} refreshed: {status.item_count} items loaded."

    def _procedure_answer(self, query: str, item: ProcedureItem) -> RoutingDecision:
        return RoutingDecision(
            kind=DecisionKind.PROCEDURE_ANSWER,
            items=[item],
            reply=format_procedure_reply(query, item),
        )

    def _faq_answer(self, query: str, items: List[FaqItem]) -> RoutingDecision:
        return RoutingDecision(
            kind=DecisionKind.FAQ_ANSWER,
            items=items,
            reply=format_faq_reply(query, items),
        )

    async def _generative(self, intent: Intent) -> RoutingDecision:
        text = await self.generator.answer(intent.cleaned_text)
        return RoutingDecision(
            kind=DecisionKind.GENERATIVE_ANSWER,
            generated_text=text,
            reply=format_plain_reply(text),
        )

    # ────────────────────────────────────────────
    # Candidate gathering
    # ────────────────────────────────────────────

    def _search_faqs(self, intent: Intent) -> List[FaqItem]:
        item_filter = None
        if intent.category:
            category = intent.category

            def item_filter(item: FaqItem) -> bool:
                return (item.category or "").strip().lower() == category

        return self.knowledge.faqs.search(intent.cleaned_text, limit=self.faq_max_results, item_filter=item_filter)

    async def _procedure_first(self, intent: Intent) -> RoutingDecision:
        query = intent.cleaned_text

        procedure = self.knowledge.procedures.best_match(query)
        if procedure is not None:
            return self._procedure_answer(query, procedure)

        faqs = self._search_faqs(intent)
        if faqs:
            return self._faq_answer(query, faqs)

        # Weaker SOP match is still better than a generated answer
        weak = self.knowledge.procedures.search(query, limit=1)
        if weak:
            return self._procedure_answer(query, weak[0])

        return await self._generative(intent)

    async def _faq_first(self, intent: Intent) -> RoutingDecision:
        query = intent.cleaned_text

        faqs = self._search_faqs(intent)
        if faqs:
            return self._faq_answer(query, faqs)

        procedure = self.knowledge.procedures.best_match(query)
        if procedure is not None:
            return self._procedure_answer(query, procedure)

        return await self._generative(intent)
