"""
Assistant Wiring
================
Builds the object graph (stores, classifier, LLM adapter, router, scheduler,
Slack client) from settings. One instance lives on `app.state.assistant`.
"""

import logging
from typing import Optional

from knowledge_sources import FaqSheetSource, ProcedureFolderSource
from murphybot.config import Settings
from murphybot.models.knowledge import FaqItem, ProcedureItem
from murphybot.services.answer_router import AnswerRouter, Generator
from murphybot.services.intent_classifier import IntentClassifier
from murphybot.services.knowledge_store import KnowledgeBase, KnowledgeCollection
from murphybot.services.llm_service import LLMService
from murphybot.services.refresh_scheduler import RefreshScheduler
from murphybot.services.slack_client import SlackClient

logger = logging.getLogger(__name__)


class Assistant:
    """Container for the services shared by the HTTP and Slack surfaces"""

    def __init__(
        self,
        settings: Settings,
        knowledge: KnowledgeBase,
        router: AnswerRouter,
        scheduler: RefreshScheduler,
        slack: SlackClient,
    ):
        self.settings = settings
        self.knowledge = knowledge
        self.router = router
        self.scheduler = scheduler
        self.slack = slack

    async def start(self) -> None:
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
        await self.slack.close()


def build_knowledge_base(settings: Settings) -> KnowledgeBase:
    """Collections backed by the configured sources; unset sources stay empty"""
    faq_loader = None
    if settings.faq_sheet_url:
        faq_loader = FaqSheetSource(settings.faq_sheet_url, timeout=settings.source_timeout_seconds).load

    procedure_loader = None
    if settings.procedures_dir:
        procedure_loader = ProcedureFolderSource(settings.procedures_dir, settings.procedure_link_base_url).load

    faqs: KnowledgeCollection[FaqItem] = KnowledgeCollection(
        "faq", faq_loader, settings.match_confidence_threshold
    )
    procedures: KnowledgeCollection[ProcedureItem] = KnowledgeCollection(
        "procedures", procedure_loader, settings.match_confidence_threshold
    )
    return KnowledgeBase(faqs=faqs, procedures=procedures)


def build_assistant(
    settings: Settings,
    generator: Optional[Generator] = None,
    knowledge: Optional[KnowledgeBase] = None,
    slack: Optional[SlackClient] = None,
) -> Assistant:
    """
    Assemble the assistant.

    Args:
        settings: Application settings
        generator: Generative fallback; defaults to the Groq-backed LLMService
        knowledge: Pre-built collections; defaults to the configured sources
        slack: Slack client; defaults to one using the bot token
    """
    if knowledge is None:
        knowledge = build_knowledge_base(settings)

    if generator is None:
        if not settings.groq_api_key:
            logger.warning("GROQ_API_KEY is not set; generative answers will be an apology")
        generator = LLMService(settings)

    classifier = IntentClassifier(
        categories=settings.faq_categories_list,
        min_query_tokens=settings.min_query_tokens,
    )
    router = AnswerRouter(
        knowledge=knowledge,
        classifier=classifier,
        generator=generator,
        faq_max_results=settings.faq_max_results,
    )
    scheduler = RefreshScheduler(knowledge, interval_minutes=settings.refresh_interval_minutes)

    if slack is None:
        slack = SlackClient(settings.slack_bot_token, base_url=settings.slack_api_base_url)

    return Assistant(settings, knowledge, router, scheduler, slack)
