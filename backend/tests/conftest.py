"""
Test Configuration and Fixtures
================================
Shared fixtures for all tests
"""

import sys
from pathlib import Path
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from murphybot.config import Settings
from murphybot.main import create_app
from murphybot.models.knowledge import FaqItem, ProcedureItem
from murphybot.models.schemas import OutboundReply
from murphybot.services.answer_router import AnswerRouter
from murphybot.services.assistant import Assistant, build_assistant
from murphybot.services.intent_classifier import IntentClassifier
from murphybot.services.knowledge_store import KnowledgeBase, KnowledgeCollection


class FakeGenerator:
    """Generative fallback double recording every call"""

    def __init__(self, text: str = "Generated answer. The Murphy Group | mgsells.com"):
        self.text = text
        self.calls: List[str] = []

    async def answer(self, text: str) -> str:
        self.calls.append(text)
        return self.text


class SpyCollection(KnowledgeCollection):
    """Collection counting how often it is queried"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.queries: List[str] = []

    def scored(self, query: str):
        self.queries.append(query)
        return super().scored(query)


class FakeSlackClient:
    """Slack client double collecting posted replies"""

    def __init__(self):
        self.posts: List[dict] = []

    async def post_reply(self, channel: str, reply: OutboundReply, thread_ts: Optional[str] = None) -> bool:
        self.posts.append({"channel": channel, "reply": reply, "thread_ts": thread_ts})
        return True

    async def close(self) -> None:
        pass


def make_faq(id: str = "faq-2", question: str = "What is the commission split?",
             answer: str = "60/40 for year one.", category: Optional[str] = None) -> FaqItem:
    return FaqItem(id=id, question=question, answer=answer, category=category)


def make_procedure(id: str = "open-house.md", title: str = "Open House Checklist",
                   content: str = "Confirm the listing agent, order signs, print flyers.",
                   summary: str = "", tags=(), source_link: Optional[str] = None) -> ProcedureItem:
    return ProcedureItem(
        id=id, title=title, content=content, summary=summary,
        tags=frozenset(tags), source_link=source_link,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env"""
    return Settings(
        _env_file=None,
        slack_bot_token="",
        slack_signing_secret="",
        groq_api_key="",
        faq_sheet_url="",
        procedures_dir="",
        refresh_interval_minutes=0,
    )


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def knowledge() -> KnowledgeBase:
    """Empty, unconfigured spy collections"""
    return KnowledgeBase(
        faqs=SpyCollection("faq", confidence_threshold=6.0),
        procedures=SpyCollection("procedures", confidence_threshold=6.0),
    )


@pytest.fixture
def router(knowledge: KnowledgeBase, generator: FakeGenerator) -> AnswerRouter:
    classifier = IntentClassifier(
        categories=["listings", "commission", "marketing"],
        min_query_tokens=3,
    )
    return AnswerRouter(knowledge, classifier, generator, faq_max_results=3)


@pytest.fixture
def slack_client() -> FakeSlackClient:
    return FakeSlackClient()


@pytest.fixture
def assistant(settings: Settings, knowledge: KnowledgeBase, generator: FakeGenerator,
              slack_client: FakeSlackClient) -> Assistant:
    return build_assistant(settings, generator=generator, knowledge=knowledge, slack=slack_client)


@pytest_asyncio.fixture
async def client(settings: Settings, assistant: Assistant) -> AsyncGenerator[AsyncClient, None]:
    """Test client over an app with the injected assistant"""
    app = create_app(settings, assistant=assistant)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
