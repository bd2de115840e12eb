"""
Knowledge API Endpoints
=======================
Search both collections and trigger on-demand refreshes
"""

from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from murphybot.api.deps import get_assistant
from murphybot.models.knowledge import FaqItem
from murphybot.models.schemas import KnowledgeHit, KnowledgeSearchResponse, RefreshResponse
from murphybot.services.assistant import Assistant


router = APIRouter()


class RefreshTarget(str, Enum):
    ALL = "all"
    FAQ = "faq"
    PROCEDURES = "procedures"


@router.get("/knowledge/search", response_model=KnowledgeSearchResponse)
async def search_knowledge(
    query: str = Query(..., min_length=1, max_length=500),
    limit: Optional[int] = Query(None, ge=1, le=50),
    assistant: Assistant = Depends(get_assistant)
):
    """
    Ranked lexical search over both collections.

    Hits from each collection keep their own order; scores are only
    comparable within one collection. Without `limit`, each collection
    returns up to its configured maximum.
    """
    settings = assistant.settings
    hits: List[KnowledgeHit] = []

    for collection in assistant.knowledge.collections:
        if limit is None:
            cap = settings.faq_max_results if collection is assistant.knowledge.faqs else settings.procedure_max_results
        else:
            cap = limit
        for candidate in collection.ranked(query, limit=cap):
            item = candidate.item
            if isinstance(item, FaqItem):
                hits.append(KnowledgeHit(
                    collection=collection.name, id=item.id, title=item.question, score=candidate.score
                ))
            else:
                hits.append(KnowledgeHit(
                    collection=collection.name, id=item.id, title=item.title,
                    score=candidate.score, link=item.source_link
                ))

    return KnowledgeSearchResponse(query=query, results=hits, total=len(hits))


@router.post("/knowledge/refresh", response_model=RefreshResponse)
async def refresh_knowledge(
    collection: RefreshTarget = Query(RefreshTarget.ALL),
    assistant: Assistant = Depends(get_assistant)
):
    """Refresh one or both collections now and report the outcome"""
    if collection == RefreshTarget.FAQ:
        statuses = [await assistant.knowledge.faqs.refresh()]
    elif collection == RefreshTarget.PROCEDURES:
        statuses = [await assistant.knowledge.procedures.refresh()]
    else:
        statuses = await assistant.knowledge.refresh_all()

    return RefreshResponse(collections=statuses)
