"""
Chat API Endpoint
=================
Routes one message through the same pipeline the Slack bot uses.
Useful for testing answers without Slack.
"""

import logging

from fastapi import APIRouter, Depends

from murphybot.api.deps import get_assistant
from murphybot.models.schemas import ChatRequest, ChatResponse
from murphybot.services.assistant import Assistant

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    assistant: Assistant = Depends(get_assistant)
):
    """
    Route a message and return the reply.

    Request body:
    - message: User's question (or a maintenance command / control prefix).

    Returns the decision kind, the plain-text reply and the Slack blocks
    (empty for plain replies).
    """
    decision = await assistant.router.route(request.message)

    return ChatResponse(
        kind=decision.kind,
        text=decision.reply.text,
        blocks=decision.reply.to_slack_blocks() or [],
    )
