"""
Slack Events Endpoint
=====================
Receives Slack Events API callbacks and answers mentions and DMs.

Slack expects a 200 within 3 seconds, so events are acknowledged
immediately and answered from a background task.

Handled events:
- url_verification   - echo the challenge
- app_mention        - reply in the thread of the mention
- message (im)       - reply in the direct message
Ignored: bot messages, message subtypes (edits, joins, ...), Slack retries.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from murphybot.api.deps import get_assistant
from murphybot.models.schemas import InboundMessage, OutboundReply
from murphybot.services.assistant import Assistant

logger = logging.getLogger(__name__)

router = APIRouter()

ROUTING_ERROR_TEXT = "Sorry, something went wrong while looking that up. Please try again."


def inbound_from_event(event: Dict[str, Any]) -> Optional[InboundMessage]:
    """
    Convert a Slack event into an InboundMessage.

    Returns:
        None for event types the bot does not answer
    """
    event_type = event.get("type")
    sender_is_bot = bool(event.get("bot_id")) or event.get("subtype") == "bot_message"

    if event_type == "app_mention":
        return InboundMessage(
            text=event.get("text") or "",
            conversation_id=event.get("channel", ""),
            thread_id=event.get("thread_ts") or event.get("ts"),
            is_direct_message=False,
            sender_is_bot=sender_is_bot,
        )

    if event_type == "message" and event.get("channel_type") == "im":
        if event.get("subtype") and not sender_is_bot:
            # Edits, deletions, channel joins...
            return None
        return InboundMessage(
            text=event.get("text") or "",
            conversation_id=event.get("channel", ""),
            thread_id=event.get("thread_ts"),
            is_direct_message=True,
            sender_is_bot=sender_is_bot,
        )

    return None


async def handle_message(assistant: Assistant, message: InboundMessage) -> None:
    """Route one message and post the reply; never raises"""
    try:
        decision = await assistant.router.route(message.text)
        reply = decision.reply
    except Exception:
        logger.exception(f"Routing failed for message in {message.conversation_id}")
        reply = OutboundReply(text=ROUTING_ERROR_TEXT)

    await assistant.slack.post_reply(message.conversation_id, reply, thread_ts=message.thread_id)


@router.post("/slack/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    assistant: Assistant = Depends(get_assistant)
):
    """Slack Events API request URL"""
    payload = await request.json()

    if payload.get("type") == "url_verification":
        return {"challenge": payload.get("challenge", "")}

    if request.headers.get("X-Slack-Retry-Num"):
        logger.info(
            f"Ignoring Slack retry #{request.headers.get('X-Slack-Retry-Num')} "
            f"({request.headers.get('X-Slack-Retry-Reason', 'unknown')})"
        )
        return {"ok": True}

    if payload.get("type") != "event_callback":
        return {"ok": True}

    message = inbound_from_event(payload.get("event") or {})
    if message is None or not message.should_handle:
        return {"ok": True}

    logger.info(
        f"ℹ️ {'DM' if message.is_direct_message else 'app_mention'} in {message.conversation_id}: "
        f"{message.text[:100]}"
    )
    background_tasks.add_task(handle_message, assistant, message)

    return {"ok": True}
