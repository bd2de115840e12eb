"""
Reply Formatter
===============
Builds outbound replies from knowledge items.

Knowledge replies are structured: a context line naming the query, then
one section per item separated by dividers. A plain-text rendering is
always included for notifications and clients without block support.
"""

from typing import List, Sequence

from murphybot.models.knowledge import FaqItem, ProcedureItem
from murphybot.models.schemas import BlockType, OutboundReply, ReplyBlock

SECTION_TEXT_LIMIT = 2900  # Slack caps section text at 3000 chars


def _clip(text: str, limit: int = SECTION_TEXT_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1].rstrip() + "…"


def _context_block(label: str, query: str) -> ReplyBlock:
    return ReplyBlock(type=BlockType.CONTEXT, text=f"{label} for: _{query}_")


def _with_dividers(sections: Sequence[ReplyBlock]) -> List[ReplyBlock]:
    blocks: List[ReplyBlock] = []
    for i, section in enumerate(sections):
        if i:
            blocks.append(ReplyBlock(type=BlockType.DIVIDER))
        blocks.append(section)
    return blocks


def format_faq_reply(query: str, items: Sequence[FaqItem]) -> OutboundReply:
    """Question/answer sections, one per FAQ item"""
    sections = []
    text_parts = []
    for item in items:
        header = f"*Q: {item.question}*"
        if item.category:
            header += f"  _({item.category})_"
        sections.append(ReplyBlock(
            type=BlockType.SECTION,
            text=_clip(f"{header}\n{item.answer}"),
        ))
        text_parts.append(f"Q: {item.question}\nA: {item.answer}")

    blocks = [_context_block("📚 FAQ results", query), ReplyBlock(type=BlockType.DIVIDER)]
    blocks.extend(_with_dividers(sections))

    return OutboundReply(text="\n\n".join(text_parts), blocks=blocks)


def format_procedure_reply(query: str, item: ProcedureItem) -> OutboundReply:
    """Title, summary and optional link button for one procedure"""
    summary = item.summary or item.content
    body = f"*{item.title}*\n{summary}"

    blocks = [
        _context_block("📋 SOP match", query),
        ReplyBlock(type=BlockType.DIVIDER),
        ReplyBlock(
            type=BlockType.SECTION,
            text=_clip(body),
            link_url=item.source_link,
            link_label="Open SOP",
        ),
    ]

    text = f"{item.title}\n{summary}"
    if item.source_link:
        text += f"\n{item.source_link}"

    return OutboundReply(text=text, blocks=blocks)


def format_plain_reply(text: str) -> OutboundReply:
    return OutboundReply(text=text)
