"""
Intent Classifier Service
=========================
Rule-based classification of raw chat text before routing.

Rules are applied in a fixed order:
1. Strip Slack mention markup
2. Maintenance commands ("refresh faq", "reload sops", ...) - short-circuit
3. Control prefix "<keyword>: <rest>" (faq / sop / FAQ category)
4. Procedure topic keywords (only without a control prefix)
5. Acknowledgement / politeness phrases (whole message)
6. Trivial messages (too short and not a question)

The classifier never touches the knowledge store or the LLM; the router
acts on the returned `Intent`.
"""

import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from murphybot.models.schemas import MaintenanceKind

logger = logging.getLogger(__name__)


class ControlMode(Enum):
    """Collection explicitly requested with a control prefix"""
    PROCEDURE = "procedure"
    FAQ = "faq"


@dataclass
class Intent:
    """Classification of one message"""
    raw_text: str
    cleaned_text: str
    control_mode: Optional[ControlMode] = None
    category: Optional[str] = None
    maintenance: Optional[MaintenanceKind] = None
    is_acknowledgement: bool = False
    is_trivial: bool = False
    prefers_procedure: bool = False


# ============================================
# Rule table
# ============================================

MENTION_RE = re.compile(r"<@[A-Za-z0-9_.-]+(?:\|[^>]*)?>")

MAINTENANCE_RULES: List[Tuple[Pattern, MaintenanceKind]] = [
    (re.compile(r"(refresh|sync|reload)\s+faqs?", re.IGNORECASE), MaintenanceKind.FAQ),
    (re.compile(r"(refresh|sync|reload)\s+(sops?|procedures?)", re.IGNORECASE), MaintenanceKind.PROCEDURES),
    (re.compile(r"(refresh|sync|reload)\s+(all|knowledge|everything)", re.IGNORECASE), MaintenanceKind.ALL),
]

CONTROL_PREFIX_RE = re.compile(r"^\s*([a-z][a-z ]{0,30}?)\s*:\s*(\S.*)$", re.IGNORECASE | re.DOTALL)

CONTROL_KEYWORDS: Dict[str, ControlMode] = {
    "faq": ControlMode.FAQ,
    "faqs": ControlMode.FAQ,
    "sop": ControlMode.PROCEDURE,
    "sops": ControlMode.PROCEDURE,
    "procedure": ControlMode.PROCEDURE,
    "procedures": ControlMode.PROCEDURE,
}

# Operational topics answered by SOP documents
PROCEDURE_TOPIC_PATTERNS: List[Pattern] = [
    re.compile(rf"\b{p}\b", re.IGNORECASE) for p in (
        r"open\s+houses?",
        r"listing\s+(appointment|presentation|agreement|launch)s?",
        r"showings?",
        r"speed[\s-]+to[\s-]+lead",
        r"follow[\s-]?ups?",
        r"checklists?",
        r"closings?",
        r"escrow",
        r"offers?",
        r"walk[\s-]?throughs?",
        r"sops?",
        r"procedures?",
        r"process(es)?",
        r"step[\s-]+by[\s-]+step",
        r"onboarding\s+steps?",
        r"past[\s-]+clients?",
    )
]

ACKNOWLEDGEMENT_PHRASE = (
    r"ok(ay)?|kk?|thanks?( you)?( so much| a lot)?|thank you( so much| a lot)?|thx|ty|tysm"
    r"|got it|cool|great|perfect|sounds good|awesome|nice|will do|appreciate it"
)
# Emoji blocks plus the variation selector and zero-width joiner
EMOJI_CHARS = r"\u2600-\u27BF\U0001F300-\U0001FAFF\uFE0F\u200D"

# One or more politeness phrases or emoji, separated by spaces or punctuation
ACKNOWLEDGEMENT_RE = re.compile(
    rf"\s*(?:(?:{ACKNOWLEDGEMENT_PHRASE}|[{EMOJI_CHARS}])[\s!.,:;)\-{EMOJI_CHARS}]*)+",
    re.IGNORECASE,
)

INTERROGATIVE_WORDS = frozenset({
    "what", "how", "where", "when", "who", "whom", "whose", "why", "which",
    "can", "could", "do", "does", "did", "is", "are", "should", "would",
    "will", "may", "has", "have", "any",
})

_WORD_RE = re.compile(r"[a-z0-9']+")


class IntentClassifier:
    """
    Ordered rule table over raw message text.

    Args:
        categories: FAQ categories accepted as control prefixes
        min_query_tokens: Messages with fewer tokens (and no question form)
            are trivial
    """

    def __init__(self, categories: Iterable[str] = (), min_query_tokens: int = 3):
        self.categories = {c.strip().lower() for c in categories if c.strip()}
        self.min_query_tokens = min_query_tokens

    def classify(self, raw_text: str) -> Intent:
        text = " ".join(MENTION_RE.sub(" ", raw_text or "").split())
        intent = Intent(raw_text=raw_text or "", cleaned_text=text)

        # Rule 2: maintenance commands win outright
        for pattern, kind in MAINTENANCE_RULES:
            if pattern.fullmatch(text.rstrip(".! ")):
                intent.maintenance = kind
                return intent

        # Rule 3: explicit control prefix
        self._apply_control_prefix(intent)

        # Rule 4: topic hints only when nothing was forced
        if intent.control_mode is None:
            intent.prefers_procedure = any(p.search(intent.cleaned_text) for p in PROCEDURE_TOPIC_PATTERNS)

        # Rule 5: acknowledgement on the whole message
        intent.is_acknowledgement = bool(ACKNOWLEDGEMENT_RE.fullmatch(text))

        # Rule 6: short non-questions
        intent.is_trivial = intent.control_mode is None and self._looks_trivial(text)

        return intent

    def _apply_control_prefix(self, intent: Intent) -> None:
        match = CONTROL_PREFIX_RE.match(intent.cleaned_text)
        if not match:
            return

        keyword = " ".join(match.group(1).lower().split())
        rest = match.group(2).strip()

        if keyword in CONTROL_KEYWORDS:
            intent.control_mode = CONTROL_KEYWORDS[keyword]
        elif keyword in self.categories:
            intent.control_mode = ControlMode.FAQ
            intent.category = keyword
        else:
            return

        intent.cleaned_text = rest

    def _looks_trivial(self, text: str) -> bool:
        if "?" in text:
            return False

        words = _WORD_RE.findall(text.lower())
        if words and words[0] in INTERROGATIVE_WORDS:
            return False

        return len(words) < self.min_query_tokens
