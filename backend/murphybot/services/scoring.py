"""
Relevance Scoring
=================
Lexical relevance score shared by the FAQ and procedure collections.

score = sum over fields of:
    PHRASE_BONUS (+ HEADLINE_PHRASE_BONUS on headline fields)
        if the whole query appears verbatim in the field
    + field weight for every distinct query term contained in the field

Containment is substring based, so "listing" matches "listings" and
"pre-approval" matches "pre-approvals" without a stemmer.
"""

import re
from typing import FrozenSet, Iterable, NamedTuple, Tuple

# Field weights
HEADLINE_WEIGHT = 3.0   # title / question
SUMMARY_WEIGHT = 2.0    # summary / tags / category
BODY_WEIGHT = 1.0       # content / answer

# Verbatim phrase bonuses
PHRASE_BONUS = 10.0
HEADLINE_PHRASE_BONUS = 6.0

_TOKEN_RE = re.compile(r"[^a-z0-9]+")

STOPWORDS: FrozenSet[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "do", "does", "for",
    "from", "i", "in", "is", "it", "me", "my", "of", "on", "or", "our",
    "so", "that", "the", "this", "to", "was", "we", "with", "you",
})


def normalize(text: str) -> str:
    """Lowercase and collapse whitespace"""
    return " ".join((text or "").lower().split())


def tokenize(text: str) -> FrozenSet[str]:
    """
    Split text on non-alphanumeric boundaries into a set of terms.

    Stopwords and single-character tokens are dropped; duplicates collapse.
    """
    return frozenset(
        token for token in _TOKEN_RE.split(normalize(text))
        if len(token) > 1 and token not in STOPWORDS
    )


class Relevance(NamedTuple):
    """Score of one candidate plus what produced it"""
    score: float
    matched_terms: FrozenSet[str]
    phrase_hit: bool


def relevance(query: str, fields: Iterable[Tuple[str, float]]) -> Relevance:
    """
    Score one candidate against a query.

    Args:
        query: Raw user query
        fields: Ordered (text, weight) pairs of the candidate

    Returns:
        Relevance with a non-negative score (0.0 for an empty query), the
        distinct query terms found in any field, and whether the whole
        query appeared verbatim in a field
    """
    phrase = normalize(query)
    if not phrase:
        return Relevance(0.0, frozenset(), False)

    terms = tokenize(phrase)
    total = 0.0
    matched = set()
    phrase_hit = False

    for text, weight in fields:
        haystack = normalize(text)
        if not haystack:
            continue

        if phrase in haystack:
            phrase_hit = True
            total += PHRASE_BONUS
            if weight >= HEADLINE_WEIGHT:
                total += HEADLINE_PHRASE_BONUS

        for term in terms:
            if term in haystack:
                matched.add(term)
                total += weight

    return Relevance(total, frozenset(matched), phrase_hit)


def score(query: str, fields: Iterable[Tuple[str, float]]) -> float:
    """Relevance score only"""
    return relevance(query, fields).score
