"""
Knowledge Item Models
=====================
FAQ rows and procedure documents as held in the in-memory stores.

Both variants expose `scoring_fields()`, the ordered (text, weight) pairs
consumed by the relevance scorer. Validation rejects rows with an empty
question/answer or title/content so malformed items never reach a snapshot.
"""

from typing import FrozenSet, List, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from murphybot.services.scoring import BODY_WEIGHT, HEADLINE_WEIGHT, SUMMARY_WEIGHT


class FaqItem(BaseModel):
    """Question/answer pair from the FAQ spreadsheet"""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    category: Optional[str] = None
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)

    def scoring_fields(self) -> List[Tuple[str, float]]:
        return [
            (self.question, HEADLINE_WEIGHT),
            (self.category or "", SUMMARY_WEIGHT),
            (self.answer, BODY_WEIGHT),
        ]


class ProcedureItem(BaseModel):
    """Titled SOP document from the procedures folder"""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    summary: str = ""
    tags: FrozenSet[str] = frozenset()
    content: str = Field(..., min_length=1)
    source_link: Optional[str] = None

    def scoring_fields(self) -> List[Tuple[str, float]]:
        return [
            (self.title, HEADLINE_WEIGHT),
            (self.summary, SUMMARY_WEIGHT),
            (" ".join(sorted(self.tags)), SUMMARY_WEIGHT),
            (self.content, BODY_WEIGHT),
        ]


KnowledgeItem = Union[FaqItem, ProcedureItem]


class ScoredCandidate(NamedTuple):
    """An item with its relevance score for one query"""
    item: KnowledgeItem
    score: float
    matched_terms: FrozenSet[str] = frozenset()
    phrase_hit: bool = False
