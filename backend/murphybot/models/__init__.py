"""Models package"""
from murphybot.models.knowledge import FaqItem, ProcedureItem, KnowledgeItem, ScoredCandidate
