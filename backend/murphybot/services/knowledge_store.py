"""
Knowledge Store
===============
In-memory, refreshable collection of knowledge items (FAQ rows or procedures).

Each collection owns an immutable snapshot (a tuple). Readers take the
current tuple reference and work on it; a refresh builds a complete new
tuple and swaps the reference, so a reader sees either the old or the new
snapshot, never a mix.

Refresh never raises: on loader failure the previous snapshot is kept and
the error is recorded in `status`.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from murphybot.models.knowledge import FaqItem, ProcedureItem, ScoredCandidate
from murphybot.models.schemas import RefreshStatus
from murphybot.services.scoring import relevance

logger = logging.getLogger(__name__)

# Without a verbatim phrase hit, a confident match needs this many distinct query terms
MIN_MATCHED_TERMS = 2

ItemT = TypeVar("ItemT", FaqItem, ProcedureItem)

# Produces a complete list of items for one refresh, or raises
Loader = Callable[[], Awaitable[List[ItemT]]]


class KnowledgeCollection(Generic[ItemT]):
    """
    One refreshable, searchable collection.

    Args:
        name: Collection name used in logs and status ("faq", "procedures")
        loader: Async callable producing the full item list; None marks the
            collection as not configured (permanently empty)
        confidence_threshold: Minimum score for `best_match`
    """

    def __init__(
        self,
        name: str,
        loader: Optional[Loader] = None,
        confidence_threshold: float = 6.0,
    ):
        self.name = name
        self.confidence_threshold = confidence_threshold
        self._loader = loader
        self._items: Tuple[ItemT, ...] = ()
        self._refresh_lock = asyncio.Lock()
        self._status = RefreshStatus(collection=name, configured=loader is not None)

        if loader is None:
            logger.warning(f"Knowledge collection '{name}' is not configured; it will stay empty")

    # ────────────────────────────────────────────
    # Snapshot access
    # ────────────────────────────────────────────

    @property
    def items(self) -> Tuple[ItemT, ...]:
        return self._items

    @property
    def status(self) -> RefreshStatus:
        return self._status

    @property
    def configured(self) -> bool:
        return self._loader is not None

    def __len__(self) -> int:
        return len(self._items)

    def replace_all(self, items: Iterable[ItemT]) -> int:
        """
        Atomically replace the snapshot.

        Items with an id already seen in this batch are dropped (first wins).

        Returns:
            Number of items in the new snapshot
        """
        seen = set()
        snapshot: List[ItemT] = []
        for item in items:
            if item.id in seen:
                logger.warning(f"[{self.name}] Duplicate id '{item.id}' dropped")
                continue
            seen.add(item.id)
            snapshot.append(item)

        self._items = tuple(snapshot)
        return len(self._items)

    # ────────────────────────────────────────────
    # Queries
    # ────────────────────────────────────────────

    def scored(self, query: str) -> List[ScoredCandidate]:
        """Score every item of the current snapshot, in insertion order"""
        snapshot = self._items
        return [ScoredCandidate(item, *relevance(query, item.scoring_fields())) for item in snapshot]

    def ranked(
        self,
        query: str,
        limit: int = 5,
        item_filter: Optional[Callable[[ItemT], bool]] = None,
    ) -> List[ScoredCandidate]:
        """
        Ranked lexical search with scores.

        Items scoring <= 0 are discarded, `item_filter` is applied after
        scoring, ties keep insertion order (stable sort).
        """
        candidates = [c for c in self.scored(query) if c.score > 0]
        if item_filter is not None:
            candidates = [c for c in candidates if item_filter(c.item)]

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates[:max(limit, 0)]

    def search(
        self,
        query: str,
        limit: int = 5,
        item_filter: Optional[Callable[[ItemT], bool]] = None,
    ) -> List[ItemT]:
        """Items of `ranked`, best first"""
        return [c.item for c in self.ranked(query, limit, item_filter)]

    def best_match(self, query: str) -> Optional[ItemT]:
        """
        Top item if it is a confident match, else None.

        Confident means the score clears the threshold and the match is not
        a single shared word: the whole query appeared verbatim in a field,
        or at least two distinct query terms were found. The highest scoring
        confident item wins; ties keep insertion order.
        """
        best: Optional[ScoredCandidate] = None
        for candidate in self.scored(query):
            if not self._is_confident(candidate):
                continue
            if best is None or candidate.score > best.score:
                best = candidate

        if best is None:
            return None

        logger.debug(f"[{self.name}] best match '{best.item.id}' score={best.score:.1f}")
        return best.item

    def _is_confident(self, candidate: ScoredCandidate) -> bool:
        if candidate.score <= 0 or candidate.score < self.confidence_threshold:
            return False
        return candidate.phrase_hit or len(candidate.matched_terms) >= MIN_MATCHED_TERMS

    # ────────────────────────────────────────────
    # Refresh
    # ────────────────────────────────────────────

    async def refresh(self) -> RefreshStatus:
        """
        Reload the collection from its loader.

        Never raises. Concurrent refreshes of the same collection run one
        after another.
        """
        if self._loader is None:
            return self._status

        async with self._refresh_lock:
            attempted_at = datetime.now(timezone.utc)
            try:
                items = await self._loader()
            except Exception as e:
                logger.exception(f"[{self.name}] Refresh failed; keeping {len(self._items)} cached items")
                self._status = self._status.model_copy(update={
                    "last_attempt_at": attempted_at,
                    "last_error": f"{type(e).__name__}: {e}",
                })
                return self._status

            count = self.replace_all(items)
            self._status = self._status.model_copy(update={
                "item_count": count,
                "last_attempt_at": attempted_at,
                "last_success_at": attempted_at,
                "last_error": None,
            })
            logger.info(f"✅ [{self.name}] Refreshed: {count} items")
            return self._status


class KnowledgeBase:
    """The FAQ and procedure collections used by the router"""

    def __init__(
        self,
        faqs: KnowledgeCollection[FaqItem],
        procedures: KnowledgeCollection[ProcedureItem],
    ):
        self.faqs = faqs
        self.procedures = procedures

    @property
    def collections(self) -> Sequence[KnowledgeCollection]:
        return (self.faqs, self.procedures)

    async def refresh_all(self) -> List[RefreshStatus]:
        """Refresh both collections concurrently"""
        return list(await asyncio.gather(*(c.refresh() for c in self.collections)))
