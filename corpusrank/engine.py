"""
Search engine facade.

Pipeline per query:
1. Tokenize, optionally expand synonyms (expanded terms are discounted)
2. Look up candidate documents through the index vocabulary, identifier
   and acronym maps instead of scanning the corpus
3. Score candidates with the field-weighted scorer (score + matched fields)
4. Break score ties by BM25 relevance, then corpus order
5. Apply category/tag filters, then the result limit

The index is an explicit, caller-owned value. `SearchEngine` bundles one
`IndexHolder` with settings for callers that want a single object.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .bm25.index_builder import IndexHolder, InvertedIndex, build_index
from .config import EngineSettings
from .embeddings.hash_embedder import find_near_duplicates
from .exceptions import require_limit
from .matching.scorer import filter_document, prepare_query, score_all_documents, score_entry
from .models import Document, ForYouProfile, Recommendation, SearchResult
from .recommendations import get_for_you_recommendations, get_related_recommendations

logger = logging.getLogger(__name__)


class SearchOptions(BaseModel):
    """Per-query options; every field has a documented default."""
    model_config = ConfigDict(frozen=True)

    limit: int = Field(default=20, ge=0, description="Maximum number of results, applied after filtering")
    category: Optional[str] = Field(default=None, description="Keep only this category")
    tags: Optional[Tuple[str, ...]] = Field(default=None, description="Keep documents carrying any of these tags")
    expand_synonyms: bool = Field(default=True, description="Add discounted synonym terms to the query")


def search_documents(
    index: InvertedIndex,
    query: str,
    options: Optional[SearchOptions] = None,
) -> List[SearchResult]:
    """
    Search the corpus behind an index.

    Args:
        index: Index built by `build_index`
        query: Raw query text
        options: SearchOptions (defaults: limit 20, synonyms on, no filters)

    Returns:
        SearchResult list, descending by score; empty when the query has no
        tokens (blank or stopwords only)
    """
    options = options or SearchOptions()
    tokens, synonym_only, normalized = prepare_query(query, options.expand_synonyms)
    if not tokens:
        return []

    candidates = index.candidates(tokens, normalized)
    bm25 = index.bm25_scores(tokens)

    scored: List[Tuple[float, float, int, SearchResult]] = []
    for doc_no in candidates:
        document = index.documents[doc_no]
        if not filter_document(document, options.category, options.tags):
            continue
        match = score_entry(index.entries[doc_no], tokens, synonym_only, normalized)
        if match is None:
            continue
        relevance = bm25.get(doc_no, 0.0)
        scored.append((
            match.score,
            relevance,
            doc_no,
            SearchResult(document=document, score=match.score, matched_fields=match.matched_fields, bm25_score=relevance),
        ))

    scored.sort(key=lambda item: (-item[0], -item[1], item[2]))
    logger.debug(f"Query {query!r}: {len(candidates)} candidates, {len(scored)} matches")

    return [result for *_, result in scored[:options.limit]]


def quick_search(index: InvertedIndex, query: str, limit: int = 5) -> List[Document]:
    """Lightweight autocomplete search: no synonym expansion, documents only."""
    if not query or not query.strip():
        return []
    results = search_documents(index, query, SearchOptions(limit=limit, expand_synonyms=False))
    return [r.document for r in results]


def suggest_tags(
    document: Document,
    documents: Sequence[Document],
    limit: Optional[int] = 5,
) -> List[Tuple[str, float]]:
    """
    Suggest tags for a document from its best field-scored neighbours.

    The document's title and description are used as a query against the
    other documents; each neighbour votes for its tags with its score.

    Returns:
        [(tag, accumulated score)] for tags the document does not carry yet
    """
    limit = require_limit(limit)
    others = {d.id: d for d in documents if d.id != document.id}
    query = f"{document.title} {document.description}"

    votes: Dict[str, float] = defaultdict(float)
    for match in score_all_documents(list(others.values()), query):
        for tag in others[match.document_id].tags:
            if tag not in document.tags:
                votes[tag] += match.score

    ranked = sorted(votes.items(), key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


class SearchEngine:
    """
    One corpus, one published index, configured defaults.

    Safe for concurrent readers: `search` reads the current index once and
    works on that snapshot even if `rebuild` publishes a new one meanwhile.
    """

    def __init__(self, documents: Iterable[Document] = (), settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self._holder = IndexHolder(documents, self.settings.bm25_scorer())

    @property
    def index(self) -> InvertedIndex:
        return self._holder.current

    @property
    def documents(self) -> Tuple[Document, ...]:
        return self._holder.current.documents

    def rebuild(self, documents: Iterable[Document]) -> InvertedIndex:
        """Index a new corpus snapshot; queries keep the old one until it is published."""
        return self._holder.rebuild(documents)

    def search(
        self,
        query: str,
        limit: Optional[int] = None,
        category: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        expand_synonyms: Optional[bool] = None,
    ) -> List[SearchResult]:
        options = SearchOptions(
            limit=self.settings.search_limit if limit is None else limit,
            category=category,
            tags=tuple(tags) if tags else None,
            expand_synonyms=self.settings.expand_synonyms if expand_synonyms is None else expand_synonyms,
        )
        return search_documents(self.index, query, options)

    def quick_search(self, query: str, limit: int = 5) -> List[Document]:
        return quick_search(self.index, query, limit)

    def related(self, seed: Document, limit: Optional[int] = 6) -> List[Recommendation]:
        return get_related_recommendations(seed, self.documents, limit=limit)

    def for_you(self, profile: ForYouProfile, limit: Optional[int] = 10) -> List[Recommendation]:
        return get_for_you_recommendations(profile, self.documents, limit=limit)

    def near_duplicates(self, document: Document, threshold: float = 0.9) -> List[Tuple[Document, float]]:
        return find_near_duplicates(document, self.documents, threshold=threshold, dims=self.settings.embed_dims)


__all__ = [
    "SearchOptions",
    "SearchEngine",
    "build_index",
    "quick_search",
    "search_documents",
    "suggest_tags",
]
