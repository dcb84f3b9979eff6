"""
corpusrank - text ranking and similarity engine for a content library.

Usage:
    from corpusrank import Document, build_index, search_documents

    index = build_index(documents)
    for result in search_documents(index, "rob"):
        print(result.document.id, result.score, result.matched_fields)
"""

# Import order matters: the index builder depends on the matching package
from .bm25.tokenizer import tokenize
from .matching.synonyms import SYNONYMS, expand_query, get_synonyms
from .matching.scorer import FIELD_WEIGHTS, score_all_documents, score_document, score_query
from .bm25.index_builder import IndexHolder, InvertedIndex, build_index, search
from .embeddings.hash_embedder import cosine_similarity, find_near_duplicates, hash_embed
from .recommendations import (
    get_for_you_recommendations,
    get_recommendations_from_history,
    get_related_recommendations,
)
from .engine import SearchEngine, SearchOptions, quick_search, search_documents, suggest_tags
from .config import EngineSettings, load_settings
from .exceptions import InvalidConfigurationError
from .models import (
    Document,
    ForYouProfile,
    PreferenceProfile,
    Recommendation,
    RecommendationSignal,
    ScoredMatch,
    SearchResult,
)

__all__ = [
    "tokenize",
    "SYNONYMS",
    "expand_query",
    "get_synonyms",
    "FIELD_WEIGHTS",
    "score_all_documents",
    "score_document",
    "score_query",
    "IndexHolder",
    "InvertedIndex",
    "build_index",
    "search",
    "cosine_similarity",
    "find_near_duplicates",
    "hash_embed",
    "get_for_you_recommendations",
    "get_recommendations_from_history",
    "get_related_recommendations",
    "SearchEngine",
    "SearchOptions",
    "quick_search",
    "search_documents",
    "suggest_tags",
    "EngineSettings",
    "load_settings",
    "InvalidConfigurationError",
    "Document",
    "ForYouProfile",
    "PreferenceProfile",
    "Recommendation",
    "RecommendationSignal",
    "ScoredMatch",
    "SearchResult",
]
