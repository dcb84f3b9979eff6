"""
Query matching: synonym expansion and the field-weighted reference scorer.
"""

from .synonyms import SYNONYMS, expand_query, expand_with_origin, get_synonyms
from .scorer import FIELD_WEIGHTS, score_all_documents, score_document, score_query

__all__ = [
    "SYNONYMS",
    "expand_query",
    "expand_with_origin",
    "get_synonyms",
    "FIELD_WEIGHTS",
    "score_all_documents",
    "score_document",
    "score_query",
]
