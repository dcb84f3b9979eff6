"""
Lexical text processing and BM25 ranking.

Components:
- tokenizer: Normalization, tokenization and the stemmed index term stream
- stemmer: Snowball stemming (NLTK) for index terms
- scorer: Okapi BM25 term scoring
- fusion: RRF (Reciprocal Rank Fusion) for combining rankings
- index_builder: Immutable inverted index, BM25 search and the rebuild holder

`index_builder` depends on the field-weighted scorer, so it is imported
explicitly (`from corpusrank.bm25.index_builder import build_index`) rather
than re-exported here.
"""

from .tokenizer import tokenize, analyze, split_words, STOPWORDS
from .stemmer import stem
from .scorer import OkapiBM25
from .fusion import reciprocal_rank_fusion

__all__ = [
    "tokenize",
    "analyze",
    "split_words",
    "STOPWORDS",
    "stem",
    "OkapiBM25",
    "reciprocal_rank_fusion",
]
