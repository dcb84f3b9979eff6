"""
Model-free embeddings for near-duplicate detection.
"""

from .hash_embedder import (
    DEFAULT_DIMS,
    cosine_similarity,
    find_near_duplicates,
    hash_embed,
    rerank_by_embedding,
)

__all__ = [
    "DEFAULT_DIMS",
    "cosine_similarity",
    "find_near_duplicates",
    "hash_embed",
    "rerank_by_embedding",
]
