"""
Deterministic hash-based embedding fallback (no model required).

Each dimension is an independent, seeded FNV-1a hash over the text's
features (whole tokens and character trigrams), mapped to [-1, 1] and
averaged; the vector is then L2-normalized. Texts sharing many features
get correlated vectors, so cosine similarity approximates lexical overlap.
Identical input always yields an identical vector.

This is an approximation for near-duplicate detection, not a semantic
model.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from ..bm25.fusion import reciprocal_rank_fusion
from ..bm25.tokenizer import tokenize
from ..exceptions import InvalidConfigurationError
from ..models import Document

logger = logging.getLogger(__name__)

DEFAULT_DIMS = 128

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF
# Golden-ratio constant spreads consecutive seeds across the hash space
_SEED_MIX = 0x9E3779B1

# Whole tokens count more than their trigrams
TOKEN_WEIGHT = 2


def fnv1a_32(data: bytes, seed: int = 0) -> int:
    """
    32-bit FNV-1a with the offset basis perturbed by `seed`.

    A murmur3-style finalizer is applied: plain FNV leaves strings that
    differ only in their last byte with nearly equal high bits.
    """
    h = (FNV_OFFSET_BASIS ^ ((seed * _SEED_MIX) & _MASK32)) & _MASK32
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & _MASK32

    h ^= h >> 16
    h = (h * 0x85EBCA6B) & _MASK32
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & _MASK32
    h ^= h >> 16
    return h


def _validate_dims(dims) -> int:
    if isinstance(dims, bool) or not isinstance(dims, (int, np.integer)) or dims <= 0:
        raise InvalidConfigurationError(f"Embedding dimensionality must be a positive integer, got {dims!r}")
    return int(dims)


def _features(text: str) -> Counter:
    features: Counter = Counter()
    for token in tokenize(text):
        features[token] += TOKEN_WEIGHT
        for i in range(len(token) - 2):
            features[token[i:i + 3]] += 1
    if not features:
        # Text with no word characters still hashes deterministically
        features[text] = 1
    return features


def hash_embed(text: str, dims: int = DEFAULT_DIMS) -> np.ndarray:
    """
    Embed text into a unit-length vector without any external model.

    Args:
        text: Input text
        dims: Vector dimensionality (positive integer, default 128)

    Returns:
        float64 array of length `dims`; all zeros (not normalized) for
        empty input

    Raises:
        InvalidConfigurationError: dims is not a positive integer

    Examples:
        >>> np.array_equal(hash_embed("robot"), hash_embed("robot"))
        True
        >>> hash_embed("", 4)
        array([0., 0., 0., 0.])
    """
    dims = _validate_dims(dims)
    vector = np.zeros(dims, dtype=np.float64)
    if not text:
        return vector

    features = _features(text)
    total = sum(features.values())

    for feature, count in features.items():
        data = feature.encode('utf-8')
        for i in range(dims):
            # Map the 32-bit hash onto [-1, 1]
            vector[i] += count * (fnv1a_32(data, seed=i) / _MASK32 * 2.0 - 1.0)

    vector /= total
    norm = np.linalg.norm(vector)
    if norm > 0:
        vector /= norm
    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity in [-1, 1]; 0.0 when either vector is all zeros.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise InvalidConfigurationError(f"Vector shapes differ: {a.shape} vs {b.shape}")

    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.clip(np.dot(a, b) / norm, -1.0, 1.0))


def document_text(document: Document) -> str:
    """Text used to embed a document (all scored fields)."""
    return ' '.join([document.title, document.description, ' '.join(document.tags), document.content])


def find_near_duplicates(
    document: Document,
    documents: Sequence[Document],
    threshold: float = 0.9,
    dims: int = DEFAULT_DIMS,
) -> List[Tuple[Document, float]]:
    """
    Find documents whose hash embedding is close to the given document's.

    Args:
        document: Reference document (skipped if present in `documents`)
        documents: Corpus to compare against
        threshold: Minimum cosine similarity, within [-1, 1]
        dims: Embedding dimensionality

    Returns:
        [(document, similarity)] sorted by descending similarity
    """
    if not -1.0 <= threshold <= 1.0:
        raise InvalidConfigurationError(f"Similarity threshold must be within [-1, 1], got {threshold}")

    reference = hash_embed(document_text(document), dims)
    duplicates: List[Tuple[Document, float]] = []

    for other in documents:
        if other.id == document.id:
            continue
        similarity = cosine_similarity(reference, hash_embed(document_text(other), dims))
        if similarity >= threshold:
            duplicates.append((other, similarity))

    duplicates.sort(key=lambda pair: pair[1], reverse=True)
    logger.debug(f"Near-duplicates of {document.id}: {len(duplicates)} at threshold {threshold}")
    return duplicates


def rerank_by_embedding(
    query: str,
    ranked: Sequence[Dict[str, Any]],
    dims: int = DEFAULT_DIMS,
) -> List[Dict[str, Any]]:
    """
    Rerank a baseline ranking by fusing it with hash-embedding similarity.

    Args:
        query: Query text
        ranked: Baseline results in rank order; dicts with 'id' and an
            optional 'text' (the id is embedded when text is missing)
        dims: Embedding dimensionality

    Returns:
        The same items with 'similarity' and 'rrf_score' added, in fused order
    """
    if not ranked:
        return []

    query_vector = hash_embed(query, dims)
    with_similarity = [
        {**item, 'similarity': cosine_similarity(query_vector, hash_embed(item.get('text') or item['id'], dims))}
        for item in ranked
    ]
    by_similarity = sorted(with_similarity, key=lambda item: item['similarity'], reverse=True)

    return reciprocal_rank_fusion([with_similarity, by_similarity], item_key='id')
