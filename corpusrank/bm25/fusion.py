"""
RRF (Reciprocal Rank Fusion) for combining multiple rankings.

Used to blend a lexical ranking with the hash-embedding similarity ranking
without normalizing their (incomparable) scores.

Formula:
    RRF(item, k=60) = Σ 1/(k + rank_i(item))

Where:
    k = constant (default: 60, from literature)
    rank_i = rank of item in i-th ranking (1-based)

Reference: https://plg.uwaterloo.ca/~gvcormac/cormacksigir09-rrf.pdf
"""

from typing import Any, Dict, List, Sequence

from ..exceptions import InvalidConfigurationError


def reciprocal_rank_fusion(
    rankings: Sequence[Sequence[Dict[str, Any]]],
    k: int = 60,
    item_key: str = 'id'
) -> List[Dict[str, Any]]:
    """
    Combine multiple rankings using Reciprocal Rank Fusion.

    Args:
        rankings: Ranked result lists; items are dicts carrying `item_key`
        k: RRF constant (default: 60), must be > 0
        item_key: Key used to identify an item across rankings

    Returns:
        Copies of the items (first occurrence wins) with an added
        'rrf_score', sorted by descending RRF score; ties keep the order
        in which items were first seen

    Example:
        >>> lexical = [{'id': 'a'}, {'id': 'b'}]
        >>> semantic = [{'id': 'b'}, {'id': 'c'}]
        >>> [item['id'] for item in reciprocal_rank_fusion([lexical, semantic])]
        ['b', 'a', 'c']
    """
    if k <= 0:
        raise InvalidConfigurationError(f"RRF constant k must be > 0, got {k}")

    rrf_scores: Dict[Any, float] = {}
    first_seen: Dict[Any, Dict[str, Any]] = {}

    for ranking in rankings:
        for rank, item in enumerate(ranking, start=1):
            item_id = item[item_key]
            rrf_scores[item_id] = rrf_scores.get(item_id, 0.0) + 1.0 / (k + rank)
            if item_id not in first_seen:
                first_seen[item_id] = dict(item)

    # sorted() is stable, so equal scores keep first-seen order
    fused = sorted(first_seen.values(), key=lambda x: rrf_scores[x[item_key]], reverse=True)
    for item in fused:
        item['rrf_score'] = rrf_scores[item[item_key]]

    return fused
