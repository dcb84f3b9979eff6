"""
Content-based recommendation scorer.

Two modes:
- related: documents sharing tags/category with one seed document
- for you: affinities learned from viewed/saved/run documents plus explicit
  preferences; excluded tags and categories remove candidates entirely

Scores are additive and deterministic. Only documents with score > 0 are
returned, ranked descending (ties keep corpus order) and capped after all
filtering. What to show for an empty profile is the caller's decision; the
scorer simply returns an empty list.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .exceptions import require_limit
from .models import (
    Document,
    ForYouProfile,
    PreferenceProfile,
    Recommendation,
    RecommendationSignal,
    SignalLike,
)

logger = logging.getLogger(__name__)

SHARED_TAG_WEIGHT = 2.0
SAME_CATEGORY_WEIGHT = 1.5

SIGNAL_WEIGHTS = {"view": 1.0, "run": 1.5, "save": 2.0}
SIGNAL_LABELS = {"view": "viewed", "run": "run", "save": "saved"}
# Category affinity per unit of signal weight
SIGNAL_CATEGORY_FACTOR = 0.5

PREFERRED_TAG_WEIGHT = 3.0
PREFERRED_CATEGORY_WEIGHT = 3.0


def _rank(scored: List[Recommendation], limit: Optional[int]) -> List[Recommendation]:
    ranked = sorted(scored, key=lambda r: r.score, reverse=True)
    return ranked if limit is None else ranked[:limit]


def get_related_recommendations(
    seed: Document,
    documents: Sequence[Document],
    limit: Optional[int] = 6,
    exclude_ids: Iterable[str] = (),
    min_score: float = 0.0,
) -> List[Recommendation]:
    """
    Recommend documents related to one seed document.

    Scoring:
        +2.0 per tag shared with the seed
        +1.5 when the category matches

    Args:
        seed: Document the user is looking at (never recommended itself)
        documents: Candidate corpus
        limit: Maximum number of results (None = all)
        exclude_ids: Document ids to skip
        min_score: Drop results scoring below this value

    Returns:
        Recommendations with reasons such as "Shares tags: docs, readme"
    """
    limit = require_limit(limit)
    skip = set(exclude_ids)
    skip.add(seed.id)
    seed_tags = set(seed.tags)

    scored: List[Recommendation] = []
    for document in documents:
        if document.id in skip:
            continue

        score = 0.0
        reasons: List[str] = []

        shared = [t for t in document.tags if t in seed_tags]
        if shared:
            score += SHARED_TAG_WEIGHT * len(shared)
            reasons.append(f"Shares tags: {', '.join(shared)}")

        if document.category == seed.category:
            score += SAME_CATEGORY_WEIGHT
            reasons.append(f"Same category: {document.category}")

        if score > 0 and score >= min_score:
            scored.append(Recommendation(document=document, score=score, reasons=tuple(reasons)))

    return _rank(scored, limit)


def _as_signal(item: SignalLike) -> RecommendationSignal:
    # Bare documents count as views
    if isinstance(item, RecommendationSignal):
        return item
    return RecommendationSignal(document=item, kind="view")


def _is_excluded(document: Document, preferences: Optional[PreferenceProfile]) -> bool:
    if preferences is None:
        return False
    if document.category in preferences.exclude_categories:
        return True
    return any(tag in preferences.exclude_tags for tag in document.tags)


def get_recommendations_from_history(
    history: Iterable[SignalLike],
    documents: Sequence[Document],
    limit: Optional[int] = 10,
    exclude_ids: Iterable[str] = (),
    preferences: Optional[PreferenceProfile] = None,
) -> List[Recommendation]:
    """
    Recommend documents from behavioural signals and explicit preferences.

    Each signal adds its weight (view 1.0, run 1.5, save 2.0) to every tag
    of the signalled document and half of it to its category. A candidate
    earns the affinities of its tags and category, plus 3.0 per preferred
    tag and 3.0 for a preferred category. Excluded tags/categories are
    applied last and remove the candidate, even if it was also boosted.

    Args:
        history: Documents (treated as views) or RecommendationSignal objects
        documents: Candidate corpus
        limit: Maximum number of results (None = all)
        exclude_ids: Document ids to skip
        preferences: Optional explicit PreferenceProfile

    Returns:
        Ranked recommendations, history documents never included
    """
    limit = require_limit(limit)
    signals = [_as_signal(item) for item in history]

    # kind -> tag/category -> accumulated weight
    tag_affinity: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    category_affinity: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    skip: Set[str] = set(exclude_ids)

    for signal in signals:
        weight = SIGNAL_WEIGHTS[signal.kind]
        for tag in signal.document.tags:
            tag_affinity[signal.kind][tag] += weight
        category_affinity[signal.kind][signal.document.category] += weight * SIGNAL_CATEGORY_FACTOR
        skip.add(signal.document.id)

    preferred_tags = set(preferences.tags) if preferences else set()
    preferred_categories = set(preferences.categories) if preferences else set()

    scored: List[Recommendation] = []
    for document in documents:
        if document.id in skip:
            continue

        score, reasons = _score_candidate(
            document, tag_affinity, category_affinity, preferred_tags, preferred_categories
        )

        if score <= 0 or _is_excluded(document, preferences):
            continue
        scored.append(Recommendation(document=document, score=score, reasons=tuple(reasons)))

    logger.debug(f"History recommendations: {len(signals)} signals, {len(scored)} candidates scored")
    return _rank(scored, limit)


def _score_candidate(
    document: Document,
    tag_affinity: Dict[str, Dict[str, float]],
    category_affinity: Dict[str, Dict[str, float]],
    preferred_tags: Set[str],
    preferred_categories: Set[str],
) -> Tuple[float, List[str]]:
    score = 0.0
    reasons: List[str] = []

    # Iterate kinds in a fixed order so reasons are deterministic
    for kind in SIGNAL_WEIGHTS:
        label = SIGNAL_LABELS[kind]
        affinity = tag_affinity.get(kind)
        if affinity:
            hits = [t for t in document.tags if t in affinity]
            if hits:
                score += sum(affinity[t] for t in hits)
                reasons.append(f"Shares tags with your {label} documents: {', '.join(hits)}")
        categories = category_affinity.get(kind)
        if categories and document.category in categories:
            score += categories[document.category]
            reasons.append(f"Same category as your {label} documents: {document.category}")

    liked = [t for t in document.tags if t in preferred_tags]
    if liked:
        score += PREFERRED_TAG_WEIGHT * len(liked)
        reasons.append(f"Matches preferred tags: {', '.join(liked)}")

    if document.category in preferred_categories:
        score += PREFERRED_CATEGORY_WEIGHT
        reasons.append(f"In preferred category: {document.category}")

    return score, reasons


def get_for_you_recommendations(
    profile: ForYouProfile,
    documents: Sequence[Document],
    limit: Optional[int] = 10,
    exclude_ids: Iterable[str] = (),
) -> List[Recommendation]:
    """
    Personalised recommendations from everything known about a user.

    Viewed, saved and run documents become view/save/run signals (explicit
    `profile.signals` are added as-is); `profile.preferences` boosts and
    excludes. An empty profile yields an empty list.
    """
    signals: List[RecommendationSignal] = [
        *(RecommendationSignal(d, "view") for d in profile.viewed),
        *(RecommendationSignal(d, "save") for d in profile.saved),
        *(RecommendationSignal(d, "run") for d in profile.runs),
        *profile.signals,
    ]
    return get_recommendations_from_history(
        signals,
        documents,
        limit=limit,
        exclude_ids=exclude_ids,
        preferences=profile.preferences,
    )
