"""
Data model shared by every ranking component.

Documents are owned by the catalog and handed to the engine already
validated; the engine only references them. Every type here is immutable
so a corpus snapshot can be read from many threads without coordination.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple, Union, get_args

from .exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class Document:
    """One catalog entry. Only id/title/description/tags/category/content are scored."""
    id: str
    title: str
    description: str
    content: str
    category: str
    tags: Tuple[str, ...] = ()
    # Display-only attributes
    author: str = ""
    version: str = ""
    created: str = ""
    featured: bool = False

    def __post_init__(self):
        # Accept any iterable of tags but store a hashable tuple
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))


@dataclass(frozen=True)
class ScoredMatch:
    """Per-document-per-query result of the field-weighted scorer"""
    document_id: str
    score: float                                # > 0, finite
    matched_fields: Tuple[str, ...] = ()        # explanation only, not used for ranking


@dataclass(frozen=True)
class SearchResult:
    """Facade result: the document itself plus its explanation"""
    document: Document
    score: float
    matched_fields: Tuple[str, ...] = ()
    bm25_score: float = 0.0


@dataclass(frozen=True)
class PreferenceProfile:
    """
    Explicit user preferences for recommendations.

    Boost and exclude lists should be disjoint; when they are not,
    exclusion wins.
    """
    tags: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    exclude_tags: Tuple[str, ...] = ()
    exclude_categories: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("tags", "categories", "exclude_tags", "exclude_categories"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value or ()))

    @property
    def is_empty(self) -> bool:
        return not (self.tags or self.categories or self.exclude_tags or self.exclude_categories)


SignalKind = Literal["view", "save", "run"]


@dataclass(frozen=True)
class RecommendationSignal:
    """A positive behavioural signal: the user viewed, saved or ran a document"""
    document: Document
    kind: SignalKind = "view"

    def __post_init__(self):
        if self.kind not in get_args(SignalKind):
            raise InvalidConfigurationError(
                f"Unknown signal kind {self.kind!r}, expected one of {get_args(SignalKind)}"
            )


SignalLike = Union[Document, RecommendationSignal]


@dataclass(frozen=True)
class Recommendation:
    """Single recommendation with human-readable reasons"""
    document: Document
    score: float
    reasons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ForYouProfile:
    """Everything known about a user for "for you" recommendations"""
    viewed: Tuple[Document, ...] = ()
    saved: Tuple[Document, ...] = ()
    runs: Tuple[Document, ...] = ()
    preferences: Optional[PreferenceProfile] = None
    signals: Tuple[RecommendationSignal, ...] = field(default=())

    def __post_init__(self):
        for name in ("viewed", "saved", "runs", "signals"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value or ()))
