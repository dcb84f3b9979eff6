"""
Inverted index builder - term postings, corpus statistics and scorer entries.

An index is built once per corpus snapshot and never mutated afterwards.
Rebuilding produces a new index value; `IndexHolder` publishes it with a
single reference swap so concurrent readers always see a complete index.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..exceptions import require_limit
from ..matching.scorer import ScorerEntry, build_scorer_entry, edit_distance, fuzzy_threshold
from ..models import Document
from .scorer import OkapiBM25
from .stemmer import stem
from .tokenizer import analyze, is_meaningful, split_words, tokenize

logger = logging.getLogger(__name__)

# Term frequency multiplier per field (BM25F-style field awareness)
INDEX_FIELD_BOOSTS: Mapping[str, float] = MappingProxyType({
    "title": 3.0,
    "id": 2.0,
    "tags": 2.0,
    "description": 1.5,
    "content": 1.0,
})


def _field_texts(document: Document) -> Dict[str, str]:
    return {
        "title": document.title,
        "id": document.id,
        "tags": ' '.join(document.tags),
        "description": document.description,
        "content": document.content,
    }


@dataclass(frozen=True)
class InvertedIndex:
    """
    Immutable search index over one corpus snapshot.

    Attributes:
        documents: Corpus in input order (positions are document numbers)
        postings: term -> {document number: field-boosted term frequency}
        doc_lengths: Field-boosted term count per document
        avgdl: Average document length
        entries: Precomputed field-weighted scorer entries
        vocabulary: Raw word or token -> document numbers containing it
        id_lookup: Normalized identifier -> document number
        acronym_lookup: Title/id initials -> document numbers
        trigram_words: Character trigram -> vocabulary words containing it
        words_by_length: Word length -> vocabulary words of that length
    """
    documents: Tuple[Document, ...]
    postings: Mapping[str, Mapping[int, float]]
    doc_lengths: Tuple[float, ...]
    avgdl: float
    entries: Tuple[ScorerEntry, ...]
    vocabulary: Mapping[str, FrozenSet[int]]
    id_lookup: Mapping[str, int]
    acronym_lookup: Mapping[str, Tuple[int, ...]]
    trigram_words: Mapping[str, FrozenSet[str]]
    words_by_length: Mapping[int, Tuple[str, ...]]
    scorer: OkapiBM25 = field(default_factory=OkapiBM25)

    @property
    def doc_count(self) -> int:
        return len(self.documents)

    def doc_freq(self, term: str) -> int:
        return len(self.postings.get(term, ()))

    def bm25_scores(self, tokens: Iterable[str]) -> Dict[int, float]:
        """
        Okapi BM25 score for every document sharing a term with the query.

        Args:
            tokens: Query tokens (surface forms; stemmed here)

        Returns:
            {document number: score}, scores finite and > 0
        """
        terms = list(dict.fromkeys(stem(t) for t in tokens if is_meaningful(t)))
        scores: Dict[int, float] = defaultdict(float)

        for term in terms:
            posting = self.postings.get(term)
            if not posting:
                continue
            idf = self.scorer.idf(self.doc_count, len(posting))
            for doc_no, tf in posting.items():
                scores[doc_no] += self.scorer.term_score(tf, self.doc_lengths[doc_no], self.avgdl, idf)

        return {doc_no: s for doc_no, s in scores.items() if s > 0}

    def candidates(self, tokens: Sequence[str], normalized_query: str = "") -> Set[int]:
        """
        Documents that the field-weighted scorer could match.

        A vocabulary word is a hit when the token occurs inside it (exact,
        prefix and in-word substring matches) or lies within the fuzzy edit
        budget. Exact-identifier and acronym hits come from their own maps.
        Substrings spanning several words are not looked up here.
        """
        found: Set[int] = set()

        for token in dict.fromkeys(tokens):
            for word in self.matching_words(token):
                found.update(self.vocabulary[word])

        if normalized_query:
            doc_no = self.id_lookup.get(normalized_query)
            if doc_no is not None:
                found.add(doc_no)
            if len(normalized_query) >= 2:
                found.update(self.acronym_lookup.get(normalized_query, ()))

        return found

    def matching_words(self, token: str) -> Set[str]:
        """
        Vocabulary words containing `token` or within its fuzzy edit budget.

        Containment is looked up through the trigram map (a word containing
        the token contains every trigram of it); only tokens shorter than a
        trigram scan the vocabulary. Edit distance runs only on words whose
        length differs from the token's by at most the budget.
        """
        if len(token) >= 3:
            pools = sorted((self.trigram_words.get(g, frozenset()) for g in _trigrams(token)), key=len)
            words = {w for w in pools[0].intersection(*pools[1:]) if token in w}
        else:
            words = {w for w in self.vocabulary if token in w}

        max_dist = fuzzy_threshold(len(token))
        if max_dist:
            for length in range(len(token) - max_dist, len(token) + max_dist + 1):
                for word in self.words_by_length.get(length, ()):
                    if word not in words and edit_distance(token, word, max_dist) <= max_dist:
                        words.add(word)

        return words


def _trigrams(word: str) -> Set[str]:
    return {word[i:i + 3] for i in range(len(word) - 2)}


def build_index(documents: Iterable[Document], scorer: Optional[OkapiBM25] = None) -> InvertedIndex:
    """
    Build an inverted index from a corpus snapshot.

    Pure function of the documents: no I/O, no randomness, no clock.

    Args:
        documents: Corpus snapshot (order defines tie-breaking)
        scorer: BM25 parameters (default k1=1.2, b=0.75)

    Returns:
        A fully built, immutable InvertedIndex

    Example:
        >>> index = build_index([doc_a, doc_b])
        >>> search(index, tokenize("robot"))
        [('robot-mode-maker', 1.93...)]
    """
    documents = tuple(documents)

    postings: Dict[str, Dict[int, float]] = defaultdict(dict)
    vocabulary: Dict[str, Set[int]] = defaultdict(set)
    acronyms: Dict[str, List[int]] = defaultdict(list)
    id_lookup: Dict[str, int] = {}
    doc_lengths: List[float] = []
    entries: List[ScorerEntry] = []

    for doc_no, document in enumerate(documents):
        length = 0.0
        for field_name, text in _field_texts(document).items():
            boost = INDEX_FIELD_BOOSTS[field_name]
            for term in analyze(text):
                posting = postings[term]
                posting[doc_no] = posting.get(doc_no, 0.0) + boost
                length += boost

            for word in split_words(text):
                vocabulary[word].add(doc_no)
            for token in tokenize(text):
                vocabulary[token].add(doc_no)

        doc_lengths.append(length)

        entry = build_scorer_entry(document)
        entries.append(entry)
        id_lookup.setdefault(entry.id_normalized, doc_no)
        for initials in dict.fromkeys(initials for _, initials in entry.acronyms):
            acronyms[initials].append(doc_no)

    avgdl = sum(doc_lengths) / len(doc_lengths) if doc_lengths else 0.0

    trigram_words: Dict[str, Set[str]] = defaultdict(set)
    by_length: Dict[int, List[str]] = defaultdict(list)
    for word in sorted(vocabulary):
        for gram in _trigrams(word):
            trigram_words[gram].add(word)
        by_length[len(word)].append(word)

    index = InvertedIndex(
        documents=documents,
        postings=MappingProxyType({t: MappingProxyType(p) for t, p in postings.items()}),
        doc_lengths=tuple(doc_lengths),
        avgdl=avgdl,
        entries=tuple(entries),
        vocabulary=MappingProxyType({w: frozenset(d) for w, d in vocabulary.items()}),
        id_lookup=MappingProxyType(id_lookup),
        acronym_lookup=MappingProxyType({a: tuple(d) for a, d in acronyms.items()}),
        trigram_words=MappingProxyType({g: frozenset(w) for g, w in trigram_words.items()}),
        words_by_length=MappingProxyType({n: tuple(w) for n, w in by_length.items()}),
        scorer=scorer or OkapiBM25(),
    )

    logger.info(f"Built inverted index: {len(documents)} documents, {len(postings)} terms, avgdl={avgdl:.1f}")
    return index


def search(index: InvertedIndex, tokens: Sequence[str], limit: Optional[int] = None) -> List[Tuple[str, float]]:
    """
    Rank documents by BM25 relevance to the query tokens.

    Args:
        index: Index built by `build_index`
        tokens: Query tokens (see `tokenize`)
        limit: Maximum number of results (None = all)

    Returns:
        [(document id, score)] sorted by descending score, ties in corpus order
    """
    limit = require_limit(limit)
    scores = index.bm25_scores(tokens)
    ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ranked = ranked[:limit]
    return [(index.documents[doc_no].id, score) for doc_no, score in ranked]


class IndexHolder:
    """
    Caller-owned slot holding the last complete index.

    Readers take `current` without locking (a single reference read).
    `rebuild` constructs the new index outside the lock and publishes it
    with one assignment; a failed build leaves the previous index in place.
    When rebuilds overlap, an older build never replaces a newer one.
    """

    def __init__(self, documents: Iterable[Document] = (), scorer: Optional[OkapiBM25] = None):
        self._scorer = scorer
        self._lock = threading.Lock()
        self._requested = 0
        self._published = 0
        self._index = build_index(documents, scorer)

    @property
    def current(self) -> InvertedIndex:
        return self._index

    @property
    def generation(self) -> int:
        """Ticket of the last published rebuild (0 = the initial index)."""
        return self._published

    def rebuild(self, documents: Iterable[Document]) -> InvertedIndex:
        """
        Build an index for a new corpus snapshot and publish it.

        Returns:
            The index that is current after this call
        """
        with self._lock:
            self._requested += 1
            ticket = self._requested

        try:
            index = build_index(documents, self._scorer)
        except Exception as e:
            logger.error(f"Index rebuild #{ticket} failed, keeping generation {self._published}: {e}")
            raise

        with self._lock:
            if ticket > self._published:
                self._index = index
                self._published = ticket
                logger.info(f"Published index generation {ticket}")
            else:
                logger.info(f"Discarded stale index build #{ticket} (generation {self._published} is newer)")
            return self._index
