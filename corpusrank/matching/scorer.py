"""
Field-weighted multi-signal scorer.

Scores one document against one token sequence using five weighted text
fields and five matching strategies:

    exact      weight × 1.0
    prefix     weight × (0.3 + 0.65 × len(token) / len(word))
    fuzzy      weight × 0.6 × (0.3 + 0.65 × similarity)
    substring  weight × 0.2
    acronym    flat bonus, compared against the whole query

Per (token, field) only the best strategy counts; per token only the best
field is added to the document score. After summing, the coverage bonus,
phrase bonus, exact-identifier boost and acronym bonus are applied once.

This is the reference (explainable) scorer. The inverted index in
`corpusrank.bm25` ranks the full corpus faster with BM25; the two are
expected to agree on ranking, not on numbers.
"""

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..bm25.tokenizer import STOPWORDS, is_meaningful, split_words, tokenize
from ..exceptions import require_limit
from ..models import Document, ScoredMatch
from .synonyms import expand_with_origin

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FIELD_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "title": 10,
    "id": 8,
    "tags": 5,
    "description": 3,
    "content": 1,
})

PREFIX_BASE = 0.3
PREFIX_SPAN = 0.65
FUZZY_DISCOUNT = 0.6
SUBSTRING_FACTOR = 0.2

COVERAGE_BONUS = 1.2
PHRASE_BONUS = 0.5
SYNONYM_DISCOUNT = 0.5
ACRONYM_BONUS = 6.0
EXACT_ID_BONUS = 50.0

_NON_ALNUM_RE = re.compile(r'[^a-z0-9]')


# ---------------------------------------------------------------------------
# Precomputed document entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScorerField:
    """One tokenized field of a document"""
    name: str
    tokens: Tuple[str, ...]
    positions: Mapping[str, int]    # token -> first word position
    raw: str                        # lowercase, untokenized text
    weight: float


@dataclass(frozen=True)
class ScorerEntry:
    """Everything the scorer needs from one document, computed once"""
    document_id: str
    fields: Tuple[ScorerField, ...]
    acronyms: Tuple[Tuple[str, str], ...]   # (field name, initials)
    id_normalized: str                      # "ideawizard" for "idea-wizard"


def normalize_query(query: str) -> str:
    """Lowercase and drop every separator: "Idea Wizard" -> "ideawizard"."""
    return _NON_ALNUM_RE.sub('', (query or '').lower())


def _initials(text: str) -> str:
    words = [
        part
        for word in split_words(text)
        for part in word.split('-')
        if part and part not in STOPWORDS
    ]
    return ''.join(w[0] for w in words)


def word_positions(text: str) -> Dict[str, int]:
    """
    First word position of every token in `text`.

    Compound parts take consecutive positions and the compound itself takes
    the position of its first part, so "Idea-Wizard Helper" and "Idea Wizard
    Helper" place idea, wizard and helper identically. Stopwords take no
    position.
    """
    positions: Dict[str, int] = {}
    pos = 0
    for word in split_words(text):
        start = pos
        parts = word.split('-') if '-' in word else [word]
        for part in parts:
            if is_meaningful(part):
                positions.setdefault(part, pos)
                pos += 1
        if len(parts) > 1 and is_meaningful(word):
            positions.setdefault(word, start)
            if pos == start:
                pos += 1
    return positions


def _build_field(name: str, tokens: List[str], raw: str) -> ScorerField:
    return ScorerField(
        name=name,
        tokens=tuple(tokens),
        positions=MappingProxyType(word_positions(raw)),
        raw=raw.lower(),
        weight=FIELD_WEIGHTS[name],
    )


def build_scorer_entry(document: Document) -> ScorerEntry:
    """Tokenize every scored field of a document."""
    tag_tokens = tokenize(' '.join(document.tags))

    fields = (
        _build_field("title", tokenize(document.title), document.title),
        _build_field("id", tokenize(document.id), document.id),
        _build_field("tags", tag_tokens, ' '.join(document.tags)),
        _build_field("description", tokenize(document.description), document.description),
        _build_field("content", tokenize(document.content), document.content),
    )

    acronyms = tuple(
        (name, initials)
        for name, initials in (("title", _initials(document.title)), ("id", _initials(document.id)))
        if len(initials) >= 2
    )

    return ScorerEntry(
        document_id=document.id,
        fields=fields,
        acronyms=acronyms,
        id_normalized=normalize_query(document.id),
    )


# ---------------------------------------------------------------------------
# Matching helpers
# ---------------------------------------------------------------------------

def edit_distance(a: str, b: str, max_dist: int) -> int:
    """
    Levenshtein distance with early exit.

    Returns max_dist + 1 as soon as the distance is known to exceed max_dist.
    """
    m, n = len(a), len(b)
    if abs(m - n) > max_dist:
        return max_dist + 1

    prev = list(range(n + 1))
    curr = [0] * (n + 1)

    for i in range(1, m + 1):
        curr[0] = i
        row_min = i
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                curr[j] = prev[j - 1]
            else:
                curr[j] = 1 + min(prev[j - 1], prev[j], curr[j - 1])
            if curr[j] < row_min:
                row_min = curr[j]
        if row_min > max_dist:
            return max_dist + 1
        prev, curr = curr, prev

    return prev[n]


def fuzzy_threshold(length: int) -> int:
    """Edits tolerated for a token of this length (0 = no fuzzy matching)."""
    if length >= 7:
        return 2
    if length >= 4:
        return 1
    return 0


def completion_score(ratio: float) -> float:
    """Share of the field weight earned by a partial match (< 1.0 for ratio < 1)."""
    return PREFIX_BASE + PREFIX_SPAN * ratio


def is_prefix_eligible(token: str, is_tail: bool) -> bool:
    # Longer prefixes only at the query tail: mid-query typos are not prefixes
    return is_tail or len(token) <= 3


def score_token_field(token: str, field: ScorerField, prefix_eligible: bool) -> Tuple[float, int]:
    """
    Best single-strategy score of one token in one field.

    Returns:
        (score, word position); position is -1 for substring matches and misses
    """
    weight = field.weight

    # 1. Exact
    pos = field.positions.get(token)
    if pos is not None:
        return weight, pos

    best, best_pos = 0.0, -1
    token_len = len(token)

    # 2. Prefix (proportional to completion)
    if prefix_eligible:
        for word in field.tokens:
            if len(word) > token_len and word.startswith(token):
                score = weight * completion_score(token_len / len(word))
                if score > best:
                    best, best_pos = score, field.positions[word]

    # 3. Fuzzy
    max_dist = fuzzy_threshold(token_len)
    if max_dist:
        for word in field.tokens:
            dist = edit_distance(token, word, max_dist)
            if dist <= max_dist:
                similarity = 1.0 - dist / max(token_len, len(word))
                score = weight * FUZZY_DISCOUNT * completion_score(similarity)
                if score > best:
                    best, best_pos = score, field.positions[word]

    # 4. Substring (fallback only)
    if best == 0.0 and token in field.raw:
        return weight * SUBSTRING_FACTOR, -1

    return best, best_pos


# ---------------------------------------------------------------------------
# Per-document scoring
# ---------------------------------------------------------------------------

def _phrase_bonus(field_positions: Dict[str, List[int]]) -> float:
    bonus = 0.0
    for field_name, positions in field_positions.items():
        if len(positions) < 2:
            continue
        ordered = sorted(set(positions))
        adjacent = sum(1 for a, b in zip(ordered, ordered[1:]) if b == a + 1)
        bonus += FIELD_WEIGHTS[field_name] * PHRASE_BONUS * adjacent
    return bonus


def _grouping_compounds(tokens: Sequence[str]) -> Set[str]:
    # A typed "idea-wizard" arrives with its parts; the parts do the scoring
    # so the same words are not counted twice
    present = set(tokens)
    return {
        t for t in tokens
        if '-' in t and any(part in present for part in t.split('-'))
    }


def score_entry(
    entry: ScorerEntry,
    tokens: Sequence[str],
    synonym_only: Set[str] = frozenset(),
    normalized_query: str = "",
) -> Optional[ScoredMatch]:
    """
    Score a precomputed entry.

    Args:
        entry: Document entry from `build_scorer_entry`
        tokens: Query tokens, typed tokens first, then synonyms
        synonym_only: Tokens introduced by expansion (discounted, never
            counted for coverage or phrase detection)
        normalized_query: Query passed through `normalize_query`, used for
            the exact-identifier and acronym checks

    Returns:
        ScoredMatch, or None when nothing matched (always None for an
        empty token sequence)
    """
    if not tokens:
        return None

    total = 0.0
    matched: Dict[str, None] = {}
    field_positions: Dict[str, List[int]] = {}

    grouping = _grouping_compounds(tokens)
    direct = [i for i, t in enumerate(tokens) if t not in synonym_only and t not in grouping]
    tail = direct[-1] if direct else -1
    all_direct_matched = True

    for i, token in enumerate(tokens):
        if token in grouping:
            continue
        is_synonym = token in synonym_only
        prefix_ok = is_prefix_eligible(token, i == tail)

        best, best_field, best_pos = 0.0, None, -1
        for field in entry.fields:
            score, pos = score_token_field(token, field, prefix_ok)
            if score > 0:
                matched.setdefault(field.name)
            if score > best:
                best, best_field, best_pos = score, field.name, pos

        if best > 0:
            total += best * (SYNONYM_DISCOUNT if is_synonym else 1.0)
            if not is_synonym and best_pos >= 0:
                field_positions.setdefault(best_field, []).append(best_pos)
        elif not is_synonym:
            all_direct_matched = False

    if total > 0:
        if all_direct_matched and len(direct) > 1:
            total *= COVERAGE_BONUS
        total += _phrase_bonus(field_positions)

    if normalized_query and normalized_query == entry.id_normalized:
        total += EXACT_ID_BONUS
        matched.setdefault("id")

    if len(normalized_query) >= 2:
        for field_name, initials in entry.acronyms:
            if normalized_query == initials:
                total += ACRONYM_BONUS
                matched.setdefault(field_name)

    if total <= 0:
        return None

    return ScoredMatch(
        document_id=entry.document_id,
        score=total,
        matched_fields=tuple(matched),
    )


def prepare_query(query: str, expand_synonyms: bool = False) -> Tuple[List[str], Set[str], str]:
    """
    Tokenize (and optionally expand) a raw query.

    Returns:
        (tokens, synonym_only, normalized_query)
    """
    tokens = tokenize(query)
    synonym_only: Set[str] = set()
    if expand_synonyms and tokens:
        tokens, synonym_only = expand_with_origin(tokens)
    return tokens, synonym_only, normalize_query(query)


def _rejoin(tokens: Sequence[str]) -> str:
    # Parts that follow their own compound ("idea-wizard", "idea", "wizard")
    # are not repeated when rebuilding the query
    parts: Set[str] = set()
    words = []
    for token in tokens:
        if token in parts:
            continue
        words.append(token)
        if '-' in token:
            parts.update(token.split('-'))
    return normalize_query(' '.join(words))


def score_document(document: Document, tokens: Sequence[str]) -> Optional[ScoredMatch]:
    """
    Score one document against already-tokenized query tokens.

    The tokens are treated as typed by the user (no synonym discount). The
    exact-identifier and acronym checks compare the tokens joined without
    separators.
    """
    tokens = list(dict.fromkeys(tokens))
    if not tokens:
        return None
    return score_entry(build_scorer_entry(document), tokens, set(), _rejoin(tokens))


def score_query(document: Document, query: str, expand_synonyms: bool = False) -> Optional[ScoredMatch]:
    """Score one document against a raw query string."""
    tokens, synonym_only, normalized = prepare_query(query, expand_synonyms)
    return score_entry(build_scorer_entry(document), tokens, synonym_only, normalized)


def filter_document(document: Document, category: Optional[str], tags: Optional[Iterable[str]]) -> bool:
    """True if the document passes the category filter and shares any requested tag."""
    if category and document.category != category:
        return False
    if tags:
        wanted = set(tags)
        if wanted and not wanted.intersection(document.tags):
            return False
    return True


def score_all_documents(
    documents: Sequence[Document],
    query: str,
    category: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    expand_synonyms: bool = False,
    limit: Optional[int] = None,
) -> List[ScoredMatch]:
    """
    Score every document against a query.

    Filters run over the full candidate set before the limit is applied.
    Results are sorted by descending score; ties keep input order.

    Args:
        documents: Corpus snapshot
        query: Raw query text
        category: Keep only documents in this category
        tags: Keep only documents carrying at least one of these tags
        expand_synonyms: Add (discounted) synonym terms to the query
        limit: Maximum number of results (None = all)

    Returns:
        Scored matches with score > 0; empty when the query has no tokens
    """
    limit = require_limit(limit)
    tokens, synonym_only, normalized = prepare_query(query, expand_synonyms)
    if not tokens:
        return []

    tags = list(tags) if tags else None
    results: List[ScoredMatch] = []
    for document in documents:
        if not filter_document(document, category, tags):
            continue
        match = score_entry(build_scorer_entry(document), tokens, synonym_only, normalized)
        if match is not None:
            results.append(match)

    # sorted() is stable: equal scores keep corpus order
    results = sorted(results, key=lambda m: m.score, reverse=True)
    logger.debug(f"Scored {len(documents)} documents for {query!r}: {len(results)} matches")

    return results if limit is None else results[:limit]
