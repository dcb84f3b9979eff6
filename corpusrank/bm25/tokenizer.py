"""
Tokenizer for query matching and BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Extract alphanumeric words (internal hyphens preserved)
3. Split hyphenated compounds into their parts as well
4. Filter stopwords and too-short fragments
5. Deduplicate (order = first occurrence)

The index pipeline (`analyze`) shares steps 1-4 but keeps repeated terms,
drops pure numbers and applies Snowball stemming so that term frequencies
can be counted.
"""

import re
from typing import Iterator, List

from .stemmer import stem

# English stopwords (based on Elasticsearch/Lucene standard list)
# These are common words that don't help with ranking
STOPWORDS = frozenset([
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'but', 'by',
    'for', 'from', 'if', 'in', 'into', 'is', 'it',
    'no', 'not', 'of', 'on', 'or', 'such',
    'that', 'the', 'their', 'then', 'there', 'these',
    'they', 'this', 'to', 'was', 'will', 'with'
])

# Single letters that show up in real identifiers ("c", "r", "k8s" parts, ...)
SHORT_TOKEN_ALLOWLIST = frozenset(['c', 'r', 'v', 'x', 'k'])

_WORD_RE = re.compile(r'[a-z0-9]+(?:-[a-z0-9]+)*')
_NUMBER_RE = re.compile(r'^[0-9-]+$')


def split_words(text: str) -> List[str]:
    """
    Extract raw lowercase words, hyphenated compounds kept intact.

    No filtering or deduplication is applied.

    Examples:
        >>> split_words("The Robot-Mode Maker!")
        ['the', 'robot-mode', 'maker']
    """
    if not text:
        return []
    return _WORD_RE.findall(text.lower())


def _with_parts(words: List[str]) -> Iterator[str]:
    # "idea-wizard" -> "idea-wizard", "idea", "wizard"
    for word in words:
        yield word
        if '-' in word:
            yield from word.split('-')


def is_meaningful(token: str) -> bool:
    """True if the token survives stopword and length filtering."""
    if token in STOPWORDS:
        return False
    return len(token) >= 2 or token in SHORT_TOKEN_ALLOWLIST


def tokenize(text: str) -> List[str]:
    """
    Tokenize text into an ordered, deduplicated list of tokens.

    Hyphenated compounds are emitted as one token followed by their parts,
    so "idea-wizard" and "idea wizard" share the tokens "idea" and "wizard".

    Args:
        text: Input text to tokenize

    Returns:
        List of lowercase tokens without stopwords or duplicates

    Examples:
        >>> tokenize("The Idea-Wizard")
        ['idea-wizard', 'idea', 'wizard']

        >>> tokenize("robot robot")
        ['robot']

        >>> tokenize("the of and")
        []
    """
    tokens: List[str] = []
    seen = set()

    for token in _with_parts(split_words(text)):
        if token in seen or not is_meaningful(token):
            continue
        seen.add(token)
        tokens.append(token)

    return tokens


def analyze(text: str) -> List[str]:
    """
    Produce the term stream used by the inverted index.

    Process:
    1. Extract words and compound parts (see `tokenize`)
    2. Remove stopwords, short fragments and pure numbers
    3. Apply stemming (reduce to root: "searching" → "search")

    Repeated terms are kept so term frequencies can be counted.

    Examples:
        >>> analyze("Deploy deployments")
        ['deploy', 'deploy']
    """
    return [
        stem(t)
        for t in _with_parts(split_words(text))
        if is_meaningful(t) and not _NUMBER_RE.match(t)
    ]
