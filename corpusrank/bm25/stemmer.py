"""
Snowball stemming for index terms (via NLTK).

Only the inverted index stems its terms; the field-weighted scorer matches
surface forms so that prefix and fuzzy matching see what the user typed.

Examples:
- "documentation" → "document"
- "searching" → "search"
- "robots" → "robot"
"""

from functools import lru_cache

from nltk.stem.snowball import SnowballStemmer

# Initialize stemmer once (thread-safe, reusable)
_stemmer = SnowballStemmer('english')


@lru_cache(maxsize=65536)
def stem(word: str) -> str:
    """
    Stem a single lowercase term.

    Hyphenated compounds are stemmed as one unit, the same way the
    tokenizer keeps them as one token.

    Examples:
        >>> stem("searching")
        'search'
        >>> stem("robots")
        'robot'
    """
    return _stemmer.stem(word)
