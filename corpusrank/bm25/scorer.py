"""
Okapi BM25 term scorer for the inverted index.

BM25 (Best Match 25) is the de facto standard probabilistic ranking function.

Formula:
    score(term, doc) = idf(term) × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))
    idf(term) = ln(1 + (N - df + 0.5) / (df + 0.5))

Where:
    tf = (field-boosted) term frequency in document
    k1 = term frequency saturation parameter (default: 1.2)
    b = length normalization parameter (default: 0.75)
    dl = document length (boosted term count)
    avgdl = average document length across the corpus
    N = number of documents, df = documents containing the term

The "+1" inside the logarithm keeps idf positive even for terms present in
more than half of the corpus, so scores are never negative.
"""

import math

from ..exceptions import InvalidConfigurationError


class OkapiBM25:
    """
    BM25 scoring with corpus statistics supplied by the caller.

    The scorer holds parameters only; corpus statistics live in the index
    so one scorer can serve many index snapshots.
    """

    def __init__(self, k1: float = 1.2, b: float = 0.75):
        """
        Initialize BM25 scorer.

        Args:
            k1: Term frequency saturation parameter
                Higher = more weight to term frequency
                Range: 1.2 - 2.0
                Default: 1.2 (standard)

            b: Length normalization parameter
                Higher = more penalty for long documents
                Range: 0.0 - 1.0
                Default: 0.75 (standard)
        """
        if k1 < 0 or not math.isfinite(k1):
            raise InvalidConfigurationError(f"BM25 k1 must be a finite non-negative number, got {k1}")
        if not 0.0 <= b <= 1.0:
            raise InvalidConfigurationError(f"BM25 b must be within [0, 1], got {b}")
        self.k1 = k1
        self.b = b

    @staticmethod
    def idf(doc_count: int, doc_freq: int) -> float:
        """Inverse document frequency (always > 0 for df <= N)."""
        return math.log(1.0 + (doc_count - doc_freq + 0.5) / (doc_freq + 0.5))

    def term_score(
        self,
        tf: float,
        doc_length: float,
        avgdl: float,
        idf: float,
    ) -> float:
        """
        Compute the BM25 contribution of one term in one document.

        Args:
            tf: Term frequency in the document (may be field-boosted)
            doc_length: Document length in (boosted) terms
            avgdl: Average document length of the corpus
            idf: Precomputed inverse document frequency of the term

        Returns:
            Non-negative, finite score (0.0 when the term is absent)

        Example:
            >>> scorer = OkapiBM25()
            >>> scorer.term_score(tf=2, doc_length=10, avgdl=10, idf=1.0)
            1.375
        """
        if tf <= 0:
            return 0.0

        # Empty corpus statistics would divide by zero
        if avgdl <= 0:
            avgdl = 1.0

        numerator = tf * (self.k1 + 1)
        denominator = tf + self.k1 * (
            1 - self.b + self.b * (doc_length / avgdl)
        )

        return idf * numerator / denominator
