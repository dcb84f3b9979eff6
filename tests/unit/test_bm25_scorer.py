"""
Unit tests for the OkapiBM25 scorer.
"""

import math

import pytest
from corpusrank.bm25.scorer import OkapiBM25
from corpusrank.exceptions import InvalidConfigurationError


class TestOkapiBM25:
    """Test BM25 term scoring"""

    def test_basic_scoring(self):
        """Test the documented example value"""
        scorer = OkapiBM25()
        score = scorer.term_score(tf=2, doc_length=10, avgdl=10, idf=1.0)
        # 2 × 2.2 / (2 + 1.2) = 1.375
        assert score == pytest.approx(1.375)
        assert isinstance(score, float)

    def test_zero_score_absent_term(self):
        """Test that an absent term contributes nothing"""
        scorer = OkapiBM25()
        assert scorer.term_score(tf=0, doc_length=10, avgdl=10, idf=2.0) == 0.0

    def test_term_frequency_saturation(self):
        """Test that higher term frequency increases score with diminishing returns"""
        scorer = OkapiBM25()
        s1 = scorer.term_score(1, 10, 10, 1.0)
        s5 = scorer.term_score(5, 10, 10, 1.0)
        s50 = scorer.term_score(50, 10, 10, 1.0)

        assert s1 < s5 < s50
        assert (s5 - s1) > (s50 - s5) / 9
        # Bounded by idf × (k1 + 1)
        assert s50 < 2.2

    def test_length_normalization(self):
        """Test that longer documents score lower for equal tf"""
        scorer = OkapiBM25()
        short = scorer.term_score(2, 5, 10, 1.0)
        long = scorer.term_score(2, 50, 10, 1.0)
        assert short > long

    def test_no_length_normalization_when_b_zero(self):
        scorer = OkapiBM25(b=0.0)
        assert scorer.term_score(2, 5, 10, 1.0) == pytest.approx(scorer.term_score(2, 500, 10, 1.0))

    def test_zero_avgdl_is_safe(self):
        """Test that empty corpus statistics do not divide by zero"""
        scorer = OkapiBM25()
        score = scorer.term_score(1, 0, 0.0, 1.0)
        assert math.isfinite(score)
        assert score > 0

    def test_custom_parameters(self):
        """Test custom k1 and b parameters"""
        scorer = OkapiBM25(k1=2.0, b=0.5)
        assert scorer.k1 == 2.0
        assert scorer.b == 0.5


class TestIdf:
    """Test inverse document frequency"""

    def test_rare_terms_weigh_more(self):
        assert OkapiBM25.idf(100, 1) > OkapiBM25.idf(100, 50)

    def test_always_positive(self):
        """Test that a term in every document still has positive idf"""
        assert OkapiBM25.idf(10, 10) > 0
        assert OkapiBM25.idf(1, 1) > 0

    def test_formula(self):
        # ln(1 + (10 - 2 + 0.5) / (2 + 0.5)) = ln(4.4)
        assert OkapiBM25.idf(10, 2) == pytest.approx(math.log(4.4))


class TestParameterValidation:
    """Test rejection of invalid parameters"""

    @pytest.mark.parametrize("k1", [-0.1, float("inf"), float("nan")])
    def test_invalid_k1(self, k1):
        with pytest.raises(InvalidConfigurationError):
            OkapiBM25(k1=k1)

    @pytest.mark.parametrize("b", [-0.01, 1.5])
    def test_invalid_b(self, b):
        with pytest.raises(InvalidConfigurationError):
            OkapiBM25(b=b)

    def test_error_is_value_error(self):
        """Test that configuration errors remain catchable as ValueError"""
        with pytest.raises(ValueError):
            OkapiBM25(b=2.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
