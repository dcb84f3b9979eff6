"""
Unit tests for synonym expansion.
"""

import pytest

from corpusrank.matching.synonyms import SYNONYMS, expand_query, expand_with_origin, get_synonyms

pytestmark = pytest.mark.unit


class TestGetSynonyms:
    """Test forward lookups"""

    def test_known_term(self):
        assert "documentation" in get_synonyms("docs")

    def test_case_insensitive(self):
        assert get_synonyms("DOCS") == get_synonyms("docs")

    def test_unknown_term(self):
        assert get_synonyms("xyznonexistent") == []

    def test_returns_copy(self):
        """Test that callers cannot mutate the table through the result"""
        synonyms = get_synonyms("fix")
        synonyms.append("mutated")
        assert "mutated" not in get_synonyms("fix")

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            SYNONYMS["new"] = ["entry"]


class TestExpandQuery:
    """Test bidirectional, single-hop expansion"""

    def test_forward(self):
        expanded = expand_query(["fix"])
        assert expanded[0] == "fix"
        assert {"debug", "repair", "resolve", "patch", "bug"} <= set(expanded)

    def test_reverse(self):
        """Test that a listed synonym finds its key"""
        assert "fix" in expand_query(["repair"])
        assert "docs" in expand_query(["documentation"])

    def test_both_directions_for_keys_that_are_also_synonyms(self):
        expanded = expand_query(["debug"])
        assert "troubleshoot" in expanded  # forward
        assert "fix" in expanded           # reverse

    def test_not_transitive(self):
        """Test that expansion stops after one hop"""
        # repair -> fix, but fix's own synonyms are not followed
        assert "resolve" not in expand_query(["repair"])

    def test_originals_first_and_deduplicated(self):
        expanded = expand_query(["docs", "readme"])
        assert expanded[:2] == ["docs", "readme"]
        assert len(expanded) == len(set(expanded))

    def test_unknown_and_empty(self):
        assert expand_query(["xyznonexistent"]) == ["xyznonexistent"]
        assert expand_query([]) == []


class TestExpandWithOrigin:
    """Test tracking of expansion-only terms"""

    def test_synonym_only_excludes_typed_terms(self):
        expanded, synonym_only = expand_with_origin(["docs", "readme"])

        assert "readme" not in synonym_only
        assert "docs" not in synonym_only
        assert "documentation" in synonym_only
        assert synonym_only == set(expanded) - {"docs", "readme"}

    def test_no_expansion(self):
        expanded, synonym_only = expand_with_origin(["xyznonexistent"])
        assert expanded == ["xyznonexistent"]
        assert synonym_only == set()
