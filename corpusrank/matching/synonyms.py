"""
Query expansion via a static synonym dictionary.

Covers abbreviations, concept synonyms, action verbs and the catalog's
domain vocabulary. The table is compiled in and never mutated.

Expansion is bidirectional: a token picks up its own synonyms (forward)
and every key whose synonym list contains it (reverse), regardless of
which direction the entry was written in. Expansion is a single hop; it
is not transitive.

Usage:
    from corpusrank.matching.synonyms import expand_query

    expand_query(["fix"])
    # ['fix', 'debug', 'repair', 'resolve', 'patch', 'bug']
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Set, Tuple

_SYNONYMS: Dict[str, List[str]] = {
    # Abbreviations
    "docs": ["documentation", "readme", "guide", "manual"],
    "cli": ["terminal", "command-line", "shell", "console"],
    "api": ["endpoint", "interface", "rest", "sdk"],
    "perf": ["performance", "speed", "optimize", "fast"],
    "config": ["configuration", "settings", "setup"],
    "db": ["database", "sql", "storage"],
    "ui": ["interface", "frontend", "design"],
    "ux": ["usability", "experience", "design"],
    "repo": ["repository", "codebase", "project"],
    "pr": ["pull-request", "review", "merge"],
    "ci": ["pipeline", "automation", "build"],
    "k8s": ["kubernetes", "cluster", "container"],

    # Concept synonyms
    "fix": ["debug", "repair", "resolve", "patch", "bug"],
    "debug": ["troubleshoot", "diagnose", "investigate", "trace"],
    "brainstorm": ["ideate", "ideas", "generate", "creative"],
    "improve": ["enhance", "optimize", "upgrade", "better"],
    "refactor": ["restructure", "cleanup", "reorganize", "simplify"],
    "test": ["testing", "tests", "coverage", "qa"],
    "review": ["audit", "critique", "inspect"],
    "explain": ["describe", "clarify", "summarize"],
    "plan": ["roadmap", "strategy", "design"],
    "deploy": ["release", "ship", "publish"],
    "secure": ["security", "vulnerability", "hardening"],

    # Actions
    "add": ["create", "new", "insert"],
    "remove": ["delete", "drop", "eliminate"],
    "update": ["modify", "change", "edit"],
    "write": ["compose", "draft", "author"],
    "find": ["search", "locate", "discover"],

    # Domain terms
    "agent": ["ai", "bot", "assistant", "llm"],
    "prompt": ["instruction", "template", "directive"],
    "code": ["programming", "source", "implementation"],
    "workflow": ["process", "automation", "pipeline"],
    "bundle": ["collection", "pack", "set"],
}

# Read-only view handed out to callers
SYNONYMS: Mapping[str, List[str]] = MappingProxyType(_SYNONYMS)


def _build_reverse(table: Mapping[str, List[str]]) -> Dict[str, Tuple[str, ...]]:
    reverse: Dict[str, List[str]] = {}
    for key, terms in table.items():
        for term in terms:
            reverse.setdefault(term, []).append(key)
    return {term: tuple(keys) for term, keys in reverse.items()}


# synonym -> keys that list it, precomputed once (table is static)
_REVERSE = MappingProxyType(_build_reverse(_SYNONYMS))


def get_synonyms(term: str) -> List[str]:
    """
    Return the forward synonyms of a term (case-insensitive).

    Unknown terms return an empty list.
    """
    return list(_SYNONYMS.get(term.lower(), ()))


def expand_with_origin(tokens: Iterable[str]) -> Tuple[List[str], Set[str]]:
    """
    Expand tokens and report which terms came only from expansion.

    Args:
        tokens: Query tokens (already tokenized)

    Returns:
        (expanded, synonym_only):
            expanded: originals first, then synonyms, deduplicated
            synonym_only: terms not typed by the user, so scorers can
                discount matches achieved only through them
    """
    originals = list(dict.fromkeys(tokens))
    expanded = dict.fromkeys(originals)

    for token in originals:
        for synonym in _SYNONYMS.get(token, ()):
            expanded.setdefault(synonym)
        for key in _REVERSE.get(token, ()):
            expanded.setdefault(key)

    original_set = set(originals)
    synonym_only = {t for t in expanded if t not in original_set}
    return list(expanded), synonym_only


def expand_query(tokens: Iterable[str]) -> List[str]:
    """
    Expand query tokens with their synonyms in both directions.

    Examples:
        >>> "repair" in expand_query(["fix"])
        True
        >>> "fix" in expand_query(["debug"])
        True
        >>> expand_query([])
        []
    """
    expanded, _ = expand_with_origin(tokens)
    return expanded
