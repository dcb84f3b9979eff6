"""Unit test fixtures - small in-memory corpora, no I/O"""

import pytest

from corpusrank.models import Document


def _document(**overrides) -> Document:
    values = {
        "id": "test-prompt",
        "title": "Test Prompt",
        "description": "A test prompt",
        "category": "ideation",
        "tags": ("testing",),
        "content": "Some prompt content here.",
        "author": "test",
        "version": "1.0.0",
        "created": "2025-01-01",
    }
    values.update(overrides)
    return Document(**values)


@pytest.fixture
def make_document():
    """
    Factory for documents with neutral defaults.

    Only the overridden fields should matter for a test: the defaults
    (id "test-prompt", title "Test Prompt", tag "testing") do not match
    the query words used throughout the suite.
    """
    return _document


@pytest.fixture
def catalog():
    """A small catalog resembling the real library"""
    return [
        _document(
            id="robot-mode-maker",
            title="Robot-Mode Maker",
            description="Design agent-friendly CLI commands for automation",
            category="automation",
            tags=("automation", "cli", "agents"),
            content="Ultrathink about how a robot agent would drive this tool from a terminal.",
        ),
        _document(
            id="idea-wizard",
            title="The Idea Wizard",
            description="Generate and evaluate improvement ideas for a project",
            category="ideation",
            tags=("brainstorming", "ideation", "improvement"),
            content="Ultrathink. Come up with 30 ideas, then pick the best five.",
        ),
        _document(
            id="readme-reviser",
            title="README Reviser",
            description="Keep documentation in sync with the code",
            category="documentation",
            tags=("documentation", "readme"),
            content="Ultrathink and update the README so it matches the current behaviour.",
        ),
        _document(
            id="bug-hunter",
            title="Bug Hunter",
            description="Find and fix bugs systematically",
            category="debugging",
            tags=("debugging", "bugs", "debug"),
            content="Hunt for bugs in the code base and explain each root cause.",
        ),
        _document(
            id="robust-error-handling",
            title="Robust Error Handling",
            description="Harden failure paths and error messages",
            category="debugging",
            tags=("errors", "reliability"),
            content="Review every exception handler and retry loop.",
        ),
        _document(
            id="api-docs-writer",
            title="API Docs Writer",
            description="Write reference documentation for endpoints",
            category="documentation",
            tags=("documentation", "api"),
            content="Ultrathink about the consumers of each endpoint.",
        ),
    ]


@pytest.fixture
def library():
    """Fixture corpus for recommendation tests"""
    return [
        _document(id="alpha-docs", title="Alpha Docs", category="documentation",
                  tags=("docs", "readme"), featured=True),
        _document(id="beta-test", title="Beta Test", category="testing",
                  tags=("tests", "coverage")),
        _document(id="gamma-docs", title="Gamma Docs", category="documentation",
                  tags=("docs", "style")),
        _document(id="delta-debug", title="Delta Debug", category="debugging",
                  tags=("debug", "fix"), author="Another Author"),
        _document(id="epsilon-docs", title="Epsilon Docs", category="documentation",
                  tags=("docs", "api", "readme"), featured=True),
    ]
