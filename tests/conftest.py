"""Shared test fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    for name in (
        "CSP_PARSER_CURRENT_URL",
        "CSP_PARSER_REPORTING_ENDPOINTS",
        "CSP_PARSER_GRAMMAR_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CSP_PARSER_LOG_JSON", "false")
    monkeypatch.setenv("CSP_PARSER_LOG_LEVEL", "debug")

    # Reset cached settings and grammar
    import csp_parser.config.loader as loader
    from csp_parser.grammar.rules import reset_grammar_cache

    loader._settings = None
    reset_grammar_cache()
    yield
    loader._settings = None
    reset_grammar_cache()


@pytest.fixture
def reporting_endpoints():
    """A well-formed Reporting-Endpoints header with two endpoints."""
    return 'main="https://example.com/reports", backup="https://backup.example.com/csp"'
