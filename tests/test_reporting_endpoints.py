"""Tests for the Reporting-Endpoints header parser."""

from __future__ import annotations

import pytest

from csp_parser.errors import PolicyError
from csp_parser.grammar.reporting_endpoints import parse_reporting_endpoints


class TestValidHeaders:
    def test_blank(self):
        assert parse_reporting_endpoints("") == ({}, None)

    def test_whitespace_and_stray_commas(self):
        assert parse_reporting_endpoints("  , ,, ") == ({}, None)

    def test_single_pair(self):
        endpoints, err = parse_reporting_endpoints('endpoint-1="https://example.com/reports"')
        assert endpoints == {"endpoint-1": "https://example.com/reports"}
        assert err is None

    def test_multiple_pairs(self):
        endpoints, err = parse_reporting_endpoints(
            'endpoint-1="https://example.com/reports1", endpoint-2="https://example.com/reports2"'
        )
        assert endpoints == {
            "endpoint-1": "https://example.com/reports1",
            "endpoint-2": "https://example.com/reports2",
        }
        assert err is None

    def test_duplicate_keys_last_wins(self):
        """Repeated keys overwrite silently."""
        endpoints, err = parse_reporting_endpoints('e1="https://example.com/url1", e1="https://example.com/url2"')
        assert endpoints == {"e1": "https://example.com/url2"}
        assert err is None


class TestMalformedPairs:
    @pytest.mark.parametrize("header,code,fragment", [
        (
            "endpoint-1",
            "CSP-0510",
            "token-pair `endpoint-1` does not contain an `=` character",
        ),
        (
            'endpoint-1="https://example.com/reports1" endpoint-2="https://example.com/reports2"',
            "CSP-0511",
            "appears to be missing a comma between token-pairs",
        ),
        (
            'endpoint-1="https://example.com/a=b"',
            "CSP-0512",
            "is missing either a key or value",
        ),
        (
            '="https://example.com/reports"',
            "CSP-0513",
            'token-pair `="https://example.com/reports"` is missing a key',
        ),
        (
            'endpoint:1="https://example.com/reports"',
            "CSP-0514",
            'token-pair `endpoint:1="https://example.com/reports"` has a key with invalid characters',
        ),
        (
            "endpoint-1=",
            "CSP-0515",
            "token-pair `endpoint-1=` is missing a URL",
        ),
        (
            'endpoint-1=https://example.com/reports"',
            "CSP-0516",
            "URL is not enclosed in double quotes",
        ),
        (
            'endpoint-1="https://example.com/reports',
            "CSP-0516",
            "URL is not enclosed in double quotes",
        ),
        (
            "endpoint-1=https://example.com/reports",
            "CSP-0516",
            "URL is not enclosed in double quotes",
        ),
        (
            "endpoint-1='https://example.com/reports'",
            "CSP-0516",
            "URL is not enclosed in double quotes",
        ),
        (
            'endpoint-1="',
            "CSP-0516",
            "URL is not enclosed in double quotes",
        ),
        (
            'endpoint-1="/reports"',
            "CSP-0517",
            "URL is not a valid URL",
        ),
        (
            'endpoint-1="https://example.com/reports#frag"',
            "CSP-0517",
            "URL is not a valid URL",
        ),
    ])
    def test_single_issue(self, header, code, fragment):
        endpoints, err = parse_reporting_endpoints(header)
        assert endpoints == {}
        assert isinstance(err, PolicyError)
        assert err.codes() == [code]
        assert fragment in str(err)

    def test_missing_equals_with_space(self):
        endpoints, err = parse_reporting_endpoints('endpoint-1 "https://example.com/reports"')
        assert endpoints == {}
        assert err.codes() == ["CSP-0510"]

    def test_bad_pair_does_not_block_good_pairs(self):
        endpoints, err = parse_reporting_endpoints(
            'broken, main="https://example.com/reports", bad:key="https://x.example"'
        )
        assert endpoints == {"main": "https://example.com/reports"}
        assert err.codes() == ["CSP-0510", "CSP-0514"]

    def test_issue_rendering(self):
        _, err = parse_reporting_endpoints("endpoint-1=")
        issue = err.issues[0]
        assert str(issue) == "[ERROR] token-pair `endpoint-1=` is missing a URL [CSP-0515]"
        assert issue.value == "endpoint-1="
        assert issue.directive == ""
