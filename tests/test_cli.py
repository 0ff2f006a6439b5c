"""Tests for the csp-parser command line."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from csp_parser.__main__ import build_parser, main


@pytest.fixture(autouse=True)
def _restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def _stdout_json(capsys):
    out = capsys.readouterr()
    return json.loads(out.out), out.err


class TestArguments:
    def test_policies_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_defaults_defer_to_settings(self):
        args = build_parser().parse_args(["default-src 'self'"])
        assert args.current_url is None
        assert args.reporting_endpoints is None
        assert args.json is None
        assert args.verbose is False


class TestMain:
    def test_prints_policies_as_json(self, capsys):
        rc = main(["-u", "https://example.com/", "default-src 'self'; upgrade-insecure-requests"])
        assert rc == 0
        data, _ = _stdout_json(capsys)
        assert data == [{
            "default-src": [{"sourceList": [{"kind": "keyword", "value": "'self'"}]}],
            "upgrade-insecure-requests": True,
        }]

    def test_multiple_policies(self, capsys):
        rc = main(["default-src 'self'", "img-src data:"])
        assert rc == 0
        data, _ = _stdout_json(capsys)
        assert len(data) == 2
        assert data[1] == {"img-src": [{"sourceList": [{"kind": "scheme", "value": "data:"}]}]}

    def test_issues_logged_to_stderr(self, capsys):
        rc = main(["foo-bar baz; script-src 'self'"])
        assert rc == 0
        data, err = _stdout_json(capsys)
        assert data[0]["script-src"]
        assert "policy_issue" in err
        assert "CSP-0901" in err
        assert "CSP-0001" in err

    def test_json_log_lines(self, capsys):
        rc = main(["--json", "-u", "https://example.com/", "img-src bad!"])
        assert rc == 0
        _, err = _stdout_json(capsys)
        records = [json.loads(line) for line in err.splitlines() if line.strip()]
        issues = [r for r in records if r["event"] == "policy_issue"]
        assert [r["code"] for r in issues] == ["CSP-0002", "CSP-0100"]
        assert issues[1]["level"] == "error"
        assert issues[1]["value"] == "bad!"

    def test_reporting_endpoints_flag(self, capsys, reporting_endpoints):
        rc = main(["-e", reporting_endpoints, "report-to backup"])
        assert rc == 0
        data, _ = _stdout_json(capsys)
        assert data == [{"report-to": [{"tokens": {"backup": "https://backup.example.com/csp"}}]}]

    def test_reporting_endpoints_from_env(self, capsys, monkeypatch, reporting_endpoints):
        monkeypatch.setenv("CSP_PARSER_REPORTING_ENDPOINTS", reporting_endpoints)
        rc = main(["report-to main"])
        assert rc == 0
        data, _ = _stdout_json(capsys)
        assert data[0]["report-to"] == [{"tokens": {"main": "https://example.com/reports"}}]

    def test_flag_overrides_env(self, capsys, monkeypatch):
        monkeypatch.setenv("CSP_PARSER_REPORTING_ENDPOINTS", 'main="https://env.example/r"')
        rc = main(["-e", 'main="https://flag.example/r"', "report-to main"])
        assert rc == 0
        data, _ = _stdout_json(capsys)
        assert data[0]["report-to"] == [{"tokens": {"main": "https://flag.example/r"}}]

    def test_missing_grammar_file(self, capsys, monkeypatch, tmp_path):
        monkeypatch.setenv("CSP_PARSER_GRAMMAR_FILE", str(tmp_path / "missing.yaml"))
        rc = main(["default-src 'self'"])
        assert rc == 1
        out = capsys.readouterr()
        assert out.out == ""
        assert "grammar_load_failed" in out.err

    def test_malformed_grammar_file(self, capsys, monkeypatch, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("keyword_sources: [\n", encoding="utf-8")
        monkeypatch.setenv("CSP_PARSER_GRAMMAR_FILE", str(path))
        rc = main(["default-src 'self'"])
        assert rc == 1
        assert "grammar_load_failed" in capsys.readouterr().err

    def test_non_mapping_grammar_file(self, capsys, monkeypatch, tmp_path):
        """A YAML list instead of a mapping is a load failure, not a crash."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        monkeypatch.setenv("CSP_PARSER_GRAMMAR_FILE", str(path))
        rc = main(["default-src 'self'"])
        assert rc == 1
        out = capsys.readouterr()
        assert out.out == ""
        assert "grammar_load_failed" in out.err
