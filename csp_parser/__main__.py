"""
csp-parser CLI
"""
import argparse
import json
import sys

import structlog
import yaml

from csp_parser.config.loader import get_settings
from csp_parser.errors import PolicyError, Severity
from csp_parser.grammar.rules import load_grammar
from csp_parser.logging_config import setup_logging
from csp_parser.parser import parse

logger = structlog.get_logger()

_LOG_METHODS = {
    Severity.info: "info",
    Severity.warn: "warning",
    Severity.error: "error",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csp-parser",
        description="Parse and validate Content Security Policies (CSP Level 2 and the CSP Level 3 draft).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Policies are passed as arguments. There is commonly only one, but several are
supported. Wrap each policy in double quotes, since policies often contain
single-quoted values.

Examples:
  # Parse a policy
  python -m csp_parser "default-src 'self'; script-src 'self' 'nonce-rAnd0m'"

  # Resolve report-to against a Reporting-Endpoints header
  python -m csp_parser -e 'main="https://example.com/reports"' "default-src 'self'; report-to main"

  # Several policies, JSON log lines
  python -m csp_parser --json "default-src 'self'" "img-src data:"
        """
    )
    parser.add_argument('policies', nargs='+', help='Content-Security-Policy header value(s)')
    parser.add_argument('-u', '--current-url', default=None,
                        help="URL of the document being evaluated. May be empty, "
                             "but this disables validation of 'self' sources.")
    parser.add_argument('-e', '--reporting-endpoints', default=None,
                        help='Value of the Reporting-Endpoints header, used to validate '
                             'the report-to directive.')
    parser.add_argument('-j', '--json', action='store_true', default=None,
                        help='Emit log lines as JSON.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose (debug) logging.')
    return parser


def log_issues(error: PolicyError | None) -> None:
    """Log every issue at the level matching its severity."""
    if error is None:
        return
    for issue in error:
        log = getattr(logger, _LOG_METHODS[issue.severity])
        log(
            "policy_issue",
            code=issue.code,
            message=issue.message,
            directive=issue.directive or None,
            value=issue.value or None,
        )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(
        log_level="debug" if args.verbose else settings.log_level,
        json_format=settings.log_json if args.json is None else args.json,
    )
    logger.debug("config_loaded", grammar_file=settings.grammar_file, log_level=settings.log_level)

    current_url = settings.current_url if args.current_url is None else args.current_url
    reporting_endpoints = (
        settings.reporting_endpoints if args.reporting_endpoints is None else args.reporting_endpoints
    )

    try:
        load_grammar(settings.grammar_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("grammar_load_failed", path=settings.grammar_file, error=str(e))
        return 1

    policies, error = parse(
        args.policies,
        current_url=current_url,
        reporting_endpoints=reporting_endpoints,
    )
    log_issues(error)

    print(json.dumps([p.to_json_dict() for p in policies], indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
