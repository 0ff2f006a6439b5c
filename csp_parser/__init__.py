"""
csp-parser - Content Security Policy parser and grammar validator
"""

__version__ = "0.1.0"

from csp_parser.errors import IssueCollector, PolicyError, PolicyIssue, Severity
from csp_parser.grammar.reporting_endpoints import parse_reporting_endpoints
from csp_parser.models.policy import Policy
from csp_parser.parser import parse, parse_policy

__all__ = [
    'IssueCollector',
    'Policy',
    'PolicyError',
    'PolicyIssue',
    'Severity',
    'parse',
    'parse_policy',
    'parse_reporting_endpoints',
]
