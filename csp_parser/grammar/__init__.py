"""CSP value grammars: token classifiers and the Reporting-Endpoints parser."""

from csp_parser.grammar.classifiers import (
    classify_ancestor_expression,
    classify_source_expression,
    is_ascii,
    is_base64,
    is_hash_source,
    is_host_source,
    is_keyword_source,
    is_media_type,
    is_nonce_source,
    is_sandbox_token,
    is_scheme_source,
    is_valid_ipv4,
    is_valid_reporting_url,
    is_valid_token,
    is_webrtc_value,
)
from csp_parser.grammar.reporting_endpoints import parse_reporting_endpoints

__all__ = [
    "classify_ancestor_expression",
    "classify_source_expression",
    "is_ascii",
    "is_base64",
    "is_hash_source",
    "is_host_source",
    "is_keyword_source",
    "is_media_type",
    "is_nonce_source",
    "is_sandbox_token",
    "is_scheme_source",
    "is_valid_ipv4",
    "is_valid_reporting_url",
    "is_valid_token",
    "is_webrtc_value",
    "parse_reporting_endpoints",
]
