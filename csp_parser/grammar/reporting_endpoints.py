"""Parser for the `Reporting-Endpoints` response header.

    Reporting-Endpoints: endpoint-1="https://example.com/reports", main="https://r.example/csp"

The header is a comma-separated list of `token="url"` pairs. Each malformed
pair records one issue and is skipped; the remaining pairs still parse.
"""

from __future__ import annotations

from csp_parser.errors import IssueCollector, PolicyError
from csp_parser.grammar.classifiers import is_valid_reporting_url, is_valid_token


def parse_reporting_endpoints(header: str) -> tuple[dict[str, str], PolicyError | None]:
    """Parse a Reporting-Endpoints header into an ``{endpoint: url}`` mapping.

    An empty header is not an issue here and yields an empty mapping. A key
    that appears twice keeps the URL of its last occurrence.
    """
    endpoints: dict[str, str] = {}
    issues = IssueCollector()

    for raw_pair in header.split(","):
        pair = raw_pair.strip()
        if not pair:
            continue

        if "=" not in pair:
            issues.add("CSP-0510", value=pair)
            continue

        # A space here usually means two pairs joined without a comma
        if " " in pair:
            issues.add("CSP-0511", value=pair)
            continue

        parts = pair.split("=")
        if len(parts) != 2:
            issues.add("CSP-0512", value=pair)
            continue

        key, url = parts
        if not key:
            issues.add("CSP-0513", value=pair)
            continue

        if not is_valid_token(key):
            issues.add("CSP-0514", value=pair)
            continue

        if not url:
            issues.add("CSP-0515", value=pair)
            continue

        if len(url) < 2 or not (url.startswith('"') and url.endswith('"')):
            issues.add("CSP-0516", value=pair)
            continue

        url = url[1:-1]
        if not is_valid_reporting_url(url):
            issues.add("CSP-0517", value=pair)
            continue

        endpoints[key] = url

    return endpoints, issues.error_or_none()
