"""Content-Security-Policy directive parser.

Splits a policy string into directives, routes each directive's values to the
handler for its family, and collects every issue along the way. A bad token or
an unknown directive never stops the parse: the caller gets the best-effort
:class:`~csp_parser.models.policy.Policy` together with the full issue list.
"""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from csp_parser.errors import IssueCollector, PolicyError
from csp_parser.grammar.classifiers import (
    classify_ancestor_expression,
    classify_source_expression,
    has_fragment,
    is_media_type,
    is_sandbox_token,
    is_valid_reporting_url,
    is_webrtc_value,
    split_url,
)
from csp_parser.grammar.reporting_endpoints import parse_reporting_endpoints
from csp_parser.models.policy import (
    AncestorSourceListItem,
    MediaTypeListItem,
    Policy,
    ReportingRef,
    SandboxToken,
    SourceListItem,
    URLRef,
    WebRTCToken,
)

_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)

# directive name -> Policy field
SOURCE_LIST_DIRECTIVES: dict[str, str] = {
    "base-uri": "base_uri",
    "child-src": "child_src",
    "connect-src": "connect_src",
    "default-src": "default_src",
    "font-src": "font_src",
    "form-action": "form_action",
    "frame-src": "frame_src",
    "img-src": "img_src",
    "manifest-src": "manifest_src",
    "media-src": "media_src",
    "object-src": "object_src",
    "script-src": "script_src",
    "script-src-attr": "script_src_attr",
    "script-src-elem": "script_src_elem",
    "style-src": "style_src",
    "style-src-attr": "style_src_attr",
    "style-src-elem": "style_src_elem",
    "worker-src": "worker_src",
}

# Recognized directives that additionally get a deprecation/obsoletion notice
DIRECTIVE_ADVISORIES: dict[str, str] = {
    "block-all-mixed-content": "CSP-0801",
    "child-src": "CSP-0802",
    "navigate-to": "CSP-0803",
    "prefetch-src": "CSP-0803",
    "referrer": "CSP-0803",
    "plugin-types": "CSP-0804",
    "report-uri": "CSP-0805",
}

# Experimental CSP3 directives that were dropped; values are not parsed
_REMOVED_DIRECTIVES = frozenset({"navigate-to", "prefetch-src", "referrer"})


# ── Directive handlers ───────────────────────────────────────────────────


def _handle_source_list(key: str, values: list[str], issues: IssueCollector) -> SourceListItem:
    exprs = []
    for value in values:
        expr = classify_source_expression(value)
        if expr is None:
            issues.add("CSP-0100", key, value)
            continue
        exprs.append(expr)
    return SourceListItem(source_exprs=tuple(exprs))


def _handle_ancestor_list(key: str, values: list[str], issues: IssueCollector) -> AncestorSourceListItem:
    exprs = []
    for value in values:
        expr = classify_ancestor_expression(value)
        if expr is None:
            issues.add("CSP-0200", key, value)
            continue
        exprs.append(expr)
    return AncestorSourceListItem(ancestor_exprs=tuple(exprs))


def _handle_plugin_types(key: str, values: list[str], issues: IssueCollector) -> MediaTypeListItem:
    media_types = []
    for value in values:
        if is_media_type(value):
            media_types.append(value)
        else:
            issues.add("CSP-0300", key, value)
    return MediaTypeListItem(media_types=tuple(media_types))


def _handle_sandbox(key: str, values: list[str], issues: IssueCollector) -> SandboxToken:
    allow = []
    for value in values:
        if is_sandbox_token(value):
            allow.append(value)
        else:
            issues.add("CSP-0700", key, value)
    return SandboxToken(allow=tuple(allow))


def _handle_reporting_urls(key: str, values: list[str], issues: IssueCollector) -> URLRef:
    """Validate `report-uri` values.

    An invalid URL can produce several issues at once: missing scheme and
    fragment are checked independently, and the generic invalid-value issue
    always closes the list.
    """
    urls = []
    for value in values:
        if is_valid_reporting_url(value):
            urls.append(value)
            continue

        parts = split_url(value)
        if parts is None:
            issues.add("CSP-0401", key, value)
        else:
            if not parts.scheme:
                issues.add("CSP-0402", key, value)
            if has_fragment(value):
                issues.add("CSP-0403", key, value)
        issues.add("CSP-0400", key, value)
    return URLRef(urls=tuple(urls))


def _handle_report_to(
    key: str,
    values: list[str],
    reporting_endpoints: str,
    issues: IssueCollector,
) -> ReportingRef:
    if len(values) != 1:
        issues.add("CSP-0501", key)
    if not values:
        return ReportingRef()

    endpoint = values[0]
    endpoints, endpoint_errors = parse_reporting_endpoints(reporting_endpoints)
    issues.extend(endpoint_errors)

    url = endpoints.get(endpoint)
    if url is None:
        issues.add("CSP-0502", key, endpoint)
        return ReportingRef()
    return ReportingRef(tokens=((endpoint, url),))


def _handle_webrtc(key: str, values: list[str], issues: IssueCollector) -> WebRTCToken | None:
    if len(values) != 1:
        issues.add("CSP-0601", key)
    if not values:
        return None

    value = values[0]
    if not is_webrtc_value(value):
        issues.add("CSP-0600", key, value)
        return None
    return WebRTCToken(value=value)


# ── Dispatcher ───────────────────────────────────────────────────────────


def _split_directive(raw: str) -> tuple[str, list[str]] | None:
    """Split one directive into its name and value tokens; None when blank."""
    directive = raw.strip()
    if not directive:
        return None
    key, *values = _WHITESPACE_RE.sub(" ", directive).split(" ")
    return key, values


def parse_policy(policy: str, reporting_endpoints: str = "") -> tuple[Policy, PolicyError | None]:
    """Parse one Content-Security-Policy header value.

    ``reporting_endpoints`` is the raw Reporting-Endpoints header, used to
    resolve `report-to`; when empty every `report-to` endpoint is undefined.

    Returns the parsed policy and the aggregated issues (None when there were
    none). Directive names are matched case-insensitively; values keep their
    case.
    """
    if not isinstance(policy, str):
        raise TypeError(f"policy must be a str, not {type(policy).__name__}")

    issues = IssueCollector()
    occurrences: dict[str, list[Any]] = defaultdict(list)
    fields: dict[str, Any] = {}

    for raw_directive in policy.split(";"):
        split = _split_directive(raw_directive)
        if split is None:
            continue
        key, values = split
        name = key.lower()

        if name in SOURCE_LIST_DIRECTIVES:
            occurrences[SOURCE_LIST_DIRECTIVES[name]].append(_handle_source_list(key, values, issues))
        elif name == "frame-ancestors":
            occurrences["frame_ancestors"].append(_handle_ancestor_list(key, values, issues))
        elif name == "plugin-types":
            occurrences["plugin_types"].append(_handle_plugin_types(key, values, issues))
        elif name == "sandbox":
            occurrences["sandbox"].append(_handle_sandbox(key, values, issues))
        elif name == "report-uri":
            occurrences["report_uri"].append(_handle_reporting_urls(key, values, issues))
        elif name == "report-to":
            occurrences["report_to"].append(_handle_report_to(key, values, reporting_endpoints, issues))
        elif name == "webrtc":
            fields["webrtc"] = _handle_webrtc(key, values, issues)
        elif name == "block-all-mixed-content":
            fields["block_all_mixed_content"] = True
        elif name == "upgrade-insecure-requests":
            fields["upgrade_insecure_requests"] = True
        elif name not in _REMOVED_DIRECTIVES:
            issues.add("CSP-0901", key)
            continue

        advisory = DIRECTIVE_ADVISORIES.get(name)
        if advisory:
            issues.add(advisory, key)

    for field_name, items in occurrences.items():
        fields[field_name] = tuple(items)

    return Policy(**fields), issues.error_or_none()


def parse(
    policies: str | Iterable[str],
    *,
    current_url: str = "",
    reporting_endpoints: str = "",
) -> tuple[list[Policy], PolicyError | None]:
    """Parse one or more Content-Security-Policy header values.

    Each policy is parsed independently (no intersection of multiple
    policies). Missing ``current_url`` or ``reporting_endpoints`` is reported
    as an INFO advisory ahead of the per-policy issues.
    """
    if isinstance(policies, str):
        policies = [policies]

    issues = IssueCollector()
    if not current_url:
        issues.add("CSP-0001")
    if not reporting_endpoints:
        issues.add("CSP-0002")

    parsed: list[Policy] = []
    for policy in policies:
        result, err = parse_policy(policy, reporting_endpoints)
        parsed.append(result)
        issues.extend(err)

    return parsed, issues.error_or_none()
