"""Token classifiers for CSP directive values.

Each ``is_*`` predicate recognizes the lexical shape of one value token against
one sub-grammar. They are pure: no state, no I/O (the grammar sets are loaded
once and cached by :mod:`csp_parser.grammar.rules`).
"""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

from csp_parser.grammar.rules import (
    BASE64_RE,
    HASH_SOURCE_RE,
    HOST_SOURCE_RE,
    IPV4_RE,
    IPV4_SHAPE_RE,
    MIN_HASH_LENGTH,
    MIN_NONCE_LENGTH,
    NONCE_SOURCE_RE,
    PRINTABLE_ASCII_RE,
    SCHEME_SOURCE_RE,
    TOKEN_RE,
    get_grammar,
)
from csp_parser.models.policy import (
    AncestorExpr,
    HashSource,
    HostSource,
    KeywordSource,
    NonceSource,
    NoneSource,
    SchemeSource,
    SourceExpr,
)

NONE_SOURCE = "'none'"

# Schemes whose URLs must carry a host (URL Standard "special" schemes)
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

# Bare IPv4 literals are not host-sources, except loopback
_LOOPBACK = "127.0.0.1"


def is_scheme_source(s: str) -> bool:
    """Match a bare scheme such as `https:` or `x-man-page:` (RFC 3986 §3.1)."""
    return SCHEME_SOURCE_RE.fullmatch(s) is not None


def is_host_source(s: str) -> bool:
    """Match a host-source (CSP2 §4.2.2).

    Dotted-quad strings are rejected so that bare IPv4 literals never count as
    hosts; `127.0.0.1` is the one exception.
    """
    if s == _LOOPBACK:
        return True
    return HOST_SOURCE_RE.fullmatch(s) is not None and IPV4_SHAPE_RE.fullmatch(s) is None


def is_valid_ipv4(s: str) -> bool:
    """Check dotted-quad shape with octets in 0-255. Says nothing about CSP validity."""
    return IPV4_RE.fullmatch(s) is not None


def is_keyword_source(s: str) -> bool:
    return s.lower() in get_grammar().keyword_sources


def is_nonce_source(s: str) -> bool:
    return NONCE_SOURCE_RE.fullmatch(s) is not None and len(s) >= MIN_NONCE_LENGTH


def is_hash_source(s: str) -> bool:
    return HASH_SOURCE_RE.fullmatch(s) is not None and len(s) >= MIN_HASH_LENGTH


def is_media_type(s: str) -> bool:
    """Match `type/subtype` against the IANA top-level types. No registry lookup."""
    return get_grammar().media_type_re.fullmatch(s) is not None


def is_sandbox_token(s: str) -> bool:
    return s.lower() in get_grammar().sandbox_tokens


def is_webrtc_value(s: str) -> bool:
    return s.lower() in get_grammar().webrtc_values


def is_valid_token(s: str) -> bool:
    """Match an RFC 9110 token, as used for reporting endpoint names."""
    return TOKEN_RE.fullmatch(s) is not None


def is_base64(s: str) -> bool:
    """Character-set check only; True means *probably* base64, False means definitely not."""
    return BASE64_RE.fullmatch(s) is not None


def is_ascii(s: str) -> bool:
    """True when every character is printable ASCII (0x20-0x7E)."""
    return PRINTABLE_ASCII_RE.fullmatch(s) is not None


def split_url(s: str) -> SplitResult | None:
    """Split a URL, returning None when it cannot be parsed at all.

    Beyond what urlsplit checks, a port must be numeric and in range, and
    special schemes (http, https, ws, wss, ftp) must carry a host. As browsers
    do, a special scheme followed by fewer than two slashes
    (`https:example.com/r`) still introduces the host.
    """
    try:
        parts = urlsplit(s)
        scheme = parts.scheme.lower()
        if scheme in _SPECIAL_SCHEMES and not parts.netloc:
            rest = s[len(parts.scheme) + 1:].lstrip("/")
            parts = urlsplit(f"{parts.scheme}://{rest}")
        _ = parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if scheme in _SPECIAL_SCHEMES and not parts.hostname:
        return None
    return parts


def has_fragment(s: str) -> bool:
    # urlsplit drops an empty fragment, but "https://a/#" still has one
    return "#" in s


def is_valid_reporting_url(s: str) -> bool:
    """An absolute URL with a scheme and no fragment."""
    parts = split_url(s)
    if parts is None:
        return False
    return bool(parts.scheme) and not has_fragment(s)


def classify_source_expression(token: str) -> SourceExpr | None:
    """Classify a source-list token; the first matching sub-grammar wins.

    Order: 'none', scheme, host, keyword, nonce, hash.
    """
    if token == NONE_SOURCE:
        return NoneSource()
    if is_scheme_source(token):
        return SchemeSource(value=token)
    if is_host_source(token):
        return HostSource(value=token)
    if is_keyword_source(token):
        return KeywordSource(value=token)
    if is_nonce_source(token):
        return NonceSource(value=token)
    if is_hash_source(token):
        return HashSource(value=token)
    return None


def classify_ancestor_expression(token: str) -> AncestorExpr | None:
    """Classify a `frame-ancestors` token: 'none', scheme or host only."""
    if token == NONE_SOURCE:
        return NoneSource()
    if is_scheme_source(token):
        return SchemeSource(value=token)
    if is_host_source(token):
        return HostSource(value=token)
    return None
