"""Grammar definitions for CSP directive values.

Compiled patterns for the lexical sub-grammars, and the enumerated keyword
sets loaded from ``grammar.yaml`` (versioned alongside the CSP revision they
track).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import structlog
import yaml

logger = structlog.get_logger()

GRAMMAR_PATH = Path(__file__).parent / "grammar.yaml"

# scheme-part   = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
# scheme-source = scheme-part ":"
SCHEME_SOURCE_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9+.-]*:")

# host-source = [ scheme-part "://" ] host-part [ ":" port-part ] [ path-part ]
# host-part   = "*" / [ "*." ] 1*host-char *( "." 1*host-char )
# host-char   = ALPHA / DIGIT / "-"
# port-part   = 1*DIGIT / "*"
#
# Each host-part step consumes exactly one "*", "." + host-char, or host-char,
# so the match never backtracks over label boundaries.
HOST_SOURCE_RE = re.compile(
    r"(?:[a-zA-Z][a-zA-Z0-9+.-]*://)?"
    r"(?:\*|\.?[a-zA-Z0-9-])+"
    r"(?::(?:\*|[0-9]+))?"
    r"(?:/[^/]+)*"
)

# Bare dotted-quad shape, octet ranges not checked
IPV4_SHAPE_RE = re.compile(r"(?:[0-9]{1,3}\.){3}[0-9]{1,3}")

_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[0-1]?[0-9]{1,2})"
IPV4_RE = re.compile(rf"{_OCTET}\.{_OCTET}\.{_OCTET}\.{_OCTET}")

# nonce-source = "'nonce-" base64-value "'"
NONCE_SOURCE_RE = re.compile(r"'nonce-[a-zA-Z0-9+/]*={0,2}'", re.IGNORECASE | re.ASCII)

# hash-source = "'" ( "sha256" / "sha384" / "sha512" ) "-" base64-value "'"
HASH_SOURCE_RE = re.compile(r"'sha(?:256|384|512)-[a-zA-Z0-9+/]*={0,2}'", re.IGNORECASE | re.ASCII)

BASE64_RE = re.compile(r"[a-zA-Z0-9+/]*={0,2}")
PRINTABLE_ASCII_RE = re.compile(r"[\x20-\x7E]*")

# RFC 9110 §5.6.2 token
TOKEN_RE = re.compile(r"[0-9a-zA-Z!#$%&'*+.^_`|~-]+")

MEDIA_SUBTYPE = r"[a-zA-Z0-9_./+-]+"

# Nonce and hash sources need at least this many characters, quotes included
MIN_NONCE_LENGTH = 10
MIN_HASH_LENGTH = 11


@dataclass(frozen=True, slots=True)
class Grammar:
    """Enumerated grammar sets for one CSP revision.

    Keyword sets are stored lowercased; classifiers compare case-insensitively.
    """

    csp_level: int
    revision: str
    keyword_sources: frozenset[str]
    sandbox_tokens: frozenset[str]
    media_top_level_types: tuple[str, ...]
    webrtc_values: frozenset[str]
    media_type_re: re.Pattern[str]


_grammar: Grammar | None = None


def _string_list(raw: dict, key: str, grammar_path: Path) -> list[str]:
    values = raw.get(key)
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValueError(f"Grammar file {grammar_path}: `{key}` must be a list")
    return [str(v).lower() for v in values]


def load_grammar(path: Path | str | None = None) -> Grammar:
    """Load grammar sets from YAML and make them the active grammar.

    Raises FileNotFoundError when the file is missing, yaml.YAMLError on bad
    syntax, and ValueError when the document does not have the expected shape.
    """
    global _grammar
    grammar_path = Path(path) if path else GRAMMAR_PATH
    if not grammar_path.exists():
        logger.error("grammar_file_not_found", path=str(grammar_path))
        raise FileNotFoundError(f"Grammar file not found: {grammar_path}")
    with open(grammar_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        logger.error("grammar_file_invalid", path=str(grammar_path), type=type(raw).__name__)
        raise ValueError(f"Grammar file {grammar_path} must contain a mapping, not {type(raw).__name__}")

    try:
        csp_level = int(raw.get("csp_level", 3))
    except (TypeError, ValueError):
        raise ValueError(f"Grammar file {grammar_path}: `csp_level` must be an integer") from None

    top_level = tuple(_string_list(raw, "media_top_level_types", grammar_path))
    media_type_re = re.compile(
        rf"(?:{'|'.join(re.escape(t) for t in top_level)})/{MEDIA_SUBTYPE}",
        re.IGNORECASE | re.ASCII,
    )

    _grammar = Grammar(
        csp_level=csp_level,
        revision=str(raw.get("revision", "")),
        keyword_sources=frozenset(_string_list(raw, "keyword_sources", grammar_path)),
        sandbox_tokens=frozenset(_string_list(raw, "sandbox_tokens", grammar_path)),
        media_top_level_types=top_level,
        webrtc_values=frozenset(_string_list(raw, "webrtc_values", grammar_path)),
        media_type_re=media_type_re,
    )
    logger.debug(
        "grammar_loaded",
        path=str(grammar_path),
        csp_level=_grammar.csp_level,
        revision=_grammar.revision,
    )
    return _grammar


def get_grammar() -> Grammar:
    """Get the active grammar, loading the packaged one on first use."""
    if _grammar is None:
        return load_grammar()
    return _grammar


def reset_grammar_cache() -> None:
    """Reset the grammar cache (for testing)."""
    global _grammar
    _grammar = None
