"""Typed document model for parsed policies."""

from csp_parser.models.policy import (
    AncestorExpr,
    AncestorSourceListItem,
    HashSource,
    HostSource,
    KeywordSource,
    MediaTypeListItem,
    NonceSource,
    NoneSource,
    Policy,
    ReportingRef,
    SandboxToken,
    SchemeSource,
    SourceExpr,
    SourceListItem,
    URLRef,
    WebRTCToken,
)

__all__ = [
    "AncestorExpr",
    "AncestorSourceListItem",
    "HashSource",
    "HostSource",
    "KeywordSource",
    "MediaTypeListItem",
    "NonceSource",
    "NoneSource",
    "Policy",
    "ReportingRef",
    "SandboxToken",
    "SchemeSource",
    "SourceExpr",
    "SourceListItem",
    "URLRef",
    "WebRTCToken",
]
