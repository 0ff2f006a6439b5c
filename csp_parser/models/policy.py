"""Pydantic models for a parsed Content Security Policy."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ── Source expressions ───────────────────────────────────────────────────


class NoneSource(_Frozen):
    """The `'none'` marker."""

    kind: Literal["none"] = "none"


class SchemeSource(_Frozen):
    """scheme-source, e.g. `https:`."""

    kind: Literal["scheme"] = "scheme"
    value: str


class HostSource(_Frozen):
    """host-source, e.g. `*.example.com` or `https://cdn.example.com:443/js`."""

    kind: Literal["host"] = "host"
    value: str


class KeywordSource(_Frozen):
    kind: Literal["keyword"] = "keyword"
    value: str


class NonceSource(_Frozen):
    kind: Literal["nonce"] = "nonce"
    value: str


class HashSource(_Frozen):
    kind: Literal["hash"] = "hash"
    value: str


SourceExpr = Annotated[
    Union[NoneSource, SchemeSource, HostSource, KeywordSource, NonceSource, HashSource],
    Field(discriminator="kind"),
]

# ancestor-source = scheme-source / host-source, or the lone 'none'
AncestorExpr = Annotated[
    Union[NoneSource, SchemeSource, HostSource],
    Field(discriminator="kind"),
]


# ── Directive values ─────────────────────────────────────────────────────


class SourceListItem(_Frozen):
    """One occurrence of a source-list directive."""

    source_exprs: tuple[SourceExpr, ...] = Field(default=(), alias="sourceList")


class AncestorSourceListItem(_Frozen):
    """One occurrence of `frame-ancestors`."""

    ancestor_exprs: tuple[AncestorExpr, ...] = Field(default=(), alias="ancestorList")


class MediaTypeListItem(_Frozen):
    """One occurrence of `plugin-types`."""

    media_types: tuple[str, ...] = Field(default=(), alias="mediaTypes")


class SandboxToken(_Frozen):
    """One occurrence of `sandbox`."""

    allow: tuple[str, ...] = ()


class URLRef(_Frozen):
    """One occurrence of `report-uri`."""

    urls: tuple[str, ...] = ()


class ReportingRef(_Frozen):
    """One occurrence of `report-to`, resolved against Reporting-Endpoints.

    Held as ``(endpoint, url)`` pairs so the model stays hashable; accepts and
    dumps a plain mapping.
    """

    tokens: tuple[tuple[str, str], ...] = ()

    @field_validator("tokens", mode="before")
    @classmethod
    def pairs_from_mapping(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return tuple(v.items())
        return v

    @field_serializer("tokens")
    def tokens_as_mapping(self, tokens: tuple[tuple[str, str], ...]) -> dict[str, str]:
        return dict(tokens)

    def endpoints(self) -> dict[str, str]:
        """Return a fresh ``{endpoint: url}`` dict."""
        return dict(self.tokens)


class WebRTCToken(_Frozen):
    value: str


# ── Policy ───────────────────────────────────────────────────────────────


def _occurrences(directive: str) -> Any:
    return Field(default=(), alias=directive)


class Policy(_Frozen):
    """Parse result for one Content-Security-Policy string.

    Repeated directives are kept as separate occurrences, in order.
    """

    base_uri: tuple[SourceListItem, ...] = _occurrences("base-uri")
    child_src: tuple[SourceListItem, ...] = _occurrences("child-src")
    connect_src: tuple[SourceListItem, ...] = _occurrences("connect-src")
    default_src: tuple[SourceListItem, ...] = _occurrences("default-src")
    font_src: tuple[SourceListItem, ...] = _occurrences("font-src")
    form_action: tuple[SourceListItem, ...] = _occurrences("form-action")
    frame_src: tuple[SourceListItem, ...] = _occurrences("frame-src")
    img_src: tuple[SourceListItem, ...] = _occurrences("img-src")
    manifest_src: tuple[SourceListItem, ...] = _occurrences("manifest-src")
    media_src: tuple[SourceListItem, ...] = _occurrences("media-src")
    object_src: tuple[SourceListItem, ...] = _occurrences("object-src")
    script_src: tuple[SourceListItem, ...] = _occurrences("script-src")
    script_src_attr: tuple[SourceListItem, ...] = _occurrences("script-src-attr")
    script_src_elem: tuple[SourceListItem, ...] = _occurrences("script-src-elem")
    style_src: tuple[SourceListItem, ...] = _occurrences("style-src")
    style_src_attr: tuple[SourceListItem, ...] = _occurrences("style-src-attr")
    style_src_elem: tuple[SourceListItem, ...] = _occurrences("style-src-elem")
    worker_src: tuple[SourceListItem, ...] = _occurrences("worker-src")
    frame_ancestors: tuple[AncestorSourceListItem, ...] = _occurrences("frame-ancestors")
    plugin_types: tuple[MediaTypeListItem, ...] = _occurrences("plugin-types")
    sandbox: tuple[SandboxToken, ...] = _occurrences("sandbox")
    report_uri: tuple[URLRef, ...] = _occurrences("report-uri")
    report_to: tuple[ReportingRef, ...] = _occurrences("report-to")
    webrtc: WebRTCToken | None = None
    block_all_mixed_content: bool = Field(default=False, alias="block-all-mixed-content")
    upgrade_insecure_requests: bool = Field(default=False, alias="upgrade-insecure-requests")

    def to_json_dict(self) -> dict:
        """Dump using directive names as keys, omitting unset directives."""
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if value not in ([], None, False)}
