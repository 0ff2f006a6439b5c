"""Env var config loading with pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from csp_parser.grammar.rules import GRAMMAR_PATH


class ParserSettings(BaseSettings):
    """Parser front-end configuration, overridable with CSP_PARSER_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CSP_PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # URL of the document the policy was served with; empty disables 'self' checks
    current_url: str = ""
    # Raw Reporting-Endpoints header; empty disables report-to resolution
    reporting_endpoints: str = ""

    log_level: str = "info"
    log_json: bool = False

    grammar_file: str = str(GRAMMAR_PATH)


_settings: ParserSettings | None = None


def get_settings() -> ParserSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> ParserSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = ParserSettings()
    return _settings
