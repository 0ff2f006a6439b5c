"""Parser front-end settings."""

from csp_parser.config.loader import ParserSettings, get_settings, load_settings

__all__ = ["ParserSettings", "get_settings", "load_settings"]
