"""Output formatters for xmlrules results."""

from xmlrules.formatters.json import format_as_json

__all__ = ["format_as_json"]
