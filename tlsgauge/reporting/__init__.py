"""Reporting helpers."""

from .jsonout import to_json
from .markdown import to_markdown
from .sarif import to_sarif

__all__ = ["to_json", "to_markdown", "to_sarif"]
