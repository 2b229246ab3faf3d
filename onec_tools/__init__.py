"""Tool descriptions, handlers and Markdown formatters for a 1C:Enterprise HTTP service."""

__version__ = "0.1.0"