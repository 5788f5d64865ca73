"""Utility functions."""

from projectdash.utils.text import format_date, format_datetime, parse_date, split_keywords

__all__ = ["format_date", "format_datetime", "parse_date", "split_keywords"]
