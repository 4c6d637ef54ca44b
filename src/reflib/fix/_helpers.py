"""Compiled patterns and constants shared by the fix functions."""

import re

from reflib.models import MONTH_ABBREVIATIONS, MONTH_NAMES

__all__ = [
    "AUTHOR_SEPARATOR_RE",
    "PAGE_RANGE_RE",
    "MONTH_NAMES",
    "MONTH_ABBREVIATIONS",
    "TWO_DIGIT_YEAR_PIVOT",
]

AUTHOR_SEPARATOR_RE = re.compile(r"\s*;\s*")
PAGE_RANGE_RE = re.compile(r"^\s*([0-9]+)\s*--?\s*([0-9]+)\s*$")

# Two-digit years above this belong to the 1900s, the rest to the 2000s
TWO_DIGIT_YEAR_PIVOT = 68
