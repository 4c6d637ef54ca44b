"""Strict matching of date strings against token patterns.

Patterns use ``YYYY``, ``YY``, ``MMMM``, ``MMM``, ``MM``, ``M``, ``DD``,
``D`` and ``Do`` tokens; every other character must appear literally. A
pattern matches only if it consumes the whole string and the components
form a real calendar date.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from reflib.errors import InvalidArguments

from ._helpers import MONTH_ABBREVIATIONS, MONTH_NAMES, TWO_DIGIT_YEAR_PIVOT

__all__ = ["CompiledPattern", "DateMatch", "compile_pattern", "match_date"]

_TOKEN_RE = re.compile(r"YYYY|YY|MMMM|MMM|MM|Do|DD|M|D")
_ORDINAL_SUFFIX_RE = re.compile(r"(st|nd|rd|th)$", re.IGNORECASE)


def _two_digit_year(value: str) -> int:
    year = int(value)
    return year + (1900 if year > TWO_DIGIT_YEAR_PIVOT else 2000)


def _month_from_name(value: str) -> int:
    return [abbr.casefold() for abbr in MONTH_ABBREVIATIONS].index(value[:3].casefold()) + 1


def _ordinal_day(value: str) -> int:
    return int(_ORDINAL_SUFFIX_RE.sub("", value))


# token -> (component, regex, converter)
_TOKENS: dict[str, tuple[str, str, Callable[[str], int]]] = {
    "YYYY": ("year", r"\d{4}", int),
    "YY": ("year", r"\d{2}", _two_digit_year),
    "MMMM": ("month", "|".join(MONTH_NAMES), _month_from_name),
    "MMM": ("month", "|".join(MONTH_ABBREVIATIONS), _month_from_name),
    "MM": ("month", r"\d{2}", int),
    "M": ("month", r"\d{1,2}", int),
    "DD": ("day", r"\d{2}", int),
    "D": ("day", r"\d{1,2}", int),
    "Do": ("day", r"\d{1,2}(?:st|nd|rd|th)", _ordinal_day),
}


@dataclass(frozen=True)
class CompiledPattern:
    """A token pattern turned into an anchored regex.

    Attributes
    ----------
    pattern : str
        Source pattern, e.g. ``"Do MMMM YYYY"``.
    regex : re.Pattern[str]
        Case-insensitive regex with one named group per component.
    converters : dict[str, Callable[[str], int]]
        Component name to converter from matched text to integer.
    """

    pattern: str
    regex: re.Pattern[str]
    converters: dict[str, Callable[[str], int]]


@dataclass(frozen=True)
class DateMatch:
    """Winning pattern and the date it produced.

    Attributes
    ----------
    pattern : str
        Pattern that matched.
    value : date
        Parsed date; missing components come from the reference instant.
    """

    pattern: str
    value: date


@lru_cache(maxsize=128)
def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a token pattern.

    Parameters
    ----------
    pattern : str
        Token pattern.

    Returns
    -------
    CompiledPattern
        Compiled pattern, cached per pattern string.

    Raises
    ------
    InvalidArguments
        If a component appears more than once.
    """
    parts: list[str] = []
    converters: dict[str, Callable[[str], int]] = {}
    pos = 0

    for match in _TOKEN_RE.finditer(pattern):
        component, regex, converter = _TOKENS[match.group(0)]
        if component in converters:
            raise InvalidArguments(f"Date pattern {pattern!r} repeats the {component} component")
        parts.append(re.escape(pattern[pos : match.start()]))
        parts.append(f"(?P<{component}>{regex})")
        converters[component] = converter
        pos = match.end()

    parts.append(re.escape(pattern[pos:]))
    return CompiledPattern(pattern, re.compile("".join(parts), re.IGNORECASE), converters)


def match_date(text: str, patterns: Iterable[str], reference: date) -> DateMatch | None:
    """Find the first pattern that strictly parses ``text``.

    Missing components are defaulted the way a lenient parser would: a
    missing year comes from ``reference``; a missing month is January when a
    year was read, else the reference month; a missing day is the 1st when a
    year or month was read, else the reference day.

    Parameters
    ----------
    text : str
        Date string to parse.
    patterns : Iterable[str]
        Token patterns in priority order.
    reference : date
        Instant used for components the pattern does not supply.

    Returns
    -------
    DateMatch | None
        First match yielding a valid calendar date, or None.
    """
    for pattern in patterns:
        compiled = compile_pattern(pattern)
        found = compiled.regex.fullmatch(text)
        if not found:
            continue

        values = {name: convert(found.group(name)) for name, convert in compiled.converters.items()}
        year = values.get("year", reference.year)
        month = values.get("month", 1 if "year" in values else reference.month)
        day = values.get("day", 1 if values else reference.day)

        try:
            value = date(year, month, day)
        except ValueError:
            continue

        return DateMatch(pattern=pattern, value=value)

    return None
